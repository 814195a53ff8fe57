"""
CUE AST Serializer.

Converts CUE AST nodes to CUE source text, following the layout produced
by cue fmt:
- Tab indentation
- One declaration per line inside struct literals
- Doc comments on the lines above a field
- Parentheses only where operator precedence requires them
"""

from __future__ import annotations

from pathlib import Path

import jinja2

from ..utils import quote_string
from .nodes import (
    Attribute,
    BadExpr,
    BasicLit,
    BinaryExpr,
    BottomLit,
    CallExpr,
    Ellipsis,
    EmbedDecl,
    Field,
    File,
    Ident,
    ImportDecl,
    IndexExpr,
    ListLit,
    Node,
    Package,
    PatternLabel,
    SelectorExpr,
    StructLit,
    Token,
    UnaryExpr,
)

CURRENT_DIR = Path(__file__).parent.parent

# Binding strength of binary operators; higher binds tighter.
PRECEDENCE = {
    Token.OR: 1,
    Token.AND: 2,
    Token.EQL: 5,
    Token.NEQ: 5,
    Token.LSS: 5,
    Token.LEQ: 5,
    Token.GTR: 5,
    Token.GEQ: 5,
    Token.MAT: 5,
    Token.NMAT: 5,
}


def comment_lines(text: str) -> list[str]:
    """Format text as // comment lines."""
    return [f"// {line}".rstrip() for line in text.splitlines()]


class CueSerializer:
    """Serializes CUE AST nodes to source code."""

    INDENT = "\t"

    def __init__(self):
        self.jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True, keep_trailing_newline=True)
        self.file_template = self.jinja_env.from_string((CURRENT_DIR / "templates/cue/file.cue.jinja2").read_text())

    def serialize(self, file: File, generation_comment: str = "") -> str:
        """Serialize a complete CUE file to source code."""
        package = ""
        attributes: list[str] = []
        imports: list[str] = []
        body: list[str] = []

        for decl in file.decls:
            if isinstance(decl, Package):
                package = decl.name
            elif isinstance(decl, Attribute) and not body:
                attributes.append(decl.text)
            elif isinstance(decl, ImportDecl):
                for spec in decl.specs:
                    imports.append(quote_string(spec.path))
            else:
                body.append(self._decl(decl, 0))

        out = self.file_template.render(
            generation_comment=generation_comment,
            doc_lines=comment_lines(file.doc) if file.doc else [],
            package=package,
            attributes=attributes,
            imports=imports,
            body="\n\n".join(body),
        )
        return out.rstrip("\n") + "\n"

    def serialize_expr(self, expr: Node) -> str:
        """Serialize a single expression."""
        return self._expr(expr, 0)

    def _decl(self, decl: Node, level: int) -> str:
        """Serialize a declaration. Lines after the first carry absolute indentation."""
        if isinstance(decl, Field):
            text = f"{self._label(decl.label, level)}{decl.constraint.value}: {self._expr(decl.value, level)}"
            for attr in decl.attrs:
                text += f" {attr.text}"
            if decl.doc:
                prefix = f"\n{self.INDENT * level}".join(comment_lines(decl.doc))
                text = f"{prefix}\n{self.INDENT * level}{text}"
            return text
        if isinstance(decl, EmbedDecl):
            return self._expr(decl.expr, level)
        if isinstance(decl, Attribute):
            return decl.text
        if isinstance(decl, Ellipsis):
            return self._expr(decl, level)
        if isinstance(decl, Package):
            return f"package {decl.name}"
        if isinstance(decl, ImportDecl):
            return "\n".join(f"import {quote_string(s.path)}" for s in decl.specs)
        raise TypeError(f"unexpected declaration {type(decl).__name__}")

    def _label(self, label: Node, level: int) -> str:
        if isinstance(label, Ident):
            return label.name
        if isinstance(label, BasicLit):
            return label.value
        if isinstance(label, PatternLabel):
            return f"[{self._expr(label.expr, level)}]"
        raise TypeError(f"unexpected label {type(label).__name__}")

    def _expr(self, e: Node, level: int) -> str:
        if isinstance(e, Ident):
            return e.name
        if isinstance(e, BasicLit):
            return e.value
        if isinstance(e, (BottomLit, BadExpr)):
            return "_|_"
        if isinstance(e, UnaryExpr):
            x = self._expr(e.x, level)
            if isinstance(e.x, BinaryExpr):
                x = f"({x})"
            return f"{e.op.value}{x}"
        if isinstance(e, BinaryExpr):
            return f"{self._operand(e.x, e.op, level)} {e.op.value} {self._operand(e.y, e.op, level)}"
        if isinstance(e, CallExpr):
            args = ", ".join(self._expr(a, level) for a in e.args)
            return f"{self._expr(e.fun, level)}({args})"
        if isinstance(e, SelectorExpr):
            return f"{self._expr(e.x, level)}.{self._label(e.sel, level)}"
        if isinstance(e, IndexExpr):
            return f"{self._expr(e.x, level)}[{self._expr(e.index, level)}]"
        if isinstance(e, Ellipsis):
            if e.type is None:
                return "..."
            return f"...{self._expr(e.type, level)}"
        if isinstance(e, ListLit):
            return "[" + ", ".join(self._expr(x, level) for x in e.elts) + "]"
        if isinstance(e, StructLit):
            return self._struct(e, level)
        raise TypeError(f"unexpected expression {type(e).__name__}")

    def _operand(self, x: Node, op: Token, level: int) -> str:
        s = self._expr(x, level)
        if isinstance(x, BinaryExpr) and PRECEDENCE[x.op] < PRECEDENCE[op]:
            return f"({s})"
        return s

    def _struct(self, s: StructLit, level: int) -> str:
        if not s.elts:
            return "{}"
        if len(s.elts) == 1 and isinstance(s.elts[0], Ellipsis) and s.elts[0].type is None:
            return "{...}"
        if s.inline and len(s.elts) == 1 and isinstance(s.elts[0], Field) and not s.elts[0].doc:
            return self._decl(s.elts[0], level)
        lines = ["{"]
        inner = self.INDENT * (level + 1)
        for i, decl in enumerate(s.elts):
            if i > 0 and isinstance(decl, Field) and decl.doc:
                lines.append("")
            lines.append(inner + self._decl(decl, level + 1))
        lines.append(self.INDENT * level + "}")
        return "\n".join(lines)


def format_node(node: Node) -> str:
    """Format a file or expression as CUE source."""
    serializer = CueSerializer()
    if isinstance(node, File):
        return serializer.serialize(node)
    return serializer.serialize_expr(node)
