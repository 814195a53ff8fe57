"""
Incremental construction of a struct of named schemas.

Extraction discovers definitions in document order, but references to them
can appear before or after the definition itself and can be cyclic. The
builder collects values by CUE path, hands out reference expressions for
any path on request and only ties identifiers to their targets once the
final syntax has been assembled.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..cue_ast.astutil import expr_at_path, label_for_selector, path_ref_syntax, selector_for_label
from ..cue_ast.nodes import EmbedDecl, Expr, Field, File, Ident, PatternLabel, StructLit
from ..errors import StructBuilderError
from ..values.path import Path, Selector

# Name given to the root of the struct when something refers to it.
ROOT_IDENT_NAME = "_schema"


@dataclass
class StructBuilderNode:
    """One node in the tree of values being built."""

    # Value put at this node, not including entries underneath it
    value: Expr | None = None
    # Doc comment for the value
    comment: str | None = None
    # Children, keyed by selector
    entries: dict[Selector, StructBuilderNode] = field(default_factory=dict)
    # Set when a reference to this node has been handed out
    touched: bool = False

    @property
    def is_present(self) -> bool:
        return self.value is not None

    def has_present(self) -> bool:
        """Report whether this node or any node below it holds a value."""
        return self.is_present or any(e.has_present() for e in self.entries.values())


class StructBuilder:
    """Builds a struct from values put at arbitrary paths, with references between them."""

    def __init__(self):
        self.root = StructBuilderNode()
        # Identifiers referring to top-level entries, keyed by the selector they refer to.
        self.ref_idents: dict[Selector, list[Ident]] = {}
        # Identifiers referring to the root itself.
        self.root_ref_idents: list[Ident] = []
        self.ref_paths: list[Path] = []

    def put(self, path: Path, value: Expr, comment: str | None = None) -> bool:
        """Associate value with path. Returns False, leaving the existing value, if path already has one."""
        e = self._entry_for_path(path)
        if e.value is not None:
            return False
        e.value = value
        e.comment = comment
        return True

    def get_ref(self, path: Path) -> Expr:
        """Return an expression referring to path.

        The identifier at the start of the expression is bound to its target
        when syntax is called.
        """
        self._entry_for_path(path).touched = True
        self.ref_paths.append(path)
        if len(path) == 0:
            ref = Ident(name=ROOT_IDENT_NAME)
            self.root_ref_idents.append(ref)
            return ref
        first = path.selectors[0]
        base = label_for_selector(first)
        if not isinstance(base, Ident):
            raise StructBuilderError(f"initial element of path {path} must be expressed as an identifier")
        self.ref_idents.setdefault(first, []).append(base)
        return path_ref_syntax(Path(path.selectors[1:]), base)

    def _entry_for_path(self, path: Path) -> StructBuilderNode:
        n = self.root
        for sel in path:
            n = n.entries.setdefault(sel, StructBuilderNode())
        return n

    def _lookup(self, path: Path) -> StructBuilderNode | None:
        n = self.root
        for sel in path:
            n = n.entries.get(sel)
            if n is None:
                return None
        return n

    def syntax(self) -> File:
        """Return a file holding the whole struct, with all references bound."""
        for path in self.ref_paths:
            n = self._lookup(path)
            if n is None or not n.has_present():
                raise StructBuilderError(f"reference to undefined path {path or '<root>'}")

        decls: list = []
        self._append_decls(self.root, [], decls)
        for d in decls:
            if isinstance(d, Field) and not isinstance(d.label, PatternLabel):
                for ident in self.ref_idents.get(selector_for_label(d.label), []):
                    ident.node = d.value

        if not self.root_ref_idents:
            f = File(decls=decls)
        else:
            root_expr = expr_from_decls(decls)
            root_ref = self.get_ref(Path())
            for ident in self.root_ref_idents:
                ident.node = root_expr
            f = File(decls=[EmbedDecl(expr=root_ref), Field(label=Ident(name=ROOT_IDENT_NAME), value=root_expr)])
        f.doc = self.root.comment
        return f

    def _append_decls(self, n: StructBuilderNode, path: list[Selector], decls: list) -> None:
        if n.value is not None and n.entries:
            # A value that also holds entries: put both inside one struct
            # literal, because the value might be a scalar.
            inner: list = []
            append_field(inner, [], n.value, None)
            for sel in sorted(n.entries, key=Selector.sort_key):
                self._append_decls(n.entries[sel], [sel], inner)
            append_field(decls, path, expr_from_decls(inner), n.comment)
            return
        if n.value is not None:
            append_field(decls, path, n.value, n.comment)
        for sel in sorted(n.entries, key=Selector.sort_key):
            self._append_decls(n.entries[sel], path + [sel], decls)


def expr_from_decls(decls: list) -> Expr:
    if len(decls) == 1 and isinstance(decls[0], EmbedDecl):
        return decls[0].expr
    return StructLit(elts=decls)


def append_field(decls: list, path: list[Selector], value: Expr, comment: str | None) -> None:
    if not path:
        if isinstance(value, StructLit):
            decls.extend(value.elts)
        else:
            decls.append(EmbedDecl(expr=value))
        return
    f = expr_at_path(Path(tuple(path)), value).elts[0]
    if comment:
        f.doc = comment
    decls.append(f)
