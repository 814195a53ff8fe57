"""
Read-only view over CUE syntax used by schema generation.

Generation does not evaluate CUE. It inspects the expression that defines
each value: which operator builds it, which operands it has, which fields a
struct literal declares and where identifiers point to. References are
resolved lexically, the same way CUE scopes identifiers, so that the output
of extraction can be fed straight back into generation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..cue_ast.nodes import (
    Attribute,
    BadExpr,
    BasicLit,
    BinaryExpr,
    BottomLit,
    CallExpr,
    Ellipsis,
    EmbedDecl,
    Field,
    FieldConstraint,
    File,
    Ident,
    ImportDecl,
    ImportSpec,
    IndexExpr,
    ListLit,
    LitKind,
    Node,
    Package,
    PatternLabel,
    SelectorExpr,
    StructLit,
    Token,
    UnaryExpr,
    label_name,
    new_bin_expr,
    new_int,
    top,
)
from ..errors import SchemaError
from ..utils import import_qualifier, is_def_or_hidden
from .kind import Kind
from .path import Path, Selector


class Op(str, Enum):
    """Operators that build a value."""

    NOOP = ""
    AND = "&"
    OR = "|"
    SELECTOR = "."
    INDEX = "[]"
    CALL = "()"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_EQUAL = ">="
    REGEX_MATCH = "=~"
    NOT_REGEX_MATCH = "!~"
    NOT = "!"


_TOKEN_OPS = {
    Token.EQL: Op.EQUAL,
    Token.NEQ: Op.NOT_EQUAL,
    Token.LSS: Op.LESS_THAN,
    Token.LEQ: Op.LESS_THAN_EQUAL,
    Token.GTR: Op.GREATER_THAN,
    Token.GEQ: Op.GREATER_THAN_EQUAL,
    Token.MAT: Op.REGEX_MATCH,
    Token.NMAT: Op.NOT_REGEX_MATCH,
    Token.NOT: Op.NOT,
}

# Predeclared identifiers naming a kind.
PREDECLARED_KINDS = {
    "_": Kind.TOP,
    "string": Kind.STRING,
    "bytes": Kind.BYTES,
    "bool": Kind.BOOL,
    "int": Kind.INT,
    "float": Kind.FLOAT,
    "number": Kind.NUMBER,
}

# Predeclared integer types and their inclusive bounds.
INT_RANGES = {
    "int8": (-(2**7), 2**7 - 1),
    "int16": (-(2**15), 2**15 - 1),
    "int32": (-(2**31), 2**31 - 1),
    "int64": (-(2**63), 2**63 - 1),
    "int128": (-(2**127), 2**127 - 1),
    "uint": (0, None),
    "uint8": (0, 2**8 - 1),
    "uint16": (0, 2**16 - 1),
    "uint32": (0, 2**32 - 1),
    "uint64": (0, 2**64 - 1),
    "uint128": (0, 2**128 - 1),
    "rune": (0, 0x10FFFF),
}

# Standard library packages that may be referred to without an import binding.
BUILTIN_PACKAGES = frozenset({"list", "math", "net", "regexp", "strings", "struct", "time"})

# Predeclared functions.
BUILTIN_FUNCS = frozenset({"and", "close", "error", "len", "matchIf", "matchN", "or"})

# Kinds of values produced by builtin calls, keyed by qualified name.
_CALL_KINDS = {
    "strings.MinRunes": Kind.STRING,
    "strings.MaxRunes": Kind.STRING,
    "time.Format": Kind.STRING,
    "math.MultipleOf": Kind.NUMBER,
    "list.MinItems": Kind.LIST,
    "list.MaxItems": Kind.LIST,
    "list.UniqueItems": Kind.LIST,
    "list.MatchN": Kind.LIST,
    "struct.MinFields": Kind.STRUCT,
    "struct.MaxFields": Kind.STRUCT,
    "error": Kind.BOTTOM,
}

# Kinds of builtin validators referred to by selector.
_SELECTOR_KINDS = {
    "time.Time": Kind.STRING,
    "net.AbsURL": Kind.STRING,
    "net.URL": Kind.STRING,
    "regexp.Valid": Kind.STRING,
}


@dataclass
class Scope:
    """The declarations of one struct literal, used to resolve identifiers."""

    decls: list
    path: Path
    parent: Scope | None = None

    def lookup(self, name: str) -> tuple[Scope, list[Field]] | None:
        s = self
        while s is not None:
            fields = [d for d in s.decls if isinstance(d, Field) and isinstance(d.label, Ident) and d.label.name == name]
            if fields:
                return s, fields
            s = s.parent
        return None


@dataclass
class FieldInfo:
    """A regular field of a struct value."""

    name: str
    constraint: FieldConstraint
    value: ExprValue


def _decls(node: Node) -> list:
    if isinstance(node, File):
        return [d for d in node.decls if not isinstance(d, (Package, ImportDecl, Attribute))]
    if isinstance(node, StructLit):
        return [d for d in node.elts if not isinstance(d, Attribute)]
    return []


def _is_regular_label(label: Node) -> bool:
    if isinstance(label, Ident):
        return not is_def_or_hidden(label.name)
    return isinstance(label, BasicLit) and label.kind == LitKind.STRING


def _selector(label: Node) -> Selector:
    if isinstance(label, Ident):
        return Selector.from_name(label.name)
    return Selector.string(label_name(label))


def _literal_value(lit: BasicLit) -> Any:
    if lit.kind == LitKind.NULL:
        return None
    if lit.kind == LitKind.TRUE:
        return True
    if lit.kind == LitKind.FALSE:
        return False
    if lit.kind == LitKind.STRING:
        return lit.unquoted()
    text = lit.value.replace("_", "")
    if lit.kind == LitKind.INT:
        try:
            return int(text, 0)
        except ValueError:
            return int(text)
    return float(text)


class ExprValue:
    """A CUE expression together with the scope and path it appears at."""

    def __init__(
        self,
        node: Node,
        scope: Scope | None = None,
        path: Path = Path(),
        root: ExprValue | None = None,
        closed: bool = False,
    ):
        self.node = node
        self.scope = scope
        self.path = path
        self.root = root if root is not None else self
        self.closed = closed
        self._index: dict[int, tuple[Scope, Path]] | None = None

    def __repr__(self) -> str:
        return f"ExprValue({type(self.node).__name__} at {self.pos!r})"

    @classmethod
    def from_file(cls, f: File) -> ExprValue:
        return cls(f)

    @classmethod
    def from_expr(cls, e: Node) -> ExprValue:
        return cls(e)

    @property
    def pos(self) -> str:
        return str(self.path)

    def _new(self, node: Node, scope: Scope | None = None, path: Path | None = None, closed: bool = False) -> ExprValue:
        return ExprValue(node, scope if scope is not None else self.scope, self.path if path is None else path, self.root, closed)

    def in_definition(self) -> bool:
        return any(sel.is_definition() for sel in self.path)

    def _inner_scope(self) -> Scope:
        return Scope(_decls(self.node), self.path, self.scope)

    # Identifier resolution

    def _lookup(self, name: str) -> tuple[Scope, list[Field]] | None:
        if self.scope is None:
            return None
        return self.scope.lookup(name)

    def _package(self, ident: Ident) -> str | None:
        """Return the package qualifier an identifier stands for, if any."""
        if isinstance(ident.node, ImportSpec):
            return import_qualifier(ident.node.path)
        if ident.node is None and ident.name in BUILTIN_PACKAGES and self._lookup(ident.name) is None:
            return ident.name
        return None

    def _is_predeclared(self, ident: Ident) -> bool:
        if ident.node is not None or self._lookup(ident.name) is not None:
            return False
        return ident.name in PREDECLARED_KINDS or ident.name in INT_RANGES or ident.name in BUILTIN_FUNCS

    def _root_index(self) -> dict[int, tuple[Scope, Path]]:
        """Map the identity of every field value reachable through struct literals to its location."""
        root = self.root
        if root._index is None:
            index: dict[int, tuple[Scope, Path]] = {}
            stack = [(root.node, Scope(_decls(root.node), Path(), None))]
            while stack:
                node, scope = stack.pop()
                for d in scope.decls:
                    if isinstance(d, EmbedDecl) and isinstance(d.expr, StructLit):
                        stack.append((d.expr, Scope(_decls(d.expr), scope.path, scope)))
                    if not isinstance(d, Field) or isinstance(d.label, PatternLabel):
                        continue
                    path = scope.path.append(_selector(d.label))
                    index.setdefault(id(d.value), (scope, path))
                    if isinstance(d.value, StructLit):
                        stack.append((d.value, Scope(_decls(d.value), path, scope)))
            root._index = index
        return root._index

    def _field_value(self, scope: Scope, fields: list[Field], sel: Selector) -> ExprValue:
        values = [f.value for f in fields]
        node = values[0] if len(values) == 1 else new_bin_expr(Token.AND, *values)
        return ExprValue(node, scope, scope.path.append(sel), self.root)

    def deref(self) -> ExprValue | None:
        """Return the value a reference points to, or None if this is not a reference."""
        n = self.node
        if isinstance(n, Ident):
            if n.name == "_" and n.node is None:
                return None
            if isinstance(n.node, ImportSpec) or self._is_predeclared(n) or self._package(n):
                return None
            found = self._lookup(n.name)
            if found is not None:
                scope, fields = found
                return self._field_value(scope, fields, Selector.from_name(n.name))
            if n.node is not None:
                loc = self._root_index().get(id(n.node))
                if loc is not None:
                    scope, path = loc
                    return ExprValue(n.node, scope, path, self.root)
                return ExprValue(n.node, None, Path(), self.root)
            return None
        if isinstance(n, SelectorExpr):
            if isinstance(n.x, Ident) and self._package(n.x):
                return None
            base = self._new(n.x)
            target = base.deref() or base
            return target._select(label_name(n.sel), _selector(n.sel))
        if isinstance(n, IndexExpr):
            base = self._new(n.x)
            target = (base.deref() or base).eval()
            if not isinstance(target.node, ListLit) or not isinstance(n.index, BasicLit):
                return None
            i = _literal_value(n.index)
            elts = [e for e in target.node.elts if not isinstance(e, Ellipsis)]
            if not isinstance(i, int) or not 0 <= i < len(elts):
                return None
            return target._new(elts[i], path=target.path.append(Selector.index(i)))
        return None

    def lookup(self, name: str) -> ExprValue | None:
        """Return the field or definition called name, or None if the value declares none."""
        return self._select(name, Selector.from_name(name))

    def as_closed(self) -> ExprValue:
        """Return the same value, marked as closed as if passed through close()."""
        return ExprValue(self.node, self.scope, self.path, self.root, closed=True)

    def _select(self, name: str | None, sel: Selector) -> ExprValue | None:
        if name is None:
            return None
        fields: list[Field] = []
        scope = None
        for part in self._follow(unwrap=False)._struct_parts():
            part_scope = part._inner_scope()
            for d in part_scope.decls:
                if isinstance(d, Field) and not isinstance(d.label, PatternLabel) and label_name(d.label) == name:
                    fields.append(d)
                    scope = scope or part_scope
        if not fields:
            return None
        return self._field_value(scope, fields, sel)

    def _struct_parts(self) -> list[ExprValue]:
        """Return the struct literals a value is made of."""
        n = self.node
        if isinstance(n, (StructLit, File)):
            parts = [self]
            inner = self._inner_scope()
            for d in inner.decls:
                if isinstance(d, EmbedDecl):
                    parts.extend(self._new(d.expr, inner)._follow(unwrap=False)._struct_parts())
            return parts
        if isinstance(n, BinaryExpr) and n.op == Token.AND:
            x, y = self._new(n.x)._follow(unwrap=False), self._new(n.y)._follow(unwrap=False)
            return x._struct_parts() + y._struct_parts()
        if isinstance(n, CallExpr) and self._new(n.fun).qualified_name() == "close" and n.args:
            return self._new(n.args[0])._follow(unwrap=False)._struct_parts()
        return []

    def eval(self) -> ExprValue:
        """Follow references until reaching a value that is not a reference.

        Structs that only embed a single value are looked through on the way.
        """
        return self._follow(unwrap=True)

    def _follow(self, unwrap: bool) -> ExprValue:
        # Without unwrap, a struct embedding one value keeps the definitions
        # it declares next to it, for selection.
        v = self._unwrapped() if unwrap else self
        seen = set()
        while True:
            t = v.deref()
            if t is None:
                return v
            key = t.path if len(t.path) else id(t.node)
            if key in seen:
                return self._new(top())
            seen.add(key)
            v = t._unwrapped() if unwrap else t

    def reference_path(self) -> tuple[ExprValue, Path] | None:
        """Return the root value and the path within it that this value refers to."""
        v = self._unwrapped()
        if v is not self:
            return v.reference_path()
        t = self.deref()
        if t is None:
            return None
        return self.root, t.path

    def referenced(self) -> ExprValue | None:
        """Return the value this value refers to, looking through a struct that only embeds a reference."""
        return self._unwrapped().deref()

    def qualified_name(self) -> str | None:
        """Return the name of a builtin package member or function, such as "strings.MinRunes"."""
        v = self._unwrapped()
        if v is not self:
            return v.qualified_name()
        n = self.node
        if isinstance(n, Ident):
            if n.name in BUILTIN_FUNCS and self._is_predeclared(n):
                return n.name
            return self._package(n)
        if isinstance(n, SelectorExpr) and isinstance(n.x, Ident):
            pkg = self._package(n.x)
            if pkg:
                return f"{pkg}.{label_name(n.sel)}"
        return None

    # Structure

    def _unwrapped(self) -> ExprValue:
        """Return the single embedded value of a struct that declares nothing else."""
        n = self.node
        if not isinstance(n, (StructLit, File)):
            return self
        inner = self._inner_scope()
        embeds = [d for d in inner.decls if isinstance(d, EmbedDecl)]
        if len(embeds) != 1 or self._has_data(inner.decls):
            return self
        return self._new(embeds[0].expr, inner, closed=self.closed)._unwrapped()

    @staticmethod
    def _has_data(decls: list) -> bool:
        for d in decls:
            if isinstance(d, Ellipsis):
                return True
            if isinstance(d, Field) and (isinstance(d.label, PatternLabel) or _is_regular_label(d.label)):
                return True
        return False

    def expr(self) -> tuple[Op, list[ExprValue]]:
        """Decompose the value into an operator and its operands."""
        v = self._unwrapped()
        if v is not self:
            return v.expr()
        n = self.node
        if isinstance(n, Ident):
            if n.name in INT_RANGES and self._is_predeclared(n):
                lo, hi = INT_RANGES[n.name]
                args = [self._new(Ident(name="int"))]
                args.append(self._new(UnaryExpr(op=Token.GEQ, x=new_int(lo))))
                if hi is not None:
                    args.append(self._new(UnaryExpr(op=Token.LEQ, x=new_int(hi))))
                return Op.AND, args
            return Op.NOOP, []
        if isinstance(n, SelectorExpr):
            return Op.SELECTOR, []
        if isinstance(n, IndexExpr):
            return Op.INDEX, []
        if isinstance(n, BinaryExpr):
            if n.op in (Token.AND, Token.OR):
                return Op(n.op.value), [self._new(x) for x in self._flatten(n, n.op)]
            return _TOKEN_OPS[n.op], [self._new(n.x), self._new(n.y)]
        if isinstance(n, UnaryExpr):
            if n.op == Token.SUB:
                return Op.NOOP, []
            return _TOKEN_OPS[n.op], [self._new(n.x)]
        if isinstance(n, CallExpr):
            return Op.CALL, [self._new(n.fun)] + [self._new(a) for a in n.args]
        if isinstance(n, (StructLit, File)):
            inner = self._inner_scope()
            embeds = [d.expr for d in inner.decls if isinstance(d, EmbedDecl)]
            if not embeds:
                return Op.NOOP, []
            args = [self._new(e, inner) for e in embeds]
            data = [d for d in inner.decls if not isinstance(d, EmbedDecl)]
            if self._has_data(data):
                args.append(self._new(StructLit(elts=data), closed=self.closed))
            return Op.AND, args
        return Op.NOOP, []

    @staticmethod
    def _flatten(n: Node, op: Token) -> list[Node]:
        if isinstance(n, BinaryExpr) and n.op == op:
            return ExprValue._flatten(n.x, op) + ExprValue._flatten(n.y, op)
        return [n]

    def kind(self, _seen: frozenset = frozenset()) -> Kind:
        """Return the set of kinds the value may take, without requiring it to be concrete."""
        v = self._unwrapped()
        if v is not self:
            return v.kind(_seen)
        n = self.node
        t = self.deref()
        if t is not None:
            key = t.path if len(t.path) else id(t.node)
            if key in _seen:
                return Kind.TOP
            return t.kind(_seen | {key})
        if isinstance(n, Ident):
            if n.name in INT_RANGES:
                return Kind.INT
            return PREDECLARED_KINDS.get(n.name, Kind.TOP)
        if isinstance(n, BasicLit):
            return {
                LitKind.NULL: Kind.NULL,
                LitKind.TRUE: Kind.BOOL,
                LitKind.FALSE: Kind.BOOL,
                LitKind.INT: Kind.INT,
                LitKind.FLOAT: Kind.FLOAT,
                LitKind.STRING: Kind.STRING,
            }[n.kind]
        if isinstance(n, (BottomLit, BadExpr)):
            return Kind.BOTTOM
        if isinstance(n, SelectorExpr):
            return _SELECTOR_KINDS.get(self.qualified_name(), Kind.TOP)
        if isinstance(n, UnaryExpr):
            if n.op in (Token.MAT, Token.NMAT):
                return Kind.STRING
            if n.op == Token.NEQ:
                return Kind.TOP
            x = self._new(n.x).kind(_seen)
            if n.op in (Token.LSS, Token.LEQ, Token.GTR, Token.GEQ) and x & Kind.NUMBER:
                return Kind.NUMBER
            return x
        if isinstance(n, BinaryExpr):
            if n.op == Token.AND:
                return self._new(n.x).kind(_seen) & self._new(n.y).kind(_seen)
            if n.op == Token.OR:
                return self._new(n.x).kind(_seen) | self._new(n.y).kind(_seen)
            return Kind.BOOL
        if isinstance(n, CallExpr):
            name = self._new(n.fun).qualified_name()
            if name == "close" and n.args:
                return self._new(n.args[0]).kind(_seen)
            return _CALL_KINDS.get(name, Kind.TOP)
        if isinstance(n, (StructLit, File)):
            op, args = self.expr()
            if op == Op.AND:
                k = Kind.TOP
                for a in args:
                    k &= a.kind(_seen)
                return k
            return Kind.STRUCT
        if isinstance(n, ListLit):
            return Kind.LIST
        return Kind.TOP

    def is_concrete(self) -> bool:
        """Report whether the value is a single, fully specified value."""
        v = self.eval()._unwrapped()
        n = v.node
        if isinstance(n, BasicLit):
            return True
        if isinstance(n, UnaryExpr):
            return n.op == Token.SUB and isinstance(n.x, BasicLit) and n.x.kind in (LitKind.INT, LitKind.FLOAT)
        if isinstance(n, ListLit):
            return all(not isinstance(e, Ellipsis) and v._new(e).is_concrete() for e in n.elts)
        if isinstance(n, BinaryExpr) and n.op == Token.AND:
            return any(a.is_concrete() for a in v.expr()[1])
        if isinstance(n, CallExpr) and v._new(n.fun).qualified_name() == "close" and n.args:
            return v._new(n.args[0]).is_concrete()
        if isinstance(n, (StructLit, File)):
            op, _ = v.expr()
            if op != Op.NOOP:
                return False
            for d in v._inner_scope().decls:
                if isinstance(d, Field) and _is_regular_label(d.label):
                    if d.constraint == FieldConstraint.REQUIRED:
                        return False
                    if d.constraint == FieldConstraint.REGULAR and not v._new(d.value, v._inner_scope()).is_concrete():
                        return False
            return True
        return False

    def concrete_value(self) -> Any:
        """Return the value as decoded JSON data. The value must be concrete."""
        v = self.eval()._unwrapped()
        n = v.node
        if isinstance(n, BasicLit):
            return _literal_value(n)
        if isinstance(n, UnaryExpr) and n.op == Token.SUB:
            return -_literal_value(n.x)
        if isinstance(n, ListLit):
            return [v._new(e).concrete_value() for e in n.elts]
        if isinstance(n, BinaryExpr) and n.op == Token.AND:
            for a in v.expr()[1]:
                if a.is_concrete():
                    return a.concrete_value()
        if isinstance(n, CallExpr) and n.args:
            return v._new(n.args[0]).concrete_value()
        if isinstance(n, (StructLit, File)):
            return {f.name: f.value.concrete_value() for f in v.fields() if f.constraint == FieldConstraint.REGULAR}
        raise ValueError(f"value at {self.pos!r} is not concrete")

    def fields(self) -> list[FieldInfo]:
        """Return the regular fields declared by a struct literal, merging repeated labels."""
        v = self._unwrapped()
        if v is not self:
            return v.fields()
        if not isinstance(self.node, (StructLit, File)):
            return []
        inner = self._inner_scope()
        grouped: dict[str, list[Field]] = {}
        for d in inner.decls:
            if isinstance(d, Field) and _is_regular_label(d.label):
                grouped.setdefault(label_name(d.label), []).append(d)
        result = []
        for name, fields in grouped.items():
            constraints = {f.constraint for f in fields}
            if FieldConstraint.REQUIRED in constraints:
                constraint = FieldConstraint.REQUIRED
            elif FieldConstraint.REGULAR in constraints:
                constraint = FieldConstraint.REGULAR
            else:
                constraint = FieldConstraint.OPTIONAL
            result.append(FieldInfo(name, constraint, self._field_value(inner, fields, Selector.string(name))))
        return result

    def pattern_constraints(self) -> list[tuple[ExprValue, ExprValue]]:
        """Return the (label pattern, value) pairs of the pattern constraints in a struct literal."""
        v = self._unwrapped()
        if v is not self:
            return v.pattern_constraints()
        inner = self._inner_scope()
        return [
            (self._new(d.label.expr, inner), self._new(d.value, inner))
            for d in inner.decls
            if isinstance(d, Field) and isinstance(d.label, PatternLabel)
        ]

    def is_explicitly_open(self) -> bool:
        v = self._unwrapped()
        return any(isinstance(d, Ellipsis) for d in _decls(v.node))

    def is_closed(self) -> bool:
        """Report whether a struct rejects fields it does not declare."""
        v = self._unwrapped()
        if v.closed:
            return True
        return v.in_definition() and not v.is_explicitly_open()

    def list_elements(self) -> list[ExprValue]:
        v = self.eval()
        if not isinstance(v.node, ListLit):
            return []
        elts = [e for e in v.node.elts if not isinstance(e, Ellipsis)]
        return [v._new(e, path=v.path.append(Selector.index(i))) for i, e in enumerate(elts)]

    def list_rest(self) -> ExprValue | None:
        """Return the type of elements beyond the fixed ones, or None if the list is closed."""
        v = self.eval()
        if not isinstance(v.node, ListLit):
            return None
        for e in v.node.elts:
            if isinstance(e, Ellipsis):
                return v._new(e.type if e.type is not None else top())
        return None

    # Validation

    def validate(self) -> list[SchemaError]:
        """Report malformed expressions and identifiers that do not resolve."""
        errs: list[SchemaError] = []
        self._validate(self.node, self.scope, self.path, errs)
        return errs

    def _validate(self, n: Node, scope: Scope | None, path: Path, errs: list[SchemaError]) -> None:
        if n is None:
            return
        if isinstance(n, BadExpr):
            errs.append(SchemaError(str(path), n.message or "invalid expression"))
        elif isinstance(n, Ident):
            v = ExprValue(n, scope, path, self.root)
            if not (
                (n.name == "_" and n.node is None)
                or v._is_predeclared(n)
                or v._package(n)
                or isinstance(n.node, ImportSpec)
                or v.deref() is not None
            ):
                errs.append(SchemaError(str(path), f"reference {n.name!r} not found"))
        elif isinstance(n, (StructLit, File)):
            inner = Scope(_decls(n), path, scope)
            for d in inner.decls:
                if isinstance(d, Field):
                    if isinstance(d.label, PatternLabel):
                        self._validate(d.label.expr, inner, path, errs)
                        self._validate(d.value, inner, path, errs)
                    else:
                        self._validate(d.value, inner, path.append(_selector(d.label)), errs)
                elif isinstance(d, EmbedDecl):
                    self._validate(d.expr, inner, path, errs)
                elif isinstance(d, Ellipsis):
                    self._validate(d.type, inner, path, errs)
        elif isinstance(n, SelectorExpr):
            self._validate(n.x, scope, path, errs)
        elif isinstance(n, IndexExpr):
            self._validate(n.x, scope, path, errs)
            self._validate(n.index, scope, path, errs)
        elif isinstance(n, UnaryExpr):
            self._validate(n.x, scope, path, errs)
        elif isinstance(n, BinaryExpr):
            self._validate(n.x, scope, path, errs)
            self._validate(n.y, scope, path, errs)
        elif isinstance(n, CallExpr):
            self._validate(n.fun, scope, path, errs)
            for a in n.args:
                self._validate(a, scope, path, errs)
        elif isinstance(n, ListLit):
            for e in n.elts:
                self._validate(e.type if isinstance(e, Ellipsis) else e, scope, path, errs)

    def __str__(self) -> str:
        from ..cue_ast.serializer import format_node

        return format_node(self.node)


def json_literal_key(data: Any) -> str:
    """Return a canonical text form of JSON data, used to compare constant values."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"))
