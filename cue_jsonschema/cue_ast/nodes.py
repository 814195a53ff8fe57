"""
AST node definitions for CUE syntax.

These nodes are the output of schema extraction and the input of schema
generation. They model the subset of CUE needed to express JSON Schema
constraints: literals, identifiers, struct and list literals, unary and
binary expressions, calls, selectors and attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..utils import KEYWORDS, is_def_or_hidden, is_valid_ident, quote_string, unquote_string


class Token(str, Enum):
    """Operator tokens."""

    AND = "&"
    OR = "|"
    EQL = "=="
    NEQ = "!="
    LSS = "<"
    LEQ = "<="
    GTR = ">"
    GEQ = ">="
    MAT = "=~"
    NMAT = "!~"
    NOT = "!"
    SUB = "-"


class LitKind(str, Enum):
    """Kinds of basic literals."""

    NULL = "null"
    TRUE = "true"
    FALSE = "false"
    INT = "int"
    FLOAT = "float"
    STRING = "string"


class FieldConstraint(str, Enum):
    """Field constraint marker following a label."""

    REGULAR = ""
    OPTIONAL = "?"
    REQUIRED = "!"


@dataclass(eq=False)
class Node:
    """Base class for all CUE AST nodes."""


@dataclass(eq=False)
class Expr(Node):
    """Base class for expressions."""


@dataclass(eq=False)
class Decl(Node):
    """Base class for declarations inside a struct or file."""


@dataclass(eq=False)
class ImportSpec(Node):
    """An import of a package, referred to by its qualifier."""

    path: str = ""


@dataclass(eq=False)
class Ident(Expr):
    """An identifier.

    node, when set, binds the identifier to the expression or import it
    refers to, independent of the lexical scope it ends up in.
    """

    name: str = ""
    node: Node | None = None


@dataclass(eq=False)
class BasicLit(Expr):
    """A literal. value holds the CUE source text of the literal."""

    kind: LitKind = LitKind.NULL
    value: str = "null"

    def unquoted(self) -> str:
        """Return the string content of a string literal."""
        return unquote_string(self.value)


@dataclass(eq=False)
class BottomLit(Expr):
    """The bottom value _|_."""


@dataclass(eq=False)
class BadExpr(Expr):
    """Placeholder for an expression that could not be translated."""

    message: str = ""


@dataclass(eq=False)
class UnaryExpr(Expr):
    op: Token = Token.NOT
    x: Expr | None = None


@dataclass(eq=False)
class BinaryExpr(Expr):
    op: Token = Token.AND
    x: Expr | None = None
    y: Expr | None = None


@dataclass(eq=False)
class CallExpr(Expr):
    fun: Expr | None = None
    args: list[Expr] = field(default_factory=list)


@dataclass(eq=False)
class SelectorExpr(Expr):
    """x.sel, where sel is an identifier or string label."""

    x: Expr | None = None
    sel: Ident | BasicLit | None = None


@dataclass(eq=False)
class IndexExpr(Expr):
    x: Expr | None = None
    index: Expr | None = None


@dataclass(eq=False)
class Ellipsis(Expr):
    """The ... marker in a struct or list, with an optional element type."""

    type: Expr | None = None


@dataclass(eq=False)
class ListLit(Expr):
    elts: list[Expr] = field(default_factory=list)


@dataclass(eq=False)
class StructLit(Expr):
    """A struct literal. An inline struct holding a single field prints as a: b: c."""

    elts: list[Decl | Ellipsis] = field(default_factory=list)
    inline: bool = False


@dataclass(eq=False)
class PatternLabel(Node):
    """A pattern constraint label such as [string] or [=~"^x"]."""

    expr: Expr | None = None


Label = Ident | BasicLit | PatternLabel


@dataclass(eq=False)
class Attribute(Decl):
    """An attribute such as @jsonschema(id="...")."""

    text: str = ""


@dataclass(eq=False)
class Field(Decl):
    label: Label | None = None
    value: Expr | None = None
    constraint: FieldConstraint = FieldConstraint.REGULAR
    attrs: list[Attribute] = field(default_factory=list)
    doc: str | None = None


@dataclass(eq=False)
class EmbedDecl(Decl):
    expr: Expr | None = None


@dataclass(eq=False)
class Package(Decl):
    name: str = ""


@dataclass(eq=False)
class ImportDecl(Decl):
    specs: list[ImportSpec] = field(default_factory=list)


@dataclass(eq=False)
class File(Node):
    decls: list[Decl] = field(default_factory=list)
    doc: str | None = None


# Constructors


def new_ident(name: str) -> Ident:
    return Ident(name=name)


def new_string(s: str) -> BasicLit:
    return BasicLit(kind=LitKind.STRING, value=quote_string(s))


def new_int(n: int) -> BasicLit:
    return BasicLit(kind=LitKind.INT, value=str(n))


def new_number(n: int | float, text: str | None = None) -> BasicLit:
    """Create a numeric literal, keeping integers and floats apart."""
    if isinstance(n, bool):
        raise TypeError("bool is not a number")
    if isinstance(n, int):
        return BasicLit(kind=LitKind.INT, value=text or str(n))
    return BasicLit(kind=LitKind.FLOAT, value=text or repr(n))


def new_bool(b: bool) -> BasicLit:
    if b:
        return BasicLit(kind=LitKind.TRUE, value="true")
    return BasicLit(kind=LitKind.FALSE, value="false")


def new_null() -> BasicLit:
    return BasicLit(kind=LitKind.NULL, value="null")


def top() -> Ident:
    return Ident(name="_")


def new_bin_expr(op: Token, *exprs: Expr) -> Expr | None:
    """Combine exprs with op, left to right. A single expression is returned as is."""
    result: Expr | None = None
    for e in exprs:
        result = e if result is None else BinaryExpr(op=op, x=result, y=e)
    return result


def new_call(fun: Expr, *args: Expr) -> CallExpr:
    return CallExpr(fun=fun, args=list(args))


def new_sel(x: Expr, name: str) -> SelectorExpr:
    return SelectorExpr(x=x, sel=new_label(name))


def new_list(*elts: Expr) -> ListLit:
    return ListLit(elts=list(elts))


def new_struct(*elts: Decl | Ellipsis) -> StructLit:
    return StructLit(elts=list(elts))


def new_label(name: str) -> Ident | BasicLit:
    """Return an identifier label if name is a valid identifier, or a string label otherwise."""
    if is_valid_ident(name) and not is_def_or_hidden(name) and name not in KEYWORDS:
        return new_ident(name)
    return new_string(name)


def new_field(label: str | Label, value: Expr, constraint: FieldConstraint = FieldConstraint.REGULAR) -> Field:
    if isinstance(label, str):
        label = new_label(label)
    return Field(label=label, value=value, constraint=constraint)


def label_name(label: Label) -> str | None:
    """Return the name of a simple label, or None for pattern labels."""
    if isinstance(label, Ident):
        return label.name
    if isinstance(label, BasicLit) and label.kind == LitKind.STRING:
        return label.unquoted()
    return None


def is_top(e: Expr | None) -> bool:
    return isinstance(e, Ident) and e.name == "_" and e.node is None


def is_bottom(e: Expr | None) -> bool:
    """Report whether e is _|_ or an error(...) call."""
    if isinstance(e, BottomLit):
        return True
    return isinstance(e, CallExpr) and isinstance(e.fun, Ident) and e.fun.name == "error"
