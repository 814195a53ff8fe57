"""
Helpers for building and rewriting CUE syntax trees.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..utils import import_qualifier, is_valid_ident
from ..values.path import Path, Selector, SelectorType
from .nodes import (
    BasicLit,
    BinaryExpr,
    CallExpr,
    Ellipsis,
    EmbedDecl,
    Field,
    File,
    Ident,
    ImportDecl,
    ImportSpec,
    IndexExpr,
    Label,
    ListLit,
    LitKind,
    Node,
    PatternLabel,
    SelectorExpr,
    StructLit,
    UnaryExpr,
    new_int,
    new_string,
)


def label_for_selector(sel: Selector) -> Ident | BasicLit:
    """Return the label syntax for a selector."""
    if sel.type == SelectorType.INDEX:
        raise ValueError(f"cannot form label for index selector {sel}")
    name = sel.unquoted()
    if sel.type == SelectorType.STRING:
        text = str(sel)
        if text.startswith('"'):
            return new_string(name)
        return Ident(name=text)
    if is_valid_ident(name) or name == "#":
        return Ident(name=name)
    raise ValueError(f"cannot form expression for selector {name!r}")


def selector_for_label(label: Label) -> Selector:
    """Return the selector that a field label stands for."""
    if isinstance(label, Ident):
        return Selector.from_name(label.name)
    if isinstance(label, BasicLit) and label.kind == LitKind.STRING:
        return Selector.string(label.unquoted())
    raise ValueError(f"cannot make selector for label {label!r}")


def path_ref_syntax(path: Path, root: Node) -> Node:
    """Build the expression that selects path starting from root."""
    expr = root
    for sel in path:
        if sel.type == SelectorType.INDEX:
            expr = IndexExpr(x=expr, index=new_int(sel.label))
        else:
            expr = SelectorExpr(x=expr, sel=label_for_selector(sel))
    return expr


def expr_at_path(path: Path, expr: Node) -> Node:
    """Wrap expr in nested single-field structs so that it sits at path."""
    for sel in reversed(path.selectors):
        expr = StructLit(elts=[Field(label=label_for_selector(sel), value=expr)], inline=True)
    return expr


def children(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of node, not following identifier bindings."""
    if isinstance(node, File):
        yield from node.decls
    elif isinstance(node, StructLit):
        yield from node.elts
    elif isinstance(node, ListLit):
        yield from node.elts
    elif isinstance(node, Field):
        if node.label is not None:
            yield node.label
        if node.value is not None:
            yield node.value
    elif isinstance(node, PatternLabel):
        if node.expr is not None:
            yield node.expr
    elif isinstance(node, EmbedDecl):
        if node.expr is not None:
            yield node.expr
    elif isinstance(node, Ellipsis):
        if node.type is not None:
            yield node.type
    elif isinstance(node, UnaryExpr):
        yield node.x
    elif isinstance(node, BinaryExpr):
        yield node.x
        yield node.y
    elif isinstance(node, CallExpr):
        yield node.fun
        yield from node.args
    elif isinstance(node, SelectorExpr):
        yield node.x
        yield node.sel
    elif isinstance(node, IndexExpr):
        yield node.x
        yield node.index


def walk(node: Node) -> Iterator[Node]:
    """Yield node and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        n = stack.pop()
        if n is None:
            continue
        yield n
        stack.extend(reversed(list(children(n))))


def add_imports(f: File) -> File:
    """Insert import declarations for every package referenced through a bound identifier.

    Extraction creates identifiers such as strings in strings.MinRunes bound
    directly to an ImportSpec; this gathers those into a single import
    declaration placed after the package clause and file attributes.
    """
    specs: dict[str, ImportSpec] = {}
    for n in walk(f):
        if isinstance(n, Ident) and isinstance(n.node, ImportSpec):
            if import_qualifier(n.node.path) != n.name:
                raise ValueError(f"identifier {n.name} does not match import {n.node.path}")
            specs.setdefault(n.node.path, n.node)
    f.decls = [d for d in f.decls if not isinstance(d, ImportDecl)]
    if not specs:
        return f
    decl = ImportDecl(specs=[specs[p] for p in sorted(specs)])
    i = 0
    while i < len(f.decls) and not isinstance(f.decls[i], (Field, EmbedDecl)):
        i += 1
    f.decls.insert(i, decl)
    return f
