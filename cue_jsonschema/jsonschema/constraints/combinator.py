"""
Schema combinators: allOf, anyOf, oneOf, not and if/then/else.

Each translates to a call to matchN or matchIf over the translated
subschemas, except where the types involved make a simpler form possible.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...cue_ast.nodes import Expr, Token, UnaryExpr, new_call, new_ident, new_int, new_list, top
from ...values.json_value import JSONValue
from ...values.kind import Kind

if TYPE_CHECKING:
    from ..state import State


def _match_n(count: Expr, exprs: list[Expr]) -> Expr:
    return new_call(new_ident("matchN"), count, new_list(*exprs))


def constraint_all_of(key: str, n: JSONValue, s: State) -> None:
    items = s.list_items("allOf", n, False)
    if not items:
        s.errf(n, "allOf requires at least one subschema")
        return
    known_types = Kind.BOTTOM
    a = []
    for v in items:
        x, sub = s.schema_state(v, s.info.allowed_types)
        s.info.allowed_types &= sub.allowed_types
        if sub.has_constraints:
            # known_types is only used to avoid redundant disjunctions, so
            # the union is what matters here.
            known_types |= sub.known_types
            a.append(x)
    if not a:
        return
    s.info.known_types &= known_types
    if len(a) == 1:
        s.all.add(n.pos, a[0])
        return
    s.all.add(n.pos, _match_n(new_int(len(a)), a))


def constraint_any_of(key: str, n: JSONValue, s: State) -> None:
    items = s.list_items("anyOf", n, False)
    if not items:
        s.errf(n, "anyOf requires at least one subschema")
        return
    types = Kind.BOTTOM
    known_types = Kind.BOTTOM
    a = []
    for v in items:
        x, sub = s.schema_state(v, s.info.allowed_types)
        if sub.allowed_types == Kind.BOTTOM:
            continue
        types |= sub.allowed_types
        known_types |= sub.known_types
        a.append(x)
    if not a:
        s.info.allowed_types = Kind.BOTTOM
        return
    if len(a) == 1:
        s.all.add(n.pos, a[0])
        return
    s.info.allowed_types &= types
    s.info.known_types &= known_types
    s.all.add(n.pos, _match_n(UnaryExpr(op=Token.GEQ, x=new_int(1)), a))


def constraint_one_of(key: str, n: JSONValue, s: State) -> None:
    items = s.list_items("oneOf", n, False)
    if not items:
        s.errf(n, "oneOf requires at least one subschema")
        return
    types = Kind.BOTTOM
    known_types = Kind.BOTTOM
    needs_constraint = False
    a = []
    for v in items:
        x, sub = s.schema_state(v, s.info.allowed_types)
        if sub.allowed_types == Kind.BOTTOM:
            continue
        if sub.has_constraints:
            needs_constraint = True
        elif types & sub.allowed_types:
            # Unconstrained members with overlapping types: both would match.
            needs_constraint = True
        types |= sub.allowed_types
        known_types |= sub.known_types
        a.append(x)
    s.info.allowed_types &= types
    if not a or not needs_constraint:
        return
    s.info.known_types &= known_types
    if len(a) == 1:
        s.all.add(n.pos, a[0])
        return
    s.all.add(n.pos, _match_n(new_int(1), a))


def constraint_not(key: str, n: JSONValue, s: State) -> None:
    s.all.add(n.pos, _match_n(new_int(0), [s.schema(n)]))


def constraint_if(key: str, n: JSONValue, s: State) -> None:
    s.if_constraint = n


def constraint_then(key: str, n: JSONValue, s: State) -> None:
    s.then_constraint = n


def constraint_else(key: str, n: JSONValue, s: State) -> None:
    s.else_constraint = n


def constraint_if_then_else(s: State) -> None:
    """Add matchIf once all three keywords of a schema have been seen."""
    if s.if_constraint is None or (s.then_constraint is None and s.else_constraint is None):
        return
    if_expr, if_sub = s.schema_state(s.if_constraint, s.info.allowed_types)
    then_expr = else_expr = None
    if s.then_constraint is not None:
        # The value reaching "then" has also satisfied "if".
        then_expr, _ = s.schema_state(s.then_constraint, s.info.allowed_types & if_sub.allowed_types)
    if s.else_constraint is not None:
        else_expr, _ = s.schema_state(s.else_constraint, s.info.allowed_types)
    s.all.add(s.pos.pos, new_call(new_ident("matchIf"), if_expr, then_expr or top(), else_expr or top()))
