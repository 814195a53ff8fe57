"""
Array keywords.

Tuple validation (prefixItems, or items as an array before 2020-12)
becomes a list literal with an open tail; items, or additionalItems in the
older form, then sets the type of that tail.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...cue_ast.nodes import Ellipsis, Expr, ListLit, Token, UnaryExpr, is_bottom, is_top, new_bin_expr, new_call, new_int, new_sel
from ...values.json_value import JSONValue
from ...values.kind import Kind, kind_name
from ..schema_info import CoreType
from ..version import Version, vto

if TYPE_CHECKING:
    from ..state import State


def _set_rest(lst: ListLit, elem: Expr) -> None:
    if lst.elts and isinstance(lst.elts[-1], Ellipsis):
        lst.elts.pop()
    if is_bottom(elem):
        # No elements beyond the prefix.
        return
    lst.elts.append(Ellipsis(type=None if is_top(elem) else elem))


def _prefix_list(key: str, n: JSONValue, s: State) -> None:
    elems = [s.schema(v) for v in s.list_items(key, n, True)]
    s.list = ListLit(elts=elems + [Ellipsis()])
    s.add(n, CoreType.ARRAY, s.list)


def constraint_prefix_items(key: str, n: JSONValue, s: State) -> None:
    if n.kind != Kind.LIST:
        s.errf(n, f'value of "prefixItems" must be an array, found {kind_name(n.kind)}')
        return
    _prefix_list(key, n, s)


def constraint_items(key: str, n: JSONValue, s: State) -> None:
    s.has_items = True
    if n.kind == Kind.LIST:
        if not vto(Version.DRAFT2019_09).contains(s.info.schema_version):
            s.errf(n, f'value of "items" must be an object or boolean in {s.info.schema_version}')
            return
        s.list_items_is_array = True
        _prefix_list(key, n, s)
        return
    if n.kind not in (Kind.STRUCT, Kind.BOOL):
        s.errf(n, f'value of "items" must be an object, boolean or array, found {kind_name(n.kind)}')
        return
    elem = s.schema(n)
    if s.list is not None:
        _set_rest(s.list, elem)
        return
    if is_bottom(elem):
        s.add(n, CoreType.ARRAY, ListLit())
        return
    if not is_top(elem):
        s.add(n, CoreType.ARRAY, ListLit(elts=[Ellipsis(type=elem)]))


def constraint_additional_items(key: str, n: JSONValue, s: State) -> None:
    if n.kind not in (Kind.STRUCT, Kind.BOOL):
        s.errf(n, f'value of "additionalItems" must be an object or boolean, found {kind_name(n.kind)}')
        return
    if not s.list_items_is_array or s.list is None:
        # Only applies when items is an array.
        return
    _set_rest(s.list, s.schema(n))


def constraint_contains(key: str, n: JSONValue, s: State) -> None:
    elem = s.schema(n)
    count: Expr = UnaryExpr(op=Token.GEQ, x=new_int(1 if s.min_contains is None else s.min_contains))
    if s.max_contains is not None:
        count = new_bin_expr(Token.AND, count, UnaryExpr(op=Token.LEQ, x=new_int(s.max_contains)))
    lst = s.add_import(n, "list")
    s.add(n, CoreType.ARRAY, new_call(new_sel(lst, "MatchN"), count, elem))


def constraint_min_contains(key: str, n: JSONValue, s: State) -> None:
    s.min_contains = s.uint_value(n)


def constraint_max_contains(key: str, n: JSONValue, s: State) -> None:
    s.max_contains = s.uint_value(n)


def constraint_min_items(key: str, n: JSONValue, s: State) -> None:
    lst = s.add_import(n, "list")
    s.add(n, CoreType.ARRAY, new_call(new_sel(lst, "MinItems"), s.uint(n)))


def constraint_max_items(key: str, n: JSONValue, s: State) -> None:
    lst = s.add_import(n, "list")
    s.add(n, CoreType.ARRAY, new_call(new_sel(lst, "MaxItems"), s.uint(n)))


def constraint_unique_items(key: str, n: JSONValue, s: State) -> None:
    if s.bool_value(n):
        lst = s.add_import(n, "list")
        s.add(n, CoreType.ARRAY, new_call(new_sel(lst, "UniqueItems")))
