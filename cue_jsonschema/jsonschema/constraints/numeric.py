"""
Numeric keywords.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...cue_ast.nodes import Token, UnaryExpr, new_call, new_sel
from ...values.json_value import JSONValue
from ...values.kind import Kind
from ..schema_info import CoreType
from ..version import OPENAPI_LIKE, Version, vset

if TYPE_CHECKING:
    from ..state import State

# Versions in which exclusiveMinimum and exclusiveMaximum are booleans
# modifying minimum and maximum rather than bounds of their own.
_BOOL_EXCLUSIVE = vset(Version.DRAFT4) | OPENAPI_LIKE


def constraint_multiple_of(key: str, n: JSONValue, s: State) -> None:
    x = s.number(n)
    if n.kind & Kind.NUMBER and n.data <= 0:
        s.errf(n, '"multipleOf" value must be strictly greater than 0')
        return
    math = s.add_import(n, "math")
    s.add(n, CoreType.NUM, new_call(new_sel(math, "MultipleOf"), x))


def constraint_minimum(key: str, n: JSONValue, s: State) -> None:
    op = Token.GTR if s.exclusive_min else Token.GEQ
    s.add(n, CoreType.NUM, UnaryExpr(op=op, x=s.number(n)))


def constraint_maximum(key: str, n: JSONValue, s: State) -> None:
    op = Token.LSS if s.exclusive_max else Token.LEQ
    s.add(n, CoreType.NUM, UnaryExpr(op=op, x=s.number(n)))


def constraint_exclusive_minimum(key: str, n: JSONValue, s: State) -> None:
    if _BOOL_EXCLUSIVE.contains(s.info.schema_version):
        if n.kind != Kind.BOOL:
            s.errf(n, f'value of "exclusiveMinimum" must be a boolean in {s.info.schema_version}')
            return
        s.exclusive_min = n.data
        return
    if n.kind == Kind.BOOL:
        s.errf(n, f'value of "exclusiveMinimum" must be a number in {s.info.schema_version}')
        return
    s.add(n, CoreType.NUM, UnaryExpr(op=Token.GTR, x=s.number(n)))


def constraint_exclusive_maximum(key: str, n: JSONValue, s: State) -> None:
    if _BOOL_EXCLUSIVE.contains(s.info.schema_version):
        if n.kind != Kind.BOOL:
            s.errf(n, f'value of "exclusiveMaximum" must be a boolean in {s.info.schema_version}')
            return
        s.exclusive_max = n.data
        return
    if n.kind == Kind.BOOL:
        s.errf(n, f'value of "exclusiveMaximum" must be a number in {s.info.schema_version}')
        return
    s.add(n, CoreType.NUM, UnaryExpr(op=Token.LSS, x=s.number(n)))
