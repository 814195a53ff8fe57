"""
Value kinds shared by both translation directions.
"""

from __future__ import annotations

from enum import IntFlag


class Kind(IntFlag):
    """Bit set of the basic kinds a value can have."""

    BOTTOM = 0
    NULL = 1
    BOOL = 2
    INT = 4
    FLOAT = 8
    STRING = 16
    BYTES = 32
    LIST = 64
    STRUCT = 128

    NUMBER = INT | FLOAT
    TOP = NULL | BOOL | INT | FLOAT | STRING | BYTES | LIST | STRUCT


# The kinds that a JSON document can produce.
ALL_TYPES = Kind.NULL | Kind.BOOL | Kind.NUMBER | Kind.STRING | Kind.LIST | Kind.STRUCT

_KIND_NAMES = [
    (Kind.NULL, "null"),
    (Kind.BOOL, "bool"),
    (Kind.INT, "int"),
    (Kind.FLOAT, "float"),
    (Kind.STRING, "string"),
    (Kind.BYTES, "bytes"),
    (Kind.LIST, "list"),
    (Kind.STRUCT, "struct"),
]


def kind_name(kind: Kind) -> str:
    """Return a readable name for a kind, such as "int|string"."""
    if kind == Kind.BOTTOM:
        return "_|_"
    if kind & Kind.NUMBER == Kind.NUMBER:
        names = ["number" if k == Kind.INT else n for k, n in _KIND_NAMES if kind & k and k != Kind.FLOAT]
    else:
        names = [n for k, n in _KIND_NAMES if kind & k]
    return "|".join(names)


def json_schema_types(kind: Kind) -> list[str]:
    """Map a kind to the list of JSON Schema type names it covers.

    A kind including float is reported as "number", which subsumes "integer".
    """
    types: list[str] = []
    if kind & Kind.FLOAT:
        kind &= ~Kind.NUMBER
        types.append("number")
    for k, name in [
        (Kind.NULL, "null"),
        (Kind.BOOL, "boolean"),
        (Kind.INT, "integer"),
        (Kind.STRING, "string"),
        (Kind.LIST, "array"),
        (Kind.STRUCT, "object"),
    ]:
        if kind & k:
            types.append(name)
    return types
