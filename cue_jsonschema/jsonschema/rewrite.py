"""
Rewrite passes run over generated items before they are rendered.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..values.kind import Kind
from .items import Item, ItemAllOf, ItemAnyOf, ItemConst, ItemEnum, ItemFalse, ItemTrue, ItemType, UniqueItems

_TYPE_KINDS = {
    "null": Kind.NULL,
    "boolean": Kind.BOOL,
    "integer": Kind.INT,
    "number": Kind.NUMBER,
    "string": Kind.STRING,
    "array": Kind.LIST,
    "object": Kind.STRUCT,
}


def _kinds_of(t: ItemType) -> Kind:
    k = Kind.BOTTOM
    for name in t.kinds:
        k |= _TYPE_KINDS[name]
    return k


def _type_names(k: Kind) -> tuple[str, ...]:
    names = []
    if k & Kind.NUMBER == Kind.NUMBER:
        names.append("number")
        k &= ~Kind.NUMBER
    for name, kind in _TYPE_KINDS.items():
        if name != "number" and k & kind:
            names.append(name)
    return tuple(names)


def _conjuncts(it: ItemAllOf) -> Iterator[Item]:
    for e in it.elems:
        if isinstance(e, ItemAllOf):
            yield from _conjuncts(e)
        else:
            yield e


def merge_all_of(it: Item, u: UniqueItems) -> Item:
    """Flatten nested allOf items and drop redundant members.

    Duplicates are removed, true members are dropped and several type
    members are intersected into one. A false member makes the whole
    conjunction false, and a conjunction left with one member is replaced
    by that member.
    """
    if not isinstance(it, ItemAllOf):
        return it.apply(merge_all_of, u)

    elems: list[Item] = []
    types: Kind | None = None
    type_index = -1
    for e in _conjuncts(it):
        e = merge_all_of(e, u)
        if isinstance(e, ItemFalse):
            return u.false()
        if isinstance(e, ItemTrue) or any(e is x for x in elems):
            continue
        if isinstance(e, ItemType):
            if types is None:
                types = _kinds_of(e)
                type_index = len(elems)
                elems.append(e)
            else:
                types &= _kinds_of(e)
            continue
        elems.append(e)

    if types is not None:
        if types == Kind.BOTTOM:
            return u.false()
        elems[type_index] = u.intern(ItemType(_type_names(types)))
    if not elems:
        return u.true()
    if len(elems) == 1:
        return elems[0]
    return u.intern(ItemAllOf(tuple(elems)))


def _const_kind(c: ItemConst) -> Kind:
    v = c.value
    if v is None:
        return Kind.NULL
    if isinstance(v, bool):
        return Kind.BOOL
    if isinstance(v, (int, float)):
        return Kind.NUMBER
    if isinstance(v, str):
        return Kind.STRING
    if isinstance(v, list):
        return Kind.LIST
    return Kind.STRUCT


def enum_from_const(it: Item, u: UniqueItems) -> Item:
    """Replace an anyOf made only of constants of the same kind by an enum."""
    if isinstance(it, ItemAnyOf) and it.elems and all(isinstance(e, ItemConst) for e in it.elems):
        if len({_const_kind(e) for e in it.elems}) == 1:
            literals: list[str] = []
            for e in it.elems:
                if e.literal not in literals:
                    literals.append(e.literal)
            return u.intern(ItemEnum(tuple(literals)))
    return it.apply(enum_from_const, u)
