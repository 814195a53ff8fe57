"""
Intermediate representation used when generating JSON Schema.

Each item stands for one JSON Schema constraint or structure. Items are
immutable and interned through UniqueItems, so that two items describing
the same constraint are the same object and can be compared by identity.
Rewrite passes traverse items generically through children and apply.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from jsonpointer import escape

# Sets of keywords that interact with one another, and so must not be
# merged with keywords of the same group coming from another schema.
KEYWORD_GROUPS: list[tuple[str, ...]] = [
    ("properties", "patternProperties", "additionalProperties"),
    ("contains", "maxContains", "minContains"),
    ("items", "additionalItems", "prefixItems"),
    ("if", "then", "else"),
]

# Maps a keyword to the keywords of its group, including itself.
KEYWORD_INTERACTIONS: dict[str, tuple[str, ...]] = {k: group for group in KEYWORD_GROUPS for k in group}

_LABEL_PRIORITY: dict[str, int] = {"$schema": 0, "$defs": 1, "type": 2}
for _i, _group in enumerate(KEYWORD_GROUPS):
    for _name in _group:
        _LABEL_PRIORITY[_name] = 3 + _i + 1


def label_priority(name: str) -> int:
    """Return the sort rank of a keyword. Unlisted keywords sort last, lexically."""
    return _LABEL_PRIORITY.get(name, 1000)


def make_schema_dict(fields: list[tuple[str, Any]]) -> dict[str, Any]:
    """Build a schema object with keywords in schema-centric order."""
    return dict(sorted(fields, key=lambda f: (label_priority(f[0]), f[0])))


def single_keyword(name: str, value: Any) -> dict[str, Any]:
    return {name: value}


class BoundOp(str, Enum):
    """Comparison of a bound against the constrained value."""

    LESS_THAN = "<"
    LESS_THAN_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_EQUAL = ">="


ApplyFunc = Callable[["Item", "UniqueItems"], "Item"]


class Item:
    """Base class of the IR items."""

    def children(self) -> Iterator[Item]:
        return iter(())

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        """Return the item with f applied to each direct child.

        f is not called on the item itself. The item is returned unchanged
        when f leaves every child as it was.
        """
        return self

    def key(self) -> tuple:
        """Return the hashable identity of the item, with child items reduced to their id."""
        return ()

    def generate(self) -> Any:
        """Render the item as JSON Schema data: True, False or a schema object."""
        raise NotImplementedError


def _ids(items: tuple[Item, ...]) -> tuple[int, ...]:
    return tuple(id(i) for i in items)


def _opt_id(item: Item | None) -> int | None:
    return None if item is None else id(item)


def _apply_elems(elems: tuple[Item, ...], f: ApplyFunc, u: UniqueItems) -> tuple[tuple[Item, ...], bool]:
    result = tuple(f(e, u) for e in elems)
    changed = any(a is not b for a, b in zip(result, elems))
    return (result if changed else elems), changed


@dataclass(frozen=True, eq=False)
class ItemTrue(Item):
    """Accepts any value."""

    def generate(self) -> Any:
        return True


@dataclass(frozen=True, eq=False)
class ItemFalse(Item):
    """Accepts no value."""

    def generate(self) -> Any:
        return False


@dataclass(frozen=True, eq=False)
class _Elements(Item):
    elems: tuple[Item, ...] = ()

    def children(self) -> Iterator[Item]:
        return iter(self.elems)

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        elems, changed = _apply_elems(self.elems, f, u)
        if not changed:
            return self
        return u.intern(type(self)(elems=elems))

    def key(self) -> tuple:
        return _ids(self.elems)


@dataclass(frozen=True, eq=False)
class ItemAllOf(_Elements):
    def generate(self) -> Any:
        # A schema object is itself a conjunction, so sibling objects can be
        # merged as long as they share no keyword and no interacting keyword.
        unmerged: list[Any] = []
        final_fields: list[tuple[str, Any]] = []
        final_names: set[str] = set()
        for e in self.elems:
            data = e.generate()
            if data is True:
                continue
            if data is False:
                return False
            if not isinstance(data, dict):
                raise TypeError(f"unexpected schema in allOf: {data!r}")
            avoid_merging = any(
                name in final_names or any(k in final_names for k in KEYWORD_INTERACTIONS.get(name, ())) for name in data
            )
            if avoid_merging:
                unmerged.append(data)
                continue
            for name, value in data.items():
                final_names.add(name)
                final_fields.append((name, value))

        if not unmerged:
            return make_schema_dict(final_fields)
        if final_fields:
            unmerged.append(make_schema_dict(final_fields))
        return single_keyword("allOf", unmerged)


@dataclass(frozen=True, eq=False)
class ItemAnyOf(_Elements):
    def generate(self) -> Any:
        return single_keyword("anyOf", [e.generate() for e in self.elems])


@dataclass(frozen=True, eq=False)
class ItemOneOf(_Elements):
    def generate(self) -> Any:
        return single_keyword("oneOf", [e.generate() for e in self.elems])


@dataclass(frozen=True, eq=False)
class ItemNot(Item):
    elem: Item

    def children(self) -> Iterator[Item]:
        yield self.elem

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        elem = f(self.elem, u)
        if elem is self.elem:
            return self
        return u.intern(ItemNot(elem))

    def key(self) -> tuple:
        return (id(self.elem),)

    def generate(self) -> Any:
        return single_keyword("not", self.elem.generate())


@dataclass(frozen=True, eq=False)
class ItemConst(Item):
    """A constant value, held in canonical JSON text form."""

    literal: str

    @staticmethod
    def of(value: Any) -> ItemConst:
        return ItemConst(_canonical(value))

    @property
    def value(self) -> Any:
        return json.loads(self.literal)

    def key(self) -> tuple:
        return (self.literal,)

    def generate(self) -> Any:
        return single_keyword("const", self.value)


@dataclass(frozen=True, eq=False)
class ItemEnum(Item):
    """A set of allowed values, each held in canonical JSON text form."""

    literals: tuple[str, ...]

    @property
    def values(self) -> list[Any]:
        return [json.loads(v) for v in self.literals]

    def key(self) -> tuple:
        return self.literals

    def generate(self) -> Any:
        return single_keyword("enum", self.values)


@dataclass(frozen=True, eq=False)
class ItemRef(Item):
    """A reference to an entry in $defs."""

    name: str

    def key(self) -> tuple:
        return (self.name,)

    def generate(self) -> Any:
        return single_keyword("$ref", "#/$defs/" + escape(self.name))


@dataclass(frozen=True, eq=False)
class ItemType(Item):
    kinds: tuple[str, ...]

    def key(self) -> tuple:
        return self.kinds

    def generate(self) -> Any:
        if len(self.kinds) == 1:
            return single_keyword("type", self.kinds[0])
        return single_keyword("type", list(self.kinds))


@dataclass(frozen=True, eq=False)
class ItemFormat(Item):
    format: str

    def key(self) -> tuple:
        return (self.format,)

    def generate(self) -> Any:
        return single_keyword("format", self.format)


@dataclass(frozen=True, eq=False)
class ItemPattern(Item):
    regexp: str

    def key(self) -> tuple:
        return (self.regexp,)

    def generate(self) -> Any:
        return single_keyword("pattern", self.regexp)


_BOUND_KEYWORDS = {
    BoundOp.LESS_THAN: "exclusiveMaximum",
    BoundOp.LESS_THAN_EQUAL: "maximum",
    BoundOp.GREATER_THAN: "exclusiveMinimum",
    BoundOp.GREATER_THAN_EQUAL: "minimum",
}


@dataclass(frozen=True, eq=False)
class ItemBounds(Item):
    """A numeric bound. Integral operands stay integers in the output."""

    op: BoundOp
    n: int | float

    def key(self) -> tuple:
        return (self.op, type(self.n), self.n)

    def generate(self) -> Any:
        return single_keyword(_BOUND_KEYWORDS[self.op], self.n)


@dataclass(frozen=True, eq=False)
class ItemMultipleOf(Item):
    n: int | float

    def key(self) -> tuple:
        return (type(self.n), self.n)

    def generate(self) -> Any:
        return single_keyword("multipleOf", self.n)


@dataclass(frozen=True, eq=False)
class _CountBounds(Item):
    op: BoundOp
    n: int

    min_keyword = ""
    max_keyword = ""

    def key(self) -> tuple:
        return (self.op, self.n)

    def generate(self) -> Any:
        if self.op == BoundOp.LESS_THAN_EQUAL:
            return single_keyword(self.max_keyword, self.n)
        if self.op == BoundOp.GREATER_THAN_EQUAL:
            return single_keyword(self.min_keyword, self.n)
        raise ValueError(f"unexpected constraint {self.op.value} in {type(self).__name__}")


@dataclass(frozen=True, eq=False)
class ItemLengthBounds(_CountBounds):
    """Bounds on the number of characters in a string."""

    min_keyword = "minLength"
    max_keyword = "maxLength"


@dataclass(frozen=True, eq=False)
class ItemItemsBounds(_CountBounds):
    """Bounds on the number of elements in an array."""

    min_keyword = "minItems"
    max_keyword = "maxItems"


@dataclass(frozen=True, eq=False)
class ItemPropertyBounds(_CountBounds):
    """Bounds on the number of properties in an object."""

    min_keyword = "minProperties"
    max_keyword = "maxProperties"


@dataclass(frozen=True, eq=False)
class ItemUniqueItems(Item):
    def generate(self) -> Any:
        return single_keyword("uniqueItems", True)


@dataclass(frozen=True, eq=False)
class ItemItems(Item):
    """prefixItems and items of an array.

    rest constrains the elements after the prefix; None leaves them
    unconstrained.
    """

    prefix: tuple[Item, ...] = ()
    rest: Item | None = None

    def children(self) -> Iterator[Item]:
        yield from self.prefix
        if self.rest is not None:
            yield self.rest

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        prefix, changed = _apply_elems(self.prefix, f, u)
        rest = self.rest if self.rest is None else f(self.rest, u)
        if not changed and rest is self.rest:
            return self
        return u.intern(ItemItems(prefix, rest))

    def key(self) -> tuple:
        return (_ids(self.prefix), _opt_id(self.rest))

    def generate(self) -> Any:
        fields: list[tuple[str, Any]] = []
        if self.prefix:
            fields.append(("prefixItems", [e.generate() for e in self.prefix]))
        if self.rest is not None:
            fields.append(("items", self.rest.generate()))
        return make_schema_dict(fields)


@dataclass(frozen=True, eq=False)
class ItemContains(Item):
    elem: Item
    min: int | None = None
    max: int | None = None

    def children(self) -> Iterator[Item]:
        yield self.elem

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        elem = f(self.elem, u)
        if elem is self.elem:
            return self
        return u.intern(ItemContains(elem, self.min, self.max))

    def key(self) -> tuple:
        return (id(self.elem), self.min, self.max)

    def generate(self) -> Any:
        fields: list[tuple[str, Any]] = [("contains", self.elem.generate())]
        if self.min is not None:
            fields.append(("minContains", self.min))
        if self.max is not None:
            fields.append(("maxContains", self.max))
        return make_schema_dict(fields)


@dataclass(frozen=True, eq=False)
class ItemPropertyNames(Item):
    elem: Item

    def children(self) -> Iterator[Item]:
        yield self.elem

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        elem = f(self.elem, u)
        if elem is self.elem:
            return self
        return u.intern(ItemPropertyNames(elem))

    def key(self) -> tuple:
        return (id(self.elem),)

    def generate(self) -> Any:
        return single_keyword("propertyNames", self.elem.generate())


@dataclass(frozen=True, eq=False)
class ItemProperties(Item):
    """Properties of an object and the keywords that interact with them.

    properties and patterns are kept sorted by name.
    """

    properties: tuple[tuple[str, Item], ...] = ()
    required: tuple[str, ...] = ()
    additional: Item | None = None
    patterns: tuple[tuple[str, Item], ...] = ()

    def children(self) -> Iterator[Item]:
        for _, it in self.properties:
            yield it
        if self.additional is not None:
            yield self.additional
        for _, it in self.patterns:
            yield it

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        properties = tuple((name, f(it, u)) for name, it in self.properties)
        patterns = tuple((name, f(it, u)) for name, it in self.patterns)
        additional = self.additional if self.additional is None else f(self.additional, u)
        changed = (
            additional is not self.additional
            or any(a[1] is not b[1] for a, b in zip(properties, self.properties))
            or any(a[1] is not b[1] for a, b in zip(patterns, self.patterns))
        )
        if not changed:
            return self
        return u.intern(ItemProperties(properties, self.required, additional, patterns))

    def key(self) -> tuple:
        return (
            tuple((name, id(it)) for name, it in self.properties),
            self.required,
            _opt_id(self.additional),
            tuple((name, id(it)) for name, it in self.patterns),
        )

    def generate(self) -> Any:
        fields: list[tuple[str, Any]] = []
        if self.properties:
            fields.append(("properties", {name: it.generate() for name, it in self.properties}))
        if self.required:
            fields.append(("required", list(self.required)))
        if self.additional is not None:
            fields.append(("additionalProperties", self.additional.generate()))
        if self.patterns:
            fields.append(("patternProperties", {name: it.generate() for name, it in self.patterns}))
        return make_schema_dict(fields)


@dataclass(frozen=True, eq=False)
class ItemIfThenElse(Item):
    if_elem: Item
    then_elem: Item | None = None
    else_elem: Item | None = None

    def children(self) -> Iterator[Item]:
        yield self.if_elem
        if self.then_elem is not None:
            yield self.then_elem
        if self.else_elem is not None:
            yield self.else_elem

    def apply(self, f: ApplyFunc, u: UniqueItems) -> Item:
        if_elem = f(self.if_elem, u)
        then_elem = self.then_elem if self.then_elem is None else f(self.then_elem, u)
        else_elem = self.else_elem if self.else_elem is None else f(self.else_elem, u)
        if if_elem is self.if_elem and then_elem is self.then_elem and else_elem is self.else_elem:
            return self
        return u.intern(ItemIfThenElse(if_elem, then_elem, else_elem))

    def key(self) -> tuple:
        return (id(self.if_elem), _opt_id(self.then_elem), _opt_id(self.else_elem))

    def generate(self) -> Any:
        fields: list[tuple[str, Any]] = [("if", self.if_elem.generate())]
        if self.then_elem is not None:
            fields.append(("then", self.then_elem.generate()))
        if self.else_elem is not None:
            fields.append(("else", self.else_elem.generate()))
        return make_schema_dict(fields)


class UniqueItems:
    """Interns items so that equal items are represented by a single object.

    Children must already be interned: the key of an item refers to its
    children by identity. The store keeps every item alive for its own
    lifetime, so identities are never reused.
    """

    def __init__(self):
        self._items: dict[tuple, Item] = {}

    def intern(self, it: Item) -> Item:
        key = (type(it),) + it.key()
        return self._items.setdefault(key, it)

    def __len__(self) -> int:
        return len(self._items)

    # Shorthands used while building items.

    def true(self) -> Item:
        return self.intern(ItemTrue())

    def false(self) -> Item:
        return self.intern(ItemFalse())

    def all_of(self, *elems: Item) -> Item:
        return self.intern(ItemAllOf(tuple(elems)))

    def any_of(self, *elems: Item) -> Item:
        return self.intern(ItemAnyOf(tuple(elems)))

    def one_of(self, *elems: Item) -> Item:
        return self.intern(ItemOneOf(tuple(elems)))

    def not_(self, elem: Item) -> Item:
        return self.intern(ItemNot(elem))

    def type(self, *kinds: str) -> Item:
        return self.intern(ItemType(tuple(kinds)))

    def const(self, value: Any) -> Item:
        return self.intern(ItemConst.of(value))


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def walk_items(it: Item) -> Iterator[Item]:
    """Yield it and every item below it, depth first."""
    yield it
    for c in it.children():
        yield from walk_items(c)
