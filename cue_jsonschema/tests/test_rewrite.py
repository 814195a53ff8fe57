#!/usr/bin/env python3

import pytest

from cue_jsonschema.jsonschema.items import (
    BoundOp,
    ItemAnyOf,
    ItemContains,
    ItemEnum,
    ItemLengthBounds,
    ItemNot,
    ItemPattern,
    ItemProperties,
    UniqueItems,
    make_schema_dict,
)
from cue_jsonschema.jsonschema.rewrite import enum_from_const, merge_all_of


@pytest.fixture
def u():
    return UniqueItems()


class TestUniqueItems:
    """Interning of items"""

    def test_equal_items_are_identical(self, u):
        assert u.const("a") is u.const("a")
        assert u.type("string") is u.type("string")
        assert u.all_of(u.type("string"), u.const("a")) is u.all_of(u.type("string"), u.const("a"))

    def test_integer_and_float_constants_differ(self, u):
        assert u.const(1) is not u.const(1.0)

    def test_object_constants_ignore_key_order(self, u):
        assert u.const({"a": 1, "b": 2}) is u.const({"b": 2, "a": 1})


class TestMergeAllOf:
    """Simplification of allOf items"""

    def test_type_intersection(self, u):
        merged = merge_all_of(u.all_of(u.type("string", "number"), u.type("number")), u)
        assert merged is u.type("number")

    def test_integer_within_number(self, u):
        merged = merge_all_of(u.all_of(u.type("integer"), u.type("number")), u)
        assert merged is u.type("integer")

    def test_empty_type_intersection_is_false(self, u):
        assert merge_all_of(u.all_of(u.type("string"), u.type("integer")), u) is u.false()

    def test_false_member(self, u):
        pattern = u.intern(ItemPattern("^a"))
        assert merge_all_of(u.all_of(pattern, u.false()), u) is u.false()

    def test_true_members_dropped(self, u):
        pattern = u.intern(ItemPattern("^a"))
        assert merge_all_of(u.all_of(u.true(), pattern, u.true()), u) is pattern

    def test_all_true_is_true(self, u):
        assert merge_all_of(u.all_of(u.true(), u.true()), u) is u.true()

    def test_nested_and_duplicate_members(self, u):
        p = u.intern(ItemPattern("^a"))
        q = u.intern(ItemLengthBounds(BoundOp.GREATER_THAN_EQUAL, 1))
        merged = merge_all_of(u.all_of(p, u.all_of(p, q)), u)
        assert merged is u.all_of(p, q)

    def test_type_keeps_its_position(self, u):
        p = u.intern(ItemPattern("^a"))
        merged = merge_all_of(u.all_of(p, u.type("string", "null"), u.type("string")), u)
        assert merged.elems == (p, u.type("string"))

    def test_rewrites_below_other_items(self, u):
        inner = u.all_of(u.type("string"), u.true())
        merged = merge_all_of(u.not_(inner), u)
        assert isinstance(merged, ItemNot)
        assert merged.elem is u.type("string")

    def test_idempotent(self, u):
        p = u.intern(ItemPattern("^a"))
        item = u.any_of(u.all_of(u.type("string"), u.all_of(p, u.true())), u.const(1))
        once = merge_all_of(item, u)
        assert merge_all_of(once, u) is once


class TestEnumFromConst:
    """Replacement of constant disjunctions by enums"""

    def test_same_kind_constants(self, u):
        it = enum_from_const(u.any_of(u.const("a"), u.const("b")), u)
        assert isinstance(it, ItemEnum)
        assert it.values == ["a", "b"]
        assert it.generate() == {"enum": ["a", "b"]}

    def test_integers_and_floats_are_one_kind(self, u):
        it = enum_from_const(u.any_of(u.const(1), u.const(2.5)), u)
        assert it.values == [1, 2.5]

    def test_mixed_kinds_are_kept(self, u):
        item = u.any_of(u.const("a"), u.const(1))
        assert enum_from_const(item, u) is item

    def test_non_constant_member(self, u):
        item = u.any_of(u.const("a"), u.type("integer"))
        assert isinstance(enum_from_const(item, u), ItemAnyOf)

    def test_nested(self, u):
        it = enum_from_const(u.not_(u.any_of(u.const(1), u.const(2))), u)
        assert it.generate() == {"not": {"enum": [1, 2]}}

    def test_idempotent(self, u):
        once = enum_from_const(u.all_of(u.type("string"), u.any_of(u.const("a"), u.const("b"))), u)
        assert enum_from_const(once, u) is once


class TestAllOfGeneration:
    """Merging of allOf members into a single schema object"""

    def test_independent_keywords_are_merged(self, u):
        item = u.all_of(u.type("string"), u.intern(ItemLengthBounds(BoundOp.GREATER_THAN_EQUAL, 1)))
        assert item.generate() == {"type": "string", "minLength": 1}

    def test_properties_and_pattern_properties_stay_apart(self, u):
        props = u.intern(ItemProperties(properties=(("a", u.true()),)))
        patterns = u.intern(ItemProperties(patterns=(("^x", u.type("string")),)))
        assert u.all_of(props, patterns).generate() == {
            "allOf": [{"patternProperties": {"^x": {"type": "string"}}}, {"properties": {"a": True}}]
        }

    def test_contains_stay_apart(self, u):
        a = u.intern(ItemContains(u.type("string")))
        b = u.intern(ItemContains(u.type("integer"), 2))
        assert u.all_of(a, b).generate() == {
            "allOf": [{"contains": {"type": "integer"}, "minContains": 2}, {"contains": {"type": "string"}}]
        }

    def test_false_member(self, u):
        assert u.all_of(u.type("string"), u.false()).generate() is False

    def test_keyword_order(self):
        d = make_schema_dict([("required", ["a"]), ("properties", {}), ("type", "object"), ("$schema", "x")])
        assert list(d) == ["$schema", "type", "properties", "required"]


if __name__ == "__main__":
    pytest.main([__file__])
