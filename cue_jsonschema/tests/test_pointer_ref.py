#!/usr/bin/env python3

import pytest

from cue_jsonschema.jsonschema.pointer import (
    cue_path_to_json_pointer,
    json_pointer_from_tokens,
    json_pointer_tokens,
    lookup_json_pointer,
    split_fragment,
)
from cue_jsonschema.jsonschema.ref import (
    SchemaLoc,
    default_map,
    default_map_ref,
    default_map_url,
    parse_root_ref,
    resolve_reference,
    same_schema_root,
)
from cue_jsonschema.values import Path, Selector


class TestJsonPointer:
    """JSON Pointer tokens and lookups"""

    @pytest.mark.parametrize(
        "pointer,tokens",
        [
            ("", []),
            ("/a/b", ["a", "b"]),
            ("a/b", ["a", "b"]),
            ("/a~1b/c~0d", ["a/b", "c~d"]),
            ("/", [""]),
        ],
    )
    def test_tokens(self, pointer, tokens):
        assert json_pointer_tokens(pointer) == tokens

    def test_escaping(self):
        assert json_pointer_from_tokens(["a/b", "c~d"]) == "/a~1b/c~0d"
        assert json_pointer_from_tokens([]) == ""

    def test_anchor_fragment(self):
        with pytest.raises(ValueError, match="anchors"):
            split_fragment("foo")

    def test_lookup(self):
        data = {"a": [{"b": 1}, {"c": 2}]}
        assert lookup_json_pointer(data, ["a", "1", "c"]) == ("a", 1, "c")
        assert lookup_json_pointer(data, []) == ()

    @pytest.mark.parametrize("tokens", [["x"], ["a", "2"], ["a", "01"], ["a", "-"], ["a", "0", "b", "c"]])
    def test_lookup_missing(self, tokens):
        assert lookup_json_pointer({"a": [{"b": 1}]}, tokens) is None

    def test_lookup_does_not_index_strings(self):
        assert lookup_json_pointer({"a": "xyz"}, ["a", "0"]) is None

    def test_cue_path(self):
        path = Path.make(Selector.string("properties"), Selector.string("a/b"), Selector.index(0))
        assert cue_path_to_json_pointer(path) == "/properties/a~1b/0"
        with pytest.raises(ValueError):
            cue_path_to_json_pointer(Path.make(Selector.definition("#foo")))


class TestRoot:
    """The root configuration value"""

    @pytest.mark.parametrize(
        "root,tokens",
        [
            ("#/components/schemas", ["components", "schemas"]),
            ("#/components/schemas/", ["components", "schemas"]),
            ("#/$defs", ["$defs"]),
        ],
    )
    def test_parse(self, root, tokens):
        assert parse_root_ref(root) == tokens

    def test_external(self):
        with pytest.raises(ValueError):
            parse_root_ref("other.json#/definitions")


class TestMapping:
    """Mapping of schema locations to CUE paths and import paths"""

    @pytest.mark.parametrize(
        "tokens,expected",
        [
            ([], ""),
            (["$defs", "foo"], "#foo"),
            (["definitions", "foo"], "#foo"),
            (["$defs", "foo-bar"], '#."foo-bar"'),
            (["$defs", "_hidden"], '#."_hidden"'),
            (["properties", "a"], '_#defs."/properties/a"'),
            (["$defs", "foo", "properties", "b"], '_#defs."/$defs/foo/properties/b"'),
        ],
    )
    def test_default_map(self, tokens, expected):
        assert str(default_map(tokens)) == expected

    def test_default_map_with_root(self):
        root = ["components", "schemas"]
        assert str(default_map(["components", "schemas", "Pet"], root_tokens=root)) == "#Pet"
        assert str(default_map(["components", "responses", "Pet"], root_tokens=root)) == '_#defs."/components/responses/Pet"'

    @pytest.mark.parametrize(
        "uri,import_path",
        [
            ("https://example.com/foo", "example.com/foo"),
            ("https://example.com/foo.json", "example.com/foo.json:foo"),
            ("https://example.com/schemas/foo-bar.json", "example.com/schemas/foo-bar.json:schema"),
            ("https://example.com/", "example.com/:schema"),
        ],
    )
    def test_default_map_url(self, uri, import_path):
        assert default_map_url(uri) == (import_path, Path())

    def test_opaque_uri(self):
        import_path, path = default_map_url("urn:example:schema")
        assert "/" not in import_path
        assert "=" not in import_path
        assert path == Path()

    def test_default_map_ref_external(self):
        loc = SchemaLoc(id="https://example.com/foo.json#/$defs/bar")
        assert default_map_ref(loc) == ("example.com/foo.json:foo", Path.make(Selector.definition("#bar")))

    def test_default_map_ref_local(self):
        loc = SchemaLoc(
            id="https://example.com/root.json#/$defs/bar",
            is_local=True,
            path=Path.make(Selector.string("$defs"), Selector.string("bar")),
        )
        assert default_map_ref(loc) == ("", Path.make(Selector.definition("#bar")))

    def test_loc_string(self):
        assert str(SchemaLoc(id="https://example.com/x")) == "id=https://example.com/x"


class TestURIs:
    def test_resolve(self):
        assert resolve_reference("https://example.com/a/b.json", "c.json") == "https://example.com/a/c.json"
        assert resolve_reference("https://example.com/a/b.json", "#/$defs/x") == "https://example.com/a/b.json#/$defs/x"

    def test_same_schema_root(self):
        assert same_schema_root("https://example.com/a.json#/x", "https://example.com/a.json")
        assert not same_schema_root("https://example.com/a.json", "https://example.com/b.json")


if __name__ == "__main__":
    pytest.main([__file__])
