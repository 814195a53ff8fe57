#!/usr/bin/env python3

import json

import pytest
from click.testing import CliRunner

from cue_jsonschema import __version__
from cue_jsonschema.cli import cue_jsonschema, load_extract_config
from cue_jsonschema.jsonschema import Version

SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {"name": {"type": "string", "minLength": 1}},
    "required": ["name"],
    "additionalProperties": False,
}


@pytest.fixture
def runner():
    return CliRunner()


def write_json(path, data):
    with open(path, "w") as f:
        json.dump(data, f)


class TestExtractCommand:
    """The extract command"""

    def test_stdout(self, runner):
        with runner.isolated_filesystem():
            write_json("schema.json", SCHEMA)
            result = runner.invoke(cue_jsonschema, ["extract", "schema.json"])
            assert result.exit_code == 0, result.output
            assert result.output.startswith(f"// Generated by cue_jsonschema v{__version__} : cue_jsonschema extract schema.json\n")
            assert 'import "strings"' in result.output
            assert "name!: strings.MinRunes(1)" in result.output

    def test_output_file(self, runner):
        with runner.isolated_filesystem():
            write_json("schema.json", SCHEMA)
            result = runner.invoke(cue_jsonschema, ["extract", "--pkg", "schemas", "schema.json", "schema.cue"])
            assert result.exit_code == 0, result.output
            with open("schema.cue") as f:
                out = f.read()
            assert "package schemas" in out
            assert "--pkg schemas" in out.splitlines()[0]

    def test_root_and_version(self, runner):
        doc = {"components": {"schemas": {"Pet": {"type": "string", "nullable": True}}}}
        with runner.isolated_filesystem():
            write_json("api.json", doc)
            result = runner.invoke(cue_jsonschema, ["extract", "--root", "#/components/schemas", "--version", "openapi", "api.json"])
            assert result.exit_code == 0, result.output
            assert "#Pet: null | string" in result.output

    def test_config_file(self, runner):
        with runner.isolated_filesystem():
            write_json("schema.json", {"type": "string", "foo": 1})
            write_json("config.json", {"pkg_name": "fromconfig", "strict_keywords": True})
            result = runner.invoke(cue_jsonschema, ["extract", "--config", "config.json", "schema.json"])
            assert result.exit_code == 1
            assert "unknown keyword 'foo'" in result.output

    def test_errors(self, runner):
        with runner.isolated_filesystem():
            write_json("bad.json", {"properties": {"a": {"type": "foo"}, "b": {"minLength": -1}}})
            result = runner.invoke(cue_jsonschema, ["extract", "bad.json"])
            assert result.exit_code == 1
            assert "bad.json:/properties/a/type: unknown type 'foo'" in result.output
            assert "bad.json:/properties/b/minLength: invalid uint" in result.output

    def test_strict(self, runner):
        with runner.isolated_filesystem():
            write_json("schema.json", {"type": "object", "dependentRequired": {"a": ["b"]}})
            assert runner.invoke(cue_jsonschema, ["extract", "schema.json"]).exit_code == 0
            result = runner.invoke(cue_jsonschema, ["extract", "--strict", "schema.json"])
            assert result.exit_code == 1
            assert "not yet implemented" in result.output

    def test_missing_file(self, runner):
        result = runner.invoke(cue_jsonschema, ["extract", "does-not-exist.json"])
        assert result.exit_code != 0


class TestRoundtripCommand:
    """The roundtrip command"""

    def test_roundtrip(self, runner):
        with runner.isolated_filesystem():
            write_json("schema.json", SCHEMA)
            result = runner.invoke(cue_jsonschema, ["roundtrip", "schema.json"])
            assert result.exit_code == 0, result.output
            data = json.loads(result.output)
            assert data["$schema"] == "https://json-schema.org/draft/2020-12/schema"
            assert data["required"] == ["name"]
            assert data["additionalProperties"] is False
            assert data["properties"]["name"] == {"type": "string", "minLength": 1}

    def test_roundtrip_to_file(self, runner):
        with runner.isolated_filesystem():
            write_json("schema.json", {"enum": ["a", "b"]})
            result = runner.invoke(cue_jsonschema, ["roundtrip", "schema.json", "out.json"])
            assert result.exit_code == 0, result.output
            with open("out.json") as f:
                assert json.load(f)["enum"] == ["a", "b"]


class TestLoadExtractConfig:
    """Merging of the config file and command line options"""

    def test_defaults(self):
        cfg = load_extract_config(None, pkg_name="", strict=False, default_version=None)
        assert cfg.pkg_name == ""
        assert cfg.strict is False
        assert cfg.default_version == Version.DRAFT2020_12

    def test_options_override_file(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"pkg_name": "a", "root": "#/definitions", "default_version": "draft7"})
        cfg = load_extract_config(str(path), pkg_name="b", root="", default_version=None)
        assert cfg.pkg_name == "b"
        assert cfg.root == "#/definitions"
        assert cfg.default_version == Version.DRAFT7

    def test_version_name(self):
        cfg = load_extract_config(None, default_version="k8sCRD")
        assert cfg.default_version == Version.KUBERNETES_CRD


def test_version_option(runner):
    result = runner.invoke(cue_jsonschema, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


if __name__ == "__main__":
    pytest.main([__file__])
