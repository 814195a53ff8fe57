#!/usr/bin/env python3

import click
import pytest

from cue_jsonschema.cli import extract_command
from cue_jsonschema.cli_utils import generation_comment, reconstruct_command_line


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        # Since there's no active Click context in tests, this should return fallback
        result = reconstruct_command_line(extract_command)
        assert result == "cue_jsonschema"

    def test_generation_comment_without_context(self):
        assert generation_comment(extract_command, "1.2.3") == "Generated by cue_jsonschema v1.2.3 : cue_jsonschema"

    def test_reconstruct_command_line_with_context(self, tmp_path):
        """Test that arguments and non-default options are reconstructed"""
        schema = tmp_path / "schema.json"
        schema.write_text("{}")
        params = {
            "config": None,
            "pkg_name": "schemas",
            "schema_id": "",
            "root": "",
            "single_root": False,
            "default_version": None,
            "strict": True,
            "strict_keywords": False,
            "strict_features": False,
            "open_only_when_explicit": False,
            "path": str(schema),
            "output": None,
        }
        with click.Context(extract_command) as ctx:
            ctx.params.update(params)
            result = reconstruct_command_line(extract_command)
        assert result == "cue_jsonschema extract schema.json --pkg schemas --strict"


if __name__ == "__main__":
    pytest.main([__file__])
