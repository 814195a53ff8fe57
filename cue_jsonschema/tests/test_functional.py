"""
Functional tests for schema extraction.

Each case in test_data/functional/*_tests.json gives a JSON Schema, an
optional extraction config and fragments expected in the CUE output. Cases
with expected_roundtrip also translate the result back to JSON Schema and
compare the keywords listed there.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cue_jsonschema.cue_ast import format_node
from cue_jsonschema.jsonschema import ExtractConfig, extract, generate
from cue_jsonschema.values import ExprValue

TEST_DATA_DIR = Path(__file__).parent / "test_data"


def load_all_test_cases():
    """Load all test cases from all JSON files in test_data/functional directory."""
    functional_dir = TEST_DATA_DIR / "functional"
    test_cases = []

    for json_file in sorted(functional_dir.glob("*_tests.json")):
        with open(json_file) as f:
            data = json.load(f)

        for test_case in data:
            test_case["_source_file"] = json_file.name
            test_cases.append(test_case)

    return test_cases


def _extract(schema, config_dict):
    config = ExtractConfig.from_dict(config_dict or {})
    return extract(schema, config)


@pytest.mark.parametrize("test_case", load_all_test_cases(), ids=lambda c: c["name"])
def test_functional_extraction(test_case):
    """Unified test for all JSON test cases using a single pattern."""
    schema = test_case["schema"]
    config = test_case.get("config", {})

    f = _extract(schema, config)
    generated = format_node(f)

    for expected in test_case.get("expected_contains", []):
        assert expected in generated, f"Expected pattern '{expected}' not found in output:\n{generated}"

    for unexpected in test_case.get("expected_not_contains", []):
        assert unexpected not in generated, f"Unexpected pattern '{unexpected}' found in output:\n{generated}"

    if "expected_roundtrip" in test_case:
        result = generate(ExprValue.from_file(f))
        assert result["$schema"] == "https://json-schema.org/draft/2020-12/schema"
        for keyword, value in test_case["expected_roundtrip"].items():
            assert result.get(keyword) == value, f"Keyword '{keyword}' differs in {json.dumps(result)}"


def test_extraction_is_deterministic():
    for test_case in load_all_test_cases():
        first = format_node(_extract(test_case["schema"], test_case.get("config")))
        second = format_node(_extract(test_case["schema"], test_case.get("config")))
        assert first == second, test_case["name"]


if __name__ == "__main__":
    pytest.main([__file__])
