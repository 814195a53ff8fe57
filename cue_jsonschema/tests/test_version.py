#!/usr/bin/env python3

import pytest

from cue_jsonschema.jsonschema.constraints import CONSTRAINTS, NUM_PHASES
from cue_jsonschema.jsonschema.constraints.string import FORMATS
from cue_jsonschema.jsonschema.version import (
    ALL_VERSIONS,
    K8S,
    OPENAPI,
    OPENAPI_LIKE,
    Version,
    parse_version,
    vfrom,
    vset,
    vto,
)


class TestParseVersion:
    """Recognition of $schema URIs and version names"""

    @pytest.mark.parametrize(
        "uri,expected",
        [
            ("http://json-schema.org/draft-04/schema#", Version.DRAFT4),
            ("http://json-schema.org/draft-04/schema", Version.DRAFT4),
            ("https://json-schema.org/draft-06/schema#", Version.DRAFT6),
            ("http://json-schema.org/draft-07/schema#", Version.DRAFT7),
            ("https://json-schema.org/draft/2019-09/schema", Version.DRAFT2019_09),
            ("http://json-schema.org/draft/2019-09/schema#", Version.DRAFT2019_09),
            ("https://json-schema.org/draft/2020-12/schema", Version.DRAFT2020_12),
            ("draft7", Version.DRAFT7),
            ("openapi", Version.OPENAPI),
            ("k8sAPI", Version.KUBERNETES_API),
            ("k8sCRD", Version.KUBERNETES_CRD),
        ],
    )
    def test_known(self, uri, expected):
        assert parse_version(uri) == expected

    @pytest.mark.parametrize("uri", ["", "unknown", "http://example.com/schema", "https://json-schema.org/draft/2021-01/schema"])
    def test_unknown(self, uri):
        with pytest.raises(ValueError):
            parse_version(uri)

    def test_string_form(self):
        assert str(Version.DRAFT2020_12) == "https://json-schema.org/draft/2020-12/schema"
        assert str(Version.UNKNOWN) == "unknown"

    def test_cli_names_round_trip(self):
        for v in Version:
            if v != Version.UNKNOWN:
                assert parse_version(v.cli_name) == v


class TestVersionSets:
    """Sets of versions keywords apply to"""

    def test_ranges(self):
        assert vfrom(Version.DRAFT7).contains(Version.DRAFT2020_12)
        assert not vfrom(Version.DRAFT7).contains(Version.DRAFT6)
        assert vto(Version.DRAFT7).contains(Version.DRAFT4)
        assert not vto(Version.DRAFT7).contains(Version.DRAFT2019_09)

    def test_dialects_are_not_drafts(self):
        for v in (Version.OPENAPI, Version.KUBERNETES_API, Version.KUBERNETES_CRD):
            assert not ALL_VERSIONS.contains(v)
            assert not vfrom(Version.DRAFT4).contains(v)
            assert OPENAPI_LIKE.contains(v)

    def test_union(self):
        s = vset(Version.DRAFT4) | OPENAPI
        assert s.contains(Version.DRAFT4)
        assert s.contains(Version.OPENAPI)
        assert not s.contains(Version.DRAFT6)
        assert (OPENAPI_LIKE & K8S).contains(Version.KUBERNETES_CRD)


class TestKeywordTable:
    """The keyword and format tables"""

    def test_phases(self):
        for c in CONSTRAINTS.values():
            assert 0 <= c.phase < NUM_PHASES

    @pytest.mark.parametrize(
        "keyword,phase",
        [
            ("$schema", 0),
            ("$id", 0),
            ("properties", 1),
            ("required", 2),
            ("allOf", 2),
            ("additionalProperties", 3),
            ("x-kubernetes-embedded-resource", 3),
        ],
    )
    def test_keyword_phase(self, keyword, phase):
        assert CONSTRAINTS[keyword].phase == phase

    @pytest.mark.parametrize(
        "keyword,version,supported",
        [
            ("const", Version.DRAFT4, False),
            ("const", Version.DRAFT6, True),
            ("$defs", Version.DRAFT7, False),
            ("$defs", Version.DRAFT2019_09, True),
            ("prefixItems", Version.DRAFT2019_09, False),
            ("additionalItems", Version.DRAFT2020_12, False),
            ("nullable", Version.OPENAPI, True),
            ("nullable", Version.DRAFT2020_12, False),
            ("id", Version.DRAFT4, True),
            ("id", Version.DRAFT6, False),
            ("x-kubernetes-int-or-string", Version.KUBERNETES_CRD, True),
            ("x-kubernetes-int-or-string", Version.OPENAPI, False),
        ],
    )
    def test_keyword_versions(self, keyword, version, supported):
        assert CONSTRAINTS[keyword].versions.contains(version) == supported

    def test_formats(self):
        assert FORMATS["date-time"][0].contains(Version.DRAFT4)
        assert not FORMATS["date"][0].contains(Version.DRAFT6)
        assert FORMATS["int32"][0].contains(Version.OPENAPI)


if __name__ == "__main__":
    pytest.main([__file__])
