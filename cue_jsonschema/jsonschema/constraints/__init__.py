"""
The table of JSON Schema keywords understood by extraction.

Each keyword is handled in one of several phases, so that keywords which
depend on others run after them: required needs the fields created by
properties, and additionalProperties needs to exclude both properties and
patternProperties.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...values.json_value import JSONValue
from ..version import ALL_VERSIONS, K8S, OPENAPI, OPENAPI_LIKE, Version, VersionSet, vfrom, vset, vto
from . import array, combinator, crd, generic, numeric, object, string

if TYPE_CHECKING:
    from ..state import State

# Number of phases keywords are processed in.
NUM_PHASES = 4

ConstraintFunc = Callable[[str, JSONValue, "State"], None]


@dataclass(frozen=True)
class Constraint:
    key: str
    phase: int
    # Versions in which the keyword is recognized
    versions: VersionSet
    fn: ConstraintFunc


def p0(key: str, versions: VersionSet, fn: ConstraintFunc) -> Constraint:
    return Constraint(key, 0, versions, fn)


def p1(key: str, versions: VersionSet, fn: ConstraintFunc) -> Constraint:
    return Constraint(key, 1, versions, fn)


def p2(key: str, versions: VersionSet, fn: ConstraintFunc) -> Constraint:
    return Constraint(key, 2, versions, fn)


def p3(key: str, versions: VersionSet, fn: ConstraintFunc) -> Constraint:
    return Constraint(key, 3, versions, fn)


_ALL = ALL_VERSIONS | OPENAPI_LIKE
_UNSUPPORTED = generic.constraint_unsupported
_ANNOTATION = generic.constraint_annotation

# Ordered by keyword name.
_CONSTRAINTS = [
    p1("$anchor", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("$comment", vfrom(Version.DRAFT7), _ANNOTATION),
    p1("$defs", vfrom(Version.DRAFT2019_09), generic.constraint_add_definitions),
    p1("$dynamicAnchor", vfrom(Version.DRAFT2020_12), _UNSUPPORTED),
    p1("$dynamicRef", vfrom(Version.DRAFT2020_12), _UNSUPPORTED),
    p0("$id", vfrom(Version.DRAFT6), generic.constraint_id),
    p1("$recursiveAnchor", vset(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("$recursiveRef", vset(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("$ref", _ALL, generic.constraint_ref),
    p0("$schema", _ALL, generic.constraint_schema),
    p1("$vocabulary", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p3("additionalItems", vto(Version.DRAFT2019_09), array.constraint_additional_items),
    p3("additionalProperties", _ALL, object.constraint_additional_properties),
    p2("allOf", _ALL, combinator.constraint_all_of),
    p2("anyOf", _ALL, combinator.constraint_any_of),
    p1("const", vfrom(Version.DRAFT6), generic.constraint_const),
    p2("contains", vfrom(Version.DRAFT6), array.constraint_contains),
    p1("contentEncoding", vfrom(Version.DRAFT7), string.constraint_content_encoding),
    p1("contentMediaType", vfrom(Version.DRAFT7), string.constraint_content_media_type),
    p1("contentSchema", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("default", _ALL, generic.constraint_default),
    p1("definitions", ALL_VERSIONS, generic.constraint_add_definitions),
    p1("dependencies", vto(Version.DRAFT7), _UNSUPPORTED),
    p1("dependentRequired", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("dependentSchemas", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("deprecated", vfrom(Version.DRAFT2019_09) | OPENAPI_LIKE, generic.constraint_deprecated),
    p1("description", _ALL, generic.constraint_description),
    p1("discriminator", OPENAPI, _UNSUPPORTED),
    p1("else", vfrom(Version.DRAFT7), combinator.constraint_else),
    p1("enum", _ALL, generic.constraint_enum),
    p1("example", OPENAPI_LIKE, _ANNOTATION),
    p1("examples", vfrom(Version.DRAFT6), generic.constraint_examples),
    p1("exclusiveMaximum", _ALL, numeric.constraint_exclusive_maximum),
    p1("exclusiveMinimum", _ALL, numeric.constraint_exclusive_minimum),
    p1("externalDocs", OPENAPI, _ANNOTATION),
    p1("format", _ALL, string.constraint_format),
    p0("id", vset(Version.DRAFT4), generic.constraint_id),
    p1("if", vfrom(Version.DRAFT7), combinator.constraint_if),
    p2("items", _ALL, array.constraint_items),
    p1("maxContains", vfrom(Version.DRAFT2019_09), array.constraint_max_contains),
    p1("maxItems", _ALL, array.constraint_max_items),
    p1("maxLength", _ALL, string.constraint_max_length),
    p1("maxProperties", _ALL, object.constraint_max_properties),
    p2("maximum", _ALL, numeric.constraint_maximum),
    p1("minContains", vfrom(Version.DRAFT2019_09), array.constraint_min_contains),
    p1("minItems", _ALL, array.constraint_min_items),
    p1("minLength", _ALL, string.constraint_min_length),
    p1("minProperties", _ALL, object.constraint_min_properties),
    p2("minimum", _ALL, numeric.constraint_minimum),
    p1("multipleOf", _ALL, numeric.constraint_multiple_of),
    p2("not", _ALL, combinator.constraint_not),
    p1("nullable", OPENAPI_LIKE, generic.constraint_nullable),
    p2("oneOf", _ALL, combinator.constraint_one_of),
    p1("pattern", _ALL, string.constraint_pattern),
    p2("patternProperties", ALL_VERSIONS, object.constraint_pattern_properties),
    p1("prefixItems", vfrom(Version.DRAFT2020_12), array.constraint_prefix_items),
    p1("properties", _ALL, object.constraint_properties),
    p1("propertyNames", vfrom(Version.DRAFT6), object.constraint_property_names),
    p1("readOnly", vfrom(Version.DRAFT7) | OPENAPI_LIKE, _ANNOTATION),
    p2("required", _ALL, object.constraint_required),
    p1("then", vfrom(Version.DRAFT7), combinator.constraint_then),
    p1("title", _ALL, generic.constraint_title),
    p1("type", _ALL, generic.constraint_type),
    p1("unevaluatedItems", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("unevaluatedProperties", vfrom(Version.DRAFT2019_09), _UNSUPPORTED),
    p1("uniqueItems", _ALL, array.constraint_unique_items),
    p1("writeOnly", vfrom(Version.DRAFT7) | OPENAPI_LIKE, _ANNOTATION),
    p3("x-kubernetes-embedded-resource", K8S, crd.constraint_embedded_resource),
    p1("x-kubernetes-group-version-kind", K8S, crd.constraint_group_version_kind),
    p1("x-kubernetes-int-or-string", K8S, crd.constraint_int_or_string),
    p1("x-kubernetes-list-map-keys", K8S, crd.constraint_ignored),
    p1("x-kubernetes-list-type", K8S, crd.constraint_ignored),
    p1("x-kubernetes-map-type", K8S, crd.constraint_ignored),
    p0("x-kubernetes-preserve-unknown-fields", K8S, crd.constraint_preserve_unknown_fields),
    p1("x-kubernetes-validations", K8S, crd.constraint_ignored),
    p1("xml", OPENAPI, _ANNOTATION),
]

CONSTRAINTS: dict[str, Constraint] = {c.key: c for c in _CONSTRAINTS}
