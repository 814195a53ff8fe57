"""
String keywords, including the format table.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ...cue_ast.nodes import Token, UnaryExpr, new_call, new_ident, new_sel, new_string
from ...values.json_value import JSONValue
from ..schema_info import CoreType
from ..version import ALL_VERSIONS, K8S, OPENAPI, OPENAPI_LIKE, Version, VersionSet, vfrom

if TYPE_CHECKING:
    from ..state import State


def constraint_content_encoding(key: str, n: JSONValue, s: State) -> None:
    # Annotation only since draft 7; values are not decoded.
    pass


def constraint_content_media_type(key: str, n: JSONValue, s: State) -> None:
    pass


def constraint_min_length(key: str, n: JSONValue, s: State) -> None:
    strings = s.add_import(n, "strings")
    s.add(n, CoreType.STRING, new_call(new_sel(strings, "MinRunes"), s.uint(n)))


def constraint_max_length(key: str, n: JSONValue, s: State) -> None:
    strings = s.add_import(n, "strings")
    s.add(n, CoreType.STRING, new_call(new_sel(strings, "MaxRunes"), s.uint(n)))


def constraint_pattern(key: str, n: JSONValue, s: State) -> None:
    pattern, ok = s.str_value(n)
    if not ok or not s.check_regexp(n, pattern):
        return
    s.add(n, CoreType.STRING, UnaryExpr(op=Token.MAT, x=new_string(pattern)))


def _format_uri(n: JSONValue, s: State) -> None:
    s.add(n, CoreType.STRING, new_sel(s.add_import(n, "net"), "AbsURL"))


def _format_uri_reference(n: JSONValue, s: State) -> None:
    s.add(n, CoreType.STRING, new_sel(s.add_import(n, "net"), "URL"))


def _format_date_time(n: JSONValue, s: State) -> None:
    # Stricter than RFC 3339: lower case "t" and "z" are rejected.
    s.add(n, CoreType.STRING, new_sel(s.add_import(n, "time"), "Time"))


def _format_date(n: JSONValue, s: State) -> None:
    s.add(n, CoreType.STRING, new_call(new_sel(s.add_import(n, "time"), "Format"), new_string("2006-01-02")))


def _format_regex(n: JSONValue, s: State) -> None:
    s.add(n, CoreType.STRING, new_sel(s.add_import(n, "regexp"), "Valid"))


def _format_ident(name: str) -> Callable[[JSONValue, State], None]:
    def f(n: JSONValue, s: State) -> None:
        s.add(n, CoreType.NUM, new_ident(name))

    return f


def _format_unchecked(n: JSONValue, s: State) -> None:
    pass


FORMATS: dict[str, tuple[VersionSet, Callable[[JSONValue, State], None]]] = {
    "binary": (OPENAPI, _format_unchecked),
    "bsonobjectid": (K8S, _format_unchecked),
    "byte": (OPENAPI | K8S, _format_unchecked),
    "cidr": (K8S, _format_unchecked),
    "creditcard": (K8S, _format_unchecked),
    "data": (OPENAPI, _format_unchecked),
    "date": (vfrom(Version.DRAFT7) | OPENAPI | K8S, _format_date),
    "date-time": (ALL_VERSIONS | OPENAPI | K8S, _format_date_time),
    "datetime": (K8S, _format_date_time),
    "double": (OPENAPI | K8S, _format_unchecked),
    "duration": (vfrom(Version.DRAFT2019_09) | K8S, _format_unchecked),
    "email": (ALL_VERSIONS | OPENAPI | K8S, _format_unchecked),
    "float": (OPENAPI | K8S, _format_unchecked),
    "hexcolor": (K8S, _format_unchecked),
    "hostname": (ALL_VERSIONS | OPENAPI | K8S, _format_unchecked),
    "idn-email": (vfrom(Version.DRAFT7), _format_unchecked),
    "idn-hostname": (vfrom(Version.DRAFT7), _format_unchecked),
    "int32": (OPENAPI | K8S, _format_ident("int32")),
    "int64": (OPENAPI | K8S, _format_ident("int64")),
    "ipv4": (ALL_VERSIONS | OPENAPI | K8S, _format_unchecked),
    "ipv6": (ALL_VERSIONS | OPENAPI | K8S, _format_unchecked),
    "iri": (vfrom(Version.DRAFT7), _format_uri),
    "iri-reference": (vfrom(Version.DRAFT7), _format_uri_reference),
    "isbn": (K8S, _format_unchecked),
    "isbn10": (K8S, _format_unchecked),
    "isbn13": (K8S, _format_unchecked),
    "json-pointer": (vfrom(Version.DRAFT6), _format_unchecked),
    "mac": (K8S, _format_unchecked),
    "password": (OPENAPI | K8S, _format_unchecked),
    "regex": (vfrom(Version.DRAFT7), _format_regex),
    "relative-json-pointer": (vfrom(Version.DRAFT7), _format_unchecked),
    "rgbcolor": (K8S, _format_unchecked),
    "ssn": (K8S, _format_unchecked),
    "time": (vfrom(Version.DRAFT7), _format_unchecked),
    "uint32": (K8S, _format_ident("uint32")),
    "uint64": (K8S, _format_ident("uint64")),
    "uri": (ALL_VERSIONS | OPENAPI | K8S, _format_uri),
    "uri-reference": (vfrom(Version.DRAFT6), _format_uri_reference),
    "uri-template": (vfrom(Version.DRAFT6), _format_unchecked),
    "uuid": (vfrom(Version.DRAFT2019_09) | K8S, _format_unchecked),
    "uuid3": (K8S, _format_unchecked),
    "uuid4": (K8S, _format_unchecked),
    "uuid5": (K8S, _format_unchecked),
}


def constraint_format(key: str, n: JSONValue, s: State) -> None:
    name, ok = s.str_value(n)
    if not ok:
        return
    version = s.info.schema_version
    # OpenAPI allows any value for format, so nothing is reported there
    # even in strict mode.
    report = s.decoder.cfg.strict_keywords and not OPENAPI_LIKE.contains(version)
    info = FORMATS.get(name)
    if info is None:
        if report:
            s.errf(n, f"unknown format {name!r}")
        return
    versions, f = info
    if not versions.contains(version):
        if report:
            s.errf(n, f"format {name!r} is not recognized in schema version {version}")
        return
    f(n, s)
