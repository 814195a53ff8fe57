"""
Keywords that apply to every type: identification, references, annotations,
enumerations and the type keyword itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...cue_ast.nodes import BadExpr, Token, new_bin_expr, new_ident, new_null
from ...values.json_value import JSONValue
from ...values.kind import Kind, kind_name
from ..pointer import split_fragment
from ..ref import fragment_of, without_fragment
from ..schema_info import CoreType
from ..version import Version, parse_version, vfrom

if TYPE_CHECKING:
    from ..state import State


def constraint_add_definitions(key: str, n: JSONValue, s: State) -> None:
    if n.kind != Kind.STRUCT:
        s.errf(n, f'"{key}" expected an object, found {kind_name(n.kind)}')
        return

    def add(name: str, v: JSONValue) -> None:
        # Every entry gets a definition, whether or not anything refers to it.
        s.decoder.ensure_definition(v)
        s.schema(v)

    s.process_map(n, add)


def constraint_annotation(key: str, n: JSONValue, s: State) -> None:
    # Annotations do not constrain values.
    pass


def constraint_const(key: str, n: JSONValue, s: State) -> None:
    s.all.add(n.pos, s.const_value(n))
    s.info.allowed_types &= n.kind
    s.info.known_types &= n.kind


def constraint_default(key: str, n: JSONValue, s: State) -> None:
    # A CUE default would widen the set of accepted values, so defaults are
    # not carried over.
    pass


def constraint_deprecated(key: str, n: JSONValue, s: State) -> None:
    if s.bool_value(n):
        s.info.deprecated = True


def constraint_description(key: str, n: JSONValue, s: State) -> None:
    s.info.description, _ = s.str_value(n)


def constraint_enum(key: str, n: JSONValue, s: State) -> None:
    a = []
    types = Kind.BOTTOM
    for x in s.list_items("enum", n, True):
        if s.info.allowed_types & x.kind == 0:
            # Not one of the allowed types, so the value can never match.
            continue
        a.append(s.const_value(x))
        types |= x.kind
    s.info.known_types &= types
    s.info.allowed_types &= types
    if a:
        s.all.add(n.pos, new_bin_expr(Token.OR, *a))


def constraint_examples(key: str, n: JSONValue, s: State) -> None:
    if n.kind != Kind.LIST:
        s.errf(n, f'value of "examples" must be an array, found {kind_name(n.kind)}')


def constraint_id(key: str, n: JSONValue, s: State) -> None:
    u = s.resolve_uri(n)
    if u is None:
        return
    if fragment_of(u):
        if s.decoder.cfg.strict_keywords:
            s.errf(n, "$id URI may not contain a fragment")
        return
    s.info.id = u
    s.decoder.id_nodes[without_fragment(u)] = s.pos


def constraint_nullable(key: str, n: JSONValue, s: State) -> None:
    if s.bool_value(n):
        s.nullable = new_null()


def constraint_ref(key: str, n: JSONValue, s: State) -> None:
    u = s.resolve_uri(n)
    if u is None:
        return
    try:
        tokens = split_fragment(fragment_of(u))
    except ValueError as e:
        s.errf(n, str(e))
        return
    expr = s.make_cue_ref(n, u, tokens)
    if expr is None:
        expr = BadExpr(message=f"unresolved reference {u}")
    s.all.add(n.pos, expr)


def constraint_schema(key: str, n: JSONValue, s: State) -> None:
    if not s.is_root and not vfrom(Version.DRAFT2019_09).contains(s.info.schema_version):
        # Before 2019-09, $schema is only allowed at the root.
        s.errf(n, f"$schema can only appear at the root in JSON Schema version {s.info.schema_version}")
        return
    uri, ok = s.str_value(n)
    if not ok:
        return
    try:
        version = parse_version(uri)
    except ValueError:
        s.warn_unrecognized_keyword(key, n, f"invalid $schema URL {uri!r}")
        return
    s.info.schema_version_present = True
    s.info.schema_version = version


def constraint_title(key: str, n: JSONValue, s: State) -> None:
    s.info.title, _ = s.str_value(n)


_TYPE_NAMES = {
    "null": Kind.NULL,
    "boolean": Kind.BOOL,
    "string": Kind.STRING,
    "number": Kind.NUMBER,
    "integer": Kind.INT,
    "array": Kind.LIST,
    "object": Kind.STRUCT,
}


def constraint_type(key: str, n: JSONValue, s: State) -> None:
    types = Kind.BOTTOM

    def set_type(v: JSONValue) -> None:
        nonlocal types
        name, ok = s.str_value(v)
        if not ok:
            s.errf(v, "type value should be a string")
            return
        if name not in _TYPE_NAMES:
            s.errf(v, f"unknown type {name!r}")
            return
        types |= _TYPE_NAMES[name]
        if name == "integer":
            s.add(v, CoreType.NUM, new_ident("int"))
        elif name == "array":
            s.is_array = True

    if n.kind == Kind.STRING:
        set_type(n)
    elif n.kind == Kind.LIST:
        for v in n.items():
            set_type(v)
    else:
        s.errf(n, 'value of "type" must be a string or list of strings')

    s.info.allowed_types &= types


def constraint_unsupported(key: str, n: JSONValue, s: State) -> None:
    if s.decoder.cfg.strict_features:
        s.errf(n, f"keyword {key!r} not yet implemented")
