"""
Kubernetes extension keywords, used by Kubernetes API and CRD schemas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...cue_ast.nodes import FieldConstraint, Token, new_bin_expr, new_field, new_ident, new_string
from ...values.json_value import JSONValue
from ...values.kind import Kind, kind_name

if TYPE_CHECKING:
    from ..state import State


def constraint_preserve_unknown_fields(key: str, n: JSONValue, s: State) -> None:
    s.preserve_unknown_fields = s.bool_value(n)


def constraint_group_version_kind(key: str, n: JSONValue, s: State) -> None:
    items = s.list_items(key, n, True)
    if len(items) != 1:
        # A schema shared by several kinds cannot pin either field.
        return
    gvk = items[0]
    if gvk.kind != Kind.STRUCT:
        s.errf(gvk, f"value of {key!r} must be an array of objects, found {kind_name(gvk.kind)}")
        return
    group = gvk.data.get("group", "")
    version = gvk.data.get("version", "")
    kind = gvk.data.get("kind", "")
    if not all(isinstance(x, str) for x in (group, version, kind)):
        s.errf(gvk, f"invalid group, version or kind in {key!r}")
        return
    s.k8s_api_version = f"{group}/{version}" if group else version
    s.k8s_resource_kind = kind


def constraint_embedded_resource(key: str, n: JSONValue, s: State) -> None:
    # Also applied to the root schema of a CRD, where n is the schema itself.
    if n.kind == Kind.BOOL and not n.data:
        return
    obj = s.object(n)
    api_version = new_string(s.k8s_api_version) if s.k8s_api_version else new_ident("string")
    kind = new_string(s.k8s_resource_kind) if s.k8s_resource_kind else new_ident("string")
    obj.elts.append(new_field("apiVersion", api_version, FieldConstraint.REQUIRED))
    obj.elts.append(new_field("kind", kind, FieldConstraint.REQUIRED))


def constraint_int_or_string(key: str, n: JSONValue, s: State) -> None:
    if not s.bool_value(n):
        return
    types = Kind.INT | Kind.STRING
    s.info.allowed_types &= types
    s.info.known_types &= types
    s.all.add(n.pos, new_bin_expr(Token.OR, new_ident("int"), new_ident("string")))


def constraint_ignored(key: str, n: JSONValue, s: State) -> None:
    # Only meaningful to the Kubernetes API server.
    pass
