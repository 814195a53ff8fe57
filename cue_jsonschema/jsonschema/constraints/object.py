"""
Object keywords.

All of them add to a single struct literal per schema, so that required
can find the fields declared by properties and additionalProperties can
exclude the names and patterns already covered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...cue_ast.nodes import (
    Attribute,
    Field,
    FieldConstraint,
    PatternLabel,
    StructLit,
    Token,
    UnaryExpr,
    is_top,
    label_name,
    new_bin_expr,
    new_call,
    new_field,
    new_ident,
    new_sel,
    new_string,
    top,
)
from ...utils import quote_meta
from ...values.json_value import JSONValue
from ...values.kind import ALL_TYPES, Kind, kind_name
from ..schema_info import CoreType, Openness

if TYPE_CHECKING:
    from ..state import State


def _reset_preserve(s: State) -> None:
    s.preserve_unknown_fields = False


def constraint_properties(key: str, n: JSONValue, s: State) -> None:
    obj = s.object(n)
    if n.kind != Kind.STRUCT:
        s.errf(n, f'"properties" expected an object, found {kind_name(n.kind)}')
        return
    s.has_properties = True

    def add(name: str, v: JSONValue) -> None:
        expr, sub = s.schema_state(v, ALL_TYPES, _reset_preserve)
        f = new_field(name, expr, FieldConstraint.OPTIONAL)
        f.doc = sub.comment()
        if sub.deprecated:
            f.attrs.append(Attribute(text="@deprecated()"))
        obj.elts.append(f)

    s.process_map(n, add)


def constraint_required(key: str, n: JSONValue, s: State) -> None:
    if n.kind != Kind.LIST:
        s.errf(n, f'value of "required" must be list of strings, found {kind_name(n.kind)}')
        return
    obj = s.object(n)

    fields: dict[str, Field] = {}
    for d in obj.elts:
        if isinstance(d, Field):
            name = label_name(d.label)
            if name is not None:
                fields[name] = d

    for v in s.list_items("required", n, True):
        name, ok = s.str_value(v)
        if not ok:
            continue
        f = fields.get(name)
        if f is None:
            f = new_field(name, top(), FieldConstraint.REQUIRED)
            fields[name] = f
            obj.elts.append(f)
            continue
        if f.constraint != FieldConstraint.OPTIONAL:
            s.errf(v, f"duplicate required field {name!r}")
        f.constraint = FieldConstraint.REQUIRED


def _exclude_fields(decls: list) -> list[UnaryExpr]:
    names = []
    for d in decls:
        if isinstance(d, Field):
            name = label_name(d.label)
            if name is not None:
                names.append(quote_meta(name))
    if not names:
        return []
    return [UnaryExpr(op=Token.NMAT, x=new_string("^(" + "|".join(names) + ")$"))]


def constraint_pattern_properties(key: str, n: JSONValue, s: State) -> None:
    if n.kind != Kind.STRUCT:
        s.errf(n, f'value of "patternProperties" must be an object, found {kind_name(n.kind)}')
        return
    obj = s.object(n)
    existing = _exclude_fields(obj.elts)

    def add(pattern: str, v: JSONValue) -> None:
        if not s.check_regexp(v, pattern):
            return
        # Recorded for additionalProperties, which runs later.
        s.patterns.append(UnaryExpr(op=Token.NMAT, x=new_string(pattern)))
        label = new_bin_expr(Token.AND, UnaryExpr(op=Token.MAT, x=new_string(pattern)), *existing)
        obj.elts.append(Field(label=PatternLabel(expr=label), value=s.schema(v)))

    s.process_map(n, add)


def constraint_additional_properties(key: str, n: JSONValue, s: State) -> None:
    if n.kind == Kind.BOOL:
        s.openness = Openness.EXPLICITLY_OPEN if n.data else Openness.EXPLICITLY_CLOSED
        s.has_additional_properties = True
        s.object(n)
        return
    if n.kind != Kind.STRUCT:
        s.errf(n, 'value of "additionalProperties" must be an object or boolean')
        return
    s.has_additional_properties = True
    s.openness = Openness.ALL_FIELDS_COVERED
    obj = s.object(n)
    existing = s.patterns + _exclude_fields(obj.elts)
    value = s.schema_state(n, ALL_TYPES, _reset_preserve)[0]
    if not existing:
        label = new_ident("string")
    else:
        label = new_bin_expr(Token.AND, *existing)
    obj.elts.append(Field(label=PatternLabel(expr=label), value=value))


def constraint_property_names(key: str, n: JSONValue, s: State) -> None:
    names, _ = s.schema_state(n, Kind.STRING)
    if not is_top(names):
        s.add(n, CoreType.OBJECT, StructLit(elts=[Field(label=PatternLabel(expr=names), value=top())]))


def constraint_min_properties(key: str, n: JSONValue, s: State) -> None:
    pkg = s.add_import(n, "struct")
    s.add(n, CoreType.OBJECT, new_call(new_sel(pkg, "MinFields"), s.uint(n)))


def constraint_max_properties(key: str, n: JSONValue, s: State) -> None:
    pkg = s.add_import(n, "struct")
    s.add(n, CoreType.OBJECT, new_call(new_sel(pkg, "MaxFields"), s.uint(n)))
