"""
Translation state for a single schema during extraction.

A State is created for every schema node visited. Keyword handlers record
constraints on it, split by the JSON type they apply to, and finalize
combines them into one CUE expression.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from ..cue_ast.astutil import path_ref_syntax
from ..cue_ast.nodes import (
    Attribute,
    EmbedDecl,
    Ellipsis,
    Expr,
    FieldConstraint,
    Ident,
    ImportSpec,
    ListLit,
    StructLit,
    Token,
    new_bin_expr,
    new_call,
    new_field,
    new_ident,
    new_int,
    top,
)
from ..errors import StructBuilderError
from ..utils import import_qualifier, is_valid_ident, quote_string
from ..values.json_value import JSONValue
from ..values.kind import ALL_TYPES, Kind, kind_name
from ..values.path import Path, Selector
from .constraints import CONSTRAINTS, NUM_PHASES
from .constraints.combinator import constraint_if_then_else
from .pointer import lookup_json_pointer, path_key_to_pointer
from .ref import DEFAULT_ROOT_ID_HOST, SchemaLoc, is_absolute_uri, resolve_reference, with_fragment, without_fragment
from .schema_info import CORE_TYPE_KINDS, CORE_TYPE_NAMES, ConstraintInfo, CoreType, Openness, SchemaInfo, error_disallowed, kind_to_ast
from .version import OPENAPI_LIKE, Version, vfrom

if TYPE_CHECKING:
    from .decoder import Decoder, DefinedSchema

# Constructs accepted by Python's re module that the RE2 engine used for
# CUE regular expressions rejects: lookaround, atomic groups,
# backreferences and possessive quantifiers.
_PERL_ONLY_RE = re.compile(r"\(\?(?:[=!>]|<[=!])|\\[1-9]|\\k<|(?<!\\)[*+?}]\+")

# Unicode classes are understood by RE2 but not by re.
_UNICODE_CLASS_RE = re.compile(r"\\[pP](?:\{\^?\w+\}|\w)")


def bool_schema(ok: bool) -> Expr:
    return top() if ok else error_disallowed()


class State:
    """Translation state for one schema node."""

    def __init__(
        self,
        decoder: Decoder,
        pos: JSONValue,
        up: State | None = None,
        info: SchemaInfo | None = None,
        is_root: bool = False,
        preserve_unknown_fields: bool = False,
    ):
        self.decoder = decoder
        self.up = up
        self.pos = pos
        self.info = info if info is not None else SchemaInfo()
        self.is_root = is_root

        self.types = [ConstraintInfo() for _ in CoreType]
        self.all = ConstraintInfo()
        self.nullable: Expr | None = None

        # Set by the boolean forms of exclusiveMinimum and exclusiveMaximum
        self.exclusive_min = False
        self.exclusive_max = False

        self.min_contains: int | None = None
        self.max_contains: int | None = None

        self.if_constraint: JSONValue | None = None
        self.then_constraint: JSONValue | None = None
        self.else_constraint: JSONValue | None = None

        # Struct collecting the object keywords, and the node that created it
        self.obj: StructLit | None = None
        self.obj_n: JSONValue | None = None
        # !~ expressions for every patternProperties key
        self.patterns: list[Expr] = []

        # List literal created by prefixItems or an array-valued items
        self.list: ListLit | None = None
        self.list_items_is_array = False

        # properties and additionalProperties may not be combined in CRDs
        self.has_properties = False
        self.has_additional_properties = False

        # OpenAPI requires items whenever the type is array
        self.has_items = False
        self.is_array = False

        # Before 2019-09, keywords next to $ref are ignored
        self.has_ref_keyword = False

        # Inherited by subschemas, reset within properties and additionalProperties
        self.preserve_unknown_fields = preserve_unknown_fields

        # From x-kubernetes-group-version-kind
        self.k8s_resource_kind = ""
        self.k8s_api_version = ""

        self.openness = Openness.IMPLICITLY_OPEN

    # Errors

    def errf(self, n: JSONValue | None, message: str) -> Expr:
        return self.decoder.errf(n, message)

    def warn_unrecognized_keyword(self, key: str, n: JSONValue, message: str) -> None:
        if not self.decoder.cfg.strict_keywords:
            return
        if OPENAPI_LIKE.contains(self.info.schema_version) and key.startswith("x-"):
            # Extension keywords are always allowed in OpenAPI-like versions.
            return
        self.errf(n, message)

    # Values

    def str_value(self, n: JSONValue) -> tuple[str, bool]:
        if n.kind != Kind.STRING:
            self.errf(n, "invalid string")
            return "", False
        return n.data, True

    def bool_value(self, n: JSONValue) -> bool:
        if n.kind != Kind.BOOL:
            self.errf(n, "invalid bool")
            return False
        return n.data

    def uint_value(self, n: JSONValue) -> int:
        """Return a non-negative integer. Floats are accepted when they have no fractional part."""
        data = n.data
        if n.kind == Kind.INT and data >= 0:
            return data
        if n.kind == Kind.FLOAT and data >= 0 and data.is_integer():
            return int(data)
        self.errf(n, "invalid uint")
        return 0

    def uint(self, n: JSONValue) -> Expr:
        return new_int(self.uint_value(n))

    def number(self, n: JSONValue) -> Expr:
        if not n.kind & Kind.NUMBER:
            return self.errf(n, "invalid number")
        return n.syntax()

    def const_value(self, n: JSONValue) -> Expr:
        """Return the CUE value matching exactly the JSON value n."""
        if n.kind == Kind.LIST:
            return ListLit(elts=[self.const_value(x) for x in n.items()])
        if n.kind == Kind.STRUCT:
            fields = [new_field(k, self.const_value(v), FieldConstraint.REQUIRED) for k, v in n.fields()]
            return new_call(new_ident("close"), StructLit(elts=fields))
        return n.syntax()

    def process_map(self, n: JSONValue, f: Callable[[str, JSONValue], None]) -> None:
        for key, v in n.fields():
            f(key, v)

    def list_items(self, name: str, n: JSONValue, allow_empty: bool) -> list[JSONValue]:
        if n.kind != Kind.LIST:
            self.errf(n, f"value of {name!r} must be an array, found {kind_name(n.kind)}")
        a = n.items()
        if not allow_empty and not a:
            self.errf(n, f"array for {name!r} must be non-empty")
        return a

    def check_regexp(self, n: JSONValue, pattern: str) -> bool:
        """Report whether pattern can be used as a CUE regular expression.

        Invalid expressions are errors. Perl constructs that CUE does not
        support are only errors in strict feature mode; either way the
        pattern is left out.
        """
        if _PERL_ONLY_RE.search(pattern):
            if self.decoder.cfg.strict_features:
                self.errf(n, f"unsupported Perl regexp syntax in {pattern!r}")
            return False
        try:
            re.compile(_UNICODE_CLASS_RE.sub("x", pattern).replace("(?<", "(?P<"))
        except re.error as e:
            self.errf(n, f"invalid regexp {pattern!r}: {e}")
            return False
        return True

    def add_import(self, n: JSONValue, pkg: str) -> Ident:
        """Return an identifier bound to an import of pkg."""
        return Ident(name=import_qualifier(pkg), node=ImportSpec(path=pkg))

    # Constraints

    def add(self, n: JSONValue, t: CoreType, x: Expr) -> None:
        self.types[t].add(n.pos, x)

    def object(self, n: JSONValue) -> StructLit:
        if self.obj is None:
            self.obj = StructLit()
            self.obj_n = n
        return self.obj

    def has_constraints(self) -> bool:
        if self.all.constraints or any(t.constraints for t in self.types):
            return True
        return bool(self.patterns or self.info.title or self.info.description or self.obj is not None or self.info.id)

    # Translation

    def schema(self, n: JSONValue, init: Callable[[State], None] | None = None) -> Expr:
        return self.schema_state(n, ALL_TYPES, init)[0]

    def schema_state(self, n: JSONValue, types: Kind, init: Callable[[State], None] | None = None) -> tuple[Expr, SchemaInfo]:
        """Translate the schema at n, allowing only the given types.

        Returns the expression for the schema, which refers to a definition
        when the schema has one, along with what was learned about it.
        """
        s = State(
            self.decoder,
            n,
            up=self,
            info=SchemaInfo(allowed_types=types, known_types=ALL_TYPES, schema_version=self.info.schema_version),
            is_root=self.is_root and n.path == self.pos.path,
            preserve_unknown_fields=self.preserve_unknown_fields,
        )
        if init is not None:
            init(s)
        expr = s._translate(n)
        info = dataclasses.replace(s.info)
        return s.maybe_define(expr, info), info

    def _translate(self, n: JSONValue) -> Expr:
        version = self.info.schema_version
        if n.kind == Kind.BOOL:
            if vfrom(Version.DRAFT6).contains(version):
                return bool_schema(n.data)
            return self.errf(n, f"boolean schemas not supported in {version}")
        if n.kind != Kind.STRUCT:
            return self.errf(n, f"schema expects mapping node, found {kind_name(n.kind)}")

        for phase in range(NUM_PHASES):
            for key, value in n.fields():
                self._apply_keyword(phase, key, value)
            if self.info.schema_version == Version.KUBERNETES_CRD and self.is_root:
                # The root of a CRD is always a resource.
                c = CONSTRAINTS["x-kubernetes-embedded-resource"]
                if c.phase == phase:
                    c.fn(c.key, n, self)

        if self.info.id is not None:
            # Anything with an $id can be referred to.
            self.decoder.ensure_definition(self.pos)
        constraint_if_then_else(self)
        version = self.info.schema_version
        if version == Version.KUBERNETES_CRD and self.has_properties and self.has_additional_properties:
            self.errf(n, f"additionalProperties may not be combined with properties in {version}")
        if OPENAPI_LIKE.contains(version) and self.is_array and not self.has_items:
            self.errf(n, f'"items" must be present when the "type" is "array" in {version}')

        expr = self.finalize()
        self.info.has_constraints = self.has_constraints()
        return expr

    def _apply_keyword(self, phase: int, key: str, value: JSONValue) -> None:
        if phase == 0 and key == "$ref":
            self.has_ref_keyword = True
        c = CONSTRAINTS.get(key)
        if c is None:
            if key.startswith("x-"):
                return
            if phase == 0 and self.decoder.cfg.strict_keywords:
                self.warn_unrecognized_keyword(key, value, f"unknown keyword {key!r}")
            return
        if c.phase != phase:
            return
        version = self.info.schema_version
        if not c.versions.contains(version):
            self.warn_unrecognized_keyword(key, value, f"keyword {key!r} is not supported in JSON schema version {version}")
            return
        if phase > 0 and not vfrom(Version.DRAFT2019_09).contains(version) and self.has_ref_keyword and key != "$ref":
            # $schema, which can change the version, is handled in phase 0,
            # so it is never ignored.
            self.warn_unrecognized_keyword(key, value, f"ignoring keyword {key!r} alongside $ref")
            return
        c.fn(key, value, self)

    def _finalize_object(self) -> None:
        version = self.info.schema_version
        if (
            self.obj is None
            and version == Version.KUBERNETES_CRD
            and self.info.allowed_types & Kind.STRUCT
            and self.preserve_unknown_fields
        ):
            # Preserved fields need an explicit ellipsis.
            self.object(self.pos)
        if self.obj is None:
            return
        if self.preserve_unknown_fields:
            self.openness = Openness.EXPLICITLY_OPEN
        e: Expr = self.obj
        if self.decoder.cfg.open_only_when_explicit and self.openness == Openness.IMPLICITLY_OPEN:
            pass
        elif self.openness == Openness.ALL_FIELDS_COVERED:
            # A pattern constraint already covers every field.
            pass
        elif self.openness == Openness.EXPLICITLY_CLOSED:
            e = new_call(new_ident("close"), self.obj)
        else:
            self.obj.elts.append(Ellipsis())
        self.add(self.obj_n, CoreType.OBJECT, e)

    def finalize(self) -> Expr:
        """Combine the collected constraints into a single expression."""
        info = self.info
        if info.allowed_types == Kind.BOTTOM:
            # Not necessarily a problem: this may be one branch of a oneOf.
            return error_disallowed()

        self._finalize_object()

        # Literal lists and structs go last, for readability.
        _sort_last(self.types[CoreType.ARRAY], ListLit)
        _sort_last(self.types[CoreType.OBJECT], StructLit)

        disjuncts: list[Expr] = []
        needs_type_disjunction = info.allowed_types != info.known_types or any(
            t.constraints and info.allowed_types & CORE_TYPE_KINDS[i] for i, t in enumerate(self.types)
        )
        if needs_type_disjunction:
            excluded: list[tuple[str, int]] = []
            npossible = nexcluded = 0
            for i, t in enumerate(self.types):
                k = CORE_TYPE_KINDS[i]
                allowed = bool(info.allowed_types & k)
                if t.constraints:
                    npossible += 1
                    if not allowed:
                        nexcluded += 1
                        excluded.extend((pos, i) for pos in t.positions)
                        continue
                    disjuncts.append(new_bin_expr(Token.AND, *t.constraints))
                elif allowed:
                    npossible += 1
                    if info.known_types & k:
                        disjuncts.append(kind_to_ast(info.allowed_types & k, self.decoder.cfg.open_only_when_explicit))
            if nexcluded == npossible:
                for pos, i in excluded:
                    self.decoder.add_error(pos, f"constraint not allowed because type {CORE_TYPE_NAMES[i]} is excluded")

        conjuncts = list(self.all.constraints)
        if disjuncts:
            conjuncts.append(new_bin_expr(Token.OR, *disjuncts))
        e = new_bin_expr(Token.AND, *conjuncts) if conjuncts else top()

        if self.nullable is not None:
            e = new_bin_expr(Token.OR, self.nullable, e)

        if info.id is not None:
            tag = Attribute(text=f"@jsonschema(id={quote_string(info.id)})")
            if isinstance(e, StructLit):
                e.elts.insert(0, tag)
            else:
                e = StructLit(elts=[tag, EmbedDecl(expr=e)])

        # Every allowed type is now explicit in the expression.
        info.known_types = info.allowed_types
        return e

    # Definitions and references

    def schema_root(self) -> State:
        """Return the nearest enclosing state with an $id, which all relative URIs resolve against."""
        s = self
        while s.info.id is None:
            s = s.up
        return s

    def resolve_uri(self, n: JSONValue) -> str | None:
        uri, ok = self.str_value(n)
        if not ok:
            return None
        if is_absolute_uri(uri):
            if urlparse(uri).hostname == DEFAULT_ROOT_ID_HOST:
                self.errf(n, f"invalid use of default root ID host ({DEFAULT_ROOT_ID_HOST}) in URI")
                return None
            return uri
        return resolve_reference(self.schema_root().info.id, uri)

    def make_cue_ref(self, n: JSONValue, uri: str, tokens: list[str]) -> Expr | None:
        """Return the expression referring to the schema at uri, whose fragment holds tokens."""
        d = self.decoder
        node = d.id_nodes.get(without_fragment(uri))
        if node is None:
            if d.pass_ == 0:
                # The URI might be declared by an $id further on.
                d.need_another_pass = True
            try:
                import_path, path = d.map_ref(SchemaLoc(id=uri))
            except ValueError as e:
                self.errf(n, f"cannot determine import path for {uri}: {e}")
                return None
            return self.ref_expr(n, import_path, path)

        key = lookup_json_pointer(node.data, tokens)
        if key is None:
            self.errf(n, f"reference {uri} does not resolve to a schema")
            return None
        target = node.lookup(key)
        if d.root_schema is not None and target.path == d.root_schema.path:
            return d.builder.get_ref(Path())
        d.ensure_definition(target)
        def_ = d.def_for_value[target.path]
        if def_ is None:
            # The target has not been visited yet; a later pass fills this in.
            return top()
        return self.ref_expr(n, def_.import_path, def_.path)

    def ref_expr(self, n: JSONValue, import_path: str, path: Path) -> Expr | None:
        """Return the expression for path within the package at import_path, or within the result when it is empty."""
        if not import_path:
            try:
                return self.decoder.builder.get_ref(path)
            except (ValueError, StructBuilderError) as e:
                self.errf(n, f"cannot generate reference: {e}")
                return None
        qualifier = import_qualifier(import_path)
        if not is_valid_ident(qualifier):
            self.errf(n, f"cannot determine package name from import path {import_path!r}")
            return None
        ident = Ident(name=qualifier, node=ImportSpec(path=import_path))
        try:
            return path_ref_syntax(path, ident)
        except ValueError as e:
            self.errf(n, f"cannot determine CUE path: {e}")
            return None

    def maybe_define(self, expr: Expr, info: SchemaInfo) -> Expr:
        """Place expr in its definition, if it has one, and return a reference to it."""
        def_ = self.defined_schema_for_node(self.pos)
        if def_ is None or len(def_.path) == 0:
            return expr
        def_.schema = expr
        def_.comment = info.comment()
        if not def_.import_path:
            if not self.decoder.builder.put(def_.path, expr, info.comment()):
                self.errf(self.pos, f"redefinition of schema CUE path {def_.path}")
                return expr
        ref = self.ref_expr(self.pos, def_.import_path, def_.path)
        return ref if ref is not None else expr

    def defined_schema_for_node(self, n: JSONValue) -> DefinedSchema | None:
        d = self.decoder
        if n.path not in d.def_for_value:
            return None
        def_ = d.def_for_value[n.path]
        if def_ is not None:
            return def_
        # Referred to before it was visited: references made so far are
        # placeholders, so another pass is needed.
        d.need_another_pass = True
        def_ = self.add_definition(n)
        if def_ is None:
            return None
        d.def_for_value[n.path] = def_
        d.dangling_refs -= 1
        return def_

    def add_definition(self, n: JSONValue) -> DefinedSchema | None:
        d = self.decoder
        root = self.schema_root()
        loc_id = with_fragment(root.info.id, path_key_to_pointer(n.rel_path(root.pos)))
        def_ = d.defs.get(loc_id)
        if def_ is not None:
            return def_
        loc = SchemaLoc(id=loc_id, is_local=True, path=cue_path_of(n.rel_path(d.root)))
        try:
            import_path, path = d.map_ref(loc)
        except ValueError as e:
            self.errf(n, f"cannot get reference for {loc}: {e}")
            return None
        def_ = d.new_definition(loc_id, import_path, path)
        return def_


def cue_path_of(key: tuple) -> Path:
    """Return the CUE path made of string and index selectors for a JSON location."""
    return Path(tuple(Selector.index(k) if isinstance(k, int) else Selector.string(k) for k in key))


def _sort_last(c: ConstraintInfo, typ: type) -> None:
    pairs = sorted(zip(c.constraints, c.positions), key=lambda p: isinstance(p[0], typ))
    c.constraints = [p[0] for p in pairs]
    c.positions = [p[1] for p in pairs]
