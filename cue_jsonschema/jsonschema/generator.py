"""
Generation of JSON Schema from CUE values.

The value is decomposed expression by expression into items, the items are
simplified by the rewrite passes and finally rendered as a JSON Schema
document in draft 2020-12 form.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Any

from ..cue_ast.nodes import FieldConstraint, is_top
from ..errors import ErrorList, GenerateError, SchemaError
from ..values.expr_value import ExprValue, Op
from ..values.kind import Kind, json_schema_types
from ..values.path import Path
from .config import GenerateConfig
from .items import (
    BoundOp,
    Item,
    ItemAllOf,
    ItemBounds,
    ItemContains,
    ItemFormat,
    ItemIfThenElse,
    ItemItems,
    ItemItemsBounds,
    ItemLengthBounds,
    ItemMultipleOf,
    ItemPattern,
    ItemProperties,
    ItemPropertyBounds,
    ItemPropertyNames,
    ItemRef,
    ItemTrue,
    ItemUniqueItems,
    UniqueItems,
    make_schema_dict,
)
from .rewrite import enum_from_const, merge_all_of
from .version import Version

logger = logging.getLogger(__name__)

_BOUND_OPS = {
    Op.LESS_THAN: BoundOp.LESS_THAN,
    Op.LESS_THAN_EQUAL: BoundOp.LESS_THAN_EQUAL,
    Op.GREATER_THAN: BoundOp.GREATER_THAN,
    Op.GREATER_THAN_EQUAL: BoundOp.GREATER_THAN_EQUAL,
}

# Builtin validators referred to by selector, and the format they stand for.
_SELECTOR_FORMATS = {
    "time.Time": "date-time",
    "net.AbsURL": "uri",
    "net.URL": "uri-reference",
    "regexp.Valid": "regex",
}

# time.Format layouts that correspond to a JSON Schema format.
_TIME_LAYOUTS = {
    "2006-01-02T15:04:05Z07:00": "date-time",
    "2006-01-02T15:04:05.999999999Z07:00": "date-time",
    "2006-01-02": "date",
    "15:04:05": "time",
}

# Calls taking one count argument, with the type they apply to.
_COUNT_CALLS = {
    "strings.MinRunes": ("string", ItemLengthBounds, BoundOp.GREATER_THAN_EQUAL),
    "strings.MaxRunes": ("string", ItemLengthBounds, BoundOp.LESS_THAN_EQUAL),
    "list.MinItems": ("array", ItemItemsBounds, BoundOp.GREATER_THAN_EQUAL),
    "list.MaxItems": ("array", ItemItemsBounds, BoundOp.LESS_THAN_EQUAL),
    "struct.MinFields": ("object", ItemPropertyBounds, BoundOp.GREATER_THAN_EQUAL),
    "struct.MaxFields": ("object", ItemPropertyBounds, BoundOp.LESS_THAN_EQUAL),
}


def default_name_func(root: ExprValue, path: Path) -> str:
    """Name a definition after the path of the value it holds, such as "#Foo.bar"."""
    return ".".join(str(sel) for sel in path)


class Generator:
    """Translates one CUE value into JSON Schema items."""

    def __init__(self, cfg: GenerateConfig):
        self.cfg = cfg
        self.name_func = cfg.name_func or default_name_func
        self.u = UniqueItems()
        self.errors = ErrorList()
        # Definitions made during generation, keyed by $defs entry name.
        # A None entry marks a definition that is being generated.
        self.defs: dict[str, Item | None] = {}
        # Paths of references without a name that are being inlined
        self.inlining: set[Path] = set()

    def add_error(self, v: ExprValue, message: str) -> Item:
        self.errors.add(SchemaError(v.pos, message))
        return self.u.false()

    def make_item(self, v: ExprValue) -> Item:
        op, args = v.expr()
        if op in (Op.NOOP, Op.SELECTOR, Op.INDEX):
            it = self._make_ref_item(v)
            if it is not None:
                return it
            if op == Op.SELECTOR:
                name = v.qualified_name()
                if name in _SELECTOR_FORMATS:
                    return self.u.all_of(self.u.type("string"), self.u.intern(ItemFormat(_SELECTOR_FORMATS[name])))
        elif op == Op.AND:
            return self.u.all_of(*(self.make_item(a) for a in args))
        elif op == Op.OR:
            return self.u.any_of(*(self.make_item(a) for a in args))
        elif op in (Op.REGEX_MATCH, Op.NOT_REGEX_MATCH) and len(args) == 1:
            re_value = self._string_arg(args[0])
            if re_value is None:
                return self.add_error(args[0], "regular expression must be a concrete string")
            m = self.u.intern(ItemPattern(re_value))
            if op == Op.NOT_REGEX_MATCH:
                m = self.u.not_(m)
            return self.u.all_of(self.u.type("string"), m)
        elif op in (Op.EQUAL, Op.NOT_EQUAL) and len(args) == 1:
            if not args[0].is_concrete():
                return self.u.true()
            c = self.u.const(args[0].concrete_value())
            return c if op == Op.EQUAL else self.u.not_(c)
        elif op in _BOUND_OPS and len(args) == 1:
            return self._make_bounds_item(_BOUND_OPS[op], args[0])
        elif op == Op.CALL:
            return self._make_call_item(v, args)

        kind = v.kind()
        if v.is_concrete() and not kind & (Kind.STRUCT | Kind.LIST):
            return self.u.const(v.concrete_value())
        if kind == Kind.TOP:
            return self.u.true()
        if kind == Kind.BOTTOM:
            return self.add_error(v, "value can never be satisfied")

        target = v.eval()
        elems: list[Item] = []
        types = json_schema_types(kind)
        if types:
            elems.append(self.u.type(*types))
        if kind == Kind.STRUCT:
            elems.append(self._make_struct_item(target))
        elif kind == Kind.LIST:
            elems.append(self._make_list_item(target))
        elems = [e for e in elems if not isinstance(e, ItemTrue)]
        if not elems:
            return self.u.true()
        if len(elems) == 1:
            return elems[0]
        return self.u.all_of(*elems)

    def _make_ref_item(self, v: ExprValue) -> Item | None:
        ref = v.reference_path()
        if ref is None:
            return None
        root, path = ref
        name = self.name_func(root, path)
        target = v.referenced()
        if not name:
            # Inlined in place, so a cycle cannot be closed with a $ref.
            if path in self.inlining:
                return self.add_error(v, f"cyclic reference to {path or '<root>'} cannot be inlined")
            self.inlining.add(path)
            try:
                return self.make_item(target)
            finally:
                self.inlining.discard(path)
        item = self.u.intern(ItemRef(name))
        if name in self.defs:
            return item
        # Reserve the name first so that cyclic references terminate.
        self.defs[name] = None
        self.defs[name] = self.make_item(target)
        return item

    def _string_arg(self, v: ExprValue) -> str | None:
        if not v.is_concrete():
            return None
        s = v.concrete_value()
        return s if isinstance(s, str) else None

    def _int_arg(self, v: ExprValue) -> int | None:
        if not v.is_concrete():
            return None
        n = v.concrete_value()
        if isinstance(n, bool) or not isinstance(n, int):
            return None
        return n

    def _make_bounds_item(self, op: BoundOp, arg: ExprValue) -> Item:
        kind = arg.kind()
        if kind & Kind.NUMBER and not kind & ~Kind.NUMBER:
            if not arg.is_concrete():
                return self.u.true()
            n = arg.concrete_value()
            return self.u.all_of(self.u.intern(ItemBounds(op, n)), self.u.type("number"))
        if kind == Kind.STRING:
            # Bounds on strings cannot be expressed.
            return self.u.type("string")
        return self.add_error(arg, "bad argument to unary comparison")

    def _make_call_item(self, v: ExprValue, args: list[ExprValue]) -> Item:
        if not args:
            return self.add_error(v, "call operation with no function")
        name = args[0].qualified_name()
        params = args[1:]

        if name in _COUNT_CALLS:
            type_name, item_type, op = _COUNT_CALLS[name]
            if len(params) != 1:
                return self.add_error(v, f"{name} expects 1 argument, got {len(params)}")
            n = self._int_arg(params[0])
            if n is None:
                return self.add_error(params[0], f"{name} expects an integer argument")
            return self.u.all_of(self.u.type(type_name), self.u.intern(item_type(op, n)))

        if name == "math.MultipleOf":
            if len(params) != 1:
                return self.add_error(v, f"math.MultipleOf expects 1 argument, got {len(params)}")
            if not params[0].is_concrete():
                return self.add_error(params[0], "math.MultipleOf expects a concrete number")
            return self.u.all_of(self.u.type("number"), self.u.intern(ItemMultipleOf(params[0].concrete_value())))

        if name == "time.Format":
            if len(params) != 1:
                return self.add_error(v, f"time.Format expects 1 argument, got {len(params)}")
            layout = self._string_arg(params[0])
            if layout is None:
                return self.add_error(params[0], "time.Format expects a concrete layout")
            fmt = _TIME_LAYOUTS.get(layout)
            if fmt is None:
                # Other layouts cannot be expressed, but the value is still a string.
                return self.u.type("string")
            return self.u.all_of(self.u.type("string"), self.u.intern(ItemFormat(fmt)))

        if name == "list.UniqueItems":
            return self.u.all_of(self.u.type("array"), self.u.intern(ItemUniqueItems()))

        if name == "list.MatchN":
            return self._make_contains_item(v, params)

        if name == "matchN":
            return self._make_match_n_item(v, params)

        if name == "matchIf":
            if len(params) != 3:
                return self.add_error(v, f"matchIf expects 3 arguments, got {len(params)}")
            if_item, then_item, else_item = (self.make_item(p) for p in params)
            return self.u.intern(
                ItemIfThenElse(
                    if_item,
                    None if isinstance(then_item, ItemTrue) else then_item,
                    None if isinstance(else_item, ItemTrue) else else_item,
                )
            )

        if name == "close":
            if len(params) != 1:
                return self.add_error(v, f"close expects 1 argument, got {len(params)}")
            return self.make_item(params[0].as_closed())

        if name == "error":
            return self.u.false()

        if name in ("and", "or"):
            if len(params) != 1:
                return self.add_error(v, f"{name} expects 1 argument, got {len(params)}")
            elems = [self.make_item(e) for e in params[0].list_elements()]
            return self.u.all_of(*elems) if name == "and" else self.u.any_of(*elems)

        # Unknown functions accept anything.
        logger.debug("no JSON Schema equivalent for call to %s at %s", name, v.pos)
        return self.u.true()

    def _make_contains_item(self, v: ExprValue, params: list[ExprValue]) -> Item:
        if len(params) != 2:
            return self.add_error(v, f"list.MatchN expects 2 arguments, got {len(params)}")
        count, elem = params
        lo: int | None = None
        hi: int | None = None
        for term in _conjuncts(count):
            op, args = term.expr()
            n = self._int_arg(args[0]) if len(args) == 1 else self._int_arg(term)
            if n is None:
                return self.add_error(count, "list.MatchN expects a count made of integer bounds")
            if op == Op.GREATER_THAN_EQUAL:
                lo = n
            elif op == Op.LESS_THAN_EQUAL:
                hi = n
            elif op == Op.NOOP:
                lo = hi = n
            else:
                return self.add_error(count, f"unsupported count operator {op.value} in list.MatchN")
        if lo is None:
            lo = 0
        item = ItemContains(self.make_item(elem), None if lo == 1 else lo, hi)
        return self.u.all_of(self.u.type("array"), self.u.intern(item))

    def _make_match_n_item(self, v: ExprValue, params: list[ExprValue]) -> Item:
        if len(params) != 2:
            return self.add_error(v, f"matchN expects 2 arguments, got {len(params)}")
        count, lst = params
        elems = [self.make_item(e) for e in lst.list_elements()]
        if count.is_concrete():
            n = self._int_arg(count)
            if n is None:
                return self.add_error(count, "matchN expects an integer count")
            if n == len(elems):
                return self.u.all_of(*elems)
            if n == 0:
                return self.u.not_(elems[0] if len(elems) == 1 else self.u.any_of(*elems))
            if n == 1:
                return self.u.one_of(*elems)
            return self.u.true()
        op, args = count.expr()
        if op == Op.GREATER_THAN_EQUAL and len(args) == 1 and self._int_arg(args[0]) == 1:
            return self.u.any_of(*elems)
        return self.u.true()

    def _make_struct_item(self, v: ExprValue) -> Item:
        properties: dict[str, Item] = {}
        required: list[str] = []
        patterns: dict[str, Item] = {}
        additional: Item | None = None
        names: Item | None = None

        for label, value in v.pattern_constraints():
            regexp, is_catch_all = _classify_pattern_label(label)
            if is_catch_all:
                additional = self.make_item(value)
            elif regexp is not None:
                patterns[regexp] = self.make_item(value)
            elif is_top(value.node):
                names = self.u.intern(ItemPropertyNames(self.make_item(label)))
            else:
                logger.debug("cannot express pattern constraint at %s", v.pos)

        for f in v.fields():
            if f.constraint == FieldConstraint.REQUIRED:
                required.append(f.name)
            elif f.constraint == FieldConstraint.REGULAR and not f.value.is_concrete():
                # A concrete regular field may be omitted.
                required.append(f.name)
            properties[f.name] = self._strip_patterns(f.name, self.make_item(f.value), patterns)

        if additional is None:
            if self.cfg.explicit_open:
                if v.closed:
                    additional = self.u.false()
                elif v.is_explicitly_open():
                    additional = self.u.true()
            elif v.is_closed():
                additional = self.u.false()

        elems: list[Item] = []
        if properties or required or patterns or additional is not None:
            elems.append(
                self.u.intern(
                    ItemProperties(
                        tuple(sorted(properties.items())),
                        tuple(required),
                        additional,
                        tuple(sorted(patterns.items())),
                    )
                )
            )
        if names is not None:
            elems.append(names)
        if not elems:
            return self.u.true()
        if len(elems) == 1:
            return elems[0]
        return self.u.all_of(*elems)

    def _strip_patterns(self, name: str, it: Item, patterns: dict[str, Item]) -> Item:
        """Remove from a field's item the constraints it shares with the patterns matching its name."""
        matching = [p for regexp, p in patterns.items() if _matches(regexp, name)]
        if not matching:
            return it
        if any(it is p for p in matching):
            return self.u.true()
        if isinstance(it, ItemAllOf):
            elems = [e for e in it.elems if not any(e is p for p in matching)]
            if len(elems) != len(it.elems):
                if not elems:
                    return self.u.true()
                return elems[0] if len(elems) == 1 else self.u.all_of(*elems)
        return it

    def _make_list_item(self, v: ExprValue) -> Item:
        prefix = tuple(self.make_item(e) for e in v.list_elements())
        rest_value = v.list_rest()
        if rest_value is None:
            rest: Item | None = self.u.false()
        else:
            rest = self.make_item(rest_value)
            if isinstance(rest, ItemTrue):
                rest = None
        if not prefix and rest is None:
            return self.u.true()
        items = self.u.intern(ItemItems(prefix, rest))
        if not prefix:
            return items
        return self.u.all_of(items, self.u.intern(ItemItemsBounds(BoundOp.GREATER_THAN_EQUAL, len(prefix))))


def _conjuncts(v: ExprValue) -> list[ExprValue]:
    op, args = v.expr()
    if op == Op.AND:
        return [c for a in args for c in _conjuncts(a)]
    return [v]


def _classify_pattern_label(label: ExprValue) -> tuple[str | None, bool]:
    """Classify a pattern label as a catch-all, a single regular expression, or neither.

    A label of only !~ terms, like the one extraction makes for
    additionalProperties, counts as a catch-all: it matches the fields not
    named by properties or patternProperties.
    """
    if label.kind() == Kind.STRING and label.expr()[0] == Op.NOOP and not label.is_concrete():
        return None, True
    if label.kind() == Kind.TOP and label.expr()[0] == Op.NOOP and is_top(label.node):
        return None, True
    matches: list[str] = []
    for term in _conjuncts(label):
        op, args = term.expr()
        if op == Op.NOOP and term.kind() == Kind.STRING and not term.is_concrete():
            continue
        if op not in (Op.REGEX_MATCH, Op.NOT_REGEX_MATCH) or len(args) != 1 or not args[0].is_concrete():
            return None, False
        if op == Op.REGEX_MATCH:
            matches.append(args[0].concrete_value())
    if not matches:
        return None, True
    if len(matches) == 1:
        return matches[0], False
    return None, False


def _matches(regexp: str, name: str) -> bool:
    try:
        return re.search(regexp, name) is not None
    except re.error:
        return False


def generate(v: ExprValue, cfg: GenerateConfig | None = None) -> dict[str, Any]:
    """Generate a JSON Schema document for v.

    Raises GenerateError when the value is invalid or can never be
    satisfied, and ValueError for an unsupported target version.
    """
    errs = v.validate()
    if errs:
        raise GenerateError(errs)
    cfg = dataclasses.replace(cfg) if cfg is not None else GenerateConfig()
    if cfg.version == Version.UNKNOWN:
        cfg.version = Version.DRAFT2020_12
    if cfg.version != Version.DRAFT2020_12:
        raise ValueError(f"only version {Version.DRAFT2020_12} is supported for generating JSON Schema for now")

    g = Generator(cfg)
    item = g.make_item(v)
    item = merge_all_of(item, g.u)
    item = enum_from_const(item, g.u)
    data = item.generate()
    if data is False:
        if not g.errors:
            g.errors.add(SchemaError(v.pos, "schema cannot be satisfied"))
        raise GenerateError(g.errors.errors)
    if data is True:
        data = {}

    fields: list[tuple[str, Any]] = [("$schema", str(cfg.version))]
    if g.defs:
        defs = {}
        for name in sorted(g.defs):
            d = g.defs[name]
            d = enum_from_const(merge_all_of(d, g.u), g.u)
            defs[name] = d.generate()
        fields.append(("$defs", defs))
    fields.extend(data.items())
    if g.errors:
        raise GenerateError(g.errors.errors)
    return make_schema_dict(fields)
