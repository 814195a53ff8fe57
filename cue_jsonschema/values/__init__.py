"""Value models consumed by extraction (JSON data) and generation (CUE syntax)."""

from .expr_value import ExprValue, FieldInfo, Op
from .json_value import JSONValue, kind_of
from .kind import ALL_TYPES, Kind, json_schema_types, kind_name
from .path import Path, Selector, SelectorType

__all__ = [
    "ALL_TYPES",
    "ExprValue",
    "FieldInfo",
    "JSONValue",
    "Kind",
    "Op",
    "Path",
    "Selector",
    "SelectorType",
    "json_schema_types",
    "kind_name",
    "kind_of",
]
