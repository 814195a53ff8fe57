"""
Per-schema bookkeeping shared by the extraction state and keyword handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from ..cue_ast.nodes import Ellipsis, Expr, Ident, ListLit, StructLit, new_call, new_ident, new_null, new_string
from ..values.kind import ALL_TYPES, Kind
from .version import Version


class CoreType(IntEnum):
    """The JSON types a schema can constrain separately."""

    NULL = 0
    BOOL = 1
    NUM = 2
    STRING = 3
    ARRAY = 4
    OBJECT = 5


CORE_TYPE_KINDS = [Kind.NULL, Kind.BOOL, Kind.NUMBER, Kind.STRING, Kind.LIST, Kind.STRUCT]
CORE_TYPE_NAMES = ["null", "bool", "number", "string", "array", "object"]


class Openness(IntEnum):
    """How open a struct is, as far as extraction has determined."""

    IMPLICITLY_OPEN = 0
    EXPLICITLY_OPEN = 1
    EXPLICITLY_CLOSED = 2
    # additionalProperties is a schema, so the pattern constraints cover every field
    ALL_FIELDS_COVERED = 3


def kind_to_ast(k: Kind, explicit_open: bool = False) -> Expr:
    """Return the CUE type expression for a single kind."""
    if k == Kind.NULL:
        return new_null()
    if k == Kind.BOOL:
        return new_ident("bool")
    if k == Kind.NUMBER:
        return new_ident("number")
    if k == Kind.INT:
        return new_ident("int")
    if k == Kind.FLOAT:
        return new_ident("float")
    if k == Kind.STRING:
        return new_ident("string")
    if k == Kind.LIST:
        return ListLit(elts=[Ellipsis()])
    if k == Kind.STRUCT:
        if explicit_open:
            return StructLit()
        return StructLit(elts=[Ellipsis()])
    raise ValueError(f"no type expression for kind {k!r}")


def error_disallowed() -> Expr:
    return new_call(new_ident("error"), new_string("disallowed"))


@dataclass
class ConstraintInfo:
    """Constraints collected for one JSON type."""

    constraints: list[Expr] = field(default_factory=list)
    # Location of each constraint, for error messages
    positions: list[str] = field(default_factory=list)

    def add(self, pos: str, x: Expr) -> None:
        if isinstance(x, Ident) and x.name == "_" and x.node is None:
            return
        self.constraints.append(x)
        self.positions.append(pos)


@dataclass
class SchemaInfo:
    """What extraction learned about a schema besides its CUE expression."""

    # Types a value can have to satisfy the schema
    allowed_types: Kind = ALL_TYPES
    # Types the schema is known to be limited to
    known_types: Kind = ALL_TYPES

    title: str = ""
    description: str = ""

    # Canonical URI of the schema, set when it has an $id
    id: str | None = None
    deprecated: bool = False

    schema_version: Version = Version.UNKNOWN
    # Whether the version came from a $schema keyword
    schema_version_present: bool = False

    has_constraints: bool = False

    def comment(self) -> str | None:
        """Return the doc comment made of the title and description."""
        parts = [s for s in (self.title, self.description) if s]
        if not parts:
            return None
        return "\n\n".join(parts)
