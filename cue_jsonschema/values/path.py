"""
Paths into CUE values, made of selectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..utils import KEYWORDS, is_def_or_hidden, is_valid_ident, quote_string


class SelectorType(IntEnum):
    """Selector kinds, in the order used when sorting selectors."""

    STRING = 1
    INDEX = 2
    DEFINITION = 3
    HIDDEN = 4
    HIDDEN_DEFINITION = 5


@dataclass(frozen=True)
class Selector:
    """One step in a path: a field label or a list index."""

    label: str | int
    type: SelectorType = SelectorType.STRING

    @staticmethod
    def string(name: str) -> Selector:
        return Selector(name, SelectorType.STRING)

    @staticmethod
    def index(i: int) -> Selector:
        return Selector(i, SelectorType.INDEX)

    @staticmethod
    def definition(name: str) -> Selector:
        if not name.startswith("#"):
            raise ValueError(f"definition name {name!r} must start with #")
        return Selector(name, SelectorType.DEFINITION)

    @staticmethod
    def hidden(name: str) -> Selector:
        if not name.startswith("_"):
            raise ValueError(f"hidden name {name!r} must start with _")
        if name.startswith("_#"):
            return Selector(name, SelectorType.HIDDEN_DEFINITION)
        return Selector(name, SelectorType.HIDDEN)

    @staticmethod
    def from_name(name: str) -> Selector:
        """Classify an identifier-like name by its prefix."""
        if name.startswith("_"):
            return Selector.hidden(name)
        if name.startswith("#"):
            return Selector.definition(name)
        return Selector.string(name)

    def is_definition(self) -> bool:
        return self.type in (SelectorType.DEFINITION, SelectorType.HIDDEN_DEFINITION)

    def unquoted(self) -> str:
        return str(self.label)

    def __str__(self) -> str:
        if self.type == SelectorType.INDEX:
            return str(self.label)
        if self.type == SelectorType.STRING and (
            not is_valid_ident(self.label) or is_def_or_hidden(self.label) or self.label in KEYWORDS
        ):
            return quote_string(self.label)
        return str(self.label)

    def sort_key(self) -> tuple[int, str]:
        return (int(self.type), str(self))


@dataclass(frozen=True)
class Path:
    """An immutable sequence of selectors."""

    selectors: tuple[Selector, ...] = ()

    @staticmethod
    def make(*selectors: Selector) -> Path:
        return Path(tuple(selectors))

    def append(self, *selectors: Selector) -> Path:
        return Path(self.selectors + tuple(selectors))

    def concat(self, other: Path) -> Path:
        if not self.selectors:
            return other
        if not other.selectors:
            return self
        return Path(self.selectors + other.selectors)

    def has_prefix(self, prefix: Path) -> bool:
        n = len(prefix.selectors)
        return self.selectors[:n] == prefix.selectors

    def __len__(self) -> int:
        return len(self.selectors)

    def __iter__(self):
        return iter(self.selectors)

    def __str__(self) -> str:
        parts = []
        for sel in self.selectors:
            if sel.type == SelectorType.INDEX:
                parts.append(f"[{sel.label}]")
            elif parts:
                parts.append("." + str(sel))
            else:
                parts.append(str(sel))
        return "".join(parts)
