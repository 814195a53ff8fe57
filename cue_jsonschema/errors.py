"""
Error types raised by schema extraction and generation.
"""

from __future__ import annotations


class SchemaError(Exception):
    """A single problem, tagged with the location it was found at."""

    def __init__(self, pos: str, message: str):
        self.pos = pos
        self.message = message
        super().__init__(f"{pos}: {message}" if pos else message)


class ErrorList:
    """Accumulates SchemaErrors in order, dropping exact duplicates.

    Extraction may walk the same schema several times, so the same problem
    can be reported more than once.
    """

    def __init__(self):
        self.errors: list[SchemaError] = []
        self._seen: set[tuple[str, str]] = set()

    def add(self, err: SchemaError) -> None:
        key = (err.pos, err.message)
        if key in self._seen:
            return
        self._seen.add(key)
        self.errors.append(err)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def __len__(self) -> int:
        return len(self.errors)


class MultiError(Exception):
    """Base for errors that carry every problem found, not just the first."""

    def __init__(self, errors: list[SchemaError]):
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class ExtractError(MultiError):
    """Raised when a JSON Schema cannot be translated to CUE.

    This can happen when:
    - A keyword has a value of the wrong type
    - A $ref or $id is malformed or cannot be resolved
    - $schema names an unknown version
    - Strict mode is enabled and an unknown or unsupported keyword is used
    """


class GenerateError(MultiError):
    """Raised when a CUE value cannot be translated to JSON Schema.

    This can happen when:
    - The value contains errors or unresolved references
    - The value can never be satisfied
    - A builtin is called with arguments of the wrong type
    """


class StructBuilderError(Exception):
    """Raised when the definitions tree cannot be turned into syntax."""

    pass
