"""
Path-aware view over decoded JSON data.

Schema extraction walks a JSON document and needs to know, for every node,
where it lives in the document: to report errors, to build JSON Pointers for
definitions and to recognize two references to the same location.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

from jsonpointer import JsonPointer

from ..cue_ast.nodes import Expr, new_bool, new_null, new_number, new_string
from .kind import Kind

PathKey = tuple[str | int, ...]


def kind_of(data: Any) -> Kind:
    """Return the kind of a decoded JSON value."""
    if data is None:
        return Kind.NULL
    if isinstance(data, bool):
        return Kind.BOOL
    if isinstance(data, int):
        return Kind.INT
    if isinstance(data, float):
        return Kind.FLOAT
    if isinstance(data, str):
        return Kind.STRING
    if isinstance(data, list):
        return Kind.LIST
    if isinstance(data, dict):
        return Kind.STRUCT
    raise TypeError(f"unsupported JSON value of type {type(data).__name__}")


class JSONValue:
    """A node in a JSON document together with its location."""

    def __init__(self, data: Any, path: PathKey = (), source: str = ""):
        self.data = data
        self.path = path
        self.source = source

    def __repr__(self) -> str:
        return f"JSONValue({self.pointer!r})"

    @property
    def kind(self) -> Kind:
        return kind_of(self.data)

    @property
    def pointer(self) -> str:
        """JSON Pointer of this node relative to the document root."""
        return JsonPointer.from_parts([str(p) for p in self.path]).path

    @property
    def pos(self) -> str:
        """Location used in error messages."""
        pointer = self.pointer or "/"
        if self.source:
            return f"{self.source}:{pointer}"
        return pointer

    def child(self, key: str | int) -> JSONValue:
        return JSONValue(self.data[key], self.path + (key,), self.source)

    def fields(self) -> Iterator[tuple[str, JSONValue]]:
        """Iterate over the members of an object in document order."""
        if isinstance(self.data, dict):
            for key in self.data:
                yield key, self.child(key)

    def items(self) -> list[JSONValue]:
        """Return the elements of an array."""
        if isinstance(self.data, list):
            return [self.child(i) for i in range(len(self.data))]
        return []

    def lookup(self, path: PathKey) -> JSONValue | None:
        """Return the node at path relative to this one, or None if it does not exist."""
        v = self
        for key in path:
            if isinstance(v.data, dict) and isinstance(key, str) and key in v.data:
                v = v.child(key)
            elif isinstance(v.data, list) and isinstance(key, int) and 0 <= key < len(v.data):
                v = v.child(key)
            else:
                return None
        return v

    def rel_path(self, root: JSONValue) -> PathKey:
        """Return the path of this node relative to root."""
        n = len(root.path)
        if self.path[:n] != root.path:
            raise ValueError(f"{self.pointer} is not inside {root.pointer}")
        return self.path[n:]

    def syntax(self) -> Expr:
        """Return the CUE literal for a scalar value."""
        data = self.data
        if data is None:
            return new_null()
        if isinstance(data, bool):
            return new_bool(data)
        if isinstance(data, (int, float)):
            return new_number(data, json.dumps(data))
        if isinstance(data, str):
            return new_string(data)
        raise TypeError(f"no literal syntax for {self.kind!r} at {self.pos}")
