"""
JSON Pointer helpers.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from jsonpointer import JsonPointer, JsonPointerException

from ..values.json_value import PathKey
from ..values.path import Path, SelectorType


def json_pointer_tokens(pointer: str) -> list[str]:
    """Split a JSON Pointer into its unescaped reference tokens.

    A missing leading slash is tolerated.
    """
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        pointer = "/" + pointer
    return JsonPointer(pointer).parts


def json_pointer_from_tokens(tokens: Iterable[str]) -> str:
    """Join reference tokens into a JSON Pointer, escaping "~" and "/"."""
    return JsonPointer.from_parts(list(tokens)).path


def split_fragment(fragment: str) -> list[str]:
    """Return the tokens of a URI fragment that must be a JSON Pointer.

    Raises ValueError for plain-name fragments (anchors) and malformed pointers.
    """
    if fragment and not fragment.startswith("/"):
        raise ValueError(f"anchors ({fragment}) not supported")
    try:
        return json_pointer_tokens(fragment)
    except JsonPointerException as e:
        raise ValueError(f"invalid JSON Pointer {fragment!r}: {e}") from e


def lookup_json_pointer(data: Any, tokens: list[str]) -> PathKey | None:
    """Return the path of the value addressed by tokens within data, or None if there is none.

    Whether a token indexes an array or selects an object member depends on the value
    it is applied to; array indexes may not have leading zeros.
    """
    ptr = JsonPointer.from_parts(tokens)
    path: list[str | int] = []
    for tok in tokens:
        if not isinstance(data, (dict, list)):
            return None
        # jsonpointer accepts "-" (past the end) and leading zeros here.
        if isinstance(data, list) and (tok == "-" or (len(tok) > 1 and tok[0] == "0")):
            return None
        try:
            step = ptr.get_part(data, tok)
            data = ptr.walk(data, tok)
        except JsonPointerException:
            return None
        path.append(step)
    return tuple(path)


def path_key_to_pointer(key: PathKey) -> str:
    return json_pointer_from_tokens(str(p) for p in key)


def cue_path_to_json_pointer(path: Path) -> str:
    """Convert a path made of string and index selectors to a JSON Pointer."""
    tokens = []
    for sel in path:
        if sel.type not in (SelectorType.STRING, SelectorType.INDEX):
            raise ValueError(f"cannot convert selector {sel} to JSON pointer")
        tokens.append(str(sel.label))
    return json_pointer_from_tokens(tokens)
