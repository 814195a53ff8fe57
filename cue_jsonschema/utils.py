"""
Utility functions for naming and quoting in CUE syntax.
"""

import json
import re

# Identifiers: optional "#", "_#" or "_" prefix followed by a letter-led name.
_IDENT_RE = re.compile(r"^(?:#|_#|_)?[A-Za-z_$][A-Za-z0-9_$]*$")

# Words that cannot be used as bare field labels.
KEYWORDS = frozenset({"package", "import", "for", "in", "if", "let", "true", "false", "null", "_|_"})

# Characters that are special in RE2 syntax.
_REGEXP_SPECIAL = set("\\.+*?()|[]{}^$")


def is_valid_ident(name: str) -> bool:
    """Check whether a name can be written as a CUE identifier.

    Examples:
        foo -> True
        #Foo -> True
        _#defs -> True
        foo-bar -> False
        __x -> False (reserved)
    """
    if not name or not _IDENT_RE.match(name):
        return False
    if name.startswith("__"):
        return False
    return name != "_"


def is_def_or_hidden(name: str) -> bool:
    return name.startswith("#") or name.startswith("_")


def quote_string(s: str) -> str:
    """Quote a string as a CUE double-quoted string literal."""
    return json.dumps(s, ensure_ascii=False)


def unquote_string(s: str) -> str:
    """Undo quote_string."""
    return json.loads(s)


def quote_meta(s: str) -> str:
    """Escape all RE2 metacharacters in s.

    Unlike re.escape, only the characters that RE2 treats as special are
    escaped, so the result stays valid for the CUE regular expression engine.
    """
    return "".join("\\" + c if c in _REGEXP_SPECIAL else c for c in s)


def import_qualifier(import_path: str) -> str:
    """Return the package qualifier for an import path.

    Examples:
        strings -> strings
        example.com/foo/bar -> bar
        example.com/foo:baz -> baz
        example.com/foo@v1 -> foo
    """
    if ":" in import_path:
        return import_path.rsplit(":", 1)[1]
    base = import_path.rsplit("/", 1)[-1]
    return base.split("@", 1)[0]
