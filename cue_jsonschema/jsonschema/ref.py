"""
Mapping of schema locations to CUE import paths and paths.

Every schema that needs a name, because it sits under $defs or because a
$ref points at it, is identified by a SchemaLoc. A MapRef function turns
that location into the import path of the CUE package holding the schema
(empty for the package being generated) and the CUE path of the schema
within it.
"""

from __future__ import annotations

import base64
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import unquote, urldefrag, urljoin, urlparse

from ..utils import is_def_or_hidden, is_valid_ident
from ..values.path import Path, Selector
from .pointer import cue_path_to_json_pointer, json_pointer_from_tokens, json_pointer_tokens, split_fragment

# The host of the base URI given to schemas that do not declare one.
DEFAULT_ROOT_ID_HOST = "cue.jsonschema.invalid"
DEFAULT_ROOT_ID = "https://" + DEFAULT_ROOT_ID_HOST

# Name of the definition holding schemas whose names are not valid identifiers.
ROOT_DEFS = "#"

# Name of the hidden definition holding schemas that are referred to from
# elsewhere but do not live under $defs or definitions.
INTERNAL_DEFS = "_#defs"

MapRefFunc = Callable[["SchemaLoc"], tuple[str, Path]]
MapFunc = Callable[[list[str]], Path]
MapURLFunc = Callable[[str], tuple[str, Path]]


@dataclass(frozen=True)
class SchemaLoc:
    """The location of a schema.

    id is the canonical URI of the schema, as declared by the schema or one of
    its parents, with the fragment holding the JSON Pointer from that parent.
    When is_local is set, path holds the location of the schema relative to
    the root of the document being extracted.
    """

    id: str
    is_local: bool = False
    path: Path = field(default_factory=Path)

    def __str__(self) -> str:
        if self.is_local:
            return f"id={self.id} localPath={self.path}"
        return f"id={self.id}"


def is_absolute_uri(uri: str) -> bool:
    return bool(urlparse(uri).scheme)


def same_schema_root(u1: str, u2: str) -> bool:
    """Report whether two URIs identify the same document, ignoring fragments."""
    p1, p2 = urlparse(u1), urlparse(u2)
    return (p1.scheme, p1.netloc, p1.path) == (p2.scheme, p2.netloc, p2.path)


def without_fragment(uri: str) -> str:
    return urldefrag(uri)[0]


def fragment_of(uri: str) -> str:
    return unquote(urlparse(uri).fragment)


def with_fragment(uri: str, fragment: str) -> str:
    return without_fragment(uri) + "#" + fragment


def resolve_reference(base: str, ref: str) -> str:
    return urljoin(base, ref)


def parse_root_ref(root: str) -> list[str]:
    """Parse the Root configuration value into the JSON Pointer tokens of the schemas location.

    Only same-document references are accepted. A trailing slash is ignored,
    so both "#/components/schemas" and "#/components/schemas/" are accepted.
    """
    u = urlparse(root)
    if u.scheme or u.netloc or u.path:
        raise ValueError(f"external references ({root}) not supported in Root")
    return json_pointer_tokens(unquote(u.fragment).removesuffix("/"))


def default_map(tokens: list[str], root_tokens: list[str] | tuple[str, ...] = ()) -> Path:
    """Map the JSON Pointer tokens of a local schema to a CUE path.

    The mapping is:

        []                    (empty path)
        [definitions, foo]    #foo or #."foo"
        [$defs, foo]          #foo or #."foo"
        anything else         _#defs."/json/pointer"

    When root_tokens is set, schemas directly inside that location are named
    like those under $defs.
    """
    if not tokens:
        return Path()
    is_def = len(tokens) == 2 and tokens[0] in ("definitions", "$defs")
    if root_tokens and len(tokens) == len(root_tokens) + 1 and list(tokens[:-1]) == list(root_tokens):
        is_def = True
    if not is_def:
        return Path.make(Selector.hidden(INTERNAL_DEFS), Selector.string(json_pointer_from_tokens(tokens)))
    name = tokens[-1]
    if is_valid_ident(name) and name != ROOT_DEFS[1:] and not is_def_or_hidden(name):
        return Path.make(Selector.definition("#" + name))
    return Path.make(Selector.definition(ROOT_DEFS), Selector.string(name))


def default_map_url(uri: str) -> tuple[str, Path]:
    """Map a schema URI to a CUE import path.

    Any ".json" suffix is trimmed, and the package name "schema" is used if the
    final component of the path is not a valid CUE identifier.
    """
    u = urlparse(uri)
    p = u.path
    base = p.rstrip("/").rsplit("/", 1)[-1]
    if not is_valid_ident(base):
        base = base.removesuffix(".json")
        if not is_valid_ident(base):
            base = "schema"
        p += ":" + base
    if u.scheme and not u.netloc and not u.path.startswith("/"):
        # Opaque URI such as urn:x:y.
        return base64.urlsafe_b64encode(u.path.encode()).decode().rstrip("="), Path()
    return u.netloc + p, Path()


def default_map_ref(loc: SchemaLoc, map_fn: MapFunc = default_map, map_url_fn: MapURLFunc = default_map_url) -> tuple[str, Path]:
    """Map a schema location to an import path and CUE path using map_fn and map_url_fn."""
    import_path = ""
    path = Path()
    if loc.is_local:
        fragment = cue_path_to_json_pointer(loc.path)
    else:
        fragment = fragment_of(loc.id)
        import_path, path = map_url_fn(without_fragment(loc.id))
    tokens = split_fragment(fragment)
    return import_path, path.concat(map_fn(tokens))
