"""
Configuration for schema extraction and generation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..cue_ast.nodes import Expr
from ..values.expr_value import ExprValue
from ..values.path import Path
from .ref import MapFunc, MapRefFunc, MapURLFunc
from .version import Version, parse_version

# Called for every schema that extraction places in another package, with
# the import path, the CUE path within that package, the schema itself and
# its doc comment.
DefineSchemaFunc = Callable[[str, Path, Expr, str | None], None]

# Maps the root value and the path of a reference to a $defs entry name.
NameFunc = Callable[[ExprValue, Path], str]


@dataclass
class ExtractConfig:
    """Configuration options for extracting CUE from JSON Schema."""

    # Package name for the generated file; no package clause when empty
    pkg_name: str = ""

    # Base URI of the schema when it does not declare one
    id: str = ""

    # JSON Pointer, in URI fragment form, to the location holding the schemas
    # to extract, such as "#/components/schemas" for OpenAPI documents.
    # When empty, the whole document is a single schema.
    root: str = ""

    # Do not report an error when the root location does not exist
    allow_non_existent_root: bool = False

    # Treat the value at root as a single schema rather than a map of schemas
    single_root: bool = False

    # Maps a schema location to the import path and CUE path holding it.
    # Takes precedence over map_url and map.
    map_ref: MapRefFunc | None = None

    # Maps the URI of an external schema to an import path and a CUE path
    map_url: MapURLFunc | None = None

    # Maps the JSON Pointer tokens of a local schema to a CUE path
    map: MapFunc | None = None

    # Called for every schema given a name
    define_schema: DefineSchemaFunc | None = None

    # Report unknown keywords and unsupported features as errors
    strict: bool = False

    # Report unsupported features as errors
    strict_features: bool = False

    # Report unknown keywords and formats as errors
    strict_keywords: bool = False

    # Version assumed when the schema has no $schema keyword
    default_version: Version = Version.DRAFT2020_12

    # Leave structs open unless additionalProperties is explicitly false
    open_only_when_explicit: bool = False

    # Name of the input, used in error positions
    source: str = ""

    @staticmethod
    def from_dict(d: dict) -> ExtractConfig:
        """Create a config from a dictionary."""
        config = ExtractConfig()
        for k, v in d.items():
            if k == "default_version" and isinstance(v, str):
                config.default_version = parse_version(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert the serializable options to a dictionary. Callbacks are left out."""
        return {
            "pkg_name": self.pkg_name,
            "id": self.id,
            "root": self.root,
            "allow_non_existent_root": self.allow_non_existent_root,
            "single_root": self.single_root,
            "strict": self.strict,
            "strict_features": self.strict_features,
            "strict_keywords": self.strict_keywords,
            "default_version": self.default_version.cli_name,
            "open_only_when_explicit": self.open_only_when_explicit,
            "source": self.source,
        }


@dataclass
class GenerateConfig:
    """Configuration options for generating JSON Schema from CUE."""

    # Version of JSON Schema to generate; only draft 2020-12 is supported
    version: Version = Version.DRAFT2020_12

    # Maps references to $defs entry names; default_name_func when None
    name_func: NameFunc | None = None

    # Only close objects that are closed with close(), and say so
    # explicitly when a struct is open
    explicit_open: bool = False

    @staticmethod
    def from_dict(d: dict) -> GenerateConfig:
        """Create a config from a dictionary."""
        config = GenerateConfig()
        for k, v in d.items():
            if k == "version" and isinstance(v, str):
                config.version = parse_version(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        return {
            "version": self.version.cli_name,
            "explicit_open": self.explicit_open,
        }
