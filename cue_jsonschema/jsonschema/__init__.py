"""Translation between JSON Schema and CUE, in both directions."""

from .config import ExtractConfig, GenerateConfig
from .decoder import extract
from .generator import generate
from .ref import SchemaLoc, default_map, default_map_ref, default_map_url
from .version import Version, parse_version

__all__ = [
    "ExtractConfig",
    "GenerateConfig",
    "SchemaLoc",
    "Version",
    "default_map",
    "default_map_ref",
    "default_map_url",
    "extract",
    "generate",
    "parse_version",
]
