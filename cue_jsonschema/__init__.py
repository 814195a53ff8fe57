"""CUE JSON Schema

A Python package for translating JSON Schema documents into CUE
definitions, and CUE values back into JSON Schema. Drafts 4 through
2020-12 are understood, as well as the OpenAPI 3.0 and Kubernetes CRD
variants of the vocabulary.
"""

__version__ = "1.0.1"
__author__ = "François Lagunas"

from .cue_ast import CueSerializer, format_node
from .errors import ExtractError, GenerateError, SchemaError
from .jsonschema import ExtractConfig, GenerateConfig, Version, extract, generate
from .values import ExprValue, JSONValue

__all__ = [
    "extract",
    "generate",
    "ExtractConfig",
    "GenerateConfig",
    "Version",
    "ExtractError",
    "GenerateError",
    "SchemaError",
    "ExprValue",
    "JSONValue",
    "CueSerializer",
    "format_node",
]
