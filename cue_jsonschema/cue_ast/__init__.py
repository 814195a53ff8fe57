"""CUE syntax trees: node types, construction helpers and source formatting."""

from .nodes import (
    Attribute,
    BadExpr,
    BasicLit,
    BinaryExpr,
    BottomLit,
    CallExpr,
    Ellipsis,
    EmbedDecl,
    Field,
    FieldConstraint,
    File,
    Ident,
    ImportDecl,
    ImportSpec,
    IndexExpr,
    ListLit,
    LitKind,
    Package,
    PatternLabel,
    SelectorExpr,
    StructLit,
    Token,
    UnaryExpr,
)
from .serializer import CueSerializer, format_node

__all__ = [
    "Attribute",
    "BadExpr",
    "BasicLit",
    "BinaryExpr",
    "BottomLit",
    "CallExpr",
    "CueSerializer",
    "Ellipsis",
    "EmbedDecl",
    "Field",
    "FieldConstraint",
    "File",
    "Ident",
    "ImportDecl",
    "ImportSpec",
    "IndexExpr",
    "ListLit",
    "LitKind",
    "Package",
    "PatternLabel",
    "SelectorExpr",
    "StructLit",
    "Token",
    "UnaryExpr",
    "format_node",
]
