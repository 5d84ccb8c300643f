"""Canonical schema model and naming rules.

The stages that build and rewrite the model live in
``schema_typegen.schema.normalizer`` and ``schema_typegen.schema.overrides``.
"""

from .model import (
    ArrayOf,
    Column,
    ColumnType,
    EnumRef,
    EnumType,
    Override,
    Primitive,
    PrimitiveKind,
    Representation,
    SchemaModel,
    Table,
    TableKind,
    Unknown,
)
from .naming import IdentifierRole, NamingPolicy, RuntimeEnumsStyle, transform

__all__ = [
    # Data models
    "ArrayOf",
    "Column",
    "ColumnType",
    "EnumRef",
    "EnumType",
    "Override",
    "Primitive",
    "PrimitiveKind",
    "Representation",
    "SchemaModel",
    "Table",
    "TableKind",
    "Unknown",
    # Naming
    "IdentifierRole",
    "NamingPolicy",
    "RuntimeEnumsStyle",
    "transform",
]
