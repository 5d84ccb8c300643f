"""Catalog introspection module for schema-typegen.

This module provides dialect-agnostic catalog reading with specific
implementations for PostgreSQL, DuckDB, SQLite and Snowflake.
"""

from .models import (
    CatalogSnapshot,
    ColumnDescriptor,
    DomainDescriptor,
    EnumDescriptor,
    EnumSnapshot,
    TableDescriptor,
    TableSnapshot,
)
from .base import CatalogReader
from .type_mappers import (
    DateParser,
    NumericParser,
    TypePolicy,
    TypeMapper,
    PostgresTypeMapper,
    DuckDBTypeMapper,
    SQLiteTypeMapper,
    SnowflakeTypeMapper,
)
from .postgres import PostgresReader
from .duckdb import DuckDBReader
from .sqlite import SQLiteReader
from .snowflake import SnowflakeReader
from .dialects import Dialect, DialectName, get_dialect, infer_dialect_name

__all__ = [
    # Descriptors
    "CatalogSnapshot",
    "ColumnDescriptor",
    "DomainDescriptor",
    "EnumDescriptor",
    "EnumSnapshot",
    "TableDescriptor",
    "TableSnapshot",
    # Base classes
    "CatalogReader",
    # Type mappers
    "DateParser",
    "NumericParser",
    "TypePolicy",
    "TypeMapper",
    "PostgresTypeMapper",
    "DuckDBTypeMapper",
    "SQLiteTypeMapper",
    "SnowflakeTypeMapper",
    # Readers
    "PostgresReader",
    "DuckDBReader",
    "SQLiteReader",
    "SnowflakeReader",
    # Dialects
    "Dialect",
    "DialectName",
    "get_dialect",
    "infer_dialect_name",
]
