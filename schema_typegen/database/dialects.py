"""Dialect registry: one Dialect per supported engine.

A dialect bundles the catalog reader, the type mapper and the default
schema list for its engine. It is chosen once at startup, either by
name or inferred from the connection URL.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional, Tuple, Type

from .base import CatalogReader
from .duckdb import DuckDBReader
from .postgres import PostgresReader
from .snowflake import SnowflakeReader
from .sqlite import SQLiteReader
from .type_mappers import (
    DuckDBTypeMapper,
    PostgresTypeMapper,
    SnowflakeTypeMapper,
    SQLiteTypeMapper,
    TypeMapper,
    TypePolicy,
)


class DialectName(str, Enum):
    """Supported database engines."""
    DUCKDB = "duckdb"
    POSTGRES = "postgres"
    SNOWFLAKE = "snowflake"
    SQLITE = "sqlite"


class Dialect(ABC):
    """Engine-specific capabilities used by the pipeline."""

    name: DialectName
    default_schemas: Tuple[str, ...] = ()
    type_mapper_class: Type[TypeMapper] = TypeMapper

    @abstractmethod
    def create_reader(self, url: str) -> CatalogReader:
        """Create an unconnected catalog reader for ``url``."""
        pass

    def create_type_mapper(self, policy: Optional[TypePolicy] = None) -> TypeMapper:
        return self.type_mapper_class(policy)


class PostgresDialect(Dialect):
    name = DialectName.POSTGRES
    default_schemas = ("public",)
    type_mapper_class = PostgresTypeMapper

    def create_reader(self, url: str) -> CatalogReader:
        return PostgresReader(url=url)


class DuckDBDialect(Dialect):
    name = DialectName.DUCKDB
    default_schemas = ("main",)
    type_mapper_class = DuckDBTypeMapper

    def create_reader(self, url: str) -> CatalogReader:
        return DuckDBReader(connection_string=url)


class SQLiteDialect(Dialect):
    name = DialectName.SQLITE
    default_schemas = ("main",)
    type_mapper_class = SQLiteTypeMapper

    def create_reader(self, url: str) -> CatalogReader:
        return SQLiteReader(database_path=url)


class SnowflakeDialect(Dialect):
    name = DialectName.SNOWFLAKE
    default_schemas = ("PUBLIC",)
    type_mapper_class = SnowflakeTypeMapper

    def create_reader(self, url: str) -> CatalogReader:
        return SnowflakeReader(url=url)


DIALECTS: Dict[DialectName, Dialect] = {
    dialect.name: dialect
    for dialect in (PostgresDialect(), DuckDBDialect(), SQLiteDialect(), SnowflakeDialect())
}


def get_dialect(name) -> Dialect:
    """Look up a dialect by name (``DialectName`` or its string value)."""
    return DIALECTS[DialectName(name)]


def infer_dialect_name(url: str) -> Optional[DialectName]:
    """Guess the dialect from a connection URL or file path."""
    lowered = url.strip().lower()
    if lowered.startswith(("postgres://", "postgresql://")):
        return DialectName.POSTGRES
    if lowered.startswith("snowflake://"):
        return DialectName.SNOWFLAKE
    if lowered.startswith("duckdb:") or lowered.endswith(".duckdb"):
        return DialectName.DUCKDB
    if lowered.startswith("sqlite:") or lowered.endswith((".db", ".sqlite", ".sqlite3")):
        return DialectName.SQLITE
    return None
