"""DuckDB catalog reader."""

import re
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

from ..errors import CatalogError
from ..schema.model import TableKind
from .base import CatalogReader
from .models import ColumnDescriptor, EnumDescriptor, TableDescriptor

_INLINE_ENUM = re.compile(r"^ENUM\((.*)\)$", re.IGNORECASE | re.DOTALL)
_ENUM_LABEL = re.compile(r"'((?:[^']|'')*)'")


def parse_inline_enum(data_type: str) -> Optional[Tuple[str, ...]]:
    """Parse ``ENUM('a', 'b')`` into its labels, or None if not an enum."""
    match = _INLINE_ENUM.match(data_type.strip())
    if not match:
        return None
    return tuple(label.replace("''", "'") for label in _ENUM_LABEL.findall(match.group(1)))


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class DuckDBReader(CatalogReader):
    """Catalog reader for DuckDB database files."""

    DIALECT = "duckdb"
    EXCLUDED_SCHEMAS = {'information_schema', 'pg_catalog'}

    def __init__(
        self,
        database_path: Optional[str] = None,
        connection_string: Optional[str] = None,
        read_only: bool = True,
        connection=None,
    ):
        """Initialize DuckDB reader.

        Args:
            database_path: Path to .duckdb file (can be :memory: for in-memory)
            connection_string: Alternative connection string format
                               (e.g., duckdb:///path/to/db.duckdb)
            read_only: Open database in read-only mode (default True for introspection)
            connection: An already open duckdb connection (takes precedence)
        """
        self.database_path = database_path
        self.connection_string = connection_string
        self.read_only = read_only
        self._connection = connection
        self._owns_connection = connection is None
        self._enums: Optional[List[EnumDescriptor]] = None

    def _resolve_path(self) -> str:
        if self.database_path:
            return self.database_path
        if self.connection_string:
            # Remove duckdb:/// prefix if present
            path = self.connection_string
            if path.startswith('duckdb:///'):
                path = path[10:]
            elif path.startswith('duckdb://'):
                path = path[9:]
            elif path.startswith('duckdb:'):
                path = path[7:]
            # Remove query parameters if any
            return path.split('?')[0]
        return ':memory:'

    def connect(self):
        """Connect to the DuckDB database."""
        if self._connection is not None:
            return self._connection

        try:
            import duckdb
        except ImportError:
            raise ImportError(
                "duckdb is required. "
                "Install it with: pip install duckdb"
            )

        path = self._resolve_path()
        try:
            if path == ':memory:':
                self._connection = duckdb.connect(path)
            else:
                self._connection = duckdb.connect(path, read_only=self.read_only)
        except duckdb.Error as e:
            raise CatalogError(self.DIALECT, f"Could not open '{path}': {e}", cause=e) from e
        return self._connection

    def close(self):
        """Close the DuckDB connection."""
        if self._connection is not None and self._owns_connection:
            self._connection.close()
        self._connection = None

    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """Read the enum types once for all column listings in this pass."""
        self._enums = self.list_enums()
        try:
            yield
        finally:
            self._enums = None

    def _execute_query(self, sql: str, params: Sequence = ()) -> List[tuple]:
        """Execute a SQL query and return results."""
        conn = self.connect()
        try:
            return conn.execute(sql, list(params)).fetchall()
        except Exception as e:
            raise CatalogError(self.DIALECT, f"Catalog query failed: {e}", cause=e) from e

    def list_tables(self, schemas: Optional[Sequence[str]] = None) -> List[TableDescriptor]:
        """List base tables and views ordered by schema and name."""
        result = self._execute_query("""
            SELECT table_schema, table_name, table_type
            FROM information_schema.tables
            WHERE table_catalog = current_database()
              AND table_type IN ('BASE TABLE', 'VIEW')
            ORDER BY table_schema, table_name
        """)

        tables = []
        for schema, name, table_type in result:
            if schema.lower() in self.EXCLUDED_SCHEMAS:
                continue
            if schemas and schema not in schemas:
                continue
            kind = TableKind.VIEW if table_type == 'VIEW' else TableKind.TABLE
            tables.append(TableDescriptor(schema=schema, name=name, kind=kind))
        return tables

    def list_columns(self, table: TableDescriptor) -> List[ColumnDescriptor]:
        """List columns in ordinal order."""
        result = self._execute_query("""
            SELECT column_name, data_type, is_nullable, column_default, comment
            FROM duckdb_columns()
            WHERE database_name = current_database()
              AND schema_name = ?
              AND table_name = ?
            ORDER BY column_index
        """, (table.schema, table.name))
        primary_keys = self._get_primary_keys(table)
        enum_names = {e.name for e in self.list_enums() if e.schema == table.schema}

        columns = []
        for name, data_type, is_nullable, default, comment in result:
            enum_labels = parse_inline_enum(data_type)
            columns.append(ColumnDescriptor(
                name=name,
                data_type=data_type,
                data_type_schema=table.schema if data_type in enum_names else None,
                is_nullable=bool(is_nullable),
                has_default=default is not None,
                is_auto_incrementing=default is not None and 'nextval(' in str(default),
                is_primary_key=name in primary_keys,
                is_enum=data_type in enum_names,
                enum_labels=enum_labels,
                comment=comment,
            ))
        return columns

    def _get_primary_keys(self, table: TableDescriptor) -> List[str]:
        """Get primary keys using the duckdb_constraints() table function."""
        result = self._execute_query("""
            SELECT constraint_column_names
            FROM duckdb_constraints()
            WHERE schema_name = ?
              AND table_name = ?
              AND constraint_type = 'PRIMARY KEY'
        """, (table.schema, table.name))

        if not result:
            return []
        pk_columns = result[0][0]
        if isinstance(pk_columns, list):
            return pk_columns
        return [pk_columns]

    def list_enums(self) -> List[EnumDescriptor]:
        if self._enums is not None:
            return list(self._enums)
        result = self._execute_query("""
            SELECT schema_name, type_name
            FROM duckdb_types()
            WHERE logical_type = 'ENUM' AND NOT internal
            ORDER BY schema_name, type_name
        """)
        return [EnumDescriptor(schema=row[0], name=row[1]) for row in result]

    def list_enum_labels(self, enum: EnumDescriptor) -> List[str]:
        type_name = f"{_quote_identifier(enum.schema)}.{_quote_identifier(enum.name)}"
        result = self._execute_query(f"SELECT unnest(enum_range(NULL::{type_name}))")
        return [row[0] for row in result]
