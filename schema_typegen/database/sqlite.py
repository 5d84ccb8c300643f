"""SQLite catalog reader."""

import sqlite3
from typing import List, Optional, Sequence

from ..errors import CatalogError
from ..schema.model import TableKind
from .base import CatalogReader
from .models import ColumnDescriptor, TableDescriptor

MAIN_SCHEMA = "main"


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteReader(CatalogReader):
    """Catalog reader for SQLite database files.

    SQLite has a single ``main`` schema, no enum types and no domains.
    """

    DIALECT = "sqlite"

    def __init__(self, database_path: Optional[str] = None, connection: Optional[sqlite3.Connection] = None):
        self.database_path = database_path
        self._connection = connection
        self._owns_connection = connection is None

    def _resolve_path(self) -> str:
        path = self.database_path or ":memory:"
        for prefix in ("sqlite:///", "sqlite://", "sqlite:"):
            if path.startswith(prefix):
                return path[len(prefix):]
        return path

    def connect(self) -> sqlite3.Connection:
        if self._connection is not None:
            return self._connection
        path = self._resolve_path()
        try:
            if path == ":memory:":
                self._connection = sqlite3.connect(path)
            else:
                self._connection = sqlite3.connect(f"file:{path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise CatalogError(self.DIALECT, f"Could not open '{path}': {e}", cause=e) from e
        return self._connection

    def close(self):
        if self._connection is not None and self._owns_connection:
            self._connection.close()
        self._connection = None

    def _execute_query(self, sql: str, params: Sequence = ()) -> List[tuple]:
        conn = self.connect()
        try:
            return conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise CatalogError(self.DIALECT, f"Catalog query failed: {e}", cause=e) from e

    def list_tables(self, schemas: Optional[Sequence[str]] = None) -> List[TableDescriptor]:
        if schemas and MAIN_SCHEMA not in schemas:
            return []
        rows = self._execute_query("""
            SELECT name, type
            FROM sqlite_master
            WHERE type IN ('table', 'view')
              AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'
            ORDER BY name
        """)
        return [
            TableDescriptor(
                schema=MAIN_SCHEMA,
                name=name,
                kind=TableKind.VIEW if kind == 'view' else TableKind.TABLE,
            )
            for name, kind in rows
        ]

    def list_columns(self, table: TableDescriptor) -> List[ColumnDescriptor]:
        rows = self._execute_query(f"PRAGMA table_info({_quote_identifier(table.name)})")
        pk_columns = [row for row in rows if row[5]]
        # A lone INTEGER PRIMARY KEY aliases the rowid and is assigned automatically.
        rowid_alias = None
        if len(pk_columns) == 1 and pk_columns[0][2].strip().upper() == "INTEGER":
            rowid_alias = pk_columns[0][1]

        columns = []
        for cid, name, data_type, notnull, default, pk in rows:
            is_rowid = name == rowid_alias
            columns.append(ColumnDescriptor(
                name=name,
                data_type=data_type or "",
                is_nullable=not notnull and not is_rowid,
                has_default=default is not None or is_rowid,
                is_auto_incrementing=is_rowid,
                is_primary_key=bool(pk),
            ))
        return columns
