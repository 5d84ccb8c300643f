"""PostgreSQL catalog reader."""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from ..errors import CatalogError
from ..schema.model import TableKind
from .base import CatalogReader
from .models import ColumnDescriptor, DomainDescriptor, EnumDescriptor, TableDescriptor

logger = logging.getLogger(__name__)

_RELKINDS = {
    'r': TableKind.TABLE,
    'p': TableKind.TABLE,
    'v': TableKind.VIEW,
    'm': TableKind.MATERIALIZED_VIEW,
}

TABLES_SQL = """
    SELECT n.nspname, c.relname, c.relkind, pn.nspname, p.relname
    FROM pg_catalog.pg_class c
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    LEFT JOIN pg_catalog.pg_inherits i ON i.inhrelid = c.oid AND c.relispartition
    LEFT JOIN pg_catalog.pg_class p ON p.oid = i.inhparent
    LEFT JOIN pg_catalog.pg_namespace pn ON pn.oid = p.relnamespace
    WHERE c.relkind IN ('r', 'p', 'v', 'm')
      AND n.nspname NOT IN ('pg_catalog', 'information_schema')
      AND n.nspname NOT LIKE 'pg_toast%%'
      AND n.nspname NOT LIKE 'pg_temp%%'
      {schema_filter}
    ORDER BY n.nspname, c.relname
"""

COLUMNS_SQL = """
    SELECT
        a.attname,
        t.typname,
        tn.nspname,
        t.typtype,
        et.typname,
        etn.nspname,
        et.typtype,
        NOT a.attnotnull,
        a.atthasdef OR a.attidentity <> '' OR a.attgenerated <> '',
        a.attidentity <> '' OR COALESCE(pg_get_expr(d.adbin, d.adrelid), '') LIKE 'nextval(%%',
        EXISTS (
            SELECT 1 FROM pg_catalog.pg_index ix
            WHERE ix.indrelid = a.attrelid AND ix.indisprimary AND a.attnum = ANY(ix.indkey)
        ),
        col_description(a.attrelid, a.attnum)
    FROM pg_catalog.pg_attribute a
    JOIN pg_catalog.pg_class c ON c.oid = a.attrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
    JOIN pg_catalog.pg_type t ON t.oid = a.atttypid
    JOIN pg_catalog.pg_namespace tn ON tn.oid = t.typnamespace
    LEFT JOIN pg_catalog.pg_type et ON et.oid = t.typelem AND t.typcategory = 'A'
    LEFT JOIN pg_catalog.pg_namespace etn ON etn.oid = et.typnamespace
    LEFT JOIN pg_catalog.pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
    WHERE n.nspname = %s AND c.relname = %s
      AND a.attnum > 0 AND NOT a.attisdropped
    ORDER BY a.attnum
"""

ENUMS_SQL = """
    SELECT n.nspname, t.typname
    FROM pg_catalog.pg_type t
    JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
    WHERE t.typtype = 'e'
    ORDER BY n.nspname, t.typname
"""

ENUM_LABELS_SQL = """
    SELECT e.enumlabel
    FROM pg_catalog.pg_enum e
    JOIN pg_catalog.pg_type t ON t.oid = e.enumtypid
    JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
    WHERE n.nspname = %s AND t.typname = %s
    ORDER BY e.enumsortorder
"""

DOMAINS_SQL = """
    SELECT n.nspname, t.typname, bt.typname, bn.nspname
    FROM pg_catalog.pg_type t
    JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
    JOIN pg_catalog.pg_type bt ON bt.oid = t.typbasetype
    JOIN pg_catalog.pg_namespace bn ON bn.oid = bt.typnamespace
    WHERE t.typtype = 'd'
      AND n.nspname NOT IN ('pg_catalog', 'information_schema')
    ORDER BY n.nspname, t.typname
"""

# Built-in types live in pg_catalog; leave them unqualified for the mapper.
_SYSTEM_TYPE_SCHEMA = 'pg_catalog'


class PostgresReader(CatalogReader):
    """Catalog reader for PostgreSQL, backed by psycopg2."""

    DIALECT = "postgres"

    def __init__(self, url: Optional[str] = None, connection=None):
        """Initialize the reader.

        Args:
            url: libpq connection string, e.g. postgres://user:pw@host/db
            connection: An already open DB-API connection (takes precedence)
        """
        self.url = url
        self._connection = connection
        self._owns_connection = connection is None

    def connect(self):
        if self._connection is not None:
            return self._connection

        try:
            import psycopg2
        except ImportError:
            raise ImportError(
                "psycopg2 is required for PostgreSQL introspection. "
                "Install it with: pip install psycopg2-binary"
            )

        try:
            self._connection = psycopg2.connect(self.url)
        except psycopg2.Error as e:
            raise CatalogError(self.DIALECT, f"Could not connect: {e}", cause=e) from e
        return self._connection

    def close(self):
        if self._connection is not None and self._owns_connection:
            self._connection.close()
        self._connection = None

    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """Run all catalog queries in one read-only repeatable-read transaction."""
        conn = self.connect()
        try:
            conn.set_session(isolation_level='REPEATABLE READ', readonly=True)
        except Exception as e:
            raise CatalogError(self.DIALECT, f"Could not start snapshot: {e}", cause=e) from e
        try:
            yield
        finally:
            try:
                conn.rollback()
            except Exception as e:
                # Read-only transaction; nothing is lost if the connection is already gone.
                logger.warning("Could not end catalog snapshot: %s", e)

    def _execute_query(self, sql: str, params: Sequence = ()) -> List[tuple]:
        conn = self.connect()
        try:
            with conn.cursor() as cursor:
                cursor.execute(sql, tuple(params))
                return cursor.fetchall()
        except Exception as e:
            raise CatalogError(self.DIALECT, f"Catalog query failed: {e}", cause=e) from e

    def list_tables(self, schemas: Optional[Sequence[str]] = None) -> List[TableDescriptor]:
        params: Sequence = ()
        schema_filter = ""
        if schemas:
            schema_filter = "AND n.nspname = ANY(%s)"
            params = (list(schemas),)

        rows = self._execute_query(TABLES_SQL.format(schema_filter=schema_filter), params)
        tables = []
        for schema, name, relkind, parent_schema, parent_name in rows:
            partition_of = f"{parent_schema}.{parent_name}" if parent_name else None
            tables.append(TableDescriptor(
                schema=schema,
                name=name,
                kind=_RELKINDS[relkind],
                partition_of=partition_of,
            ))
        return tables

    def list_columns(self, table: TableDescriptor) -> List[ColumnDescriptor]:
        rows = self._execute_query(COLUMNS_SQL, (table.schema, table.name))

        columns = []
        for row in rows:
            (name, type_name, type_schema, typtype, elem_name, elem_schema,
             elem_typtype, is_nullable, has_default, is_auto, is_pk, comment) = row

            is_array = elem_name is not None
            if is_array:
                type_name, type_schema, typtype = elem_name, elem_schema, elem_typtype

            columns.append(ColumnDescriptor(
                name=name,
                data_type=type_name,
                data_type_schema=None if type_schema == _SYSTEM_TYPE_SCHEMA else type_schema,
                is_nullable=bool(is_nullable),
                has_default=bool(has_default),
                is_auto_incrementing=bool(is_auto),
                is_primary_key=bool(is_pk),
                is_array=is_array,
                is_enum=typtype == 'e',
                comment=comment,
            ))
        return columns

    def list_enums(self) -> List[EnumDescriptor]:
        return [EnumDescriptor(schema=row[0], name=row[1]) for row in self._execute_query(ENUMS_SQL)]

    def list_enum_labels(self, enum: EnumDescriptor) -> List[str]:
        return [row[0] for row in self._execute_query(ENUM_LABELS_SQL, (enum.schema, enum.name))]

    def list_domains(self) -> List[DomainDescriptor]:
        return [
            DomainDescriptor(
                schema=schema,
                name=name,
                base_type=base_type,
                base_type_schema=None if base_schema == _SYSTEM_TYPE_SCHEMA else base_schema,
            )
            for schema, name, base_type, base_schema in self._execute_query(DOMAINS_SQL)
        ]
