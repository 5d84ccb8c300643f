"""Builds the canonical SchemaModel from a catalog snapshot."""

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Dict, List, Optional, Tuple

from ..database.models import CatalogSnapshot, ColumnDescriptor, TableDescriptor
from ..database.type_mappers import TypeMapper
from ..errors import UnresolvedEnumReferenceError
from .model import Column, EnumRef, EnumType, SchemaModel, Table, iter_enum_refs, qualify

logger = logging.getLogger(__name__)


class TableMatcher:
    """Case-insensitive glob matcher for table names.

    Patterns containing a dot match ``schema.table``; others match the
    bare table name.
    """

    def __init__(self, pattern: str):
        self.pattern = pattern.lower()
        self.is_qualified = "." in pattern

    def match(self, schema: Optional[str], name: str) -> bool:
        subject = qualify(schema, name) if self.is_qualified and schema else name
        return fnmatchcase(subject.lower(), self.pattern)


@dataclass(frozen=True)
class SchemaFilters:
    """Which part of the catalog ends up in the model."""
    default_schemas: Tuple[str, ...] = ()
    include_pattern: Optional[str] = None
    exclude_pattern: Optional[str] = None
    domains: bool = True
    partitions: bool = False

    def catalog_schemas(self) -> Optional[Tuple[str, ...]]:
        """Schemas the catalog reader needs to list, or None for all.

        A schema-qualified include pattern can select tables outside the
        default schemas, so every schema has to be read.
        """
        if self.include_pattern and "." in self.include_pattern:
            return None
        return self.default_schemas or None

    def includes(self, table: TableDescriptor) -> bool:
        include = TableMatcher(self.include_pattern) if self.include_pattern else None
        in_scope = table.schema in self.default_schemas or not self.default_schemas
        if include is not None:
            if include.is_qualified:
                in_scope = include.match(table.schema, table.name)
            else:
                in_scope = in_scope and include.match(table.schema, table.name)
        if not in_scope:
            return False
        # Exclude always wins over include.
        if self.exclude_pattern and TableMatcher(self.exclude_pattern).match(table.schema, table.name):
            return False
        return True


def _resolve_domains(snapshot: CatalogSnapshot) -> Dict[str, Tuple[str, Optional[str]]]:
    """Map each qualified domain name to its ultimate (type, schema)."""
    declared = {d.qualified_name: d for d in snapshot.domains}
    resolved = {}
    for name, domain in declared.items():
        base_type, base_schema = domain.base_type, domain.base_type_schema
        seen = {name}
        # Domains may be declared over other domains.
        while qualify(base_schema, base_type) in declared and qualify(base_schema, base_type) not in seen:
            inner = declared[qualify(base_schema, base_type)]
            seen.add(inner.qualified_name)
            base_type, base_schema = inner.base_type, inner.base_type_schema
        resolved[name] = (base_type, base_schema)
    return resolved


def _inline_enum_name(
    table: TableDescriptor,
    column: ColumnDescriptor,
    catalog_enums: Dict[str, object],
    inline_enums: Dict[str, EnumType],
) -> str:
    """Name an inline enum `<table>_<column>`, suffixed when the name is taken."""
    base = f"{table.name}_{column.name}"
    name, suffix = base, 2
    while qualify(table.schema, name) in catalog_enums or qualify(table.schema, name) in inline_enums:
        name = f"{base}_{suffix}"
        suffix += 1
    return name


class SchemaNormalizer:
    """Normalizes catalog descriptors into the canonical model."""

    def __init__(self, mapper: TypeMapper, filters: Optional[SchemaFilters] = None):
        self.mapper = mapper
        self.filters = filters or SchemaFilters()

    def normalize(self, snapshot: CatalogSnapshot) -> SchemaModel:
        """Build the SchemaModel for the tables selected by the filters.

        Args:
            snapshot: A single consistent catalog read

        Returns:
            The immutable SchemaModel

        Raises:
            UnresolvedEnumReferenceError: A column's enum type is missing
        """
        catalog_enums = {e.enum.qualified_name: e for e in snapshot.enums}
        domains = _resolve_domains(snapshot) if self.filters.domains else {}

        tables: List[Table] = []
        inline_enums: Dict[str, EnumType] = {}
        skipped_partitions = 0

        for table_snapshot in snapshot.tables:
            descriptor = table_snapshot.table
            if descriptor.is_partition and not self.filters.partitions:
                skipped_partitions += 1
                continue
            if not self.filters.includes(descriptor):
                continue

            columns = []
            for column in table_snapshot.columns:
                columns.append(self._normalize_column(
                    descriptor, column, catalog_enums, domains, inline_enums,
                ))
            tables.append(Table(
                schema=descriptor.schema,
                name=descriptor.name,
                columns=tuple(columns),
                kind=descriptor.kind,
            ))

        # Keep only enums that in-scope tables reference, in catalog order.
        referenced = {ref.enum_name for t in tables for c in t.columns for ref in iter_enum_refs(c.type)}
        enums = [
            EnumType(schema=e.enum.schema, name=e.enum.name, labels=e.labels)
            for e in snapshot.enums
            if e.enum.qualified_name in referenced
        ]
        enums.extend(inline_enums.values())

        logger.debug(
            "Normalized %d tables and %d enums (%d partitions folded)",
            len(tables), len(enums), skipped_partitions,
        )
        return SchemaModel(
            tables=tuple(tables),
            enums=tuple(enums),
            default_schemas=tuple(self.filters.default_schemas),
        )

    def _normalize_column(
        self,
        table: TableDescriptor,
        column: ColumnDescriptor,
        catalog_enums: Dict[str, object],
        domains: Dict[str, Tuple[str, Optional[str]]],
        inline_enums: Dict[str, EnumType],
    ) -> Column:
        if column.enum_labels is not None:
            enum = EnumType(
                schema=table.schema,
                name=_inline_enum_name(table, column, catalog_enums, inline_enums),
                labels=tuple(column.enum_labels),
            )
            inline_enums[enum.qualified_name] = enum
            column_type = EnumRef(enum.qualified_name)
            return Column(
                name=column.name,
                type=column_type,
                nullable=column.is_nullable,
                has_default=column.has_default or column.is_auto_incrementing,
                is_primary_key=column.is_primary_key,
                comment=column.comment,
            )

        data_type, type_schema = column.data_type, column.data_type_schema
        if column.qualified_type in domains:
            data_type, type_schema = domains[column.qualified_type]

        column_type = self.mapper.map(
            data_type,
            catalog_enums.keys(),
            type_schema=type_schema,
            is_array=column.is_array,
        )
        if column.is_enum and not any(True for _ in iter_enum_refs(column_type)):
            raise UnresolvedEnumReferenceError(
                table.qualified_name, column.name, qualify(type_schema, data_type)
            )

        return Column(
            name=column.name,
            type=column_type,
            nullable=column.is_nullable,
            has_default=(
                column.has_default
                or column.is_auto_incrementing
                or self.mapper.implies_default(data_type)
            ),
            is_primary_key=column.is_primary_key,
            comment=column.comment,
        )


def normalize(snapshot: CatalogSnapshot, filters: SchemaFilters, mapper: TypeMapper) -> SchemaModel:
    """Build the canonical SchemaModel from a catalog snapshot."""
    return SchemaNormalizer(mapper, filters).normalize(snapshot)
