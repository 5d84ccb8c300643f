"""Raw catalog descriptors returned by catalog readers."""

from typing import Optional, Tuple
from dataclasses import dataclass, field

from ..schema.model import TableKind, qualify


@dataclass(frozen=True)
class ColumnDescriptor:
    """A column exactly as the catalog reports it."""
    name: str
    data_type: str
    data_type_schema: Optional[str] = None
    is_nullable: bool = True
    has_default: bool = False
    is_auto_incrementing: bool = False
    is_primary_key: bool = False
    is_array: bool = False
    # Set when the catalog says the type is an enum; a missing enum is fatal.
    is_enum: bool = False
    # Labels of an enum declared inline on the column (DuckDB ENUM('a', 'b')).
    enum_labels: Optional[Tuple[str, ...]] = None
    comment: Optional[str] = None

    @property
    def qualified_type(self) -> str:
        return qualify(self.data_type_schema, self.data_type)


@dataclass(frozen=True)
class TableDescriptor:
    """A table, view or partition as listed by the catalog."""
    schema: str
    name: str
    kind: TableKind = TableKind.TABLE
    # Qualified name of the parent when this table is a partition.
    partition_of: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema, self.name)

    @property
    def is_partition(self) -> bool:
        return self.partition_of is not None


@dataclass(frozen=True)
class EnumDescriptor:
    schema: str
    name: str

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema, self.name)


@dataclass(frozen=True)
class DomainDescriptor:
    """A domain type and the type it is declared over."""
    schema: str
    name: str
    base_type: str
    base_type_schema: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema, self.name)

    @property
    def qualified_base_type(self) -> str:
        return qualify(self.base_type_schema, self.base_type)


@dataclass(frozen=True)
class TableSnapshot:
    table: TableDescriptor
    columns: Tuple[ColumnDescriptor, ...] = ()


@dataclass(frozen=True)
class EnumSnapshot:
    enum: EnumDescriptor
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogSnapshot:
    """Everything one catalog read observed, in catalog order."""
    dialect: str
    tables: Tuple[TableSnapshot, ...] = ()
    enums: Tuple[EnumSnapshot, ...] = ()
    domains: Tuple[DomainDescriptor, ...] = field(default_factory=tuple)
