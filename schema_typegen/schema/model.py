"""Canonical, dialect-independent schema model.

Every stage after the catalog read works on these immutable values:
the normalizer builds a ``SchemaModel``, the override resolver returns
a new one, and the generator only reads it.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple, Union

from ..errors import SchemaModelError, UnresolvedEnumReferenceError


class PrimitiveKind(str, Enum):
    """Semantic kinds a native column type can resolve to."""
    BOOLEAN = "boolean"
    INTEGER = "integer"
    BIGINT = "bigint"
    FLOAT = "float"
    DECIMAL = "decimal"
    TEXT = "text"
    DATE = "date"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    JSON = "json"
    BINARY = "binary"
    UUID = "uuid"


class Representation(str, Enum):
    """How a primitive is represented on the application side.

    Chosen by the type mapper from the date/numeric parser policy.
    """
    DEFAULT = "default"
    STRING = "string"
    NUMBER = "number"
    NUMBER_OR_STRING = "number-or-string"


class TableKind(str, Enum):
    TABLE = "table"
    VIEW = "view"
    MATERIALIZED_VIEW = "materialized-view"


@dataclass(frozen=True)
class Primitive:
    kind: PrimitiveKind
    representation: Representation = Representation.DEFAULT


@dataclass(frozen=True)
class EnumRef:
    """Reference to an ``EnumType`` by qualified name (``schema.name``)."""
    enum_name: str


@dataclass(frozen=True)
class ArrayOf:
    element: "ColumnType"


@dataclass(frozen=True)
class Unknown:
    """A native type with no mapping; ``raw_type`` is kept verbatim."""
    raw_type: str


@dataclass(frozen=True)
class Override:
    """A user-supplied literal type expression replacing inference."""
    expression: str


ColumnType = Union[Primitive, EnumRef, ArrayOf, Unknown, Override]


def iter_enum_refs(column_type: ColumnType) -> Iterator[EnumRef]:
    """Yield every EnumRef contained in a column type."""
    if isinstance(column_type, EnumRef):
        yield column_type
    elif isinstance(column_type, ArrayOf):
        yield from iter_enum_refs(column_type.element)


def qualify(schema: Optional[str], name: str) -> str:
    return f"{schema}.{name}" if schema else name


@dataclass(frozen=True)
class Column:
    """A table column as the generator sees it."""
    name: str
    type: ColumnType
    nullable: bool = True
    has_default: bool = False
    is_primary_key: bool = False
    comment: Optional[str] = None


@dataclass(frozen=True)
class Table:
    schema: str
    name: str
    columns: Tuple[Column, ...] = ()
    kind: TableKind = TableKind.TABLE

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema, self.name)

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None


@dataclass(frozen=True)
class EnumType:
    """An enumerated type. Labels keep catalog declaration order."""
    schema: str
    name: str
    labels: Tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        return qualify(self.schema, self.name)


@dataclass(frozen=True)
class SchemaModel:
    """The canonical schema: tables and enums in catalog order.

    Construction fails if a qualified name repeats or if a column refers
    to an enum that is not part of the model.
    """
    tables: Tuple[Table, ...] = ()
    enums: Tuple[EnumType, ...] = ()
    default_schemas: Tuple[str, ...] = ()
    _tables_by_name: Dict[str, Table] = field(default=None, init=False, repr=False, compare=False)
    _enums_by_name: Dict[str, EnumType] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        tables_by_name = {}
        for table in self.tables:
            if table.qualified_name in tables_by_name:
                raise SchemaModelError(
                    f"Duplicate table '{table.qualified_name}'",
                    details={"table": table.qualified_name},
                )
            tables_by_name[table.qualified_name] = table

        enums_by_name = {}
        for enum in self.enums:
            if enum.qualified_name in enums_by_name:
                raise SchemaModelError(
                    f"Duplicate enum '{enum.qualified_name}'",
                    details={"enum": enum.qualified_name},
                )
            enums_by_name[enum.qualified_name] = enum

        for table in self.tables:
            for column in table.columns:
                for ref in iter_enum_refs(column.type):
                    if ref.enum_name not in enums_by_name:
                        raise UnresolvedEnumReferenceError(
                            table.qualified_name, column.name, ref.enum_name
                        )

        object.__setattr__(self, "_tables_by_name", tables_by_name)
        object.__setattr__(self, "_enums_by_name", enums_by_name)

    def get_table(self, qualified_name: str) -> Optional[Table]:
        return self._tables_by_name.get(qualified_name)

    def get_enum(self, qualified_name: str) -> Optional[EnumType]:
        return self._enums_by_name.get(qualified_name)

    def with_tables(self, tables: Tuple[Table, ...]) -> "SchemaModel":
        """Return a copy of the model with ``tables`` replaced."""
        return replace(self, tables=tuple(tables))
