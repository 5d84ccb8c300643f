"""Database-specific type mapping strategies.

Each mapper owns a finite table of native type names. Anything outside
the table becomes ``Unknown`` so generation degrades instead of failing.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Collection, Dict, FrozenSet, Optional

from ..schema.model import (
    ArrayOf,
    ColumnType,
    EnumRef,
    Primitive,
    PrimitiveKind,
    Representation,
    Unknown,
    qualify,
)


class DateParser(str, Enum):
    STRING = "string"
    TIMESTAMP = "timestamp"


class NumericParser(str, Enum):
    NUMBER = "number"
    NUMBER_OR_STRING = "number-or-string"
    STRING = "string"


@dataclass(frozen=True)
class TypePolicy:
    """Representation choices for dates and arbitrary-precision numbers."""
    date_parser: DateParser = DateParser.TIMESTAMP
    numeric_parser: NumericParser = NumericParser.STRING


_MODIFIERS = re.compile(r"\(.*?\)")
_WHITESPACE = re.compile(r"\s+")


def normalize_type_name(raw_type: str) -> str:
    """Lower-case a native type name and drop its modifiers.

    ``VARCHAR(255)`` becomes ``varchar``; ``timestamp(3) with time zone``
    becomes ``timestamp with time zone``.
    """
    name = _MODIFIERS.sub("", raw_type.lower())
    return _WHITESPACE.sub(" ", name).strip()


class TypeMapper:
    """Base type mapper: enum lookup, array handling and scalar table."""

    SCALARS: Dict[str, PrimitiveKind] = {}
    # Pseudo types that imply a server-side default (e.g. serial).
    GENERATED_TYPES: FrozenSet[str] = frozenset()

    def __init__(self, policy: Optional[TypePolicy] = None):
        self.policy = policy or TypePolicy()

    def map(
        self,
        raw_type: str,
        enum_names: Collection[str] = (),
        type_schema: Optional[str] = None,
        is_array: bool = False,
    ) -> ColumnType:
        """Map a native column type to its canonical ColumnType.

        Args:
            raw_type: Native type name as reported by the catalog
            enum_names: Qualified names of the enums in the catalog
            type_schema: Schema the type is declared in, if any
            is_array: True when raw_type names the element of an array

        Returns:
            Exactly one ColumnType variant; never raises
        """
        stripped = raw_type.strip()
        if is_array:
            return ArrayOf(self.map(stripped, enum_names, type_schema))
        if stripped.endswith("[]"):
            return ArrayOf(self.map(stripped[:-2], enum_names, type_schema))

        qualified = qualify(type_schema, stripped)
        if qualified in enum_names:
            return EnumRef(qualified)
        if stripped in enum_names:
            return EnumRef(stripped)

        kind = self.map_scalar(stripped)
        if kind is None:
            return Unknown(stripped)
        return Primitive(kind, self.representation_for(kind))

    def map_scalar(self, raw_type: str) -> Optional[PrimitiveKind]:
        return self.SCALARS.get(normalize_type_name(raw_type))

    def representation_for(self, kind: PrimitiveKind) -> Representation:
        if kind == PrimitiveKind.DATE and self.policy.date_parser == DateParser.STRING:
            return Representation.STRING
        if kind == PrimitiveKind.DECIMAL:
            if self.policy.numeric_parser == NumericParser.NUMBER:
                return Representation.NUMBER
            if self.policy.numeric_parser == NumericParser.NUMBER_OR_STRING:
                return Representation.NUMBER_OR_STRING
        return Representation.DEFAULT

    def implies_default(self, raw_type: str) -> bool:
        return normalize_type_name(raw_type) in self.GENERATED_TYPES


_B = PrimitiveKind


class PostgresTypeMapper(TypeMapper):
    """Type mapper for PostgreSQL (pg_type names and SQL spellings)."""

    SCALARS = {
        "bool": _B.BOOLEAN,
        "boolean": _B.BOOLEAN,
        "int2": _B.INTEGER,
        "int4": _B.INTEGER,
        "smallint": _B.INTEGER,
        "integer": _B.INTEGER,
        "int": _B.INTEGER,
        "oid": _B.INTEGER,
        "serial": _B.INTEGER,
        "serial2": _B.INTEGER,
        "serial4": _B.INTEGER,
        "smallserial": _B.INTEGER,
        "int8": _B.BIGINT,
        "bigint": _B.BIGINT,
        "bigserial": _B.BIGINT,
        "serial8": _B.BIGINT,
        "float4": _B.FLOAT,
        "float8": _B.FLOAT,
        "real": _B.FLOAT,
        "double precision": _B.FLOAT,
        "numeric": _B.DECIMAL,
        "decimal": _B.DECIMAL,
        "money": _B.DECIMAL,
        "text": _B.TEXT,
        "varchar": _B.TEXT,
        "character varying": _B.TEXT,
        "bpchar": _B.TEXT,
        "char": _B.TEXT,
        "character": _B.TEXT,
        "name": _B.TEXT,
        "citext": _B.TEXT,
        "time": _B.TEXT,
        "timetz": _B.TEXT,
        "time without time zone": _B.TEXT,
        "time with time zone": _B.TEXT,
        "inet": _B.TEXT,
        "cidr": _B.TEXT,
        "macaddr": _B.TEXT,
        "date": _B.DATE,
        "timestamp": _B.TIMESTAMP,
        "timestamp without time zone": _B.TIMESTAMP,
        "timestamptz": _B.TIMESTAMPTZ,
        "timestamp with time zone": _B.TIMESTAMPTZ,
        "json": _B.JSON,
        "jsonb": _B.JSON,
        "bytea": _B.BINARY,
        "uuid": _B.UUID,
    }
    GENERATED_TYPES = frozenset({
        "serial", "serial2", "serial4", "serial8", "smallserial", "bigserial",
    })


class DuckDBTypeMapper(TypeMapper):
    """Type mapper for DuckDB database types."""

    SCALARS = {
        "boolean": _B.BOOLEAN,
        "bool": _B.BOOLEAN,
        "tinyint": _B.INTEGER,
        "smallint": _B.INTEGER,
        "integer": _B.INTEGER,
        "int": _B.INTEGER,
        "int4": _B.INTEGER,
        "utinyint": _B.INTEGER,
        "usmallint": _B.INTEGER,
        "uinteger": _B.INTEGER,
        "bigint": _B.BIGINT,
        "int8": _B.BIGINT,
        "ubigint": _B.BIGINT,
        "hugeint": _B.BIGINT,
        "uhugeint": _B.BIGINT,
        "double": _B.FLOAT,
        "float": _B.FLOAT,
        "float4": _B.FLOAT,
        "float8": _B.FLOAT,
        "real": _B.FLOAT,
        "decimal": _B.DECIMAL,
        "numeric": _B.DECIMAL,
        "varchar": _B.TEXT,
        "text": _B.TEXT,
        "string": _B.TEXT,
        "time": _B.TEXT,
        "interval": _B.TEXT,
        "date": _B.DATE,
        "timestamp": _B.TIMESTAMP,
        "datetime": _B.TIMESTAMP,
        "timestamp_ns": _B.TIMESTAMP,
        "timestamp_ms": _B.TIMESTAMP,
        "timestamp_s": _B.TIMESTAMP,
        "timestamp with time zone": _B.TIMESTAMPTZ,
        "timestamptz": _B.TIMESTAMPTZ,
        "json": _B.JSON,
        "blob": _B.BINARY,
        "bytea": _B.BINARY,
        "uuid": _B.UUID,
    }


class SQLiteTypeMapper(TypeMapper):
    """Type mapper for SQLite declared column types."""

    SCALARS = {
        "boolean": _B.BOOLEAN,
        "bool": _B.BOOLEAN,
        "integer": _B.INTEGER,
        "int": _B.INTEGER,
        "tinyint": _B.INTEGER,
        "smallint": _B.INTEGER,
        "mediumint": _B.INTEGER,
        "bigint": _B.BIGINT,
        "real": _B.FLOAT,
        "double": _B.FLOAT,
        "double precision": _B.FLOAT,
        "float": _B.FLOAT,
        "numeric": _B.DECIMAL,
        "decimal": _B.DECIMAL,
        "text": _B.TEXT,
        "varchar": _B.TEXT,
        "character": _B.TEXT,
        "nvarchar": _B.TEXT,
        "char": _B.TEXT,
        "clob": _B.TEXT,
        "date": _B.DATE,
        "datetime": _B.TIMESTAMP,
        "timestamp": _B.TIMESTAMP,
        "json": _B.JSON,
        "blob": _B.BINARY,
        "uuid": _B.UUID,
    }


class SnowflakeTypeMapper(TypeMapper):
    """Type mapper for Snowflake database types."""

    SCALARS = {
        "boolean": _B.BOOLEAN,
        "int": _B.INTEGER,
        "integer": _B.INTEGER,
        "smallint": _B.INTEGER,
        "tinyint": _B.INTEGER,
        "byteint": _B.INTEGER,
        "bigint": _B.BIGINT,
        "float": _B.FLOAT,
        "float4": _B.FLOAT,
        "float8": _B.FLOAT,
        "double": _B.FLOAT,
        "double precision": _B.FLOAT,
        "real": _B.FLOAT,
        "decimal": _B.DECIMAL,
        "numeric": _B.DECIMAL,
        "varchar": _B.TEXT,
        "text": _B.TEXT,
        "string": _B.TEXT,
        "char": _B.TEXT,
        "character": _B.TEXT,
        "time": _B.TEXT,
        "date": _B.DATE,
        "datetime": _B.TIMESTAMP,
        "timestamp": _B.TIMESTAMP,
        "timestamp_ntz": _B.TIMESTAMP,
        "timestamp_ltz": _B.TIMESTAMPTZ,
        "timestamp_tz": _B.TIMESTAMPTZ,
        "variant": _B.JSON,
        "object": _B.JSON,
        "array": _B.JSON,
        "binary": _B.BINARY,
        "varbinary": _B.BINARY,
    }

    _NUMBER = re.compile(r"^number\s*(?:\(\s*\d+\s*(?:,\s*(\d+)\s*)?\))?$")

    def map_scalar(self, raw_type: str) -> Optional[PrimitiveKind]:
        # NUMBER(p, 0) holds integers; any other scale is a decimal.
        match = self._NUMBER.match(raw_type.strip().lower())
        if match:
            scale = match.group(1)
            if scale is None or int(scale) == 0:
                return PrimitiveKind.INTEGER
            return PrimitiveKind.DECIMAL
        return super().map_scalar(raw_type)
