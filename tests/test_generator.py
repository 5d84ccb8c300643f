"""Tests for TypeScript declaration emission."""

import json

from schema_typegen.database.type_mappers import NumericParser, PostgresTypeMapper, TypePolicy
from schema_typegen.schema.model import (
    ArrayOf,
    Column,
    EnumRef,
    EnumType,
    Override,
    Primitive,
    PrimitiveKind,
    Representation,
    SchemaModel,
    Table,
    Unknown,
)
from schema_typegen.schema.naming import NamingPolicy, RuntimeEnumsStyle
from schema_typegen.schema.normalizer import SchemaFilters, normalize
from schema_typegen.typescript.generator import TypeScriptGenerator
from schema_typegen.typescript.symbols import SymbolTable


def _generate(model, **policy):
    return TypeScriptGenerator(NamingPolicy(**policy)).generate(model)


def _single_column_model(column, enums=()):
    return SchemaModel(
        tables=(Table("public", "items", columns=(column,)),),
        enums=tuple(enums),
        default_schemas=("public",),
    )


class TestCliExample:
    """The cli schema scenario end to end through normalize and emit."""

    def test_emits_expected_output(self, cli_snapshot, cli_expected_output):
        filters = SchemaFilters(default_schemas=("cli",), include_pattern="cli.*")
        model = normalize(cli_snapshot, filters, PostgresTypeMapper())
        output = _generate(
            model,
            camel_case=True,
            singular=True,
            runtime_enums=True,
            runtime_enums_style=RuntimeEnumsStyle.PASCAL_CASE,
            type_only_imports=False,
        )

        assert output == cli_expected_output

    def test_deterministic(self, cli_snapshot):
        """Two runs over the same snapshot are byte-identical."""
        filters = SchemaFilters(default_schemas=("cli",))
        policy = NamingPolicy(singular=True, runtime_enums=True)
        first = TypeScriptGenerator(policy).generate(normalize(cli_snapshot, filters, PostgresTypeMapper()))
        second = TypeScriptGenerator(policy).generate(normalize(cli_snapshot, filters, PostgresTypeMapper()))
        assert first == second


class TestImports:
    """Test the kysely import line."""

    def test_type_only_import(self):
        model = _single_column_model(Column("id", Primitive(PrimitiveKind.INTEGER), has_default=True))
        assert 'import type { ColumnType } from "kysely";' in _generate(model, type_only_imports=True)
        assert 'import { ColumnType } from "kysely";' in _generate(model, type_only_imports=False)

    def test_no_import_when_unused(self):
        model = _single_column_model(Column("name", Primitive(PrimitiveKind.TEXT)))
        output = _generate(model)
        assert "import" not in output
        assert "Generated<T>" not in output


class TestColumnRendering:
    """Test nullability, defaults and type expressions."""

    def test_nullable(self):
        output = _generate(_single_column_model(Column("name", Primitive(PrimitiveKind.TEXT))))
        assert "  name: string | null;" in output

    def test_not_null(self):
        output = _generate(_single_column_model(Column("name", Primitive(PrimitiveKind.TEXT), nullable=False)))
        assert "  name: string;" in output

    def test_generated_wraps_nullable(self):
        """Generated is independent of nullability."""
        column = Column("seq", Primitive(PrimitiveKind.INTEGER), nullable=True, has_default=True)
        assert "  seq: Generated<number | null>;" in _generate(_single_column_model(column))

    def test_override_is_verbatim(self):
        column = Column("settings", Override("Record<string, unknown>"), nullable=True, has_default=True)
        assert "  settings: Record<string, unknown>;" in _generate(_single_column_model(column))

    def test_helper_types(self):
        model = SchemaModel(
            tables=(Table("public", "events", columns=(
                Column("id", Primitive(PrimitiveKind.BIGINT), nullable=False),
                Column("amount", Primitive(PrimitiveKind.DECIMAL), nullable=False),
                Column("at", Primitive(PrimitiveKind.TIMESTAMPTZ), nullable=False),
                Column("payload", Primitive(PrimitiveKind.JSON), nullable=False),
            )),),
            default_schemas=("public",),
        )
        output = _generate(model)

        assert "  id: Int8;" in output
        assert "  amount: Numeric;" in output
        assert "  at: Timestamp;" in output
        assert "  payload: Json;" in output
        assert "export type Int8 = ColumnType<" in output
        assert "export type JsonValue = JsonArray | JsonObject | JsonPrimitive;" in output
        assert "export type Generated<T>" not in output

    def test_representations(self):
        model = SchemaModel(
            tables=(Table("public", "prices", columns=(
                Column("a", Primitive(PrimitiveKind.DECIMAL, Representation.NUMBER), nullable=False),
                Column("b", Primitive(PrimitiveKind.DECIMAL, Representation.NUMBER_OR_STRING), nullable=False),
                Column("c", Primitive(PrimitiveKind.DATE, Representation.STRING), nullable=False),
            )),),
            default_schemas=("public",),
        )
        output = _generate(model)

        assert "  a: number;" in output
        assert "  b: number | string;" in output
        assert "  c: string;" in output
        assert "Numeric" not in output

    def test_numeric_parser_policy_flows_to_output(self):
        mapper = PostgresTypeMapper(TypePolicy(numeric_parser=NumericParser.NUMBER))
        column = Column("total", mapper.map("numeric(10,2)"), nullable=False)
        assert "  total: number;" in _generate(_single_column_model(column))

    def test_arrays(self):
        model = SchemaModel(
            tables=(Table("public", "lists", columns=(
                Column("names", ArrayOf(Primitive(PrimitiveKind.TEXT)), nullable=False),
                Column("amounts", ArrayOf(Primitive(PrimitiveKind.DECIMAL)), nullable=False),
                Column("mixed", ArrayOf(Primitive(PrimitiveKind.DECIMAL, Representation.NUMBER_OR_STRING))),
            )),),
            default_schemas=("public",),
        )
        output = _generate(model)

        assert "  names: string[];" in output
        assert "  amounts: ArrayType<Numeric>;" in output
        assert "  mixed: (number | string)[] | null;" in output
        assert "export type ArrayTypeImpl<T>" in output

    def test_member_quoting_and_comments(self):
        column = Column("first name", Primitive(PrimitiveKind.TEXT), nullable=False, comment="Given name */ here")
        output = _generate(_single_column_model(column))

        assert '  "first name": string;' in output
        assert "   * Given name *\\/ here" in output


class TestEnums:
    """Test enum emission."""

    def _model(self, labels):
        enum = EnumType("public", "status", labels=labels)
        return _single_column_model(Column("status", EnumRef("public.status"), nullable=False), enums=[enum])

    def test_union_preserves_label_order(self):
        output = _generate(self._model(("b", "a", "c")))
        assert 'export type Status = "b" | "a" | "c";' in output

    def test_empty_enum_is_never(self):
        assert "export type Status = never;" in _generate(self._model(()))

    def test_runtime_enum_round_trip(self):
        """Every label appears verbatim as a value, in order."""
        labels = ("in progress", "DONE", 'say "hi"', "ünïcode")
        output = _generate(self._model(labels), runtime_enums=True)

        assert "export enum Status {" in output
        assert '  InProgress = "in progress",' in output
        assert '  Done = "DONE",' in output
        assert '  SayHi = "say \\"hi\\"",' in output
        assert '"ünïcode"' in output
        positions = [output.index(json.dumps(label, ensure_ascii=False)) for label in labels]
        assert positions == sorted(positions)

    def test_screaming_snake_members(self):
        output = _generate(
            self._model(("in_progress",)),
            runtime_enums=True,
            runtime_enums_style=RuntimeEnumsStyle.SCREAMING_SNAKE_CASE,
        )
        assert '  IN_PROGRESS = "in_progress",' in output

    def test_colliding_members_get_suffixes(self):
        output = _generate(self._model(("a-b", "a_b")), runtime_enums=True)
        assert '  AB = "a-b",' in output
        assert '  AB2 = "a_b",' in output


class TestUnknownTypes:
    """Test graceful degradation for unmapped types."""

    def test_opaque_alias(self):
        model = SchemaModel(
            tables=(Table("public", "places", columns=(
                Column("shape", Unknown("geometry")),
                Column("outline", Unknown("geometry"), nullable=False),
                Column("search", Unknown("tsvector"), nullable=False),
            )),),
            default_schemas=("public",),
        )
        output = _generate(model)

        assert output.count("export type Geometry = unknown;") == 1
        assert "Unmapped database type `geometry`" in output
        assert "  shape: Geometry | null;" in output
        assert "  outline: Geometry;" in output
        assert "  search: Tsvector;" in output
        assert output.index("export type Geometry") < output.index("export type Tsvector")

    def test_blank_raw_type_is_unknown(self):
        output = _generate(_single_column_model(Column("anything", Unknown(""), nullable=False)))
        assert "  anything: unknown;" in output


class TestNamingAndOrder:
    """Test symbol allocation and block order."""

    def test_block_order(self, shop_snapshot):
        model = normalize(shop_snapshot, SchemaFilters(default_schemas=("public",)), PostgresTypeMapper())
        output = _generate(model)

        markers = [
            "This file was generated",
            'import type { ColumnType } from "kysely";',
            "export type Generated<T>",
            "export type Int8",
            "export type Json =",
            "export type Numeric",
            "export type Timestamp",
            "export type OrderState =",
            "export type Geometry = unknown;",
            "export interface Orders {",
            "export interface Migrations {",
            "export interface OrderTotals {",
            "export interface DB {",
        ]
        positions = [output.index(marker) for marker in markers]
        assert positions == sorted(positions)
        assert output.endswith("}\n")

    def test_enum_table_collision(self):
        """Enums are named first; a table with the same name gets a suffix."""
        model = SchemaModel(
            tables=(Table("public", "status", columns=(
                Column("value", EnumRef("public.status"), nullable=False),
            )),),
            enums=(EnumType("public", "status", labels=("on",)),),
            default_schemas=("public",),
        )
        output = _generate(model)

        assert 'export type Status = "on";' in output
        assert "export interface Status2 {" in output
        assert "  value: Status;" in output
        assert "  status: Status2;" in output

    def test_reserved_names(self):
        model = SchemaModel(tables=(Table("public", "db"), Table("public", "json")), default_schemas=("public",))
        output = _generate(model)

        assert "export interface Db {}" in output
        assert "export interface Json2 {}" in output
        assert "  json: Json2;" in output

    def test_qualified_root_keys(self, shop_snapshot):
        filters = SchemaFilters(default_schemas=("public",), include_pattern="*.orders")
        model = normalize(shop_snapshot, filters, PostgresTypeMapper())
        output = _generate(model)

        assert "  orders: Orders;" in output
        assert '  "audit.orders": AuditOrders;' in output

    def test_first_default_schema_owns_the_name(self):
        model = SchemaModel(
            tables=(Table("tenant", "users"), Table("public", "users")),
            default_schemas=("public", "tenant"),
        )
        output = _generate(model)

        assert '  "tenant.users": TenantUsers;' in output
        assert "  users: Users;" in output
        assert output.index('"tenant.users"') < output.index("  users: Users;")

    def test_camel_case_table_keys(self):
        model = SchemaModel(tables=(Table("public", "order_items"),), default_schemas=("public",))
        output = _generate(model, camel_case=True, singular=True)
        assert "  orderItems: OrderItem;" in output

    def test_empty_model(self):
        output = _generate(SchemaModel())
        assert output.endswith("export interface DB {}\n")
        assert "import" not in output


class TestSymbolTable:
    """Test deterministic name allocation."""

    def test_suffixes_in_allocation_order(self):
        symbols = SymbolTable(reserved={"DB"})
        assert symbols.allocate("a", "User") == "User"
        assert symbols.allocate("b", "User") == "User2"
        assert symbols.allocate("c", "User") == "User3"
        assert symbols.allocate("d", "DB") == "DB2"

    def test_same_key_same_name(self):
        symbols = SymbolTable()
        assert symbols.allocate("a", "User") == symbols.allocate("a", "Other")
        assert symbols.get("a") == "User"
        assert "a" in symbols
