"""Renders a SchemaModel into Kysely TypeScript declarations."""

import json
import logging
from typing import Dict, List, Optional, Set

from ..schema.model import (
    ArrayOf,
    Column,
    ColumnType,
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
from ..schema.naming import IdentifierRole, NamingPolicy, quote_member, transform
from . import definitions
from .symbols import SymbolTable

logger = logging.getLogger(__name__)


_PRIMITIVES: Dict[PrimitiveKind, str] = {
    PrimitiveKind.BOOLEAN: "boolean",
    PrimitiveKind.INTEGER: "number",
    PrimitiveKind.BIGINT: definitions.INT8,
    PrimitiveKind.FLOAT: "number",
    PrimitiveKind.DECIMAL: definitions.NUMERIC,
    PrimitiveKind.TEXT: "string",
    PrimitiveKind.DATE: definitions.TIMESTAMP,
    PrimitiveKind.TIMESTAMP: definitions.TIMESTAMP,
    PrimitiveKind.TIMESTAMPTZ: definitions.TIMESTAMP,
    PrimitiveKind.JSON: definitions.JSON,
    PrimitiveKind.BINARY: "Buffer",
    PrimitiveKind.UUID: "string",
}

# Opaque alias names never singularize.
_ALIAS_POLICY = NamingPolicy()

_REPRESENTATIONS: Dict[Representation, str] = {
    Representation.STRING: "string",
    Representation.NUMBER: "number",
    Representation.NUMBER_OR_STRING: "number | string",
}


def _jsdoc(text: str, indent: str = "") -> List[str]:
    lines = text.replace("*/", "*\\/").splitlines() or [""]
    return [f"{indent}/**"] + [f"{indent} * {line}".rstrip() for line in lines] + [f"{indent} */"]


class TypeScriptGenerator:
    """Emits one declaration file per SchemaModel.

    Output is a pure function of the model and the naming policy: names
    are allocated in model order and every block is written in a fixed
    sequence, so an unchanged schema always yields identical text.
    """

    def __init__(self, policy: Optional[NamingPolicy] = None):
        self.policy = policy or NamingPolicy()

    def generate(self, model: SchemaModel) -> str:
        """Render the full declaration file.

        Args:
            model: The normalized (and possibly overridden) schema

        Returns:
            The file contents, newline-terminated
        """
        symbols = SymbolTable(reserved=definitions.RESERVED_NAMES)
        used: Set[str] = set()

        for enum in model.enums:
            symbols.allocate(("enum", enum.qualified_name), self._enum_type_name(enum, model))

        aliases: List[str] = []
        for table in model.tables:
            for column in table.columns:
                self._collect_unknowns(column.type, symbols, aliases)

        owners = _name_owners(model)
        table_names: Dict[str, str] = {}
        for table in model.tables:
            desired = transform(table.name, self.policy, IdentifierRole.TYPE)
            if owners.get(table.name) != table.schema:
                desired = transform(table.schema, self.policy, IdentifierRole.TYPE) + desired
            table_names[table.qualified_name] = symbols.allocate(("table", table.qualified_name), desired)

        interfaces = [self._render_table(table, table_names[table.qualified_name], symbols, used) for table in model.tables]
        enums = [self._render_enum(enum, symbols.get(("enum", enum.qualified_name))) for enum in model.enums]
        alias_blocks = [self._render_alias(raw, symbols.get(("unknown", raw))) for raw in aliases]
        root = self._render_root(model, table_names, owners)

        helpers = definitions.resolve_definitions(used)
        blocks = [definitions.HEADER]
        if any(name in definitions.NEEDS_COLUMN_TYPE for name in helpers):
            keyword = "import type" if self.policy.type_only_imports else "import"
            blocks.append(
                f'{keyword} {{ {definitions.COLUMN_TYPE_IMPORT} }} from "{definitions.KYSELY_MODULE}";'
            )
        blocks.extend(definitions.DEFINITIONS[name] for name in helpers)
        blocks.extend(enums)
        blocks.extend(alias_blocks)
        blocks.extend(interfaces)
        blocks.append(root)

        logger.debug(
            "Rendered %d tables, %d enums, %d opaque aliases, %d helpers",
            len(interfaces), len(enums), len(alias_blocks), len(helpers),
        )
        return "\n\n".join(blocks) + "\n"

    def _enum_type_name(self, enum: EnumType, model: SchemaModel) -> str:
        name = transform(enum.name, self.policy, IdentifierRole.TYPE)
        if model.default_schemas and enum.schema not in model.default_schemas:
            name = transform(enum.schema, self.policy, IdentifierRole.TYPE) + name
        return name

    def _collect_unknowns(self, column_type: ColumnType, symbols: SymbolTable, aliases: List[str]):
        if isinstance(column_type, ArrayOf):
            self._collect_unknowns(column_type.element, symbols, aliases)
        elif isinstance(column_type, Unknown) and column_type.raw_type:
            key = ("unknown", column_type.raw_type)
            if key not in symbols:
                symbols.allocate(key, transform(column_type.raw_type, _ALIAS_POLICY, IdentifierRole.TYPE))
                aliases.append(column_type.raw_type)

    # Column types

    def render_type(self, column_type: ColumnType, symbols: SymbolTable, used: Set[str]) -> str:
        """Render a column type expression, recording helpers it needs."""
        if isinstance(column_type, Override):
            return column_type.expression
        if isinstance(column_type, EnumRef):
            return symbols.get(("enum", column_type.enum_name))
        if isinstance(column_type, Unknown):
            return symbols.get(("unknown", column_type.raw_type)) or "unknown"
        if isinstance(column_type, ArrayOf):
            element = column_type.element
            rendered = self.render_type(element, symbols, used)
            if rendered in definitions.COLUMN_TYPE_WRAPPERS:
                used.add(definitions.ARRAY_TYPE)
                return f"{definitions.ARRAY_TYPE}<{rendered}>"
            if " | " in rendered:
                return f"({rendered})[]"
            return f"{rendered}[]"
        return self._render_primitive(column_type, used)

    def _render_primitive(self, primitive: Primitive, used: Set[str]) -> str:
        if primitive.representation in _REPRESENTATIONS:
            return _REPRESENTATIONS[primitive.representation]
        rendered = _PRIMITIVES[primitive.kind]
        if rendered in definitions.DEFINITIONS:
            used.add(rendered)
        return rendered

    def render_column(self, column: Column, symbols: SymbolTable, used: Set[str]) -> str:
        rendered = self.render_type(column.type, symbols, used)
        if isinstance(column.type, Override):
            return rendered
        if column.nullable:
            rendered = f"{rendered} | null"
        if column.has_default:
            used.add(definitions.GENERATED)
            rendered = f"{definitions.GENERATED}<{rendered}>"
        return rendered

    # Blocks

    def _render_enum(self, enum: EnumType, name: str) -> str:
        if not self.policy.runtime_enums:
            if not enum.labels:
                return f"export type {name} = never;"
            union = " | ".join(json.dumps(label, ensure_ascii=False) for label in enum.labels)
            return f"export type {name} = {union};"

        members = SymbolTable()
        lines = [f"export enum {name} {{"]
        for index, label in enumerate(enum.labels):
            member = members.allocate(index, transform(label, self.policy, IdentifierRole.ENUM_MEMBER))
            lines.append(f"  {member} = {json.dumps(label, ensure_ascii=False)},")
        lines.append("}")
        return "\n".join(lines)

    def _render_alias(self, raw_type: str, name: str) -> str:
        lines = _jsdoc(f"Unmapped database type `{raw_type}`.")
        lines.append(f"export type {name} = unknown;")
        return "\n".join(lines)

    def _render_table(self, table: Table, name: str, symbols: SymbolTable, used: Set[str]) -> str:
        if not table.columns:
            return f"export interface {name} {{}}"
        lines = [f"export interface {name} {{"]
        for column in table.columns:
            if column.comment:
                lines.extend(_jsdoc(column.comment, indent="  "))
            member = quote_member(transform(column.name, self.policy, IdentifierRole.MEMBER))
            lines.append(f"  {member}: {self.render_column(column, symbols, used)};")
        lines.append("}")
        return "\n".join(lines)

    def table_key(self, table: Table, owners: Dict[str, str]) -> str:
        """Root-map key: bare when the table's schema resolves its name first."""
        source = table.name if owners.get(table.name) == table.schema else table.qualified_name
        return transform(source, self.policy, IdentifierRole.TABLE_KEY)

    def _render_root(self, model: SchemaModel, table_names: Dict[str, str], owners: Dict[str, str]) -> str:
        if not model.tables:
            return f"export interface {definitions.ROOT_INTERFACE} {{}}"
        lines = [f"export interface {definitions.ROOT_INTERFACE} {{"]
        for table in model.tables:
            key = quote_member(self.table_key(table, owners))
            lines.append(f"  {key}: {table_names[table.qualified_name]};")
        lines.append("}")
        return "\n".join(lines)


def _name_owners(model: SchemaModel) -> Dict[str, str]:
    """Map each bare table name to the schema that resolves it unqualified.

    The first default schema holding the name wins. Without default
    schemas the first table with the name (in model order) wins.
    """
    owners: Dict[str, str] = {}
    if model.default_schemas:
        for schema in model.default_schemas:
            for table in model.tables:
                if table.schema == schema:
                    owners.setdefault(table.name, schema)
    else:
        for table in model.tables:
            owners.setdefault(table.name, table.schema)
    return owners


def generate(model: SchemaModel, policy: Optional[NamingPolicy] = None) -> str:
    return TypeScriptGenerator(policy).generate(model)
