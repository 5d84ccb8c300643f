"""Shared helper type declarations emitted alongside the schema types."""

from typing import Dict, FrozenSet, Iterable, List, Tuple

GENERATED = "Generated"
ARRAY_TYPE = "ArrayType"
INT8 = "Int8"
JSON = "Json"
NUMERIC = "Numeric"
TIMESTAMP = "Timestamp"

ROOT_INTERFACE = "DB"
COLUMN_TYPE_IMPORT = "ColumnType"
KYSELY_MODULE = "kysely"

HEADER = (
    "/**\n"
    " * This file was generated by schema-typegen.\n"
    " * Please do not edit it manually.\n"
    " */"
)

DEFINITIONS: Dict[str, str] = {
    GENERATED: (
        "export type Generated<T> = T extends ColumnType<infer S, infer I, infer U>\n"
        "  ? ColumnType<S, I | undefined, U>\n"
        "  : ColumnType<T, T | undefined, T>;"
    ),
    ARRAY_TYPE: (
        "export type ArrayType<T> = ArrayTypeImpl<T> extends (infer U)[]\n"
        "  ? U[]\n"
        "  : ArrayTypeImpl<T>;"
    ),
    "ArrayTypeImpl": (
        "export type ArrayTypeImpl<T> = T extends ColumnType<infer S, infer I, infer U>\n"
        "  ? ColumnType<S[], I[], U[]>\n"
        "  : T[];"
    ),
    INT8: "export type Int8 = ColumnType<string, bigint | number | string, bigint | number | string>;",
    JSON: "export type Json = JsonValue;",
    "JsonArray": "export type JsonArray = JsonValue[];",
    "JsonObject": (
        "export type JsonObject = {\n"
        "  [x: string]: JsonValue | undefined;\n"
        "};"
    ),
    "JsonPrimitive": "export type JsonPrimitive = boolean | number | string | null;",
    "JsonValue": "export type JsonValue = JsonArray | JsonObject | JsonPrimitive;",
    NUMERIC: "export type Numeric = ColumnType<string, number | string, number | string>;",
    TIMESTAMP: "export type Timestamp = ColumnType<Date, Date | string, Date | string>;",
}

# Generated always leads; the rest follow alphabetically.
DEFINITION_ORDER: Tuple[str, ...] = (GENERATED,) + tuple(sorted(n for n in DEFINITIONS if n != GENERATED))

DEPENDENCIES: Dict[str, Tuple[str, ...]] = {
    ARRAY_TYPE: ("ArrayTypeImpl",),
    JSON: ("JsonValue",),
    "JsonArray": ("JsonValue",),
    "JsonObject": ("JsonValue",),
    "JsonValue": ("JsonArray", "JsonObject", "JsonPrimitive"),
}

NEEDS_COLUMN_TYPE: FrozenSet[str] = frozenset({GENERATED, "ArrayTypeImpl", INT8, NUMERIC, TIMESTAMP})

# Helpers that wrap a ColumnType; arrays of them go through ArrayType<T>.
COLUMN_TYPE_WRAPPERS: FrozenSet[str] = frozenset({INT8, NUMERIC, TIMESTAMP})

RESERVED_NAMES: FrozenSet[str] = frozenset(DEFINITIONS) | {ROOT_INTERFACE, COLUMN_TYPE_IMPORT}


def resolve_definitions(used: Iterable[str]) -> List[str]:
    """Close ``used`` over its dependencies and return it in emission order."""
    pending = list(used)
    resolved = set()
    while pending:
        name = pending.pop()
        if name in resolved:
            continue
        resolved.add(name)
        pending.extend(DEPENDENCIES.get(name, ()))
    return [name for name in DEFINITION_ORDER if name in resolved]
