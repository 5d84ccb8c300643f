"""Applies user-supplied column type overrides to a SchemaModel."""

import logging
from dataclasses import replace
from typing import Mapping, Optional, Set

from .model import Column, Override, SchemaModel, Table

logger = logging.getLogger(__name__)


def _lookup(overrides: Mapping[str, str], table: Table, column: Column) -> Optional[str]:
    """Find the override for a column; the schema-qualified path wins."""
    qualified = f"{table.schema}.{table.name}.{column.name}"
    if qualified in overrides:
        return qualified
    short = f"{table.name}.{column.name}"
    if short in overrides:
        return short
    return None


def apply_overrides(model: SchemaModel, overrides: Optional[Mapping[str, str]]) -> SchemaModel:
    """Replace overridden column types with literal type expressions.

    Keys are ``table.column`` or ``schema.table.column``. Paths that match
    nothing are ignored so a config keeps working when the schema drifts.

    Args:
        model: The normalized schema
        overrides: Column path -> type expression

    Returns:
        A new SchemaModel (the input is returned as-is when nothing applies)
    """
    if not overrides:
        return model

    used: Set[str] = set()
    tables = []
    changed = False
    for table in model.tables:
        columns = []
        for column in table.columns:
            key = _lookup(overrides, table, column)
            if key is None:
                columns.append(column)
                continue
            used.add(key)
            changed = True
            columns.append(replace(column, type=Override(overrides[key])))
        tables.append(replace(table, columns=tuple(columns)))

    unused = sorted(set(overrides) - used)
    if unused:
        logger.debug("Ignoring overrides that match no column: %s", ", ".join(unused))

    if not changed:
        return model
    return model.with_tables(tuple(tables))
