"""The catalog-to-declarations pipeline.

Catalog Reader -> Schema Normalizer -> Override Resolver -> Declaration
Emitter. Each stage takes and returns immutable values; no state is
kept between runs.
"""

import logging
import time
from typing import Optional

from .database.base import CatalogReader
from .database.dialects import Dialect
from .database.models import CatalogSnapshot
from .options import CodegenConfig
from .schema.model import SchemaModel
from .schema.normalizer import normalize
from .schema.overrides import apply_overrides
from .typescript.generator import TypeScriptGenerator

logger = logging.getLogger(__name__)


def build_model(snapshot: CatalogSnapshot, dialect: Dialect, config: CodegenConfig) -> SchemaModel:
    """Normalize a snapshot and apply the configured overrides."""
    mapper = dialect.create_type_mapper(config.type_policy())
    model = normalize(snapshot, config.schema_filters(dialect), mapper)
    return apply_overrides(model, config.overrides.columns)


def generate_from_snapshot(snapshot: CatalogSnapshot, dialect: Dialect, config: Optional[CodegenConfig] = None) -> str:
    """Render declarations for an already-read catalog snapshot."""
    config = config or CodegenConfig()
    started = time.perf_counter()
    model = build_model(snapshot, dialect, config)
    output = TypeScriptGenerator(config.naming_policy()).generate(model)
    logger.info("Generated %d table types in %.0fms", len(model.tables), (time.perf_counter() - started) * 1000)
    return output


def generate(reader: CatalogReader, dialect: Dialect, config: Optional[CodegenConfig] = None) -> str:
    """Read the catalog through ``reader`` and render declarations.

    Args:
        reader: An unconnected catalog reader; it is closed afterwards
        dialect: The engine's dialect
        config: Validated options (defaults when omitted)

    Returns:
        The generated declaration text

    Raises:
        CatalogError: If any catalog query fails
        UnresolvedEnumReferenceError: If a column names a missing enum
    """
    config = config or CodegenConfig()
    schemas = config.schema_filters(dialect).catalog_schemas()
    started = time.perf_counter()
    with reader:
        snapshot = reader.read_catalog(schemas)
    logger.info("Introspected %s catalog in %.0fms", dialect.name.value, (time.perf_counter() - started) * 1000)
    return generate_from_snapshot(snapshot, dialect, config)
