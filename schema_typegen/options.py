"""Codegen options: validation, config files and CLI merging.

Options are validated by a strict pydantic model. The first validation
problem is reported as a ``ConfigError`` carrying the field path, so a
bad config file fails before any database work starts.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, StrictBool, StrictStr, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .database.dialects import Dialect, DialectName, infer_dialect_name
from .database.type_mappers import DateParser, NumericParser, TypePolicy
from .errors import ConfigError
from .logger import LogLevel
from .schema.naming import NamingPolicy, RuntimeEnumsStyle
from .schema.normalizer import SchemaFilters

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".schema-typegenrc.json"
DEFAULT_OUT_FILE = "./db.d.ts"

# Flag name -> replacement flag name.
DEPRECATED_FLAGS: Dict[str, str] = {
    "schema": "default-schema",
}


class OverridesConfig(BaseModel):
    """Literal type expressions keyed by ``table.column`` or ``schema.table.column``."""

    columns: Dict[StrictStr, StrictStr] = Field(default_factory=dict)

    class Config:
        extra = "forbid"
        frozen = True


class CodegenConfig(BaseModel):
    """Validated generation options (camelCase keys, as in config files)."""

    camel_case: StrictBool = Field(default=False, alias="camelCase")
    date_parser: DateParser = Field(default=DateParser.TIMESTAMP, alias="dateParser")
    default_schemas: List[StrictStr] = Field(default_factory=list, alias="defaultSchemas")
    dialect_name: Optional[DialectName] = Field(default=None, alias="dialectName")
    domains: StrictBool = Field(default=True, alias="domains")
    env_file: Optional[StrictStr] = Field(default=None, alias="envFile")
    exclude_pattern: Optional[StrictStr] = Field(default=None, alias="excludePattern")
    include_pattern: Optional[StrictStr] = Field(default=None, alias="includePattern")
    log_level: LogLevel = Field(default=LogLevel.WARN, alias="logLevel")
    numeric_parser: NumericParser = Field(default=NumericParser.STRING, alias="numericParser")
    out_file: Optional[StrictStr] = Field(default=DEFAULT_OUT_FILE, alias="outFile")
    overrides: OverridesConfig = Field(default_factory=OverridesConfig, alias="overrides")
    partitions: StrictBool = Field(default=False, alias="partitions")
    print_output: StrictBool = Field(default=False, alias="print")
    runtime_enums: StrictBool = Field(default=False, alias="runtimeEnums")
    runtime_enums_style: RuntimeEnumsStyle = Field(default=RuntimeEnumsStyle.PASCAL_CASE, alias="runtimeEnumsStyle")
    singular: StrictBool = Field(default=False, alias="singular")
    type_only_imports: StrictBool = Field(default=True, alias="typeOnlyImports")
    url: Optional[StrictStr] = Field(default=None, alias="url")
    verify: StrictBool = Field(default=False, alias="verify")

    class Config:
        extra = "forbid"
        frozen = True
        populate_by_name = True

    @field_validator("env_file", "exclude_pattern", "include_pattern", "url", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # These may be omitted but never set to null explicitly.
        if value is None:
            raise PydanticCustomError("string_type", "Input should be a valid string")
        return value

    def naming_policy(self) -> NamingPolicy:
        return NamingPolicy(
            camel_case=self.camel_case,
            singular=self.singular,
            type_only_imports=self.type_only_imports,
            runtime_enums=self.runtime_enums,
            runtime_enums_style=self.runtime_enums_style,
        )

    def type_policy(self) -> TypePolicy:
        return TypePolicy(date_parser=self.date_parser, numeric_parser=self.numeric_parser)

    def schema_filters(self, dialect: Dialect) -> SchemaFilters:
        """Build table filters; an empty ``defaultSchemas`` uses the dialect's."""
        default_schemas = tuple(dict.fromkeys(self.default_schemas)) or dialect.default_schemas
        return SchemaFilters(
            default_schemas=default_schemas,
            include_pattern=self.include_pattern,
            exclude_pattern=self.exclude_pattern,
            domains=self.domains,
            partitions=self.partitions,
        )

    def resolve_dialect_name(self, url: Optional[str]) -> DialectName:
        """Return the configured dialect, or infer it from ``url``.

        Raises:
            ConfigError: If no dialect is configured and none can be inferred
        """
        if self.dialect_name is not None:
            return self.dialect_name
        inferred = infer_dialect_name(url) if url else None
        if inferred is None:
            raise ConfigError(
                "Could not infer the dialect from the connection URL. Set 'dialectName' explicitly.",
                path=["dialectName"],
                kind="missing",
            )
        logger.debug("Inferred dialect '%s' from connection URL", inferred.value)
        return inferred


def _to_config_error(error: ValidationError) -> ConfigError:
    first = error.errors()[0]
    return ConfigError(
        message=first["msg"],
        path=[str(part) for part in first["loc"]],
        kind=first["type"],
    )


def load_config(data: Any) -> CodegenConfig:
    """Validate raw options into a CodegenConfig.

    Args:
        data: Mapping using camelCase keys (or field names)

    Returns:
        The validated config

    Raises:
        ConfigError: For the first invalid value, with its path
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError("Config must be an object", kind="dict_type")
    try:
        return CodegenConfig.model_validate(dict(data))
    except ValidationError as e:
        raise _to_config_error(e) from e


def build_config(file_data: Optional[Mapping[str, Any]], cli_values: Optional[Mapping[str, Any]]) -> CodegenConfig:
    """Merge config-file values with CLI values; the CLI wins.

    ``None`` CLI values mean "not given" and never mask the file.
    """
    merged: Dict[str, Any] = dict(file_data or {})
    for key, value in (cli_values or {}).items():
        if value is not None:
            merged[key] = value
    return load_config(merged)


def check_deprecated_flags(flags: Mapping[str, Any]):
    """Reject deprecated CLI flags that were actually passed."""
    for flag, replacement in DEPRECATED_FLAGS.items():
        if flags.get(flag) is not None:
            raise ConfigError(
                f"The flag '{flag}' has been deprecated. Use '{replacement}' instead.",
                path=[flag],
                kind="deprecated",
            )


def read_config_file(path: Optional[str] = None, cwd: Optional[Path] = None) -> Dict[str, Any]:
    """Read a JSON config file.

    Without ``path`` the default ``.schema-typegenrc.json`` in ``cwd`` is
    used when present; otherwise an empty config is returned.

    Raises:
        ConfigError: If the named file is missing or is not a JSON object
    """
    if path is None:
        candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
        if not candidate.exists():
            return {}
        config_path = candidate
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {path}", path=["configFile"], kind="missing")

    logger.debug("Loading config from %s", config_path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}", path=["configFile"], kind="json_invalid") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object", path=["configFile"], kind="dict_type")
    return data
