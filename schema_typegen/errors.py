"""Error types for schema-typegen."""

from typing import Optional, Dict, Any, List


class TypegenError(Exception):
    """Base exception for schema-typegen errors."""

    def __init__(self, message: str, code: str = "TYPEGEN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured reporting."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class CatalogError(TypegenError):
    """Error reading catalog metadata from the database.

    Wraps the driver-specific exception as ``cause`` (also chained via
    ``raise ... from``). Never retried by the pipeline.
    """

    def __init__(self, dialect: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"[{dialect}] {message}",
            code="CATALOG_ERROR",
            details={"dialect": dialect, "cause": repr(cause) if cause else None},
        )
        self.dialect = dialect
        self.cause = cause


class UnresolvedEnumReferenceError(TypegenError):
    """A column references an enum type that the catalog does not define."""

    def __init__(self, table: str, column: str, enum_name: str):
        super().__init__(
            f"Column '{table}.{column}' references unknown enum '{enum_name}'",
            code="UNRESOLVED_ENUM_REFERENCE",
            details={"table": table, "column": column, "enum": enum_name},
        )
        self.table = table
        self.column = column
        self.enum_name = enum_name


class SchemaModelError(TypegenError):
    """The canonical schema model violates a structural invariant."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="SCHEMA_MODEL_ERROR", details=details)


class ConfigError(TypegenError):
    """Invalid configuration value.

    ``path`` is the location of the first invalid field, e.g.
    ``["overrides", "columns"]``; ``kind`` is the validator's error type.
    """

    def __init__(self, message: str, path: Optional[List[str]] = None, kind: str = "value_error"):
        path = list(path or [])
        super().__init__(
            message,
            code="CONFIG_ERROR",
            details={"path": path, "kind": kind},
        )
        self.path = path
        self.kind = kind

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigError):
            return NotImplemented
        return self.message == other.message and self.path == other.path

    def __hash__(self) -> int:
        return hash((self.message, tuple(self.path)))

    def get_user_friendly_message(self) -> str:
        """Return the message prefixed with the dotted field path."""
        if self.path:
            return f"{'.'.join(str(p) for p in self.path)}: {self.message}"
        return self.message


class VerificationMismatchError(TypegenError):
    """Generated output differs from the previously persisted file."""

    def __init__(self, out_file: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Generated types are not up-to-date with '{out_file}'",
            code="VERIFICATION_MISMATCH",
            details=details or {"out_file": out_file},
        )
        self.out_file = out_file
