"""schema-typegen - Kysely type declarations from database schemas."""

__version__ = "0.1.0"
