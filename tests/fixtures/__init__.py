"""Test fixtures package."""

from .static_reader import BrokenCatalogReader, StaticCatalogReader, FailingCatalogReader

__all__ = [
    "StaticCatalogReader",
    "FailingCatalogReader",
    "BrokenCatalogReader",
]
