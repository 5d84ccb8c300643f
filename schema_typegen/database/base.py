"""Abstract base class for catalog readers."""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from ..errors import CatalogError, TypegenError
from .models import (
    CatalogSnapshot,
    ColumnDescriptor,
    DomainDescriptor,
    EnumDescriptor,
    EnumSnapshot,
    TableDescriptor,
    TableSnapshot,
)

logger = logging.getLogger(__name__)


class CatalogReader(ABC):
    """Abstract base class for reading catalog metadata.

    Subclasses implement the per-engine queries. ``read_catalog`` ties
    them together into a single ``CatalogSnapshot``; any driver failure
    surfaces as ``CatalogError`` and no partial snapshot is returned.
    """

    # Override in subclasses
    DIALECT: str = "unknown"

    @abstractmethod
    def connect(self):
        """Establish the connection if not already open."""
        pass

    @abstractmethod
    def close(self):
        """Close the connection."""
        pass

    @abstractmethod
    def list_tables(self, schemas: Optional[Sequence[str]] = None) -> List[TableDescriptor]:
        """List tables, views and partitions.

        Args:
            schemas: Schema names to restrict to, or None for all user schemas

        Returns:
            Table descriptors ordered by schema then name
        """
        pass

    @abstractmethod
    def list_columns(self, table: TableDescriptor) -> List[ColumnDescriptor]:
        """List the columns of a table in ordinal order."""
        pass

    def list_enums(self) -> List[EnumDescriptor]:
        """List enum types. Engines without enum types return nothing."""
        return []

    def list_enum_labels(self, enum: EnumDescriptor) -> List[str]:
        """List an enum's labels in declaration order."""
        raise CatalogError(self.DIALECT, f"Enum types are not supported (asked for '{enum.qualified_name}')")

    def list_domains(self) -> List[DomainDescriptor]:
        """List domain types. Engines without domains return nothing."""
        return []

    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """Scope in which all catalog queries observe the same state.

        The default is a no-op; readers for engines with concurrent
        writers open a repeatable-read transaction here.
        """
        yield

    def read_catalog(self, schemas: Optional[Sequence[str]] = None) -> CatalogSnapshot:
        """Read tables, columns, enums and domains in one consistent pass.

        Args:
            schemas: Schema names to restrict tables to, or None for all

        Returns:
            The immutable catalog snapshot

        Raises:
            CatalogError: If any catalog query or the connection fails
        """
        try:
            self.connect()
            with self.snapshot():
                tables = []
                for table in self.list_tables(schemas):
                    columns = self.list_columns(table)
                    tables.append(TableSnapshot(table=table, columns=tuple(columns)))

                enums = []
                for enum in self.list_enums():
                    labels = self.list_enum_labels(enum)
                    enums.append(EnumSnapshot(enum=enum, labels=tuple(labels)))

                domains = self.list_domains()
        except (TypegenError, ImportError):
            raise
        except Exception as e:
            raise CatalogError(self.DIALECT, f"Catalog read failed: {e}", cause=e) from e

        logger.debug(
            "Read %d tables, %d enums, %d domains from %s catalog",
            len(tables), len(enums), len(domains), self.DIALECT,
        )
        return CatalogSnapshot(
            dialect=self.DIALECT,
            tables=tuple(tables),
            enums=tuple(enums),
            domains=tuple(domains),
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
