"""
Abstract schema catalog.

A catalog answers the four questions the exporter asks about a database:
which tables exist, and which columns, indexes and foreign keys each has.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from db_exporter.models import Column, ForeignKey, Index


class SchemaCatalog(ABC):
    """Read-only view of a database schema."""

    def connect(self) -> None:
        """Open the underlying connection, if any."""

    def close(self) -> None:
        """Release the underlying connection, if any."""

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @abstractmethod
    def list_tables(self, database: Optional[str] = None) -> List[str]:
        """Table names in catalog order."""

    @abstractmethod
    def list_columns(self, table: str, database: Optional[str] = None) -> List[Column]:
        """Columns of a table in declaration order."""

    @abstractmethod
    def list_indexes(self, table: str, database: Optional[str] = None) -> List[Index]:
        """Indexes of a table. Primary keys are reported as unique indexes."""

    @abstractmethod
    def list_foreign_keys(self, table: str, database: Optional[str] = None) -> List[ForeignKey]:
        """Foreign keys declared on a table."""
