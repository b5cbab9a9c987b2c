"""
SQLAlchemy-backed schema catalog.

Works with any dialect SQLAlchemy can inspect (SQLite, PostgreSQL, MySQL,
SQL Server, ...).
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine

from db_exporter.catalog.base import SchemaCatalog
from db_exporter.models import Column, ForeignKey, Index

logger = logging.getLogger(__name__)


class SqlCatalog(SchemaCatalog):
    """
    Reads schema facts through the SQLAlchemy inspector.

    Indexes are reported in this order: primary key, unique constraints,
    then declared indexes. Index lookups take the first match, so a unique
    definition wins over a plain index on the same columns.
    """

    def __init__(self, url: str, engine: Optional[Engine] = None):
        """
        Initialize catalog.

        Args:
            url: SQLAlchemy database URL (e.g. sqlite:///app.db)
            engine: Existing engine to reuse instead of creating one
        """
        self.url = url
        self._engine = engine
        self._owns_engine = engine is None
        self._inspector = None

    def connect(self) -> None:
        """Create the engine and inspector."""
        if self._engine is None:
            self._engine = create_engine(self.url)
            self._owns_engine = True
        self._inspector = inspect(self._engine)
        logger.info(f"Connected to {self._engine.url.render_as_string(hide_password=True)}")

    def close(self) -> None:
        """Dispose of the engine if this catalog created it."""
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None
        self._inspector = None

    @property
    def inspector(self) -> Any:
        if self._inspector is None:
            self.connect()
        return self._inspector

    def list_tables(self, database: Optional[str] = None) -> List[str]:
        """Get all table names in a schema."""
        return list(self.inspector.get_table_names(schema=database))

    def list_columns(self, table: str, database: Optional[str] = None) -> List[Column]:
        """Get column metadata for a table."""
        return [
            Column(
                name=col["name"],
                data_type=str(col["type"]),
                nullable=bool(col.get("nullable", True)),
            )
            for col in self.inspector.get_columns(table, schema=database)
        ]

    def list_indexes(self, table: str, database: Optional[str] = None) -> List[Index]:
        """Get primary key, unique constraints and indexes for a table."""
        indexes: List[Index] = []
        seen = set()

        def add(index: Index) -> None:
            key = (tuple(index.columns), index.unique)
            if key in seen:
                return
            seen.add(key)
            indexes.append(index)

        pk = self.inspector.get_pk_constraint(table, schema=database) or {}
        if pk.get("constrained_columns"):
            add(Index(
                columns=list(pk["constrained_columns"]),
                unique=True,
                name=pk.get("name") or "PRIMARY",
                primary=True,
            ))

        for uq in self.inspector.get_unique_constraints(table, schema=database):
            add(Index(columns=list(uq["column_names"]), unique=True, name=uq.get("name")))

        for idx in self.inspector.get_indexes(table, schema=database):
            columns = idx.get("column_names") or []
            if not columns or any(c is None for c in columns):
                # Expression indexes cannot cover a foreign key
                logger.debug(f"Ignoring expression index {idx.get('name')} on {table}")
                continue
            add(Index(columns=list(columns), unique=bool(idx.get("unique")), name=idx.get("name")))

        return indexes

    def list_foreign_keys(self, table: str, database: Optional[str] = None) -> List[ForeignKey]:
        """Get foreign keys declared on a table."""
        return [
            ForeignKey(
                local_columns=list(fk["constrained_columns"]),
                foreign_table=fk["referred_table"],
                foreign_columns=list(fk["referred_columns"]),
                name=fk.get("name"),
            )
            for fk in self.inspector.get_foreign_keys(table, schema=database)
            if fk.get("constrained_columns")
        ]
