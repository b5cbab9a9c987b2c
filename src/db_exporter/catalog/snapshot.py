"""
YAML schema snapshots.

A snapshot captures catalog facts in a file so models can be generated
offline, or from a hand-written schema description:

    database: shop
    tables:
      - name: users
        columns:
          - {name: id, data_type: INTEGER, nullable: false}
        indexes:
          - {columns: [id], unique: true, primary: true}
      - name: posts
        columns:
          - {name: id, data_type: INTEGER, nullable: false}
          - {name: user_id, data_type: INTEGER}
        indexes:
          - {columns: [id], primary: true}
          - {columns: [user_id]}
        foreign_keys:
          - {local_columns: [user_id], foreign_table: users, foreign_columns: [id]}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from db_exporter.catalog.base import SchemaCatalog
from db_exporter.models import Column, ForeignKey, Index, TableMetadata

logger = logging.getLogger(__name__)


class SnapshotCatalog(SchemaCatalog):
    """Serves schema facts from a YAML snapshot file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.database: Optional[str] = None
        self._tables: Optional[Dict[str, TableMetadata]] = None

    def connect(self) -> None:
        """Load the snapshot file."""
        with open(self.path, "r") as f:
            data = yaml.safe_load(f) or {}

        self.database = data.get("database")
        self._tables = {}
        for table_data in data.get("tables", []):
            table = TableMetadata.from_dict(table_data)
            self._tables[table.name] = table

        logger.info(f"Loaded {len(self._tables)} tables from snapshot {self.path}")

    def close(self) -> None:
        self._tables = None

    def _table(self, table: str) -> TableMetadata:
        if self._tables is None:
            self.connect()
        try:
            return self._tables[table]
        except KeyError:
            raise ValueError(f"Table not found in snapshot {self.path}: {table}") from None

    def list_tables(self, database: Optional[str] = None) -> List[str]:
        if self._tables is None:
            self.connect()
        if database and self.database and database != self.database:
            logger.warning(f"Snapshot {self.path} holds database {self.database}, not {database}")
            return []
        return list(self._tables)

    def list_columns(self, table: str, database: Optional[str] = None) -> List[Column]:
        return list(self._table(table).columns)

    def list_indexes(self, table: str, database: Optional[str] = None) -> List[Index]:
        return list(self._table(table).indexes)

    def list_foreign_keys(self, table: str, database: Optional[str] = None) -> List[ForeignKey]:
        return list(self._table(table).foreign_keys)


def snapshot_to_dict(
    tables: Iterable[TableMetadata],
    database: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the snapshot document for a set of tables."""
    return {
        "database": database,
        "tables": [table.to_dict() for table in tables],
    }


def dump_snapshot(
    tables: Iterable[TableMetadata],
    path: Path,
    database: Optional[str] = None,
) -> Path:
    """
    Write tables' schema facts to a YAML snapshot.

    Args:
        tables: Tables to capture, in catalog order
        path: Output file
        database: Database name recorded in the snapshot

    Returns:
        Path of the written snapshot
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(snapshot_to_dict(tables, database), f, default_flow_style=False, sort_keys=False)

    logger.info(f"Wrote schema snapshot to {path}")
    return path
