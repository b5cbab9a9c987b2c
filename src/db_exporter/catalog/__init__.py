"""
Schema catalog module.

Provides a unified interface to read tables, columns, indexes and foreign
keys from database catalogs or YAML snapshots.
"""

from __future__ import annotations

from pathlib import Path

from db_exporter.catalog.base import SchemaCatalog
from db_exporter.catalog.resolver import MetadataResolver, filter_tables
from db_exporter.catalog.snapshot import SnapshotCatalog, dump_snapshot

ORACLE_SCHEME = "oracle://"


def open_catalog(source: str) -> SchemaCatalog:
    """
    Pick a catalog implementation for a source string.

    - ``*.yml`` / ``*.yaml``: YAML snapshot
    - ``oracle://user/pwd@host:port/service``: Oracle data dictionary
    - anything else: SQLAlchemy database URL
    """
    if source.lower().endswith((".yml", ".yaml")):
        return SnapshotCatalog(Path(source))

    if source.lower().startswith(ORACLE_SCHEME):
        from db_exporter.catalog.oracle import OracleCatalog
        return OracleCatalog(source[len(ORACLE_SCHEME):])

    from db_exporter.catalog.sql import SqlCatalog
    return SqlCatalog(source)


__all__ = [
    "MetadataResolver",
    "SchemaCatalog",
    "SnapshotCatalog",
    "dump_snapshot",
    "filter_tables",
    "open_catalog",
]
