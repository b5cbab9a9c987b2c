"""
Metadata resolver that builds the working set of tables for an export run.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from db_exporter.catalog.base import SchemaCatalog
from db_exporter.models import ExportConfig, TableMetadata

logger = logging.getLogger(__name__)


def filter_tables(
    table_names: Iterable[str],
    select: Optional[Iterable[str]] = None,
    ignore: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Apply select/ignore filters, keeping catalog order.

    An empty ``select`` keeps every table; ``ignore`` always wins.
    """
    selected = set(select or [])
    ignored = set(ignore or [])

    result = []
    for name in table_names:
        if selected and name not in selected:
            continue
        if name in ignored:
            continue
        result.append(name)
    return result


class MetadataResolver:
    """
    Resolves catalog facts into TableMetadata for every selected table.

    Catalog errors are not caught: a failing catalog aborts the run.
    """

    def __init__(self, catalog: SchemaCatalog):
        self.catalog = catalog

    def resolve(
        self,
        database: Optional[str] = None,
        select: Optional[Iterable[str]] = None,
        ignore: Optional[Iterable[str]] = None,
        prefix: Optional[str] = None,
        namespace: Optional[str] = None,
    ) -> Dict[str, TableMetadata]:
        """
        Resolve metadata for the selected tables of a database.

        Args:
            database: Database/schema name (catalog default when None)
            select: Only include these tables (all when empty)
            ignore: Exclude these tables
            prefix: Table prefix stripped when deriving class names
            namespace: Namespace the generated classes live in

        Returns:
            Dict of table_name -> TableMetadata in catalog order
        """
        all_tables = self.catalog.list_tables(database)
        table_names = filter_tables(all_tables, select, ignore)

        logger.info(
            f"Resolving metadata for {len(table_names)} of {len(all_tables)} tables"
            + (f" in {database}" if database else "")
        )

        tables: Dict[str, TableMetadata] = {}
        for table_name in table_names:
            tables[table_name] = TableMetadata(
                name=table_name,
                database=database,
                columns=self.catalog.list_columns(table_name, database),
                indexes=self.catalog.list_indexes(table_name, database),
                foreign_keys=self.catalog.list_foreign_keys(table_name, database),
                namespace=namespace,
                prefix=prefix,
            )
            logger.debug(
                f"{table_name}: {len(tables[table_name].columns)} columns, "
                f"{len(tables[table_name].indexes)} indexes, "
                f"{len(tables[table_name].foreign_keys)} foreign keys"
            )

        return tables

    def resolve_config(self, config: ExportConfig) -> Dict[str, TableMetadata]:
        """Resolve metadata using the filters and naming options of a run config."""
        return self.resolve(
            database=config.database,
            select=config.select,
            ignore=config.ignore,
            prefix=config.prefix,
            namespace=config.namespace,
        )
