"""
Oracle schema catalog using oracledb.

Reads tables, columns, indexes and foreign keys from the Oracle data
dictionary views.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from db_exporter.catalog.base import SchemaCatalog
from db_exporter.models import Column, ForeignKey, Index

logger = logging.getLogger(__name__)


class OracleCatalog(SchemaCatalog):
    """
    Extracts schema facts from the Oracle data dictionary.

    Uses Oracle data dictionary views:
    - ALL_TABLES
    - ALL_TAB_COLUMNS
    - ALL_INDEXES / ALL_IND_COLUMNS
    - ALL_CONSTRAINTS / ALL_CONS_COLUMNS

    The ``database`` argument of each query is the owning schema; it defaults
    to the connected user.
    """

    def __init__(self, connection_string: str):
        """
        Initialize catalog with Oracle connection.

        Args:
            connection_string: Oracle connection string (user/pwd@host:port/service)
        """
        self.connection_string = connection_string
        self.user: Optional[str] = None
        self._conn = None

    @staticmethod
    def parse_connection_string(connection_string: str) -> Tuple[str, str, str]:
        """Split ``user/pwd@host:port/service`` into (user, password, dsn)."""
        user_pwd, _, dsn = connection_string.partition("@")
        user, _, password = user_pwd.partition("/")
        return user, password, dsn

    def connect(self) -> None:
        """Establish database connection."""
        import oracledb

        user, password, dsn = self.parse_connection_string(self.connection_string)
        if ":" in dsn:
            host_port, _, service = dsn.partition("/")
            host, _, port = host_port.partition(":")
            dsn = oracledb.makedsn(host, int(port or 1521), service_name=service)

        self._conn = oracledb.connect(user=user, password=password, dsn=dsn)
        self.user = user
        logger.info(f"Connected to Oracle database as {user}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _owner(self, database: Optional[str]) -> str:
        return (database or self.user or "").upper()

    def _fetch(self, sql: str, **params) -> List[tuple]:
        if not self._conn:
            self.connect()

        cursor = self._conn.cursor()
        try:
            cursor.execute(sql, **params)
            return list(cursor)
        finally:
            cursor.close()

    def list_tables(self, database: Optional[str] = None) -> List[str]:
        """Get all table names in a schema."""
        rows = self._fetch("""
            SELECT table_name
            FROM all_tables
            WHERE owner = :owner
            ORDER BY table_name
        """, owner=self._owner(database))
        return [row[0] for row in rows]

    def list_columns(self, table: str, database: Optional[str] = None) -> List[Column]:
        """Get column metadata for a table."""
        rows = self._fetch("""
            SELECT column_name, data_type, nullable
            FROM all_tab_columns
            WHERE owner = :owner AND table_name = :table_name
            ORDER BY column_id
        """, owner=self._owner(database), table_name=table)

        return [
            Column(name=name, data_type=data_type, nullable=nullable == "Y")
            for name, data_type, nullable in rows
        ]

    def list_indexes(self, table: str, database: Optional[str] = None) -> List[Index]:
        """Get indexes for a table; the index backing the primary key is flagged."""
        rows = self._fetch("""
            SELECT
                i.index_name,
                i.uniqueness,
                ic.column_name,
                c.constraint_type
            FROM all_indexes i
            JOIN all_ind_columns ic
                ON i.owner = ic.index_owner
                AND i.index_name = ic.index_name
            LEFT JOIN all_constraints c
                ON c.owner = i.table_owner
                AND c.index_name = i.index_name
                AND c.constraint_type = 'P'
            WHERE i.table_owner = :owner
                AND i.table_name = :table_name
            ORDER BY CASE WHEN c.constraint_type = 'P' THEN 0 ELSE 1 END,
                i.index_name, ic.column_position
        """, owner=self._owner(database), table_name=table)

        indexes: Dict[str, Index] = {}
        for index_name, uniqueness, column_name, constraint_type in rows:
            if index_name not in indexes:
                indexes[index_name] = Index(
                    columns=[],
                    unique=uniqueness == "UNIQUE",
                    name=index_name,
                    primary=constraint_type == "P",
                )
            indexes[index_name].columns.append(column_name)

        return list(indexes.values())

    def list_foreign_keys(self, table: str, database: Optional[str] = None) -> List[ForeignKey]:
        """
        Get all foreign keys declared on a table.

        Returns:
            ForeignKey objects with local and referenced columns paired by position
        """
        rows = self._fetch("""
            SELECT
                c.constraint_name,
                rc.table_name AS ref_table,
                cc.column_name AS local_col,
                rcc.column_name AS ref_col
            FROM all_constraints c
            JOIN all_cons_columns cc
                ON c.owner = cc.owner
                AND c.constraint_name = cc.constraint_name
            JOIN all_constraints rc
                ON c.r_owner = rc.owner
                AND c.r_constraint_name = rc.constraint_name
            JOIN all_cons_columns rcc
                ON rc.owner = rcc.owner
                AND rc.constraint_name = rcc.constraint_name
                AND cc.position = rcc.position
            WHERE c.owner = :owner
                AND c.table_name = :table_name
                AND c.constraint_type = 'R'
            ORDER BY c.constraint_name, cc.position
        """, owner=self._owner(database), table_name=table)

        grouped: Dict[str, Tuple[str, List[str], List[str]]] = {}
        for constraint_name, ref_table, local_col, ref_col in rows:
            if constraint_name not in grouped:
                grouped[constraint_name] = (ref_table, [], [])
            grouped[constraint_name][1].append(local_col)
            grouped[constraint_name][2].append(ref_col)

        return [
            ForeignKey(
                local_columns=local_cols,
                foreign_table=ref_table,
                foreign_columns=ref_cols,
                name=constraint_name,
            )
            for constraint_name, (ref_table, local_cols, ref_cols) in grouped.items()
        ]
