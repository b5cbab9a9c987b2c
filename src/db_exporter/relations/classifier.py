"""
Relationship Classifier - turns foreign keys into model relationships.

Every foreign key whose referenced table is part of the run is classified by
the uniqueness of the indexes covering its two column sets:

1. One-to-one:   both sides covered by a unique index
2. Many-to-one:  referenced side covered by a unique index
3. One-to-many:  local side covered by a unique index
4. Many-to-many: neither side unique (no pivot table)

The rules are checked in that order and the first match wins. A key with
both sides unique also satisfies rule 2; it must still come out one-to-one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from db_exporter.models import (
    Cardinality,
    ForeignKey,
    Index,
    Relationship,
    RelationKind,
    TableMetadata,
)
from db_exporter.naming import guess_method_name, snake_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelationshipPair:
    """The two declarations produced by one foreign key."""
    foreign_key: ForeignKey
    local_table: str
    foreign_table: str
    cardinality: Cardinality
    local: Relationship
    foreign: Relationship

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "local_table": self.local_table,
            "foreign_table": self.foreign_table,
            "local_columns": list(self.foreign_key.local_columns),
            "foreign_columns": list(self.foreign_key.foreign_columns),
            "cardinality": self.cardinality.value,
            "local": self.local.to_dict(),
            "foreign": self.foreign.to_dict(),
        }


def classify_cardinality(
    local_index: Optional[Index],
    foreign_index: Optional[Index],
) -> Cardinality:
    """Pick the cardinality for a foreign key from its covering indexes."""
    if local_index is not None and foreign_index is not None \
            and local_index.unique and foreign_index.unique:
        return Cardinality.ONE_TO_ONE
    elif foreign_index is not None and foreign_index.unique:
        return Cardinality.MANY_TO_ONE
    elif local_index is not None and local_index.unique:
        return Cardinality.ONE_TO_MANY
    return Cardinality.MANY_TO_MANY


# (local kind, local columns swapped, foreign kind) per cardinality.
# Local declarations either keep (local column, foreign column) or swap them;
# foreign-side declarations always use (local column, foreign column).
_DECLARATIONS = {
    Cardinality.ONE_TO_ONE: (RelationKind.HAS_ONE, True, RelationKind.BELONGS_TO),
    Cardinality.MANY_TO_ONE: (RelationKind.BELONGS_TO, False, RelationKind.HAS_MANY),
    Cardinality.ONE_TO_MANY: (RelationKind.HAS_MANY, True, RelationKind.BELONGS_TO),
    Cardinality.MANY_TO_MANY: (RelationKind.HAS_MANY, True, RelationKind.HAS_MANY),
}


class RelationshipClassifier:
    """
    Infers relationship pairs for a run's tables.

    The tables mapping must hold every table of the run, fully populated with
    columns, indexes and foreign keys, before classification starts; lookups
    cross tables by name.
    """

    def __init__(self, tables: Dict[str, TableMetadata]):
        """
        Initialize the classifier.

        Args:
            tables: Dict of table_name -> TableMetadata, in catalog order
        """
        self.tables = tables

    def infer(self) -> List[RelationshipPair]:
        """
        Compute relationship pairs without touching the tables.

        Returns:
            Pairs in catalog order of tables, then foreign keys
        """
        pairs: List[RelationshipPair] = []
        skipped = 0

        for table in self.tables.values():
            for foreign_key in table.foreign_keys:
                foreign_table = self.tables.get(foreign_key.foreign_table)
                if foreign_table is None:
                    logger.debug(
                        f"Skipping {table.name}.{','.join(foreign_key.local_columns)}: "
                        f"{foreign_key.foreign_table} is not part of this run"
                    )
                    skipped += 1
                    continue

                pairs.append(self._pair_for(table, foreign_table, foreign_key))

        logger.info(f"Inferred {len(pairs)} relationship pairs ({skipped} foreign keys skipped)")
        return pairs

    def apply(self, pairs: List[RelationshipPair]) -> None:
        """Append each pair's declarations to its two tables, in order."""
        for pair in pairs:
            self.tables[pair.local_table].relationships.append(pair.local)
            self.tables[pair.foreign_table].relationships.append(pair.foreign)

    def classify(self) -> List[RelationshipPair]:
        """
        Infer and apply relationships.

        Not idempotent: a second call adds every declaration again.
        """
        pairs = self.infer()
        self.apply(pairs)
        return pairs

    def _pair_for(
        self,
        table: TableMetadata,
        foreign_table: TableMetadata,
        foreign_key: ForeignKey,
    ) -> RelationshipPair:
        """Classify one foreign key and build its two declarations."""
        local_index = table.index_covering(foreign_key.local_columns)
        foreign_index = foreign_table.index_covering(foreign_key.foreign_columns)
        cardinality = classify_cardinality(local_index, foreign_index)

        local_column = foreign_key.local_column
        foreign_column = foreign_key.foreign_column

        local_method_name = guess_method_name(local_column)
        foreign_method_name = snake_case(table.name)

        local_kind, swapped, foreign_kind = _DECLARATIONS[cardinality]
        local_keys = (foreign_column, local_column) if swapped else (local_column, foreign_column)

        local = Relationship(
            kind=local_kind,
            target_class=foreign_table.qualified_class(),
            method_name=local_method_name,
            local_column=local_keys[0],
            foreign_column=local_keys[1],
        )
        foreign = Relationship(
            kind=foreign_kind,
            target_class=table.qualified_class(),
            method_name=foreign_method_name,
            local_column=local_column,
            foreign_column=foreign_column,
        )

        logger.debug(
            f"{table.name} -> {foreign_table.name} via {local_column}: {cardinality.name}"
        )
        return RelationshipPair(
            foreign_key=foreign_key,
            local_table=table.name,
            foreign_table=foreign_table.name,
            cardinality=cardinality,
            local=local,
            foreign=foreign,
        )


def make_relations(tables: Dict[str, TableMetadata]) -> List[RelationshipPair]:
    """
    Convenience function to classify every foreign key of a run.

    Args:
        tables: Dict of table_name -> TableMetadata

    Returns:
        The relationship pairs that were appended to the tables
    """
    return RelationshipClassifier(tables).classify()
