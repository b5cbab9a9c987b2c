"""
Relationship inference for exported models.

Classifies each foreign key of a run as one-to-one, many-to-one, one-to-many
or many-to-many and produces the matching declarations for both tables:

    from db_exporter.relations import make_relations

    pairs = make_relations(tables)
"""

from db_exporter.relations.classifier import (
    RelationshipClassifier,
    RelationshipPair,
    classify_cardinality,
    make_relations,
)

__all__ = [
    "RelationshipClassifier",
    "RelationshipPair",
    "classify_cardinality",
    "make_relations",
]
