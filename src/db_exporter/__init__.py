"""
DB Exporter - Generate models from database schemas

Introspects a relational database and writes one model per table, wiring up
the relationships implied by its foreign keys.

Features:
- Catalogs for any SQLAlchemy dialect, Oracle, and YAML schema snapshots
- One-to-one / many-to-one / one-to-many / many-to-many classification
  from the uniqueness of the indexes covering each foreign key
- Template-based model output with overwrite protection
"""

__version__ = "0.2.0"

from db_exporter.models import (
    Cardinality,
    Column,
    ExportConfig,
    ForeignKey,
    Index,
    Relationship,
    RelationKind,
    TableMetadata,
)

from db_exporter.relations import (
    RelationshipClassifier,
    RelationshipPair,
    make_relations,
)

from db_exporter.catalog import (
    MetadataResolver,
    SchemaCatalog,
    SnapshotCatalog,
    open_catalog,
)

from db_exporter.output import ModelWriter

from db_exporter.exporter import ExportResult, ModelExporter, export_models

__all__ = [
    # Core models
    "Cardinality",
    "Column",
    "ExportConfig",
    "ForeignKey",
    "Index",
    "Relationship",
    "RelationKind",
    "TableMetadata",
    # Relations
    "RelationshipClassifier",
    "RelationshipPair",
    "make_relations",
    # Catalog
    "MetadataResolver",
    "SchemaCatalog",
    "SnapshotCatalog",
    "open_catalog",
    # Output
    "ModelWriter",
    # Pipeline
    "ExportResult",
    "ModelExporter",
    "export_models",
]
