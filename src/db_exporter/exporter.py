"""
Model export pipeline.

Runs a complete generation pass:
1. Resolve schema facts for the selected tables from a catalog
2. Classify every foreign key into relationship declarations
3. Write the base module and one model file per table
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from db_exporter.catalog import MetadataResolver, SchemaCatalog, open_catalog
from db_exporter.models import ExportConfig, TableMetadata
from db_exporter.output import BASE_MODULE, ModelWriter
from db_exporter.relations import RelationshipClassifier, RelationshipPair

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of an export run."""
    tables: Dict[str, TableMetadata] = field(default_factory=dict)
    pairs: List[RelationshipPair] = field(default_factory=list)
    written: Dict[str, Path] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    base: Optional[Path] = None

    def collisions(self) -> Dict[str, List[str]]:
        """Table name -> relation method names declared more than once on it."""
        result = {}
        for name, table in self.tables.items():
            duplicates = table.duplicate_method_names()
            if duplicates:
                result[name] = duplicates
        return result

    def renamed_methods(self) -> Dict[str, Dict[str, str]]:
        """Table name -> {declared method name: emitted method name}."""
        result = {}
        for name, table in self.tables.items():
            renamed = table.renamed_methods()
            if renamed:
                result[name] = renamed
        return result

    def module_collisions(self) -> Dict[str, List[str]]:
        """
        Module name -> tables that would be written to it.

        Covers tables that share a module once the prefix is stripped
        (``app_users`` and ``users``) and tables that map onto the base module.
        """
        modules = defaultdict(list)
        for name, table in self.tables.items():
            modules[table.module_name()].append(name)

        result = {}
        for module, tables in modules.items():
            if len(tables) > 1 or module == BASE_MODULE:
                result[module] = tables
        return result


class ModelExporter:
    """
    Generates model files for a database.

    Usage:
        exporter = ModelExporter(open_catalog("sqlite:///app.db"), ExportConfig(path="models"))
        result = exporter.export()
    """

    def __init__(self, catalog: SchemaCatalog, config: ExportConfig):
        self.catalog = catalog
        self.config = config

    def build_relations(self) -> ExportResult:
        """Resolve tables and classify their foreign keys, writing nothing."""
        resolver = MetadataResolver(self.catalog)
        tables = resolver.resolve_config(self.config)

        pairs = RelationshipClassifier(tables).classify()

        result = ExportResult(tables=tables, pairs=pairs)
        for table_name, methods in result.collisions().items():
            logger.warning(
                f"{table_name} declares duplicate relation methods: {', '.join(methods)}"
            )
        for table_name, renamed in result.renamed_methods().items():
            logger.warning(
                f"{table_name} renames relation methods: "
                f"{', '.join(f'{old} -> {new}' for old, new in renamed.items())}"
            )
        for module, table_names in result.module_collisions().items():
            logger.warning(
                f"Tables {', '.join(table_names)} all map to module {module}.py"
            )
        return result

    def export(self) -> ExportResult:
        """Run the full pass. Files are written only after classification completes."""
        result = self.build_relations()

        writer = ModelWriter(
            path=self.config.path,
            template_dir=self.config.template_dir,
            overwrite=self.config.overwrite,
        )
        result.base = writer.write_base(self.config.namespace)

        for table_name, table in result.tables.items():
            path = writer.write_model(table, self.config.namespace)
            if path is None:
                result.skipped.append(table_name)
            else:
                result.written[table_name] = path

        logger.info(
            f"Exported {len(result.written)} models to {self.config.path} "
            f"({len(result.skipped)} existing files kept)"
        )
        return result


def export_models(source: str, config: Optional[ExportConfig] = None) -> ExportResult:
    """
    Convenience function to export models from a catalog source.

    Args:
        source: Snapshot path, oracle:// connection string or SQLAlchemy URL
        config: Run configuration (defaults when None)

    Returns:
        ExportResult with tables, relationship pairs and written files
    """
    with open_catalog(source) as catalog:
        return ModelExporter(catalog, config or ExportConfig()).export()
