"""
Model Writer - fills templates and writes generated model files.

Templates are plain text files named ``<template>.tpl`` whose
``{{placeholder}}`` markers are replaced by the substitutions given to
``write``. Packaged templates live in ``db_exporter/templates``; a custom
template directory takes precedence over them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from db_exporter.models import DEFAULT_NAMESPACE, TableMetadata
from db_exporter.naming import snake_case

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_SUFFIX = ".tpl"

# Module every generated model imports Model from
BASE_MODULE = "base"


class ModelWriter:
    """
    Writes generated sources into a destination directory.

    Output Structure:
        <path>/
        ├── users.py
        ├── user_profiles.py
        └── ...
    """

    def __init__(
        self,
        path: Path,
        template_dir: Optional[Path] = None,
        overwrite: bool = False,
    ):
        """
        Initialize the writer.

        Args:
            path: Destination directory
            template_dir: Directory searched for templates before the packaged ones
            overwrite: Replace existing files instead of skipping them
        """
        self.path = Path(path)
        self.template_dir = Path(template_dir) if template_dir else None
        self.overwrite = overwrite

    def find_template(self, template_name: str) -> Path:
        """Locate a template file, custom directory first."""
        file_name = f"{template_name}{TEMPLATE_SUFFIX}"
        search_dirs = [d for d in (self.template_dir, TEMPLATE_DIR) if d is not None]

        for directory in search_dirs:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate

        raise FileNotFoundError(
            f"Template {file_name} not found in: {', '.join(str(d) for d in search_dirs)}"
        )

    def render(self, template_name: str, substitutions: Dict[str, str]) -> str:
        """Fill a template's ``{{placeholder}}`` markers."""
        content = self.find_template(template_name).read_text()
        for placeholder, value in substitutions.items():
            content = content.replace(f"{{{{{placeholder}}}}}", value)
        return content

    def write(
        self,
        template_name: str,
        output_file_name: str,
        substitutions: Dict[str, str],
    ) -> Optional[Path]:
        """
        Render a template into a file under the destination directory.

        Args:
            template_name: Template to render (without suffix)
            output_file_name: File name relative to the destination directory
            substitutions: Placeholder name -> replacement text

        Returns:
            Path written, or None when an existing file was kept
        """
        output_path = self.path / output_file_name

        if output_path.exists() and not self.overwrite:
            logger.info(f"Skipping {output_path}: file exists (use overwrite to replace)")
            return None

        content = self.render(template_name, substitutions)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content)
        logger.info(f"Wrote {output_path}")
        return output_path

    def write_model(self, table: TableMetadata, namespace: Optional[str] = None) -> Optional[Path]:
        """Write the model file for one table."""
        class_name = table.class_identifier()
        return self.write("model", f"{table.module_name()}.py", {
            "namespace": namespace or table.namespace or DEFAULT_NAMESPACE,
            "className": class_name,
            "tableName": snake_case(table.table_name(True)),
            "foreignKeys": table.rendered_relationships(),
        })

    def write_base(self, namespace: Optional[str] = None) -> Optional[Path]:
        """Write the base module that defines Model and its relation helpers."""
        return self.write("base", f"{BASE_MODULE}.py", {
            "namespace": namespace or DEFAULT_NAMESPACE,
        })
