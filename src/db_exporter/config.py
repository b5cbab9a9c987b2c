"""
Run configuration loading.

A configuration file holds defaults for the export options:

    database: shop
    prefix: app_
    namespace: shop.models
    path: src/shop/models
    select: []
    ignore: [migrations]
    overwrite: false
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from db_exporter.models import ExportConfig

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    "database",
    "select",
    "ignore",
    "prefix",
    "namespace",
    "path",
    "overwrite",
    "template_dir",
)


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read option defaults from a YAML file, dropping unknown keys."""
    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    unknown = set(data) - set(CONFIG_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {', '.join(sorted(unknown))}")

    logger.info(f"Loaded config from {path}")
    return {k: v for k, v in data.items() if k in CONFIG_KEYS}


def load_config(
    path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ExportConfig:
    """
    Build an ExportConfig from a config file and explicit overrides.

    Overrides whose value is None (or an empty filter list) leave the file
    value in place.
    """
    values: Dict[str, Any] = load_config_file(path) if path else {}

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key in ("select", "ignore") and not value:
            continue
        values[key] = value

    return ExportConfig(**values)
