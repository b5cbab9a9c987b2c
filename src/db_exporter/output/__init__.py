"""
Output module for writing generated model files.

Supports:
- Relationship declaration rendering
- Template substitution with overwrite/skip handling
- The base module generated models import Model from
"""

from db_exporter.output.renderer import render_relationship, render_relationships
from db_exporter.output.writer import BASE_MODULE, ModelWriter

__all__ = [
    "BASE_MODULE",
    "ModelWriter",
    "render_relationship",
    "render_relationships",
]
