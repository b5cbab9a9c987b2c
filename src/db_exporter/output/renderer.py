"""
Renders relationship declarations as methods of a generated model class.
"""

from __future__ import annotations

from typing import Iterable

from db_exporter.models import Relationship, RelationKind
from db_exporter.naming import python_identifier

INDENT = "    "

# Relation helper each kind resolves to on the generated model's base class
RELATION_METHODS = {
    RelationKind.HAS_ONE: "has_one",
    RelationKind.BELONGS_TO: "belongs_to",
    RelationKind.HAS_MANY: "has_many",
}


def render_relationship(relationship: Relationship) -> str:
    """
    Render one relationship as a method declaration.

    Each declaration starts with a blank line so that concatenated
    declarations can be substituted straight into the class body. A method
    name that is not a valid identifier is emitted as ``python_identifier(name)``.
    """
    helper = RELATION_METHODS[relationship.kind]
    lines = [
        "",
        f"{INDENT}def {python_identifier(relationship.method_name)}(self):",
        f'{INDENT * 2}"""{relationship.kind.name.replace("_", " ").title()} {relationship.target_class}."""',
        f"{INDENT * 2}return self.{helper}(",
        f'{INDENT * 3}"{relationship.target_class}", '
        f'"{relationship.local_column}", "{relationship.foreign_column}"',
        f"{INDENT * 2})",
        "",
    ]
    return "\n".join(lines)


def render_relationships(relationships: Iterable[Relationship]) -> str:
    """Concatenate declarations in the given order."""
    return "".join(render_relationship(rel) for rel in relationships)
