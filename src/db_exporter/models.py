"""
Core data models for the db_exporter package.

Defines the schema facts read from a catalog (columns, indexes, foreign keys),
the per-table metadata that accumulates inferred relationships, and the run
configuration.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from db_exporter.naming import python_identifier, snake_case, strip_prefix, studly_case


DEFAULT_NAMESPACE = "models"


class RelationKind(str, Enum):
    """Relationship declaration kinds emitted into models."""
    HAS_ONE = "has_one"
    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"


class Cardinality(str, Enum):
    """Cardinality assigned to a foreign key by the classifier."""
    ONE_TO_ONE = "1:1"
    MANY_TO_ONE = "N:1"
    ONE_TO_MANY = "1:N"
    MANY_TO_MANY = "N:M"  # no pivot table


@dataclass
class Column:
    """A table column. The type is carried through, never interpreted."""
    name: str
    data_type: str = ""
    nullable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "data_type": self.data_type,
            "nullable": self.nullable,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Column:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            data_type=str(data.get("data_type", "")),
            nullable=data.get("nullable", True),
        )


@dataclass
class Index:
    """An index over an ordered sequence of columns."""
    columns: List[str]
    unique: bool = False
    name: Optional[str] = None
    primary: bool = False

    def covers(self, columns: List[str]) -> bool:
        """Whether this index's column sequence equals ``columns`` (order-sensitive)."""
        return list(self.columns) == list(columns)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "columns": list(self.columns),
            "unique": self.unique,
            "primary": self.primary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Index:
        """Create from dictionary."""
        primary = data.get("primary", False)
        return cls(
            columns=list(data["columns"]),
            unique=data.get("unique", primary),
            name=data.get("name"),
            primary=primary,
        )


@dataclass
class ForeignKey:
    """
    A foreign key constraint declared on the owning (local) table.

    Local and foreign column sequences always have the same length.
    """
    local_columns: List[str]
    foreign_table: str
    foreign_columns: List[str]
    name: Optional[str] = None

    def __post_init__(self):
        if len(self.local_columns) != len(self.foreign_columns):
            raise ValueError(
                f"Foreign key {self.name or '<unnamed>'} has {len(self.local_columns)} local "
                f"columns but {len(self.foreign_columns)} foreign columns"
            )
        if not self.local_columns:
            raise ValueError(f"Foreign key {self.name or '<unnamed>'} has no columns")

    @property
    def local_column(self) -> str:
        """First local column; composite keys are wired on this column only."""
        return self.local_columns[0]

    @property
    def foreign_column(self) -> str:
        """First referenced column."""
        return self.foreign_columns[0]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "local_columns": list(self.local_columns),
            "foreign_table": self.foreign_table,
            "foreign_columns": list(self.foreign_columns),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ForeignKey:
        """Create from dictionary."""
        return cls(
            local_columns=list(data["local_columns"]),
            foreign_table=data["foreign_table"],
            foreign_columns=list(data["foreign_columns"]),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class Relationship:
    """A relationship declaration attached to exactly one table."""
    kind: RelationKind
    target_class: str
    method_name: str
    local_column: str
    foreign_column: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "target_class": self.target_class,
            "method_name": self.method_name,
            "local_column": self.local_column,
            "foreign_column": self.foreign_column,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Relationship:
        """Create from dictionary."""
        return cls(
            kind=RelationKind(data["kind"]),
            target_class=data["target_class"],
            method_name=data["method_name"],
            local_column=data["local_column"],
            foreign_column=data["foreign_column"],
        )


@dataclass
class TableMetadata:
    """Metadata for a database table plus the relationships inferred for it."""
    name: str
    database: Optional[str] = None
    columns: List[Column] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    namespace: Optional[str] = None
    prefix: Optional[str] = None

    @property
    def full_name(self) -> str:
        """Return database-qualified table name."""
        return f"{self.database}.{self.name}" if self.database else self.name

    @property
    def column_names(self) -> List[str]:
        """Return list of column names."""
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[Column]:
        """Get column by exact name."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def index_covering(self, columns: List[str]) -> Optional[Index]:
        """
        Find an index whose member columns equal ``columns``.

        The comparison is order-sensitive. The first matching index in catalog
        order wins, so a unique index listed after a plain one on the same
        columns is not seen.

        Returns:
            Index or None if no index covers exactly these columns
        """
        for index in self.indexes:
            if index.covers(columns):
                return index
        return None

    def add_relationship(
        self,
        kind: RelationKind,
        target_class: str,
        method_name: str,
        local_column: str,
        foreign_column: str,
    ) -> Relationship:
        """Append a relationship declaration. Identical calls produce duplicates."""
        relationship = Relationship(
            kind=kind,
            target_class=target_class,
            method_name=method_name,
            local_column=local_column,
            foreign_column=foreign_column,
        )
        self.relationships.append(relationship)
        return relationship

    def table_name(self, strip: bool = False) -> str:
        """Return the table name, optionally without the configured prefix."""
        if strip and self.prefix:
            return strip_prefix(self.name, self.prefix)
        return self.name

    def class_identifier(self, strip_prefix: bool = True) -> str:
        """
        Class name derived from the table name, e.g. ``app_user_roles`` -> ``UserRoles``.

        Names that are not valid identifiers are adjusted: ``2023_logs`` -> ``_2023Logs``.
        """
        return python_identifier(studly_case(self.table_name(strip_prefix)))

    def qualified_class(self) -> str:
        """Class identifier as referenced from other models."""
        identifier = self.class_identifier()
        return f"{self.namespace}.{identifier}" if self.namespace else identifier

    def module_name(self) -> str:
        """File stem used for the generated model."""
        return snake_case(self.class_identifier())

    def rendered_relationships(self) -> str:
        """Render every relationship declaration in insertion order."""
        from db_exporter.output.renderer import render_relationships

        return render_relationships(self.relationships)

    def duplicate_method_names(self) -> List[str]:
        """Relation method names used more than once on this table."""
        counts = Counter(rel.method_name for rel in self.relationships)
        return [name for name, count in counts.items() if count > 1]

    def renamed_methods(self) -> Dict[str, str]:
        """Relation method names that are emitted under another name (keywords, leading digits)."""
        renamed = {}
        for rel in self.relationships:
            emitted = python_identifier(rel.method_name)
            if emitted != rel.method_name:
                renamed[rel.method_name] = emitted
        return renamed

    def get_relationships(self, kind: Optional[RelationKind] = None) -> List[Relationship]:
        """Get relationships, optionally filtered by kind."""
        if kind is None:
            return list(self.relationships)
        return [rel for rel in self.relationships if rel.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        """Convert schema facts to a dictionary. Relationships are derived data and omitted."""
        return {
            "name": self.name,
            "database": self.database,
            "columns": [c.to_dict() for c in self.columns],
            "indexes": [i.to_dict() for i in self.indexes],
            "foreign_keys": [fk.to_dict() for fk in self.foreign_keys],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TableMetadata:
        """Create from dictionary."""
        return cls(
            name=data["name"],
            database=data.get("database"),
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
            indexes=[Index.from_dict(i) for i in data.get("indexes", [])],
            foreign_keys=[ForeignKey.from_dict(fk) for fk in data.get("foreign_keys", [])],
            namespace=data.get("namespace"),
            prefix=data.get("prefix"),
        )


@dataclass
class ExportConfig:
    """Configuration for a model export run."""
    database: Optional[str] = None
    select: List[str] = field(default_factory=list)
    ignore: List[str] = field(default_factory=list)
    prefix: Optional[str] = None
    namespace: str = DEFAULT_NAMESPACE
    path: Path = field(default_factory=lambda: Path("models"))
    overwrite: bool = False
    template_dir: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.path, str):
            self.path = Path(self.path)
        if isinstance(self.template_dir, str):
            self.template_dir = Path(self.template_dir)
        self.select = list(self.select or [])
        self.ignore = list(self.ignore or [])
