"""Dataclasses for catalog descriptors and generated migration definitions."""

from dataclasses import dataclass, field
from typing import Any, Optional

SINGLE = "single"
MULTIPLE = "multiple"
UNRESOLVED = "unresolved"


def strip_quotes(name: str) -> str:
    """Remove the double quotes the catalog puts around mixed-case identifiers."""
    return name.replace('"', "")


@dataclass(frozen=True)
class TableDescriptor:
    """Represents a table listed in information_schema.tables."""

    schema: str
    name: str
    kind: str = "BASE TABLE"

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.name}"


@dataclass(frozen=True)
class IndexDescriptor:
    """Represents an index as reported by pg_index."""

    name: str
    table_name: str
    indexed_columns: tuple[str, ...]
    is_unique: bool = False
    is_primary: bool = False
    is_functional: bool = False
    is_partial: bool = False
    index_type: str = "btree"
    owner: Optional[str] = None
    classification: Optional[str] = None

    @property
    def column_names(self) -> list[str]:
        """Indexed columns without identifier quoting."""
        return [strip_quotes(c) for c in self.indexed_columns]

    @property
    def is_single(self) -> bool:
        return self.classification == SINGLE

    @property
    def is_multiple(self) -> bool:
        return self.classification == MULTIPLE


@dataclass(frozen=True)
class ColumnDescriptor:
    """Represents a table column merged from both information_schema views."""

    name: str
    raw_type: str
    table_name: str = ""
    ordinal_position: int = 0
    nullable: bool = True
    default_raw: Optional[str] = None
    character_max_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None
    attached_index: Optional[IndexDescriptor] = None


@dataclass(frozen=True)
class TypeResolution:
    """Migration column type recovered from a catalog type."""

    semantic_type: str
    extra_args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Modifier:
    """A chained call on a column, e.g. ``.default_to("active")``."""

    name: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class ColumnClause:
    """One ``table.<method>(name, *args)`` line plus its modifiers."""

    name: str
    method: str
    args: tuple[Any, ...] = ()
    modifiers: tuple[Modifier, ...] = ()

    @property
    def modifier_names(self) -> list[str]:
        return [m.name for m in self.modifiers]


@dataclass(frozen=True)
class TableClause:
    """A table-level primary key, unique constraint or index over columns."""

    method: str
    columns: tuple[str, ...]


@dataclass
class TableDefinition:
    """Everything needed to render one table's migration module."""

    table_name: str
    preamble: list[str] = field(default_factory=list)
    columns: list[ColumnClause] = field(default_factory=list)
    table_clauses: list[TableClause] = field(default_factory=list)

    def column(self, name: str) -> Optional[ColumnClause]:
        for clause in self.columns:
            if clause.name == name:
                return clause
        return None
