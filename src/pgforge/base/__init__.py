"""Base classes and shared interfaces."""

from .connection import BaseConnection
from .reader import BaseCatalogReader
from .models import (
    ColumnClause,
    ColumnDescriptor,
    IndexDescriptor,
    Modifier,
    TableClause,
    TableDefinition,
    TableDescriptor,
    TypeResolution,
)

__all__ = [
    "BaseConnection",
    "BaseCatalogReader",
    "TableDescriptor",
    "ColumnDescriptor",
    "IndexDescriptor",
    "TypeResolution",
    "Modifier",
    "ColumnClause",
    "TableClause",
    "TableDefinition",
]
