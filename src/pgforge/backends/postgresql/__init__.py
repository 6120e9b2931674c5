"""PostgreSQL backend."""

from .catalog import CatalogReader
from .connection import PostgreSQLConnection

__all__ = [
    "CatalogReader",
    "PostgreSQLConnection",
]
