"""Database backend implementations."""

from typing import TYPE_CHECKING, Type

from ..exceptions import BackendNotAvailableError, ConfigurationError

if TYPE_CHECKING:
    from ..base import BaseCatalogReader, BaseConnection


def get_backend(db_type: str) -> tuple[Type["BaseConnection"], Type["BaseCatalogReader"]]:
    """
    Get the connection class and catalog reader for a database type.

    Returns:
        Tuple of (ConnectionClass, CatalogReaderClass)
    """
    if db_type == "postgresql":
        try:
            from .postgresql import CatalogReader, PostgreSQLConnection
            return PostgreSQLConnection, CatalogReader
        except ImportError as e:
            raise BackendNotAvailableError(
                f"PostgreSQL backend requires psycopg. Install with: pip install pgforge\n"
                f"Error: {e}"
            )

    raise ConfigurationError(
        f"Unknown database type: {db_type}. Supported types: postgresql"
    )
