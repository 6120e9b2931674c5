"""Custom exceptions for pgforge."""


class PgForgeError(Exception):
    """Base exception for all pgforge errors."""

    pass


class ConnectionError(PgForgeError):
    """Error establishing database connection."""

    pass


class ConfigurationError(PgForgeError):
    """Error in configuration or parameters."""

    pass


class ExtractionError(PgForgeError):
    """Error reading catalog metadata."""

    pass


class CatalogConsistencyError(ExtractionError):
    """Catalog views disagree about a table's columns."""

    pass


class GenerationError(PgForgeError):
    """Error generating migration files."""

    pass


class UnsupportedTypeError(GenerationError):
    """Column type has no migration equivalent."""

    def __init__(self, table_name: str, column_name: str, raw_type: str):
        self.table_name = table_name
        self.column_name = column_name
        self.raw_type = raw_type
        super().__init__(
            f"Unsupported type {raw_type!r} for column {column_name!r} in table {table_name!r}"
        )


class TypeExtractionError(GenerationError):
    """Specific type name could not be recovered from a column default."""

    pass


class LifecycleError(PgForgeError):
    """Refused or failed database lifecycle operation."""

    pass


class BackendNotAvailableError(PgForgeError):
    """Required backend driver is not installed."""

    pass
