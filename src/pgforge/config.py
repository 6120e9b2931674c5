"""Configuration dataclasses for pgforge."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigurationError

DEFAULT_EXCLUDED_TABLES = ["knex_migrations", "knex_migrations_lock", "pgforge_migrations"]


@dataclass
class ForgeConfig:
    """Configuration for database utilities and migration generation."""

    # Connection parameters
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    # Environment name, "production" disables destructive commands
    environment: str = "development"

    # Database used while the target database is created or dropped
    maintenance_database: str = "postgres"

    # Introspection
    schema: str = "public"
    excluded_tables: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_TABLES))

    # Output settings
    output_dir: Path = field(default_factory=lambda: Path("./migrations"))

    # Behavior
    dry_run: bool = False
    verbosity: int = 0

    def __post_init__(self) -> None:
        """Normalize configuration after initialization."""
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

        if self.port is None and self.host:
            self.port = 5432

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate(self) -> None:
        """Validate the configuration is complete and consistent."""
        if not self.host:
            raise ConfigurationError("Host is required")
        if not self.database:
            raise ConfigurationError("Database is required")
        if not self.username:
            raise ConfigurationError("Username is required")
        if not self.schema:
            raise ConfigurationError("Schema is required")

    def should_include_table(self, table_name: str) -> bool:
        """Check if a table takes part in migration generation."""
        return table_name not in self.excluded_tables

    def conninfo_params(self, database: Optional[str] = None) -> dict[str, Any]:
        """Keyword arguments for psycopg.connect, optionally for another database."""
        params: dict[str, Any] = {
            "host": self.host,
            "port": self.port or 5432,
            "dbname": database or self.database,
            "user": self.username,
        }
        if self.password:
            params["password"] = self.password
        return params
