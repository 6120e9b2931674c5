"""Create, drop, copy and refresh development databases."""

import importlib
import importlib.util
import logging
import secrets
import sys
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional

import psycopg
from psycopg import sql

from .backends.postgresql import PostgreSQLConnection
from .base import BaseConnection
from .config import ForgeConfig
from .exceptions import ConfigurationError, LifecycleError
from .seeding import seed_folder

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[ForgeConfig, Optional[str]], BaseConnection]

TERMINATE_QUERY = """
    SELECT pg_terminate_backend(pid)
    FROM pg_stat_activity
    WHERE datname = %s AND pid <> pg_backend_pid()
"""


def load_migrations(output_dir: Path) -> ModuleType:
    """Import the generated ``index`` module from a migrations directory."""
    package_name = output_dir.name
    init_file = output_dir / "__init__.py"
    if not (output_dir / "index.py").exists():
        raise ConfigurationError(f"No generated migrations found in {output_dir}")

    # Drop modules left over from a previously loaded migrations directory
    for name in [m for m in sys.modules if m == package_name or m.startswith(f"{package_name}.")]:
        del sys.modules[name]

    spec = importlib.util.spec_from_file_location(
        package_name, init_file, submodule_search_locations=[str(output_dir)]
    )
    if spec is None or spec.loader is None:
        raise ConfigurationError(f"Cannot import migrations from {output_dir}")
    package = importlib.util.module_from_spec(spec)
    sys.modules[package_name] = package
    spec.loader.exec_module(package)
    return importlib.import_module(f"{package_name}.index")


class DatabaseManager:
    """Lifecycle operations for the database named in a ForgeConfig.

    Destructive operations refuse to run when the environment is production.
    The manager tracks the database it currently points at, which differs
    from the configured one after :meth:`copy_db`.
    """

    def __init__(
        self,
        config: ForgeConfig,
        connection_factory: Optional[ConnectionFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.connection_factory = connection_factory or PostgreSQLConnection
        self.logger = logger or logging.getLogger(__name__)
        self.current_database = config.database
        self.original_database: Optional[str] = config.database

    def connect(self, database: Optional[str] = None) -> BaseConnection:
        """A connection to the current (or given) database, not yet opened."""
        return self.connection_factory(self.config, database or self.current_database)

    def _maintenance(self) -> BaseConnection:
        return self.connection_factory(self.config, self.config.maintenance_database)

    def _guard_production(self) -> None:
        if self.config.is_production:
            raise LifecycleError("Can't use this in production. Too dangerous.")

    def _require_database(self) -> str:
        if not self.current_database:
            raise ConfigurationError("Database name does not exist in the config")
        return self.current_database

    async def create_db(self, migrate: bool = False) -> None:
        """Create the database if it does not exist yet."""
        db_name = self._require_database()
        async with self._maintenance() as conn:
            exists = await conn.execute_scalar("SELECT 1 FROM pg_database WHERE datname = %s", (db_name,))
            if exists:
                self.logger.info(f"DB {db_name} already exists")
            else:
                await conn.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(db_name)))
                self.logger.info(f"Created database {db_name}")

        if migrate:
            await self.apply_migrations("up")

    async def drop_db(self) -> None:
        """Drop the database, disconnecting other sessions first."""
        self._guard_production()
        db_name = self._require_database()
        async with self._maintenance() as conn:
            try:
                await conn.execute(
                    sql.SQL("ALTER DATABASE {} CONNECTION LIMIT 1").format(sql.Identifier(db_name))
                )
                await conn.execute(TERMINATE_QUERY, (db_name,))
            except psycopg.Error as e:
                # The database may not exist yet
                self.logger.debug(f"Could not disconnect sessions from {db_name}: {e}")
            await conn.execute(sql.SQL("DROP DATABASE IF EXISTS {}").format(sql.Identifier(db_name)))
        self.logger.info(f"Dropped database {db_name}")

    async def recreate_db(self) -> None:
        """Drop and create the database."""
        self.logger.info(f"Recreating DB: {self.current_database}")
        await self.drop_db()
        await self.create_db()
        self.original_database = self.current_database

    async def refresh_db(self, seed_dir: Optional[Path] = None) -> None:
        """Recreate the database, apply migrations and load seed data."""
        await self.recreate_db()
        await self.apply_migrations("up")
        self.logger.info("Ran migrations")
        if seed_dir is not None:
            async with self.connect() as conn:
                await seed_folder(conn, seed_dir, logger=self.logger)
            self.logger.info("Seeded data")

    async def copy_db(self, old_db_name: str, new_db_name: str) -> str:
        """Create ``new_db_name`` from ``old_db_name`` used as a template."""
        self._guard_production()
        if old_db_name == new_db_name:
            raise LifecycleError(f"oldDb can't be same as newDb [{old_db_name}].")

        self.logger.info(f"Copying DB: {old_db_name} to {new_db_name}")
        async with self._maintenance() as conn:
            await conn.execute(TERMINATE_QUERY, (old_db_name,))
            await conn.execute(
                sql.SQL("CREATE DATABASE {} WITH TEMPLATE {} OWNER {}").format(
                    sql.Identifier(new_db_name),
                    sql.Identifier(old_db_name),
                    sql.Identifier(self.config.username),
                )
            )
        self.current_database = new_db_name
        return new_db_name

    async def copy_db_for_test(self) -> str:
        """Copy the original database to a randomly named scratch database."""
        self._guard_production()
        if not self.original_database:
            raise LifecycleError(f"Original database not found for env {self.config.environment}")
        new_db_name = f"{self.original_database}_copy_{secrets.token_hex(6)}"
        return await self.copy_db(self.original_database, new_db_name)

    async def rollback_copy_db_for_test(self) -> Optional[str]:
        """Drop the scratch copy and point back at the original database."""
        self._guard_production()
        if not self.original_database:
            raise LifecycleError(f"Original database not found for env {self.config.environment}")
        if self.current_database == self.original_database:
            return self.current_database

        await self.drop_db()
        self.current_database = self.original_database
        return self.current_database

    async def apply_migrations(self, direction: str = "up") -> None:
        """Run the generated index module's ``up`` or ``down``."""
        if direction not in ("up", "down"):
            raise ConfigurationError(f"Unknown migration direction: {direction}")
        index = load_migrations(self.config.output_dir)
        async with self.connect() as conn:
            await getattr(index, direction)(conn)
        self.logger.info(f"Applied migrations {direction} on {self.current_database}")
