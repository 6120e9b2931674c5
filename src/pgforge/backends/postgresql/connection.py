"""PostgreSQL database connection."""

import logging
from typing import Any, Optional

import psycopg
from psycopg.rows import dict_row

from ...base.connection import BaseConnection
from ...config import ForgeConfig
from ...exceptions import ConnectionError

logger = logging.getLogger(__name__)


class PostgreSQLConnection(BaseConnection):
    """PostgreSQL connection using psycopg3's asyncio interface.

    Connections run in autocommit mode: every statement issued by the
    lifecycle and migration helpers is its own transaction, which
    ``CREATE DATABASE`` and ``CREATE INDEX CONCURRENTLY`` require.
    """

    def __init__(self, config: ForgeConfig, database: Optional[str] = None):
        super().__init__(config)
        self.database = database or config.database
        self._connection: Optional[psycopg.AsyncConnection] = None

    async def connect(self) -> None:
        """Establish database connection."""
        try:
            conn_params = self.config.conninfo_params(self.database)
            logger.debug(f"Connecting to PostgreSQL: {self.config.host}:{conn_params['port']}/{self.database}")
            self._connection = await psycopg.AsyncConnection.connect(autocommit=True, **conn_params)
            logger.info(f"Connected to {self.database}")
        except psycopg.Error as e:
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.info("Disconnected from database")

    @property
    def connection(self) -> psycopg.AsyncConnection:
        """Get the active connection."""
        if not self._connection:
            raise ConnectionError("Not connected to database")
        return self._connection

    async def execute_dict(self, query: Any, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a query and return results as dictionaries."""
        async with self.connection.cursor(row_factory=dict_row) as cur:
            await cur.execute(query, params or None)
            if cur.description is None:
                return []
            return await cur.fetchall()

    async def get_version(self) -> str:
        """Get PostgreSQL version."""
        return await self.execute_scalar("SELECT version()") or "Unknown"
