"""Abstract base class for database connections."""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncGenerator

if TYPE_CHECKING:
    from ..schema import SchemaBuilder

logger = logging.getLogger(__name__)


class BaseConnection(ABC):
    """Abstract base class for async database connections.

    This is the query engine every other component receives; nothing in
    pgforge reaches for a process-wide connection.
    """

    def __init__(self, config: Any):
        self.config = config
        self._connection = None

    @abstractmethod
    async def connect(self) -> None:
        """Establish database connection."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close database connection."""
        pass

    @property
    @abstractmethod
    def connection(self) -> Any:
        """Get the active connection."""
        pass

    @property
    def schema(self) -> "SchemaBuilder":
        """A fresh schema builder bound to this connection."""
        from ..schema import SchemaBuilder

        return SchemaBuilder(self)

    @asynccontextmanager
    async def cursor(self) -> AsyncGenerator[Any, None]:
        """Get a cursor context manager."""
        cur = self.connection.cursor()
        try:
            yield cur
        finally:
            await cur.close()

    async def execute(self, query: Any, params: tuple = ()) -> list[Any]:
        """Execute a query and return all results (empty for statements without rows)."""
        async with self.cursor() as cur:
            await cur.execute(query, params or None)
            if cur.description is None:
                return []
            return await cur.fetchall()

    async def execute_scalar(self, query: Any, params: tuple = ()) -> Any:
        """Execute a query and return a single value."""
        async with self.cursor() as cur:
            await cur.execute(query, params or None)
            row = await cur.fetchone()
            return row[0] if row else None

    async def execute_dict(self, query: Any, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a query and return results as dictionaries."""
        async with self.cursor() as cur:
            await cur.execute(query, params or None)
            if cur.description is None:
                return []
            columns = [column[0] for column in cur.description]
            return [dict(zip(columns, row)) for row in await cur.fetchall()]

    async def __aenter__(self) -> "BaseConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
