"""Abstract base class for catalog readers."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..config import ForgeConfig
from .connection import BaseConnection
from .models import ColumnDescriptor, IndexDescriptor, TableDescriptor


class BaseCatalogReader(ABC):
    """Abstract base class for reading table metadata from a live catalog."""

    def __init__(
        self,
        connection: BaseConnection,
        config: ForgeConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self.connection = connection
        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def list_tables(self) -> list[TableDescriptor]:
        """List the tables migrations are generated for."""
        pass

    @abstractmethod
    async def list_columns(self, table_name: str) -> dict[str, ColumnDescriptor]:
        """Map column name to descriptor, in ordinal order."""
        pass

    @abstractmethod
    async def list_indexes(self, table_name: str) -> list[IndexDescriptor]:
        """List the indexes defined on a table."""
        pass

    def _should_include_table(self, table_name: str) -> bool:
        """Check if a table should be included based on config."""
        return self.config.should_include_table(table_name)
