"""Regenerate migration modules from a live database schema."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ..base import BaseCatalogReader
from ..base.models import TableDefinition, TableDescriptor
from ..config import ForgeConfig
from .emitter import TableEmitter
from .indexes import IndexClassifier
from .renderer import MigrationRenderer, module_name

logger = logging.getLogger(__name__)


class MigrationGenerator:
    """Writes one migration module per table plus an aggregating index module.

    All tables are introspected concurrently. Nothing is written until every
    table has been rendered, so a failing table leaves the output directory
    untouched.
    """

    def __init__(
        self,
        reader: BaseCatalogReader,
        config: ForgeConfig,
        emitter: Optional[TableEmitter] = None,
        classifier: Optional[IndexClassifier] = None,
        renderer: Optional[MigrationRenderer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.reader = reader
        self.config = config
        self.output_dir = config.output_dir
        self.logger = logger or logging.getLogger(__name__)
        self.emitter = emitter or TableEmitter(logger=self.logger)
        self.classifier = classifier or IndexClassifier(self.logger)
        self.renderer = renderer or MigrationRenderer()

    async def build_table(self, table: TableDescriptor) -> TableDefinition:
        """Introspect one table and build its definition."""
        columns, indexes = await asyncio.gather(
            self.reader.list_columns(table.name),
            self.reader.list_indexes(table.name),
        )
        classified = self.classifier.classify(columns, indexes)
        return self.emitter.emit(table, classified.columns, classified.table_indexes)

    async def render(self) -> dict[Path, str]:
        """Build the content of every output file, keyed by path."""
        tables = await self.reader.list_tables()
        definitions = await asyncio.gather(*(self.build_table(t) for t in tables))

        tables_dir = self.output_dir / "tables"
        files: dict[Path, str] = {
            self.output_dir / "__init__.py": "",
            tables_dir / "__init__.py": "",
        }
        for definition in definitions:
            path = tables_dir / f"{module_name(definition.table_name)}.py"
            files[path] = self.renderer.render_table(definition)
        files[self.output_dir / "index.py"] = self.renderer.render_index([t.name for t in tables])
        return files

    async def generate(self) -> list[Path]:
        """Generate and write all migration files."""
        files = await self.render()
        self._create_directories()
        for path, content in files.items():
            self._write_file(path, content)
        table_count = sum(1 for p in files if p.name.startswith("create"))
        self.logger.info(f"Generated migrations for {table_count} tables in {self.output_dir}")
        return list(files)

    def _create_directories(self) -> None:
        """Create the output directory structure."""
        if self.config.dry_run:
            return
        (self.output_dir / "tables").mkdir(parents=True, exist_ok=True)

    def _write_file(self, path: Path, content: str) -> Path:
        """Write content to a file."""
        if self.config.dry_run:
            self.logger.info(f"[DRY RUN] Would write: {path}")
        else:
            path.write_text(content, encoding="utf-8")
            self.logger.debug(f"Wrote: {path}")
        return path
