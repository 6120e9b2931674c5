"""Chainable schema builder executed by generated migration modules.

Usage::

    def build(table):
        table.increments("id").primary()
        table.string("email", 255).not_nullable().unique()

    await db.schema.create_table("users", build)

Statements are queued by ``raw``, ``create_table``, ``alter_table`` and
``drop_table_if_exists`` and run in order when the builder is awaited.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from psycopg import sql

if TYPE_CHECKING:
    from .base.connection import BaseConnection

logger = logging.getLogger(__name__)

COLUMN_TYPES = (
    "increments",
    "integer",
    "string",
    "text",
    "jsonb",
    "timestamp",
    "boolean",
    "float",
    "decimal",
    "specific_type",
)


def constraint_name(table_name: str, columns: Sequence[str], suffix: str) -> str:
    """Name constraints and indexes as ``<table>_<col>[_<col>...]_<suffix>``."""
    return "_".join([table_name, *columns, suffix]).lower()


def column_list(columns: Sequence[str]) -> sql.Composed:
    return sql.SQL(", ").join(sql.Identifier(c) for c in columns)


class ColumnBuilder:
    """A column definition with chained modifiers."""

    def __init__(self, name: str, type_sql: str):
        self.name = name
        self.type_sql = type_sql
        self.is_primary = False
        self.is_nullable: Optional[bool] = None
        self.has_default = False
        self.default: Any = None
        self.is_unique = False
        self.is_indexed = False

    def primary(self) -> "ColumnBuilder":
        self.is_primary = True
        return self

    def nullable(self) -> "ColumnBuilder":
        self.is_nullable = True
        return self

    def not_nullable(self) -> "ColumnBuilder":
        self.is_nullable = False
        return self

    def default_to(self, value: Any) -> "ColumnBuilder":
        self.has_default = True
        self.default = value
        return self

    def unique(self) -> "ColumnBuilder":
        self.is_unique = True
        return self

    def index(self) -> "ColumnBuilder":
        self.is_indexed = True
        return self

    def definition(self) -> sql.Composed:
        parts: list[sql.Composable] = [sql.Identifier(self.name), sql.SQL(self.type_sql)]
        if self.is_nullable is False:
            parts.append(sql.SQL("NOT NULL"))
        elif self.is_nullable is True:
            parts.append(sql.SQL("NULL"))
        if self.has_default:
            parts.append(sql.SQL("DEFAULT {}").format(sql.Literal(self.default)))
        if self.is_primary:
            parts.append(sql.SQL("PRIMARY KEY"))
        return sql.SQL(" ").join(parts)


class TableBuilder:
    """Collects columns and table-level constraints for one table."""

    def __init__(self, name: str):
        self.name = name
        self.columns: list[ColumnBuilder] = []
        self.primary_keys: list[tuple[str, ...]] = []
        self.uniques: list[tuple[str, ...]] = []
        self.indexes: list[tuple[str, ...]] = []

    def _add(self, name: str, type_sql: str) -> ColumnBuilder:
        column = ColumnBuilder(name, type_sql)
        self.columns.append(column)
        return column

    def increments(self, name: str) -> ColumnBuilder:
        return self._add(name, "serial")

    def integer(self, name: str) -> ColumnBuilder:
        return self._add(name, "integer")

    def string(self, name: str, length: int = 255) -> ColumnBuilder:
        return self._add(name, f"varchar({int(length)})")

    def text(self, name: str) -> ColumnBuilder:
        return self._add(name, "text")

    def jsonb(self, name: str) -> ColumnBuilder:
        return self._add(name, "jsonb")

    def timestamp(self, name: str) -> ColumnBuilder:
        return self._add(name, "timestamptz")

    def boolean(self, name: str) -> ColumnBuilder:
        return self._add(name, "boolean")

    def float(self, name: str) -> ColumnBuilder:
        return self._add(name, "real")

    def decimal(self, name: str, precision: Optional[int] = None, scale: Optional[int] = None) -> ColumnBuilder:
        if precision is None:
            return self._add(name, "numeric")
        if scale is None:
            return self._add(name, f"numeric({int(precision)})")
        return self._add(name, f"numeric({int(precision)}, {int(scale)})")

    def specific_type(self, name: str, type_name: str) -> ColumnBuilder:
        return self._add(name, type_name)

    def primary(self, columns: Sequence[str]) -> "TableBuilder":
        self.primary_keys.append(tuple(columns))
        return self

    def unique(self, columns: Sequence[str]) -> "TableBuilder":
        self.uniques.append(tuple(columns))
        return self

    def index(self, columns: Sequence[str]) -> "TableBuilder":
        self.indexes.append(tuple(columns))
        return self

    def create_statements(self) -> list[sql.Composable]:
        definitions = [c.definition() for c in self.columns]
        for columns in self.primary_keys:
            definitions.append(
                sql.SQL("CONSTRAINT {} PRIMARY KEY ({})").format(
                    sql.Identifier(constraint_name(self.name, [], "pkey")),
                    column_list(columns),
                )
            )
        create = sql.SQL("CREATE TABLE {} ({})").format(
            sql.Identifier(self.name), sql.SQL(", ").join(definitions)
        )
        return [create] + self._constraint_statements()

    def alter_statements(self) -> list[sql.Composable]:
        statements: list[sql.Composable] = [
            sql.SQL("ALTER TABLE {} ADD COLUMN {}").format(sql.Identifier(self.name), c.definition())
            for c in self.columns
        ]
        for columns in self.primary_keys:
            statements.append(
                sql.SQL("ALTER TABLE {} ADD PRIMARY KEY ({})").format(
                    sql.Identifier(self.name), column_list(columns)
                )
            )
        return statements + self._constraint_statements()

    def _constraint_statements(self) -> list[sql.Composable]:
        uniques = list(self.uniques) + [(c.name,) for c in self.columns if c.is_unique]
        indexes = list(self.indexes) + [(c.name,) for c in self.columns if c.is_indexed]
        statements: list[sql.Composable] = []
        for columns in uniques:
            statements.append(
                sql.SQL("ALTER TABLE {} ADD CONSTRAINT {} UNIQUE ({})").format(
                    sql.Identifier(self.name),
                    sql.Identifier(constraint_name(self.name, columns, "unique")),
                    column_list(columns),
                )
            )
        for columns in indexes:
            statements.append(
                sql.SQL("CREATE INDEX {} ON {} ({})").format(
                    sql.Identifier(constraint_name(self.name, columns, "index")),
                    sql.Identifier(self.name),
                    column_list(columns),
                )
            )
        return statements


class SchemaBuilder:
    """Queues DDL statements and runs them against a connection when awaited."""

    def __init__(self, connection: "BaseConnection"):
        self.connection = connection
        self._statements: list[sql.Composable] = []

    def raw(self, statement: str) -> "SchemaBuilder":
        self._statements.append(sql.SQL(statement))
        return self

    def create_table(self, name: str, callback: Callable[[TableBuilder], Any]) -> "SchemaBuilder":
        table = TableBuilder(name)
        callback(table)
        self._statements.extend(table.create_statements())
        return self

    def alter_table(self, name: str, callback: Callable[[TableBuilder], Any]) -> "SchemaBuilder":
        table = TableBuilder(name)
        callback(table)
        self._statements.extend(table.alter_statements())
        return self

    def drop_table_if_exists(self, name: str) -> "SchemaBuilder":
        self._statements.append(sql.SQL("DROP TABLE IF EXISTS {}").format(sql.Identifier(name)))
        return self

    @property
    def statements(self) -> list[sql.Composable]:
        return list(self._statements)

    async def execute(self) -> None:
        statements, self._statements = self._statements, []
        for statement in statements:
            logger.debug(f"Executing schema statement: {statement!r}")
            await self.connection.execute(statement)

    def __await__(self):
        return self.execute().__await__()
