"""Pytest configuration and shared fixtures."""

from typing import Any, Optional

import pytest

from pgforge.backends.postgresql.catalog import (
    COLUMN_DETAIL_QUERY,
    COLUMN_INFO_QUERY,
    INDEXES_QUERY,
    TABLES_QUERY,
)
from pgforge.base import BaseConnection
from pgforge.config import ForgeConfig


@pytest.fixture
def anyio_backend():
    return "asyncio"


def column_row(
    name: str,
    data_type: str,
    position: int,
    nullable: bool = True,
    default: Optional[str] = None,
    max_length: Optional[int] = None,
    precision: Optional[int] = None,
    scale: Optional[int] = None,
) -> dict[str, Any]:
    """One information_schema.columns row carrying both views' fields."""
    return {
        "column_name": name,
        "data_type": data_type,
        "is_nullable": nullable,
        "column_default": default,
        "character_maximum_length": max_length,
        "ordinal_position": position,
        "numeric_precision": precision,
        "numeric_scale": scale,
    }


def index_row(
    name: str,
    table: str,
    columns: list[str],
    unique: bool = False,
    primary: bool = False,
    functional: bool = False,
    partial: bool = False,
) -> dict[str, Any]:
    return {
        "owner": "postgres",
        "schema_name": "public",
        "table_name": table,
        "index_name": name,
        "is_unique": unique,
        "is_primary": primary,
        "index_type": "btree",
        "indexed_columns": columns,
        "is_functional": functional,
        "is_partial": partial,
    }


class FakeConnection(BaseConnection):
    """Answers catalog queries from canned rows and records every statement."""

    def __init__(self, config: Optional[ForgeConfig] = None, database: Optional[str] = None):
        super().__init__(config or ForgeConfig())
        self.database = database
        self.tables: list[dict[str, Any]] = []
        self.columns: dict[str, list[dict[str, Any]]] = {}
        self.details: dict[str, list[dict[str, Any]]] = {}
        self.indexes: dict[str, list[dict[str, Any]]] = {}
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.scalars: list[Any] = []
        self.executed: list[tuple[Any, Any]] = []
        self.connected = False

    def add_table(self, name: str, columns: list[dict], indexes: Optional[list[dict]] = None) -> None:
        self.tables.append({"table_schema": "public", "table_name": name, "table_type": "BASE TABLE"})
        self.columns[name] = columns
        self.details[name] = [dict(c, table_name=name) for c in columns]
        self.indexes[name] = indexes or []

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    @property
    def connection(self) -> "FakeConnection":
        return self

    async def execute_dict(self, query: Any, params: tuple = ()) -> list[dict[str, Any]]:
        self.executed.append((query, params))
        if query is TABLES_QUERY:
            return list(self.tables)
        if query is COLUMN_INFO_QUERY:
            return list(self.columns.get(params[1], []))
        if query is COLUMN_DETAIL_QUERY:
            return list(self.details.get(params[1], []))
        if query is INDEXES_QUERY:
            return list(self.indexes.get(params[1], []))
        return list(self.rows.get(query, []))

    async def execute(self, query: Any, params: tuple = ()) -> list[Any]:
        self.executed.append((query, params))
        return []

    async def execute_scalar(self, query: Any, params: tuple = ()) -> Any:
        self.executed.append((query, params))
        return self.scalars.pop(0) if self.scalars else None

    def statements(self) -> list[str]:
        """Executed statements rendered as text."""
        return [q if isinstance(q, str) else q.as_string() for q, _ in self.executed]


@pytest.fixture
def config(tmp_path) -> ForgeConfig:
    return ForgeConfig(
        host="localhost",
        database="app",
        username="postgres",
        output_dir=tmp_path / "migrations",
    )


@pytest.fixture
def fake_conn(config) -> FakeConnection:
    return FakeConnection(config)


@pytest.fixture
def users_conn(fake_conn) -> FakeConnection:
    """The users table: serial id, unique email, nullable created_at."""
    fake_conn.add_table(
        "users",
        [
            column_row("id", "integer", 1, nullable=False,
                       default="nextval('users_id_seq'::regclass)", precision=32),
            column_row("email", "character varying", 2, nullable=False, max_length=255),
            column_row("created_at", "timestamp with time zone", 3, nullable=True),
        ],
        [
            index_row("users_pkey", "users", ["id"], unique=True, primary=True),
            index_row("users_email_unique", "users", ["email"], unique=True),
        ],
    )
    return fake_conn
