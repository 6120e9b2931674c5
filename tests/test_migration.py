"""End-to-end tests for migration generation."""

import logging

import pytest
from conftest import column_row, index_row
from pgforge.backends.postgresql import CatalogReader
from pgforge.exceptions import UnsupportedTypeError
from pgforge.generators import MigrationGenerator


def generator(conn, config):
    return MigrationGenerator(CatalogReader(conn, config), config)


@pytest.mark.anyio
class TestMigrationGenerator:
    """Tests for MigrationGenerator."""

    async def test_users_table_definition(self, users_conn, config):
        """The users scenario yields increments+primary, string(255)+unique, nullable timestamp."""
        [table] = await CatalogReader(users_conn, config).list_tables()
        definition = await generator(users_conn, config).build_table(table)

        assert [c.name for c in definition.columns] == ["id", "email", "created_at"]

        id_col = definition.column("id")
        assert id_col.method == "increments"
        assert id_col.modifier_names == ["primary"]

        email = definition.column("email")
        assert email.method == "string"
        assert email.args == (255,)
        assert email.modifier_names == ["not_nullable", "unique"]

        created_at = definition.column("created_at")
        assert created_at.method == "timestamp"
        assert created_at.modifier_names == ["nullable"]

        assert definition.table_clauses == []

    async def test_partial_unique_index_not_emitted(self, fake_conn, config, caplog):
        """UNIQUE (email) WHERE deleted_at IS NULL does not become a plain .unique()."""
        fake_conn.add_table(
            "users",
            [
                column_row("email", "character varying", 1, nullable=False, max_length=255),
                column_row("deleted_at", "timestamp with time zone", 2),
            ],
            [index_row("users_email_active", "users", ["email"], unique=True, partial=True)],
        )
        [table] = await CatalogReader(fake_conn, config).list_tables()
        with caplog.at_level(logging.WARNING):
            definition = await generator(fake_conn, config).build_table(table)

        assert definition.column("email").modifier_names == ["not_nullable"]
        assert "users_email_active" in caplog.text

    async def test_writes_table_and_index_modules(self, users_conn, config):
        files = await generator(users_conn, config).generate()
        out = config.output_dir

        assert set(files) == {
            out / "__init__.py",
            out / "tables" / "__init__.py",
            out / "tables" / "createusers.py",
            out / "index.py",
        }
        source = (out / "tables" / "createusers.py").read_text()
        assert "table.increments('id').primary()" in source
        assert "table.string('email', 255).not_nullable().unique()" in source
        assert "table.timestamp('created_at').nullable()" in source
        assert "drop_table_if_exists('users')" in source

        index = (out / "index.py").read_text()
        assert "from .tables import createusers" in index

    async def test_composite_index_reaches_table_clauses(self, fake_conn, config):
        fake_conn.add_table(
            "memberships",
            [
                column_row("user_id", "integer", 1, nullable=False),
                column_row("group_id", "integer", 2, nullable=False),
            ],
            [index_row("memberships_pkey", "memberships", ["user_id", "group_id"], unique=True, primary=True)],
        )
        await generator(fake_conn, config).generate()
        source = (config.output_dir / "tables" / "creatememberships.py").read_text()
        assert "table.primary(['user_id', 'group_id'])" in source
        assert "table.integer('user_id').not_nullable()\n" in source

    async def test_failure_writes_nothing(self, users_conn, config):
        """One unsupported column aborts the run before any file is written."""
        users_conn.add_table("blobs", [column_row("data", "bytea", 1)])
        with pytest.raises(UnsupportedTypeError):
            await generator(users_conn, config).generate()
        assert not config.output_dir.exists()

    async def test_dry_run(self, users_conn, config):
        config.dry_run = True
        files = await generator(users_conn, config).generate()
        assert len(files) == 4
        assert not config.output_dir.exists()

    async def test_empty_schema(self, fake_conn, config):
        await generator(fake_conn, config).generate()
        assert "TABLES = []" in (config.output_dir / "index.py").read_text()
