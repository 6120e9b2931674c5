"""Tests for the schema builder used by generated migrations."""

import pytest
from pgforge.base.models import ColumnClause, Modifier, TableDefinition
from pgforge.generators.renderer import MigrationRenderer
from pgforge.schema import SchemaBuilder, TableBuilder, constraint_name


def build_users(table):
    table.increments("id").primary()
    table.string("email", 255).not_nullable().unique()
    table.integer("score").not_nullable().default_to(0).index()
    table.timestamp("created_at").nullable()


class TestTableBuilder:
    """Tests for TableBuilder DDL compilation."""

    def test_create_statements(self):
        table = TableBuilder("users")
        build_users(table)
        create, unique, index = [s.as_string() for s in table.create_statements()]

        assert create.startswith('CREATE TABLE "users" (')
        assert '"id" serial PRIMARY KEY' in create
        assert '"email" varchar(255) NOT NULL' in create
        assert '"score" integer NOT NULL DEFAULT 0' in create
        assert '"created_at" timestamptz NULL' in create
        assert unique == 'ALTER TABLE "users" ADD CONSTRAINT "users_email_unique" UNIQUE ("email")'
        assert index == 'CREATE INDEX "users_score_index" ON "users" ("score")'

    def test_composite_primary_key(self):
        table = TableBuilder("memberships")
        table.integer("user_id").not_nullable()
        table.integer("group_id").not_nullable()
        table.primary(["user_id", "group_id"])
        [create] = [s.as_string() for s in table.create_statements()]
        assert 'CONSTRAINT "memberships_pkey" PRIMARY KEY ("user_id", "group_id")' in create

    def test_decimal_and_specific_type(self):
        table = TableBuilder("prices")
        table.decimal("amount", 10)
        table.specific_type("code", "citext")
        [create] = [s.as_string() for s in table.create_statements()]
        assert '"amount" numeric(10)' in create
        assert '"code" citext' in create

    def test_alter_statements(self):
        table = TableBuilder("users")
        table.boolean("active").nullable()
        [alter] = [s.as_string() for s in table.alter_statements()]
        assert alter == 'ALTER TABLE "users" ADD COLUMN "active" boolean NULL'

    def test_constraint_name(self):
        assert constraint_name("Users", ["a", "B"], "unique") == "users_a_b_unique"


@pytest.mark.anyio
class TestSchemaBuilder:
    """Tests for SchemaBuilder execution."""

    async def test_await_runs_queued_statements(self, fake_conn):
        await SchemaBuilder(fake_conn).raw("SELECT 1").drop_table_if_exists("users")
        assert fake_conn.statements() == ["SELECT 1", 'DROP TABLE IF EXISTS "users"']

    async def test_schema_property_is_fresh(self, fake_conn):
        assert fake_conn.schema is not fake_conn.schema

    async def test_generated_module_runs(self, fake_conn):
        """A rendered table module drives the builder through db.schema."""
        definition = TableDefinition(
            table_name="users",
            preamble=["CREATE EXTENSION IF NOT EXISTS CITEXT"],
            columns=[
                ColumnClause("id", "increments", (), (Modifier("primary"),)),
                ColumnClause("email", "specific_type", ("citext",), (Modifier("not_nullable"), Modifier("unique"))),
            ],
        )
        namespace: dict = {}
        exec(MigrationRenderer().render_table(definition), namespace)

        await namespace["up"](fake_conn)
        statements = fake_conn.statements()
        assert statements[0] == "CREATE EXTENSION IF NOT EXISTS CITEXT"
        assert statements[1].startswith('CREATE TABLE "users"')
        assert '"email" citext NOT NULL' in statements[1]
        assert statements[2].endswith('UNIQUE ("email")')

        await namespace["down"](fake_conn)
        assert fake_conn.statements()[-1] == 'DROP TABLE IF EXISTS "users"'
