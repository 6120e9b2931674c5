"""Serialize table definitions into Python migration modules."""

from typing import Any

from ..base.models import ColumnClause, TableClause, TableDefinition

INDENT = "    "


def module_name(table_name: str) -> str:
    """Module name of a table's migration, e.g. ``createusers``."""
    return f"create{table_name}"


def render_value(value: Any) -> str:
    return repr(value)


def render_call(name: str, args: tuple) -> str:
    return f"{name}({', '.join(render_value(a) for a in args)})"


class MigrationRenderer:
    """Renders TableDefinitions as modules exposing ``async up(db)``/``down(db)``.

    The generated code drives :class:`pgforge.schema.SchemaBuilder` through
    ``db.schema``.
    """

    def render_table(self, definition: TableDefinition) -> str:
        table_name = definition.table_name
        body = [self.render_column(c) for c in definition.columns]
        body.extend(self.render_table_clause(c) for c in definition.table_clauses)
        if not body:
            body = ["pass"]

        chain = "db.schema"
        for statement in definition.preamble:
            chain += f".raw({render_value(statement)})"
        chain += f".create_table({render_value(table_name)}, build)"

        lines = [
            f'"""Create table {table_name}."""',
            "",
            "",
            "def build(table):",
        ]
        lines.extend(f"{INDENT}{line}" for line in body)
        lines.extend([
            "",
            "",
            "async def up(db):",
            f"{INDENT}await {chain}",
            "",
            "",
            "async def down(db):",
            f"{INDENT}await db.schema.drop_table_if_exists({render_value(table_name)})",
            "",
        ])
        return "\n".join(lines)

    def render_column(self, clause: ColumnClause) -> str:
        call = render_call(clause.method, (clause.name,) + tuple(clause.args))
        modifiers = "".join(f".{render_call(m.name, m.args)}" for m in clause.modifiers)
        return f"table.{call}{modifiers}"

    def render_table_clause(self, clause: TableClause) -> str:
        return f"table.{clause.method}({render_value(list(clause.columns))})"

    def render_index(self, table_names: list[str]) -> str:
        """Render the module running every table migration concurrently."""
        names = [module_name(t) for t in table_names]
        dynamic = [n for n in names if not n.isidentifier()]

        lines = ['"""Create or drop every table of the schema."""', "", "import asyncio"]
        if dynamic:
            lines.append("import importlib")
        lines.append("")

        static = [n for n in names if n.isidentifier()]
        if static:
            lines.append(f"from .tables import {', '.join(static)}")
        lines.append("")

        if names:
            lines.append("TABLES = [")
            for name in names:
                if name.isidentifier():
                    lines.append(f"{INDENT}{name},")
                else:
                    lines.append(
                        f'{INDENT}importlib.import_module(".tables." + {render_value(name)}, __package__),'
                    )
            lines.append("]")
        else:
            lines.append("TABLES = []")

        lines.extend([
            "",
            "",
            "async def up(db):",
            f"{INDENT}await asyncio.gather(*(table.up(db) for table in TABLES))",
            "",
            "",
            "async def down(db):",
            f"{INDENT}await asyncio.gather(*(table.down(db) for table in TABLES))",
            "",
        ])
        return "\n".join(lines)
