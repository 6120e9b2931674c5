"""Online column migrations."""

import logging
from typing import Any, Optional

from psycopg import sql

from .base import BaseConnection
from .exceptions import ConfigurationError
from .schema import COLUMN_TYPES, constraint_name

logger = logging.getLogger(__name__)


async def update_column_in_batch(connection: BaseConnection, table: str, column: str, update: Any) -> None:
    """Set ``column`` to ``update`` on every row of ``table``."""
    # A ctid-batched update loop turned out slower than a single statement
    await connection.execute(
        sql.SQL("UPDATE {} SET {} = %s").format(sql.Identifier(table), sql.Identifier(column)),
        (update,),
    )


async def add_column(
    connection: BaseConnection,
    table: str,
    column: str,
    type: str,
    default: Any,
    update: Any,
    update_in_batch: bool = True,
    index: bool = False,
    index_concurrent: bool = False,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Add a NOT NULL column with a default to a table that already holds rows.

    The column is added as nullable, given its default, back-filled with
    ``update`` and only then made NOT NULL, so existing rows never violate
    the constraint.
    """
    log = logger or logging.getLogger(__name__)
    if type not in COLUMN_TYPES:
        raise ConfigurationError(f"Unknown column type: {type}")

    log.info(f"adding column {column} to {table}")
    await connection.schema.alter_table(table, lambda t: getattr(t, type)(column).nullable())

    log.info(f"setting default value of {column} in {table}")
    await connection.execute(
        sql.SQL("ALTER TABLE {} ALTER COLUMN {} SET DEFAULT {}").format(
            sql.Identifier(table), sql.Identifier(column), sql.Literal(default)
        )
    )

    log.info(f"updating {column} in {table}")
    if update_in_batch:
        await update_column_in_batch(connection, table, column, update)
    else:
        await connection.execute(
            sql.SQL("UPDATE {} SET {} = %s").format(sql.Identifier(table), sql.Identifier(column)),
            (update,),
        )

    log.info(f"setting {column} to not null in {table}")
    await connection.execute(
        sql.SQL("ALTER TABLE {} ALTER COLUMN {} SET NOT NULL").format(
            sql.Identifier(table), sql.Identifier(column)
        )
    )

    if index:
        log.info(f"creating index for {column} in {table}")
        if index_concurrent:
            await connection.execute(
                sql.SQL("CREATE INDEX CONCURRENTLY {} ON {} ({})").format(
                    sql.Identifier(constraint_name(table, [column], "index")),
                    sql.Identifier(table),
                    sql.Identifier(column),
                )
            )
        else:
            await connection.schema.alter_table(table, lambda t: t.index([column]))
