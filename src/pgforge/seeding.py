"""Load seed data and repair sequences afterwards."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from psycopg import sql
from psycopg.types.json import Jsonb

from .base import BaseConnection

logger = logging.getLogger(__name__)

# Taken from https://wiki.postgresql.org/wiki/Fixing_Sequences
SEQUENCE_FIX_QUERY = """
    SELECT 'SELECT SETVAL(' ||
        quote_literal(quote_ident(PGT.schemaname) || '.' || quote_ident(S.relname)) ||
        ', COALESCE(MAX(' || quote_ident(C.attname) || '), 1) ) FROM ' ||
        quote_ident(PGT.schemaname) || '.' || quote_ident(T.relname) || ';'
        AS query
    FROM pg_class AS S,
        pg_depend AS D,
        pg_class AS T,
        pg_attribute AS C,
        pg_tables AS PGT
    WHERE S.relkind = 'S'
        AND S.oid = D.objid
        AND D.refobjid = T.oid
        AND D.refobjid = C.attrelid
        AND D.refobjsubid = C.attnum
        AND T.relname = PGT.tablename
    ORDER BY S.relname
"""


async def reset_sequences(connection: BaseConnection) -> int:
    """Move every column-owned sequence past the column's current maximum.

    Rows inserted with explicit ids leave their sequences behind.
    Returns the number of sequences updated.
    """
    rows = await connection.execute_dict(SEQUENCE_FIX_QUERY)
    await asyncio.gather(*(connection.execute(row["query"]) for row in rows))
    logger.info(f"Reset {len(rows)} sequences")
    return len(rows)


def _adapt(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value


async def insert_rows(connection: BaseConnection, table_name: str, rows: list[dict[str, Any]]) -> None:
    for row in rows:
        columns = list(row)
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            sql.Identifier(table_name),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        await connection.execute(query, tuple(_adapt(row[c]) for c in columns))


async def seed_folder(
    connection: BaseConnection,
    folder_path: Path,
    logger: Optional[logging.Logger] = None,
) -> list[str]:
    """Insert the rows of every ``<table>.json`` file in a folder.

    Each file holds ``{"<table>": [{column: value, ...}, ...]}``. Tables are
    loaded concurrently, then sequences are reset.
    """
    log = logger or logging.getLogger(__name__)
    folder_path = Path(folder_path)
    files = sorted(p for p in folder_path.iterdir() if p.suffix == ".json")

    async def seed_table(path: Path) -> str:
        table_name = path.stem
        data = json.loads(path.read_text(encoding="utf-8"))
        rows = data.get(table_name, [])
        await insert_rows(connection, table_name, rows)
        log.info(f"Seeded {len(rows)} rows into {table_name}")
        return table_name

    tables = await asyncio.gather(*(seed_table(p) for p in files))
    await reset_sequences(connection)
    return list(tables)
