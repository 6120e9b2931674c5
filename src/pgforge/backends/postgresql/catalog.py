"""PostgreSQL catalog reader."""

import logging

from ...base import BaseCatalogReader
from ...base.models import ColumnDescriptor, IndexDescriptor, TableDescriptor
from ...exceptions import CatalogConsistencyError

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT table_schema, table_name, table_type
    FROM information_schema.tables
    WHERE table_schema = %s
    AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

# Per-column capabilities, the shape a query builder's column info exposes
COLUMN_INFO_QUERY = """
    SELECT
        c.column_name,
        c.data_type,
        c.is_nullable = 'YES' AS is_nullable,
        c.column_default,
        c.character_maximum_length
    FROM information_schema.columns c
    WHERE c.table_schema = %s AND c.table_name = %s
    ORDER BY c.ordinal_position
"""

COLUMN_DETAIL_QUERY = """
    SELECT
        c.table_name,
        c.column_name,
        c.ordinal_position,
        c.column_default,
        c.data_type,
        c.character_maximum_length,
        c.numeric_precision,
        c.numeric_scale
    FROM information_schema.columns c
    WHERE c.table_schema = %s AND c.table_name = %s
"""

INDEXES_QUERY = """
    SELECT
        r.rolname AS owner,
        ns.nspname AS schema_name,
        t.relname AS table_name,
        i.relname AS index_name,
        idx.indisunique AS is_unique,
        idx.indisprimary AS is_primary,
        am.amname AS index_type,
        ARRAY(
            SELECT pg_get_indexdef(idx.indexrelid, k + 1, TRUE)
            FROM generate_subscripts(idx.indkey, 1) AS k
            ORDER BY k
        ) AS indexed_columns,
        (idx.indexprs IS NOT NULL) OR (idx.indkey::int[] @> ARRAY[0]) AS is_functional,
        idx.indpred IS NOT NULL AS is_partial
    FROM pg_index AS idx
    JOIN pg_class AS i ON i.oid = idx.indexrelid
    JOIN pg_class AS t ON t.oid = idx.indrelid
    JOIN pg_am AS am ON am.oid = i.relam
    JOIN pg_namespace AS ns ON ns.oid = t.relnamespace
    LEFT JOIN pg_roles AS r ON r.oid = i.relowner
    WHERE ns.nspname = %s AND t.relname = %s
    ORDER BY i.relname
"""


class CatalogReader(BaseCatalogReader):
    """Reads tables, columns and indexes of one schema from PostgreSQL."""

    async def list_tables(self) -> list[TableDescriptor]:
        """Get all base tables of the configured schema, minus bookkeeping tables."""
        rows = await self.connection.execute_dict(TABLES_QUERY, (self.config.schema,))
        tables = [
            TableDescriptor(schema=row["table_schema"], name=row["table_name"], kind=row["table_type"])
            for row in rows
            if self._should_include_table(row["table_name"])
        ]
        self.logger.info(f"Found {len(tables)} tables in schema {self.config.schema}")
        return tables

    async def list_columns(self, table_name: str) -> dict[str, ColumnDescriptor]:
        """Get columns for a table, merging the column info and detail views."""
        params = (self.config.schema, table_name)
        info_rows = await self.connection.execute_dict(COLUMN_INFO_QUERY, params)
        detail_rows = await self.connection.execute_dict(COLUMN_DETAIL_QUERY, params)
        details = {row["column_name"]: row for row in detail_rows}

        columns: dict[str, ColumnDescriptor] = {}
        for row in info_rows:
            name = row["column_name"]
            detail = details.get(name)
            if detail is None:
                raise CatalogConsistencyError(
                    f"No detailed metadata for column {name!r} in table {table_name!r}"
                )
            columns[name] = ColumnDescriptor(
                name=name,
                raw_type=row["data_type"],
                table_name=table_name,
                ordinal_position=detail["ordinal_position"],
                nullable=row["is_nullable"],
                default_raw=row["column_default"],
                character_max_length=row["character_maximum_length"],
                numeric_precision=detail["numeric_precision"],
                numeric_scale=detail["numeric_scale"],
            )

        ordered = sorted(columns.values(), key=lambda c: c.ordinal_position)
        self.logger.debug(f"Found {len(ordered)} columns in {table_name}")
        return {c.name: c for c in ordered}

    async def list_indexes(self, table_name: str) -> list[IndexDescriptor]:
        """Get indexes for a table."""
        rows = await self.connection.execute_dict(INDEXES_QUERY, (self.config.schema, table_name))
        indexes = [
            IndexDescriptor(
                name=row["index_name"],
                table_name=row["table_name"],
                indexed_columns=tuple(row["indexed_columns"] or ()),
                is_unique=row["is_unique"],
                is_primary=row["is_primary"],
                is_functional=row["is_functional"],
                is_partial=row["is_partial"],
                index_type=row["index_type"],
                owner=row["owner"],
            )
            for row in rows
        ]
        self.logger.debug(f"Found {len(indexes)} indexes on {table_name}")
        return indexes
