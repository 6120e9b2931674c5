"""Build the structured migration definition of one table."""

import logging
from typing import Optional

from ..base.models import (
    ColumnClause,
    ColumnDescriptor,
    IndexDescriptor,
    Modifier,
    TableClause,
    TableDefinition,
    TableDescriptor,
)
from .defaults import DefaultNormalizer
from .type_mapping import TypeMapper

CITEXT_EXTENSION = "CREATE EXTENSION IF NOT EXISTS CITEXT"


class TableEmitter:
    """Composes type, default and index information into a TableDefinition.

    Column modifiers always come in the same order: primary, nullability,
    default, then the column's own unique/index marker.
    """

    def __init__(
        self,
        type_mapper: Optional[TypeMapper] = None,
        default_normalizer: Optional[DefaultNormalizer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.type_mapper = type_mapper or TypeMapper()
        self.default_normalizer = default_normalizer or DefaultNormalizer(self.logger)

    def emit(
        self,
        table: TableDescriptor,
        columns: dict[str, ColumnDescriptor],
        indexes: list[IndexDescriptor],
    ) -> TableDefinition:
        definition = TableDefinition(table_name=table.name)

        ordered = sorted(columns.values(), key=lambda c: c.ordinal_position)
        for column in ordered:
            definition.columns.append(self._column_clause(table, column, definition))

        for index in indexes:
            clause = self._table_clause(index)
            if clause is not None:
                definition.table_clauses.append(clause)

        return definition

    def _column_clause(
        self,
        table: TableDescriptor,
        column: ColumnDescriptor,
        definition: TableDefinition,
    ) -> ColumnClause:
        resolution = self.type_mapper.resolve(column)

        if resolution.semantic_type == "specific_type":
            type_name = resolution.extra_args[0]
            if type_name == "citext":
                if CITEXT_EXTENSION not in definition.preamble:
                    definition.preamble.append(CITEXT_EXTENSION)
            else:
                self.logger.warning(
                    f'The type "{type_name}" may not exist for column "{column.name}" '
                    f'in table "{table.name}"'
                )
        elif resolution.semantic_type == "decimal" and column.numeric_scale:
            self.logger.warning(
                f"Scale {column.numeric_scale} of numeric column {column.name!r} in table "
                f"{table.name!r} is not carried over, only the precision is kept"
            )

        index = column.attached_index if column.attached_index and column.attached_index.is_single else None
        modifiers: list[Modifier] = []

        if index is not None and index.is_primary:
            modifiers.append(Modifier("primary"))
        else:
            modifiers.append(Modifier("nullable" if column.nullable else "not_nullable"))

        default = self.default_normalizer.normalize(column, resolution)
        if default is not None:
            modifiers.append(default)

        if index is not None and not index.is_primary:
            modifiers.append(Modifier("unique" if index.is_unique else "index"))

        return ColumnClause(
            name=column.name,
            method=resolution.semantic_type,
            args=resolution.extra_args,
            modifiers=tuple(modifiers),
        )

    def _table_clause(self, index: IndexDescriptor) -> Optional[TableClause]:
        if not index.is_multiple or index.is_functional or index.is_partial:
            self.logger.warning(f"Unknown index type for {index.name} on {index.table_name}, skipping")
            return None

        columns = tuple(index.column_names)
        if index.is_primary:
            return TableClause("primary", columns)
        if index.is_unique:
            return TableClause("unique", columns)
        return TableClause("index", columns)
