"""Split a table's indexes into column-level and table-level indexes."""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..base.models import (
    MULTIPLE,
    SINGLE,
    UNRESOLVED,
    ColumnDescriptor,
    IndexDescriptor,
)


@dataclass
class ClassifiedIndexes:
    """Columns with their single-column index attached, plus table-level indexes."""

    columns: dict[str, ColumnDescriptor]
    table_indexes: list[IndexDescriptor]
    unresolved: list[IndexDescriptor]


class IndexClassifier:
    """Classifies indexes as single, multiple or unresolved.

    A single-column index is attached to its column. A column holds one
    attachment, so a second single-column index on the same column replaces
    the first. Partial single-column indexes are left unresolved.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify(
        self,
        columns: dict[str, ColumnDescriptor],
        indexes: list[IndexDescriptor],
    ) -> ClassifiedIndexes:
        attached = dict(columns)
        table_indexes: list[IndexDescriptor] = []
        unresolved: list[IndexDescriptor] = []

        for index in indexes:
            if len(index.indexed_columns) == 1:
                column_name = index.column_names[0]
                column = attached.get(column_name)
                if column is None:
                    self.logger.warning(
                        f"Index {index.name} on {index.table_name} references unknown column "
                        f"{column_name!r} (columns: {', '.join(attached)}), skipping"
                    )
                    unresolved.append(replace(index, classification=UNRESOLVED))
                    continue
                if index.is_partial:
                    self.logger.warning(
                        f"Partial index {index.name} on {index.table_name}.{column_name} "
                        f"cannot be expressed without its predicate, skipping"
                    )
                    unresolved.append(replace(index, classification=UNRESOLVED))
                    continue
                if column.attached_index is not None:
                    self.logger.debug(
                        f"Index {index.name} replaces {column.attached_index.name} "
                        f"on {index.table_name}.{column_name}"
                    )
                index = replace(index, classification=SINGLE)
                attached[column_name] = replace(column, attached_index=index)
            else:
                table_indexes.append(replace(index, classification=MULTIPLE))

        return ClassifiedIndexes(columns=attached, table_indexes=table_indexes, unresolved=unresolved)
