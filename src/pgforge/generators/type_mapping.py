"""Translate catalog column types into migration column types."""

import re
from typing import Optional

from ..base.models import ColumnDescriptor, TypeResolution
from ..exceptions import TypeExtractionError, UnsupportedTypeError

# information_schema.columns.data_type -> schema builder method
TYPE_MAP = {
    "integer": "integer",
    "character varying": "string",
    "jsonb": "jsonb",
    "timestamp with time zone": "timestamp",
    "text": "text",
    "boolean": "boolean",
    "real": "float",
    "numeric": "decimal",
    "USER-DEFINED": "specific_type",
}

SEQUENCE_DEFAULT_PREFIX = "nextval"

_CAST_SUFFIX = re.compile(r"::([\s\w]+)$")


def extract_cast_type(default_raw: Optional[str]) -> Optional[str]:
    """Return the type name of a trailing ``::typename`` cast, if any."""
    if not default_raw:
        return None
    match = _CAST_SUFFIX.search(default_raw)
    return match.group(1) if match else None


class TypeMapper:
    """Resolves the builder method and its extra arguments for a column."""

    def __init__(self, type_map: Optional[dict[str, str]] = None):
        self.type_map = type_map or TYPE_MAP

    def resolve(self, column: ColumnDescriptor) -> TypeResolution:
        semantic_type = self.type_map.get(column.raw_type)
        if semantic_type is None:
            raise UnsupportedTypeError(column.table_name, column.name, column.raw_type)

        if semantic_type == "integer":
            if column.default_raw and column.default_raw.startswith(SEQUENCE_DEFAULT_PREFIX):
                return TypeResolution("increments")
        elif semantic_type == "string":
            if column.character_max_length:
                return TypeResolution(semantic_type, (column.character_max_length,))
        elif semantic_type == "decimal":
            if column.numeric_precision:
                return TypeResolution(semantic_type, (column.numeric_precision,))
        elif semantic_type == "specific_type":
            type_name = extract_cast_type(column.default_raw)
            if type_name is None:
                raise TypeExtractionError(
                    f"Cannot determine the type of column {column.name!r} in table "
                    f"{column.table_name!r}: default {column.default_raw!r} has no ::type cast"
                )
            return TypeResolution(semantic_type, (type_name.strip(),))

        return TypeResolution(semantic_type)
