"""Parse catalog default expressions into migration default values.

PostgreSQL reports defaults as SQL text (``'active'::character varying``,
``0``, ``true``, ``nextval('users_id_seq'::regclass)``, ``now()``). Only a
closed set of those shapes can be carried into a migration as a literal;
everything else is dropped, with a warning when the column type says the
value should have been readable.
"""

import json
import logging
import math
import re
from typing import Any, Optional, Union

from ..base.models import ColumnDescriptor, Modifier, TypeResolution

_QUOTED_LITERAL = re.compile(r"^'(.*)'(::[\w\s]+)?$", re.DOTALL)

Number = Union[int, float]


def unquote_literal(body: str) -> str:
    """Undo one level of quote escaping inside a SQL string literal.

    Doubled quotes (the form PostgreSQL itself reports) take precedence; a
    backslash-escaped quote is only unescaped when the body has no ``''``.
    """
    if "''" in body:
        return body.replace("''", "'")
    return body.replace("\\'", "'")


def parse_number(text: str) -> Optional[Number]:
    """Parse an integer or decimal number, None when the text is not one."""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


class DefaultNormalizer:
    """Turns ``column_default`` text into a ``default_to`` modifier."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def normalize(self, column: ColumnDescriptor, resolution: TypeResolution) -> Optional[Modifier]:
        """Return the default modifier for a column, or None to emit no default."""
        raw = column.default_raw
        if raw is None:
            return None

        semantic_type = resolution.semantic_type
        if semantic_type == "increments":
            return None

        quoted = _QUOTED_LITERAL.match(raw)
        if quoted:
            return Modifier("default_to", (unquote_literal(quoted.group(1)),))

        value: Any
        if semantic_type in ("decimal", "integer"):
            value = parse_number(raw.replace("'", "", 1))
            if value is None:
                self._warn_invalid(column, semantic_type)
                return None
        elif semantic_type == "boolean":
            try:
                value = json.loads(raw.replace("'", "", 1))
            except ValueError:
                value = None
            if not isinstance(value, bool):
                self._warn_invalid(column, semantic_type)
                return None
        else:
            return None

        return Modifier("default_to", (value,))

    def _warn_invalid(self, column: ColumnDescriptor, semantic_type: str) -> None:
        self.logger.warning(
            f"Default value {column.default_raw!r} is invalid for type {semantic_type}. "
            f"Table {column.table_name}, Column {column.name}"
        )
