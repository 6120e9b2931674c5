"""Tests for index classification."""

import logging

from pgforge.base.models import MULTIPLE, SINGLE, UNRESOLVED, ColumnDescriptor, IndexDescriptor
from pgforge.generators.indexes import IndexClassifier


def columns(*names):
    return {
        name: ColumnDescriptor(name=name, raw_type="integer", table_name="t", ordinal_position=i)
        for i, name in enumerate(names, start=1)
    }


def index(name, *cols, **kwargs):
    return IndexDescriptor(name=name, table_name="t", indexed_columns=tuple(cols), **kwargs)


class TestIndexClassifier:
    """Tests for IndexClassifier."""

    def test_single_column_index_is_attached(self):
        """A one-column index attaches to its column and leaves the table list."""
        result = IndexClassifier().classify(columns("a", "b"), [index("t_a_index", "a")])
        attached = result.columns["a"].attached_index
        assert attached is not None
        assert attached.classification == SINGLE
        assert result.columns["b"].attached_index is None
        assert result.table_indexes == []

    def test_multi_column_index_stays_on_table(self):
        """A two-column index is kept for the table and marks no column."""
        result = IndexClassifier().classify(columns("a", "b"), [index("t_a_b_index", "a", "b")])
        assert [i.name for i in result.table_indexes] == ["t_a_b_index"]
        assert result.table_indexes[0].classification == MULTIPLE
        assert all(c.attached_index is None for c in result.columns.values())

    def test_quoted_column_name(self):
        """Catalog quoting of mixed-case names is stripped before lookup."""
        result = IndexClassifier().classify(columns("createdAt"), [index("t_created", '"createdAt"')])
        assert result.columns["createdAt"].attached_index.name == "t_created"

    def test_unknown_column_is_unresolved(self, caplog):
        """An expression index does not match a column and is skipped with a warning."""
        with caplog.at_level(logging.WARNING):
            result = IndexClassifier().classify(columns("email"), [index("t_lower", "lower(email)")])
        assert result.table_indexes == []
        assert [i.classification for i in result.unresolved] == [UNRESOLVED]
        assert result.columns["email"].attached_index is None
        assert "lower(email)" in caplog.text

    def test_partial_single_column_index_is_unresolved(self, caplog):
        """A one-column index with a WHERE predicate is not attached to its column."""
        with caplog.at_level(logging.WARNING):
            result = IndexClassifier().classify(
                columns("email"),
                [index("t_email_active", "email", is_unique=True, is_partial=True)],
            )
        assert result.columns["email"].attached_index is None
        assert [i.name for i in result.unresolved] == ["t_email_active"]
        assert result.unresolved[0].classification == UNRESOLVED
        assert "t_email_active" in caplog.text
        assert "t.email" in caplog.text
        assert "predicate" in caplog.text

    def test_partial_index_keeps_earlier_attachment(self):
        """A skipped partial index does not replace a plain index on the same column."""
        result = IndexClassifier().classify(
            columns("a"),
            [index("t_a_index", "a"), index("t_a_partial", "a", is_partial=True)],
        )
        assert result.columns["a"].attached_index.name == "t_a_index"

    def test_later_single_index_replaces_earlier(self):
        """A column holds one attachment; the last index wins."""
        result = IndexClassifier().classify(
            columns("a"),
            [index("t_a_index", "a"), index("t_a_unique", "a", is_unique=True)],
        )
        assert result.columns["a"].attached_index.name == "t_a_unique"

    def test_inputs_are_not_mutated(self):
        cols = columns("a")
        IndexClassifier().classify(cols, [index("t_a_index", "a")])
        assert cols["a"].attached_index is None

    def test_no_indexes(self):
        result = IndexClassifier().classify(columns("a"), [])
        assert result.table_indexes == []
        assert result.unresolved == []
