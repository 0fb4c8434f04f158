"""The Dataset object itself."""

from typing import Any, Iterable, Self

import pyarrow as pa

from ..compute import FilterNode, JoinNode, ProjectNode, PyArrowTableDataSource
from ..compute.base import Expression, QueryPlanNode
from ..compute.schema import SchemaError, nominal_type


class Dataset:
    """Data structure that handles data in rows and columns.

    The Dataset object allows to represent in-memory data
    and perform transformations over it.

    Datasets are immutable, every transformation runs
    immediately on the compute engine and returns a new
    Dataset, leaving the original one untouched.
    """

    def __init__(self, table: pa.Table | pa.RecordBatch) -> None:
        """
        :param table: A `pyarrow.Table` or `pyarrow.RecordBatch` with the data.
        """
        if isinstance(table, pa.RecordBatch):
            table = pa.Table.from_batches([table])

        if not isinstance(table, pa.Table):
            raise ValueError("Invalid input, expected a PyArrow Table or RecordBatch")

        self.table = table

    @classmethod
    def from_pydict(cls, data: dict[str, list[Any]]) -> Self:
        """Create a Dataset from a dictionary of columns.

        The type of each column is inferred from its values.

        :param data: The dict ``{column_name: [values]}``.
        """
        return cls(pa.table(data))

    @classmethod
    def from_rows(cls, rows: Iterable[dict[str, Any]]) -> Self:
        """Create a Dataset from a list of rows.

        All the rows must have the same columns,
        the order of the columns is the one of the first row.

        :param rows: The rows as dictionaries ``{column_name: value}``.
        """
        rows = list(rows)
        columns = list(rows[0]) if rows else []
        for position, row in enumerate(rows):
            if set(row) != set(columns):
                raise SchemaError(
                    f"Row {position} has columns {sorted(row)}, expected {sorted(columns)}"
                )
        return cls(pa.Table.from_pylist(rows))

    def __repr__(self) -> str:
        return f"Dataset(columns={self.columns}, rows={self.num_rows})"

    def __len__(self) -> int:
        return self.table.num_rows

    @property
    def num_rows(self) -> int:
        return self.table.num_rows

    @property
    def columns(self) -> list[str]:
        """The names of the columns, in order."""
        return self.table.column_names

    @property
    def column_types(self) -> dict[str, str]:
        """The nominal type of each column, like ``numeric`` or ``text``."""
        return {field.name: nominal_type(field.type) for field in self.table.schema}

    def column(self, name: str) -> list[Any]:
        """The values of a column, in row order."""
        if name not in self.table.column_names:
            raise SchemaError(f"Column {name!r} not found, available columns: {self.columns}")
        return self.table.column(name).to_pylist()

    def rows(self) -> list[dict[str, Any]]:
        """All the rows, as dictionaries ``{column_name: value}``."""
        return self.table.to_pylist()

    def to_arrow(self) -> pa.Table:
        """The data as a pyarrow.Table"""
        return self.table

    def filter(self, expression: Expression) -> Self:
        """Apply a filter to the data and return a new Dataset.

        The returned dataset will only contain the rows that
        match the filter predicate, in their original order.

        :param expression: The expression representing the predicate.
                           for example ``le("total_count", 10)``.
        """
        return self._execute(FilterNode(expression, self._source()))

    def select(self, *columns: str) -> Self:
        """Keep only the given columns, in the given order."""
        return self._execute(ProjectNode(list(columns), None, self._source()))

    def with_column(self, name: str, expression: Expression) -> Self:
        """Add a new column computed from the existing ones.

        :param name: The name of the new column, it must not exist yet.
        :param expression: How to compute the column,
                           for example ``ArithmeticExpression("/", col("count"), col("fronds"))``
        """
        return self._execute(ProjectNode(None, {name: expression}, self._source()))

    def join(self, other: "Dataset", keys: list[str] | str, how: str = "inner") -> Self:
        """Join this dataset (left) with another one (right).

        :param other: The dataset to join with.
        :param keys: The columns to match rows on, they must exist in both datasets.
        :param how: ``inner``, ``left``, ``full``, ``semi`` or ``anti``.
                    See :class:`wrangleground.compute.JoinNode`.
        """
        return self._execute(JoinNode(keys, self._source(), other._source(), how=how))

    def inner_join(self, other: "Dataset", keys: list[str] | str) -> Self:
        """Only the rows that have a match in both datasets."""
        return self.join(other, keys, how="inner")

    def left_join(self, other: "Dataset", keys: list[str] | str) -> Self:
        """All the rows of this dataset, with the matching rows of the other."""
        return self.join(other, keys, how="left")

    def full_join(self, other: "Dataset", keys: list[str] | str) -> Self:
        """All the rows of both datasets, paired when they match."""
        return self.join(other, keys, how="full")

    def semi_join(self, other: "Dataset", keys: list[str] | str) -> Self:
        """The rows of this dataset that have a match in the other."""
        return self.join(other, keys, how="semi")

    def anti_join(self, other: "Dataset", keys: list[str] | str) -> Self:
        """The rows of this dataset that have no match in the other."""
        return self.join(other, keys, how="anti")

    def _source(self) -> QueryPlanNode:
        return PyArrowTableDataSource(self.table)

    def _execute(self, node: QueryPlanNode) -> Self:
        return self.__class__(pa.Table.from_batches(list(node.batches())))
