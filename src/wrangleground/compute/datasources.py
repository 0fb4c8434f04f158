"""Query Plan nodes that provide data

The datasource nodes are the leaves of a query plan,
they are expected to emit the data in the format accepted
by the compute engine for the next nodes in the plan to consume.

Reading files is the job of the loaders that create the data,
the engine only deals with data already in memory.
"""

from abc import abstractmethod

import pyarrow as pa

from .base import QueryPlanNode


class DataSourceNode(QueryPlanNode):
    """Base class for nodes that provide data to a query plan."""

    @abstractmethod
    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the data source without loading its content."""
        ...


class PyArrowTableDataSource(DataSourceNode):
    """Provide data from an in-memory pyarrow.Table or pyarrow.RecordBatch.

    Given a :class:`pyarrow.Table` or `pyarrow.RecordBatch` object,
    allow to use its data in a query plan.

    A source always emits at least one batch, even when
    the table has no rows, so that the nodes consuming it
    always get to know the schema of the data.

    >>> import pyarrow as pa
    >>> empty = pa.table({"site": pa.array([], type=pa.string())})
    >>> [b.num_rows for b in PyArrowTableDataSource(empty).batches()]
    [0]
    """

    def __init__(self, table: pa.Table | pa.RecordBatch) -> None:
        """
        :param table: The table or recordbatch with the data to read.
        """
        self.table = table
        self.is_recordbatch = isinstance(table, pa.RecordBatch)

    def __str__(self) -> str:
        return f"PyArrowTableDataSource(columns={self.table.column_names}, rows={self.table.num_rows})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Emit the data contained in the Table for consumption by other node."""
        if self.is_recordbatch:
            yield self.table
            return

        batches = self.table.to_batches()
        if not batches:
            yield pa.RecordBatch.from_pylist([], schema=self.table.schema)
        else:
            yield from batches

    def poll_schema(self) -> pa.Schema:
        """Poll the schema of the Table."""
        return self.table.schema


def collect_batch(node: QueryPlanNode) -> pa.RecordBatch:
    """Consume all the batches of a node into a single RecordBatch.

    Nodes like joins need all rows in memory at once,
    the batches are concatenated through a table as it's
    a zero-copy operation until the chunks are combined.
    """
    table = pa.Table.from_batches(list(node.batches()))
    return pa.RecordBatch.from_arrays(
        [column.combine_chunks() for column in table.columns],
        schema=table.schema,
    )
