"""Base classes and interfaces for Compute Engine

This module defines the base components that are
necessary to represent a query plan and execute it.
"""

import abc
from typing import Any, Iterator

import pyarrow as pa

from .schema import require_columns


class QueryPlanNode(abc.ABC):
    """A node of a query execution plan.

    The Query plan is represented as a tree
    of nodes. Each node is a step in the execution
    and all previous steps are children of the
    last one.

    For example a plan that filters fish counts and
    then joins them with kelp counts might look like::

        PyArrowTableDataSource(fish) -> FilterNode(predicate) -> JoinNode(keys)
                                                                    ^
        PyArrowTableDataSource(kelp) -------------------------------'

    Each Node accepts :class:`pyarrow.RecordBatch`
    data as its input and emits a new
    :class:`pyarrow.RecordBatch` as its output.

    The base `QueryPlanNode` class does nothing
    and purely acts as the interface that all nodes
    must implement. Actual work will be done
    in the subclasses.
    """

    RecordBatchesGenerator = Iterator[pa.RecordBatch]

    @abc.abstractmethod
    def batches(self) -> RecordBatchesGenerator:
        """Emits the batches for the next node.

        Each QueryPlan node is expected to be able to
        generate data that has to be provided to the next
        node in the plan.

        Usually this happens by consuming data from its
        child nodes, transforming it somehow, and yielding
        it back to the next consumer.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the node."""
        ...


class Expression(abc.ABC):
    """Expression to apply to a RecordBatch.

    Expressions are some form of operation that
    has to be applied to the data of a :class:`pyarrow.RecordBatch`
    to create new data.

    Typical examples of expressions are ``count / fronds``,
    which computes a new numeric column, or ``total_count <= 10``
    which computes a boolean column usable as a filter predicate.

    As our engine is Column Major, applying an expression
    always results in a new column, thus in a
    :class:`pyarrow.Array` that contains the data
    for that column (or a :class:`pyarrow.Scalar` for
    constant expressions).
    """

    @abc.abstractmethod
    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Apply the expression to a RecordBatch."""
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the expression."""
        ...

    def __repr__(self) -> str:
        # Expressions are often shown inside containers, like ProjectNode.project
        return str(self)


class ColumnRef(Expression):
    """References a column in a record batch.

    When applied to a record batch returns the data for
    the referenced column. Referencing a column that the
    batch does not have raises :class:`SchemaError`.

    >>> import pyarrow as pa
    >>> batch = pa.record_batch({"site": ["abur", "mohk"]})
    >>> col("site").apply(batch).to_pylist()
    ['abur', 'mohk']
    >>> col("year").apply(batch)
    Traceback (most recent call last):
        ...
    wrangleground.compute.schema.SchemaError: Column 'year' not found, available columns: ['site']
    """

    def __init__(self, name: str) -> None:
        """
        :param name: The name of the column being referenced.
        """
        self.name = name

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Get the data for the column."""
        require_columns(batch.schema, [self.name])
        return batch.column(self.name)

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


class Literal(Expression):
    """A constant value.

    Applying a literal always returns the same
    :class:`pyarrow.Scalar`, nodes that need a full
    column will broadcast it to the size of the batch.
    """

    def __init__(self, value: Any) -> None:
        """
        :param value: The python value or :class:`pyarrow.Scalar`
        """
        if not isinstance(value, pa.Scalar):
            value = pa.scalar(value)
        self.value = value

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        return self.value

    def __str__(self) -> str:
        return f"Literal({self.value!r})"


def broadcast(values: pa.Array | pa.Scalar, num_rows: int) -> pa.Array:
    """Make sure values are a column of ``num_rows`` entries.

    Constant expressions produce a scalar, which
    is repeated for every row of the batch.
    """
    if isinstance(values, pa.Scalar):
        return pa.repeat(values, num_rows)
    return values


col = ColumnRef
lit = Literal
