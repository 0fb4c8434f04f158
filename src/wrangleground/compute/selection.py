"""Query plan nodes that implement projection of columns.

A common request in queries is to select specific columns
and project new columns based on expressions.
An example is the ``SELECT`` clause in SQL queries
or the ``select`` and ``mutate`` verbs of dataframe libraries.

This module implements the basic projection capabilities.
"""

import logging

import pyarrow as pa

from .base import QueryPlanNode, broadcast
from .expressions import Expression
from .schema import SchemaError, require_columns

logger = logging.getLogger(__name__)


class ProjectNode(QueryPlanNode):
    """Project data by selecting specific columns and computing expressions.

    The projection expects a list of column names to select and a dictionary
    of column names and expressions to project new columns.

    >>> import pyarrow as pa
    >>> from wrangleground.compute import col, ArithmeticExpression, PyArrowTableDataSource
    >>> data = pa.record_batch({"site": ["abur", "mohk"], "count": [5, 7], "fronds": [10, 0]})
    >>> node = ProjectNode(["site"], {"density": ArithmeticExpression("/", col("count"), col("fronds"))},
    ...                    PyArrowTableDataSource(data))
    >>> next(node.batches()).to_pylist()
    [{'site': 'abur', 'density': 0.5}, {'site': 'mohk', 'density': None}]
    """

    def __init__(
        self,
        select: list[str] | None,
        project: dict[str, Expression] | None,
        child: QueryPlanNode,
    ) -> None:
        """
        :param select: The list of column names to select.
                       ``None`` means select all columns.
                       ``[]`` means select only the projected columns.
        :param project: The dict {name: Expression} to project new columns.
        :param child: The node emitting the data to be projected.
        """
        self.select = select
        self.project = project or {}
        self.child = child

        if self.select is None:
            # No selection was provided, we will select all columns
            self.restrict_columns = None
        else:
            # This is the list of columns we want to keep,
            # in case select=[] it will only provide the project columns.
            self.restrict_columns = self.select + list(self.project.keys())

    def __str__(self) -> str:
        return f"ProjectNode(select={self.select}, project={self.project}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the projection to the child node.

        For each recordbatch yielded by the child node,
        sequentially apply the expressions to project new columns
        and then select the requested columns.

        Projecting in sequence allows an expression to
        refer to columns projected by the previous ones.
        """
        for batch in self.child.batches():
            if self.select:
                require_columns(batch.schema, self.select)

            for name, expr in self.project.items():
                if name in batch.schema.names:
                    raise SchemaError(f"Column {name!r} already exists")
                values = broadcast(expr.apply(batch), batch.num_rows)
                logger.debug("Projected column %s = %s", name, expr)
                batch = batch.append_column(name, values)

            if self.restrict_columns is not None:
                batch = batch.select(self.restrict_columns)

            yield batch
