"""Query plan nodes that implement filtering of rows.

A common request in queries is to filter the data to
pick only the rows that respect a specific filter.
An example is the ``WHERE`` condition in SQL queries
or the ``filter`` verb of dataframe libraries.

This module implements the basic filtering capabilities.
"""

import logging

from .base import Expression, QueryPlanNode
from .predicates import evaluate

logger = logging.getLogger(__name__)


class FilterNode(QueryPlanNode):
    """Filter data based on a predicate expression.

    The filter expects an expression that when applied
    to the batch of data being filtered returns ``true``
    or ``false`` for each row in the data to mark which
    rows have to be preserved and which rows have to be discarded.

    Rows for which the predicate is null are discarded,
    and the preserved rows keep their relative order.

    >>> import pyarrow as pa
    >>> from wrangleground.compute import PyArrowTableDataSource, Comparison
    >>> data = pa.record_batch({"fronds": [1, 12, None, 30]})
    >>> predicate = Comparison("fronds", ">", 10)
    >>> next(FilterNode(predicate, PyArrowTableDataSource(data)).batches()).to_pylist()
    [{'fronds': 12}, {'fronds': 30}]
    """

    def __init__(self, expression: Expression, child: QueryPlanNode) -> None:
        """
        :param expression: The predicate expression to filter with.
        :param child: The node emitting the data to be filtered.
        """
        self.expression = expression
        self.child = child

    def __str__(self) -> str:
        return f"FilterNode(filter={self.expression}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the filtering to the child node.

        For each recordbatch yielded by the child node,
        apply the expression and get back a mask
        (an array of only true/false values).

        Based on the mask filter the rows of the batch
        and return only those matching the filter.
        """
        for batch in self.child.batches():
            mask = evaluate(self.expression, batch)
            filtered = batch.filter(mask)
            logger.debug(
                "Filter %s kept %d of %d rows",
                self.expression,
                filtered.num_rows,
                batch.num_rows,
            )
            yield filtered
