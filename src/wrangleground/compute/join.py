"""Query plan nodes that implement join operations.

The join operations are implemented as hash joins: the rows of the
right table are indexed by the value of their keys, and then the
rows of the left table are probed against that index to find
which rows of the right table they match.

Supported Joins
===============

:class:`JoinNode` supports multiple kinds of joins through its ``how`` argument:

* ``inner``: only rows that have a match in both tables.
* ``left``: all rows of the left table, with nulls for the right columns
  of the rows that have no match.
* ``full``: all rows of both tables, with nulls for the columns of the
  side that had no match.
* ``semi``: rows of the left table that have a match, without adding any column.
* ``anti``: rows of the left table that have no match, without adding any column.

>>> import pyarrow as pa
>>> from wrangleground.compute import JoinNode, PyArrowTableDataSource
>>> kelp = PyArrowTableDataSource(pa.record_batch({"year": [2016], "site": ["abur"], "fronds": [10]}))
>>> fish = PyArrowTableDataSource(pa.record_batch({"year": [2016, 2017], "site": ["abur", "abur"], "count": [5, 7]}))
>>> next(JoinNode(["year", "site"], kelp, fish, how="left").batches()).to_pylist()
[{'year': 2016, 'site': 'abur', 'fronds': 10, 'count': 5}]
>>> next(JoinNode(["year", "site"], kelp, fish, how="full").batches()).to_pylist()
[{'year': 2016, 'site': 'abur', 'fronds': 10, 'count': 5}, {'year': 2017, 'site': 'abur', 'fronds': None, 'count': 7}]
"""

import logging
from typing import Iterator

import pyarrow as pa
import pyarrow.compute as pc

from .base import QueryPlanNode
from .datasources import collect_batch
from .schema import (
    EmptyKeyError,
    SchemaError,
    common_type,
    nominal_type,
    require_columns,
)

logger = logging.getLogger(__name__)

JOIN_TYPES = ("inner", "left", "full", "semi", "anti")


class JoinNode(QueryPlanNode):
    """Join two data sources on one or more key columns.

    Rows match when all their key columns are equal,
    rows where any of the keys is null never match.

    When multiple rows share the same key on both sides,
    every left row is paired with every right row,
    so the resulting rows are the cross product of the matches.

    Supposing we have two tables::

        left:
        +------+------+--------+
        | year | site | fronds |
        +------+------+--------+
        | 2016 | abur | 10     |
        | 2016 | mohk | 4      |
        +------+------+--------+

        right:
        +------+------+-------+
        | year | site | count |
        +------+------+-------+
        | 2016 | abur | 5     |
        | 2017 | abur | 7     |
        | 2016 | abur | 2     |
        +------+------+-------+

    We would perform the following steps:

    1. Index the rows of the right table by their keys,
       preserving the order in which they appear::

        (2016, abur) -> [0, 2]
        (2017, abur) -> [1]

    2. Probe each left row, in order, against the index
       to build the pairs of row indices that will form the result.
       A left row without matches is paired with ``None``
       when the join has to preserve it (``left`` and ``full`` joins)::

        left: [0, 0, 1]
        right: [0, 2, None]

    3. For ``full`` joins, append the right rows that never matched,
       paired with ``None`` on the left::

        left: [0, 0, 1, None]
        right: [0, 2, None, 1]

    4. Take the rows from each table according to the indices,
       taking a ``None`` index leads to a null value::

        combined:
        +------+------+--------+-------+
        | year | site | fronds | count |
        +------+------+--------+-------+
        | 2016 | abur | 10     | 5     |
        | 2016 | abur | 10     | 2     |
        | 2016 | mohk | 4      | null  |
        | 2017 | abur | null   | 7     |
        +------+------+--------+-------+

    The key columns are emitted only once, for rows that come only
    from the right table the key values are those of the right table.
    """

    def __init__(
        self,
        keys: list[str],
        left_child: QueryPlanNode,
        right_child: QueryPlanNode,
        how: str = "inner",
    ) -> None:
        """
        :param keys: The columns to join on, they must exist in both tables.
        :param left_child: The left source of data to join.
        :param right_child: The right source of data to join.
        :param how: The type of join, one of ``inner``, ``left``, ``full``, ``semi``, ``anti``.
        """
        if isinstance(keys, str):
            keys = [keys]
        if not keys:
            raise EmptyKeyError("At least one key column is required to join")
        if how not in JOIN_TYPES:
            raise ValueError(f"Unsupported join type: {how}, expected one of {JOIN_TYPES}")

        self.keys = list(keys)
        self.left_child = left_child
        self.right_child = right_child
        self.how = how

    def __str__(self) -> str:
        return f"JoinNode(keys={self.keys}, how={self.how}, left={self.left_child}, right={self.right_child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Perform the join operation.

        Accumulates all rows of both children to
        perform the join operation, so it is not suitable
        for datasets that don't fit in memory.
        """
        left_rb = collect_batch(self.left_child)
        right_rb = collect_batch(self.right_child)
        self.check_schemas(left_rb.schema, right_rb.schema)

        left_indices, right_indices = self.match_rows(left_rb, right_rb)
        logger.debug(
            "%s join of %d left rows with %d right rows on %s produced %d rows",
            self.how,
            left_rb.num_rows,
            right_rb.num_rows,
            self.keys,
            len(left_indices),
        )
        yield self.combine(left_rb, right_rb, left_indices, right_indices)

    def check_schemas(self, left: pa.Schema, right: pa.Schema) -> None:
        """Verify that the two tables can be joined.

        Keys must exist on both sides with compatible types and,
        as the columns keep their names, the other columns must
        not collide between the two sides.
        """
        require_columns(left, self.keys)
        require_columns(right, self.keys)

        for key in self.keys:
            left_type = nominal_type(left.field(key).type)
            right_type = nominal_type(right.field(key).type)
            if "null" not in (left_type, right_type) and left_type != right_type:
                raise SchemaError(
                    f"Key column {key!r} is {left_type} on the left and {right_type} on the right"
                )

        if self.how in ("semi", "anti"):
            # Only left columns are emitted, so they can't collide.
            return

        collisions = [
            name
            for name in right.names
            if name not in self.keys and name in left.names
        ]
        if collisions:
            raise SchemaError(
                f"Columns {collisions} exist on both sides of the join and are not keys"
            )

    def match_rows(
        self, left_rb: pa.RecordBatch, right_rb: pa.RecordBatch
    ) -> tuple[list[int | None], list[int | None]]:
        """Compute which rows of the two tables have to be paired.

        Returns the indices of the left and right rows
        for each row of the result, ``None`` means that
        the row has no counterpart on that side.
        """
        # Index right rows by their key, lists preserve the right order.
        right_index: dict[tuple, list[int]] = {}
        for position, key in enumerate(self.row_keys(right_rb)):
            if None not in key:
                right_index.setdefault(key, []).append(position)

        left_indices: list[int | None] = []
        right_indices: list[int | None] = []
        matched_right: set[int] = set()
        for position, key in enumerate(self.row_keys(left_rb)):
            matches = right_index.get(key, []) if None not in key else []
            if self.how == "semi":
                if matches:
                    left_indices.append(position)
            elif self.how == "anti":
                if not matches:
                    left_indices.append(position)
            elif matches:
                for match in matches:
                    left_indices.append(position)
                    right_indices.append(match)
                matched_right.update(matches)
            elif self.how in ("left", "full"):
                left_indices.append(position)
                right_indices.append(None)

        if self.how == "full":
            for position in range(right_rb.num_rows):
                if position not in matched_right:
                    left_indices.append(None)
                    right_indices.append(position)

        return left_indices, right_indices

    def row_keys(self, batch: pa.RecordBatch) -> Iterator[tuple]:
        """Iterate over the compound key of each row."""
        key_columns = [batch.column(key).to_pylist() for key in self.keys]
        return zip(*key_columns)

    def combine(
        self,
        left_rb: pa.RecordBatch,
        right_rb: pa.RecordBatch,
        left_indices: list[int | None],
        right_indices: list[int | None],
    ) -> pa.RecordBatch:
        """Build the resulting recordbatch out of the matched rows.

        Left columns come first, followed by the right columns
        that are not keys, each side in its original order.
        """
        left_take = pa.array(left_indices, type=pa.int64())
        combined_data = {}
        for name in left_rb.schema.names:
            combined_data[name] = take(left_rb.column(name), left_take)

        if self.how in ("semi", "anti"):
            return pa.record_batch(combined_data)

        right_take = pa.array(right_indices, type=pa.int64())
        if self.how == "full":
            # Rows coming only from the right have null left keys,
            # their keys have to be taken from the right table.
            for key in self.keys:
                left_keys = combined_data[key]
                right_keys = take(right_rb.column(key), right_take)
                key_type = common_type(left_keys.type, right_keys.type)
                combined_data[key] = pc.coalesce(
                    left_keys.cast(key_type), right_keys.cast(key_type)
                )

        for name in right_rb.schema.names:
            if name in self.keys:
                continue
            combined_data[name] = take(right_rb.column(name), right_take)
        return pa.record_batch(combined_data)


def take(values: pa.Array, indices: pa.Array) -> pa.Array:
    """Pick values by index, null indices lead to null values.

    >>> take(pa.array(["a", "b", "c"]), pa.array([2, None, 0])).to_pylist()
    ['c', None, 'a']
    """
    if len(values) == 0:
        # Nothing to pick from, so all indices must be null.
        return pa.nulls(len(indices), type=values.type)
    return values.take(indices)
