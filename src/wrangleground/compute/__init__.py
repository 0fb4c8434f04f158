"""The WrangleGround Compute Engine

The compute engine defines the in-memory
format for query plans and the plan nodes
supported.

The compute engine is tightly bound to Apache Arrow,
thus the engine will expect to always deal with
:class:`pyarrow.RecordBatch` and emit a new RecordBatch
as the result of the node execution.

This allows to easily build compute pipelines like::

    (RecordBatch)-->Node1--(RecordBatch)-->Node2--(RecordBatch)-->...

The query plan nodes themselves are in charge of their execution,
this keeps the behavior near to the node and thus makes easy to
know how a Node is actually executed without having to look around too much.

Building a query plan requires to combine the nodes that we want
to be executed starting with one or more ``DataSource`` nodes as the
leaf nodes of a query:

>>> import pyarrow as pa
>>> fish = pa.table({
...    "site": pa.array(["abur", "abur", "mohk", "carp"]),
...    "common_name": pa.array(["garibaldi", "senorita", "rock wrasse", "garibaldi"]),
...    "total_count": pa.array([4, 16, 8, 12])
... })
>>>
>>> from wrangleground.compute import FilterNode, PyArrowTableDataSource, IsIn, AllOf, le
>>> query = FilterNode(
...     AllOf(IsIn("common_name", ["garibaldi", "rock wrasse"]), le("total_count", 10)),
...     child=PyArrowTableDataSource(fish)
... )
>>> for data in query.batches():
...     print(data.to_pylist())
[{'site': 'abur', 'common_name': 'garibaldi', 'total_count': 4}, {'site': 'mohk', 'common_name': 'rock wrasse', 'total_count': 8}]
"""

from .base import ColumnRef, Literal, col, lit
from .datasources import PyArrowTableDataSource
from .expressions import ArithmeticExpression, FunctionCallExpression
from .filtering import FilterNode
from .join import JoinNode
from .predicates import (
    AllOf,
    AnyOf,
    Comparison,
    Contains,
    IsIn,
    all_of,
    any_of,
    contains,
    eq,
    ge,
    gt,
    is_in,
    le,
    lt,
    ne,
    not_contains,
)
from .schema import EmptyKeyError, SchemaError
from .selection import ProjectNode

__all__ = (
    "PyArrowTableDataSource",
    "FilterNode",
    "JoinNode",
    "ProjectNode",
    "FunctionCallExpression",
    "ArithmeticExpression",
    "Comparison",
    "IsIn",
    "Contains",
    "AllOf",
    "AnyOf",
    "eq",
    "ne",
    "lt",
    "le",
    "gt",
    "ge",
    "is_in",
    "contains",
    "not_contains",
    "all_of",
    "any_of",
    "col",
    "lit",
    "ColumnRef",
    "Literal",
    "SchemaError",
    "EmptyKeyError",
)
