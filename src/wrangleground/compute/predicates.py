"""Predicates used to select rows.

A predicate is an :class:`Expression` that returns a boolean
value for each row of a batch, those are used by
:class:`wrangleground.compute.FilterNode` to decide which
rows have to be preserved.

The supported predicates are:

* :class:`Comparison`: compare a column with a literal (``==, !=, <, <=, >, >=``)
* :class:`IsIn`: check if the value of a column is one of a set of literals
* :class:`Contains`: check if a text column contains a substring (or not)
* :class:`AllOf`: combine predicates requiring all of them to hold.
* :class:`AnyOf`: combine predicates requiring at least one of them to hold.

All predicates follow the missing values semantics:
comparing a null with anything never holds, so the
predicates always return ``false`` for those rows instead of null.

For example, to find the fish species that we care about
in places where only few of them were counted:

>>> import pyarrow as pa
>>> fish = pa.record_batch({
...     "common_name": ["garibaldi", "blacksmith", "rock wrasse", "garibaldi"],
...     "total_count": [4, 3, 12, None],
... })
>>> predicate = AllOf(
...     IsIn("common_name", ["garibaldi", "rock wrasse"]),
...     Comparison("total_count", "<=", 10),
... )
>>> predicate.apply(fish).to_pylist()
[True, False, False, False]
"""

from typing import Any, Iterable

import pyarrow as pa
import pyarrow.compute as pc

from .base import ColumnRef, Expression, broadcast
from .schema import NULL, TEXT, SchemaError, check_comparable, common_type, nominal_type


def as_expression(column: str | Expression) -> Expression:
    """Columns can be referenced by name or by any expression."""
    if isinstance(column, Expression):
        return column
    return ColumnRef(column)


def describe(expression: Expression) -> str:
    """Name of the column being checked, used in error messages."""
    if isinstance(expression, ColumnRef):
        return expression.name
    return str(expression)


def never(num_rows: int) -> pa.Array:
    """A mask that rejects all rows."""
    return pa.repeat(pa.scalar(False), num_rows)


def evaluate(predicate: Expression, batch: pa.RecordBatch) -> pa.Array:
    """Apply a predicate getting back a mask without nulls."""
    mask = broadcast(predicate.apply(batch), batch.num_rows)
    return pc.fill_null(mask, False)


class Comparison(Expression):
    """Compare the values of a column with a literal value.

    Text is compared exactly, thus the comparison is case sensitive.
    Comparing against a ``None`` value never holds.

    >>> import pyarrow as pa
    >>> batch = pa.record_batch({"site": ["abur", "ABUR", None]})
    >>> Comparison("site", "==", "abur").apply(batch).to_pylist()
    [True, False, False]
    >>> Comparison("site", "!=", "abur").apply(batch).to_pylist()
    [False, True, False]
    """

    OPERATORS = {
        "==": pc.equal,
        "!=": pc.not_equal,
        "<": pc.less,
        "<=": pc.less_equal,
        ">": pc.greater,
        ">=": pc.greater_equal,
    }

    def __init__(self, column: str | Expression, op: str, value: Any) -> None:
        """
        :param column: The column name (or expression) to compare.
        :param op: The comparison operator, one of ``==, !=, <, <=, >, >=``.
        :param value: The literal value to compare against.
        """
        if op not in self.OPERATORS:
            raise ValueError(
                f"Unsupported comparison operator: {op}, expected one of {list(self.OPERATORS)}"
            )
        self.column = as_expression(column)
        self.op = op
        self.value = value

    def __str__(self) -> str:
        return f"Comparison({self.column} {self.op} {self.value!r})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = broadcast(self.column.apply(batch), batch.num_rows)
        if self.value is None or nominal_type(values.type) == NULL:
            return never(batch.num_rows)

        check_comparable(describe(self.column), values.type, self.value)
        return pc.fill_null(self.OPERATORS[self.op](values, self.value), False)


class IsIn(Expression):
    """Check that the values of a column are one of the provided values.

    >>> import pyarrow as pa
    >>> batch = pa.record_batch({"year": [2016, 2017, 2018, None]})
    >>> IsIn("year", [2016, 2018]).apply(batch).to_pylist()
    [True, False, True, False]
    """

    def __init__(self, column: str | Expression, values: Iterable[Any]) -> None:
        """
        :param column: The column name (or expression) to check.
        :param values: The accepted values.
        """
        self.column = as_expression(column)
        self.values = list(values)

    def __str__(self) -> str:
        return f"IsIn({self.column}, {self.values!r})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = broadcast(self.column.apply(batch), batch.num_rows)
        if nominal_type(values.type) == NULL:
            return never(batch.num_rows)

        name = describe(self.column)
        for value in self.values:
            check_comparable(name, values.type, value)

        # Nulls are never part of the set, as they never match.
        value_set = pa.array([value for value in self.values if value is not None])
        target_type = common_type(values.type, value_set.type)
        mask = pc.is_in(
            values.cast(target_type),
            value_set=value_set.cast(target_type),
            skip_nulls=True,
        )
        return pc.fill_null(mask, False)


class Contains(Expression):
    """Check that a text column contains a substring.

    The check is case sensitive, when ``negate=True`` the
    predicate holds for the values that do *not* contain
    the pattern instead. In both cases missing values
    never hold.

    >>> import pyarrow as pa
    >>> batch = pa.record_batch({"common_name": ["rock wrasse", "senorita", None]})
    >>> Contains("common_name", "wrasse").apply(batch).to_pylist()
    [True, False, False]
    >>> Contains("common_name", "wrasse", negate=True).apply(batch).to_pylist()
    [False, True, False]
    """

    def __init__(
        self, column: str | Expression, pattern: str, negate: bool = False
    ) -> None:
        """
        :param column: The column name (or expression) to check.
        :param pattern: The substring to look for.
        :param negate: Keep the rows that don't contain the pattern.
        """
        self.column = as_expression(column)
        self.pattern = pattern
        self.negate = negate

    def __str__(self) -> str:
        kind = "NotContains" if self.negate else "Contains"
        return f"{kind}({self.column}, {self.pattern!r})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        values = broadcast(self.column.apply(batch), batch.num_rows)
        column_type = nominal_type(values.type)
        if column_type == NULL:
            return never(batch.num_rows)
        elif column_type != TEXT:
            raise SchemaError(
                f"Substring matching requires a text column, {describe(self.column)!r} is {column_type}"
            )

        mask = pc.match_substring(values, self.pattern)
        if self.negate:
            mask = pc.invert(mask)
        return pc.fill_null(mask, False)


class AllOf(Expression):
    """Hold only when all the predicates hold.

    Every predicate is evaluated for all the rows,
    there is no short-circuit between them.
    """

    def __init__(self, *predicates: Expression) -> None:
        """
        :param predicates: The predicates that must all hold.
        """
        self.predicates = predicates

    def __str__(self) -> str:
        return f"AllOf({', '.join(map(str, self.predicates))})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        mask = pa.repeat(pa.scalar(True), batch.num_rows)
        for predicate in self.predicates:
            mask = pc.and_(mask, evaluate(predicate, batch))
        return mask


class AnyOf(Expression):
    """Hold when at least one of the predicates holds.

    >>> import pyarrow as pa
    >>> batch = pa.record_batch({"site": ["abur", "mohk", "carp"]})
    >>> AnyOf(Comparison("site", "==", "abur"), Contains("site", "oh")).apply(batch).to_pylist()
    [True, True, False]
    """

    def __init__(self, *predicates: Expression) -> None:
        """
        :param predicates: The alternative predicates.
        """
        self.predicates = predicates

    def __str__(self) -> str:
        return f"AnyOf({', '.join(map(str, self.predicates))})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        mask = never(batch.num_rows)
        for predicate in self.predicates:
            mask = pc.or_(mask, evaluate(predicate, batch))
        return mask


def eq(column: str | Expression, value: Any) -> Comparison:
    return Comparison(column, "==", value)


def ne(column: str | Expression, value: Any) -> Comparison:
    return Comparison(column, "!=", value)


def lt(column: str | Expression, value: Any) -> Comparison:
    return Comparison(column, "<", value)


def le(column: str | Expression, value: Any) -> Comparison:
    return Comparison(column, "<=", value)


def gt(column: str | Expression, value: Any) -> Comparison:
    return Comparison(column, ">", value)


def ge(column: str | Expression, value: Any) -> Comparison:
    return Comparison(column, ">=", value)


def not_contains(column: str | Expression, pattern: str) -> Contains:
    return Contains(column, pattern, negate=True)


is_in = IsIn
contains = Contains
all_of = AllOf
any_of = AnyOf
