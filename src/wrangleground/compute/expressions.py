"""Expressions executed by compute engine nodes.

The Compute Engine will sometimes need to filter data
or emit new data. This will be performed by nodes that
need to know how the data must be filtered or emitted.

Filters will need a ``predicate``, so an expression that
returns ``true`` or ``false`` for each row that has to be
filtered. Predicates are implemented in :mod:`wrangleground.compute.predicates`.

Projections will need an expression that computes the rows
for the projection, for example ``count / fronds``.

This module implements the generic function call expression
and the arithmetic expressions used to derive new columns.
"""

import logging
import operator
from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from .base import ColumnRef, Expression, Literal
from .schema import NULL, NUMERIC, SchemaError, nominal_type

logger = logging.getLogger(__name__)


def apply_expression_if_needed(batch: pa.RecordBatch, o: Expression | Any) -> Any:
    """Invoke Apply on expressions when needed

    If the provided object is an Expression,
    it will be applied to the target batch.

    Otherwise it will treat it as if it's
    already the result of an expression
    or a literal value.

    This allows us to apply all arguments
    we receive without having to care if
    they are the data we need or if they
    are the expression resulting in that data.
    """
    if isinstance(o, Expression):
        o = o.apply(batch)
    return o


def get_qualname(func: Callable) -> str:
    """Name of a compute function, including its module.

    >>> get_qualname(pc.add)
    'pyarrow.compute.add'
    """
    return f"{func.__module__}.{func.__qualname__}"


class FunctionCallExpression(Expression):
    """Call a compute function on its arguments.

    Given a compute function, and a set of arguments
    (other expressions, literals or data), execute
    the function on the provided arguments and return
    the resulting data.

    For example to find the sites with a name
    starting with "a" this would be used as::

        FunctionCallExpression(pyarrow.compute.starts_with, ColumnRef("site"), "a")
    """

    def __init__(self, func: Callable, *args: Expression | Any) -> None:
        """
        :param func: The function accepting the arguments.
        :param *args: The arguments for the function.
        """
        self.func = func
        self.args = args

    def __str__(self) -> str:
        return f"{get_qualname(self.func)}({','.join(map(str, self.args))})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Invoke the function resolving all arguments on the recordbatch."""
        args = tuple(apply_expression_if_needed(batch, arg) for arg in self.args)
        return self.func(*args)


def integer_bounds(arrow_type: pa.DataType) -> tuple[int, int]:
    """Smallest and largest value an integer type can hold.

    >>> integer_bounds(pa.int8())
    (-128, 127)
    >>> integer_bounds(pa.uint8())
    (0, 255)
    """
    if pa.types.is_signed_integer(arrow_type):
        return -(2 ** (arrow_type.bit_width - 1)), 2 ** (arrow_type.bit_width - 1) - 1
    return 0, 2**arrow_type.bit_width - 1


def null_on_overflow(checked: Callable, wrapping: Callable, op: Callable) -> Callable:
    """Build an integer safe version of an arithmetic kernel.

    The ``checked`` kernel computes the whole column at once and
    fails if any row overflows. In that case the rows are computed
    one by one with python integers, and those that don't fit the
    type the ``wrapping`` kernel would produce become null.
    """

    def compute(left: pa.Array | pa.Scalar, right: pa.Array | pa.Scalar) -> pa.Array | pa.Scalar:
        try:
            return checked(left, right)
        except pa.ArrowInvalid:
            result_type = wrapping(left, right).type
            if not pa.types.is_integer(result_type):
                raise

        low, high = integer_bounds(result_type)
        num_rows = max(
            (len(values) for values in (left, right) if not isinstance(values, pa.Scalar)),
            default=1,
        )
        results = []
        overflows = 0
        for a, b in zip(as_pylist(left, num_rows), as_pylist(right, num_rows)):
            value = None if a is None or b is None else op(a, b)
            if value is not None and not low <= value <= high:
                overflows += 1
                value = None
            results.append(value)

        logger.debug(
            "%s overflowed %s on %d rows, replaced with null",
            get_qualname(wrapping),
            result_type,
            overflows,
        )
        if isinstance(left, pa.Scalar) and isinstance(right, pa.Scalar):
            return pa.scalar(results[0], type=result_type)
        return pa.array(results, type=result_type)

    return compute


def as_pylist(values: pa.Array | pa.Scalar, num_rows: int) -> list[Any]:
    """Python values of a column, repeating scalars for each row."""
    if isinstance(values, pa.Scalar):
        return [values.as_py()] * num_rows
    return values.to_pylist()


def safe_divide(dividend: pa.Array | pa.Scalar, divisor: pa.Array | pa.Scalar) -> pa.Array:
    """Divide two numeric values, producing null when the divisor is zero.

    Division always happens in floating point, so that ``7 / 2``
    is ``3.5`` and not the truncated integer division.
    Integers too big to be represented exactly are rounded
    to the nearest floating point value.

    >>> safe_divide(pa.array([10, 5, 4]), pa.array([2, 0, None])).to_pylist()
    [5.0, None, None]
    """
    dividend = pc.cast(dividend, pa.float64(), safe=False)
    divisor = pc.cast(divisor, pa.float64(), safe=False)
    divisor = pc.if_else(
        pc.equal(divisor, 0.0), pa.scalar(None, type=pa.float64()), divisor
    )
    return pc.divide(dividend, divisor)


class ArithmeticExpression(Expression):
    """Combine two numeric operands with an arithmetic operator.

    Operands can be column references, literals, plain numbers
    or other arithmetic expressions, so that formulas like
    ``(count + 1) / fronds`` can be represented as::

        ArithmeticExpression("/", ArithmeticExpression("+", col("count"), 1), col("fronds"))

    Nulls in any operand lead to a null result for that row,
    the same is true for divisions where the divisor is zero.
    A single invalid row never makes the whole computation fail.

    >>> batch = pa.record_batch({"count": [5, 7, 3], "fronds": [10, 0, None]})
    >>> ArithmeticExpression("/", ColumnRef("count"), ColumnRef("fronds")).apply(batch).to_pylist()
    [0.5, None, None]
    """

    OPERATORS = {
        "+": null_on_overflow(pc.add_checked, pc.add, operator.add),
        "-": null_on_overflow(pc.subtract_checked, pc.subtract, operator.sub),
        "*": null_on_overflow(pc.multiply_checked, pc.multiply, operator.mul),
        "/": safe_divide,
    }

    def __init__(self, op: str, left: Expression | Any, right: Expression | Any) -> None:
        """
        :param op: One of ``+``, ``-``, ``*``, ``/``.
        :param left: The left operand.
        :param right: The right operand.
        """
        if op not in self.OPERATORS:
            raise ValueError(
                f"Unsupported arithmetic operator: {op}, expected one of {list(self.OPERATORS)}"
            )
        self.op = op
        self.left = left if isinstance(left, Expression) else Literal(left)
        self.right = right if isinstance(right, Expression) else Literal(right)

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        """Compute the operation for each row of the batch."""
        left = self._numeric_operand(self.left, batch)
        right = self._numeric_operand(self.right, batch)
        return self.OPERATORS[self.op](left, right)

    @staticmethod
    def _numeric_operand(operand: Expression, batch: pa.RecordBatch) -> pa.Array | pa.Scalar:
        values = operand.apply(batch)
        operand_type = nominal_type(values.type)
        if operand_type == NULL:
            # Missing values have no type, but they are still valid numbers.
            return values.cast(pa.float64())
        elif operand_type != NUMERIC:
            name = operand.name if isinstance(operand, ColumnRef) else str(operand)
            raise SchemaError(
                f"Arithmetic requires numeric values, {name!r} is {operand_type}"
            )
        return values
