"""Schema checks performed by the compute engine.

The engine works on typed columns, so instead of discovering
mistakes deep inside a compute kernel it verifies at call time that
the columns an operation refers to exist and have a compatible type.

Columns are classified in nominal types, which are what
users reason about when writing filters and joins:

>>> import pyarrow as pa
>>> nominal_type(pa.int64()), nominal_type(pa.float32()), nominal_type(pa.string())
('numeric', 'numeric', 'text')
>>> nominal_type(pa.null())
'null'

Other types are reported by their Arrow name:

>>> nominal_type(pa.bool_())
'bool'
"""

from typing import Any, Iterable

import pyarrow as pa

NUMERIC = "numeric"
TEXT = "text"
NULL = "null"
BOOL = "bool"


def nominal_type(arrow_type: pa.DataType) -> str:
    """Get the nominal type of a column from its Arrow type."""
    if (
        pa.types.is_integer(arrow_type)
        or pa.types.is_floating(arrow_type)
        or pa.types.is_decimal(arrow_type)
    ):
        return NUMERIC
    elif pa.types.is_string(arrow_type) or pa.types.is_large_string(arrow_type):
        return TEXT
    elif pa.types.is_null(arrow_type):
        # Columns that only contain missing values.
        return NULL
    return str(arrow_type)


def literal_type(value: Any) -> str | None:
    """Get the nominal type of a python literal, if it has one."""
    if isinstance(value, bool):
        return BOOL
    elif isinstance(value, (int, float)):
        return NUMERIC
    elif isinstance(value, str):
        return TEXT
    return None


def require_columns(schema: pa.Schema, names: Iterable[str]) -> None:
    """Ensure that all the named columns are part of the schema.

    :param schema: The schema of the data being processed.
    :param names: The columns that are going to be accessed.
    """
    available = schema.names
    missing = [name for name in names if name not in available]
    if len(missing) == 1:
        raise SchemaError(
            f"Column {missing[0]!r} not found, available columns: {available}"
        )
    elif missing:
        raise SchemaError(f"Columns {missing} not found, available columns: {available}")


def check_comparable(name: str, arrow_type: pa.DataType, value: Any) -> None:
    """Ensure a column can be compared with a literal value.

    Numbers, text and booleans can't be compared with each other,
    comparing a column made only of nulls is always allowed.
    """
    column_type = nominal_type(arrow_type)
    value_type = literal_type(value)
    if column_type in (NUMERIC, TEXT) and value_type in (NUMERIC, TEXT, BOOL):
        if column_type != value_type:
            raise SchemaError(
                f"Cannot compare {column_type} column {name!r} with {value_type} value {value!r}"
            )


def common_type(left: pa.DataType, right: pa.DataType) -> pa.DataType:
    """Find a type able to hold values of two compatible types.

    Used to merge the key columns of two datasets being joined.

    >>> common_type(pa.int32(), pa.int64())
    DataType(int64)
    >>> common_type(pa.int64(), pa.float64())
    DataType(double)
    """
    if left == right or pa.types.is_null(right):
        return left
    elif pa.types.is_null(left):
        return right
    elif nominal_type(left) == TEXT and nominal_type(right) == TEXT:
        return pa.large_string()
    elif pa.types.is_integer(left) and pa.types.is_integer(right):
        return pa.int64()
    return pa.float64()


class SchemaError(Exception):
    """An operation referred to columns that don't fit the data.

    Raised when a column is missing, when columns
    of two datasets collide or when the type of a column
    is not compatible with the requested operation.
    """


class EmptyKeyError(ValueError):
    """A join was requested without any key column."""
