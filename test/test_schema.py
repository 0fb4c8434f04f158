import pyarrow as pa
import pytest

from wrangleground.compute.schema import (
    SchemaError,
    check_comparable,
    common_type,
    literal_type,
    nominal_type,
    require_columns,
)


@pytest.mark.parametrize(
    "arrow_type, expected",
    [
        (pa.int8(), "numeric"),
        (pa.uint32(), "numeric"),
        (pa.float64(), "numeric"),
        (pa.decimal128(5, 2), "numeric"),
        (pa.string(), "text"),
        (pa.large_string(), "text"),
        (pa.null(), "null"),
        (pa.timestamp("s"), "timestamp[s]"),
    ],
)
def test_nominal_type(arrow_type, expected):
    assert nominal_type(arrow_type) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(1, "numeric"), (1.5, "numeric"), ("abur", "text"), (True, "bool"), (None, None)],
)
def test_literal_type(value, expected):
    assert literal_type(value) == expected


def test_require_columns():
    schema = pa.schema([("year", pa.int64()), ("site", pa.string())])
    require_columns(schema, ["site", "year"])

    with pytest.raises(SchemaError, match="Column 'fronds' not found"):
        require_columns(schema, ["fronds"])

    with pytest.raises(SchemaError, match=r"Columns \['fronds', 'count'\] not found"):
        require_columns(schema, ["year", "fronds", "count"])


def test_check_comparable():
    check_comparable("year", pa.int64(), 2016)
    check_comparable("site", pa.string(), "abur")
    check_comparable("flag", pa.bool_(), True)
    with pytest.raises(SchemaError):
        check_comparable("year", pa.int64(), "2016")


@pytest.mark.parametrize(
    "arrow_type, value",
    [(pa.int64(), True), (pa.float64(), False), (pa.string(), True)],
)
def test_check_comparable_rejects_booleans(arrow_type, value):
    with pytest.raises(SchemaError, match="with bool value"):
        check_comparable("column", arrow_type, value)


@pytest.mark.parametrize(
    "left, right, expected",
    [
        (pa.int64(), pa.int64(), pa.int64()),
        (pa.int32(), pa.int8(), pa.int64()),
        (pa.int64(), pa.float32(), pa.float64()),
        (pa.null(), pa.string(), pa.string()),
        (pa.string(), pa.null(), pa.string()),
        (pa.string(), pa.large_string(), pa.large_string()),
    ],
)
def test_common_type(left, right, expected):
    assert common_type(left, right) == expected
