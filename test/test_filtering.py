import pyarrow as pa
import pyarrow.compute as pc
import pytest

from wrangleground.compute import (
    AllOf,
    AnyOf,
    Comparison,
    Contains,
    FilterNode,
    FunctionCallExpression,
    IsIn,
    PyArrowTableDataSource,
    SchemaError,
    col,
    contains,
    eq,
    ge,
    gt,
    le,
    lit,
    lt,
    ne,
    not_contains,
)

FISH_DATA = pa.record_batch(
    {
        "year": [2016, 2016, 2017, 2017, 2018, 2018],
        "site": ["abur", "mohk", "abur", "carp", "napl", None],
        "common_name": [
            "garibaldi",
            "blacksmith",
            "rock wrasse",
            "garibaldi",
            "black surfperch",
            "senorita",
        ],
        "total_count": [4, 30, 10, 11, None, 2],
    }
)


def filtered(predicate, data=FISH_DATA):
    batches = list(FilterNode(predicate, PyArrowTableDataSource(data)).batches())
    assert len(batches) == 1
    return batches[0]


def test_filter_node_str():
    node = FilterNode(eq("site", "abur"), PyArrowTableDataSource(FISH_DATA))
    assert str(node) == (
        "FilterNode(filter=Comparison(ColumnRef(site) == 'abur'), "
        "child=PyArrowTableDataSource(columns=['year', 'site', 'common_name', 'total_count'], rows=6))"
    )


@pytest.mark.parametrize(
    "predicate, expected_names",
    [
        (eq("site", "abur"), ["garibaldi", "rock wrasse"]),
        (eq("site", "ABUR"), []),
        (ne("site", "abur"), ["blacksmith", "garibaldi", "black surfperch"]),
        (lt("total_count", 10), ["garibaldi", "senorita"]),
        (le("total_count", 10), ["garibaldi", "rock wrasse", "senorita"]),
        (gt("total_count", 10), ["blacksmith", "garibaldi"]),
        (ge("total_count", 11), ["blacksmith", "garibaldi"]),
        (eq("year", 2017.0), ["rock wrasse", "garibaldi"]),
    ],
)
def test_comparisons(predicate, expected_names):
    result = filtered(predicate)
    assert result.column("common_name").to_pylist() == expected_names


def test_comparison_with_null_never_holds():
    assert filtered(eq("site", None)).num_rows == 0
    assert filtered(ne("site", None)).num_rows == 0


def test_comparison_against_text_with_number():
    with pytest.raises(SchemaError, match="Cannot compare text column 'site'"):
        filtered(eq("site", 3))


def test_comparison_against_number_with_text():
    with pytest.raises(SchemaError, match="Cannot compare numeric column 'total_count'"):
        filtered(le("total_count", "10"))


def test_comparison_unknown_operator():
    with pytest.raises(ValueError, match="Unsupported comparison operator"):
        Comparison("site", "=~", "abur")


def test_missing_column():
    with pytest.raises(SchemaError, match="'depth' not found"):
        filtered(gt("depth", 3))


def test_is_in():
    result = filtered(IsIn("common_name", ["garibaldi", "rock wrasse"]))
    assert result.column("year").to_pylist() == [2016, 2017, 2017]


def test_is_in_skips_nulls():
    result = filtered(IsIn("site", ["abur", None]))
    assert result.column("common_name").to_pylist() == ["garibaldi", "rock wrasse"]


def test_is_in_empty_set():
    assert filtered(IsIn("site", [])).num_rows == 0


def test_is_in_mixed_numeric_types():
    result = filtered(IsIn("total_count", [4.0, 2.5, 30]))
    assert result.column("common_name").to_pylist() == ["garibaldi", "blacksmith"]


def test_contains_is_case_sensitive():
    assert filtered(contains("common_name", "black")).num_rows == 2
    assert filtered(contains("common_name", "Black")).num_rows == 0


def test_not_contains():
    result = filtered(not_contains("common_name", "black"))
    assert result.column("common_name").to_pylist() == [
        "garibaldi",
        "rock wrasse",
        "garibaldi",
        "senorita",
    ]


def test_contains_excludes_nulls_in_both_forms():
    assert filtered(Contains("site", "a")).column("site").to_pylist() == [
        "abur",
        "abur",
        "carp",
        "napl",
    ]
    assert filtered(Contains("site", "a", negate=True)).column("site").to_pylist() == [
        "mohk"
    ]


def test_contains_requires_text():
    with pytest.raises(SchemaError, match="requires a text column"):
        filtered(contains("year", "20"))


def test_all_of_membership_and_bound():
    predicate = AllOf(
        IsIn("common_name", ["garibaldi", "rock wrasse"]), le("total_count", 10)
    )
    result = filtered(predicate)
    assert result.to_pylist() == [
        {"year": 2016, "site": "abur", "common_name": "garibaldi", "total_count": 4},
        {"year": 2017, "site": "abur", "common_name": "rock wrasse", "total_count": 10},
    ]


def test_all_of_evaluates_every_predicate():
    # No short-circuit, so the missing column is detected even if nothing matches.
    predicate = AllOf(eq("site", "nowhere"), eq("depth", 3))
    with pytest.raises(SchemaError):
        filtered(predicate)


def test_any_of():
    predicate = AnyOf(eq("site", "carp"), gt("total_count", 20))
    result = filtered(predicate)
    assert result.column("common_name").to_pylist() == ["blacksmith", "garibaldi"]


def test_empty_combinations():
    assert filtered(AllOf()).num_rows == FISH_DATA.num_rows
    assert filtered(AnyOf()).num_rows == 0


def test_nested_combinations():
    predicate = AnyOf(
        AllOf(eq("year", 2016), contains("common_name", "smith")),
        AllOf(eq("year", 2018), not_contains("common_name", "perch")),
    )
    result = filtered(predicate)
    assert result.column("common_name").to_pylist() == ["blacksmith", "senorita"]


def test_filter_with_constant_predicate():
    result = filtered(lit(True))
    assert result.equals(FISH_DATA)
    assert filtered(lit(False)).num_rows == 0


def test_filter_with_function_call_drops_nulls():
    predicate = FunctionCallExpression(pc.greater, col("total_count"), 5)
    result = filtered(predicate)
    assert result.column("total_count").to_pylist() == [30, 10, 11]


def test_filter_is_stable_across_batches():
    data = pa.Table.from_batches([FISH_DATA.slice(0, 3), FISH_DATA.slice(3)])
    node = FilterNode(eq("common_name", "garibaldi"), PyArrowTableDataSource(data))
    rows = [row for batch in node.batches() for row in batch.to_pylist()]
    assert [row["year"] for row in rows] == [2016, 2017]


def test_filter_on_missing_only_column():
    data = pa.record_batch({"site": ["abur", "mohk"], "depth": pa.nulls(2)})
    assert filtered(eq("depth", 3), data).num_rows == 0
    assert filtered(IsIn("depth", [3]), data).num_rows == 0
    assert filtered(contains("depth", "3"), data).num_rows == 0


@pytest.mark.parametrize(
    "predicate",
    [
        eq("total_count", True),
        IsIn("total_count", [True]),
        IsIn("year", [2016, False]),
        ne("site", False),
    ],
)
def test_boolean_literal_against_numbers_or_text(predicate):
    with pytest.raises(SchemaError, match="with bool value"):
        filtered(predicate)


def test_boolean_literal_against_boolean_column():
    data = pa.record_batch({"flag": [True, False, None]})
    assert filtered(eq("flag", True), data).column("flag").to_pylist() == [True]
    assert filtered(IsIn("flag", [False]), data).column("flag").to_pylist() == [False]
