import pyarrow as pa
import pyarrow.compute as pc
import pytest

from wrangleground.compute import (
    ArithmeticExpression,
    FunctionCallExpression,
    PyArrowTableDataSource,
    SchemaError,
    col,
    lit,
)
from wrangleground.compute.selection import ProjectNode


@pytest.fixture
def mock_data():
    """Create a mock PyArrow Table for testing."""
    data = {"a": [1, 2, 3], "b": [4, 5, 6], "c": [7, 8, 9]}
    return pa.table(data)


def test_init_and_str(mock_data):
    """Test the initialization and string representation of ProjectNode."""
    expressions = {"sum_ab": FunctionCallExpression(pc.add, col("a"), col("b"))}
    project_node = ProjectNode(
        ["a", "b"], expressions, PyArrowTableDataSource(mock_data)
    )
    assert (
        str(project_node)
        == "ProjectNode(select=['a', 'b'], project={'sum_ab': pyarrow.compute.add(ColumnRef(a),ColumnRef(b))}, child=PyArrowTableDataSource(columns=['a', 'b', 'c'], rows=3))"
    )


def test_select_columns(mock_data):
    """Test selecting specific columns."""
    project_node = ProjectNode(["c", "a"], {}, PyArrowTableDataSource(mock_data))
    batches = list(project_node.batches())
    assert len(batches) == 1
    batch = batches[0]
    assert batch.column_names == ["c", "a"]
    assert batch.column(0).to_pylist() == [7, 8, 9]
    assert batch.column(1).to_pylist() == [1, 2, 3]


def test_select_missing_column(mock_data):
    project_node = ProjectNode(["a", "z"], {}, PyArrowTableDataSource(mock_data))
    with pytest.raises(SchemaError, match="'z' not found"):
        list(project_node.batches())


def test_project_all_columns_plus_derived(mock_data):
    """Test that select=None keeps all columns and appends the new one."""
    expressions = {"ratio": ArithmeticExpression("/", col("a"), col("b"))}
    project_node = ProjectNode(None, expressions, PyArrowTableDataSource(mock_data))
    batch = next(project_node.batches())
    assert batch.column_names == ["a", "b", "c", "ratio"]
    assert batch.column("ratio").to_pylist() == [0.25, 0.4, 0.5]


def test_multiple_project_columns(mock_data):
    """Test projecting columns that depend on previously projected ones."""
    expressions = {
        "sum_ab": ArithmeticExpression("+", col("a"), col("b")),
        "double_sum_ab": ArithmeticExpression("*", col("sum_ab"), 2),
    }
    project_node = ProjectNode(["a"], expressions, PyArrowTableDataSource(mock_data))
    batch = next(project_node.batches())
    assert batch.column_names == ["a", "sum_ab", "double_sum_ab"]
    assert batch.column(1).to_pylist() == [5, 7, 9]
    assert batch.column(2).to_pylist() == [10, 14, 18]


def test_project_constant_is_broadcast(mock_data):
    project_node = ProjectNode(["a"], {"flag": lit(True)}, PyArrowTableDataSource(mock_data))
    batch = next(project_node.batches())
    assert batch.column("flag").to_pylist() == [True, True, True]


def test_project_existing_column_name(mock_data):
    expressions = {"a": ArithmeticExpression("+", col("a"), 1)}
    project_node = ProjectNode(None, expressions, PyArrowTableDataSource(mock_data))
    with pytest.raises(SchemaError, match="already exists"):
        list(project_node.batches())


def test_project_with_no_columns(mock_data):
    """Test projecting with no columns selected or projected."""
    project_node = ProjectNode([], {}, PyArrowTableDataSource(mock_data))
    batch = next(project_node.batches())
    assert batch.num_columns == 0
