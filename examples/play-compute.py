import pyarrow as pa

from wrangleground.compute import (
    ArithmeticExpression,
    FilterNode,
    JoinNode,
    ProjectNode,
    PyArrowTableDataSource,
    col,
    eq,
)

kelp = pa.table(
    {
        "year": [2016, 2016, 2017],
        "site": ["abur", "mohk", "abur"],
        "total_fronds": [10, 0, 42],
    }
)
fish = pa.table(
    {
        "year": [2016, 2016, 2017, 2017],
        "site": ["abur", "mohk", "abur", "carp"],
        "total_count": [5, 3, 7, 11],
    }
)

query = ProjectNode(
    None,
    {"fish_per_frond": ArithmeticExpression("/", col("total_count"), col("total_fronds"))},
    JoinNode(
        ["year", "site"],
        FilterNode(eq("year", 2016), PyArrowTableDataSource(fish)),
        PyArrowTableDataSource(kelp),
        how="left",
    ),
)
print(query)
for batch in query.batches():
    print("---")
    print(batch)
