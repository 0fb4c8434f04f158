import logging

from wrangleground.compute import ArithmeticExpression, col, is_in, le, not_contains, all_of
from wrangleground.dataset import Dataset

logging.basicConfig(level=logging.DEBUG)

fish = Dataset.from_pydict(
    {
        "year": [2016, 2016, 2016, 2017, 2017],
        "site": ["abur", "abur", "mohk", "abur", "carp"],
        "common_name": ["garibaldi", "rock wrasse", "senorita", "garibaldi", "black surfperch"],
        "total_count": [4, 12, 8, 9, 2],
    }
)
kelp_abur = Dataset.from_rows(
    [
        {"year": 2016, "site": "abur", "total_fronds": 10},
        {"year": 2017, "site": "abur", "total_fronds": 0},
    ]
)

few_fish = fish.filter(
    all_of(is_in("common_name", ["garibaldi", "rock wrasse"]), le("total_count", 10))
)
print(few_fish.rows())

no_perch = fish.filter(not_contains("common_name", "perch"))
print(no_perch.rows())

for how in ("full", "left", "inner", "semi", "anti"):
    joined = fish.join(kelp_abur, ["year", "site"], how=how)
    print(how, joined)

ratio = fish.inner_join(kelp_abur, ["year", "site"]).with_column(
    "fish_per_frond", ArithmeticExpression("/", col("total_count"), col("total_fronds"))
)
for row in ratio.rows():
    print(row)
