"""Dataset API built on top of the wrangleground compute engine.

A Dataset is an immutable, rectangular collection of rows
that share the same columns. It provides the verbs commonly used
when wrangling tabular data: filtering rows, selecting columns,
deriving new columns and joining datasets together.

Each verb builds a small query plan for the compute engine,
executes it and wraps the result in a new Dataset:

>>> from wrangleground.dataset import Dataset
>>> from wrangleground.compute import IsIn, le, all_of
>>> fish = Dataset.from_pydict({
...     "common_name": ["garibaldi", "blacksmith", "rock wrasse"],
...     "total_count": [4, 3, 12],
... })
>>> fish.filter(all_of(IsIn("common_name", ["garibaldi", "rock wrasse"]), le("total_count", 10))).rows()
[{'common_name': 'garibaldi', 'total_count': 4}]
"""

from .dataset import Dataset

__all__ = ("Dataset",)
