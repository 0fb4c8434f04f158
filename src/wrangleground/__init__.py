"""WrangleGround

A tabular filter-and-join engine built for learning and teaching purposes.

WrangleGround showcases the row filtering and table joining operations
that are commonly performed when wrangling survey data, like counts
of kelp fronds and fish species across sites and years.

The platform is constituted by two components, each isolated within its own
package and each self documented in literate programming style:

* The Compute Engine, in charge of executing filters, projections and joins
  over Apache Arrow data.
* The Dataset API, which provides an high level immutable API for the compute engine.

For the user guide and code documentation of each component, refer to the
component itself.
"""

from . import compute, dataset
from .compute.schema import EmptyKeyError, SchemaError
from .dataset import Dataset

__all__ = ("compute", "dataset", "Dataset", "SchemaError", "EmptyKeyError")
