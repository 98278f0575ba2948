"""Time-range index selection for time-bucketed index families.

Architecture::

    granularity.py   Granularity (DAILY / MONTHLY / YEARLY), histogram intervals
    periods.py       PeriodBucket + partition() + period_index_name()
    selectors.py     compress(), select_indices(), partition_and_select()
    datemath.py      Store-side relative selectors (<logs_{now/d-1d{...}}>)
"""

from docspine.indexing.datemath import (
    relative_selector,
    selector_by_relative_days,
    selector_by_relative_hours,
    selector_by_relative_months,
)
from docspine.indexing.granularity import Granularity, HistogramInterval, histogram_interval
from docspine.indexing.periods import (
    PeriodBucket,
    partition,
    period_index_name,
    reference_timezone,
)
from docspine.indexing.selectors import (
    DEFAULT_MAX_TOKENS,
    IndexSelector,
    compress,
    partition_and_select,
    select_indices,
    selector_string,
)

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "Granularity",
    "HistogramInterval",
    "IndexSelector",
    "PeriodBucket",
    "compress",
    "histogram_interval",
    "partition",
    "partition_and_select",
    "period_index_name",
    "reference_timezone",
    "relative_selector",
    "select_indices",
    "selector_by_relative_days",
    "selector_by_relative_hours",
    "selector_by_relative_months",
    "selector_string",
]
