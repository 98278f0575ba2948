"""
Index partitioning granularities.

A time-partitioned index family is cut into one concrete index per day,
month or year. :class:`Granularity` names the unit and knows how its
buckets are labelled and which coarser units can group them.

    ┌──────────┬────────────┬──────────┬────────────────────┐
    │ unit     │ label      │ interval │ groups into        │
    ├──────────┼────────────┼──────────┼────────────────────┤
    │ DAILY    │ 2019.06.22 │ 1d       │ YEARLY, MONTHLY    │
    │ MONTHLY  │ 2019.06    │ 1M       │ YEARLY             │
    │ YEARLY   │ 2019       │ 1y       │ -                  │
    └──────────┴────────────┴──────────┴────────────────────┘

Tags:
    temporal, granularity, partitioning, docspine
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from docspine.core.errors import UnsupportedGranularityError


class Granularity(str, Enum):
    """Time unit one concrete index covers."""

    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label_format(self) -> str:
        """``strftime`` format of a bucket label."""
        return _LABEL_FORMATS[self]

    @property
    def group_format(self) -> str:
        """``strftime`` format of a group token covering one whole unit."""
        return _GROUP_FORMATS[self]

    @property
    def interval(self) -> str:
        """Calendar interval string understood by date histograms."""
        return _INTERVALS[self]

    @property
    def parents(self) -> tuple[Granularity, ...]:
        """Coarser units that can group buckets of this unit, coarsest first."""
        return _PARENTS[self]

    @classmethod
    def parse(cls, value: Any) -> Granularity:
        """Coerce an enum member or a case-insensitive name/value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        raise UnsupportedGranularityError(value)


_LABEL_FORMATS = {
    Granularity.DAILY: "%Y.%m.%d",
    Granularity.MONTHLY: "%Y.%m",
    Granularity.YEARLY: "%Y",
}

_GROUP_FORMATS = {
    Granularity.DAILY: "%Y.%m.%d.*",
    Granularity.MONTHLY: "%Y.%m.*",
    Granularity.YEARLY: "%Y.*",
}

_INTERVALS = {
    Granularity.DAILY: "1d",
    Granularity.MONTHLY: "1M",
    Granularity.YEARLY: "1y",
}

_PARENTS = {
    Granularity.DAILY: (Granularity.YEARLY, Granularity.MONTHLY),
    Granularity.MONTHLY: (Granularity.YEARLY,),
    Granularity.YEARLY: (),
}


@dataclass(frozen=True, slots=True)
class HistogramInterval:
    """Date histogram interval setting: fixed (``30d``) or calendar (``1M``)."""

    interval_type: Literal["fixed_interval", "calendar_interval"]
    interval: str

    def to_dict(self) -> dict[str, str]:
        return {self.interval_type: self.interval}


def histogram_interval(interval: str | Granularity) -> HistogramInterval:
    """A plain string is a fixed interval; a granularity is a calendar interval."""
    if isinstance(interval, Granularity):
        return HistogramInterval("calendar_interval", interval.interval)
    return HistogramInterval("fixed_interval", interval)


__all__ = ["Granularity", "HistogramInterval", "histogram_interval"]
