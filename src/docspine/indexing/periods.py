"""
Period partitioning for time-bucketed index families.

Maps a time range onto the ordered sequence of calendar buckets (days,
months or years) that the range touches. Every bucket is a half-open
interval ``[start, end)`` aligned to its unit in a fixed reference offset,
and its label is the suffix of the concrete index holding that period.

Manifesto:
    Partitioning is the correctness-critical half of index selection: a
    missing bucket silently drops documents from a query, an extra bucket
    costs a shard fan-out. So it does one thing, visit exactly the units
    between the start and end instants, and leaves grouping to
    :mod:`docspine.indexing.selectors`.

    Boundaries are aligned in a fixed offset (``+09:00`` by default)
    rather than local time: index names already written at those
    boundaries must keep resolving to the same buckets, and a fixed offset
    has no DST gaps.

Architecture:
    ::

        start_at ──► floor to unit ──┐
                                     ├──► walk one unit at a time ──► buckets
        end_at   ──► floor to unit ──┘     (inclusive of end's unit)

        partition(2019-06-22 09:00, 2019-06-23 23:59:59, DAILY)
        ┌──────────────────┬──────────────────┐
        │ 2019.06.22       │ 2019.06.23       │
        │ [06-22, 06-23)   │ [06-23, 06-24)   │
        └──────────────────┴──────────────────┘

Examples:
    >>> [b.label for b in partition(1561161600, 1561301999, Granularity.DAILY)]
    ['2019.06.22', '2019.06.23']

    >>> period_index_name("logs_", 1561161600, Granularity.MONTHLY)
    'logs_2019.06'

Guardrails:
    ❌ DON'T: Align with the host's local timezone
    ✅ DO: Pass ``tz=reference_timezone(settings.utc_offset_hours)``

Tags:
    temporal, partitioning, index-selection, value-object, docspine

Doc-Types:
    - API Reference
    - Index Selection Guide
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Union

from docspine.core.errors import InvalidRangeError
from docspine.indexing.granularity import Granularity

DEFAULT_UTC_OFFSET_HOURS = 9

Moment = Union[int, float, datetime]


def reference_timezone(offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> tzinfo:
    """Fixed-offset timezone used to align period boundaries."""
    return timezone(timedelta(hours=offset_hours))


_DEFAULT_TZ = reference_timezone()


def to_datetime(value: Moment, tz: tzinfo | None = None) -> datetime:
    """Convert epoch seconds or a datetime into an aware datetime in ``tz``.

    Naive datetimes are taken to be wall-clock time in ``tz``.
    """
    tz = tz or _DEFAULT_TZ
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=tz)
        return value.astimezone(tz)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected epoch seconds or datetime, got {type(value).__name__}")
    return datetime.fromtimestamp(value, tz)


def floor_period(moment: datetime, granularity: Granularity) -> datetime:
    """Start of the unit containing ``moment`` (same tzinfo)."""
    day_start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if granularity is Granularity.DAILY:
        return day_start
    if granularity is Granularity.MONTHLY:
        return day_start.replace(day=1)
    return day_start.replace(month=1, day=1)


def next_period(moment: datetime, granularity: Granularity, count: int = 1) -> datetime:
    """Start of the unit ``count`` units after the one containing ``moment``.

    Clamped to ``datetime.max`` when the result falls past year 9999.
    """
    start = floor_period(moment, granularity)
    try:
        if granularity is Granularity.DAILY:
            return start + timedelta(days=count)
        if granularity is Granularity.MONTHLY:
            months = start.year * 12 + (start.month - 1) + count
            return start.replace(year=months // 12, month=months % 12 + 1)
        return start.replace(year=start.year + count)
    except (OverflowError, ValueError):
        return datetime.max.replace(tzinfo=start.tzinfo)


@dataclass(frozen=True, slots=True)
class PeriodBucket:
    """
    One ``[start, end)`` calendar unit of an index family.

    Attributes:
        start: Aligned start of the unit (inclusive)
        end: Start of the following unit (exclusive)
        granularity: Unit the bucket spans
    """

    start: datetime
    end: datetime
    granularity: Granularity

    @classmethod
    def containing(cls, moment: datetime, granularity: Granularity) -> PeriodBucket:
        start = floor_period(moment, granularity)
        return cls(start=start, end=next_period(start, granularity), granularity=granularity)

    @property
    def label(self) -> str:
        return self.start.strftime(self.granularity.label_format)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def __str__(self) -> str:
        return self.label


def iter_buckets(start: datetime, end: datetime, granularity: Granularity) -> Iterator[PeriodBucket]:
    """Yield every bucket from the one containing ``start`` to the one containing ``end``."""
    cursor = floor_period(start, granularity)
    last = floor_period(end, granularity)
    while cursor <= last:
        following = next_period(cursor, granularity)
        yield PeriodBucket(start=cursor, end=following, granularity=granularity)
        cursor = following


def partition(
    start_at: Moment,
    end_at: Moment,
    granularity: Granularity | str,
    *,
    tz: tzinfo | None = None,
) -> list[PeriodBucket]:
    """
    Ordered buckets covering ``[start_at, end_at]``, both endpoints' units included.

    Raises:
        InvalidRangeError: ``end_at`` lies before ``start_at``
        UnsupportedGranularityError: ``granularity`` is not daily/monthly/yearly
    """
    start = to_datetime(start_at, tz)
    end = to_datetime(end_at, tz)
    if end < start:
        raise InvalidRangeError(start_at=start_at, end_at=end_at)

    unit = Granularity.parse(granularity)

    buckets: list[PeriodBucket] = []
    seen: set[str] = set()
    for bucket in iter_buckets(start, end, unit):
        if bucket.label in seen:
            continue
        seen.add(bucket.label)
        buckets.append(bucket)
    return buckets


def period_index_name(
    prefix: str,
    timestamp: Moment,
    granularity: Granularity | str,
    *,
    tz: tzinfo | None = None,
) -> str:
    """Concrete index that a document stamped ``timestamp`` belongs to."""
    unit = Granularity.parse(granularity)
    return prefix + PeriodBucket.containing(to_datetime(timestamp, tz), unit).label


__all__ = [
    "DEFAULT_UTC_OFFSET_HOURS",
    "Moment",
    "PeriodBucket",
    "floor_period",
    "iter_buckets",
    "next_period",
    "partition",
    "period_index_name",
    "reference_timezone",
    "to_datetime",
]
