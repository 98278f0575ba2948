"""
Index selectors for time-ranged reads.

Turns the buckets produced by :func:`~docspine.indexing.periods.partition`
into the index names a search targets. Where the range fully covers a
coarser period, the individual indices of that period collapse into one
group token (``logs_2019.*``, ``logs_2019.06.*``), which matches exactly
the same indices with far fewer names in the request.

Manifesto:
    Grouping is a pure optimisation: it must never change which documents
    a query sees, only how many index names the store has to expand. It is
    kept separate from partitioning so it can be switched off
    (``enable_group_select=False``) to inspect the raw bucket list.

    When even the grouped list is too long (more than ``max_tokens``),
    the selector degrades to ``prefix*``. That wildcard can also match
    unrelated indices sharing the prefix, so prefixes must be unambiguous
    (``logs_`` rather than ``log``).

Architecture:
    ::

        buckets (DAILY, 2019-01-01 .. 2020-01-03)
        ┌────────┬────────┬─────┬────────┬────────┬────────┬────────┐
        │ 01.01  │ 01.02  │ ... │ 12.31  │ 01.01  │ 01.02  │ 01.03  │
        └────────┴────────┴─────┴────────┴────────┴────────┴────────┘
        │◄──────── year 2019 covered ───►│
                        │
                        ▼
        2019.*, 2020.01.01, 2020.01.02, 2020.01.03

    Grouping rules (the cursor jumps past a whole group at once):
        DAILY   → YYYY.* on Jan 1, else YYYY.MM.* on the 1st, when the
                  whole year/month lies inside the range
        MONTHLY → YYYY.* in January when December is inside the range
        YEARLY  → never grouped

Examples:
    >>> selector_string("test_", 1546300800, 1578009599, Granularity.DAILY)
    'test_2019.*,test_2020.01.01,test_2020.01.02,test_2020.01.03'

    >>> partition_and_select("test_", 1561161600, 1561161600, "daily")
    ['test_2019.06.22']

Tags:
    index-selection, wildcard, partitioning, query-fan-out, docspine

Doc-Types:
    - API Reference
    - Index Selection Guide
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, tzinfo

from docspine.core.logging import get_logger
from docspine.indexing.granularity import Granularity
from docspine.indexing.periods import Moment, PeriodBucket, floor_period, next_period, partition

logger = get_logger(__name__)

DEFAULT_MAX_TOKENS = 100
WILDCARD = "*"


def _covering_group(bucket: PeriodBucket, unit: Granularity, range_end: datetime) -> PeriodBucket | None:
    """The coarser period starting at ``bucket`` and ending inside the range, if any."""
    for parent in unit.parents:
        if floor_period(bucket.start, parent) != bucket.start:
            continue
        group_end = next_period(bucket.start, parent)
        if group_end <= range_end:
            return PeriodBucket(start=bucket.start, end=group_end, granularity=parent)
    return None


def compress(
    buckets: Sequence[PeriodBucket],
    granularity: Granularity | str,
    enable_group_select: bool = True,
) -> list[str]:
    """Unprefixed selector tokens for contiguous ``buckets``, grouped where possible."""
    unit = Granularity.parse(granularity)
    if not buckets:
        return []

    range_end = buckets[-1].end
    tokens: list[str] = []
    i = 0
    while i < len(buckets):
        bucket = buckets[i]
        group = _covering_group(bucket, unit, range_end) if enable_group_select else None
        if group is None:
            tokens.append(bucket.label)
            i += 1
            continue
        tokens.append(group.start.strftime(group.granularity.group_format))
        while i < len(buckets) and buckets[i].start < group.end:
            i += 1

    return list(dict.fromkeys(tokens))


@dataclass(frozen=True, slots=True)
class IndexSelector:
    """
    Resolved index names for one read.

    Attributes:
        tokens: Concrete index names and group tokens, in time order
        is_wildcard: True when the token limit forced the ``prefix*`` fallback
    """

    tokens: tuple[str, ...]
    is_wildcard: bool = False

    def __str__(self) -> str:
        return ",".join(self.tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)


def select_indices(
    prefix: str,
    start_at: Moment,
    end_at: Moment,
    granularity: Granularity | str,
    *,
    enable_group_select: bool = True,
    max_tokens: int | None = DEFAULT_MAX_TOKENS,
    tz: tzinfo | None = None,
) -> IndexSelector:
    """
    Selector for every index of the ``prefix`` family touched by the range.

    Args:
        prefix: Index name up to the period label (``"logs_"``)
        start_at: Range start, epoch seconds or datetime
        end_at: Range end (inclusive), epoch seconds or datetime
        granularity: Unit the index family is partitioned by
        enable_group_select: Collapse fully covered coarser periods
        max_tokens: Fall back to ``prefix*`` above this many tokens;
            ``None`` never falls back
        tz: Boundary alignment offset (default ``+09:00``)

    Raises:
        InvalidRangeError: ``end_at`` lies before ``start_at``
        UnsupportedGranularityError: unknown ``granularity``
    """
    buckets = partition(start_at, end_at, granularity, tz=tz)
    unit = Granularity.parse(granularity)
    tokens = tuple(prefix + token for token in compress(buckets, unit, enable_group_select))

    if max_tokens is not None and len(tokens) > max_tokens:
        logger.warning(
            "index_selector_wildcard_fallback",
            prefix=prefix,
            granularity=unit.value,
            token_count=len(tokens),
            max_tokens=max_tokens,
            group_select=enable_group_select,
        )
        return IndexSelector(tokens=(prefix + WILDCARD,), is_wildcard=True)

    logger.debug(
        "index_selector_resolved",
        prefix=prefix,
        granularity=unit.value,
        bucket_count=len(buckets),
        token_count=len(tokens),
    )
    return IndexSelector(tokens=tokens)


def partition_and_select(
    prefix: str,
    start_at: Moment,
    end_at: Moment,
    granularity: Granularity | str,
    enable_group_select: bool = True,
    *,
    max_tokens: int | None = DEFAULT_MAX_TOKENS,
    tz: tzinfo | None = None,
) -> list[str]:
    """Index name tokens for the range (see :func:`select_indices`)."""
    selector = select_indices(
        prefix,
        start_at,
        end_at,
        granularity,
        enable_group_select=enable_group_select,
        max_tokens=max_tokens,
        tz=tz,
    )
    return list(selector.tokens)


def selector_string(
    prefix: str,
    start_at: Moment,
    end_at: Moment,
    granularity: Granularity | str,
    enable_group_select: bool = True,
    *,
    max_tokens: int | None = DEFAULT_MAX_TOKENS,
    tz: tzinfo | None = None,
) -> str:
    """Comma-joined selector, ready to use as a search target."""
    return ",".join(
        partition_and_select(
            prefix,
            start_at,
            end_at,
            granularity,
            enable_group_select,
            max_tokens=max_tokens,
            tz=tz,
        )
    )


__all__ = [
    "DEFAULT_MAX_TOKENS",
    "IndexSelector",
    "compress",
    "partition_and_select",
    "select_indices",
    "selector_string",
]
