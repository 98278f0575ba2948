"""
Relative index selectors using the store's date-math index names.

Instead of resolving dates client-side, a date-math name such as
``<logs_{now/d-1d{yyyy.MM.dd|+09:00}}>`` is resolved by the store at
request time, which keeps "the last N days" selectors correct for
long-lived or cached queries.

Examples:
    >>> selector_by_relative_days("logs_", 1)
    '<logs_{now/d{yyyy.MM.dd|+09:00}}>,<logs_{now/d-1d{yyyy.MM.dd|+09:00}}>'

Tags:
    index-selection, date-math, relative-time, docspine
"""

from __future__ import annotations

from dataclasses import dataclass

from docspine.core.errors import UnsupportedGranularityError


@dataclass(frozen=True, slots=True)
class _Unit:
    rounding: str
    default_format: str


_UNITS = {
    "hour": _Unit("h", "yyyy.MM.dd.HH"),
    "day": _Unit("d", "yyyy.MM.dd"),
    "month": _Unit("M", "yyyy.MM"),
}


def format_utc_offset(offset_hours: int) -> str:
    """``9`` -> ``"+09:00"``, ``-5`` -> ``"-05:00"``."""
    sign = "-" if offset_hours < 0 else "+"
    return f"{sign}{abs(offset_hours):02d}:00"


def relative_selector(
    prefix: str,
    unit: str,
    count: int = 0,
    *,
    date_format: str | None = None,
    utc_offset: str = "+09:00",
) -> str:
    """
    Date-math names for the current ``unit`` and the ``count`` units before it.

    Args:
        prefix: Index name up to the date part
        unit: ``"hour"``, ``"day"`` or ``"month"``
        count: Number of previous units to include besides the current one
        date_format: Store (Java-style) date format of the index suffix
        utc_offset: Offset the index names were cut in
    """
    unit_format = _UNITS.get(unit)
    if unit_format is None:
        raise UnsupportedGranularityError(unit, f"Unsupported date-math unit: {unit!r}")
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")

    fmt = date_format or unit_format.default_format
    names = [f"<{prefix}{{now/{unit_format.rounding}{{{fmt}|{utc_offset}}}}}>"]
    for i in range(1, count + 1):
        names.append(f"<{prefix}{{now/{unit_format.rounding}-{i}{unit_format.rounding}{{{fmt}|{utc_offset}}}}}>")
    return ",".join(names)


def selector_by_relative_days(prefix: str, day_range: int = 0, date_format: str = "yyyy.MM.dd") -> str:
    return relative_selector(prefix, "day", day_range, date_format=date_format)


def selector_by_relative_months(prefix: str, month_range: int = 0, date_format: str = "yyyy.MM") -> str:
    return relative_selector(prefix, "month", month_range, date_format=date_format)


def selector_by_relative_hours(prefix: str, hour_range: int = 0, date_format: str = "yyyy.MM.dd.HH") -> str:
    return relative_selector(prefix, "hour", hour_range, date_format=date_format)


__all__ = [
    "format_utc_offset",
    "relative_selector",
    "selector_by_relative_days",
    "selector_by_relative_hours",
    "selector_by_relative_months",
]
