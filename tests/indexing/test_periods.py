"""
Tests for docspine.indexing.periods.

Tests cover:
- Moment conversion (epoch seconds, aware and naive datetimes)
- Period flooring and stepping across month/year ends
- PeriodBucket labels and half-open containment
- partition() ordering, endpoints and validation
- period_index_name()
"""

from datetime import datetime, timedelta, timezone

import pytest

from docspine.core.errors import InvalidRangeError, UnsupportedGranularityError
from docspine.indexing.granularity import Granularity
from docspine.indexing.periods import (
    PeriodBucket,
    floor_period,
    iter_buckets,
    next_period,
    partition,
    period_index_name,
    reference_timezone,
    to_datetime,
)

KST = timezone(timedelta(hours=9))


class TestReferenceTimezone:
    def test_default_is_plus_nine(self):
        assert reference_timezone().utcoffset(None) == timedelta(hours=9)

    def test_custom_offset(self):
        assert reference_timezone(-5).utcoffset(None) == timedelta(hours=-5)


class TestToDatetime:
    """Tests for moment conversion."""

    def test_epoch_seconds(self, jun22_0900):
        """Epoch seconds are rendered in the reference offset."""
        assert to_datetime(jun22_0900) == datetime(2019, 6, 22, 9, 0, tzinfo=KST)

    def test_float_epoch(self):
        assert to_datetime(1561161600.5).microsecond == 500000

    def test_aware_datetime_is_converted(self):
        moment = datetime(2019, 6, 22, 0, 0, tzinfo=timezone.utc)
        converted = to_datetime(moment)
        assert converted.hour == 9
        assert converted.utcoffset() == timedelta(hours=9)

    def test_naive_datetime_is_wall_clock(self):
        """Naive datetimes are read as wall-clock time in the offset."""
        converted = to_datetime(datetime(2019, 6, 22, 1, 30))
        assert converted == datetime(2019, 6, 22, 1, 30, tzinfo=KST)

    def test_explicit_timezone(self, jun22_0900):
        assert to_datetime(jun22_0900, timezone.utc).hour == 0

    @pytest.mark.parametrize("value", ["1561161600", None, True])
    def test_invalid_type_raises(self, value):
        with pytest.raises(TypeError, match="Expected epoch seconds or datetime"):
            to_datetime(value)


class TestFloorAndNext:
    """Tests for unit arithmetic."""

    def test_floor_daily(self):
        moment = datetime(2019, 6, 22, 17, 45, 3, tzinfo=KST)
        assert floor_period(moment, Granularity.DAILY) == datetime(2019, 6, 22, tzinfo=KST)

    def test_floor_monthly(self):
        moment = datetime(2019, 6, 22, 17, 45, tzinfo=KST)
        assert floor_period(moment, Granularity.MONTHLY) == datetime(2019, 6, 1, tzinfo=KST)

    def test_floor_yearly(self):
        moment = datetime(2019, 6, 22, 17, 45, tzinfo=KST)
        assert floor_period(moment, Granularity.YEARLY) == datetime(2019, 1, 1, tzinfo=KST)

    def test_next_day_across_month_end(self):
        assert next_period(datetime(2019, 6, 30, 12, tzinfo=KST), Granularity.DAILY) == datetime(
            2019, 7, 1, tzinfo=KST
        )

    def test_next_day_leap_february(self):
        assert next_period(datetime(2020, 2, 28, tzinfo=KST), Granularity.DAILY) == datetime(
            2020, 2, 29, tzinfo=KST
        )

    def test_next_month_across_year_end(self):
        assert next_period(datetime(2019, 12, 31, tzinfo=KST), Granularity.MONTHLY) == datetime(
            2020, 1, 1, tzinfo=KST
        )

    def test_next_month_count(self):
        assert next_period(datetime(2019, 11, 15, tzinfo=KST), Granularity.MONTHLY, 14) == datetime(
            2021, 1, 1, tzinfo=KST
        )

    def test_next_year(self):
        assert next_period(datetime(2019, 6, 22, tzinfo=KST), Granularity.YEARLY) == datetime(
            2020, 1, 1, tzinfo=KST
        )

    def test_next_past_year_9999_clamps(self):
        last = datetime(9999, 12, 31, 12, 0, tzinfo=KST)
        for granularity in Granularity:
            assert next_period(last, granularity) == datetime.max.replace(tzinfo=KST)


class TestPeriodBucket:
    """Tests for the bucket value object."""

    def test_labels(self):
        moment = datetime(2019, 6, 2, 3, tzinfo=KST)
        assert PeriodBucket.containing(moment, Granularity.DAILY).label == "2019.06.02"
        assert PeriodBucket.containing(moment, Granularity.MONTHLY).label == "2019.06"
        assert PeriodBucket.containing(moment, Granularity.YEARLY).label == "2019"

    def test_str_is_label(self):
        bucket = PeriodBucket.containing(datetime(2019, 6, 2, tzinfo=KST), Granularity.MONTHLY)
        assert str(bucket) == "2019.06"

    def test_half_open(self):
        """Start is inside the bucket, end belongs to the next one."""
        bucket = PeriodBucket.containing(datetime(2019, 6, 22, 12, tzinfo=KST), Granularity.DAILY)
        assert bucket.contains(bucket.start)
        assert bucket.contains(bucket.end - timedelta(microseconds=1))
        assert not bucket.contains(bucket.end)

    def test_buckets_are_hashable_and_equal_by_value(self):
        moment = datetime(2019, 6, 22, tzinfo=KST)
        assert PeriodBucket.containing(moment, Granularity.DAILY) == PeriodBucket.containing(
            moment + timedelta(hours=5), Granularity.DAILY
        )
        assert len({PeriodBucket.containing(moment, Granularity.DAILY)}) == 1


class TestPartition:
    """Tests for partition()."""

    def test_single_instant(self, jun22_0900):
        buckets = partition(jun22_0900, jun22_0900, Granularity.DAILY)
        assert [b.label for b in buckets] == ["2019.06.22"]

    def test_two_days(self, jun22_0900, jun23_2359):
        buckets = partition(jun22_0900, jun23_2359, Granularity.DAILY)
        assert [b.label for b in buckets] == ["2019.06.22", "2019.06.23"]
        assert buckets[0].end == buckets[1].start

    def test_end_unit_included(self, jun22_0900):
        """An end exactly at midnight adds the day it starts."""
        # 2019-06-23 00:00:00 +09:00
        buckets = partition(jun22_0900, 1561215600, Granularity.DAILY)
        assert [b.label for b in buckets] == ["2019.06.22", "2019.06.23"]

    def test_buckets_are_contiguous_and_ordered(self):
        buckets = partition(1559347200, 1562025599, Granularity.DAILY)
        assert len(buckets) == 32
        for before, after in zip(buckets, buckets[1:]):
            assert before.end == after.start

    def test_first_and_last_contain_endpoints(self, jun22_0900):
        end = 1623488400
        buckets = partition(jun22_0900, end, Granularity.MONTHLY)
        assert buckets[0].contains(to_datetime(jun22_0900))
        assert buckets[-1].contains(to_datetime(end))
        assert len(buckets) == 25

    def test_yearly(self, jun22_0900):
        buckets = partition(jun22_0900, 1876780800, "yearly")
        assert [b.label for b in buckets] == [str(year) for year in range(2019, 2030)]

    def test_granularity_string(self, jun22_0900):
        assert partition(jun22_0900, jun22_0900, "MONTHLY")[0].granularity is Granularity.MONTHLY

    def test_datetime_inputs(self):
        start = datetime(2019, 12, 31, 23, 0, tzinfo=KST)
        end = datetime(2020, 1, 1, 1, 0, tzinfo=KST)
        assert [b.label for b in partition(start, end, Granularity.DAILY)] == ["2019.12.31", "2020.01.01"]

    def test_offset_changes_boundaries(self, jun22_0900):
        """The same instants split differently at UTC."""
        # 2019-06-22 08:00 .. 09:00 +09:00 straddles midnight UTC
        buckets = partition(1561158000, jun22_0900, Granularity.DAILY, tz=timezone.utc)
        assert [b.label for b in buckets] == ["2019.06.21", "2019.06.22"]
        assert len(partition(1561158000, jun22_0900, Granularity.DAILY)) == 1

    def test_reversed_range(self, jun22_0900, jun23_2359):
        with pytest.raises(InvalidRangeError) as exc_info:
            partition(jun23_2359, jun22_0900, Granularity.DAILY)
        assert exc_info.value.start_at == jun23_2359
        assert exc_info.value.end_at == jun22_0900

    def test_reversed_range_with_unknown_granularity(self, jun22_0900, jun23_2359):
        with pytest.raises(InvalidRangeError):
            partition(jun23_2359, jun22_0900, "fortnightly")

    def test_unknown_granularity(self, jun22_0900):
        with pytest.raises(UnsupportedGranularityError):
            partition(jun22_0900, jun22_0900, "weekly")

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_last_representable_year(self, granularity):
        moment = datetime(9999, 12, 31, 6, 0, tzinfo=KST)
        buckets = partition(moment, moment, granularity)
        assert len(buckets) == 1
        assert buckets[0].contains(moment)
        assert buckets[0].end == datetime.max.replace(tzinfo=KST)

    def test_iter_buckets_is_lazy(self):
        start = datetime(2019, 1, 1, tzinfo=KST)
        iterator = iter_buckets(start, datetime(2119, 1, 1, tzinfo=KST), Granularity.DAILY)
        assert next(iterator).label == "2019.01.01"
        assert next(iterator).label == "2019.01.02"


class TestPeriodIndexName:
    """Tests for period_index_name()."""

    @pytest.mark.parametrize(
        ("granularity", "expected"),
        [
            (Granularity.DAILY, "logs_2019.06.22"),
            (Granularity.MONTHLY, "logs_2019.06"),
            (Granularity.YEARLY, "logs_2019"),
            ("daily", "logs_2019.06.22"),
        ],
    )
    def test_names(self, jun22_0900, granularity, expected):
        assert period_index_name("logs_", jun22_0900, granularity) == expected

    def test_uses_reference_offset(self):
        """23:30 UTC on the 21st is already the 22nd at +09:00."""
        moment = datetime(2019, 6, 21, 23, 30, tzinfo=timezone.utc)
        assert period_index_name("logs_", moment, Granularity.DAILY) == "logs_2019.06.22"
        assert period_index_name("logs_", moment, Granularity.DAILY, tz=timezone.utc) == "logs_2019.06.21"

    def test_name_agrees_with_partition(self, jun22_0900, jun23_2359):
        names = {period_index_name("p_", t, "daily") for t in range(jun22_0900, jun23_2359, 3600)}
        assert names == {"p_" + b.label for b in partition(jun22_0900, jun23_2359, "daily")}
