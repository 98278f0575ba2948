"""Tests for docspine.indexing.granularity."""

import pytest

from docspine.core.errors import UnsupportedGranularityError
from docspine.indexing.granularity import Granularity, HistogramInterval, histogram_interval


class TestGranularityParse:
    """Tests for Granularity.parse()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Granularity.DAILY, Granularity.DAILY),
            ("daily", Granularity.DAILY),
            ("MONTHLY", Granularity.MONTHLY),
            (" Yearly ", Granularity.YEARLY),
        ],
    )
    def test_accepted(self, value, expected):
        assert Granularity.parse(value) is expected

    @pytest.mark.parametrize("value", ["weekly", "", "d", 1, None])
    def test_rejected(self, value):
        with pytest.raises(UnsupportedGranularityError) as exc_info:
            Granularity.parse(value)
        assert exc_info.value.value == value

    def test_rejection_is_value_error(self):
        with pytest.raises(ValueError, match="Unsupported granularity"):
            Granularity.parse("hourly")


class TestGranularityFormats:
    """Label, group and interval formats per unit."""

    def test_label_formats(self):
        assert Granularity.DAILY.label_format == "%Y.%m.%d"
        assert Granularity.MONTHLY.label_format == "%Y.%m"
        assert Granularity.YEARLY.label_format == "%Y"

    def test_group_formats_end_in_wildcard(self):
        for unit in Granularity:
            assert unit.group_format.endswith(".*")

    def test_parents_coarsest_first(self):
        assert Granularity.DAILY.parents == (Granularity.YEARLY, Granularity.MONTHLY)
        assert Granularity.MONTHLY.parents == (Granularity.YEARLY,)
        assert Granularity.YEARLY.parents == ()

    def test_is_str(self):
        assert Granularity.DAILY == "daily"


class TestHistogramInterval:
    def test_granularity_is_calendar_interval(self):
        interval = histogram_interval(Granularity.MONTHLY)
        assert interval == HistogramInterval("calendar_interval", "1M")
        assert interval.to_dict() == {"calendar_interval": "1M"}

    def test_string_is_fixed_interval(self):
        assert histogram_interval("30d").to_dict() == {"fixed_interval": "30d"}
