"""Unit tests for the calendar date text parser."""
import logging
from datetime import datetime

import pytest

from processor.date_parser import (
    UnrecognizedDateFormat,
    parse_date_range,
    parse_date_text,
    parse_date_with_time_range,
)


class TestSingleDates:
    """Test cases for the 3 and 4 token shapes."""

    def test_month_day_year(self):
        """Test the plain `Month D, YYYY` shape."""
        assert parse_date_text("July 4, 2020") == [datetime(2020, 7, 4)]

    def test_month_day_year_weekday(self):
        """Test the shape with a trailing weekday."""
        assert parse_date_text("August 23, 2019, Friday") == [datetime(2019, 8, 23)]

    def test_weekday_is_not_cross_checked(self):
        """Test that a wrong weekday does not change or reject the date."""
        assert parse_date_text("August 23, 2019, Monday") == [datetime(2019, 8, 23)]

    def test_abbreviated_month(self):
        """Test abbreviated month names."""
        assert parse_date_text("Sep 26, 2019") == [datetime(2019, 9, 26)]

    def test_leap_day(self):
        """Test that February 29 parses in a leap year."""
        assert parse_date_text("February 29, 2020") == [datetime(2020, 2, 29)]

    def test_extra_whitespace_is_ignored(self):
        """Test that runs of whitespace split like single spaces."""
        assert parse_date_text("  July   4,  2020 ") == [datetime(2020, 7, 4)]


class TestDateRanges:
    """Test cases for the 5 and 8 token range shapes."""

    def test_dash_range_expands_every_day(self):
        """Test `Month D – D2, YYYY` expands inclusively."""
        dates = parse_date_text("September 26 – 28, 2019")

        assert dates == [
            datetime(2019, 9, 26),
            datetime(2019, 9, 27),
            datetime(2019, 9, 28),
        ]

    def test_ampersand_range_with_weekdays(self):
        """Test `Month D1 & D2, YYYY, Weekday1 & Weekday2`."""
        dates = parse_date_text("October 14 & 15, 2019, Monday & Tuesday")

        assert dates == [datetime(2019, 10, 14), datetime(2019, 10, 15)]

    def test_range_count_matches_span(self):
        """Test that a range yields end - start + 1 ascending days with no gaps."""
        dates = parse_date_text("December 9 – 13, 2019")

        assert len(dates) == 13 - 9 + 1
        assert dates == sorted(dates)
        for earlier, later in zip(dates, dates[1:]):
            assert (later - earlier).days == 1

    def test_single_day_range(self):
        """Test a range whose start and end are the same day."""
        assert parse_date_text("May 1 – 1, 2020") == [datetime(2020, 5, 1)]

    def test_reversed_range_fails(self):
        """Test that a range ending before it starts is rejected."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text("September 28 – 26, 2019")

    def test_range_with_invalid_end_day_fails(self):
        """Test that an impossible end day is rejected."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text("September 30 – 31, 2019")

    def test_range_shape_function_directly(self):
        """Test the range shape function on pre-split tokens."""
        tokens = ["March", "16", "–", "20,", "2020"]
        dates = parse_date_range(tokens, "March 16 – 20, 2020")

        assert dates[0] == datetime(2020, 3, 16)
        assert dates[-1] == datetime(2020, 3, 20)


class TestTimes:
    """Test cases for the 6 and 9 token shapes carrying times."""

    def test_date_with_time(self):
        """Test `Month D, YYYY, Weekday, H AM/PM`."""
        dates = parse_date_text("August 26, 2019, Monday, 8 AM")

        assert dates == [datetime(2019, 8, 26, 8, 0)]

    def test_date_with_pm_time(self):
        """Test that PM times are converted to 24 hours."""
        assert parse_date_text("August 26, 2019, Monday, 5 PM") == [datetime(2019, 8, 26, 17, 0)]

    def test_date_with_minutes(self):
        """Test times with minutes."""
        assert parse_date_text("August 26, 2019, Monday, 8:30 AM") == [datetime(2019, 8, 26, 8, 30)]

    def test_noon_and_midnight(self):
        """Test 12 PM and 12 AM."""
        assert parse_date_text("August 26, 2019, Monday, 12 PM") == [datetime(2019, 8, 26, 12, 0)]
        assert parse_date_text("August 26, 2019, Monday, 12 AM") == [datetime(2019, 8, 26, 0, 0)]

    def test_invalid_time_fails(self):
        """Test that an unparsable time is rejected."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text("August 26, 2019, Monday, noon time")

    def test_time_range_keeps_start_time_by_default(self):
        """Test that the 9 token shape reduces to date plus start time."""
        dates = parse_date_text("April 10, 2020, Friday, 9 AM – 5 PM")

        assert dates == [datetime(2020, 4, 10, 9, 0)]

    def test_time_range_reduced_to_date_only(self):
        """Test the date-only truncation of the 9 token shape."""
        dates = parse_date_text("April 10, 2020, Friday, 9 AM – 5 PM", keep_start_time=False)

        assert dates == [datetime(2020, 4, 10)]

    def test_time_range_shape_function_both_targets(self):
        """Test both truncation targets on pre-split tokens."""
        text = "April 10, 2020, Friday, 1 PM – 3 PM"
        tokens = text.split()

        assert parse_date_with_time_range(tokens, text, True) == [datetime(2020, 4, 10, 13, 0)]
        assert parse_date_with_time_range(tokens, text, False) == [datetime(2020, 4, 10)]


class TestUnrecognizedFormats:
    """Test cases for texts outside the known shapes."""

    @pytest.mark.parametrize("text", [
        "",
        "TBA",
        "Spring Break",
        "August 26, 2019, Monday, 8 AM EST",
        "one two three four five six seven eight nine ten",
    ])
    def test_unknown_token_counts_fail(self, text):
        """Test that token counts outside the shapes are rejected."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text(text)

    @pytest.mark.parametrize("text", [
        "July 4 2020",
        "July 4, 2020,",
        "August 23, 2019 Friday",
        "May 1, 2020, Online",
        "September 26 or 28, 2019",
        "September 26, – 28, 2019",
        "September 26 – 28 2019",
        "August 26, 2019, Room, 8 AM",
        "August 26, 2019, Monday 8 AM",
        "October 14 and 15, 2019, Monday & Tuesday",
        "October 14 & 15, 2019, Monday and Tuesday",
        "October 14 & 15, 2019, Monday & Someday",
        "October 14 & 15 2019, Monday & Tuesday",
        "April 10, 2020, Friday, 9 AM to 5 PM",
        "April 10, 2020, Friday, 9 AM – 5 XM",
        "April 10, 2020, Lunch, 9 AM – 5 PM",
    ])
    def test_tokens_outside_template_fail(self, text):
        """Test that separators, weekdays and commas must follow the template."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text(text)

    def test_time_range_template_checked_for_date_only_target(self):
        """Test that reducing to the date still checks the whole time range text."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text("April 10, 2020, Friday, 9 AM to 5 PM", keep_start_time=False)

    def test_hyphen_and_abbreviated_weekday_accepted(self):
        """Test the accepted separator and weekday variants."""
        assert len(parse_date_text("September 26 - 28, 2019")) == 3
        assert parse_date_text("August 23, 2019, Fri") == [datetime(2019, 8, 23)]

    def test_unknown_month_fails(self):
        """Test that a bad month inside a known shape is rejected."""
        with pytest.raises(UnrecognizedDateFormat):
            parse_date_text("Smarch 4, 2020")

    def test_error_is_a_value_error_with_text(self):
        """Test that the failure carries the offending text."""
        with pytest.raises(ValueError) as exc_info:
            parse_date_text("Spring Break")

        assert exc_info.value.text == "Spring Break"
        assert "not in expected format" in str(exc_info.value)

    def test_failure_is_logged(self, caplog):
        """Test that a parse failure is reported in the log."""
        with caplog.at_level(logging.ERROR, logger='processor.date_parser'):
            with pytest.raises(UnrecognizedDateFormat):
                parse_date_text("Spring Break")

        assert any("Spring Break" in record.message for record in caplog.records)
