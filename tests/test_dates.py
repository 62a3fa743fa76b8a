from zoneinfo import ZoneInfo

import pytest

from todosync.dates import (
    compose_date_key,
    event_date_component,
    extract_time_range,
    normalize_clock,
    parse_date_header,
)
from todosync.models import EventTime

TOKYO = ZoneInfo("Asia/Tokyo")


class TestParseDateHeader:

    @pytest.mark.parametrize("header", ["1/27", "01-27", "1月27日"])
    def test_month_day_notations_are_equivalent(self, header):
        assert parse_date_header(header) == {"month": "01", "day": "27"}

    @pytest.mark.parametrize("header", [
        "2025-1-27", "2025/1/27", "2025/01/27", "2024-01-27", "2025/1月27日",
        "  2025-1-27  "
    ])
    def test_year_is_captured_and_discarded(self, header):
        assert parse_date_header(header) == {"month": "01", "day": "27"}

    @pytest.mark.parametrize(
        "header", ["Ideas", "", "Jan 27", "2025-1", "1/27 meeting", "Notes"])
    def test_unrecognised_headers_yield_none(self, header):
        assert parse_date_header(header) is None

    def test_zero_padding(self):
        assert parse_date_header("3/5") == {"month": "03", "day": "05"}


class TestComposeDateKey:

    def test_builds_iso_key_in_configured_year(self):
        assert compose_date_key("2025", {"month": "01", "day": "27"}) == "2025-01-27"

    def test_impossible_dates_are_rejected(self):
        assert compose_date_key("2025", {"month": "13", "day": "01"}) is None
        assert compose_date_key("2025", {"month": "02", "day": "29"}) is None


class TestExtractTimeRange:

    def test_tilde_range(self):
        time_range = extract_time_range("Team sync 9:00~10:30")
        assert time_range.start == "9:00"
        assert time_range.end == "10:30"

    def test_no_time_means_all_day(self):
        assert extract_time_range("Pay rent") is None

    def test_parenthesised_dash_range_with_spaces(self):
        time_range = extract_time_range("Dentist (14:00 - 15:00)")
        assert (time_range.start, time_range.end) == ("14:00", "15:00")

    def test_open_ended_range(self):
        time_range = extract_time_range("Deep work 13:00~")
        assert time_range.start == "13:00"
        assert time_range.end is None

    def test_hour_only_range(self):
        time_range = extract_time_range("Run 7-8")
        assert (time_range.start, time_range.end) == ("7", "8")


class TestNormalizeClock:

    @pytest.mark.parametrize("value,expected", [
        ("9", "09:00"),
        ("9:05", "09:05"),
        ("14:00", "14:00"),
        ("0:00", "00:00"),
        ("24:00", None),
        ("9:75", None),
        ("", None),
        (None, None),
    ])
    def test_normalize(self, value, expected):
        assert normalize_clock(value) == expected


class TestEventDateComponent:

    def test_all_day(self):
        assert event_date_component(EventTime(date="2025-01-27")) == "2025-01-27"

    def test_timed_is_converted_to_the_configured_zone(self):
        value = EventTime(date_time="2025-01-26T23:30:00Z")
        assert event_date_component(value, TOKYO) == "2025-01-27"

    def test_naive_timed_uses_its_own_date(self):
        value = EventTime(date_time="2025-01-27T14:00:00")
        assert event_date_component(value, TOKYO) == "2025-01-27"

    def test_missing(self):
        assert event_date_component(None) is None
