"""
Unit tests for the date helpers.
"""

from datetime import datetime, timezone

import pytest

from eventscout.utils.dates import (
    add_months,
    coerce_api_datetime,
    format_api_datetime,
    get_date_range_display,
    get_days_between,
    is_api_datetime,
    is_event_past,
    is_event_today,
    to_datetime,
)

NOW = datetime(2026, 3, 10, 12, 0, 0)


class TestToDatetime:
    def test_combines_date_and_time(self):
        assert to_datetime("2026-03-10", "19:30:00") == datetime(2026, 3, 10, 19, 30)

    def test_missing_time_is_midnight(self):
        assert to_datetime("2026-03-10", "") == datetime(2026, 3, 10)
        assert to_datetime("2026-03-10", "99:00:00") == datetime(2026, 3, 10)

    def test_invalid_date(self):
        assert to_datetime("2026-02-30") is None


class TestAddMonths:
    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (datetime(2026, 1, 31), 1, datetime(2026, 2, 28)),
            (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
            (datetime(2026, 12, 15), 1, datetime(2027, 1, 15)),
            (datetime(2026, 3, 10), 14, datetime(2027, 5, 10)),
        ],
    )
    def test_clamps(self, start, months, expected):
        assert add_months(start, months) == expected


class TestEventDayHelpers:
    def test_is_event_today(self):
        assert is_event_today("2026-03-10", now=NOW)
        assert not is_event_today("2026-03-11", now=NOW)
        assert not is_event_today("", now=NOW)

    def test_is_event_past(self):
        assert is_event_past("2026-03-10", "11:00:00", now=NOW)
        assert not is_event_past("2026-03-10", "13:00:00", now=NOW)
        assert not is_event_past("bad", now=NOW)

    def test_get_days_between(self):
        assert get_days_between("2026-03-10", "2026-03-13") == 3
        assert get_days_between("2026-03-10", "") == 0


class TestGetDateRangeDisplay:
    @pytest.mark.parametrize(
        "start,end,expected",
        [
            ("2026-03-05", "2026-03-05", "Mar 5, 2026"),
            ("2026-03-05", "", "Mar 5, 2026"),
            ("2026-03-05", "2026-03-07", "Mar 5 - 7, 2026"),
            ("2026-03-30", "2026-04-02", "Mar 30 - Apr 2, 2026"),
            ("2026-12-30", "2027-01-02", "December 30, 2026 - January 2, 2027"),
            ("", "2026-03-05", ""),
        ],
    )
    def test_display(self, start, end, expected):
        assert get_date_range_display(start, end) == expected


class TestApiDatetime:
    def test_format_aware(self):
        moment = datetime(2026, 3, 10, 14, 5, 9, 123456, tzinfo=timezone.utc)
        assert format_api_datetime(moment) == "2026-03-10T14:05:09Z"

    def test_format_naive_is_local(self):
        naive = datetime(2026, 3, 10, 14, 5, 9)
        expected = naive.astimezone().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        assert format_api_datetime(naive) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2020-08-01T14:00:00Z", True),
            ("2020-08-01T14:00:00", False),
            ("2020-08-01T14:00:00.000Z", False),
            ("2020-08-01", False),
        ],
    )
    def test_is_api_datetime(self, value, expected):
        assert is_api_datetime(value) is expected

    def test_coerce(self):
        assert coerce_api_datetime("2020-08-01T14:00:00Z") == "2020-08-01T14:00:00Z"
        assert coerce_api_datetime("2020-08-01T16:00:00+02:00") == "2020-08-01T14:00:00Z"
        assert coerce_api_datetime("soon") is None
        assert coerce_api_datetime(None) is None
