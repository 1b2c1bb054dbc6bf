"""
Unit tests for the filter engine.

All date-dependent tests inject ``now`` (2026-03-10 12:00, a Tuesday).
"""

from datetime import datetime, timedelta

import pytest

from eventscout.filtering import (
    filter_events,
    is_event_upcoming,
    matches_category,
    matches_date_filter,
    matches_location,
    matches_price_filter,
    matches_search_term,
)
from eventscout.schemas.event import CategoryReference, EventFilters, PriceRange

NOW = datetime(2026, 3, 10, 12, 0, 0)


class TestMatchesSearchTerm:
    """Tests for free-text search."""

    @pytest.mark.parametrize("term", ["jazz", "JAZZ", "test venue", "main st", "music"])
    def test_matches_fields(self, create_event, term):
        event = create_event(name="Late Jazz Set")
        assert matches_search_term(event, term)

    def test_matches_genre_names(self, create_event):
        event = create_event(genre=CategoryReference(id="g", name="Bebop"))
        assert matches_search_term(event, "bebop")

    def test_no_match(self, create_event):
        assert not matches_search_term(create_event(), "opera")


class TestMatchesCategory:
    def test_name_case_insensitive(self, create_event):
        assert matches_category(create_event(), "music")

    def test_not_id_based(self, create_event):
        event = create_event()
        assert not matches_category(event, event.category.id)


class TestMatchesDateFilter:
    """Tests for relative date buckets."""

    def test_today_includes_earlier_today(self, create_event):
        event = create_event(start_date="2026-03-10", start_time="08:00:00")
        assert matches_date_filter(event, "today", now=NOW)

    def test_today_excludes_tomorrow(self, create_event):
        event = create_event(start_date="2026-03-11", start_time="00:00:00")
        assert not matches_date_filter(event, "today", now=NOW)

    def test_this_week_is_seven_days_from_midnight(self, create_event):
        inside = create_event(start_date="2026-03-16", start_time="23:59:59")
        outside = create_event(start_date="2026-03-17", start_time="")
        assert matches_date_filter(inside, "this-week", now=NOW)
        assert not matches_date_filter(outside, "this-week", now=NOW)

    def test_this_month_adds_calendar_month(self, create_event):
        inside = create_event(start_date="2026-04-09")
        outside = create_event(start_date="2026-04-10", start_time="")
        assert matches_date_filter(inside, "this-month", now=NOW)
        assert not matches_date_filter(outside, "this-month", now=NOW)

    def test_this_month_clamps_day(self, create_event):
        now = datetime(2026, 1, 31, 9, 0, 0)
        event = create_event(start_date="2026-02-27")
        assert matches_date_filter(event, "this-month", now=now)
        assert not matches_date_filter(create_event(start_date="2026-02-28", start_time=""), "this-month", now=now)

    def test_upcoming_uses_current_instant(self, create_event):
        later = create_event(start_date="2026-03-10", start_time="12:00:01")
        earlier = create_event(start_date="2026-03-10", start_time="11:59:59")
        assert matches_date_filter(later, "upcoming", now=NOW)
        assert not matches_date_filter(earlier, "upcoming", now=NOW)

    @pytest.mark.parametrize("bucket", ["", None, "all", "next-decade"])
    def test_unknown_buckets_match(self, create_event, bucket):
        event = create_event(start_date="2020-01-01")
        assert matches_date_filter(event, bucket, now=NOW)

    def test_invalid_start_never_matches(self, create_event):
        event = create_event(start_date="")
        for bucket in ("today", "this-week", "this-month", "upcoming"):
            assert not matches_date_filter(event, bucket, now=NOW)


class TestIsEventUpcoming:
    def test_one_second_either_side(self):
        assert is_event_upcoming("2026-03-10", "12:00:01", now=NOW)
        assert not is_event_upcoming("2026-03-10", "11:59:59", now=NOW)
        assert not is_event_upcoming("2026-03-10", "12:00:00", now=NOW)

    def test_date_only_means_midnight(self):
        assert not is_event_upcoming("2026-03-10", now=NOW)
        assert is_event_upcoming("2026-03-11", now=NOW)

    def test_invalid_date(self):
        assert not is_event_upcoming("2026-02-30", now=NOW)

    def test_defaults_to_current_time(self):
        tomorrow = (datetime.now() + timedelta(days=1)).strftime("%Y-%m-%d")
        assert is_event_upcoming(tomorrow)


class TestMatchesLocation:
    @pytest.mark.parametrize("location", ["chicago", "Test Venue", "main st", "CHI"])
    def test_substring_of_venue_fields(self, create_event, location):
        assert matches_location(create_event(), location)

    def test_no_match(self, create_event):
        assert not matches_location(create_event(), "Boston")

    def test_blank_matches_everything(self, create_event):
        assert matches_location(create_event(), "   ")

    def test_surrounding_whitespace_is_kept(self, create_event):
        assert not matches_location(create_event(), " chicago ")
        assert matches_location(create_event(), "1 main st")


class TestMatchesPriceFilter:
    """Tests for price buckets."""

    def test_free_includes_events_without_prices(self, create_event):
        assert matches_price_filter(create_event(price_min=None), "free")

    def test_free_excludes_paid(self, create_event):
        assert not matches_price_filter(create_event(price_min=5.0), "free")

    def test_free_any_zero_range(self, create_event):
        event = create_event(
            price_ranges=[PriceRange(min=30), PriceRange(min=0)]
        )
        assert matches_price_filter(event, "free")

    def test_paid(self, create_event):
        assert matches_price_filter(create_event(price_min=5.0), "paid")
        assert not matches_price_filter(create_event(price_min=0.0), "paid")
        assert not matches_price_filter(create_event(price_min=None), "paid")

    @pytest.mark.parametrize("bucket", ["all", "", None, "cheap"])
    def test_other_buckets_match(self, create_event, bucket):
        assert matches_price_filter(create_event(), bucket)


class TestFilterEvents:
    """Tests for combined filtering."""

    def test_no_filters(self, sample_events):
        assert filter_events(sample_events, None) == sample_events
        assert filter_events(sample_events, EventFilters(), now=NOW) == sample_events

    def test_combined_filters_preserve_order(self, sample_events):
        filters = EventFilters(category="music", location="chicago", price="paid")
        result = filter_events(sample_events, filters, now=NOW)
        assert [e.id for e in result] == ["M1"]

    def test_date_and_price(self, sample_events):
        filters = EventFilters(date="this-week", price="free")
        result = filter_events(sample_events, filters, now=NOW)
        assert [e.id for e in result] == ["F1", "N1"]

    def test_search(self, sample_events):
        result = filter_events(sample_events, EventFilters(search="bulls"), now=NOW)
        assert [e.id for e in result] == ["S1"]
