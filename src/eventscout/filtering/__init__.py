"""
Filter engine: search, category, date bucket, location and price filters.
"""

from eventscout.utils.dates import is_event_upcoming

from .filters import (
    filter_events,
    matches_category,
    matches_date_filter,
    matches_location,
    matches_price_filter,
    matches_search_term,
)

__all__ = [
    "filter_events",
    "is_event_upcoming",
    "matches_category",
    "matches_date_filter",
    "matches_location",
    "matches_price_filter",
    "matches_search_term",
]
