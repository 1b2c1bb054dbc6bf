"""
Filter engine over normalized events.

All functions are pure and order-preserving. ``now`` may be injected for
deterministic results; it defaults to the current local time.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union

from eventscout.schemas.event import DateFilter, Event, EventFilters, PriceFilter
from eventscout.utils.dates import add_months, is_event_upcoming, start_of_day, to_datetime


def matches_search_term(event: Event, search_term: str) -> bool:
    """
    Case-insensitive substring match on name, description, venue name and
    address, and category/genre/subgenre names.
    """
    search = search_term.lower()
    fields = (
        event.name,
        event.description,
        event.venue.name,
        event.venue.address,
        event.category.name,
        event.genre.name,
        event.sub_genre.name,
    )
    return any(search in field.lower() for field in fields)


def matches_category(event: Event, category: str) -> bool:
    """Exact, case-insensitive match against the category *name*."""
    return event.category.name.lower() == category.lower()


def matches_date_filter(
    event: Event,
    date_filter: Union[DateFilter, str, None],
    now: Optional[datetime] = None,
) -> bool:
    """
    Check the event start against a relative date bucket.

    ``today``, ``this-week`` and ``this-month`` are half-open ranges starting
    at local midnight; ``upcoming`` compares against the current instant.
    Unknown or empty buckets always match.
    """
    if not date_filter:
        return True

    try:
        bucket = DateFilter(date_filter)
    except ValueError:
        return True

    if bucket == DateFilter.ALL:
        return True

    now = now or datetime.now()
    if bucket == DateFilter.UPCOMING:
        return is_event_upcoming(event.start_date, event.start_time, now=now)

    start = to_datetime(event.start_date, event.start_time)
    if start is None:
        return False

    today = start_of_day(now)
    if bucket == DateFilter.TODAY:
        end = today + timedelta(days=1)
    elif bucket == DateFilter.THIS_WEEK:
        end = today + timedelta(days=7)
    else:
        end = add_months(today, 1)

    return today <= start < end


def matches_location(event: Event, location: str) -> bool:
    """
    Case-insensitive substring of venue address, name or city.

    A blank location matches everything; otherwise the text is matched as
    given, surrounding whitespace included.
    """
    if not location.strip():
        return True
    needle = location.lower()
    return any(
        needle in field.lower()
        for field in (event.venue.address, event.venue.name, event.venue.city)
    )


def matches_price_filter(event: Event, price: Union[PriceFilter, str, None]) -> bool:
    """
    ``free``: any range with min 0, or no price info at all.
    ``paid``: any range with min > 0.
    """
    if not price:
        return True

    try:
        bucket = PriceFilter(price)
    except ValueError:
        return True

    if bucket == PriceFilter.FREE:
        if not event.price_ranges:
            return True
        return any(r.min == 0 for r in event.price_ranges)

    if bucket == PriceFilter.PAID:
        return any(r.min > 0 for r in event.price_ranges)

    return True


def filter_events(
    events: Iterable[Event],
    filters: Optional[EventFilters],
    now: Optional[datetime] = None,
) -> List[Event]:
    """
    Return the events matching every set field of ``filters``.

    Args:
        events: Normalized events
        filters: Filter specification (None or empty matches everything)
        now: Reference instant for date buckets

    Returns:
        Matching events in their original order
    """
    events = list(events)
    if filters is None:
        return events

    now = now or datetime.now()
    result = []

    for event in events:
        if filters.search and not matches_search_term(event, filters.search):
            continue
        if filters.category and not matches_category(event, filters.category):
            continue
        if filters.date and not matches_date_filter(event, filters.date, now=now):
            continue
        if filters.location and not matches_location(event, filters.location):
            continue
        if filters.price and not matches_price_filter(event, filters.price):
            continue
        result.append(event)

    return result
