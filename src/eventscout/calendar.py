"""
Google Calendar "add event" links.
"""

from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from eventscout.schemas.event import Event, Venue
from eventscout.utils.dates import parse_date, parse_time

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render?action=TEMPLATE"
MAX_DETAILS_LENGTH = 1000
DEFAULT_DURATION = timedelta(hours=1)


def _encode(value: str) -> str:
    # Same escaping as JavaScript's encodeURIComponent
    return quote(value, safe="!~*'()")


def format_calendar_datetime(moment: datetime) -> str:
    return moment.strftime("%Y%m%dT%H%M%S")


def get_formatted_event_location(venue: Optional[Venue]) -> str:
    """``name, address, city, state`` skipping empty parts."""
    if venue is None:
        return ""
    if venue.city and venue.state:
        locality = f"{venue.city}, {venue.state}"
    else:
        locality = venue.city or venue.state
    return ", ".join(p for p in (venue.name, venue.address, locality) if p)


def _calendar_window(event: Event) -> Optional[tuple]:
    start_day = parse_date(event.start_date)
    if start_day is None:
        return None

    start_time = parse_time(event.start_time)
    start = datetime.combine(start_day, start_time or datetime.min.time())

    end_day = parse_date(event.end_date)
    if end_day is None:
        return start, start + DEFAULT_DURATION

    end_time = parse_time(event.end_time)
    if end_time is not None:
        end = datetime.combine(end_day, end_time)
    elif start_time is not None:
        end = datetime.combine(end_day, start_time) + DEFAULT_DURATION
    else:
        end = datetime.combine(end_day, datetime.min.time())
    return start, end


def create_google_calendar_url(event: Event, location: Optional[str] = None) -> str:
    """
    Build a Google Calendar template URL for an event.

    Args:
        event: Normalized event
        location: Location text (defaults to the formatted venue)

    Returns:
        URL with text, dates, details, location and ctz parameters; parts
        without data are omitted
    """
    url = f"{GOOGLE_CALENDAR_URL}&text={_encode(event.name)}"

    window = _calendar_window(event)
    if window is not None:
        start, end = window
        url += f"&dates={format_calendar_datetime(start)}/{format_calendar_datetime(end)}"

    details = event.description
    if len(details) > MAX_DETAILS_LENGTH:
        details = details[: MAX_DETAILS_LENGTH - 3] + "..."
    if details:
        url += f"&details={_encode(details)}"

    if location is None:
        location = get_formatted_event_location(event.venue)
    if location:
        url += f"&location={_encode(location)}"

    if event.timezone:
        url += f"&ctz={_encode(event.timezone)}"

    return url
