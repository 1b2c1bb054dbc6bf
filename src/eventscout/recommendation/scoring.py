"""
Client-side recommendation scoring.

Used when recommending from an already-fetched pool of events with no
access to the provider. Scores are small integers:

    +10  category/genre/subgenre id preferred (see event_matches_user_preferences)
    +3   a preferred location is a substring of the venue city or address
    +2   first price range min <= max_price, or no price info at all
    +1   status is onsale

Equal scores are ordered by event id ascending.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from eventscout.schemas.event import Event, UserPreferences
from eventscout.schemas.taxonomy import is_umbrella_segment
from eventscout.utils.dates import is_event_upcoming, to_datetime

CATEGORY_MATCH_SCORE = 10
LOCATION_MATCH_SCORE = 3
PRICE_MATCH_SCORE = 2
ONSALE_SCORE = 1

ScoredEvent = Tuple[Event, int]


def event_matches_user_preferences(
    event: Event, preferences: Optional[UserPreferences]
) -> bool:
    """
    True when the event falls in one of the user's preferred categories.

    Matches on the category, genre or subgenre id. An umbrella segment
    (Music, Arts & Theatre, Film) selected by the user also matches every
    event filed under it whatever its genre.
    """
    if preferences is None or not preferences.categories:
        return False

    preferred = set(preferences.categories)
    if {event.category.id, event.genre.id, event.sub_genre.id} & (preferred - {""}):
        return True

    return is_umbrella_segment(event.category.id) and event.category.id in preferred


def matches_preferred_location(event: Event, locations: Iterable[str]) -> bool:
    city = event.venue.city.lower()
    address = event.venue.address.lower()
    return any(
        loc.lower() in city or loc.lower() in address for loc in locations if loc
    )


def calculate_event_score(event: Event, preferences: UserPreferences) -> int:
    score = 0

    if event_matches_user_preferences(event, preferences):
        score += CATEGORY_MATCH_SCORE

    if matches_preferred_location(event, preferences.locations):
        score += LOCATION_MATCH_SCORE

    if not event.price_ranges or event.price_ranges[0].min <= preferences.max_price:
        score += PRICE_MATCH_SCORE

    if event.is_onsale:
        score += ONSALE_SCORE

    return score


def sort_by_score(scored: Sequence[ScoredEvent]) -> List[ScoredEvent]:
    """Score descending, then event id ascending."""
    return sorted(scored, key=lambda item: (-item[1], item[0].id))


def sort_by_start(events: Iterable[Event]) -> List[Event]:
    """Soonest first; events without a usable start go last."""
    return sorted(
        events,
        key=lambda e: (to_datetime(e.start_date, e.start_time) or datetime.max, e.id),
    )


def get_client_recommendations(
    events: Iterable[Event],
    preferences: Optional[UserPreferences],
    saved_ids: Iterable[str] = (),
    limit: int = 10,
    include_history: bool = False,
    now: Optional[datetime] = None,
) -> List[Event]:
    """
    Rank a pool of events for one user.

    Args:
        events: Candidate pool
        preferences: Stored preferences (None when never onboarded)
        saved_ids: Ids already saved or attended
        limit: Max events returned
        include_history: Keep events in ``saved_ids``
        now: Reference instant for the upcoming check

    Returns:
        Category-matching events by score, topped up with the rest by score;
        soonest-first when the user has no preferred categories
    """
    now = now or datetime.now()
    excluded = set() if include_history else set(saved_ids)

    candidates = [
        e for e in events
        if is_event_upcoming(e.start_date, e.start_time, now=now) and e.id not in excluded
    ]

    if preferences is None or not preferences.categories:
        return sort_by_start(candidates)[:limit]

    scored = [(e, calculate_event_score(e, preferences)) for e in candidates]
    matching = [item for item in scored if event_matches_user_preferences(item[0], preferences)]
    others = [item for item in scored if not event_matches_user_preferences(item[0], preferences)]

    ranked = sort_by_score(matching) + sort_by_score(others)
    return [event for event, _ in ranked[:limit]]


def get_popular_events(
    events: Iterable[Event], limit: int = 5, now: Optional[datetime] = None
) -> List[Event]:
    """Upcoming events, soonest first."""
    now = now or datetime.now()
    upcoming = [e for e in events if is_event_upcoming(e.start_date, e.start_time, now=now)]
    return sort_by_start(upcoming)[:limit]
