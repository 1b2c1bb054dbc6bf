"""
Event search pipeline.

Turns an application-level search request (filters, paging, explicit
provider parameters) into one provider query, then normalizes and
post-filters the listing:

    request -> provider params -> fetch -> map_to_event -> date/past filter
            -> price filter -> dedup -> SearchResult

The provider has no price filter, so the price bucket is applied here after
normalization.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
import logging

from eventscout.configs import Config
from eventscout.filtering.filters import matches_price_filter
from eventscout.ingestion.adapters.ticketmaster import TicketmasterAdapter
from eventscout.ingestion.deduplication import EventDeduplicator, IdDeduplicator
from eventscout.ingestion.normalization import map_to_event
from eventscout.schemas.event import DateFilter, Event, EventFilters, PageInfo
from eventscout.utils.dates import (
    coerce_api_datetime,
    format_api_datetime,
    is_event_upcoming,
    parse_date,
    start_of_day,
)

logger = logging.getLogger(__name__)

THIS_WEEK_DAYS = 7
THIS_MONTH_DAYS = 30


@dataclass
class SearchRequest:
    """
    One search over the provider.

    ``params`` carries raw provider parameters (radius, unit, geoPoint,
    venueId, startDateTime...) which take precedence over values derived
    from ``filters``.
    """
    filters: EventFilters = field(default_factory=EventFilters)
    include_past: bool = False
    size: Optional[int] = None
    page: int = 0
    sort: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchResult:
    events: List[Event]
    total: int
    page: PageInfo

    @property
    def count(self) -> int:
        return len(self.events)


def build_date_window(
    date_filter: Optional[str],
    include_past: bool,
    now: datetime,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Provider ``startDateTime``/``endDateTime`` window for a date bucket.

    Unlike the filter engine, ``this-week`` and ``this-month`` run from the
    current instant for 7 and 30 days. Without a bucket the window starts
    now unless past events are requested.

    Returns:
        (start, end); either may be None
    """
    if not date_filter:
        return (None if include_past else now), None

    if date_filter == DateFilter.TODAY.value:
        day = start_of_day(now)
        return day, day + timedelta(days=1) - timedelta(seconds=1)
    if date_filter == DateFilter.THIS_WEEK.value:
        return now, now + timedelta(days=THIS_WEEK_DAYS)
    if date_filter == DateFilter.THIS_MONTH.value:
        return now, now + timedelta(days=THIS_MONTH_DAYS)
    if date_filter == DateFilter.UPCOMING.value:
        return now, None

    return None, None


class EventSearchPipeline:
    """
    Search events through a source adapter.

    Example:
        >>> with TicketmasterAdapter.from_config() as adapter:
        ...     pipeline = EventSearchPipeline(adapter)
        ...     result = pipeline.search(SearchRequest(filters=EventFilters(location="Austin")))
    """

    def __init__(
        self,
        adapter: TicketmasterAdapter,
        deduplicator: Optional[EventDeduplicator] = None,
    ):
        self.adapter = adapter
        self.deduplicator = deduplicator or IdDeduplicator()
        settings = Config.get_section("ticketmaster")
        self.default_size = int(settings.get("default_page_size", 50))
        self.default_sort = settings.get("default_sort", "relevance,desc")

    def build_params(self, request: SearchRequest, now: datetime) -> Dict[str, Any]:
        """
        Merge filters, paging and explicit params into provider parameters.

        Explicit ``startDateTime``/``endDateTime`` disable the date bucket;
        malformed values are reparsed and dropped when unparseable.
        """
        filters = request.filters
        explicit = dict(request.params)

        start = explicit.pop("startDateTime", None)
        end = explicit.pop("endDateTime", None)
        if not start and not end:
            window_start, window_end = build_date_window(
                filters.date, request.include_past, now
            )
            start = format_api_datetime(window_start) if window_start else None
            end = format_api_datetime(window_end) if window_end else None

        params: Dict[str, Any] = {
            "keyword": explicit.pop("keyword", None) or filters.search,
            "classificationName": explicit.pop("classificationName", None) or filters.category,
            "city": explicit.pop("city", None) or filters.location,
            "startDateTime": coerce_api_datetime(start),
            "endDateTime": coerce_api_datetime(end),
            "size": request.size or self.default_size,
            "page": request.page,
            "sort": request.sort or self.default_sort,
        }
        params.update({k: v for k, v in explicit.items() if v not in (None, "")})
        return {k: v for k, v in params.items() if v not in (None, "")}

    def search(self, request: SearchRequest, now: Optional[datetime] = None) -> SearchResult:
        """
        Run one search.

        Args:
            request: Search request
            now: Reference instant (defaults to current local time)

        Returns:
            SearchResult with normalized, post-filtered events

        Raises:
            SourceError: Propagated from the adapter
        """
        now = now or datetime.now()
        params = self.build_params(request, now)
        logger.info(f"Searching events with params: {sorted(params)}")

        result = self.adapter.fetch_events(**params)
        events = [map_to_event(raw) for raw in result.raw_data]
        fetched = len(events)

        events = [
            e for e in events
            if parse_date(e.start_date) is not None
            and (request.include_past or is_event_upcoming(e.start_date, e.start_time, now=now))
        ]

        price = request.filters.price
        if price:
            events = [e for e in events if matches_price_filter(e, price)]

        events = self.deduplicator.deduplicate(events)
        logger.info(f"Search kept {len(events)} of {fetched} fetched events")

        return SearchResult(
            events=events,
            total=result.page.total_elements or len(events),
            page=result.page,
        )
