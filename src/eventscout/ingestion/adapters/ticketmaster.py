"""
Ticketmaster Discovery API adapter.

Implements the provider query contract: None-valued parameters are
dropped, date parameters must already be ``YYYY-MM-DDTHH:mm:ssZ`` and are
rejected before any network call otherwise, and a response without
``_embedded`` is an empty listing rather than an error.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from eventscout.configs import Config
from eventscout.ingestion.errors import SourceError, invalid_date_format
from eventscout.schemas.event import CategoryReference, ClassificationSummary, PageInfo
from eventscout.utils.dates import format_api_datetime, is_api_datetime
from .api_adapter import APIAdapter, APIAdapterConfig
from .base_adapter import FetchResult, SourceType

SOURCE_ID = "ticketmaster"
DATE_PARAMS = ("startDateTime", "endDateTime")
EMPTY_DATA_MESSAGE = "Invalid API response: Empty data"


def clean_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop None values and validate date parameters.

    ``datetime`` values for date parameters are formatted to the provider's
    UTC format; strings must already match it.

    Raises:
        SourceError: INVALID_DATE_FORMAT for a malformed date string
    """
    cleaned: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if key in DATE_PARAMS:
            if isinstance(value, datetime):
                value = format_api_datetime(value)
            elif isinstance(value, str) and not is_api_datetime(value):
                raise invalid_date_format(key, value)
        cleaned[key] = value
    return cleaned


def _parse_page(raw_page: Any) -> PageInfo:
    if not isinstance(raw_page, dict):
        return PageInfo()
    try:
        return PageInfo.model_validate(raw_page)
    except ValidationError:
        return PageInfo()


class TicketmasterAdapter(APIAdapter):
    """
    Adapter for the Ticketmaster Discovery API v2.

    Example:
        >>> with TicketmasterAdapter.from_config() as adapter:
        ...     result = adapter.fetch_events(city="Chicago", size=20)
        ...     print(result.page.total_elements)
    """

    @classmethod
    def from_config(
        cls,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> "TicketmasterAdapter":
        """Build an adapter from the ``ticketmaster`` settings section."""
        settings = Config.get_section("ticketmaster")
        config = APIAdapterConfig(
            source_id=SOURCE_ID,
            source_type=SourceType.API,
            request_timeout=settings.get("request_timeout", 10),
            base_url=settings.get("base_url", ""),
            api_key=api_key or Config.get_api_key(),
        )
        return cls(config, session=session)

    def fetch_events(self, **params) -> FetchResult:
        """
        Fetch one page of events from ``/events.json``.

        Args:
            **params: Discovery API query parameters (keyword, city,
                classificationId, geoPoint, startDateTime, size, page, sort...)

        Returns:
            FetchResult whose raw_data is the provider event list

        Raises:
            SourceError: On malformed date parameters, empty body or
                provider failure
        """
        query = clean_params(params)

        body = self.request_json("events.json", query)
        if not isinstance(body, dict) or not body:
            self.logger.error(EMPTY_DATA_MESSAGE)
            raise SourceError.upstream_fault(EMPTY_DATA_MESSAGE)

        page = _parse_page(body.get("page"))
        embedded = body.get("_embedded")
        events = embedded.get("events") if isinstance(embedded, dict) else None
        if not isinstance(events, list):
            events = []

        self.logger.info(
            f"Fetched {len(events)} events (page {page.number}/{page.total_pages})"
        )
        return FetchResult(
            source_type=self.source_type,
            raw_data=events,
            page=page,
            query=query,
        )

    def fetch_event_by_id(self, event_id: str) -> Dict[str, Any]:
        """
        Fetch a single raw event.

        Raises:
            SourceError: When the provider rejects the id or returns nothing
        """
        body = self.request_json(f"events/{event_id}")
        if not isinstance(body, dict) or not body:
            raise SourceError.upstream_fault(EMPTY_DATA_MESSAGE)
        return body

    def fetch_categories(self) -> List[ClassificationSummary]:
        """
        Fetch the segment catalogue from ``/classifications``.

        Classifications without a segment are dropped; genres come from the
        segment's embedded genre list.
        """
        body = self.request_json("classifications")
        embedded = body.get("_embedded") if isinstance(body, dict) else None
        if not isinstance(embedded, dict):
            return []

        summaries: List[ClassificationSummary] = []
        for classification in embedded.get("classifications") or []:
            segment = classification.get("segment") if isinstance(classification, dict) else None
            if not isinstance(segment, dict):
                continue

            genres = (segment.get("_embedded") or {}).get("genres") or []
            summaries.append(
                ClassificationSummary(
                    segment=CategoryReference(
                        id=str(segment.get("id", "")),
                        name=str(segment.get("name", "")),
                    ),
                    genres=[
                        CategoryReference(id=str(g.get("id", "")), name=str(g.get("name", "")))
                        for g in genres
                        if isinstance(g, dict)
                    ],
                )
            )
        return summaries
