"""
Shared pytest fixtures for the eventscout test suite.

Provides factories for normalized Event objects, raw Ticketmaster records
and mocked HTTP responses.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from eventscout.schemas.event import (
    CategoryReference,
    Event,
    PriceRange,
    Venue,
)
from eventscout.schemas.taxonomy import (
    ARTS_THEATRE_SEGMENT_ID,
    MUSIC_SEGMENT_ID,
    SPORTS_SEGMENT_ID,
)

# Fixed reference instant used across tests
NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def create_event():
    """
    Return a function that creates Event objects with sensible defaults.

    The default event is an onsale Music event in Chicago starting a week
    after NOW. All defaults can be overridden via keyword arguments.

    Example:
        event = create_event(id="E1", start_date="2026-03-11")
    """

    def _create_event(
        id: str = "E1",
        name: str = "Test Event",
        start_date: str = "2026-03-17",
        start_time: str = "20:00:00",
        city: str = "Chicago",
        venue_name: str = "Test Venue",
        category_id: str = MUSIC_SEGMENT_ID,
        category_name: str = "Music",
        genre_id: str = "",
        sub_genre_id: str = "",
        price_min: Optional[float] = 25.0,
        status: str = "onsale",
        **kwargs,
    ) -> Event:
        defaults: Dict[str, Any] = {
            "id": id,
            "name": name,
            "start_date": start_date,
            "start_time": start_time,
            "end_date": start_date,
            "venue": Venue(
                name=venue_name,
                address="1 Main St",
                city=city,
                state="Illinois",
            ),
            "category": CategoryReference(id=category_id, name=category_name),
            "genre": CategoryReference(id=genre_id),
            "sub_genre": CategoryReference(id=sub_genre_id),
            "price_ranges": (
                [PriceRange(currency="USD", min=price_min, max=price_min)]
                if price_min is not None
                else []
            ),
            "status": status,
        }
        defaults.update(kwargs)
        return Event(**defaults)

    return _create_event


@pytest.fixture
def sample_events(create_event) -> List[Event]:
    """
    Return a list of varied upcoming events.

    Contains music, sports and free events in two cities.
    """
    return [
        create_event(id="M1", name="Jazz Evening", start_date="2026-03-12"),
        create_event(
            id="S1",
            name="Bulls Game",
            category_id=SPORTS_SEGMENT_ID,
            category_name="Sports",
            start_date="2026-03-11",
            price_min=80.0,
        ),
        create_event(
            id="F1", name="Park Concert", city="Austin", start_date="2026-03-14", price_min=0.0
        ),
        create_event(
            id="N1",
            name="Open Gallery",
            start_date="2026-03-15",
            price_min=None,
            category_id=ARTS_THEATRE_SEGMENT_ID,
            category_name="Arts & Theatre",
        ),
    ]


@pytest.fixture
def raw_event_factory():
    """
    Return a function building raw Discovery API event records.

    Example:
        raw = raw_event_factory(id="Z1", priceRanges=[])
    """

    def _raw_event(**overrides) -> Dict[str, Any]:
        raw: Dict[str, Any] = {
            "id": "Z7r9jZ1A7",
            "name": "Chicago Symphony",
            "url": "https://www.ticketmaster.com/event/Z7r9jZ1A7",
            "description": "An evening of Brahms.",
            "images": [
                {"url": "https://img/3_2.jpg", "ratio": "3_2", "width": 640, "height": 427},
                {"url": "https://img/16_9.jpg", "ratio": "16_9", "width": 1024, "height": 576},
            ],
            "dates": {
                "start": {"localDate": "2026-03-20", "localTime": "19:30:00"},
                "timezone": "America/Chicago",
                "status": {"code": "onsale"},
            },
            "classifications": [
                {
                    "segment": {"id": MUSIC_SEGMENT_ID, "name": "Music"},
                    "genre": {"id": "KnvZfZ7vAeJ", "name": "Classical"},
                    "subGenre": {"id": "KZazBEonSMnZfZ7vAv1", "name": "Symphonic"},
                }
            ],
            "priceRanges": [
                {"type": "standard", "currency": "USD", "min": 35.5, "max": 120}
            ],
            "_embedded": {
                "venues": [
                    {
                        "id": "KovZpZAFnIEA",
                        "name": "Symphony Center",
                        "postalCode": "60604",
                        "address": {"line1": "220 S Michigan Ave"},
                        "city": {"name": "Chicago"},
                        "state": {"name": "Illinois"},
                        "country": {"name": "United States Of America"},
                        "location": {"latitude": "41.8791", "longitude": "-87.6249"},
                    }
                ],
                "attractions": [
                    {"id": "K8vZ9171", "name": "Chicago Symphony Orchestra", "url": "https://tm/a"}
                ],
            },
        }
        raw.update(overrides)
        return raw

    return _raw_event


@pytest.fixture
def make_response():
    """
    Return a function building mocked ``requests.Response`` objects.

    Example:
        response = make_response(200, {"page": {}})
    """

    def _make_response(
        status_code: int = 200,
        json_data: Any = None,
        text: str = "",
    ) -> MagicMock:
        response = MagicMock(spec=requests.Response)
        response.status_code = status_code
        response.ok = status_code < 400
        response.text = text
        if json_data is not None:
            response.content = b"{...}"
            response.json.return_value = json_data
        else:
            response.content = text.encode()
            response.json.side_effect = ValueError("No JSON object could be decoded")
        return response

    return _make_response


@pytest.fixture
def mock_session():
    """A mocked ``requests.Session``; set ``get.return_value`` per test."""
    return MagicMock(spec=requests.Session)
