"""
Ticketmaster event mapper.

Maps one raw Discovery API event record into the internal ``Event``.

The mapping is total: it never raises. Sub-fields that fail validation
(dates, times, timezone, prices, coordinates) degrade to empty or zero
values instead of propagating errors.

Primary classification/venue only: the provider returns arrays of
classifications and venues, but only index 0 of each is consulted.
Multi-venue or multi-classification events are not modeled.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from eventscout.ingestion.normalization.currency import CurrencyParser
from eventscout.ingestion.normalization.validators import (
    validate_date,
    validate_time,
    validate_timezone,
)
from eventscout.schemas.event import (
    CategoryReference,
    Event,
    EventAttraction,
    EventImage,
    EventPresale,
    EventSales,
    GeoPoint,
    PriceRange,
    Venue,
)

logger = logging.getLogger(__name__)

PREFERRED_IMAGE_RATIO = "16_9"


# ============================================================================
# DEFENSIVE ACCESSORS
# ============================================================================


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _first(value: Any) -> Dict[str, Any]:
    items = _list(value)
    return _dict(items[0]) if items else {}


def _str(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, bool)):
        return ""
    return str(value)


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) or math.isinf(number) else number


# ============================================================================
# IMAGES
# ============================================================================


def select_best_image(images: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Pick the best display image.

    A ``16_9`` image wins over the current best when it is wider; otherwise a
    wider non-fallback image wins. The first image seeds the fold, so it is
    the ultimate default.
    """
    best: Optional[Dict[str, Any]] = None

    for current in images:
        current = _dict(current)
        width = _int(current.get("width"))

        if current.get("ratio") == PREFERRED_IMAGE_RATIO and (
            best is None or width > _int(best.get("width"))
        ):
            best = current
            continue

        if best is None or (
            width > _int(best.get("width")) and not current.get("fallback")
        ):
            best = current

    return best


def _map_images(raw_images: List[Any]) -> List[EventImage]:
    mapped = []
    for img in raw_images:
        img = _dict(img)
        mapped.append(
            EventImage(
                url=_str(img.get("url")),
                width=_int(img.get("width")),
                height=_int(img.get("height")),
                ratio=img.get("ratio") if isinstance(img.get("ratio"), str) else None,
            )
        )
    return mapped


# ============================================================================
# PRICES
# ============================================================================


def extract_price_ranges(raw_event: Dict[str, Any]) -> List[PriceRange]:
    """
    Structured price ranges, or a single range found in the description.

    Amounts are rounded to 2 decimals and missing/NaN values become 0. When
    the text fallback finds nothing the list stays empty.
    """
    structured = _list(raw_event.get("priceRanges"))
    if structured:
        ranges = []
        for item in structured:
            item = _dict(item)
            ranges.append(
                PriceRange(
                    type=_str(item.get("type")) or None,
                    currency=_str(item.get("currency")) or None,
                    min=item.get("min") or 0,
                    max=item.get("max") or 0,
                )
            )
        return ranges

    text = _str(raw_event.get("description")) or _str(raw_event.get("info"))
    found = CurrencyParser.extract_ticket_price(text)
    if found is None:
        return []

    amount, currency = found
    logger.debug(f"Extracted price {amount} {currency} from text of {raw_event.get('id')}")
    return [PriceRange(currency=currency, min=float(amount), max=float(amount))]


# ============================================================================
# VENUE / CLASSIFICATION / ATTRACTIONS / SALES
# ============================================================================


def _map_venue(raw_venue: Dict[str, Any]) -> Venue:
    location = _dict(raw_venue.get("location"))
    return Venue(
        id=_str(raw_venue.get("id")),
        name=_str(raw_venue.get("name")),
        address=_str(_dict(raw_venue.get("address")).get("line1")),
        city=_str(_dict(raw_venue.get("city")).get("name")),
        state=_str(_dict(raw_venue.get("state")).get("name")),
        postal_code=_str(raw_venue.get("postalCode")),
        country=_str(_dict(raw_venue.get("country")).get("name")),
        location=GeoPoint(
            latitude=_float(location.get("latitude")),
            longitude=_float(location.get("longitude")),
        ),
    )


def _map_reference(raw_ref: Any) -> CategoryReference:
    raw_ref = _dict(raw_ref)
    return CategoryReference(id=_str(raw_ref.get("id")), name=_str(raw_ref.get("name")))


def _map_attractions(raw_attractions: List[Any]) -> List[EventAttraction]:
    return [
        EventAttraction(
            id=_str(_dict(a).get("id")),
            name=_str(_dict(a).get("name")),
            url=_str(_dict(a).get("url")),
        )
        for a in raw_attractions
    ]


def _map_sales(raw_sales: Any) -> Optional[EventSales]:
    raw_sales = _dict(raw_sales)
    if not raw_sales:
        return None

    public = _dict(raw_sales.get("public"))
    return EventSales(
        start_date_time=_str(public.get("startDateTime")),
        end_date_time=_str(public.get("endDateTime")),
        presales=[
            EventPresale(
                name=_str(_dict(p).get("name")),
                start_date_time=_str(_dict(p).get("startDateTime")),
                end_date_time=_str(_dict(p).get("endDateTime")),
            )
            for p in _list(raw_sales.get("presales"))
        ],
    )


# ============================================================================
# MAIN MAPPER
# ============================================================================


def map_to_event(raw_event: Dict[str, Any]) -> Event:
    """
    Map a raw Ticketmaster event to an internal ``Event``.

    Args:
        raw_event: Unmodified event record from the Discovery API

    Returns:
        Normalized Event (never raises)
    """
    raw_event = _dict(raw_event)
    event_id = _str(raw_event.get("id"))

    try:
        images = _list(raw_event.get("images"))
        best_image = select_best_image(images)
        image_url = _str(_dict(best_image).get("url")) or _str(_first(images).get("url"))

        dates = _dict(raw_event.get("dates"))
        start = _dict(dates.get("start"))
        end = _dict(dates.get("end"))

        start_date = validate_date(start.get("localDate"))
        end_date = validate_date(end.get("localDate")) or start_date

        embedded = _dict(raw_event.get("_embedded"))
        classification = _first(raw_event.get("classifications"))

        return Event(
            id=event_id,
            name=_str(raw_event.get("name")),
            description=_str(raw_event.get("description")) or _str(raw_event.get("info")),
            image_url=image_url,
            start_date=start_date,
            start_time=validate_time(start.get("localTime")),
            end_date=end_date,
            end_time=validate_time(end.get("localTime")),
            timezone=validate_timezone(dates.get("timezone")),
            venue=_map_venue(_first(embedded.get("venues"))),
            category=_map_reference(classification.get("segment")),
            genre=_map_reference(classification.get("genre")),
            sub_genre=_map_reference(classification.get("subGenre")),
            price_ranges=extract_price_ranges(raw_event),
            sales=_map_sales(raw_event.get("sales")),
            url=_str(raw_event.get("url")),
            images=_map_images(images),
            attractions=_map_attractions(_list(embedded.get("attractions"))),
            status=_str(_dict(dates.get("status")).get("code")).lower(),
        )

    except ValidationError as e:
        logger.warning(f"Could not normalize event {event_id!r}, using defaults: {e}")
        return Event(id=event_id)
