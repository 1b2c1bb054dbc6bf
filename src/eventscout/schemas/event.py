"""
Canonical Event Schema for eventscout.

Normalizes Ticketmaster Discovery API listings into a single internal model
that the filter and recommendation layers operate on. Models serialize with
camelCase aliases (``startDate``, ``priceRanges``...) so persisted JSON keeps
the same shape the web client stored; Python attributes are snake_case.
"""

import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _FrozenCamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ============================================================================
# ENUMS
# ============================================================================


class DateFilter(str, Enum):
    """
    Relative date buckets understood by the filter engine.
    """

    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"
    UPCOMING = "upcoming"
    ALL = "all"


class PriceFilter(str, Enum):
    """
    Price buckets understood by the filter engine.
    """

    FREE = "free"
    PAID = "paid"
    ALL = "all"


class EventStatus(str, Enum):
    """
    Lifecycle tags reported by the provider (lowercased).
    """

    ONSALE = "onsale"
    OFFSALE = "offsale"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"
    RESCHEDULED = "rescheduled"


# ============================================================================
# EVENT SUB-ENTITIES
# ============================================================================


class GeoPoint(_FrozenCamelModel):
    """
    Venue coordinates; (0, 0) when the provider omits them.
    """

    latitude: float = 0.0
    longitude: float = 0.0


class Venue(_FrozenCamelModel):
    """
    Normalized venue information.
    """

    id: str = ""
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    location: GeoPoint = Field(default_factory=GeoPoint)


class CategoryReference(_FrozenCamelModel):
    """
    Reference to a segment, genre or subGenre of the provider taxonomy.
    """

    id: str = ""
    name: str = ""


class PriceRange(_FrozenCamelModel):
    """
    Pricing details; amounts rounded to 2 decimals, never NaN.
    """

    type: Optional[str] = None
    currency: Optional[str] = None
    min: float = 0.0
    max: float = 0.0

    @field_validator("min", "max", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        try:
            amount = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(amount) or math.isinf(amount):
            return 0.0
        return round(amount, 2)


class EventImage(_FrozenCamelModel):
    url: str = ""
    width: int = 0
    height: int = 0
    ratio: Optional[str] = None


class EventAttraction(_FrozenCamelModel):
    """
    Performer or participant reference.
    """

    id: str = ""
    name: str = ""
    url: str = ""


class EventPresale(_FrozenCamelModel):
    name: str = ""
    start_date_time: str = ""
    end_date_time: str = ""


class EventSales(_FrozenCamelModel):
    start_date_time: str = ""
    end_date_time: str = ""
    presales: List[EventPresale] = Field(default_factory=list)


# ============================================================================
# MAIN EVENT SCHEMA
# ============================================================================


class Event(_FrozenCamelModel):
    """
    Internal event entity produced by the normalizer.

    Constructed fresh on every fetch and read-only downstream. Dates are
    ``YYYY-MM-DD`` and times ``HH:MM:SS`` strings, empty when unknown.
    """

    id: str
    name: str = ""
    description: str = ""
    image_url: str = ""

    # ---- TIMING ----
    start_date: str = ""
    start_time: str = ""
    end_date: str = ""
    end_time: str = ""
    timezone: str = ""

    # ---- LOCATION ----
    venue: Venue = Field(default_factory=Venue)

    # ---- CLASSIFICATION (primary only) ----
    category: CategoryReference = Field(default_factory=CategoryReference)
    genre: CategoryReference = Field(default_factory=CategoryReference)
    sub_genre: CategoryReference = Field(default_factory=CategoryReference)

    # ---- PRICING & SALES ----
    price_ranges: List[PriceRange] = Field(default_factory=list)
    sales: Optional[EventSales] = None

    # ---- MEDIA & LINKS ----
    url: str = ""
    images: List[EventImage] = Field(default_factory=list)
    attractions: List[EventAttraction] = Field(default_factory=list)

    status: str = ""

    @property
    def is_offsale(self) -> bool:
        return self.status.lower() == EventStatus.OFFSALE.value

    @property
    def is_onsale(self) -> bool:
        return self.status.lower() == EventStatus.ONSALE.value


# ============================================================================
# PROVIDER PAGING & CLASSIFICATIONS
# ============================================================================


class PageInfo(_CamelModel):
    """
    Pagination block of a provider listing response.
    """

    total_elements: int = 0
    total_pages: int = 0
    size: int = 0
    number: int = 0


class ClassificationSummary(_CamelModel):
    """
    A provider segment with the genres filed under it.
    """

    segment: CategoryReference
    genres: List[CategoryReference] = Field(default_factory=list)


# ============================================================================
# FILTERS
# ============================================================================


class EventFilters(_CamelModel):
    """
    Filter specification; every field optional.
    """

    search: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    price: Optional[PriceFilter] = None


# ============================================================================
# PERSONALIZATION
# ============================================================================


class UserPreferences(_CamelModel):
    """
    Category and location preferences captured at onboarding.

    ``categories`` holds provider segment/genre IDs; the first entry of
    ``locations`` is the primary location.
    """

    categories: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    max_price: float = 0.0

    @property
    def primary_location(self) -> Optional[str]:
        return self.locations[0] if self.locations else None


class LocationDetail(_CamelModel):
    """
    A saved location with optional coordinates.
    """

    city: str
    display_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_current: bool = False

    @property
    def has_coordinates(self) -> bool:
        return bool(self.latitude) and bool(self.longitude)


class Coordinates(_CamelModel):
    """
    Persisted "current location" coordinates.
    """

    lat: float
    lon: float


class UserProfile(_CamelModel):
    id: str
    username: str = ""
    email: str = ""
    name: str = ""
    avatar: str = ""
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    saved_events: List[str] = Field(default_factory=list)
    attended_events: List[str] = Field(default_factory=list)
