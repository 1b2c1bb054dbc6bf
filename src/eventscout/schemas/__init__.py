"""
Schemas for eventscout.

This package contains:
- event.py: Event entity, filters, paging and personalization models
- taxonomy.py: Static Ticketmaster segment catalogue and umbrella segments
"""

from .event import (
    CategoryReference,
    ClassificationSummary,
    Coordinates,
    DateFilter,
    Event,
    EventAttraction,
    EventFilters,
    EventImage,
    EventPresale,
    EventSales,
    EventStatus,
    GeoPoint,
    LocationDetail,
    PageInfo,
    PriceFilter,
    PriceRange,
    UserPreferences,
    UserProfile,
    Venue,
)

__all__ = [
    "CategoryReference",
    "ClassificationSummary",
    "Coordinates",
    "DateFilter",
    "Event",
    "EventAttraction",
    "EventFilters",
    "EventImage",
    "EventPresale",
    "EventSales",
    "EventStatus",
    "GeoPoint",
    "LocationDetail",
    "PageInfo",
    "PriceFilter",
    "PriceRange",
    "UserPreferences",
    "UserProfile",
    "Venue",
]
