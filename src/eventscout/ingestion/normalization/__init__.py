"""
Normalization module for raw provider events.

This package provides:
- map_to_event: Raw Ticketmaster event -> internal Event
- select_best_image / extract_price_ranges: Mapper building blocks
- CurrencyParser: Textual ticket price extraction
- validate_date / validate_time / validate_timezone: Field validators
"""

from .currency import CurrencyParser
from .event_mapper import extract_price_ranges, map_to_event, select_best_image
from .validators import validate_date, validate_time, validate_timezone

__all__ = [
    "CurrencyParser",
    "extract_price_ranges",
    "map_to_event",
    "select_best_image",
    "validate_date",
    "validate_time",
    "validate_timezone",
]
