"""
Field validators for raw provider values.

Each validator returns the value unchanged when valid and an empty string
otherwise; none of them raise.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re

from eventscout.utils.dates import parse_date, parse_time

logger = logging.getLogger(__name__)

TIMEZONE_PATTERN = re.compile(r"^[A-Za-z/_-]+$")


def validate_date(value: Optional[str]) -> str:
    """``YYYY-MM-DD`` that is also a real calendar date (rejects 2024-02-30)."""
    if not isinstance(value, str):
        return ""
    return value if parse_date(value) else ""


def validate_time(value: Optional[str]) -> str:
    """``HH:MM:SS`` with hours <= 23, minutes and seconds <= 59."""
    if not isinstance(value, str):
        return ""
    return value if parse_time(value) else ""


def validate_timezone(value: Optional[str]) -> str:
    """
    IANA zone name that can actually be used to format the current instant.
    """
    if not isinstance(value, str) or not value:
        return ""
    if not TIMEZONE_PATTERN.match(value):
        return ""

    try:
        datetime.now(ZoneInfo(value)).isoformat()
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        logger.warning(f"Invalid timezone format: {value} ({e})")
        return ""
    return value
