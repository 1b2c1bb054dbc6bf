"""
Currency parsing for free-text price mentions.

Used when a listing carries no structured price ranges: the description is
scanned for a ticket/price/cost phrase followed by a currency amount.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple
import re


class CurrencyParser:
    """
    Best-effort extraction of a single ticket price from prose.
    """

    SYMBOL_TO_CODE: Dict[str, str] = {
        "$": "USD",
        "£": "GBP",
        "€": "EUR",
    }

    DEFAULT_CURRENCY = "USD"

    # "Tickets cost $25", "Price: €12.50", "ticket prices from £9"
    TICKET_PRICE_PATTERN = re.compile(
        r"(?:price|ticket|cost).*?([$£€])\s*(\d+(?:\.\d{1,2})?)",
        re.IGNORECASE,
    )

    @classmethod
    def symbol_to_code(cls, symbol: str) -> str:
        return cls.SYMBOL_TO_CODE.get(symbol, cls.DEFAULT_CURRENCY)

    @classmethod
    def extract_ticket_price(cls, text: Optional[str]) -> Optional[Tuple[Decimal, str]]:
        """
        Find the first ticket price mentioned in ``text``.

        Args:
            text: Description or info text

        Returns:
            Tuple of (amount, ISO 4217 code) or None when nothing matches
        """
        if not text:
            return None

        match = cls.TICKET_PRICE_PATTERN.search(text)
        if not match:
            return None

        try:
            amount = Decimal(match.group(2))
        except InvalidOperation:
            return None

        return amount, cls.symbol_to_code(match.group(1))
