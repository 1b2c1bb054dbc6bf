"""
Event deduplication.

Listings from different tiers or pages may repeat the same event. A
deduplicator keeps the first occurrence of each identity key and preserves
input order.
"""

from abc import ABC, abstractmethod
from typing import Hashable, List

from eventscout.schemas.event import Event


class EventDeduplicator(ABC):
    """
    Abstract base for deduplication strategies
    """

    @abstractmethod
    def key(self, event: Event) -> Hashable:
        """Identity key; events with equal keys are duplicates."""

    def deduplicate(self, events: List[Event]) -> List[Event]:
        """
        Deduplicate events and return unique set

        Returns:
            List of unique events (first occurrence kept)
        """
        seen = set()
        unique_events = []

        for event in events:
            key = self.key(event)
            if key not in seen:
                seen.add(key)
                unique_events.append(event)

        return unique_events


class IdDeduplicator(EventDeduplicator):
    """
    Match by provider event id
    """

    def key(self, event: Event) -> Hashable:
        return event.id
