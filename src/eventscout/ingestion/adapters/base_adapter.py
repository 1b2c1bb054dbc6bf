"""
Event provider contract.

Every provider adapter answers the same three questions: a page of events
for a query, one event by id, and the category catalogue. The search
pipeline and the recommendation tiers only talk to this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List
import logging

from eventscout.schemas.event import ClassificationSummary, PageInfo


class SourceType(str, Enum):
    """How a provider is reached."""
    API = "api"


@dataclass
class FetchResult:
    """
    One page of raw provider events.

    ``raw_data`` is left untouched for the normalization layer. An empty
    list with a zeroed ``page`` is a valid listing, not an error.
    """
    source_type: SourceType
    raw_data: List[Dict[str, Any]] = field(default_factory=list)
    page: PageInfo = field(default_factory=PageInfo)
    query: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AdapterConfig:
    source_id: str
    source_type: SourceType
    request_timeout: float = 10


class BaseSourceAdapter(ABC):
    """
    Abstract event provider.

    Subclasses must implement:
        - fetch_events(): one page of raw events for query parameters
        - fetch_event_by_id(): a single raw event
        - fetch_categories(): the segment catalogue
        - _validate_config(): reject unusable configuration up front

    Adapters are context managers; leaving the block releases whatever
    connection state ``close`` knows about.
    """

    def __init__(self, config: AdapterConfig):
        self.config = config
        self.logger = logging.getLogger(f"adapter.{config.source_id}")
        self._validate_config()

    @property
    def source_type(self) -> SourceType:
        return self.config.source_type

    @property
    def source_id(self) -> str:
        return self.config.source_id

    @abstractmethod
    def fetch_events(self, **params) -> FetchResult:
        """
        Fetch one page of raw events.

        Args:
            **params: Provider query parameters; None values are ignored

        Raises:
            SourceError: On malformed parameters or provider failure
        """

    @abstractmethod
    def fetch_event_by_id(self, event_id: str) -> Dict[str, Any]:
        """Fetch one raw event, raising SourceError when it cannot be read."""

    @abstractmethod
    def fetch_categories(self) -> List[ClassificationSummary]:
        ...

    @abstractmethod
    def _validate_config(self) -> None:
        """
        Raises:
            ValueError: If configuration is invalid
        """

    def close(self) -> None:
        pass

    def __enter__(self) -> "BaseSourceAdapter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
