"""
Source adapters.

- BaseSourceAdapter / FetchResult / AdapterConfig: Adapter interface
- APIAdapter / APIAdapterConfig: requests-based REST adapter
- TicketmasterAdapter: Discovery API v2
"""

from .base_adapter import AdapterConfig, BaseSourceAdapter, FetchResult, SourceType
from .api_adapter import APIAdapter, APIAdapterConfig
from .ticketmaster import TicketmasterAdapter, clean_params

__all__ = [
    "AdapterConfig",
    "APIAdapter",
    "APIAdapterConfig",
    "BaseSourceAdapter",
    "FetchResult",
    "SourceType",
    "TicketmasterAdapter",
    "clean_params",
]
