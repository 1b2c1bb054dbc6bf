"""
eventscout - event discovery on top of the Ticketmaster Discovery API.

This package handles ingestion and normalization of third-party event
listings, search filtering, and lightweight personalization (saved events,
category/location preferences and scored recommendations).

Key Components:
- TicketmasterAdapter: Provider query contract and error translation
- map_to_event: Raw provider record -> internal Event
- filter_events: Search, category, date, location and price filters
- RecommendationEngine: Tiered and client-side recommendations
- PreferenceStore / FavoritesStore: Persisted personalization state
"""

__version__ = "0.1.0"
