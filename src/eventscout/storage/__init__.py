"""
Persistence over a string-keyed store.

- KeyValueStore / InMemoryStore / JsonFileStore: raw stores
- PreferenceStore, FavoritesStore, LocationStore, SessionStore: typed accessors
"""

from .store import InMemoryStore, JsonFileStore, KeyValueStore
from .preferences import (
    FavoritesStore,
    LocationStore,
    PreferenceStore,
    SessionStore,
    update_user_locations,
)

__all__ = [
    "FavoritesStore",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "LocationStore",
    "PreferenceStore",
    "SessionStore",
    "update_user_locations",
]
