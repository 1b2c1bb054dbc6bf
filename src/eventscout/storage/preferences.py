"""
Typed accessors over the key-value store.

The store has no schema versioning, so every read validates the stored
shape and falls back to a default (never raises). Writes serialize with
the camelCase aliases the web client used.
"""

import json
import logging
from typing import Any, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from eventscout.schemas.event import (
    Coordinates,
    LocationDetail,
    UserPreferences,
    UserProfile,
)
from .store import KeyValueStore

logger = logging.getLogger(__name__)

SAVED_EVENTS_KEY = "savedEvents"
USER_PREFERENCES_KEY = "userPreferences"
LOCATIONS_DETAIL_KEY = "userLocationsDetail"
CURRENT_LOCATION_KEY = "currentLocation"
CURRENT_COORDS_KEY = "currentLocationCoords"
LOGGED_IN_KEY = "isLoggedIn"
USER_KEY = "user"
PERMISSION_DENIED_KEY = "locationPermissionDenied"

# Budget written when preferences are first created from a location change
DEFAULT_MAX_PRICE = 1000.0

_MISSING = object()
M = TypeVar("M", bound=BaseModel)


def _read_json(store: KeyValueStore, key: str) -> Any:
    """Decoded value, or ``_MISSING`` when absent or not valid JSON."""
    raw = store.get(key)
    if raw is None:
        return _MISSING
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring malformed JSON under {key!r}: {e}")
        return _MISSING


def _read_model(store: KeyValueStore, key: str, model: Type[M]) -> Optional[M]:
    data = _read_json(store, key)
    if data is _MISSING:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid {model.__name__} under {key!r}: {e.error_count()} errors")
        return None


def _write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))


def _write_model(store: KeyValueStore, key: str, value: BaseModel) -> None:
    store.set(key, value.model_dump_json(by_alias=True))


# ============================================================================
# PREFERENCES
# ============================================================================


class PreferenceStore:
    """Reads and writes the ``userPreferences`` object."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_preferences(self) -> Optional[UserPreferences]:
        return _read_model(self.store, USER_PREFERENCES_KEY, UserPreferences)

    def save_preferences(self, preferences: UserPreferences) -> None:
        _write_model(self.store, USER_PREFERENCES_KEY, preferences)

    def set_locations(self, cities: List[str]) -> UserPreferences:
        """Replace the preferred city list, creating preferences if needed."""
        current = self.get_preferences() or UserPreferences(max_price=DEFAULT_MAX_PRICE)
        updated = current.model_copy(update={"locations": list(cities)})
        self.save_preferences(updated)
        return updated

    def set_categories(self, category_ids: List[str]) -> UserPreferences:
        current = self.get_preferences() or UserPreferences(max_price=DEFAULT_MAX_PRICE)
        updated = current.model_copy(update={"categories": list(category_ids)})
        self.save_preferences(updated)
        return updated

    def set_max_price(self, max_price: float) -> UserPreferences:
        current = self.get_preferences() or UserPreferences()
        updated = current.model_copy(update={"max_price": max_price})
        self.save_preferences(updated)
        return updated

    def clear(self) -> None:
        self.store.remove(USER_PREFERENCES_KEY)


# ============================================================================
# FAVORITES
# ============================================================================


class FavoritesStore:
    """
    Saved-event id list under ``savedEvents``.

    Older writers stored whole event objects under the same key; those are
    read back as their ``id``. Ids are unique and keep insertion order.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_saved_event_ids(self) -> List[str]:
        data = _read_json(self.store, SAVED_EVENTS_KEY)
        if data is _MISSING:
            if self.store.get(SAVED_EVENTS_KEY) is None:
                _write_json(self.store, SAVED_EVENTS_KEY, [])
            return []

        if not isinstance(data, list):
            logger.warning(f"Saved events is not a list: {type(data).__name__}")
            return []

        ids: List[str] = []
        for item in data:
            if isinstance(item, dict):
                item = item.get("id")
            if isinstance(item, (str, int)) and not isinstance(item, bool):
                event_id = str(item)
                if event_id and event_id not in ids:
                    ids.append(event_id)
        return ids

    def _save(self, ids: List[str]) -> None:
        _write_json(self.store, SAVED_EVENTS_KEY, ids)

    def is_favorite(self, event_id: str) -> bool:
        return event_id in self.get_saved_event_ids()

    def add(self, event_id: str) -> List[str]:
        ids = self.get_saved_event_ids()
        if event_id in ids:
            return ids
        ids.append(event_id)
        self._save(ids)
        return ids

    def remove(self, event_id: str) -> List[str]:
        ids = [i for i in self.get_saved_event_ids() if i != event_id]
        self._save(ids)
        return ids

    def toggle(self, event_id: str) -> Tuple[List[str], bool]:
        """
        Flip the saved state of an event.

        Returns:
            (updated ids, whether the event is now saved)
        """
        if self.is_favorite(event_id):
            return self.remove(event_id), False
        return self.add(event_id), True


# ============================================================================
# LOCATIONS
# ============================================================================


class LocationStore:
    """Detailed location list, current location and its coordinates."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_location_details(self) -> List[LocationDetail]:
        data = _read_json(self.store, LOCATIONS_DETAIL_KEY)
        if not isinstance(data, list):
            return []

        details = []
        for item in data:
            try:
                details.append(LocationDetail.model_validate(item))
            except ValidationError:
                logger.debug(f"Skipping invalid location entry: {item!r}")
        return details

    def save_location_details(self, details: List[LocationDetail]) -> None:
        self.store.set(
            LOCATIONS_DETAIL_KEY,
            json.dumps([d.model_dump(by_alias=True, exclude_none=True) for d in details]),
        )

    def get_current_location(self) -> Optional[str]:
        return self.store.get(CURRENT_LOCATION_KEY) or None

    def set_current_location(self, city: str) -> None:
        self.store.set(CURRENT_LOCATION_KEY, city)

    def get_current_coords(self) -> Optional[Coordinates]:
        """Stored coordinates, or None unless both lat and lon are non-zero."""
        coords = _read_model(self.store, CURRENT_COORDS_KEY, Coordinates)
        if coords is None or not coords.lat or not coords.lon:
            return None
        return coords

    def set_current_coords(self, lat: float, lon: float) -> None:
        _write_model(self.store, CURRENT_COORDS_KEY, Coordinates(lat=lat, lon=lon))

    def clear_current_location(self) -> None:
        self.store.remove(CURRENT_LOCATION_KEY)
        self.store.remove(CURRENT_COORDS_KEY)

    def is_permission_denied(self) -> bool:
        return self.store.get(PERMISSION_DENIED_KEY) == "true"

    def set_permission_denied(self, denied: bool = True) -> None:
        if denied:
            self.store.set(PERMISSION_DENIED_KEY, "true")
        else:
            self.store.remove(PERMISSION_DENIED_KEY)

    def replace_locations(self, details: List[LocationDetail]) -> None:
        """
        Persist a new location list and derive the current location.

        The entry flagged ``is_current`` (else the first entry) becomes the
        current location; an empty list clears it.
        """
        self.save_location_details(details)

        current = next((d for d in details if d.is_current), None)
        if current is not None:
            self.set_current_location(current.city)
            if current.has_coordinates:
                self.set_current_coords(current.latitude, current.longitude)
        elif details:
            self.set_current_location(details[0].city)
        else:
            self.clear_current_location()

    def mark_current_location(
        self, city: str, latitude: float, longitude: float
    ) -> List[LocationDetail]:
        """
        Record a detected position as the current location.

        A city already in the list (case-insensitive) is flagged current;
        otherwise it is appended with its coordinates.
        """
        details = self.get_location_details()
        existing = next((d for d in details if d.city.lower() == city.lower()), None)

        if existing is None:
            details = [d.model_copy(update={"is_current": False}) for d in details]
            details.append(
                LocationDetail(
                    city=city, latitude=latitude, longitude=longitude, is_current=True
                )
            )
        else:
            details = [
                d.model_copy(update={"is_current": d is existing}) for d in details
            ]

        self.replace_locations(details)
        self.set_permission_denied(False)
        return details


# ============================================================================
# SESSION
# ============================================================================


class SessionStore:
    """Login flag and the stored user profile."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def is_logged_in(self) -> bool:
        return self.store.get(LOGGED_IN_KEY) == "true"

    def get_user(self) -> Optional[UserProfile]:
        return _read_model(self.store, USER_KEY, UserProfile)

    def save_user(self, user: UserProfile) -> None:
        _write_model(self.store, USER_KEY, user)

    def log_in(self, user: UserProfile) -> None:
        self.store.set(LOGGED_IN_KEY, "true")
        self.save_user(user)

    def log_out(self) -> None:
        self.store.remove(LOGGED_IN_KEY)
        self.store.remove(USER_KEY)


def update_user_locations(
    details: List[LocationDetail],
    preferences: PreferenceStore,
    locations: LocationStore,
    session: Optional[SessionStore] = None,
) -> UserPreferences:
    """
    Apply an edited location list everywhere it is mirrored.

    Updates the preferred city names, the detailed list, the current
    location and, when a user profile is stored, its embedded preferences.
    """
    updated = preferences.set_locations([d.city for d in details])
    locations.replace_locations(details)

    if session is not None:
        user = session.get_user()
        if user is not None:
            session.save_user(user.model_copy(update={"preferences": updated}))

    return updated
