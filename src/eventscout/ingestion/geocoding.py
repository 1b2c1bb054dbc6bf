"""
Geocoding clients.

Forward geocoding (free-text place -> candidate cities with coordinates)
against a Nominatim-style ``search`` endpoint, and reverse geocoding
(coordinates -> city name) against a BigDataCloud-style
``reverse-geocode-client`` endpoint. Both are unauthenticated, best-effort
and time-bounded; failures surface as ``SourceError``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

import requests

from eventscout.configs import Config
from eventscout.ingestion.errors import (
    SourceError,
    error_from_exception,
    error_from_response,
)
from eventscout.schemas.event import LocationDetail

logger = logging.getLogger(__name__)

FORWARD_CITY_KEYS = ("city", "town", "village", "county", "state")
REVERSE_CITY_KEYS = ("city", "locality", "principalSubdivision")


@dataclass
class LocationResult:
    """One forward-geocoding candidate."""
    city: str
    display_name: str
    latitude: float
    longitude: float
    state: str = ""
    country: str = ""

    def to_location_detail(self, is_current: bool = False) -> LocationDetail:
        return LocationDetail(
            city=self.city,
            display_name=self.display_name,
            latitude=self.latitude,
            longitude=self.longitude,
            is_current=is_current,
        )


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_place(place: Dict[str, Any]) -> LocationResult:
    """
    Map one Nominatim place to a LocationResult.

    The city is the first present of city/town/village/county/state, else
    the first segment of ``display_name``.
    """
    address = place.get("address") or {}
    display_name = str(place.get("display_name") or "")

    city = next((address[k] for k in FORWARD_CITY_KEYS if address.get(k)), None)
    if not city:
        city = display_name.split(",")[0].strip()

    return LocationResult(
        city=str(city),
        display_name=display_name,
        latitude=_float(place.get("lat")),
        longitude=_float(place.get("lon")),
        state=str(address.get("state") or ""),
        country=str(address.get("country") or ""),
    )


class GeocodingClient:
    """
    Forward and reverse geocoding over HTTP.

    Example:
        >>> with GeocodingClient.from_config() as geo:
        ...     geo.forward_geocode("Portland")[0].city
        'Portland'
    """

    def __init__(
        self,
        forward_url: str,
        reverse_url: str,
        timeout: float = 10,
        result_limit: int = 5,
        user_agent: str = "eventscout",
        session: Optional[requests.Session] = None,
    ):
        if not forward_url or not reverse_url:
            raise ValueError("Geocoding client requires forward_url and reverse_url")
        self.forward_url = forward_url
        self.reverse_url = reverse_url
        self.timeout = timeout
        self.result_limit = result_limit
        self.user_agent = user_agent
        self._session = session

    @classmethod
    def from_config(cls, session: Optional[requests.Session] = None) -> "GeocodingClient":
        settings = Config.get_section("geocoding")
        return cls(
            forward_url=settings.get("forward_url", ""),
            reverse_url=settings.get("reverse_url", ""),
            timeout=settings.get("request_timeout", 10),
            result_limit=settings.get("result_limit", 5),
            user_agent=settings.get("user_agent", "eventscout"),
            session=session,
        )

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                "User-Agent": self.user_agent,
                "Accept": "application/json",
            })
        return self._session

    def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            response = self._get_session().get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            error = error_from_exception(e)
            logger.error(f"Geocoding request failed: {error.message}")
            raise error from e

        if not response.ok:
            error = error_from_response(response)
            logger.error(f"Geocoding request rejected: {error.message}")
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise SourceError.upstream_fault(f"Invalid geocoding response: {e}") from e

    def forward_geocode(self, query: str, limit: Optional[int] = None) -> List[LocationResult]:
        """
        Look up candidate places for free text.

        Args:
            query: Place name typed by the user
            limit: Max candidates (defaults to configured result_limit)

        Returns:
            Candidates in provider order; empty for a blank query or no match

        Raises:
            SourceError: On transport or HTTP failure
        """
        query = query.strip()
        if not query:
            return []

        data = self._get_json(
            self.forward_url,
            {
                "format": "json",
                "q": query,
                "limit": limit or self.result_limit,
                "addressdetails": 1,
            },
        )
        if not isinstance(data, list):
            return []

        results = [parse_place(place) for place in data if isinstance(place, dict)]
        logger.debug(f"Forward geocoding {query!r} -> {len(results)} results")
        return results

    def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Resolve coordinates to a city name.

        Returns:
            First present of city/locality/principalSubdivision, or None

        Raises:
            SourceError: On transport or HTTP failure
        """
        data = self._get_json(
            self.reverse_url,
            {
                "latitude": latitude,
                "longitude": longitude,
                "localityLanguage": "en",
            },
        )
        if not isinstance(data, dict):
            return None
        return next((str(data[k]) for k in REVERSE_CITY_KEYS if data.get(k)), None)

    def close(self) -> None:
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "GeocodingClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
