"""
API Source Adapter.

Adapter for REST JSON sources: one shared ``requests`` session, a fixed
timeout, and translation of every transport/HTTP failure into a
``SourceError``. There is no retry policy.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

import requests

from eventscout.ingestion.errors import (
    SourceError,
    error_from_exception,
    error_from_response,
)
from .base_adapter import AdapterConfig, BaseSourceAdapter, SourceType


logger = logging.getLogger(__name__)


@dataclass
class APIAdapterConfig(AdapterConfig):
    """
    Configuration for API-based adapters.
    """
    base_url: str = ""
    api_key: Optional[str] = None
    api_key_param: str = "apikey"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.source_type = SourceType.API


class APIAdapter(BaseSourceAdapter):
    """
    Adapter for REST API sources.

    Subclasses build provider-specific queries on top of ``request_json``.
    """

    def __init__(
        self,
        config: APIAdapterConfig,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API adapter.

        Args:
            config: APIAdapterConfig with API settings
            session: Pre-built HTTP session (tests inject a mock here)
        """
        self._session: Optional[requests.Session] = session
        super().__init__(config)

    @property
    def api_config(self) -> APIAdapterConfig:
        """Get typed config."""
        return self.config

    def _validate_config(self) -> None:
        if not self.api_config.base_url:
            raise ValueError("API adapter requires base_url")

    def _get_session(self) -> requests.Session:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                "Accept": "application/json",
                **self.api_config.headers,
            })
        return self._session

    def build_url(self, path: str) -> str:
        return f"{self.api_config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def request_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET ``path`` and decode the JSON body.

        The API key is appended as a query parameter when configured.

        Args:
            path: Path relative to base_url
            params: Query parameters (already stripped of None values)

        Returns:
            Decoded JSON body, or None when the body is empty

        Raises:
            SourceError: On HTTP error status or transport failure
        """
        query = dict(params or {})
        if self.api_config.api_key:
            query[self.api_config.api_key_param] = self.api_config.api_key

        url = self.build_url(path)
        self.logger.debug(f"GET {url}")

        try:
            response = self._get_session().get(
                url,
                params=query,
                timeout=self.api_config.request_timeout,
            )
        except requests.RequestException as e:
            error = error_from_exception(e)
            self.logger.error(f"Request to {url} failed: {error.message}")
            raise error from e

        if not response.ok:
            error = error_from_response(response)
            self.logger.error(f"Request to {url} rejected: {error.message}")
            raise error

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise SourceError.upstream_fault(
                f"Invalid API response: {e}", response.status_code
            ) from e

    def close(self) -> None:
        """Close HTTP session."""
        if self._session:
            self._session.close()
            self._session = None
