"""
Source errors.

Every failure talking to an external provider (event listings or geocoding)
is raised as a single ``SourceError`` carrying a ``SourceErrorKind`` so that
callers branch on the kind instead of inspecting message text.
"""

from enum import Enum
from typing import Any, Optional
import logging

import requests


logger = logging.getLogger(__name__)

DATE_FORMAT_MESSAGE = (
    "Query param with date must be of valid format YYYY-MM-DDTHH:mm:ssZ "
    "{example: 2020-08-01T14:00:00Z }"
)
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
UNAUTHORIZED_MESSAGE = "Unauthorized: Invalid API key"
UNREACHABLE_MESSAGE = (
    "No response received from API. Please check your network connection."
)
DEFAULT_FAULT_MESSAGE = "An error occurred while fetching data"
GENERIC_USER_MESSAGE = "Something went wrong. Please try again."


class SourceErrorKind(str, Enum):
    """Category of a provider failure."""

    INVALID_DATE_FORMAT = "invalid_date_format"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_FAULT = "upstream_fault"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"
    REQUEST_SETUP = "request_setup"


class SourceError(Exception):
    """
    Error raised by source adapters and geocoding clients.

    Attributes:
        kind: Which category of failure occurred
        message: Human-readable description
        status_code: HTTP status when the provider answered
    """

    def __init__(
        self,
        kind: SourceErrorKind,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @classmethod
    def upstream_fault(cls, message: str, status_code: Optional[int] = None) -> "SourceError":
        return cls(SourceErrorKind.UPSTREAM_FAULT, message, status_code)

    @property
    def is_rate_limited(self) -> bool:
        return self.kind == SourceErrorKind.RATE_LIMITED

    @property
    def is_date_format(self) -> bool:
        return self.kind == SourceErrorKind.INVALID_DATE_FORMAT

    @property
    def user_message(self) -> str:
        """Actionable message for rate limiting and date format, generic otherwise."""
        if self.is_rate_limited:
            return RATE_LIMIT_MESSAGE
        if self.is_date_format:
            return DATE_FORMAT_MESSAGE
        return GENERIC_USER_MESSAGE

    def __repr__(self) -> str:
        return (
            f"SourceError(kind={self.kind.value!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


def invalid_date_format(param: str, value: Any) -> SourceError:
    logger.error(f"Invalid date format for {param}: {value}")
    return SourceError(SourceErrorKind.INVALID_DATE_FORMAT, DATE_FORMAT_MESSAGE)


def extract_fault_message(body: Any) -> Optional[str]:
    """
    Pull a readable message out of a provider error body.

    Checks, in order: ``fault.faultstring``, ``errors[0].detail``,
    ``message``, ``error``, then a plain string body.
    """
    if isinstance(body, dict):
        fault = body.get("fault")
        if isinstance(fault, dict) and "faultstring" in fault:
            return str(fault["faultstring"]) or None

        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and "detail" in first:
                return str(first["detail"]) or None
            return None

        if "message" in body:
            return str(body["message"])
        if "error" in body:
            return str(body["error"])
        return None

    if isinstance(body, str) and body:
        return body
    return None


def error_from_response(response: requests.Response) -> SourceError:
    """Translate a non-2xx provider response into a ``SourceError``."""
    status = response.status_code

    if status == 401:
        return SourceError(SourceErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE, status)
    if status == 429:
        return SourceError(SourceErrorKind.RATE_LIMITED, RATE_LIMIT_MESSAGE, status)

    try:
        body: Any = response.json()
    except ValueError:
        body = response.text

    message = extract_fault_message(body) or DEFAULT_FAULT_MESSAGE
    return SourceError(
        SourceErrorKind.UPSTREAM_FAULT,
        f"{message} (Status: {status})",
        status,
    )


def error_from_exception(exc: requests.RequestException) -> SourceError:
    """Translate a ``requests`` failure into a ``SourceError``."""
    if exc.response is not None:
        return error_from_response(exc.response)

    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return SourceError(SourceErrorKind.UPSTREAM_UNREACHABLE, UNREACHABLE_MESSAGE)

    return SourceError(
        SourceErrorKind.REQUEST_SETUP, str(exc) or DEFAULT_FAULT_MESSAGE
    )
