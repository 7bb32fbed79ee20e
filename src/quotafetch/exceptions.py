"""Exception hierarchy for quotafetch.

All exceptions inherit from :class:`QuotafetchError`, which carries a
``kind`` attribute taken from :class:`ErrorKind`.  Callers that need to
tell an API failure apart from other errors check the tag (or use
:func:`is_api_error`) instead of inspecting the exception's shape.

Subclass hierarchy::

    QuotafetchError          (kind GENERIC)
    +-- ConfigError          (kind CONFIG)
    +-- ApiError             (kind API)
        +-- RateLimitExceededError (kind RATE_LIMIT)

Transport failures raised by :mod:`httpx` (DNS, refused connections,
timeouts) are not wrapped and reach the caller unchanged.
"""

from __future__ import annotations

import enum
from typing import Optional

import httpx


class ErrorKind(str, enum.Enum):
    """Discriminator carried by every quotafetch exception."""

    GENERIC = "generic"
    CONFIG = "config"
    API = "api"
    RATE_LIMIT = "rate_limit"


class QuotafetchError(Exception):
    """Base exception for all quotafetch errors.

    Args:
        message: Human-readable error description.
    """

    kind: ErrorKind = ErrorKind.GENERIC

    def __init__(self, message: str):
        super().__init__(message)


class ConfigError(QuotafetchError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    kind = ErrorKind.CONFIG


class ApiError(QuotafetchError):
    """Raised when the API answers with a status outside ``[200, 400)``.

    The offending :class:`httpx.Response` is kept on the exception so the
    caller can inspect the status, headers, and body.

    Args:
        response: The unsuccessful response.
        url: Originating request URL.  Defaults to the URL of the request
            attached to *response*.

    Example::

        try:
            await fetch("https://api.example.com/docs")
        except ApiError as exc:
            print(exc.status_code, exc.url)
    """

    kind = ErrorKind.API

    def __init__(self, response: httpx.Response, url: Optional[str] = None):
        self.response = response
        self.status_code = response.status_code
        self.reason_phrase = response.reason_phrase
        self.url = url if url is not None else _request_url(response)
        super().__init__(
            "Received unsuccessful status code response from API for request to "
            f"{self.url}: HTTP {self.status_code} {self.reason_phrase}"
        )


class RateLimitExceededError(ApiError):
    """Raised when HTTP 429 persists beyond the configured retry cap."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(self, response: httpx.Response, url: Optional[str] = None, attempts: int = 0):
        super().__init__(response, url)
        self.attempts = attempts


def is_api_error(exc: BaseException) -> bool:
    """Return ``True`` if *exc* is tagged as an API error of any flavour."""
    return getattr(exc, "kind", None) in (ErrorKind.API, ErrorKind.RATE_LIMIT)


def _request_url(response: httpx.Response) -> str:
    try:
        return str(response.request.url)
    except RuntimeError:
        # Responses built by hand have no request attached.
        return ""
