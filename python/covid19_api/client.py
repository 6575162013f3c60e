"""
HTTP client for the COVID-19 REST API
=====================================

Issues GET requests against covid19api.com endpoints and returns the decoded
JSON body. Every call makes exactly one request: there are no retries and no
response caching.

Errors are mapped onto a small exception hierarchy rooted at
Covid19APIError so callers can tell user mistakes (unknown country) apart
from transport, status and decoding failures.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlencode

import requests

from covid19_api.config import get_settings

_logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class Covid19APIError(Exception):
    """Base class for all errors raised by covid19_api."""


class UnknownCountryError(Covid19APIError, LookupError):
    """A country name or slug is not known to the directory or summary."""

    def __init__(self, country: str, message: Optional[str] = None):
        self.country = country
        super().__init__(message or f"Unknown country: '{country}'")


class NetworkError(Covid19APIError):
    """The API could not be reached (connection error, timeout, ...)."""


class HttpStatusError(Covid19APIError):
    """The API answered with a non-success status code."""

    def __init__(self, status_code: int, url: str, reason: str = ""):
        self.status_code = status_code
        self.url = url
        detail = f" {reason}" if reason else ""
        super().__init__(f"HTTP {status_code}{detail} for {url}")


class ParseError(Covid19APIError):
    """A response body (or cache file) is not valid structured data."""


class DuplicateKeyError(Covid19APIError):
    """The same (country, date) pair appears more than once in a merge."""

    def __init__(self, keys: Iterable[Tuple[Any, Any]]):
        self.keys: List[Tuple[Any, Any]] = list(keys)
        preview = ", ".join(f"({c}, {d})" for c, d in self.keys[:5])
        more = f" and {len(self.keys) - 5} more" if len(self.keys) > 5 else ""
        super().__init__(f"Duplicate (country, date) pairs: {preview}{more}")


# =============================================================================
# Client
# =============================================================================

class Covid19APIClient:
    """Thin synchronous client for covid19api.com.

    Example:
        >>> client = Covid19APIClient()
        >>> summary = client.get("/summary")
        >>> len(summary["Countries"]) > 0
        True
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        settings_path: Optional[str] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root. Defaults to the configured base URL.
            timeout: Request timeout in seconds. Defaults to the configured value.
            session: Pre-built requests session (mainly for tests).
            settings_path: Optional YAML settings file, see config.get_settings().
        """
        settings = get_settings(settings_path)
        self.base_url = (base_url or settings["base_url"]).rstrip("/")
        self.timeout = timeout if timeout is not None else settings["timeout"]
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": settings["user_agent"]})

    def build_url(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Build the full request URL.

        Query values are appended as given; only characters that are unsafe
        in a query string are escaped, so timestamps keep their colons.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        if params:
            url = f"{url}?{urlencode(params, safe=':')}"
        return url

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue one GET request and return the decoded JSON body.

        Args:
            endpoint: Endpoint path, e.g. '/summary' or '/total/country/philippines'
            params: Optional query parameters

        Returns:
            Decoded JSON value (usually a list or dict)

        Raises:
            NetworkError: Transport-level failure
            HttpStatusError: Non-2xx response
            ParseError: Body is not valid JSON
        """
        url = self.build_url(endpoint, params)
        _logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Could not reach {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise HttpStatusError(response.status_code, url, getattr(response, "reason", "") or "")

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Response from {url} is not valid JSON: {e}") from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Covid19APIClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
