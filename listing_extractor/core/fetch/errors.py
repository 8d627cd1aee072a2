# listing_extractor/core/fetch/errors.py
"""
Typed errors + utilities for the fetch layer.

Exports
-------
- ExtractionError, FetchError, AccessDeniedError, NotFoundError,
  RateLimitedError, FetchTimeoutError, FetchErrorKind
- FETCHER_ERRORS
- error_for_status(status, url)
- classify_fetcher_error(exc)
- fetcher_error_guard()
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

import requests

# =========================
# Exception types
# =========================


class FetchErrorKind(str, Enum):
    access_denied = "access_denied"
    not_found = "not_found"
    rate_limited = "rate_limited"
    failed = "failed"
    timeout = "timeout"


class ExtractionError(RuntimeError):
    """Base class for listing-extraction failures."""


class FetchError(ExtractionError):
    """Page markup could not be retrieved. `kind` lets callers branch on the cause."""

    kind: FetchErrorKind = FetchErrorKind.failed
    default_message = "Failed to fetch listing page."

    def __init__(self, message: str | None = None, *, kind: FetchErrorKind | None = None, status: int | None = None):
        super().__init__(message or self.default_message)
        if kind is not None:
            self.kind = kind
        self.status = status

    @property
    def message(self) -> str:
        return str(self)


class AccessDeniedError(FetchError):
    kind = FetchErrorKind.access_denied
    default_message = "Access denied. The listing site may be blocking automated requests."


class NotFoundError(FetchError):
    kind = FetchErrorKind.not_found
    default_message = "Listing page not found. Please check the URL."


class RateLimitedError(FetchError):
    kind = FetchErrorKind.rate_limited
    default_message = "Rate limited. Please wait a moment and try again."


class FetchTimeoutError(FetchError):
    kind = FetchErrorKind.timeout
    default_message = "Extraction timed out. Please try again."


# Selector tuple for grouped exception handling
FETCHER_ERRORS = (
    AccessDeniedError,
    NotFoundError,
    RateLimitedError,
    FetchTimeoutError,
    FetchError,
)

_TIMEOUT_PATTERN = re.compile(r"(timeout|timed\s*out)", re.IGNORECASE)

# =========================
# Classification helpers
# =========================


def error_for_status(status: int, url: str | None = None) -> FetchError | None:
    """Map an HTTP status onto a typed error; None for 2xx."""
    if 200 <= status < 300:
        return None
    if status == 403:
        return AccessDeniedError(status=status)
    if status == 404:
        return NotFoundError(status=status)
    if status == 429:
        return RateLimitedError(status=status)
    return FetchError(f"Failed to fetch listing page (status {status})", status=status)


def classify_fetcher_error(exc: BaseException) -> FetchError:
    """
    Map arbitrary exceptions raised inside the fetchers to a typed FetchError.

    Heuristics:
      - Any FetchError subclass → passed through
      - requests.Timeout / asyncio.TimeoutError / Playwright TimeoutError → FetchTimeoutError
      - requests.TooManyRedirects → FetchError("too many redirects")
      - other requests.* errors → FetchError(failed)
      - messages mentioning a timeout → FetchTimeoutError
      - Fallback → FetchError(failed) with the original message
    """
    if isinstance(exc, FetchError):
        return exc

    if isinstance(exc, TimeoutError):
        return FetchTimeoutError()

    if isinstance(exc, requests.Timeout):
        return FetchTimeoutError()
    if isinstance(exc, requests.TooManyRedirects):
        return FetchError("Failed to fetch listing page (too many redirects)")
    if isinstance(exc, requests.RequestException):
        return FetchError(f"Failed to fetch listing page: {exc}")

    msg = f"{type(exc).__name__}: {exc}"
    if _TIMEOUT_PATTERN.search(msg):
        return FetchTimeoutError()
    return FetchError(f"Failed to fetch listing page: {exc}" if str(exc) else None)


@contextmanager
def fetcher_error_guard() -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from fetcher internals."""
    try:
        yield
    except FETCHER_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_fetcher_error(exc) from exc


__all__ = [
    "FetchErrorKind",
    "ExtractionError",
    "FetchError",
    "AccessDeniedError",
    "NotFoundError",
    "RateLimitedError",
    "FetchTimeoutError",
    "FETCHER_ERRORS",
    "error_for_status",
    "classify_fetcher_error",
    "fetcher_error_guard",
]
