# listing_extractor/core/fetch/http_fetcher.py
"""
Lightweight fetch path: one HTTP GET with a realistic desktop-browser header set.
"""

from __future__ import annotations

import logging

import requests

from listing_extractor.logs import redact_url
from listing_extractor.schemas.models import FetchPolicy

from .errors import error_for_status, fetcher_error_guard

logger = logging.getLogger(__name__)

_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8,"
    "application/signed-exchange;v=b3;q=0.7"
)


def browser_headers(policy: FetchPolicy) -> dict[str, str]:
    """Header set of a desktop Chrome navigation."""
    return {
        "User-Agent": policy.user_agent,
        "Accept": _ACCEPT,
        "Accept-Language": policy.accept_language,
        "Accept-Encoding": "gzip, deflate",  # requests only decodes br with brotli installed
        "DNT": "1",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Cache-Control": "max-age=0",
        "Referer": policy.referer,
    }


def _http_get(url: str, headers: dict[str, str], timeout: float, max_redirects: int) -> requests.Response:
    with requests.Session() as session:
        session.max_redirects = max_redirects
        return session.get(url, headers=headers, timeout=timeout, allow_redirects=True)


def fetch_light(url: str, policy: FetchPolicy | None = None) -> str:
    """
    GET `url` and return its markup.

    Raises:
        AccessDeniedError (403), NotFoundError (404), RateLimitedError (429),
        FetchTimeoutError (timeout), FetchError (anything else non-2xx or transport).
    """
    pol = policy or FetchPolicy()
    with fetcher_error_guard():
        resp = _http_get(url, browser_headers(pol), pol.timeout_s, pol.max_redirects)
        err = error_for_status(resp.status_code, url)
        if err is not None:
            logger.info("HTTP %s for %s", resp.status_code, redact_url(url))
            raise err
        return resp.text
