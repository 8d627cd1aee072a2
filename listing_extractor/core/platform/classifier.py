# listing_extractor/core/platform/classifier.py
"""
URL → platform classification.

Matching is a case-insensitive substring test against the ordered domain
table; the first hit wins and everything else is `Platform.generic`.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from listing_extractor.logs import redact_url
from listing_extractor.schemas.labels import (
    GENERIC_FALLBACK_DOMAINS,
    HEAVY_FETCH_PLATFORMS,
    PLATFORM_DOMAINS,
)
from listing_extractor.schemas.models import Classification, FetchPolicy, Platform

logger = logging.getLogger(__name__)


def is_valid_url(url: str) -> bool:
    """Absolute http(s) URL with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def detect_platform(url: str) -> Platform:
    low = url.lower()
    for domain, platform in PLATFORM_DOMAINS:
        if domain in low:
            return platform
    return Platform.generic


def requires_heavy_fetch(url: str, policy: FetchPolicy | None = None) -> bool:
    pol = policy or FetchPolicy()
    if not pol.allow_browser:
        return False
    return detect_platform(url) in HEAVY_FETCH_PLATFORMS


def classify(url: str, policy: FetchPolicy | None = None) -> Classification:
    platform = detect_platform(url)
    heavy = requires_heavy_fetch(url, policy)
    logger.debug("classified %s as %s (heavy=%s)", redact_url(url), platform.value, heavy)
    return Classification(platform=platform, requires_heavy_fetch=heavy)


def is_supported_platform(url: str) -> bool:
    """
    True for any named source. Generic URLs are only accepted when they still
    mention one of the two most common sources.
    """
    if detect_platform(url) is not Platform.generic:
        return True
    return any(d in url for d in GENERIC_FALLBACK_DOMAINS)
