# listing_extractor/tools/listing_extract.py
"""
Listing extraction tool (URL → validated listing record).

Pipeline (one call, nothing persisted between calls):
  1) core.platform.classify(url)            → platform + fetch strategy
  2) PageFetcher.fetch(url, strategy)       → page markup
       heavy failure → one lightweight retry, then a terminal failure
  3) core.normalize.parse_listing(...)      → ExtractedListing (best effort)
  4) core.validate.validate_listing(...)    → cleaned record + issues + confidence
  5) post-validation gate                   → block page / no data / success

This module is the single entry point for the CLI and any service wrapper.
Every failure comes back as an `ExtractionResult` with a user-facing message;
nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from listing_extractor.core.fetch import (
    DefaultPageFetcher,
    FetchError,
    FetchErrorKind,
    PageFetcher,
    classify_fetcher_error,
    run_on_browser_loop,
)
from listing_extractor.core.normalize import parse_listing
from listing_extractor.core.platform import classify, is_supported_platform, is_valid_url
from listing_extractor.core.validate import (
    BLOCK_PAGE_MESSAGE,
    detect_block_page,
    extracted_fields,
    has_block_issue,
    missing_fields,
    validate_listing,
)
from listing_extractor.logs import redact_url
from listing_extractor.schemas.labels import PLATFORM_DISPLAY_NAMES
from listing_extractor.schemas.models import (
    ErrorCode,
    ExtractionResult,
    FetchPolicy,
    FetchStrategy,
    Platform,
    ValidationSummary,
)

logger = logging.getLogger(__name__)

# =========================
# User-facing messages
# =========================
INVALID_URL_MESSAGE = "Invalid URL format"
UNSUPPORTED_PLATFORM_MESSAGE = "Unsupported platform. Supported: " + ", ".join(PLATFORM_DISPLAY_NAMES.values())
EMPTY_PAGE_MESSAGE = "Failed to fetch listing page"
PARSE_FAILED_MESSAGE = "Failed to parse listing page. Please try the browser extension or manual entry."
SITE_BLOCKING_MESSAGE = (
    "The listing site is blocking automated access. Please use the browser extension instead, "
    "which runs in your browser and can access the page directly. "
    "Alternatively, you can manually enter the listing details."
)
NO_DATA_MESSAGE = "Could not extract listing data. Please try the browser extension or manual entry."

_ERROR_CODES: dict[FetchErrorKind, ErrorCode] = {
    FetchErrorKind.access_denied: ErrorCode.access_denied,
    FetchErrorKind.not_found: ErrorCode.not_found,
    FetchErrorKind.rate_limited: ErrorCode.rate_limited,
    FetchErrorKind.failed: ErrorCode.fetch_failed,
    FetchErrorKind.timeout: ErrorCode.timeout,
}


def fallback_failure_message(heavy_error: FetchError) -> str:
    return f"Failed to extract listing: {heavy_error.message.rstrip('.')}. Please try the browser extension instead."


# ---------------------------
# Fetching
# ---------------------------


async def _fetch_page(fetcher: PageFetcher, url: str, strategy: FetchStrategy) -> str:
    """
    Run the chosen strategy. A heavy failure gets exactly one lightweight retry;
    a lightweight failure is terminal. Always raises FetchError on failure.
    """
    if strategy is FetchStrategy.light:
        try:
            return await fetcher.fetch(url, FetchStrategy.light)
        except Exception as exc:
            raise classify_fetcher_error(exc) from exc

    try:
        return await fetcher.fetch(url, FetchStrategy.heavy)
    except Exception as exc:
        heavy_error = classify_fetcher_error(exc)
        logger.warning("heavy fetch failed for %s (%s); falling back to HTTP", redact_url(url), heavy_error.message)

    try:
        return await fetcher.fetch(url, FetchStrategy.light)
    except Exception as exc:
        light_error = classify_fetcher_error(exc)
        logger.warning("fallback HTTP fetch failed for %s (%s)", redact_url(url), light_error.message)
        raise FetchError(
            fallback_failure_message(heavy_error),
            kind=light_error.kind,
            status=light_error.status,
        ) from exc


# ---------------------------
# Public API
# ---------------------------


async def extract_listing(
    url: str,
    *,
    policy: FetchPolicy | None = None,
    fetcher: PageFetcher | None = None,
) -> ExtractionResult:
    """
    Fetch, parse and validate one listing URL.

    `fetcher` defaults to the real heavy/light fetchers configured by `policy`
    (itself defaulting to `FetchPolicy.from_env()`).
    """
    url = (url or "").strip()
    if not is_valid_url(url):
        return ExtractionResult.failure(ErrorCode.invalid_url, INVALID_URL_MESSAGE)
    if not is_supported_platform(url):
        return ExtractionResult.failure(ErrorCode.unsupported_platform, UNSUPPORTED_PLATFORM_MESSAGE)

    pol = policy or FetchPolicy.from_env()
    classification = classify(url, pol)
    page_fetcher = fetcher or DefaultPageFetcher(pol)
    safe_url = redact_url(url)
    logger.info("extracting %s (platform=%s, strategy=%s)", safe_url, classification.platform.value, classification.strategy.value)

    # Fetching
    try:
        html = await _fetch_page(page_fetcher, url, classification.strategy)
    except FetchError as exc:
        logger.info("extraction failed for %s: %s", safe_url, exc.kind.value)
        return ExtractionResult.failure(_ERROR_CODES[exc.kind], exc.message)

    if not isinstance(html, str) or not html.strip():
        return ExtractionResult.failure(ErrorCode.fetch_failed, EMPTY_PAGE_MESSAGE)

    return _parse_and_validate(classification.platform, html, url)


def _parse_and_validate(platform: Platform, html: str, url: str) -> ExtractionResult:
    """Parsing → Validating → post-validation gate. Shared with offline replay."""
    safe_url = redact_url(url)

    # Parsing
    try:
        record = parse_listing(platform, html, url)
    except Exception:  # noqa: BLE001
        logger.exception("parser crashed for %s", safe_url)
        return ExtractionResult.failure(ErrorCode.parse_failed, PARSE_FAILED_MESSAGE)

    # Validating
    validation = validate_listing(record)
    if has_block_issue(validation):
        logger.info("block page detected in parsed fields for %s", safe_url)
        return ExtractionResult.failure(ErrorCode.blocked, BLOCK_PAGE_MESSAGE, extracted_fields=[])

    cleaned = validation.cleaned_data
    present = extracted_fields(cleaned)
    missing = missing_fields(cleaned)

    if missing and not present:
        signature = detect_block_page(html)
        if signature:
            logger.info("block page detected in markup for %s (%s)", safe_url, signature)
            return ExtractionResult.failure(ErrorCode.blocked, SITE_BLOCKING_MESSAGE, extracted_fields=[])
        return ExtractionResult.failure(ErrorCode.no_data, NO_DATA_MESSAGE)

    logger.info(
        "extracted %d field(s) from %s (confidence=%d, valid=%s)",
        len(present),
        safe_url,
        validation.confidence,
        validation.is_valid,
    )
    return ExtractionResult(
        success=True,
        data=cleaned,
        extracted_fields=present,
        missing_fields=missing or None,
        validation=ValidationSummary.from_result(validation),
    )


def extract_listing_from_html(url: str, html: str) -> ExtractionResult:
    """Offline replay: parse + validate a saved page as if it had been fetched from `url`."""
    url = (url or "").strip()
    if not is_valid_url(url):
        return ExtractionResult.failure(ErrorCode.invalid_url, INVALID_URL_MESSAGE)
    if not html.strip():
        return ExtractionResult.failure(ErrorCode.fetch_failed, EMPTY_PAGE_MESSAGE)
    return _parse_and_validate(classify(url).platform, html, url)


def extract_listing_sync(
    url: str,
    *,
    policy: FetchPolicy | None = None,
    fetcher: PageFetcher | None = None,
) -> ExtractionResult:
    """
    Blocking wrapper for scripts, the CLI and request handlers.

    Every caller, from any thread, runs on the shared browser loop, so the
    pooled browser stays warm between calls. Release it with
    `close_browser_sync()` at shutdown.
    """
    return run_on_browser_loop(extract_listing(url, policy=policy, fetcher=fetcher))


# ---------------------------
# Service-facing wrapper
# ---------------------------


def _policy_from_dict(d: dict[str, Any] | FetchPolicy | None) -> FetchPolicy:
    """
    Normalize an incoming policy that may be:
      - a FetchPolicy instance,
      - a plain dict of policy fields (merged over the environment),
      - or None (environment / defaults).
    """
    if isinstance(d, FetchPolicy):
        return d
    return FetchPolicy.from_env(**(d or {}))


def run_listing_extract_tool(*, url: str, fetch_policy: dict[str, Any] | FetchPolicy | None = None) -> dict[str, Any]:
    """
    JSON-in/JSON-out entry point for request handlers.
    Returns the plain-data payload of the ExtractionResult.
    """
    return extract_listing_sync(url, policy=_policy_from_dict(fetch_policy)).to_payload()


__all__ = [
    "INVALID_URL_MESSAGE",
    "UNSUPPORTED_PLATFORM_MESSAGE",
    "SITE_BLOCKING_MESSAGE",
    "NO_DATA_MESSAGE",
    "extract_listing",
    "extract_listing_sync",
    "extract_listing_from_html",
    "run_listing_extract_tool",
]
