# tests/integration/test_listing_extract.py

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from listing_extractor.core.fetch import (
    AccessDeniedError,
    BrowserPool,
    FetchError,
    FetchTimeoutError,
    NotFoundError,
    RateLimitedError,
    close_browser_sync,
    http_fetcher,
)
from listing_extractor.core.fetch import browser as browser_module
from listing_extractor.core.validate import BLOCK_PAGE_MESSAGE
from listing_extractor.schemas.models import ErrorCode, ExtractedListing, FetchPolicy, FetchStrategy
from listing_extractor.tools import (
    extract_listing,
    extract_listing_from_html,
    extract_listing_sync,
    run_listing_extract_tool,
)
from listing_extractor.tools import listing_extract
from tests.utils import (
    BLOCK_PAGE_HTML,
    REDFIN_URL,
    UNSUPPORTED_URL,
    ZILLOW_URL,
    FakeResponse,
    fake_launcher,
    full_render_cache,
    make_jsonld_listing,
    make_page,
    make_zillow_page,
    make_zillow_property,
)

pytestmark = pytest.mark.integration

JSONLD_PAGE = make_page(jsonld=make_jsonld_listing())
ZILLOW_PAGE = make_zillow_page(full_render_cache(make_zillow_property()))


def _run(url, fetcher, policy=None):
    return asyncio.run(extract_listing(url, fetcher=fetcher, policy=policy or FetchPolicy(settle_s=0)))


@pytest.fixture
def parser_must_not_run(monkeypatch):
    def _boom(*args, **kwargs):
        raise AssertionError("parser should not run")

    monkeypatch.setattr(listing_extract, "parse_listing", _boom)


# -----------------------------
# Happy paths
# -----------------------------
def test_light_platform_success(fake_fetcher):
    fetcher = fake_fetcher(light=JSONLD_PAGE)
    result = _run(REDFIN_URL, fetcher)

    assert result.success is True
    assert fetcher.strategies == [FetchStrategy.light]
    assert result.data.price == "$523,900"
    assert result.data.bathrooms == "2.0"
    assert "price" in result.extracted_fields
    assert result.missing_fields is None
    assert result.validation.is_valid is True
    assert result.validation.confidence == 100
    assert result.is_partial is False

    payload = result.to_payload()
    assert payload["success"] is True
    assert payload["data"]["squareFeet"] == "1850"
    assert "missingFields" not in payload


def test_heavy_platform_uses_browser_first(fake_fetcher):
    fetcher = fake_fetcher(heavy=ZILLOW_PAGE)
    result = _run(ZILLOW_URL, fetcher)

    assert result.success is True
    assert fetcher.strategies == [FetchStrategy.heavy]
    assert result.data.status == "FOR_SALE"


def test_browser_disabled_fetches_heavy_platform_over_http(fake_fetcher):
    fetcher = fake_fetcher(light=ZILLOW_PAGE)
    result = _run(ZILLOW_URL, fetcher, FetchPolicy(allow_browser=False))

    assert result.success is True
    assert fetcher.strategies == [FetchStrategy.light]


# -----------------------------
# Fetch failures
# -----------------------------
def test_not_found_never_reaches_parser(fake_fetcher, parser_must_not_run):
    result = _run(REDFIN_URL, fake_fetcher(light=NotFoundError()))

    assert result.success is False
    assert result.error_code is ErrorCode.not_found
    assert result.error == "Listing page not found. Please check the URL."
    assert result.data is None


def test_light_failure_is_not_retried(fake_fetcher):
    fetcher = fake_fetcher(light=FetchError("Failed to fetch listing page (status 500)"))
    result = _run(REDFIN_URL, fetcher)

    assert result.error_code is ErrorCode.fetch_failed
    assert fetcher.strategies == [FetchStrategy.light]


def test_heavy_failure_falls_back_to_light(fake_fetcher, caplog):
    caplog.set_level(logging.WARNING, logger="listing_extractor")
    fetcher = fake_fetcher(heavy=AccessDeniedError(), light=ZILLOW_PAGE)
    result = _run(ZILLOW_URL, fetcher)

    assert result.success is True
    assert fetcher.strategies == [FetchStrategy.heavy, FetchStrategy.light]
    assert result.data.address == "123 Main St"
    assert any("falling back to HTTP" in r.getMessage() for r in caplog.records)


def test_heavy_and_light_failure_reports_both(fake_fetcher, parser_must_not_run):
    fetcher = fake_fetcher(heavy=FetchTimeoutError(), light=RateLimitedError())
    result = _run(ZILLOW_URL, fetcher)

    assert result.success is False
    assert result.error_code is ErrorCode.rate_limited
    assert result.error == (
        "Failed to extract listing: Extraction timed out. Please try again. Please try the browser extension instead."
    )
    assert fetcher.strategies == [FetchStrategy.heavy, FetchStrategy.light]


def test_unexpected_fetcher_exception_is_classified(fake_fetcher):
    result = _run(REDFIN_URL, fake_fetcher(light=RuntimeError("socket exploded")))
    assert result.error_code is ErrorCode.fetch_failed
    assert "socket exploded" in result.error


def test_empty_page_is_a_fetch_failure(fake_fetcher, parser_must_not_run):
    result = _run(REDFIN_URL, fake_fetcher(light="   "))
    assert result.error_code is ErrorCode.fetch_failed


# -----------------------------
# Input gate
# -----------------------------
def test_invalid_url(fake_fetcher):
    fetcher = fake_fetcher()
    result = _run("not a url", fetcher)

    assert result.error_code is ErrorCode.invalid_url
    assert result.error == "Invalid URL format"
    assert fetcher.calls == []


def test_unsupported_platform(fake_fetcher):
    fetcher = fake_fetcher()
    result = _run(UNSUPPORTED_URL, fetcher)

    assert result.error_code is ErrorCode.unsupported_platform
    assert result.error.startswith("Unsupported platform. Supported: Zillow")
    assert fetcher.calls == []


# -----------------------------
# Parse / validation gate
# -----------------------------
def test_block_page_markup_is_reported(fake_fetcher):
    result = _run(REDFIN_URL, fake_fetcher(light=BLOCK_PAGE_HTML))

    assert result.success is False
    assert result.error_code is ErrorCode.blocked
    assert result.error == BLOCK_PAGE_MESSAGE
    assert result.extracted_fields == []
    assert result.to_payload()["extractedFields"] == []


def test_empty_parse_on_block_markup(fake_fetcher, monkeypatch):
    monkeypatch.setattr(listing_extract, "parse_listing", lambda platform, html, url: ExtractedListing(url=url))
    result = _run(REDFIN_URL, fake_fetcher(light="<html><body>Checking your browser...</body></html>"))

    assert result.error_code is ErrorCode.blocked
    assert result.error == listing_extract.SITE_BLOCKING_MESSAGE


def test_empty_parse_on_ordinary_markup(fake_fetcher, monkeypatch):
    monkeypatch.setattr(listing_extract, "parse_listing", lambda platform, html, url: ExtractedListing(url=url))
    result = _run(REDFIN_URL, fake_fetcher(light="<html><body>Nothing here</body></html>"))

    assert result.error_code is ErrorCode.no_data
    assert result.error == listing_extract.NO_DATA_MESSAGE


def test_partial_result_reports_missing_address(fake_fetcher, monkeypatch):
    monkeypatch.setattr(
        listing_extract,
        "parse_listing",
        lambda platform, html, url: ExtractedListing(url=url, price="$400,000", bedrooms="3"),
    )
    result = _run(REDFIN_URL, fake_fetcher(light="<html></html>"))

    assert result.success is True
    assert result.is_partial is True
    assert result.missing_fields == ["address"]
    assert result.extracted_fields == ["price", "bedrooms"]
    assert result.validation.is_valid is False


def test_parser_crash_becomes_parse_failure(fake_fetcher, monkeypatch):
    def _crash(platform, html, url):
        raise ValueError("unexpected markup")

    monkeypatch.setattr(listing_extract, "parse_listing", _crash)
    result = _run(REDFIN_URL, fake_fetcher(light=JSONLD_PAGE))

    assert result.error_code is ErrorCode.parse_failed
    assert result.error == listing_extract.PARSE_FAILED_MESSAGE


# -----------------------------
# Sync / offline / tool wrappers
# -----------------------------
def test_extract_listing_sync_with_injected_fetcher(fake_fetcher):
    result = extract_listing_sync(REDFIN_URL, fetcher=fake_fetcher(light=JSONLD_PAGE))
    assert result.success is True


def test_concurrent_sync_calls_share_one_browser(monkeypatch):
    launch, launched = fake_launcher(html=ZILLOW_PAGE)
    monkeypatch.setattr(browser_module, "_default_pool", BrowserPool(launcher=launch))
    policy = FetchPolicy(settle_s=0)

    with ThreadPoolExecutor(max_workers=4) as ex:
        results = list(ex.map(lambda _: extract_listing_sync(ZILLOW_URL, policy=policy), range(4)))

    assert all(r.success for r in results)
    assert len({r.data.address for r in results}) == 1
    assert len(launched) == 1
    assert len(launched[0].contexts) == 4
    assert launched[0].closed is False

    close_browser_sync()
    assert launched[0].closed is True


def test_tool_wrapper_over_http(monkeypatch):
    calls = []

    def _get(url, headers, timeout, max_redirects):
        calls.append(url)
        return FakeResponse(200, JSONLD_PAGE)

    monkeypatch.setattr(http_fetcher, "_http_get", _get)
    payload = run_listing_extract_tool(url=ZILLOW_URL, fetch_policy={"allow_browser": False, "timeout_s": 3})

    assert calls == [ZILLOW_URL]
    assert payload["success"] is True
    assert payload["data"]["price"] == "$523,900"
    assert payload["validation"]["confidence"] == 100


def test_tool_wrapper_reports_http_errors(monkeypatch):
    monkeypatch.setattr(http_fetcher, "_http_get", lambda *a, **k: FakeResponse(403, "denied"))
    payload = run_listing_extract_tool(url=REDFIN_URL)

    assert payload["success"] is False
    assert payload["errorCode"] == "access_denied"


def test_offline_replay():
    result = extract_listing_from_html(ZILLOW_URL, ZILLOW_PAGE)
    assert result.success is True
    assert result.data.mls_id == "MLS-778899"

    assert extract_listing_from_html("nope", ZILLOW_PAGE).error_code is ErrorCode.invalid_url
    assert extract_listing_from_html(ZILLOW_URL, "").error_code is ErrorCode.fetch_failed
