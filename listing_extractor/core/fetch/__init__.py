# listing_extractor/core/fetch/__init__.py
from .browser import (
    BrowserPool,
    BrowserState,
    close_browser,
    close_browser_sync,
    fetch_heavy,
    get_browser_pool,
    run_on_browser_loop,
)
from .errors import (
    FETCHER_ERRORS,
    AccessDeniedError,
    ExtractionError,
    FetchError,
    FetchErrorKind,
    FetchTimeoutError,
    NotFoundError,
    RateLimitedError,
    classify_fetcher_error,
    error_for_status,
    fetcher_error_guard,
)
from .http_fetcher import browser_headers, fetch_light
from .page_fetcher import DefaultPageFetcher, PageFetcher, fetch

__all__ = [
    "ExtractionError",
    "FetchError",
    "FetchErrorKind",
    "AccessDeniedError",
    "NotFoundError",
    "RateLimitedError",
    "FetchTimeoutError",
    "FETCHER_ERRORS",
    "classify_fetcher_error",
    "error_for_status",
    "fetcher_error_guard",
    "browser_headers",
    "fetch_light",
    "BrowserPool",
    "BrowserState",
    "get_browser_pool",
    "close_browser",
    "close_browser_sync",
    "run_on_browser_loop",
    "fetch_heavy",
    "PageFetcher",
    "DefaultPageFetcher",
    "fetch",
]
