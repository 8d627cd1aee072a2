# listing_extractor/core/fetch/browser.py
"""
Heavy fetch path: headless Chromium via Playwright (async API).

One browser process is shared by the whole process through `BrowserPool`.
Each fetch gets its own browser context + page, so concurrent callers never
share cookies or storage, and the context is closed when the fetch ends.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Coroutine
from enum import Enum
from typing import Any, TypeVar

from listing_extractor.logs import redact_url
from listing_extractor.schemas.models import FetchPolicy

from .errors import error_for_status, fetcher_error_guard
from .http_fetcher import browser_headers

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
]

# Masks the usual automation tells before any page script runs.
STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) =>
  parameters.name === 'notifications'
    ? Promise.resolve({ state: Notification.permission })
    : originalQuery(parameters);
"""

# Headers Playwright manages itself (or that break its response decoding).
_BROWSER_MANAGED_HEADERS = {"User-Agent", "Accept-Encoding", "Connection", "Referer"}

# (driver, browser) factory; swapped out in tests.
Launcher = Callable[[FetchPolicy], Awaitable[tuple[Any, Any]]]

T = TypeVar("T")


async def _launch_chromium(policy: FetchPolicy) -> tuple[Any, Any]:
    try:
        from playwright.async_api import async_playwright
    except Exception as e:  # pragma: no cover
        raise ImportError("playwright not installed") from e

    driver = await async_playwright().start()
    try:
        browser = await driver.chromium.launch(headless=policy.headless, args=_LAUNCH_ARGS)
    except BaseException:
        await driver.stop()
        raise
    return driver, browser


class BrowserState(str, Enum):
    uninitialized = "uninitialized"
    ready = "ready"
    closed = "closed"


async def _close_handles(browser: Any, driver: Any) -> None:
    if browser is not None:
        try:
            await browser.close()
        except Exception:  # noqa: BLE001
            logger.warning("error while closing browser", exc_info=True)
    if driver is not None:
        try:
            await driver.stop()
        except Exception:  # noqa: BLE001
            logger.warning("error while stopping playwright driver", exc_info=True)


class BrowserPool:
    """
    Lazily-launched, process-wide browser.

    `acquire()` is idempotent and single-flight: concurrent callers racing on a
    cold pool trigger exactly one launch. A browser that reports itself
    disconnected is replaced on the next acquire. `close()` tears everything
    down; the pool relaunches transparently afterwards.

    Playwright handles belong to the event loop that launched them. When a
    different loop starts using the pool, the old handles are closed on their
    own loop (if it is still running) before the pool rebinds.
    """

    def __init__(self, launcher: Launcher | None = None) -> None:
        self._launcher: Launcher = launcher or _launch_chromium
        self._driver: Any = None
        self._browser: Any = None
        self._state = BrowserState.uninitialized
        self._lock: asyncio.Lock | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._rebind_guard = threading.Lock()
        self.launch_count = 0

    @property
    def state(self) -> BrowserState:
        return self._state

    def _lock_for_running_loop(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        with self._rebind_guard:
            if self._loop is not loop:
                self._retire_handles()
                if self._state is BrowserState.ready:
                    self._state = BrowserState.uninitialized
                self._lock = asyncio.Lock()
                self._loop = loop
            assert self._lock is not None
            return self._lock

    def _retire_handles(self) -> None:
        browser, driver, owner = self._browser, self._driver, self._loop
        self._browser = None
        self._driver = None
        if browser is None and driver is None:
            return
        if owner is not None and owner.is_running():
            logger.debug("event loop changed; closing browser on its owning loop")
            asyncio.run_coroutine_threadsafe(_close_handles(browser, driver), owner)
        else:
            logger.warning("event loop changed; browser from a finished loop could not be closed")

    async def acquire(self, policy: FetchPolicy | None = None) -> Any:
        pol = policy or FetchPolicy()
        async with self._lock_for_running_loop():
            if self._browser is not None and self._browser.is_connected():
                return self._browser
            if self._browser is not None:
                logger.info("shared browser disconnected; relaunching")
                await self._shutdown()
            self._driver, self._browser = await self._launcher(pol)
            self.launch_count += 1
            self._state = BrowserState.ready
            logger.info("launched shared headless browser (launch #%d)", self.launch_count)
            return self._browser

    async def close(self) -> None:
        async with self._lock_for_running_loop():
            await self._shutdown()
            self._state = BrowserState.closed

    async def _shutdown(self) -> None:
        browser, driver = self._browser, self._driver
        self._browser = None
        self._driver = None
        await _close_handles(browser, driver)


class _BrowserLoop:
    """Daemon thread running the event loop that blocking callers share."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def loop(self) -> asyncio.AbstractEventLoop:
        with self._guard:
            if self._loop is None or self._thread is None or not self._thread.is_alive():
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name="listing-extract-browser", daemon=True)
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        return asyncio.run_coroutine_threadsafe(coro, self.loop()).result()


_default_pool: BrowserPool | None = None
_default_pool_guard = threading.Lock()


def get_browser_pool() -> BrowserPool:
    global _default_pool
    with _default_pool_guard:
        if _default_pool is None:
            _default_pool = BrowserPool()
        return _default_pool


async def close_browser() -> None:
    """Graceful-shutdown hook for the shared browser."""
    if _default_pool is not None:
        await _default_pool.close()


_browser_loop = _BrowserLoop()


def run_on_browser_loop(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run `coro` to completion on the shared background loop and return its result.

    Blocking callers on any thread land on the same loop, so they share one
    warm browser and one launch lock.
    """
    return _browser_loop.run(coro)


def close_browser_sync() -> None:
    """Blocking counterpart of `close_browser()` for the shared background loop."""
    if _default_pool is not None:
        run_on_browser_loop(_default_pool.close())


def _context_headers(policy: FetchPolicy) -> dict[str, str]:
    return {k: v for k, v in browser_headers(policy).items() if k not in _BROWSER_MANAGED_HEADERS}


async def fetch_heavy(url: str, policy: FetchPolicy | None = None, pool: BrowserPool | None = None) -> str:
    """
    Render `url` in an isolated context of the shared browser and return the final markup.

    Waits for network idle (bounded by policy.timeout_s) plus policy.settle_s.
    Non-2xx main-document responses raise the same typed errors as the HTTP path.
    """
    pol = policy or FetchPolicy()
    browser_pool = pool or get_browser_pool()

    with fetcher_error_guard():
        browser = await browser_pool.acquire(pol)
        context = await browser.new_context(
            viewport={"width": pol.viewport_width, "height": pol.viewport_height},
            device_scale_factor=1,
            user_agent=pol.user_agent,
            locale="en-US",
            extra_http_headers=_context_headers(pol),
        )
        try:
            await context.add_init_script(STEALTH_INIT_SCRIPT)
            page = await context.new_page()
            response = await page.goto(url, wait_until="networkidle", timeout=int(pol.timeout_s * 1000))
            if response is not None:
                err = error_for_status(response.status, url)
                if err is not None:
                    logger.info("browser got HTTP %s for %s", response.status, redact_url(url))
                    raise err
            await asyncio.sleep(pol.settle_s)
            return str(await page.content())
        finally:
            await context.close()


__all__ = [
    "STEALTH_INIT_SCRIPT",
    "BrowserState",
    "BrowserPool",
    "get_browser_pool",
    "close_browser",
    "close_browser_sync",
    "run_on_browser_loop",
    "fetch_heavy",
]
