# listing_extractor/core/fetch/page_fetcher.py
"""
Strategy dispatch for the fetch layer.

`PageFetcher` is the seam the orchestrator talks to; `DefaultPageFetcher`
routes heavy fetches to the shared browser and runs the blocking HTTP path in
a worker thread so concurrent extractions do not stall the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from listing_extractor.schemas.models import FetchPolicy, FetchStrategy

from .browser import BrowserPool, fetch_heavy
from .http_fetcher import fetch_light


@runtime_checkable
class PageFetcher(Protocol):
    """Anything that can turn (url, strategy) into page markup or raise FetchError."""

    async def fetch(self, url: str, strategy: FetchStrategy) -> str: ...


class DefaultPageFetcher:
    def __init__(self, policy: FetchPolicy | None = None, pool: BrowserPool | None = None) -> None:
        self.policy = policy or FetchPolicy()
        self.pool = pool

    async def fetch(self, url: str, strategy: FetchStrategy) -> str:
        if strategy is FetchStrategy.heavy:
            return await fetch_heavy(url, self.policy, self.pool)
        return await asyncio.to_thread(fetch_light, url, self.policy)


async def fetch(url: str, strategy: FetchStrategy, policy: FetchPolicy | None = None) -> str:
    """One-shot convenience wrapper around DefaultPageFetcher."""
    return await DefaultPageFetcher(policy).fetch(url, strategy)
