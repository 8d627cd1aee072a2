# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from listing_extractor.schemas.models import FetchPolicy
from tests.utils import FakeFetcher, make_listing, make_page


# -------- Isolation from the caller's environment --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "LISTING_EXTRACT_DISABLE_BROWSER",
        "LISTING_EXTRACT_TIMEOUT_S",
        "LISTING_EXTRACT_SETTLE_S",
        "LISTING_EXTRACT_USER_AGENT",
        "LISTING_EXTRACT_DEBUG",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


# -------- Domain fixtures --------
@pytest.fixture
def listing_factory():
    """Factory for a clean ExtractedListing; keyword overrides replace single fields."""

    def _factory(**overrides):
        return make_listing(**overrides)

    return _factory


@pytest.fixture
def fake_fetcher():
    """
    Factory for a PageFetcher double.

    Usage:
        fetcher = fake_fetcher(heavy=NotFoundError(), light="<html>...</html>")
    """

    def _factory(*, heavy=None, light=None):
        return FakeFetcher(heavy=heavy, light=light)

    return _factory


@pytest.fixture
def fast_policy():
    """No settle delay, short timeout."""
    return FetchPolicy(settle_s=0, timeout_s=5)


@pytest.fixture
def saved_page(tmp_path: Path):
    """
    Write a listing page to tmp_path and return its path.

    Usage:
        path = saved_page(html=make_page(og_title="..."))
    """

    def _factory(*, html: str | None = None, filename: str = "listing.html") -> Path:
        target = tmp_path / filename
        target.write_text(html if html is not None else make_page(), encoding="utf-8")
        return target

    return _factory


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks integration tests")
