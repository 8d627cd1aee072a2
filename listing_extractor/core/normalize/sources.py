# listing_extractor/core/normalize/sources.py
"""
Sites whose pages carry usable JSON-LD / OpenGraph data. They share the
generic strategy; each keeps its own entry point so site-specific selectors
can be added without touching the dispatcher.
"""

from __future__ import annotations

from listing_extractor.core.normalize.generic import parse_generic
from listing_extractor.schemas.models import ExtractedListing


def parse_realtor(html: str, url: str) -> ExtractedListing:
    return parse_generic(html, url)


def parse_redfin(html: str, url: str) -> ExtractedListing:
    return parse_generic(html, url)


def parse_homes(html: str, url: str) -> ExtractedListing:
    return parse_generic(html, url)


def parse_trulia(html: str, url: str) -> ExtractedListing:
    return parse_generic(html, url)


__all__ = ["parse_realtor", "parse_redfin", "parse_homes", "parse_trulia"]
