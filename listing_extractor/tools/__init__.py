# listing_extractor/tools/__init__.py
"""
Listing extractor: tools package

Exports the extraction entry points that live under `listing_extractor/tools`.
Core building blocks (fetch, normalize, validate) are imported from their own
packages, not re-exported here.
"""

from __future__ import annotations

from .listing_extract import (
    extract_listing,
    extract_listing_from_html,
    extract_listing_sync,
    run_listing_extract_tool,
)

__all__ = ["extract_listing", "extract_listing_sync", "extract_listing_from_html", "run_listing_extract_tool"]
