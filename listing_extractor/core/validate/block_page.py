# listing_extractor/core/validate/block_page.py
"""
Anti-bot / CAPTCHA page detection.

One signature table serves both callers: the validator checks individual
fields (address, description) and the orchestrator scans raw markup when a
parse came back empty.

A signature is a list of term groups: every group must match, and a group
matches when any of its patterns occurs in the lower-cased text.
"""

from __future__ import annotations

import re
from collections.abc import Collection

BLOCK_PAGE_MESSAGE = "The listing site blocked access. Please use the browser extension or enter details manually."

_SIGNATURE_TABLE: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("access-denied", ((r"access to this page has been denied",),)),
    ("access-denied", ((r"access denied",),)),
    ("perimeterx", ((r"px-captcha",),)),
    ("captcha", ((r"captcha",),)),
    ("cloudflare", ((r"cloudflare",), (r"checking",))),
    ("browser-check", ((r"checking your browser",),)),
    ("human-check", ((r"please verify you are a human",),)),
    ("unusual-traffic", ((r"unusual traffic",),)),
    ("denied-page", ((r"\bdenied\b",), (r"\bpage\b", r"zillow"))),
    ("bot-block", ((r"\bblocked\b",), (r"\bautomated\b", r"\bbots?\b"))),
)

BLOCK_SIGNATURES: tuple[tuple[str, tuple[tuple[re.Pattern[str], ...], ...]], ...] = tuple(
    (name, tuple(tuple(re.compile(p) for p in group) for group in groups)) for name, groups in _SIGNATURE_TABLE
)

# Free-text descriptions are only checked for CAPTCHA markers.
DESCRIPTION_SIGNATURES: frozenset[str] = frozenset({"perimeterx", "captcha"})


def detect_block_page(text: str | None, only: Collection[str] | None = None) -> str | None:
    """Name of the first matching block signature, or None. `only` limits the signatures tried."""
    if not text:
        return None
    low = text.lower()
    for name, groups in BLOCK_SIGNATURES:
        if only is not None and name not in only:
            continue
        if all(any(p.search(low) for p in group) for group in groups):
            return name
    return None


def is_block_page(text: str | None) -> bool:
    return detect_block_page(text) is not None


__all__ = ["BLOCK_PAGE_MESSAGE", "BLOCK_SIGNATURES", "DESCRIPTION_SIGNATURES", "detect_block_page", "is_block_page"]
