# listing_extractor/core/normalize/values.py
"""
Small, total helpers for turning scraped text/JSON scalars into the string
encodings used by ExtractedListing. None means "nothing usable".
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from urllib.parse import unquote, urlparse

_NUMBER_RE = re.compile(r"-?\d[\d,   ]*(?:\.\d+)?")
_WS_RE = re.compile(r"\s+")
_PRICE_LIKE_RE = re.compile(r"^\s*(?:\$|usd\b)\s*\d", re.IGNORECASE)
_HOMEDETAILS_RE = re.compile(r"/homedetails/([^/]+)/")
_SITE_SUFFIXES = {"zillow", "realtor.com", "redfin", "trulia", "homes.com", "utahrealestate.com", "utahrealestate"}


def clean_text(value: object) -> str | None:
    """Whitespace-collapsed string, or None when empty / not a scalar."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return number_to_str(value)
    if not isinstance(value, str):
        return None
    out = _WS_RE.sub(" ", value).strip()
    return out or None


def parse_number(value: object) -> float | None:
    """First number in a scalar: 523900, "523,900", "$523,900.00", "1,200 sqft"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None
    m = _NUMBER_RE.search(value)
    if not m:
        return None
    digits = re.sub(r"[,   ]", "", m.group(0))
    try:
        return float(digits)
    except ValueError:
        return None


def number_to_str(value: float | int) -> str:
    """3.0 → "3", 2.5 → "2.5"."""
    f = float(value)
    return str(int(f)) if f.is_integer() else f"{f:g}"


def format_price(value: object) -> str | None:
    """Normalize to "$" + comma-grouped whole dollars; None for non-positive / non-numeric input."""
    n = parse_number(value)
    if n is None or n <= 0:
        return None
    return f"${int(n + 0.5):,}"


def looks_like_price(text: str) -> bool:
    return bool(_PRICE_LIKE_RE.match(text))


def address_from_title(title: str | None) -> str | None:
    """
    Listing titles look like "123 Main St, City, ST 12345 | MLS #123 | Zillow"
    or "$523,900 | 123 Main St ...": take the first segment that is neither a
    price nor the site name.
    """
    if not title:
        return None
    for segment in title.split("|"):
        seg = clean_text(segment)
        if not seg or looks_like_price(seg) or seg.lower() in _SITE_SUFFIXES:
            continue
        return seg
    return None


def address_from_url(url: str | None) -> str | None:
    """Zillow-style slug: /homedetails/123-Main-St-City-ST-12345/12345678_zpid/."""
    if not url:
        return None
    m = _HOMEDETAILS_RE.search(urlparse(url).path)
    if not m:
        return None
    words = unquote(m.group(1)).replace("-", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words) or None


def normalize_features(data: object) -> list[str] | None:
    """
    Feature lists arrive as string arrays, arrays of {name|value|label}
    objects, JSON-encoded strings, or delimiter-separated text.
    """
    items: Iterable[object]
    if data is None:
        return None
    if isinstance(data, str):
        parsed = parse_maybe_json(data)
        if isinstance(parsed, list):
            items = parsed
        else:
            items = re.split(r"[,;|]", data)
    elif isinstance(data, list):
        items = data
    else:
        return None

    out: list[str] = []
    for item in items:
        if isinstance(item, dict):
            item = item.get("name") or item.get("value") or item.get("label")
        text = clean_text(item)
        if text and len(text) < 100 and text not in out:
            out.append(text)
    return out or None


def join_text(value: object) -> str | None:
    """Scalar or list of scalars → "a, b"."""
    if isinstance(value, list):
        parts = [p for p in (clean_text(v) for v in value) if p]
        return ", ".join(parts) or None
    return clean_text(value)


def parse_maybe_json(payload: object, *, passes: int = 2) -> object | None:
    """
    Decode JSON that may itself be JSON-encoded (string-in-string caches).
    At most `passes` decodes; returns the resulting object/array or None.
    """
    out = payload
    for _ in range(passes):
        if not isinstance(out, str):
            break
        trimmed = out.strip()
        if len(trimmed) < 2 or (trimmed[0], trimmed[-1]) not in (("{", "}"), ("[", "]"), ('"', '"')):
            break
        try:
            out = json.loads(trimmed)
        except ValueError:
            return None
    return out if isinstance(out, (dict, list)) else None


__all__ = [
    "clean_text",
    "parse_number",
    "number_to_str",
    "format_price",
    "looks_like_price",
    "address_from_title",
    "address_from_url",
    "normalize_features",
    "join_text",
    "parse_maybe_json",
]
