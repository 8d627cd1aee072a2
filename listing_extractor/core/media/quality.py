# listing_extractor/core/media/quality.py
"""
URL-only image quality heuristics.

Listing CDNs encode the rendition size in the URL (Zillow "-cc_ft_1536",
panorama "-p_e", "/1920x1080/", "?w=640", "_w960"). Nothing here downloads
bytes: scores are relative ranks inferred from those markers.

Scores (higher is better):
  6000  bare image URL with no resolution marker (assumed original asset)
  5000  panorama e / cc_ft >= 3840 / capped numeric widths
  4000  panorama d / cc_ft >= 1920 / xlarge|full|hd
  3000  panorama c / cc_ft >= 960  / large
  2000  panorama b / cc_ft >= 640  / medium
  1000  panorama a / small widths  / small|thumb / unknown
"""

from __future__ import annotations

import re

MAX_SCORE = 5000.0
BARE_ORIGINAL_SCORE = 6000.0
UNKNOWN_SCORE = 1000.0

_PANORAMA_RE = re.compile(r"-p_([a-e])\.", re.IGNORECASE)
_PANORAMA_SUFFIX_RE = re.compile(r"-p_[a-e](\.(?:jpe?g|png|webp))", re.IGNORECASE)
_PATH_SIZE_RE = re.compile(r"/(\d+)x(\d+)/")
_QUERY_WIDTH_RE = re.compile(r"[?&](?:w|width)=(\d+)")
_UNDERSCORE_WIDTH_RE = re.compile(r"_w(?:idth)?(\d+)")
_CC_FT_RE = re.compile(r"-cc_ft_(\d+)")
_BARE_EXT_RE = re.compile(r"\.(?:jpe?g|png|webp)$", re.IGNORECASE)
_RESOLUTION_MARKER_RE = re.compile(r"[-_](?:ft_|p_|thumb|small|medium|large|w\d+)", re.IGNORECASE)

_PANORAMA_SCORES = {"e": 5000.0, "d": 4000.0, "c": 3000.0, "b": 2000.0, "a": 1000.0}
_CC_FT_TIERS = ((3840, 5000.0), (1920, 4000.0), (960, 3000.0), (640, 2000.0))
_CC_FT_BEST = 3840

# Canonicalization: strip every rendition marker, then the query string.
_CANONICAL_STRIPS: tuple[tuple[re.Pattern[str], str], ...] = (
    (_PANORAMA_SUFFIX_RE, r"\1"),
    (re.compile(r"-cc_ft_\d+"), ""),
    (re.compile(r"[?&]w=\d+"), ""),
    (re.compile(r"[?&]width=\d+"), ""),
    (re.compile(r"_w\d+"), ""),
    (re.compile(r"/\d+x\d+/"), "/"),
)


def score_image_url(url: str | None) -> float:
    """Relative resolution/quality estimate for an image URL (0 for empty input)."""
    if not url or not isinstance(url, str):
        return 0.0

    m = _PANORAMA_RE.search(url)
    if m:
        return _PANORAMA_SCORES.get(m.group(1).lower(), UNKNOWN_SCORE)

    m = _PATH_SIZE_RE.search(url)
    if m:
        return min(int(m.group(1)) * int(m.group(2)) / 100, MAX_SCORE)

    m = _QUERY_WIDTH_RE.search(url)
    if m:
        return min(int(m.group(1)) / 10, MAX_SCORE)

    m = _UNDERSCORE_WIDTH_RE.search(url)
    if m:
        return min(int(m.group(1)) / 10, MAX_SCORE)

    m = _CC_FT_RE.search(url)
    if m:
        width = int(m.group(1))
        for threshold, score in _CC_FT_TIERS:
            if width >= threshold:
                return score
        return UNKNOWN_SCORE

    if "xlarge" in url or "full" in url or "hd" in url:
        return 4000.0
    if "large" in url:
        return 3000.0
    if "medium" in url:
        return 2000.0
    if "small" in url or "thumb" in url:
        return 1000.0

    if _BARE_EXT_RE.search(url) and not _RESOLUTION_MARKER_RE.search(url):
        return BARE_ORIGINAL_SCORE

    return UNKNOWN_SCORE


def enhance_image_url(url: str) -> str:
    """
    Rewrite a URL to its best-available rendition.

    Panorama-suffixed URLs lose the suffix (the base asset is the original);
    low "-cc_ft_N" renditions are bumped to the largest known width.
    """
    if not url or not isinstance(url, str):
        return url

    if "-p_" in url:
        return _PANORAMA_SUFFIX_RE.sub(r"\1", url)

    m = _CC_FT_RE.search(url)
    if m and int(m.group(1)) < _CC_FT_BEST:
        return _CC_FT_RE.sub(f"-cc_ft_{_CC_FT_BEST}", url)

    return url


def canonical_image_key(url: str) -> str:
    """Same photo, different size → same key."""
    key = url
    for pattern, repl in _CANONICAL_STRIPS:
        key = pattern.sub(repl, key)
    return key.split("?", 1)[0]


__all__ = ["score_image_url", "enhance_image_url", "canonical_image_key"]
