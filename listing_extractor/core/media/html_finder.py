# listing_extractor/core/media/html_finder.py
"""
HTML-backed image finder.

Scans parsed listing markup for photo references and returns absolute URLs in
discovery order. It never downloads bytes and never ranks: ranking and
deduplication belong to `process_images`.

Discovery order:
  1) OpenGraph / Twitter card images
  2) <img src | data-src | srcset (largest descriptor)>
  3) optionally, any element carrying data-src (lazy galleries)
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import PurePosixPath
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

# URL/path fragments that are almost always site chrome rather than listing photos
_ICON_SUBSTRINGS = (
    "logo",
    "icon",
    "favicon",
    "sprite",
    "brandmark",
    "glyph",
    "avatar",
    "placeholder",
    "social-",
    "facebook",
    "twitter",
    "linkedin",
    "instagram",
    "pinterest",
    "youtube",
    "ytimg",
)
_ICON_EXTS = {".ico", ".svg"}
_META_IMAGE_KEYS = (("property", "og:image"), ("property", "og:image:secure_url"), ("name", "twitter:image"))
_SRCSET_DESCRIPTOR_RE = re.compile(r"^(\d+(?:\.\d+)?)([wx])$", re.IGNORECASE)


def absolutize_url(u: str | None, base: str) -> str | None:
    if not u:
        return None
    u = u.strip()
    if not u or u.startswith("data:"):
        return None
    return urljoin(base, u)


def unique_urls(urls: Iterable[str | None]) -> list[str]:
    """Drop empties and repeats, keeping first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for u in urls:
        if u and u not in seen:
            seen.add(u)
            out.append(u)
    return out


def _largest_from_srcset(srcset: str) -> str | None:
    """Pick the entry with the largest width/density descriptor."""
    best: tuple[float, str] | None = None
    for part in srcset.split(","):
        bits = part.strip().split()
        if not bits:
            continue
        weight = 1.0
        if len(bits) > 1:
            m = _SRCSET_DESCRIPTOR_RE.match(bits[1])
            if m:
                weight = float(m.group(1))
        if best is None or weight > best[0]:
            best = (weight, bits[0])
    return best[1] if best else None


def looks_like_icon_or_logo(url: str) -> bool:
    low = url.lower()
    if any(s in low for s in _ICON_SUBSTRINGS):
        return True
    return PurePosixPath(urlparse(low).path).suffix in _ICON_EXTS


class HtmlImageFinder:
    """
    Collects candidate photo URLs from a listing page.

    Site wrappers narrow the result with `host_contains` (only keep URLs on a
    given CDN) and `exclude_substrings` (e.g. floor-plan paths).
    """

    def __init__(
        self,
        *,
        host_contains: str | None = None,
        exclude_substrings: Iterable[str] = (),
        scan_data_src: bool = False,
    ) -> None:
        self.host_contains = host_contains.lower() if host_contains else None
        self.exclude_substrings = tuple(s.lower() for s in exclude_substrings)
        self.scan_data_src = scan_data_src

    def _keep(self, url: str) -> bool:
        if not url.startswith(("http://", "https://")):
            return False
        if looks_like_icon_or_logo(url):
            return False
        low = url.lower()
        if self.host_contains and self.host_contains not in low:
            return False
        return not any(s in low for s in self.exclude_substrings)

    def find(self, soup: BeautifulSoup, *, url: str, include_meta: bool = True) -> list[str]:
        found: list[str] = []

        if include_meta:
            for attr, key in _META_IMAGE_KEYS:
                for meta in soup.find_all("meta", attrs={attr: key}):
                    u = absolutize_url(meta.get("content"), url)
                    if u:
                        found.append(u)

        for img in soup.find_all("img"):
            srcset = img.get("srcset") or img.get("data-srcset")
            for raw in (img.get("src"), img.get("data-src"), _largest_from_srcset(srcset) if srcset else None):
                u = absolutize_url(raw, url)
                if u:
                    found.append(u)

        if self.scan_data_src:
            for el in soup.find_all(attrs={"data-src": True}):
                u = absolutize_url(el.get("data-src"), url)
                if u:
                    found.append(u)

        return unique_urls(u for u in found if self._keep(u))


__all__ = ["HtmlImageFinder", "absolutize_url", "looks_like_icon_or_logo", "unique_urls"]
