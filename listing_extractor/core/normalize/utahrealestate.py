# listing_extractor/core/normalize/utahrealestate.py
"""
UtahRealEstate.com parser.

URE pages carry the essentials in an og:title of the form
"$523,900 | 414 N 100 E American Fork UT 84003" (grid addresses, no commas)
and the room counts as plain body text ("2 Beds", "1 Baths", "726 Sq. Ft.").
Anything the site-specific pass misses is filled from the generic parser.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from listing_extractor.core.media.html_finder import HtmlImageFinder, absolutize_url
from listing_extractor.core.media.pipeline import process_images
from listing_extractor.core.normalize.draft import ListingDraft
from listing_extractor.core.normalize.generic import fill_address_line, parse_generic
from listing_extractor.core.normalize.values import clean_text, format_price
from listing_extractor.schemas.models import ExtractedListing

_OG_PRICE_ADDRESS_RE = re.compile(r"\$\s*([\d,]+(?:\.\d{2})?)\s*\|\s*(.+)")
_BEDS_RE = re.compile(r"(\d+)\s+Beds?\b", re.IGNORECASE)
_BATHS_RE = re.compile(r"(\d+(?:\.\d+)?)\s+Baths?\b", re.IGNORECASE)
_SQFT_RE = re.compile(r"([\d,]+)\s+Sq\.?\s*Ft\.?", re.IGNORECASE)
_MLS_RE = re.compile(r"MLS\s*[#:]?\s*(\d+)", re.IGNORECASE)
_URL_MLS_RE = re.compile(r"/(\d+)/?$")

_GALLERY = HtmlImageFinder(host_contains="utahrealestate.com", exclude_substrings=("/floorplans/",), scan_data_src=True)


def _search(pattern: re.Pattern[str], text: str) -> str | None:
    m = pattern.search(text)
    return m.group(1) if m else None


def parse_utahrealestate(html: str, url: str) -> ExtractedListing:
    soup = BeautifulSoup(html or "", "lxml")
    title = clean_text(soup.title.get_text()) if soup.title else None
    draft = ListingDraft(url, title)

    og_title_tag = soup.find("meta", attrs={"property": "og:title"})
    og_title = clean_text(og_title_tag.get("content")) if og_title_tag else None
    if og_title:
        m = _OG_PRICE_ADDRESS_RE.search(og_title)
        if m:
            draft.fill("price", format_price(m.group(1)))
            # "414 N 100 E American Fork UT 84003" → street / city / state / zip
            fill_address_line(draft, clean_text(m.group(2).split("|")[0]))

    body = soup.body.get_text(" ", strip=True) if soup.body else ""
    draft.fill("bedrooms", _search(_BEDS_RE, body))
    draft.fill("bathrooms", _search(_BATHS_RE, body))
    sqft = _search(_SQFT_RE, body)
    draft.fill("square_feet", sqft.replace(",", "") if sqft else None)
    draft.fill("mls_id", _search(_MLS_RE, body) or _search(_URL_MLS_RE, url.split("?", 1)[0]))

    for key in (("property", "og:description"), ("name", "description")):
        tag = soup.find("meta", attrs={key[0]: key[1]})
        draft.fill("description", clean_text(tag.get("content")) if tag else None)

    og_image = soup.find("meta", attrs={"property": "og:image"})
    candidates = [absolutize_url(og_image.get("content"), url) if og_image else None]
    candidates.extend(_GALLERY.find(soup, url=url, include_meta=False))
    images = process_images(candidates)
    draft.fill("image_urls", images)
    draft.fill("image_url", images[0] if images else None)

    draft.fill_from(parse_generic(html, url))
    return draft.build()


__all__ = ["parse_utahrealestate"]
