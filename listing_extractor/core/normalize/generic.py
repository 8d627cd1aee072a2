# listing_extractor/core/normalize/generic.py
"""
Generic listing parser: works on any real-estate page and is the fallback
for every platform-specific parser.

Strategy order (first value found wins per field):
  1) JSON-LD structured data (real-estate-ish @type, @graph containers)
  2) OpenGraph title "$price | address"
  3) DOM selector table (itemprop, data-testid*=, class*=, first <h1>)
  4) title / URL slug fallback, then the "Property Listing" placeholder
"""

from __future__ import annotations

import datetime as _dt
import json
import logging
import re
from collections.abc import Iterator

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

from listing_extractor.core.media.html_finder import HtmlImageFinder
from listing_extractor.core.media.pipeline import process_images
from listing_extractor.core.normalize.address import split_us_address
from listing_extractor.core.normalize.draft import ListingDraft
from listing_extractor.core.normalize.jsonvalue import JsonObject, as_list, as_obj, first_truthy, unwrap_amount
from listing_extractor.core.normalize.values import (
    address_from_title,
    address_from_url,
    clean_text,
    format_price,
    number_to_str,
    parse_number,
)
from listing_extractor.schemas.labels import REAL_ESTATE_LD_TYPES
from listing_extractor.schemas.models import ExtractedListing

logger = logging.getLogger(__name__)

PLACEHOLDER_ADDRESS = "Property Listing"

# ----------------------------
# Patterns
# ----------------------------
_MONEY = r"\$\s*([\d,]+(?:\.\d{2})?)"
_OG_PRICE_BEFORE_PIPE_RE = re.compile(_MONEY + r"\s*\|")
_OG_PRICE_RE = re.compile(_MONEY)
_STREET_WORD_RE = re.compile(
    r"\b(st|street|ave|avenue|rd|road|dr|drive|ln|lane|blvd|boulevard|ct|court|pl|place|way|cir|circle|"
    r"n|s|e|w|north|south|east|west)\b",
    re.IGNORECASE,
)
_NUMBER_THEN_WORD_RE = re.compile(r"\d+\s+[A-Z]")
_INT_RE = re.compile(r"(\d+)")
_DECIMAL_RE = re.compile(r"(\d+(?:\.\d+)?)")
_SQFT_RE = re.compile(r"([\d,]+)\s*sq", re.IGNORECASE)
_YEAR_BUILT_RE = re.compile(r"(?:Year\s*Built:?|Built\s+in)\s*(\d{4})", re.IGNORECASE)
_LOT_SIZE_RE = re.compile(r"Lot(?:\s*Size)?:?\s*([\d.,]+\s*(?:acres?|sq\.?\s*ft\.?|sqft))", re.IGNORECASE)
_HIDDEN_TAGS = frozenset({"script", "style", "noscript", "template"})
_HOA_RE = re.compile(r"HOA(?:\s*(?:Fee|Dues))?:?\s*\$\s*([\d,]+)", re.IGNORECASE)
_PARKING_RE = re.compile(r"Parking(?:\s*Spaces)?:?\s*(\d+)", re.IGNORECASE)
_FIREPLACE_RE = re.compile(r"Fireplaces?:?\s+(\d+)", re.IGNORECASE)
_PROPERTY_TYPE_RE = re.compile(
    r"(?:Property|Home)\s*Type:?\s*"
    r"(Single[- ]Family(?:\s+(?:Residence|Home))?|Condo(?:minium)?|Townho(?:use|me)|Multi[- ]Family|"
    r"Manufactured|Mobile(?:\s+Home)?|Land|Lot|Apartment|Duplex|Triplex|Fourplex|Co-?op)",
    re.IGNORECASE,
)


# ----------------------------
# Small DOM helpers
# ----------------------------
def _meta(soup: BeautifulSoup, attr: str, key: str) -> str | None:
    tag = soup.find("meta", attrs={attr: key})
    return clean_text(tag.get("content")) if tag else None


def _text_of(soup: BeautifulSoup, selector: str) -> str | None:
    el = soup.select_one(selector)
    return clean_text(el.get_text(" ", strip=True)) if el else None


def _first_text(soup: BeautifulSoup, *selectors: str) -> str | None:
    for sel in selectors:
        text = _text_of(soup, sel)
        if text:
            return text
    return None


def _match(pattern: re.Pattern[str], text: str | None) -> str | None:
    if not text:
        return None
    m = pattern.search(text)
    return m.group(1) if m else None


def _visible_text(soup: BeautifulSoup) -> str:
    parts = []
    for node in soup.find_all(string=True):
        if isinstance(node, PreformattedString) or (node.parent is not None and node.parent.name in _HIDDEN_TAGS):
            continue
        text = node.strip()
        if text:
            parts.append(text)
    return " ".join(parts)


def plausible_year(value: object) -> str | None:
    n = parse_number(value)
    if n is None or not n.is_integer():
        return None
    if 1800 <= n <= _dt.date.today().year + 1:
        return str(int(n))
    return None


# ----------------------------
# JSON-LD
# ----------------------------
def _is_listing_type(node: JsonObject) -> bool:
    types = node.get("@type")
    if isinstance(types, str):
        return types in REAL_ESTATE_LD_TYPES
    return any(isinstance(t, str) and t in REAL_ESTATE_LD_TYPES for t in as_list(types) or [])


def iter_jsonld_listings(soup: BeautifulSoup) -> Iterator[JsonObject]:
    """Yield every JSON-LD node whose @type looks like a listing; bad scripts are skipped."""
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw)
        except ValueError:
            logger.debug("skipping unparseable JSON-LD block")
            continue

        stack = list(data) if isinstance(data, list) else [data]
        while stack:
            node = as_obj(stack.pop(0))
            if node is None:
                continue
            graph = as_list(node.get("@graph"))
            if graph:
                stack.extend(graph)
            if _is_listing_type(node):
                yield node


def _apply_jsonld(draft: ListingDraft, item: JsonObject) -> None:
    addr = item.get("address")
    if isinstance(addr, dict):
        draft.fill("address", clean_text(first_truthy(addr, "streetAddress", "street")))
        draft.fill("city", clean_text(first_truthy(addr, "addressLocality", "city")))
        draft.fill("state", clean_text(first_truthy(addr, "addressRegion", "region", "state")))
        draft.fill("zip", clean_text(first_truthy(addr, "postalCode", "postcode", "zip")))

    offers = item.get("offers")
    offer = as_obj(offers[0] if isinstance(offers, list) and offers else offers)
    if offer is not None:
        draft.fill("price", format_price(unwrap_amount(first_truthy(offer, "price", "priceSpecification.price"))))
    else:
        draft.fill("price", format_price(unwrap_amount(item.get("price"))))

    draft.fill("bedrooms", clean_text(unwrap_amount(first_truthy(item, "numberOfBedrooms", "bedrooms"))))
    draft.fill("bathrooms", clean_text(unwrap_amount(first_truthy(item, "numberOfBathroomsTotal", "bathrooms"))))
    sqft = parse_number(first_truthy(item, "floorSize.value", "area.value"))
    draft.fill("square_feet", number_to_str(sqft) if sqft else None)
    draft.fill("description", clean_text(item.get("description")))
    draft.fill("year_built", plausible_year(item.get("yearBuilt")))
    draft.fill("property_type", clean_text(first_truthy(item, "category", "accommodationCategory")))


# ----------------------------
# OpenGraph
# ----------------------------
def _looks_like_street(text: str) -> bool:
    return bool(re.search(r"\d", text)) and bool(_STREET_WORD_RE.search(text) or _NUMBER_THEN_WORD_RE.search(text))


def fill_address_line(draft: ListingDraft, line: str | None) -> None:
    """Use a one-line address, split into street/city/state/zip when it has a US tail."""
    if not line or not draft.missing("address"):
        return
    parts = split_us_address(line)
    if parts is None:
        draft.fill("address", line)
        return
    draft.fill("address", parts.street)
    draft.fill("city", parts.city)
    draft.fill("state", parts.state)
    draft.fill("zip", parts.zip)


def _apply_open_graph(draft: ListingDraft, og_title: str | None) -> None:
    if not og_title:
        return

    if draft.missing("price"):
        draft.fill("price", format_price(_match(_OG_PRICE_BEFORE_PIPE_RE, og_title) or _match(_OG_PRICE_RE, og_title)))

    # Address comes from a pipe segment after the first one; never from the price segment.
    if draft.missing("address") and "|" in og_title:
        for segment in og_title.split("|")[1:]:
            seg = clean_text(segment)
            if seg and _looks_like_street(seg):
                fill_address_line(draft, seg)
                break


# ----------------------------
# DOM selector table
# ----------------------------
def _apply_dom(draft: ListingDraft, soup: BeautifulSoup) -> None:
    if draft.missing("price"):
        itemprop = soup.select_one('[itemprop="price"]')
        raw = clean_text(itemprop.get("content")) if itemprop else None
        draft.fill("price", format_price(raw or _first_text(soup, '[data-testid*="price"]', '[class*="price"]')))

    if draft.missing("address"):
        text = _first_text(soup, '[itemprop="streetAddress"]', '[data-testid*="address"]', "h1")
        if text:
            fill_address_line(draft, clean_text(re.split(r"\||\s-\s", text)[0]))

    draft.fill(
        "bedrooms",
        _match(_INT_RE, _first_text(soup, '[itemprop="numberOfBedrooms"]', '[data-testid*="bed"]')),
    )
    draft.fill(
        "bathrooms",
        _match(_DECIMAL_RE, _first_text(soup, '[itemprop="numberOfBathroomsTotal"]', '[data-testid*="bath"]')),
    )
    sqft = _match(_SQFT_RE, _first_text(soup, '[itemprop="floorSize"]', '[data-testid*="sqft"]'))
    draft.fill("square_feet", sqft.replace(",", "") if sqft else None)

    if draft.missing("description"):
        draft.fill(
            "description",
            _text_of(soup, '[itemprop="description"]')
            or _meta(soup, "name", "description")
            or _meta(soup, "property", "og:description"),
        )


def _apply_extended(draft: ListingDraft, soup: BeautifulSoup, body: str) -> None:
    year_el = soup.select_one('[itemprop="yearBuilt"]')
    draft.fill("year_built", plausible_year(year_el.get("content") or year_el.get_text()) if year_el else None)
    draft.fill("year_built", plausible_year(_match(_INT_RE, _text_of(soup, '[data-testid*="year-built"]'))))
    draft.fill("year_built", plausible_year(_match(_YEAR_BUILT_RE, body)))

    draft.fill("property_type", _text_of(soup, '[data-testid*="property-type"]'))
    draft.fill("property_type", clean_text(_match(_PROPERTY_TYPE_RE, body)))

    draft.fill("lot_size", _text_of(soup, '[data-testid*="lot-size"]'))
    draft.fill("lot_size", clean_text(_match(_LOT_SIZE_RE, body)))

    draft.fill("hoa_fee", format_price(_match(_HOA_RE, body)))
    draft.fill("parking_spaces", _match(_PARKING_RE, body))
    draft.fill("fireplace_count", _match(_FIREPLACE_RE, body))


# ----------------------------
# Public API
# ----------------------------
def parse_generic(html: str, url: str) -> ExtractedListing:
    soup = BeautifulSoup(html or "", "lxml")
    title = clean_text(soup.title.get_text()) if soup.title else None
    draft = ListingDraft(url, title)

    for item in iter_jsonld_listings(soup):
        _apply_jsonld(draft, item)

    og_title = _meta(soup, "property", "og:title")
    _apply_open_graph(draft, og_title)
    _apply_dom(draft, soup)
    _apply_extended(draft, soup, _visible_text(soup))

    images = process_images(HtmlImageFinder().find(soup, url=url))
    draft.fill("image_urls", images)
    draft.fill("image_url", images[0] if images else None)

    if draft.missing("address"):
        fill_address_line(draft, address_from_title(og_title) or address_from_title(title))
    draft.fill("address", address_from_url(url))
    draft.fill("address", PLACEHOLDER_ADDRESS)

    return draft.build()


__all__ = [
    "PLACEHOLDER_ADDRESS",
    "parse_generic",
    "iter_jsonld_listings",
    "fill_address_line",
    "plausible_year",
]
