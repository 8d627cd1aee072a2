# listing_extractor/core/normalize/zillow.py
"""
Zillow parser: mines the page's embedded `__NEXT_DATA__` client cache.

The cache (`gdpClientCache`) is a map of GraphQL query keys to results and is
often itself a JSON string. Probes run best-first:

  1) full-listing entries   (ForSalePriorityQuery / ForSaleFullRenderQuery)
  2) property-query entries (ForSalePropertyQuery / PropertyQuery)
  3) first property-shaped entry within `scan_limit` entries
  4) legacy pageProps locations

When no probe yields an address the page is handed to the generic parser.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from bs4 import BeautifulSoup

from listing_extractor.core.media.html_finder import unique_urls
from listing_extractor.core.media.pipeline import best_image_url, process_images
from listing_extractor.core.normalize.draft import ListingDraft
from listing_extractor.core.normalize.generic import parse_generic
from listing_extractor.core.normalize.jsonvalue import (
    JsonObject,
    JsonValue,
    as_list,
    as_obj,
    first_present,
    first_truthy,
    get_path,
    unwrap_amount,
)
from listing_extractor.core.normalize.values import (
    clean_text,
    format_price,
    join_text,
    normalize_features,
    number_to_str,
    parse_maybe_json,
    parse_number,
)
from listing_extractor.schemas.models import ExtractedListing

logger = logging.getLogger(__name__)

DEFAULT_SCAN_LIMIT = 500
PRICE_RANGE = (10_000, 50_000_000)
SQFT_RANGE = (100, 50_000)

_FULL_LISTING_KEY_RE = re.compile(r"ForSalePriorityQuery|ForSaleFullRenderQuery", re.IGNORECASE)
_PROPERTY_QUERY_KEY_RE = re.compile(r"ForSalePropertyQuery|PropertyQuery", re.IGNORECASE)

_PRICE_PATHS = (
    "price",
    "listPrice",
    "unformattedPrice",
    "priceReduction",
    "currentPrice",
    "askingPrice",
    "adTargets.price",
    "priceHistory.0.price",
)
_SQFT_PATHS = ("livingArea", "livingAreaValue", "area", "adTargets.sqft")

# Brand / agent imagery that shows up next to gallery photos
_NON_LISTING_PHOTO_MARKERS = ("zillow_web_", "/agent/", "/broker/", "/logo", "static/images")

# ----------------------------
# Open-Graph price recovery (used only when the cache has no price)
# ----------------------------
_MONEY = r"([\d,]+(?:\.\d{2})?)"
_OG_TITLE_PRICE_FIRST_RE = re.compile(r"^\$\s*" + _MONEY)
_OG_TITLE_PRICE_AFTER_PIPE_RE = re.compile(r"\|\s*\$?\s*" + _MONEY)
_OG_DESC_LISTED_AT_RE = re.compile(r"listed\s+for\s+sale\s+at\s+\$?\s*" + _MONEY, re.IGNORECASE)
_OG_DESC_BULLET_RE = re.compile(r"\$?\s*" + _MONEY + r"\s*[∙•·]")
_OG_DESC_ANY_PRICE_RE = re.compile(r"\$\s*" + _MONEY)


def _in_range(value: float | None, bounds: tuple[int, int]) -> bool:
    return value is not None and bounds[0] <= value <= bounds[1]


def price_from_meta(soup: BeautifulSoup) -> str | None:
    og_title = _meta_content(soup, "og:title") or ""
    og_desc = _meta_content(soup, "og:description") or ""

    for pattern, text in (
        (_OG_TITLE_PRICE_FIRST_RE, og_title),
        (_OG_TITLE_PRICE_AFTER_PIPE_RE, og_title),
        (_OG_DESC_LISTED_AT_RE, og_desc),
        (_OG_DESC_BULLET_RE, og_desc),
    ):
        m = pattern.search(text)
        if m:
            return format_price(m.group(1))

    m = _OG_DESC_ANY_PRICE_RE.search(og_desc)
    if m and _in_range(parse_number(m.group(1)), PRICE_RANGE):
        return format_price(m.group(1))
    return None


def _meta_content(soup: BeautifulSoup, prop: str) -> str | None:
    tag = soup.find("meta", attrs={"property": prop})
    return clean_text(tag.get("content")) if tag else None


# ----------------------------
# Cache location + probes
# ----------------------------
def _next_data(soup: BeautifulSoup) -> JsonObject | None:
    script = soup.find("script", id="__NEXT_DATA__")
    if script is None:
        return None
    return as_obj(parse_maybe_json(script.string or script.get_text()))


def _client_cache(page_props: JsonValue) -> JsonObject | None:
    raw = first_present(page_props, "componentProps.gdpClientCache", "initialData.gdpClientCache")
    if isinstance(raw, dict):
        return raw
    return as_obj(parse_maybe_json(raw))


def property_node(entry: JsonValue) -> JsonObject | None:
    """entry.property → entry.data.property → entry.home → entry."""
    for path in (("property",), ("data", "property"), ("home",)):
        node = as_obj(get_path(entry, *path))
        if node is not None:
            return node
    return as_obj(entry)


def _is_property_shaped(node: JsonObject) -> bool:
    return any(node.get(k) for k in ("streetAddress", "address", "responsivePhotos", "price"))


def _probe_by_key(pattern: re.Pattern[str]) -> Callable[[JsonObject, JsonObject | None], JsonObject | None]:
    def probe(cache: JsonObject, _page_props: JsonObject | None) -> JsonObject | None:
        for key, entry in cache.items():
            if pattern.search(key):
                return property_node(entry)
        return None

    return probe


def _probe_property_shaped(scan_limit: int) -> Callable[[JsonObject, JsonObject | None], JsonObject | None]:
    def probe(cache: JsonObject, _page_props: JsonObject | None) -> JsonObject | None:
        for i, entry in enumerate(cache.values()):
            if i >= scan_limit:
                break
            node = property_node(entry)
            if node is not None and _is_property_shaped(node):
                return node
        return None

    return probe


def _probe_legacy(_cache: JsonObject, page_props: JsonObject | None) -> JsonObject | None:
    return as_obj(first_present(page_props, "initialData.property", "property", "componentProps.property"))


def find_property(next_data: JsonObject, *, scan_limit: int = DEFAULT_SCAN_LIMIT) -> JsonObject | None:
    page_props = as_obj(get_path(next_data, "props", "pageProps"))
    cache = _client_cache(page_props) or {}

    probes = (
        ("full-listing", _probe_by_key(_FULL_LISTING_KEY_RE)),
        ("property-query", _probe_by_key(_PROPERTY_QUERY_KEY_RE)),
        ("property-shaped", _probe_property_shaped(scan_limit)),
        ("legacy", _probe_legacy),
    )
    for name, probe in probes:
        node = probe(cache, page_props)
        if node is not None:
            logger.debug("zillow cache probe %r matched", name)
            return node
    return None


# ----------------------------
# Property node → listing fields
# ----------------------------
def _price(prop: JsonObject) -> str | None:
    raw = unwrap_amount(first_present(prop, *_PRICE_PATHS))
    return format_price(raw) if _in_range(parse_number(raw), PRICE_RANGE) else None


def _square_feet(prop: JsonObject) -> str | None:
    n = parse_number(first_present(prop, *_SQFT_PATHS))
    return number_to_str(n) if n is not None and _in_range(n, SQFT_RANGE) else None


def _photo_urls(prop: JsonObject) -> list[str]:
    photos: list[str | None] = []
    gallery = as_list(get_path(prop, "media", "photos"))
    if gallery is not None:
        photos.extend(p for p in (get_path(item, "url") for item in gallery) if isinstance(p, str))
    else:
        for item in as_list(prop.get("responsivePhotos")) or []:
            url = get_path(item, "url")
            if isinstance(url, str):
                photos.append(url)
                continue
            renditions = as_list(get_path(item, "mixedSources", "jpeg")) or []
            photos.append(best_image_url(u for u in (get_path(r, "url") for r in renditions) if isinstance(u, str)))
    return [u for u in unique_urls(photos) if not any(m in u for m in _NON_LISTING_PHOTO_MARKERS)]


def _fact(prop: JsonObject, *paths: str) -> JsonValue:
    """Look in the node first, then in its resoFacts block."""
    found = first_present(prop, *paths)
    if found is None:
        found = first_present(prop.get("resoFacts"), *paths)
    return found


def _fact_text(prop: JsonObject, *paths: str) -> str | None:
    return join_text(_fact(prop, *paths))


def _fact_money(prop: JsonObject, *paths: str) -> str | None:
    return format_price(unwrap_amount(_fact(prop, *paths)))


def _lot_size(prop: JsonObject) -> str | None:
    size = _fact(prop, "lotSize", "lotAreaValue")
    if isinstance(size, (int, float)) and not isinstance(size, bool):
        unit = clean_text(_fact(prop, "lotAreaUnits", "lotAreaUnit")) or "sqft"
        return f"{number_to_str(size)} {unit}"
    return clean_text(size)


def listing_from_property(prop: JsonObject, url: str, title: str | None = None) -> ExtractedListing:
    addr = as_obj(prop.get("address")) or {}
    draft = ListingDraft(url, title)

    draft.fill("address", clean_text(first_truthy(addr, "streetAddress", "street", "line")))
    draft.fill("address", clean_text(prop.get("streetAddress")))
    draft.fill("city", clean_text(addr.get("city") or prop.get("city")))
    draft.fill("state", clean_text(addr.get("state") or prop.get("state")))
    draft.fill("zip", clean_text(first_truthy(addr, "zipcode", "zipCode") or first_truthy(prop, "zipcode", "zipCode")))

    draft.fill("price", _price(prop))
    draft.fill("bedrooms", clean_text(first_present(prop, "bedrooms", "beds", "adTargets.bd")))
    draft.fill("bathrooms", clean_text(first_present(prop, "bathrooms", "baths", "adTargets.ba")))
    draft.fill("square_feet", _square_feet(prop))
    draft.fill("description", clean_text(first_truthy(prop, "description", "longDescription", "summary")))
    draft.fill("mls_id", clean_text(first_truthy(prop, "mlsId", "mlsNumber", "mls", "attributionInfo.mlsId")))
    draft.fill("status", clean_text(prop.get("homeStatus")))

    images = process_images(_photo_urls(prop))
    draft.fill("image_urls", images)
    draft.fill("image_url", images[0] if images else None)

    # extended details
    draft.fill("year_built", clean_text(_fact(prop, "yearBuilt", "yearBuiltEffective", "adTargets.yrblt")))
    draft.fill("lot_size", _lot_size(prop))
    draft.fill("property_type", clean_text(_fact(prop, "homeType", "hdpTypeDimension", "propertyType")))
    draft.fill("property_subtype", join_text(_fact(prop, "propertySubType", "homeSubType")))
    draft.fill("features", normalize_features(_fact(prop, "features", "highlights", "amenities")))
    draft.fill("interior_features", normalize_features(_fact(prop, "interiorFeatures")))
    draft.fill("exterior_features", normalize_features(_fact(prop, "exteriorFeatures")))
    draft.fill("parking_spaces", _fact_text(prop, "parkingSpaces", "parkingTotal", "parkingCapacity"))
    draft.fill("garage_spaces", _fact_text(prop, "garageSpaces", "garageParkingCapacity"))
    draft.fill("stories", _fact_text(prop, "stories", "numberOfStories", "storiesTotal"))
    draft.fill("heating", _fact_text(prop, "heating"))
    draft.fill("cooling", _fact_text(prop, "cooling"))
    draft.fill("flooring", _fact_text(prop, "flooring"))
    draft.fill("fireplace_count", _fact_text(prop, "fireplaceCount", "fireplaces"))
    draft.fill("hoa_fee", _fact_money(prop, "hoaFee", "monthlyHoaFee"))
    draft.fill("tax_assessed_value", _fact_money(prop, "taxAssessedValue", "assessedValue"))
    draft.fill("annual_tax_amount", _fact_money(prop, "annualTaxAmount", "taxAmount"))
    draft.fill("price_per_sqft", _fact_money(prop, "pricePerSquareFoot", "pricePerSqft"))
    draft.fill("zestimate", _fact_money(prop, "zestimate"))
    draft.fill("days_on_market", _fact_text(prop, "daysOnMarket", "daysOnZillow", "dom"))
    draft.fill("listing_date", _fact_text(prop, "listingDate", "dateListed"))

    return draft.build()


# ----------------------------
# Public API
# ----------------------------
def parse_zillow(html: str, url: str, *, scan_limit: int = DEFAULT_SCAN_LIMIT) -> ExtractedListing:
    soup = BeautifulSoup(html or "", "lxml")
    next_data = _next_data(soup)
    prop = find_property(next_data, scan_limit=scan_limit) if next_data else None

    if prop is not None:
        title = clean_text(soup.title.get_text()) if soup.title else None
        listing = listing_from_property(prop, url, title)
        if listing.address:
            if listing.price is None:
                recovered = price_from_meta(soup)
                if recovered:
                    listing = listing.model_copy(update={"price": recovered})
            return listing
        logger.debug("zillow cache had no address; using generic parser")

    return parse_generic(html, url)


__all__ = [
    "DEFAULT_SCAN_LIMIT",
    "parse_zillow",
    "find_property",
    "property_node",
    "listing_from_property",
    "price_from_meta",
]
