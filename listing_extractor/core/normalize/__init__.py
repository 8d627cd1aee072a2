# listing_extractor/core/normalize/__init__.py
from __future__ import annotations

from typing import assert_never

from listing_extractor.schemas.models import ExtractedListing, Platform

from .address import AddressParts, split_us_address
from .generic import PLACEHOLDER_ADDRESS, parse_generic
from .sources import parse_homes, parse_realtor, parse_redfin, parse_trulia
from .utahrealestate import parse_utahrealestate
from .zillow import parse_zillow


def parse_listing(platform: Platform, html: str, url: str) -> ExtractedListing:
    """Route a fetched page to its platform parser."""
    match platform:
        case Platform.zillow:
            return parse_zillow(html, url)
        case Platform.realtor:
            return parse_realtor(html, url)
        case Platform.redfin:
            return parse_redfin(html, url)
        case Platform.homes:
            return parse_homes(html, url)
        case Platform.trulia:
            return parse_trulia(html, url)
        case Platform.utahrealestate:
            return parse_utahrealestate(html, url)
        case Platform.generic:
            return parse_generic(html, url)
        case _:
            assert_never(platform)


__all__ = [
    "AddressParts",
    "split_us_address",
    "PLACEHOLDER_ADDRESS",
    "parse_listing",
    "parse_generic",
    "parse_zillow",
    "parse_utahrealestate",
    "parse_realtor",
    "parse_redfin",
    "parse_homes",
    "parse_trulia",
]
