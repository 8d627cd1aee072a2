# listing_extractor/schemas/labels.py
"""
Lookup tables shared by parsers and the validation pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping

from listing_extractor.schemas.models import Platform

# =========================
# Platform domains (ordered: first match wins)
# =========================

PLATFORM_DOMAINS: tuple[tuple[str, Platform], ...] = (
    ("zillow.com", Platform.zillow),
    ("realtor.com", Platform.realtor),
    ("redfin.com", Platform.redfin),
    ("homes.com", Platform.homes),
    ("trulia.com", Platform.trulia),
    ("utahrealestate.com", Platform.utahrealestate),
)

# Sources known to run sophisticated bot detection.
HEAVY_FETCH_PLATFORMS: frozenset[Platform] = frozenset(
    {Platform.zillow, Platform.realtor, Platform.homes, Platform.utahrealestate}
)

# Generic parsing is still permitted for URLs that mention these domains.
GENERIC_FALLBACK_DOMAINS: tuple[str, ...] = ("zillow.com", "realtor.com")

PLATFORM_DISPLAY_NAMES: Mapping[Platform, str] = {
    Platform.zillow: "Zillow",
    Platform.realtor: "Realtor.com",
    Platform.redfin: "Redfin",
    Platform.homes: "Homes.com",
    Platform.trulia: "Trulia",
    Platform.utahrealestate: "UtahRealEstate",
}

# =========================
# US states
# =========================

US_STATE_CODES: frozenset[str] = frozenset(
    {
        "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
        "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
        "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
        "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
        "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
        "DC",
    }
)  # fmt: skip

US_STATE_NAMES: Mapping[str, str] = {
    "ALABAMA": "AL",
    "ALASKA": "AK",
    "ARIZONA": "AZ",
    "ARKANSAS": "AR",
    "CALIFORNIA": "CA",
    "COLORADO": "CO",
    "CONNECTICUT": "CT",
    "DELAWARE": "DE",
    "FLORIDA": "FL",
    "GEORGIA": "GA",
    "HAWAII": "HI",
    "IDAHO": "ID",
    "ILLINOIS": "IL",
    "INDIANA": "IN",
    "IOWA": "IA",
    "KANSAS": "KS",
    "KENTUCKY": "KY",
    "LOUISIANA": "LA",
    "MAINE": "ME",
    "MARYLAND": "MD",
    "MASSACHUSETTS": "MA",
    "MICHIGAN": "MI",
    "MINNESOTA": "MN",
    "MISSISSIPPI": "MS",
    "MISSOURI": "MO",
    "MONTANA": "MT",
    "NEBRASKA": "NE",
    "NEVADA": "NV",
    "NEW HAMPSHIRE": "NH",
    "NEW JERSEY": "NJ",
    "NEW MEXICO": "NM",
    "NEW YORK": "NY",
    "NORTH CAROLINA": "NC",
    "NORTH DAKOTA": "ND",
    "OHIO": "OH",
    "OKLAHOMA": "OK",
    "OREGON": "OR",
    "PENNSYLVANIA": "PA",
    "RHODE ISLAND": "RI",
    "SOUTH CAROLINA": "SC",
    "SOUTH DAKOTA": "SD",
    "TENNESSEE": "TN",
    "TEXAS": "TX",
    "UTAH": "UT",
    "VERMONT": "VT",
    "VIRGINIA": "VA",
    "WASHINGTON": "WA",
    "WEST VIRGINIA": "WV",
    "WISCONSIN": "WI",
    "WYOMING": "WY",
    "DISTRICT OF COLUMBIA": "DC",
}

# =========================
# JSON-LD types treated as listings
# =========================

REAL_ESTATE_LD_TYPES: frozenset[str] = frozenset(
    {
        "Product",
        "Place",
        "RealEstateListing",
        "SingleFamilyResidence",
        "House",
        "Apartment",
        "Residence",
        "Accommodation",
    }
)

__all__ = [
    "PLATFORM_DOMAINS",
    "HEAVY_FETCH_PLATFORMS",
    "GENERIC_FALLBACK_DOMAINS",
    "PLATFORM_DISPLAY_NAMES",
    "US_STATE_CODES",
    "US_STATE_NAMES",
    "REAL_ESTATE_LD_TYPES",
]
