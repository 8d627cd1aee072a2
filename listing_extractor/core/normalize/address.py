# listing_extractor/core/normalize/address.py
"""
Split a one-line US listing address ("548 N 850 W Provo UT 84604",
"123 Main St, Springfield, IL 62701") into street / city / state / zip.

Comma-delimited lines are split directly. Lines without commas go through
usaddress, with a token-walk fallback for grid-style addresses it mislabels.
"""

from __future__ import annotations

import re

import usaddress
from pydantic import BaseModel, ConfigDict

from listing_extractor.schemas.labels import US_STATE_CODES

_TAIL_RE = re.compile(r"[\s,]+(?P<state>[A-Za-z]{2})\.?,?\s+(?P<zip>\d{5}(?:-\d{4})?)\s*$")
_DIRECTIONALS = {"N", "S", "E", "W", "NE", "NW", "SE", "SW"}
_STREET_SUFFIXES = {
    "ST", "STREET", "AVE", "AVENUE", "RD", "ROAD", "DR", "DRIVE", "LN", "LANE", "BLVD", "BOULEVARD",
    "CT", "COURT", "PL", "PLACE", "WAY", "CIR", "CIRCLE", "TER", "TERRACE", "PKWY", "PARKWAY",
    "HWY", "HIGHWAY", "TRL", "TRAIL", "LOOP", "SQ", "ALY", "PIKE", "ROW", "RUN",
}

# Labels that make up the street line (house number + street name + unit)
_STREET_LABELS = {
    "AddressNumber",
    "AddressNumberPrefix",
    "AddressNumberSuffix",
    "StreetNamePreDirectional",
    "StreetNamePreModifier",
    "StreetNamePreType",
    "StreetName",
    "StreetNamePostType",
    "StreetNamePostDirectional",
    "OccupancyType",
    "OccupancyIdentifier",
    "SubaddressType",
    "SubaddressIdentifier",
}
_STOP_LABELS = {"PlaceName", "StateName", "ZipCode", "Recipient", "CountryName"}


class AddressParts(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str
    city: str | None = None
    state: str | None = None
    zip: str | None = None


def _clean_space(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip(" ,")


def _split_with_usaddress(head: str) -> tuple[str | None, str | None]:
    try:
        parsed = usaddress.parse(head)
    except Exception:
        # usaddress can choke on odd tokens; the walk fallback handles those lines
        return None, None

    street_parts: list[str] = []
    city_parts: list[str] = []
    for token, label in parsed:
        if label == "PlaceName":
            city_parts.append(token)
        elif city_parts:
            break
        elif label in _STREET_LABELS:
            street_parts.append(token)
        elif label in _STOP_LABELS:
            break

    street = _clean_space(" ".join(street_parts)) if street_parts else None
    city = _clean_space(" ".join(city_parts)) if city_parts else None
    if not street or not city or not re.search(r"\d", street):
        return None, None
    return street, city


def _split_by_walk(head: str) -> tuple[str | None, str | None]:
    """
    Street ends after its first suffix word past the street name ("St", "Ave",
    ...) plus an optional directional. Grid addresses have no suffix: house
    number, then numbers and directionals, and the first other word starts
    the city.
    """
    words = head.split()
    suffix_at = [i for i, w in enumerate(words) if i > 1 and w.upper().strip(".") in _STREET_SUFFIXES]
    if suffix_at:
        end = suffix_at[0] + 1
        if end < len(words) and words[end].upper() in _DIRECTIONALS:
            end += 1
        if end < len(words):
            return " ".join(words[:end]), " ".join(words[end:])
        return None, None

    start = 0
    for i, word in enumerate(words):
        if word.isdigit() or word.upper() in _DIRECTIONALS:
            start = i + 1
        elif i > 0 and word[:1].isupper():
            break
        else:
            start = i + 1
    if start == 0 or start >= len(words):
        return None, None
    return " ".join(words[:start]), " ".join(words[start:])


def split_us_address(line: str | None) -> AddressParts | None:
    """Returns None when the line carries no recognizable "ST 12345" tail."""
    if not line:
        return None
    text = _clean_space(line)
    m = _TAIL_RE.search(text)
    if not m or m.group("state").upper() not in US_STATE_CODES:
        return None

    state = m.group("state").upper()
    zip_code = m.group("zip")
    head = text[: m.start()].strip(" ,")
    if not head:
        return None

    if "," in head:
        street, _, city = head.rpartition(",")
        return AddressParts(street=_clean_space(street), city=_clean_space(city) or None, state=state, zip=zip_code)

    street, city = _split_with_usaddress(f"{head}, {state} {zip_code}")
    if not street:
        street, city = _split_by_walk(head)
    if not street:
        return AddressParts(street=head, state=state, zip=zip_code)
    return AddressParts(street=street, city=city, state=state, zip=zip_code)


__all__ = ["AddressParts", "split_us_address"]
