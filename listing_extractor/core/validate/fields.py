# listing_extractor/core/validate/fields.py
"""
Per-field cleaners and plausibility checks.

Cleaners are total (str → str). Numeric checks return a `FieldCheck` that
always carries a cleaned value when the input was numeric, even when the
value is implausible, so downstream forms have something to show.
"""

from __future__ import annotations

import datetime as _dt
import re
from dataclasses import dataclass

from listing_extractor.schemas.labels import US_STATE_CODES, US_STATE_NAMES
from listing_extractor.schemas.models import Severity

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_ADDRESS_DISALLOWED_RE = re.compile(r"[^\w\s\-#.,]")
_CITY_DISALLOWED_RE = re.compile(r"[^\w\s\-']")
_SUSPICIOUS_ADDRESS_RES = (
    re.compile(r"^\$\s*\d"),
    re.compile(r"^[\d,.\s]+$"),
    re.compile(r"^price", re.IGNORECASE),
    re.compile(r"^listing", re.IGNORECASE),
    re.compile(r"^property", re.IGNORECASE),
    re.compile(r"^error", re.IGNORECASE),
    re.compile(r"access denied", re.IGNORECASE),
    re.compile(r"captcha", re.IGNORECASE),
)
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif")


@dataclass(frozen=True)
class FieldCheck:
    ok: bool
    severity: Severity = "warning"
    message: str = ""
    cleaned: str | None = None


def _collapse(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()


def _numeric(raw: str) -> float | None:
    m = _NUMBER_RE.search(raw.replace(",", ""))
    return float(m.group(0)) if m else None


# ----------------------------
# Address / location
# ----------------------------
def clean_address(address: str) -> str:
    return _collapse(_ADDRESS_DISALLOWED_RE.sub("", _collapse(address)))


def is_valid_address(address: str, raw: str | None = None) -> bool:
    """A street address needs a house number and must not look like a price or boilerplate."""
    if not address or len(address) < 5:
        return False
    for candidate in (address, _collapse(raw or "")):
        if any(p.search(candidate) for p in _SUSPICIOUS_ADDRESS_RES):
            return False
    return bool(re.search(r"\d", address))


def clean_city(city: str) -> str:
    words = _collapse(_CITY_DISALLOWED_RE.sub("", city)).split(" ")
    return " ".join(w[:1].upper() + w[1:].lower() for w in words if w)


def is_valid_city(city: str) -> bool:
    if not city or len(city) < 2 or len(city) > 50:
        return False
    return not city.isdigit()


def clean_state(state: str) -> str:
    """'California', 'california', 'new york', 'CA' → 2-letter code (unknown input is returned upper-cased)."""
    letters = _collapse(re.sub(r"[^A-Za-z\s]", "", state)).upper()
    if letters in US_STATE_NAMES:
        return US_STATE_NAMES[letters]
    return letters.replace(" ", "")


def is_valid_state(state: str) -> bool:
    return state.upper() in US_STATE_CODES


def clean_zip(zip_code: str) -> str:
    digits = re.sub(r"\D", "", zip_code)
    if len(digits) == 9:
        return f"{digits[:5]}-{digits[5:]}"
    if len(digits) > 5:
        return digits[:5]
    return digits


def is_valid_zip(zip_code: str) -> bool:
    return len(re.sub(r"\D", "", zip_code)) in (5, 9)


# ----------------------------
# Numbers
# ----------------------------
def check_price(price: str) -> FieldCheck:
    digits = re.sub(r"[^0-9.]", "", price)
    try:
        value = float(digits)
    except ValueError:
        value = 0.0
    if value <= 0:
        return FieldCheck(False, "error", "Price must be a positive number")

    cleaned = f"${int(value + 0.5):,}"
    if value < 1_000:
        return FieldCheck(False, "warning", "Price seems unusually low. Please verify.", cleaned)
    if value > 500_000_000:
        return FieldCheck(False, "warning", "Price seems unusually high. Please verify.", cleaned)
    return FieldCheck(True, cleaned=cleaned)


def check_bedrooms(bedrooms: str) -> FieldCheck:
    value = _numeric(bedrooms)
    if value is None or value < 0:
        return FieldCheck(False, "error", "Bedrooms must be a non-negative number")
    cleaned = str(int(value))
    if value > 20:
        return FieldCheck(False, "warning", "Number of bedrooms seems unusually high. Please verify.", cleaned)
    return FieldCheck(True, cleaned=cleaned)


def check_bathrooms(bathrooms: str) -> FieldCheck:
    value = _numeric(bathrooms)
    if value is None or value < 0:
        return FieldCheck(False, "error", "Bathrooms must be a non-negative number")
    cleaned = f"{value:.1f}"
    if value > 30:
        return FieldCheck(False, "warning", "Number of bathrooms seems unusually high. Please verify.", cleaned)
    return FieldCheck(True, cleaned=cleaned)


def check_square_feet(square_feet: str) -> FieldCheck:
    value = _numeric(square_feet)
    if value is None or value < 0:
        return FieldCheck(False, "error", "Square feet must be a non-negative number")
    cleaned = str(int(value))
    if value < 100:
        return FieldCheck(False, "warning", "Square footage seems unusually low. Please verify.", cleaned)
    if value > 100_000:
        return FieldCheck(False, "warning", "Square footage seems unusually high. Please verify.", cleaned)
    return FieldCheck(True, cleaned=cleaned)


def check_year_built(year_built: str, *, today: _dt.date | None = None) -> FieldCheck:
    value = _numeric(year_built)
    if value is None:
        return FieldCheck(False, "error", "Year built must be a valid year")
    year = int(value)
    cleaned = str(year)
    if year < 1600:
        return FieldCheck(False, "warning", "Year built seems unusually old. Please verify.", cleaned)
    if year > (today or _dt.date.today()).year + 1:
        return FieldCheck(False, "warning", "Year built cannot be in the future. Please verify.", cleaned)
    return FieldCheck(True, cleaned=cleaned)


# ----------------------------
# Identifiers / media
# ----------------------------
def clean_mls_id(mls_id: str) -> str:
    return re.sub(r"\s+", "", mls_id)


def is_valid_mls_id(mls_id: str) -> bool:
    return 3 <= len(mls_id) <= 20


def is_valid_image_url(url: object) -> bool:
    if not isinstance(url, str) or not url.startswith(("http://", "https://")):
        return False
    low = url.lower()
    return any(ext in low for ext in IMAGE_EXTENSIONS)


__all__ = [
    "FieldCheck",
    "IMAGE_EXTENSIONS",
    "clean_address",
    "is_valid_address",
    "clean_city",
    "is_valid_city",
    "clean_state",
    "is_valid_state",
    "clean_zip",
    "is_valid_zip",
    "check_price",
    "check_bedrooms",
    "check_bathrooms",
    "check_square_feet",
    "check_year_built",
    "clean_mls_id",
    "is_valid_mls_id",
    "is_valid_image_url",
]
