# listing_extractor/core/validate/validator.py
"""
Validation & cleaning pipeline.

`validate_listing` runs every rule over every populated field and returns the
cleaned record plus an ordered issue list and a 0-100 confidence score.
Findings are data, never exceptions.
"""

from __future__ import annotations

import logging
from typing import Any

from listing_extractor.core.validate.block_page import BLOCK_PAGE_MESSAGE, DESCRIPTION_SIGNATURES, detect_block_page
from listing_extractor.core.validate.fields import (
    FieldCheck,
    check_bathrooms,
    check_bedrooms,
    check_price,
    check_square_feet,
    check_year_built,
    clean_address,
    clean_city,
    clean_mls_id,
    clean_state,
    clean_zip,
    is_valid_address,
    is_valid_city,
    is_valid_image_url,
    is_valid_mls_id,
    is_valid_state,
    is_valid_zip,
)
from listing_extractor.core.normalize.values import parse_number
from listing_extractor.schemas.models import ExtractedListing, ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)

# =========================
# Penalties (confidence points)
# =========================
PENALTY_ADDRESS = 20
PENALTY_CITY = 5
PENALTY_STATE = 15
PENALTY_ZIP = 10
PENALTY_PRICE = {"error": 15, "warning": 5}
PENALTY_ROOMS = {"error": 10, "warning": 3}  # bedrooms, bathrooms, square feet
PENALTY_YEAR_BUILT = 5
PENALTY_MLS = 3
PENALTY_PER_IMAGE_ISSUE = 2
PENALTY_PER_CROSS_FIELD_ISSUE = 3

REQUIRED_FIELDS: tuple[str, ...] = ("address",)

# payload name → record attribute, in reporting order
_PRESENCE_FIELDS: tuple[tuple[str, str], ...] = (
    ("address", "address"),
    ("city", "city"),
    ("state", "state"),
    ("zip", "zip"),
    ("price", "price"),
    ("bedrooms", "bedrooms"),
    ("bathrooms", "bathrooms"),
    ("squareFeet", "square_feet"),
    ("description", "description"),
    ("images", "image_urls"),
    ("mlsId", "mls_id"),
)


class _Run:
    """Accumulates issues and penalties for one validation pass."""

    def __init__(self, record: ExtractedListing) -> None:
        self.original = record
        self.updates: dict[str, Any] = {}
        self.issues: list[ValidationIssue] = []
        self.confidence = 100
        self.blocked = False

    def value(self, name: str) -> Any:
        return self.updates[name] if name in self.updates else getattr(self.original, name)

    def set(self, name: str, value: Any) -> None:
        self.updates[name] = value

    def flag(
        self,
        field: str,
        severity: str,
        message: str,
        penalty: int,
        *,
        original: str | None = None,
        suggested: str | None = None,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                field=field,
                severity=severity,
                message=message,
                original_value=original,
                suggested_value=suggested,
            )
        )
        self.confidence -= penalty

    def numeric(self, field: str, attr: str, check: FieldCheck, penalties: dict[str, int]) -> None:
        raw = getattr(self.original, attr)
        if check.cleaned is not None:
            self.set(attr, check.cleaned)
        if not check.ok:
            suggested = check.cleaned if check.severity == "warning" else None
            self.flag(field, check.severity, check.message, penalties[check.severity], original=raw, suggested=suggested)


# ----------------------------
# Rule groups
# ----------------------------
def _check_block_page(run: _Run) -> None:
    address_hit = detect_block_page(run.value("address"))
    description_hit = detect_block_page(run.value("description"), only=DESCRIPTION_SIGNATURES)
    if not (address_hit or description_hit):
        return

    logger.info("block-page signature in parsed fields (%s)", address_hit or description_hit)
    run.blocked = True
    run.flag("address", "error", BLOCK_PAGE_MESSAGE, 0, original=run.original.address)
    if address_hit:
        run.set("address", None)
    if description_hit:
        run.set("description", None)


def _check_location(run: _Run) -> None:
    raw = run.value("address")
    if raw:
        cleaned = clean_address(raw)
        run.set("address", cleaned or None)
        if not is_valid_address(cleaned, raw):
            run.flag(
                "address",
                "error",
                "Address appears to be invalid or contains suspicious content",
                PENALTY_ADDRESS,
                original=raw,
            )

    raw = run.value("city")
    if raw:
        cleaned = clean_city(raw)
        run.set("city", cleaned or None)
        if not is_valid_city(cleaned):
            run.flag("city", "warning", "City name may be invalid", PENALTY_CITY, original=raw)

    raw = run.value("state")
    if raw:
        cleaned = clean_state(raw)
        run.set("state", cleaned or None)
        if not is_valid_state(cleaned):
            run.flag(
                "state",
                "error",
                f'Invalid state abbreviation: "{cleaned}". Must be a valid 2-letter US state code.',
                PENALTY_STATE,
                original=raw,
            )

    raw = run.value("zip")
    if raw:
        cleaned = clean_zip(raw)
        run.set("zip", cleaned or None)
        if not is_valid_zip(cleaned):
            run.flag(
                "zip",
                "error",
                "Invalid ZIP code format. Must be 5 digits or 5+4 format.",
                PENALTY_ZIP,
                original=raw,
            )


def _check_numbers(run: _Run) -> None:
    if run.value("price"):
        run.numeric("price", "price", check_price(run.value("price")), PENALTY_PRICE)
    if run.value("bedrooms"):
        run.numeric("bedrooms", "bedrooms", check_bedrooms(run.value("bedrooms")), PENALTY_ROOMS)
    if run.value("bathrooms"):
        run.numeric("bathrooms", "bathrooms", check_bathrooms(run.value("bathrooms")), PENALTY_ROOMS)
    if run.value("square_feet"):
        run.numeric("squareFeet", "square_feet", check_square_feet(run.value("square_feet")), PENALTY_ROOMS)
    if run.value("year_built"):
        check = check_year_built(run.value("year_built"))
        run.numeric("yearBuilt", "year_built", check, {"error": PENALTY_YEAR_BUILT, "warning": PENALTY_YEAR_BUILT})


def _check_identifiers(run: _Run) -> None:
    raw = run.value("mls_id")
    if not raw:
        return
    cleaned = clean_mls_id(raw)
    run.set("mls_id", cleaned or None)
    if not is_valid_mls_id(cleaned):
        run.flag("mlsId", "warning", "MLS ID format may be invalid", PENALTY_MLS, original=raw)


def _check_images(run: _Run) -> None:
    urls: list[str] = run.value("image_urls") or []
    if not urls:
        return
    kept = [u for u in urls if is_valid_image_url(u)]
    dropped = len(urls) - len(kept)
    if dropped:
        run.flag(
            "images",
            "warning",
            f"{dropped} invalid image URL(s) found and removed",
            PENALTY_PER_IMAGE_ISSUE,
        )
        run.set("image_urls", kept)
    if kept and not run.value("image_url"):
        run.set("image_url", kept[0])


def _check_cross_fields(run: _Run) -> None:
    city, state = run.value("city"), run.value("state")
    if city and not state:
        run.flag("state", "warning", "City provided but state is missing", PENALTY_PER_CROSS_FIELD_ISSUE)
    if state and not city:
        run.flag("city", "info", "State provided but city is missing", PENALTY_PER_CROSS_FIELD_ISSUE)

    price = parse_number(run.value("price"))
    sqft = parse_number(run.value("square_feet"))
    if price is None or not sqft or sqft <= 0:
        return
    per_sqft = price / sqft
    if per_sqft < 10:
        run.flag(
            "price",
            "warning",
            f"Price per square foot (${per_sqft:.2f}) seems unusually low. Please verify.",
            PENALTY_PER_CROSS_FIELD_ISSUE,
        )
    if per_sqft > 2000:
        run.flag(
            "price",
            "warning",
            f"Price per square foot (${per_sqft:.2f}) seems unusually high. Please verify.",
            PENALTY_PER_CROSS_FIELD_ISSUE,
        )


# ----------------------------
# Public API
# ----------------------------
def validate_listing(record: ExtractedListing) -> ValidationResult:
    run = _Run(record)

    _check_block_page(run)
    _check_location(run)
    _check_numbers(run)
    _check_identifiers(run)
    _check_images(run)
    _check_cross_fields(run)

    cleaned = record.model_copy(update=run.updates)
    confidence = 0 if run.blocked else max(0, min(100, run.confidence))
    has_errors = any(issue.severity == "error" for issue in run.issues)

    return ValidationResult(
        is_valid=not has_errors and bool(cleaned.address),
        issues=run.issues,
        cleaned_data=cleaned,
        confidence=confidence,
    )


def has_block_issue(result: ValidationResult) -> bool:
    return any(issue.message == BLOCK_PAGE_MESSAGE for issue in result.issues)


def extracted_fields(record: ExtractedListing) -> list[str]:
    """Payload names of the fields that carry data."""
    return [name for name, attr in _PRESENCE_FIELDS if getattr(record, attr)]


def missing_fields(record: ExtractedListing) -> list[str]:
    """Required fields that are absent or blank."""
    return [name for name in REQUIRED_FIELDS if not (getattr(record, name) or "").strip()]


__all__ = [
    "REQUIRED_FIELDS",
    "validate_listing",
    "has_block_issue",
    "extracted_fields",
    "missing_fields",
]
