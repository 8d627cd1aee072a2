# listing_extractor/schemas/models.py

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# =========================
# Platforms & fetch strategy
# =========================


class Platform(str, Enum):
    """Closed set of listing sources; `generic` is the universal fallback."""

    zillow = "zillow"
    realtor = "realtor"
    redfin = "redfin"
    homes = "homes"
    trulia = "trulia"
    utahrealestate = "utahrealestate"
    generic = "generic"


class FetchStrategy(str, Enum):
    light = "light"  # single HTTP GET
    heavy = "heavy"  # headless browser session


class Classification(BaseModel):
    """Classifier verdict for a URL."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    requires_heavy_fetch: bool = False

    @property
    def strategy(self) -> FetchStrategy:
        return FetchStrategy.heavy if self.requires_heavy_fetch else FetchStrategy.light


# =========================
# Fetch policy (configuration)
# =========================

_DESKTOP_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_TRUTHY = {"1", "true", "yes", "on"}


class FetchPolicy(BaseModel):
    """
    Operational knobs for the fetch layer.

    `allow_browser` is the kill switch for headless fetching: environments that
    cannot run Chromium set it to False (or export LISTING_EXTRACT_DISABLE_BROWSER=true)
    and every platform is fetched over plain HTTP instead.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    allow_browser: bool = Field(True, description="If False, never attempt headless-browser fetching.")
    timeout_s: float = Field(30.0, gt=0, description="Network timeout for HTTP requests and browser navigation.")
    max_redirects: int = Field(5, ge=0, description="Redirect budget for the lightweight HTTP path.")
    settle_s: float = Field(2.0, ge=0, description="Fixed delay after network idle so client-side rendering can finish.")
    user_agent: str = Field(_DESKTOP_UA, description="Desktop browser User-Agent used by both fetch paths.")
    referer: str = Field("https://www.google.com/", description="Referer header sent by the lightweight path.")
    accept_language: str = Field("en-US,en;q=0.9")
    viewport_width: int = Field(1920, ge=320)
    viewport_height: int = Field(1080, ge=240)
    headless: bool = True

    @classmethod
    def from_env(cls, prefix: str = "LISTING_EXTRACT_", **overrides: Any) -> FetchPolicy:
        """
        Build a policy from defaults plus light environment overrides.

        Recognized variables (with the default prefix):
          LISTING_EXTRACT_DISABLE_BROWSER, LISTING_EXTRACT_TIMEOUT_S,
          LISTING_EXTRACT_SETTLE_S, LISTING_EXTRACT_USER_AGENT
        Bad numeric values are ignored.
        """
        updates: dict[str, Any] = {}

        disable = os.getenv(f"{prefix}DISABLE_BROWSER")
        if disable is not None and disable.strip():
            updates["allow_browser"] = disable.strip().lower() not in _TRUTHY

        for key, env in (("timeout_s", "TIMEOUT_S"), ("settle_s", "SETTLE_S")):
            raw = os.getenv(f"{prefix}{env}")
            if raw:
                try:
                    updates[key] = float(raw)
                except ValueError:
                    pass

        ua = os.getenv(f"{prefix}USER_AGENT")
        if ua:
            updates["user_agent"] = ua.strip()

        updates.update(overrides)
        return cls(**updates)


# =========================
# Extracted listing record
# =========================

# Fields rendered as "" (not null) at the serialization boundary.
CORE_TEXT_FIELDS: tuple[str, ...] = (
    "address",
    "city",
    "state",
    "zip",
    "price",
    "bedrooms",
    "bathrooms",
    "square_feet",
    "status",
    "mls_id",
    "description",
    "image_url",
)


class ExtractedListing(BaseModel):
    """
    Normalized listing record produced by the platform parsers.

    Every scalar is optional: None means "not found on the page", which keeps
    "absent" distinct from a legitimately empty value. Numbers stay string-encoded
    so "unknown" never collapses into zero. `to_payload()` is the one place that
    coerces absent core fields to "" for form pre-fill.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", alias_generator=to_camel, populate_by_name=True)

    url: str

    # identity / location
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None

    # commercial
    price: str | None = None
    bedrooms: str | None = None
    bathrooms: str | None = None
    square_feet: str | None = None

    # descriptive
    status: str | None = None
    mls_id: str | None = None
    description: str | None = None
    title: str | None = None

    # media
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)

    # extended details (opportunistic)
    property_type: str | None = None
    property_subtype: str | None = None
    year_built: str | None = None
    lot_size: str | None = None
    features: list[str] | None = None
    interior_features: list[str] | None = None
    exterior_features: list[str] | None = None
    parking_spaces: str | None = None
    garage_spaces: str | None = None
    stories: str | None = None
    heating: str | None = None
    cooling: str | None = None
    flooring: str | None = None
    fireplace_count: str | None = None
    hoa_fee: str | None = None
    tax_assessed_value: str | None = None
    annual_tax_amount: str | None = None
    price_per_sqft: str | None = None
    zestimate: str | None = None
    days_on_market: str | None = None
    listing_date: str | None = None

    @field_validator("image_urls", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_payload(self) -> dict[str, Any]:
        """Plain camelCase dict; absent core text fields become ""."""
        data = self.model_dump(by_alias=True)
        for name in CORE_TEXT_FIELDS:
            alias = to_camel(name)
            if data.get(alias) is None:
                data[alias] = ""
        return data


# =========================
# Validation contracts
# =========================

Severity = Literal["error", "warning", "info"]


class ValidationIssue(BaseModel):
    """Advisory finding about one field; only errors affect validity."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    field: str
    severity: Severity
    message: str
    original_value: str | None = None
    suggested_value: str | None = None


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    cleaned_data: ExtractedListing
    confidence: int = Field(..., ge=0, le=100, description="0-100 heuristic trust score.")


class ValidationSummary(BaseModel):
    """ValidationResult without the cleaned record (the record travels as `data`)."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    confidence: int = Field(..., ge=0, le=100)

    @classmethod
    def from_result(cls, result: ValidationResult) -> ValidationSummary:
        return cls(is_valid=result.is_valid, issues=list(result.issues), confidence=result.confidence)


# =========================
# Orchestrator output
# =========================


class ErrorCode(str, Enum):
    """Stable failure taxonomy for callers that want to branch on the cause."""

    invalid_url = "invalid_url"
    unsupported_platform = "unsupported_platform"
    access_denied = "access_denied"
    not_found = "not_found"
    rate_limited = "rate_limited"
    fetch_failed = "fetch_failed"
    timeout = "timeout"
    no_data = "no_data"
    blocked = "blocked"
    parse_failed = "parse_failed"


class ExtractionResult(BaseModel):
    """
    Outcome of one extraction call.

    Success carries the cleaned record, the fields actually populated, the
    required fields still missing (a "partial" result upstream) and the
    validation summary. Failure carries a user-facing message and an ErrorCode.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    success: bool
    data: ExtractedListing | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    extracted_fields: list[str] | None = None
    missing_fields: list[str] | None = None
    validation: ValidationSummary | None = None

    @classmethod
    def failure(cls, code: ErrorCode, message: str, **extra: Any) -> ExtractionResult:
        return cls(success=False, error=message, error_code=code, **extra)

    @property
    def is_partial(self) -> bool:
        return self.success and bool(self.missing_fields)

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe plain data (no models, enums rendered as strings)."""
        out = self.model_dump(by_alias=True, mode="json", exclude_none=True, exclude={"data"})
        if self.data is not None:
            out["data"] = self.data.to_payload()
        return out


__all__ = [
    "Platform",
    "FetchStrategy",
    "Classification",
    "FetchPolicy",
    "CORE_TEXT_FIELDS",
    "ExtractedListing",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
    "ErrorCode",
    "ExtractionResult",
]
