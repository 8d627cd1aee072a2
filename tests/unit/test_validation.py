# tests/unit/test_validation.py
from __future__ import annotations

import pytest

from listing_extractor.core.validate import (
    BLOCK_PAGE_MESSAGE,
    extracted_fields,
    has_block_issue,
    missing_fields,
    validate_listing,
)


def _issues_for(result, field):
    return [i for i in result.issues if i.field == field]


def test_clean_listing_is_valid_with_full_confidence(listing_factory):
    result = validate_listing(listing_factory())

    assert result.is_valid is True
    assert result.issues == []
    assert result.confidence == 100
    assert result.cleaned_data.bathrooms == "2.0"


# -----------------------------
# Location
# -----------------------------
@pytest.mark.parametrize("raw", ["California", "california", "CA", " ca "])
def test_state_names_normalize_to_codes(listing_factory, raw):
    result = validate_listing(listing_factory(state=raw))
    assert result.cleaned_data.state == "CA"
    assert _issues_for(result, "state") == []


def test_multi_word_state_name(listing_factory):
    assert validate_listing(listing_factory(state="new york")).cleaned_data.state == "NY"


def test_unknown_state_is_an_error(listing_factory):
    result = validate_listing(listing_factory(state="XX"))

    (issue,) = _issues_for(result, "state")
    assert issue.severity == "error"
    assert issue.original_value == "XX"
    assert result.is_valid is False
    assert result.confidence == 85


def test_price_shaped_address_is_rejected(listing_factory):
    result = validate_listing(listing_factory(address="$523,900"))

    (issue,) = _issues_for(result, "address")
    assert issue.severity == "error"
    assert result.confidence == 80
    assert result.is_valid is False


@pytest.mark.parametrize("address", ["Price upon request 12", "Listing 42", "Error 500", "Main"])
def test_boilerplate_addresses_are_rejected(listing_factory, address):
    result = validate_listing(listing_factory(address=address))
    assert [i.severity for i in _issues_for(result, "address")] == ["error"]


def test_zip_formats(listing_factory):
    assert validate_listing(listing_factory(zip="627011234")).cleaned_data.zip == "62701-1234"
    result = validate_listing(listing_factory(zip="1234"))
    assert _issues_for(result, "zip")[0].severity == "error"
    assert result.confidence == 90


# -----------------------------
# Numbers
# -----------------------------
def test_low_price_is_a_warning_with_suggestion(listing_factory):
    result = validate_listing(listing_factory(price="$200", square_feet=None))

    (issue,) = _issues_for(result, "price")
    assert issue.severity == "warning"
    assert issue.original_value == "$200"
    assert issue.suggested_value == "$200"
    assert result.cleaned_data.price == "$200"
    assert result.is_valid is True
    assert result.confidence == 95


def test_non_positive_price_is_an_error(listing_factory):
    result = validate_listing(listing_factory(price="0", square_feet=None))
    (issue,) = _issues_for(result, "price")
    assert issue.severity == "error"
    assert issue.message == "Price must be a positive number"
    assert result.confidence == 85


def test_price_is_reformatted(listing_factory):
    assert validate_listing(listing_factory(price="523900")).cleaned_data.price == "$523,900"


def test_room_counts_and_area(listing_factory):
    result = validate_listing(listing_factory(bedrooms="25", bathrooms="2.5 baths", square_feet="1,850 sqft"))

    assert result.cleaned_data.bedrooms == "25"
    assert result.cleaned_data.bathrooms == "2.5"
    assert result.cleaned_data.square_feet == "1850"
    assert [i.field for i in result.issues] == ["bedrooms"]
    assert result.confidence == 97


def test_unparseable_bedrooms_is_an_error(listing_factory):
    result = validate_listing(listing_factory(bedrooms="many"))
    assert _issues_for(result, "bedrooms")[0].severity == "error"
    assert result.is_valid is False


def test_future_year_built_warns(listing_factory):
    result = validate_listing(listing_factory(year_built="2999"))
    (issue,) = _issues_for(result, "yearBuilt")
    assert issue.severity == "warning"


# -----------------------------
# Identifiers, images, cross-field
# -----------------------------
def test_mls_id_length(listing_factory):
    result = validate_listing(listing_factory(mls_id="A 1"))
    assert result.cleaned_data.mls_id == "A1"
    assert _issues_for(result, "mlsId")[0].severity == "warning"


def test_invalid_images_are_dropped_and_primary_backfilled(listing_factory):
    result = validate_listing(
        listing_factory(
            image_url=None,
            image_urls=["https://cdn.example.com/a.jpg", "javascript:void(0)", "https://cdn.example.com/page.html"],
        )
    )

    assert result.cleaned_data.image_urls == ["https://cdn.example.com/a.jpg"]
    assert result.cleaned_data.image_url == "https://cdn.example.com/a.jpg"
    (issue,) = _issues_for(result, "images")
    assert issue.message == "2 invalid image URL(s) found and removed"
    assert result.confidence == 98


def test_city_without_state(listing_factory):
    result = validate_listing(listing_factory(state=None))
    (issue,) = _issues_for(result, "state")
    assert issue.severity == "warning"
    assert issue.message == "City provided but state is missing"


def test_state_without_city_is_info(listing_factory):
    result = validate_listing(listing_factory(city=None))
    assert _issues_for(result, "city")[0].severity == "info"
    assert result.is_valid is True


def test_price_per_square_foot_outliers(listing_factory):
    high = validate_listing(listing_factory(price="$5,000,000", square_feet="1000"))
    assert any("unusually high" in i.message for i in _issues_for(high, "price"))

    low = validate_listing(listing_factory(price="$5,000", square_feet="1000"))
    assert any("unusually low" in i.message for i in _issues_for(low, "price"))


# -----------------------------
# Block pages
# -----------------------------
def test_block_page_address_short_circuits(listing_factory):
    result = validate_listing(listing_factory(address="Access to this page has been denied"))

    assert has_block_issue(result)
    (issue,) = [i for i in result.issues if i.message == BLOCK_PAGE_MESSAGE]
    assert issue.severity == "error"
    assert issue.field == "address"
    assert result.cleaned_data.address is None
    assert result.confidence == 0
    assert result.is_valid is False


def test_block_page_description_is_cleared(listing_factory):
    result = validate_listing(listing_factory(description="Please complete the CAPTCHA to continue"))

    assert has_block_issue(result)
    assert result.cleaned_data.description is None
    assert result.cleaned_data.address == "123 Main St"
    assert result.confidence == 0


@pytest.mark.parametrize(
    "description",
    [
        "Quiet cul-de-sac with no unusual traffic.",
        "Gated community; access denied to through traffic after 10pm.",
        "Please verify you are a human-sized dog fits through the pet door.",
    ],
)
def test_ordinary_description_prose_is_not_a_block_page(listing_factory, description):
    result = validate_listing(listing_factory(description=description))

    assert not has_block_issue(result)
    assert result.cleaned_data.description == description
    assert result.is_valid is True
    assert result.confidence == 100


# -----------------------------
# Required fields, bounds, idempotence
# -----------------------------
def test_missing_address_is_never_valid(listing_factory):
    result = validate_listing(listing_factory(address=None))
    assert result.is_valid is False
    assert missing_fields(result.cleaned_data) == ["address"]


def test_confidence_stays_in_bounds(listing_factory):
    result = validate_listing(
        listing_factory(
            address="Price TBD",
            city="1",
            state="XX",
            zip="12",
            price="0",
            bedrooms="many",
            bathrooms="99",
            square_feet="5",
            year_built="1500",
            mls_id="1",
            image_urls=["nope"],
        )
    )
    assert 0 <= result.confidence <= 100
    assert result.is_valid is False


def test_more_problems_never_raise_confidence(listing_factory):
    base = validate_listing(listing_factory()).confidence
    one = validate_listing(listing_factory(zip="1")).confidence
    two = validate_listing(listing_factory(zip="1", state="XX")).confidence
    assert base >= one >= two


def test_validation_is_idempotent(listing_factory):
    messy = listing_factory(
        state="california", zip="627011234", city="  springfield ", bathrooms="2", price="523900"
    )
    once = validate_listing(messy).cleaned_data
    twice = validate_listing(once).cleaned_data
    assert twice == once


def test_extracted_fields_in_payload_order(listing_factory):
    assert extracted_fields(listing_factory()) == [
        "address",
        "city",
        "state",
        "zip",
        "price",
        "bedrooms",
        "bathrooms",
        "squareFeet",
        "description",
        "images",
        "mlsId",
    ]
    assert extracted_fields(listing_factory(description=None, image_urls=[])) == [
        "address",
        "city",
        "state",
        "zip",
        "price",
        "bedrooms",
        "bathrooms",
        "squareFeet",
        "mlsId",
    ]
