# tests/normalize/test_utahrealestate_parser.py

from __future__ import annotations

from listing_extractor.core.normalize import parse_listing, parse_utahrealestate
from listing_extractor.schemas.models import Platform
from tests.utils import URE_URL, make_page

GALLERY = """
<div class="gallery">
  <img data-src="https://assets.utahrealestate.com/photos/1987654_2.jpg">
  <div data-src="https://assets.utahrealestate.com/photos/1987654_3.jpg"></div>
  <img src="https://assets.utahrealestate.com/floorplans/1987654_plan.jpg">
  <img src="https://ads.example.com/banner.jpg">
</div>
"""


def _ure_page(*, og_title: str = "$349,000 | 548 N 850 W Provo UT 84604", facts: str | None = None) -> str:
    if facts is None:
        facts = "<p>3 Beds</p><p>2 Baths</p><p>1,450 Sq. Ft.</p><p>MLS# 1987654</p>"
    return make_page(
        title="548 N 850 W, Provo, UT 84604 | UtahRealEstate.com",
        og_title=og_title,
        og_description="Updated rambler close to campus.",
        og_image="https://assets.utahrealestate.com/photos/640x480/1987654_1.jpg",
        body=facts + GALLERY,
    )


def test_og_title_and_body_facts():
    out = parse_utahrealestate(_ure_page(), URE_URL)

    assert out.price == "$349,000"
    assert (out.address, out.city, out.state, out.zip) == ("548 N 850 W", "Provo", "UT", "84604")
    assert (out.bedrooms, out.bathrooms, out.square_feet) == ("3", "2", "1450")
    assert out.mls_id == "1987654"
    assert out.description == "Updated rambler close to campus."


def test_gallery_images_exclude_floorplans_and_foreign_hosts():
    out = parse_utahrealestate(_ure_page(), URE_URL)

    assert set(out.image_urls) == {
        "https://assets.utahrealestate.com/photos/640x480/1987654_1.jpg",
        "https://assets.utahrealestate.com/photos/1987654_2.jpg",
        "https://assets.utahrealestate.com/photos/1987654_3.jpg",
    }
    assert out.image_url == out.image_urls[0]


def test_mls_falls_back_to_url_digits():
    out = parse_utahrealestate(_ure_page(facts="<p>4 Beds</p>"), URE_URL + "?src=share")
    assert out.mls_id == "1987654"
    assert out.bedrooms == "4"


def test_generic_fills_what_site_pass_missed():
    # no og:title price/address: the page title carries the address
    out = parse_utahrealestate(_ure_page(og_title="UtahRealEstate.com"), URE_URL)
    assert out.address == "548 N 850 W"
    assert out.city == "Provo"
    assert out.price is None


def test_dispatch_routes_by_platform():
    out = parse_listing(Platform.utahrealestate, _ure_page(), URE_URL)
    assert out.price == "$349,000"


def test_parsing_same_page_twice_gives_equal_records():
    html = _ure_page()
    assert parse_utahrealestate(html, URE_URL) == parse_utahrealestate(html, URE_URL)
