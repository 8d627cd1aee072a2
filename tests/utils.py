# tests/utils.py
"""
Single source of truth for test data, page factories, and fake collaborators.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from listing_extractor.schemas.models import ExtractedListing, FetchStrategy

# -----------------------------
# Global defaults (edit once)
# -----------------------------

ZILLOW_URL = "https://www.zillow.com/homedetails/123-Main-St-Springfield-IL-62701/12345678_zpid/"
REDFIN_URL = "https://www.redfin.com/IL/Springfield/123-Main-St-62701/home/1234567"
URE_URL = "https://www.utahrealestate.com/report/1987654"
UNSUPPORTED_URL = "https://www.example.com/listing/42"

DEFAULT_STREET = "123 Main St"
DEFAULT_CITY = "Springfield"
DEFAULT_STATE = "IL"
DEFAULT_ZIP = "62701"
DEFAULT_PRICE = "$523,900"

ZILLOW_PHOTO = "https://photos.zillowstatic.com/fp/abc123-cc_ft_{w}.jpg"

BLOCK_PAGE_HTML = """<!doctype html>
<html><head><title>Access to this page has been denied</title></head>
<body><div id="px-captcha"></div><p>Please verify you are a human.</p></body></html>
"""

# -----------------------------
# HTML page factories
# -----------------------------


def make_page(
    *,
    title: str | None = "Listing",
    og_title: str | None = None,
    og_description: str | None = None,
    og_image: str | None = None,
    jsonld: Any = None,
    head_extra: str = "",
    body: str = "",
) -> str:
    """Minimal listing page; every block is optional."""
    head: list[str] = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if og_title is not None:
        head.append(f'<meta property="og:title" content="{og_title}">')
    if og_description is not None:
        head.append(f'<meta property="og:description" content="{og_description}">')
    if og_image is not None:
        head.append(f'<meta property="og:image" content="{og_image}">')
    if jsonld is not None:
        head.append(f'<script type="application/ld+json">{json.dumps(jsonld)}</script>')
    head.append(head_extra)
    return f"<!doctype html><html><head>{''.join(head)}</head><body>{body}</body></html>"


def make_jsonld_listing(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "SingleFamilyResidence",
        "address": {
            "@type": "PostalAddress",
            "streetAddress": DEFAULT_STREET,
            "addressLocality": DEFAULT_CITY,
            "addressRegion": DEFAULT_STATE,
            "postalCode": DEFAULT_ZIP,
        },
        "offers": {"@type": "Offer", "price": 523900, "priceCurrency": "USD"},
        "numberOfBedrooms": 3,
        "numberOfBathroomsTotal": 2,
        "floorSize": {"@type": "QuantitativeValue", "value": 1850},
        "description": "Charming home near downtown.",
    }
    data.update(overrides)
    return data


def make_zillow_property(**overrides: Any) -> dict[str, Any]:
    prop: dict[str, Any] = {
        "address": {
            "streetAddress": DEFAULT_STREET,
            "city": DEFAULT_CITY,
            "state": DEFAULT_STATE,
            "zipcode": DEFAULT_ZIP,
        },
        "price": 523900,
        "bedrooms": 3,
        "bathrooms": 2.5,
        "livingArea": 1850,
        "homeStatus": "FOR_SALE",
        "description": "Bright and open floor plan.",
        "mlsId": "MLS-778899",
        "yearBuilt": 1998,
        "homeType": "SINGLE_FAMILY",
        "responsivePhotos": [
            {"url": ZILLOW_PHOTO.format(w=1536)},
            {
                "mixedSources": {
                    "jpeg": [
                        {"url": "https://photos.zillowstatic.com/fp/def456-cc_ft_384.jpg", "width": 384},
                        {"url": "https://photos.zillowstatic.com/fp/def456-cc_ft_960.jpg", "width": 960},
                    ]
                }
            },
        ],
    }
    prop.update(overrides)
    return prop


def make_zillow_page(
    cache: dict[str, Any] | None = None,
    *,
    stringify_cache: bool = True,
    cache_location: str = "componentProps",
    page_props_extra: dict[str, Any] | None = None,
    og_title: str | None = None,
    og_description: str | None = None,
    body: str = "",
) -> str:
    """Zillow-style page with a __NEXT_DATA__ bootstrap carrying gdpClientCache."""
    page_props: dict[str, Any] = dict(page_props_extra or {})
    if cache is not None:
        page_props[cache_location] = {"gdpClientCache": json.dumps(cache) if stringify_cache else cache}
    next_data = {"props": {"pageProps": page_props}}
    script = f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(next_data)}</script>'
    return make_page(
        title="123 Main St, Springfield, IL 62701 | Zillow",
        og_title=og_title,
        og_description=og_description,
        head_extra=script,
        body=body,
    )


def full_render_cache(prop: dict[str, Any]) -> dict[str, Any]:
    return {'ForSaleFullRenderQuery{"zpid":12345678}': {"property": prop}}


# -----------------------------
# Record factories
# -----------------------------


def make_listing(**overrides: Any) -> ExtractedListing:
    """A clean, plausible record; tests override one field at a time."""
    data: dict[str, Any] = {
        "url": REDFIN_URL,
        "address": DEFAULT_STREET,
        "city": DEFAULT_CITY,
        "state": DEFAULT_STATE,
        "zip": DEFAULT_ZIP,
        "price": DEFAULT_PRICE,
        "bedrooms": "3",
        "bathrooms": "2",
        "square_feet": "1850",
        "mls_id": "778899",
        "description": "Charming home near downtown.",
        "image_url": "https://cdn.example.com/photos/front.jpg",
        "image_urls": ["https://cdn.example.com/photos/front.jpg"],
    }
    data.update(overrides)
    return ExtractedListing(**data)


# -----------------------------
# Fake collaborators
# -----------------------------


class FakeFetcher:
    """
    PageFetcher double: per-strategy canned markup or exception.
    Records every (url, strategy) call in order.
    """

    def __init__(self, *, heavy: str | BaseException | None = None, light: str | BaseException | None = None):
        self.responses: dict[FetchStrategy, str | BaseException | None] = {
            FetchStrategy.heavy: heavy,
            FetchStrategy.light: light,
        }
        self.calls: list[tuple[str, FetchStrategy]] = []

    async def fetch(self, url: str, strategy: FetchStrategy) -> str:
        self.calls.append((url, strategy))
        outcome = self.responses[strategy]
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise AssertionError(f"unexpected {strategy.value} fetch for {url}")
        return outcome

    @property
    def strategies(self) -> list[FetchStrategy]:
        return [s for _, s in self.calls]


class FakeResponse:
    """Just enough of requests.Response for fetch_light."""

    def __init__(self, status_code: int = 200, text: str = "<html></html>"):
        self.status_code = status_code
        self.text = text


# -----------------------------
# Playwright doubles
# -----------------------------
class FakeBrowserResponse:
    def __init__(self, status: int):
        self.status = status


class FakeBrowserPage:
    def __init__(self, status: int | None, html: str, goto_exc: BaseException | None):
        self.status = status
        self.html = html
        self.goto_exc = goto_exc
        self.goto_kwargs: dict[str, Any] = {}

    async def goto(self, url: str, **kwargs: Any) -> FakeBrowserResponse | None:
        self.goto_kwargs = kwargs
        if self.goto_exc is not None:
            raise self.goto_exc
        return FakeBrowserResponse(self.status) if self.status is not None else None

    async def content(self) -> str:
        return self.html


class FakeBrowserContext:
    def __init__(self, page: FakeBrowserPage):
        self.page = page
        self.init_scripts: list[str] = []
        self.closed = False

    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)

    async def new_page(self) -> FakeBrowserPage:
        return self.page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, *, status: int | None = 200, html: str = "<html>rendered</html>", goto_exc=None):
        self.connected = True
        self.closed = False
        self.contexts: list[FakeBrowserContext] = []
        self.context_kwargs: list[dict[str, Any]] = []
        self._page_args = (status, html, goto_exc)

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **kwargs: Any) -> FakeBrowserContext:
        self.context_kwargs.append(kwargs)
        ctx = FakeBrowserContext(FakeBrowserPage(*self._page_args))
        self.contexts.append(ctx)
        return ctx

    async def close(self) -> None:
        self.closed = True
        self.connected = False


class FakeDriver:
    def __init__(self):
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


def fake_launcher(**browser_kwargs: Any):
    """Launcher for BrowserPool; returns (launch, launched browsers)."""
    launched: list[FakeBrowser] = []

    async def _launch(policy):
        await asyncio.sleep(0)  # give racing callers a chance to interleave
        browser = FakeBrowser(**browser_kwargs)
        launched.append(browser)
        return FakeDriver(), browser

    return _launch, launched
