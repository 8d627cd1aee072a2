# listing_extractor/core/normalize/draft.py
from __future__ import annotations

from typing import Any

from listing_extractor.schemas.models import ExtractedListing

_EMPTY: tuple[Any, ...] = (None, "", [])


class ListingDraft:
    """
    Mutable accumulator for a parser run.

    Strategies are applied best-first; `fill` only writes a field that is
    still empty, so an earlier (more trusted) source is never overwritten.
    """

    def __init__(self, url: str, title: str | None = None) -> None:
        self.fields: dict[str, Any] = {"url": url, "title": title}

    def missing(self, name: str) -> bool:
        return self.fields.get(name) in _EMPTY

    def get(self, name: str) -> Any:
        return self.fields.get(name)

    def fill(self, name: str, value: Any) -> None:
        if value in _EMPTY or not self.missing(name):
            return
        self.fields[name] = value

    def fill_from(self, record: ExtractedListing) -> None:
        for name in ExtractedListing.model_fields:
            self.fill(name, getattr(record, name))

    def build(self) -> ExtractedListing:
        return ExtractedListing(**self.fields)


__all__ = ["ListingDraft"]
