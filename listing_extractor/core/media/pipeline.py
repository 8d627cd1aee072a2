# listing_extractor/core/media/pipeline.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .quality import canonical_image_key, enhance_image_url, score_image_url

MAX_IMAGES = 30


@dataclass(frozen=True)
class RankedImage:
    url: str
    original_url: str
    score: float


def rank_images(urls: Iterable[str | None]) -> list[RankedImage]:
    """Enhance + score every URL; best first, ties go to the longer (more specific) URL."""
    ranked: list[RankedImage] = []
    for raw in urls:
        if not raw or not isinstance(raw, str):
            continue
        enhanced = enhance_image_url(raw.strip())
        ranked.append(RankedImage(url=enhanced, original_url=raw, score=score_image_url(enhanced)))
    ranked.sort(key=lambda r: (-r.score, -len(r.url)))
    return ranked


def process_images(urls: Iterable[str | None], *, limit: int = MAX_IMAGES) -> list[str]:
    """
    High-level image pipeline:
      1) enhance each URL to its best rendition and score it
      2) sort by score (desc)
      3) keep one URL per canonical key (the highest-scoring variant)
      4) cap at `limit`
    Pure: same input, same output.
    """
    best_by_key: dict[str, RankedImage] = {}
    for item in rank_images(urls):
        key = canonical_image_key(item.url)
        prev = best_by_key.get(key)
        if prev is None or prev.score < item.score:
            best_by_key[key] = item

    deduped = sorted(best_by_key.values(), key=lambda r: -r.score)
    return [r.url for r in deduped[:limit]]


def best_image_url(urls: Iterable[str | None]) -> str | None:
    """Highest-ranked URL of a rendition set (e.g. one photo's mixedSources)."""
    ranked = rank_images(urls)
    return ranked[0].url if ranked else None
