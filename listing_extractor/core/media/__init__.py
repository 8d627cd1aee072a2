from .html_finder import HtmlImageFinder, looks_like_icon_or_logo
from .pipeline import MAX_IMAGES, RankedImage, best_image_url, process_images, rank_images
from .quality import canonical_image_key, enhance_image_url, score_image_url

__all__ = [
    "HtmlImageFinder",
    "looks_like_icon_or_logo",
    "MAX_IMAGES",
    "RankedImage",
    "best_image_url",
    "process_images",
    "rank_images",
    "canonical_image_key",
    "enhance_image_url",
    "score_image_url",
]
