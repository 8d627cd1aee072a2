from .classifier import (
    classify,
    detect_platform,
    is_supported_platform,
    is_valid_url,
    requires_heavy_fetch,
)

__all__ = [
    "classify",
    "detect_platform",
    "is_supported_platform",
    "is_valid_url",
    "requires_heavy_fetch",
]
