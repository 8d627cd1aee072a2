from .block_page import BLOCK_PAGE_MESSAGE, detect_block_page, is_block_page
from .validator import REQUIRED_FIELDS, extracted_fields, has_block_issue, missing_fields, validate_listing

__all__ = [
    "BLOCK_PAGE_MESSAGE",
    "detect_block_page",
    "is_block_page",
    "REQUIRED_FIELDS",
    "extracted_fields",
    "has_block_issue",
    "missing_fields",
    "validate_listing",
]
