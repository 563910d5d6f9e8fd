"""
Validators Module - identifier shape checks.
"""

from listings.validators.identifier import (
    ASIN_LENGTH,
    is_valid_asin,
    normalize_asin,
    require_valid_asin,
)

__all__ = [
    "ASIN_LENGTH",
    "is_valid_asin",
    "normalize_asin",
    "require_valid_asin",
]
