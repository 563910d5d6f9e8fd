"""
Product page extraction.

- rules.py: Ranked per-field extraction rules
- product_extractor.py: ProductExtractor and the ProductCandidate record
"""

from .product_extractor import ProductCandidate, ProductExtractor, first_match

__all__ = ["ProductCandidate", "ProductExtractor", "first_match"]
