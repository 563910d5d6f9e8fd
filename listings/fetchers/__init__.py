"""
Product page fetching.
"""

from .product_page import FetchResponse, ProductPageFetcher

__all__ = ["FetchResponse", "ProductPageFetcher"]
