"""
Utility functions for the listings application.

- keywords.py: Recovery parser for stored keyword payloads
- freshness.py: Freshness windows for products and optimizations
- pagination.py: Page/limit parsing and the pagination envelope
- async_helpers.py: Running coroutines from sync code
"""

from .async_helpers import run_async
from .freshness import FRESHNESS_KINDS, freshness_window, is_fresh, stale_before
from .keywords import encode_keywords, parse_keywords
from .pagination import PageRequest, build_pagination, parse_page_request

__all__ = [
    "FRESHNESS_KINDS",
    "freshness_window",
    "is_fresh",
    "stale_before",
    "encode_keywords",
    "parse_keywords",
    "PageRequest",
    "build_pagination",
    "parse_page_request",
    "run_async",
]
