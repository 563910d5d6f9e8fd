"""
Page/limit parsing and the pagination envelope shared by paginated reads.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from listings.exceptions import InvalidInput


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _parse_positive_int(value: Any, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a positive integer", {name: value})
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a positive integer", {name: value})
    if parsed < 1:
        raise InvalidInput(f"{name} must be a positive integer", {name: value})
    return parsed


def parse_page_request(
    page: Any = None,
    limit: Any = None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> PageRequest:
    """
    Validate page and limit query values.

    Limits above max_limit are clamped rather than rejected.
    """
    page_number = _parse_positive_int(page, "page", 1)
    page_size = min(_parse_positive_int(limit, "limit", default_limit), max_limit)
    return PageRequest(page=page_number, limit=page_size)


def build_pagination(
    total_count: int, page_request: PageRequest
) -> Dict[str, Optional[int]]:
    """Envelope used by every paginated response."""
    total_pages = math.ceil(total_count / page_request.limit) if total_count else 0
    return {
        "currentPage": page_request.page,
        "totalPages": total_pages,
        "totalCount": total_count,
        "perPage": page_request.limit,
        "hasNext": page_request.page < total_pages,
        "hasPrev": page_request.page > 1,
    }
