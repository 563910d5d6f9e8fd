"""
Structured extraction of a product detail page.

Turns raw HTML into a ProductCandidate, evaluating the ranked rule lists in
``listings.extraction.rules``. A candidate is only returned when a plausible
title was found; otherwise ExtractionFailure is raised, which callers treat
as "page fetched but blocked or in an unusual layout".
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup

from listings.exceptions import ExtractionFailure
from listings.extraction import rules
from listings.extraction.rules import Rule

logger = logging.getLogger(__name__)

# Column widths of the bounded Product fields
TRUNCATED_FIELDS = {
    "price": 50,
    "availability": 100,
    "brand": 255,
    "category": 255,
}
IMAGE_URL_MAX_LENGTH = 500


@dataclass
class ProductCandidate:
    """
    Unsaved product fields extracted from one page.

    Short text fields are cut to their column width. An image URL that does
    not fit is dropped, since a cut URL no longer points at the image.
    """

    asin: str
    title: str
    bullet_points: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[str] = None
    availability: str = rules.DEFAULT_AVAILABILITY
    rating: Optional[float] = None
    review_count: Optional[int] = None
    brand: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self):
        for name, max_length in TRUNCATED_FIELDS.items():
            value = getattr(self, name)
            if value and len(value) > max_length:
                logger.debug(f"Truncating {name} for {self.asin} ({len(value)} chars)")
                setattr(self, name, value[:max_length].rstrip())
        if self.image_url and len(self.image_url) > IMAGE_URL_MAX_LENGTH:
            logger.debug(f"Dropping oversized image URL for {self.asin}")
            self.image_url = None

    def to_model_fields(self) -> Dict[str, Any]:
        """Field values for Product.update_or_create defaults."""
        fields = asdict(self)
        fields.pop("asin")
        return fields


def first_match(soup: BeautifulSoup, field_rules: Sequence[Rule]) -> Optional[Any]:
    """Evaluate rules in order and return the first non-empty value."""
    for rule in field_rules:
        value = rule(soup)
        if value is not None:
            return value
    return None


class ProductExtractor:
    """
    Extracts a ProductCandidate from product page HTML.

    Rule lists can be overridden per instance, which keeps single rules
    testable and lets a layout change be patched without touching the
    extraction flow.
    """

    def __init__(
        self,
        title_rules: Optional[List[Rule]] = None,
        bullet_rules: Optional[List[Rule]] = None,
        description_rules: Optional[List[Rule]] = None,
    ):
        self.title_rules = title_rules or rules.TITLE_RULES
        self.bullet_rules = bullet_rules or rules.BULLET_RULES
        self.description_rules = description_rules or rules.DESCRIPTION_RULES

    def extract(self, html: str, asin: str) -> ProductCandidate:
        """
        Extract product fields from page HTML.

        Args:
            html: Raw page HTML
            asin: Identifier the page was fetched for

        Returns:
            ProductCandidate

        Raises:
            ExtractionFailure: No title, or a title shorter than 10 characters
        """
        soup = BeautifulSoup(html or "", "html.parser")

        title = first_match(soup, self.title_rules)
        if not title or len(title) < rules.TITLE_MIN_LENGTH:
            logger.warning(
                f"Title extraction failed for {asin} (got {title!r}); "
                "page may be blocked or use an unusual layout"
            )
            raise ExtractionFailure(
                "Could not extract product title. The product page may have an "
                "unusual format or be restricted.",
                {"asin": asin},
            )

        bullets = first_match(soup, self.bullet_rules)
        availability = first_match(soup, rules.AVAILABILITY_RULES)

        candidate = ProductCandidate(
            asin=asin,
            title=title,
            bullet_points=rules.BULLET_SEPARATOR.join(bullets) if bullets else None,
            description=first_match(soup, self.description_rules),
            image_url=first_match(soup, rules.IMAGE_RULES),
            price=first_match(soup, rules.PRICE_RULES),
            availability=availability or rules.DEFAULT_AVAILABILITY,
            rating=first_match(soup, rules.RATING_RULES),
            review_count=first_match(soup, rules.REVIEW_COUNT_RULES),
            brand=first_match(soup, rules.BRAND_RULES),
            category=first_match(soup, rules.CATEGORY_RULES),
        )

        logger.info(f"Extracted product {asin}: {title[:50]}")
        return candidate
