"""
Ranked extraction rules for a product detail page.

Each rule is a plain callable ``rule(soup) -> value or None``. A field is
described by an ordered list of rules; the extractor evaluates them in order
and keeps the first non-empty result. Rules never raise on missing markup.
"""

import re
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

Rule = Callable[[BeautifulSoup], Optional[object]]

TITLE_MIN_LENGTH = 10
BULLET_MIN_LENGTH = 10
DESCRIPTION_MIN_LENGTH = 50
BULLET_BOILERPLATE = "Make sure"
BULLET_SEPARATOR = "\n• "
AVAILABILITY_MARKERS = ("stock", "Available")
DEFAULT_AVAILABILITY = "Unknown"
BRAND_PREFIXES = ("by ", "Brand: ")
IMAGE_ATTRIBUTES = ("src", "data-old-hires", "data-src")
INLINE_IMAGE_PREFIX = "data:"

RATING_PATTERN = re.compile(r"(\d+\.?\d*) out of 5")
REVIEW_COUNT_PATTERN = re.compile(r"(\d+(?:,\d+)*)")


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


def selected_text(selector: str) -> Rule:
    """Text of every element matching selector, concatenated and trimmed."""

    def rule(soup: BeautifulSoup) -> Optional[str]:
        text = _clean("".join(el.get_text() for el in soup.select(selector)))
        return text or None

    rule.__name__ = f"selected_text({selector})"
    return rule


def first_text(selector: str) -> Rule:
    """Trimmed text of the first element matching selector."""

    def rule(soup: BeautifulSoup) -> Optional[str]:
        element = soup.select_one(selector)
        if element is None:
            return None
        return _clean(element.get_text()) or None

    rule.__name__ = f"first_text({selector})"
    return rule


def long_text(selector: str, min_length: int = DESCRIPTION_MIN_LENGTH) -> Rule:
    """Concatenated text, accepted only when longer than min_length."""
    base = selected_text(selector)

    def rule(soup: BeautifulSoup) -> Optional[str]:
        text = base(soup)
        if text and len(text) > min_length:
            return text
        return None

    rule.__name__ = f"long_text({selector})"
    return rule


def image_source(selector: str) -> Rule:
    """
    src (or a lazy-loaded data-src) of the first matching image.

    Inline ``data:`` images are placeholders, not product images; when that
    is all the element carries the rule yields nothing.
    """

    def rule(soup: BeautifulSoup) -> Optional[str]:
        element = soup.select_one(selector)
        if element is None:
            return None
        for attribute in IMAGE_ATTRIBUTES:
            url = _clean(element.get(attribute))
            if url and not url.lower().startswith(INLINE_IMAGE_PREFIX):
                return url
        return None

    rule.__name__ = f"image_source({selector})"
    return rule


def availability_text(selector: str) -> Rule:
    """Availability text, accepted only if it mentions stock or availability."""
    base = selected_text(selector)

    def rule(soup: BeautifulSoup) -> Optional[str]:
        text = base(soup)
        if text and any(marker in text for marker in AVAILABILITY_MARKERS):
            return text
        return None

    rule.__name__ = f"availability_text({selector})"
    return rule


def brand_text(selector: str) -> Rule:
    """Byline text with 'by ' / 'Brand: ' prefixes removed."""
    base = selected_text(selector)

    def rule(soup: BeautifulSoup) -> Optional[str]:
        text = base(soup)
        if not text:
            return None
        for prefix in BRAND_PREFIXES:
            text = text.replace(prefix, "", 1)
        return text.strip() or None

    rule.__name__ = f"brand_text({selector})"
    return rule


def last_link_text(selector: str) -> Rule:
    """Text of the last matching element (deepest breadcrumb)."""

    def rule(soup: BeautifulSoup) -> Optional[str]:
        elements = soup.select(selector)
        if not elements:
            return None
        return _clean(elements[-1].get_text()) or None

    rule.__name__ = f"last_link_text({selector})"
    return rule


def bullet_items(selector: str) -> Rule:
    """
    Every list-item text under selector, minus boilerplate and short items.

    Returns the list of usable items, or None when nothing survives.
    """

    def rule(soup: BeautifulSoup) -> Optional[List[str]]:
        items = []
        for element in soup.select(selector):
            text = _clean(element.get_text())
            if not text or BULLET_BOILERPLATE in text:
                continue
            if len(text) <= BULLET_MIN_LENGTH:
                continue
            items.append(text)
        return items or None

    rule.__name__ = f"bullet_items({selector})"
    return rule


def rating_value(selector: str) -> Rule:
    """Star rating parsed from 'X out of 5' text."""

    def rule(soup: BeautifulSoup) -> Optional[float]:
        text = "".join(el.get_text() for el in soup.select(selector))
        match = RATING_PATTERN.search(text)
        if not match:
            return None
        try:
            value = float(match.group(1))
        except ValueError:
            return None
        if value < 0 or value > 5:
            return None
        return value

    rule.__name__ = f"rating_value({selector})"
    return rule


def review_count_value(selector: str) -> Rule:
    """Review count from the first digit group, thousands separators removed."""

    def rule(soup: BeautifulSoup) -> Optional[int]:
        text = "".join(el.get_text() for el in soup.select(selector))
        match = REVIEW_COUNT_PATTERN.search(text)
        if not match:
            return None
        return int(match.group(1).replace(",", ""))

    rule.__name__ = f"review_count_value({selector})"
    return rule


TITLE_RULES: List[Rule] = [
    selected_text("#productTitle"),
    selected_text(".product-title"),
    selected_text("#btAsinTitle"),
    selected_text(".a-size-large.product-title-word-break"),
]

BULLET_RULES: List[Rule] = [
    bullet_items("#feature-bullets ul li span"),
    bullet_items(".a-unordered-list .a-list-item"),
]

DESCRIPTION_RULES: List[Rule] = [
    long_text("#productDescription p"),
    long_text("#feature-bullets .a-list-item"),
    long_text(".product-description"),
    long_text("#aplus .aplus-p1"),
]

IMAGE_RULES: List[Rule] = [
    image_source("#landingImage"),
    image_source(".a-dynamic-image"),
    image_source("#imgBlkFront"),
]

PRICE_RULES: List[Rule] = [
    first_text(".a-price .a-offscreen"),
    first_text("#priceblock_dealprice"),
    first_text("#priceblock_ourprice"),
    first_text(".a-price-whole"),
    first_text(".a-price-symbol + .a-price-whole"),
]

AVAILABILITY_RULES: List[Rule] = [
    availability_text("#availability span"),
    availability_text(".a-color-success"),
    availability_text(".a-color-error"),
    availability_text("#merchant-info"),
]

RATING_RULES: List[Rule] = [
    rating_value('[data-hook="average-star-rating"] .a-icon-alt'),
]

REVIEW_COUNT_RULES: List[Rule] = [
    review_count_value("#acrCustomerReviewText"),
]

CATEGORY_RULES: List[Rule] = [
    last_link_text("#wayfinding-breadcrumbs_feature_div a"),
]

BRAND_RULES: List[Rule] = [
    brand_text("#bylineInfo"),
    brand_text(".a-color-secondary .author"),
    brand_text('[data-feature-name="bylineInfo"] .author'),
]
