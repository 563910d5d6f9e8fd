"""
Tests for product page extraction rules and the structured extractor.
"""

import pytest
from bs4 import BeautifulSoup

from listings.exceptions import ExtractionFailure
from listings.extraction import ProductExtractor, first_match
from listings.extraction import rules


def soup_of(html):
    return BeautifulSoup(html, "html.parser")


class TestProductExtractor:
    """Full-page extraction."""

    def test_extracts_all_fields(self, product_page_html):
        candidate = ProductExtractor().extract(product_page_html, "B08N5WRWNW")

        assert candidate.asin == "B08N5WRWNW"
        assert candidate.title == "Echo Dot (4th Gen) | Smart speaker with Alexa | Charcoal"
        assert candidate.price == "$49.99"
        assert candidate.availability == "Only 3 left in stock - order soon."
        assert candidate.rating == 4.7
        assert candidate.review_count == 89543
        assert candidate.image_url == "https://images.example.com/echo-dot.jpg"
        assert candidate.brand == "Amazon"
        assert candidate.category == "Smart Speakers"
        assert candidate.description.startswith("Introducing Echo Dot")

    def test_bullets_skip_boilerplate_and_short_items(self, product_page_html):
        candidate = ProductExtractor().extract(product_page_html, "B08N5WRWNW")

        bullets = candidate.bullet_points.split(rules.BULLET_SEPARATOR)
        assert len(bullets) == 3
        assert bullets[0].startswith("Meet the all-new Echo Dot")
        assert not any("Make sure" in bullet for bullet in bullets)
        assert "Short" not in bullets

    def test_blocked_page_raises_extraction_failure(self, blocked_page_html):
        with pytest.raises(ExtractionFailure) as exc_info:
            ProductExtractor().extract(blocked_page_html, "B08N5WRWNW")

        assert exc_info.value.details == {"asin": "B08N5WRWNW"}

    def test_title_shorter_than_ten_chars_is_rejected(self):
        html = '<span id="productTitle">Echo Dot</span>'
        with pytest.raises(ExtractionFailure):
            ProductExtractor().extract(html, "B08N5WRWNW")

    def test_optional_fields_default_when_absent(self):
        html = '<span id="productTitle">A perfectly plausible title</span>'
        candidate = ProductExtractor().extract(html, "B08N5WRWNW")

        assert candidate.bullet_points is None
        assert candidate.description is None
        assert candidate.price is None
        assert candidate.rating is None
        assert candidate.availability == rules.DEFAULT_AVAILABILITY

    def test_custom_title_rules(self):
        html = '<h1 class="headline">A perfectly plausible title</h1>'
        extractor = ProductExtractor(title_rules=[rules.selected_text("h1.headline")])
        assert extractor.extract(html, "B08N5WRWNW").title == "A perfectly plausible title"

    def test_to_model_fields_drops_asin(self, product_page_html):
        fields = ProductExtractor().extract(product_page_html, "B08N5WRWNW").to_model_fields()
        assert "asin" not in fields
        assert fields["brand"] == "Amazon"


class TestRules:
    """Single rules and first-success ordering."""

    def test_first_match_prefers_earlier_rules(self):
        soup = soup_of(
            '<span class="product-title">Second choice title</span>'
            '<span id="productTitle">First choice title</span>'
        )
        assert first_match(soup, rules.TITLE_RULES) == "First choice title"

    def test_first_match_falls_through_to_later_rules(self):
        soup = soup_of('<span id="btAsinTitle">Fallback title here</span>')
        assert first_match(soup, rules.TITLE_RULES) == "Fallback title here"

    def test_description_requires_more_than_fifty_chars(self):
        short = soup_of('<div id="productDescription"><p>Too short.</p></div>')
        assert first_match(short, rules.DESCRIPTION_RULES) is None

        long_text = "x" * 51
        long = soup_of(f'<div id="productDescription"><p>{long_text}</p></div>')
        assert first_match(long, rules.DESCRIPTION_RULES) == long_text

    def test_availability_requires_marker(self):
        soup = soup_of('<div id="availability"><span>Ships tomorrow</span></div>')
        assert first_match(soup, rules.AVAILABILITY_RULES) is None

        soup = soup_of('<div id="availability"><span>Currently unavailable. Available soon</span></div>')
        assert first_match(soup, rules.AVAILABILITY_RULES) == "Currently unavailable. Available soon"

    def test_image_falls_back_to_data_src(self):
        soup = soup_of('<img id="landingImage" data-src="https://img.example.com/a.jpg">')
        assert first_match(soup, rules.IMAGE_RULES) == "https://img.example.com/a.jpg"

    def test_brand_prefix_by_is_removed(self):
        soup = soup_of('<a id="bylineInfo">by Anker</a>')
        assert first_match(soup, rules.BRAND_RULES) == "Anker"

    def test_rating_outside_range_is_ignored(self):
        soup = soup_of(
            '<span data-hook="average-star-rating"><span class="a-icon-alt">'
            "7.5 out of 5 stars</span></span>"
        )
        assert first_match(soup, rules.RATING_RULES) is None

    def test_price_rules_in_order(self):
        soup = soup_of(
            '<span id="priceblock_ourprice">$59.99</span>'
            '<span id="priceblock_dealprice">$39.99</span>'
        )
        assert first_match(soup, rules.PRICE_RULES) == "$39.99"

    def test_rules_have_descriptive_names(self):
        assert rules.TITLE_RULES[0].__name__ == "selected_text(#productTitle)"


class TestSecondaryBulletRules:
    """Bullets come from the generic list markup when the feature block is unusable."""

    PAGE = """
    <span id="productTitle">Echo Dot (4th Gen) | Smart speaker with Alexa</span>
    <div id="feature-bullets">
      <ul>
        <li><span>Make sure this fits by entering your model number.</span></li>
        <li><span>Short</span></li>
      </ul>
    </div>
    <ul class="a-unordered-list">
      <li><span class="a-list-item">Crisp vocals and balanced bass for full sound.</span></li>
      <li><span class="a-list-item">Tiny</span></li>
      <li><span class="a-list-item">Control compatible smart home devices by voice.</span></li>
    </ul>
    """

    def test_primary_rule_yields_nothing(self):
        assert rules.BULLET_RULES[0](soup_of(self.PAGE)) is None

    def test_secondary_rule_supplies_the_bullets(self):
        candidate = ProductExtractor().extract(self.PAGE, "B08N5WRWNW")

        assert candidate.bullet_points.split(rules.BULLET_SEPARATOR) == [
            "Crisp vocals and balanced bass for full sound.",
            "Control compatible smart home devices by voice.",
        ]


class TestOversizedValues:
    """Extracted values always fit the Product columns."""

    DATA_URI = "data:image/gif;base64," + "R0lGODlhAQABAIAAAAAAAP" * 40

    def page(self, image_markup, availability):
        return (
            '<span id="productTitle">Echo Dot (4th Gen) | Smart speaker with Alexa</span>'
            f'<div id="availability"><span>In stock.</span><span>{availability}</span></div>'
            f"{image_markup}"
        )

    def test_inline_image_falls_through_to_next_rule(self):
        html = self.page(
            f'<img id="landingImage" class="a-dynamic-image" src="{self.DATA_URI}">'
            '<img id="imgBlkFront" src="https://images.example.com/front.jpg">',
            "",
        )
        candidate = ProductExtractor().extract(html, "B08N5WRWNW")
        assert candidate.image_url == "https://images.example.com/front.jpg"

    def test_inline_src_prefers_high_resolution_attribute(self):
        soup = soup_of(
            f'<img id="landingImage" src="{self.DATA_URI}" '
            'data-old-hires="https://images.example.com/hires.jpg">'
        )
        assert first_match(soup, rules.IMAGE_RULES) == "https://images.example.com/hires.jpg"

    def test_inline_image_only_yields_no_image(self):
        soup = soup_of(f'<img class="a-dynamic-image" src="{self.DATA_URI}">')
        assert first_match(soup, rules.IMAGE_RULES) is None

    def test_long_availability_is_truncated(self):
        html = self.page("", "Ships from and sold by Amazon. " * 10)
        candidate = ProductExtractor().extract(html, "B08N5WRWNW")

        assert len(candidate.availability) <= 100
        assert candidate.availability.startswith("In stock.")

    def test_oversized_image_url_is_dropped(self):
        url = "https://images.example.com/" + "a" * 600 + ".jpg"
        candidate = ProductExtractor().extract(
            self.page(f'<img id="landingImage" src="{url}">', ""), "B08N5WRWNW"
        )
        assert candidate.image_url is None

    def test_truncation_widths_match_product_columns(self):
        from listings.extraction.product_extractor import (
            IMAGE_URL_MAX_LENGTH,
            TRUNCATED_FIELDS,
        )
        from listings.models import Product

        for name, width in TRUNCATED_FIELDS.items():
            assert Product._meta.get_field(name).max_length == width
        assert Product._meta.get_field("image_url").max_length == IMAGE_URL_MAX_LENGTH

    @pytest.mark.django_db
    def test_candidate_passes_model_validation(self):
        from listings.models import Product

        html = self.page(
            f'<img id="landingImage" src="{self.DATA_URI}">',
            "Only a few left in stock, more on the way. " * 5,
        )
        candidate = ProductExtractor().extract(html, "B08N5WRWNW")

        Product(asin=candidate.asin, **candidate.to_model_fields()).full_clean()
