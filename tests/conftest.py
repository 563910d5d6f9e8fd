"""
Pytest configuration and fixtures for the Listing Optimizer test suite.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """The process-wide limiter keeps counting across tests unless reset."""
    from listings.services.rate_limiter import get_rate_limiter

    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()


@pytest.fixture
def api_client():
    """Create a test API client."""
    from rest_framework.test import APIClient

    return APIClient()


PRODUCT_PAGE_HTML = """
<html>
<head><title>Amazon.com: Echo Dot</title></head>
<body>
  <div id="wayfinding-breadcrumbs_feature_div">
    <a href="/electronics">Electronics</a>
    <a href="/smart-home">Smart Home</a>
    <a href="/smart-speakers">Smart Speakers</a>
  </div>
  <span id="productTitle">
      Echo Dot (4th Gen) | Smart speaker with Alexa | Charcoal
  </span>
  <a id="bylineInfo" href="/amazon">Brand: Amazon</a>
  <div id="averageCustomerReviews">
    <span data-hook="average-star-rating"><span class="a-icon-alt">4.7 out of 5 stars</span></span>
    <span id="acrCustomerReviewText">89,543 ratings</span>
  </div>
  <div class="a-price"><span class="a-offscreen">$49.99</span></div>
  <div id="availability"><span>Only 3 left in stock - order soon.</span></div>
  <img id="landingImage" src="https://images.example.com/echo-dot.jpg" />
  <div id="feature-bullets">
    <ul>
      <li><span>Make sure this fits by entering your model number.</span></li>
      <li><span>Meet the all-new Echo Dot - Our most popular smart speaker with Alexa.</span></li>
      <li><span>Voice control your entertainment - Stream songs from Amazon Music.</span></li>
      <li><span>Short</span></li>
      <li><span>Make life easier - Set timers, ask questions, play music.</span></li>
    </ul>
  </div>
  <div id="productDescription">
    <p>Introducing Echo Dot - Our most compact smart speaker that fits perfectly into small spaces.</p>
  </div>
</body>
</html>
"""

BLOCKED_PAGE_HTML = """
<html>
<head><title>Robot Check</title></head>
<body>
  <h4>Enter the characters you see below</h4>
  <p>Sorry, we just need to make sure you're not a robot.</p>
</body>
</html>
"""


@pytest.fixture
def product_page_html():
    """A realistic product detail page."""
    return PRODUCT_PAGE_HTML


@pytest.fixture
def blocked_page_html():
    """A robot-check page without a product title."""
    return BLOCKED_PAGE_HTML


@pytest.fixture
def make_product(db):
    """Factory for stored products; age_hours backdates updated_at."""
    from listings.models import Product

    def _make(asin="B08N5WRWNW", age_hours=None, **fields):
        defaults = {
            "title": "Echo Dot (4th Gen) | Smart speaker with Alexa | Charcoal",
            "bullet_points": "• Meet the all-new Echo Dot\n• Voice control your entertainment",
            "description": "Introducing Echo Dot - Our most compact smart speaker.",
            "price": "$49.99",
            "availability": "In Stock",
            "rating": Decimal("4.70"),
            "review_count": 89543,
            "brand": "Amazon",
            "category": "Smart Speakers",
        }
        defaults.update(fields)
        product = Product.objects.create(asin=asin, **defaults)
        if age_hours is not None:
            from django.utils import timezone

            Product.objects.filter(pk=product.pk).update(
                updated_at=timezone.now() - timedelta(hours=age_hours)
            )
            product.refresh_from_db()
        return product

    return _make


@pytest.fixture
def sample_product(make_product):
    """The Echo Dot sample product, freshly stored."""
    return make_product()


@pytest.fixture
def make_optimization(db):
    """Factory for stored optimizations with a "created" action."""
    from django.utils import timezone

    from listings.models import ActionType, Optimization, OptimizationAction

    def _make(product, score=75, age_minutes=0, keywords=None, model_name="gemini-test", **fields):
        optimization = Optimization(
            product=product,
            asin=product.asin,
            generated_title=fields.pop("generated_title", "Optimized " + product.title),
            generated_bullet_points=fields.pop("generated_bullet_points", "• Better bullets"),
            generated_description=fields.pop("generated_description", "A better description."),
            score=score,
            model_name=model_name,
            metadata=fields.pop("metadata", {"modelUsed": model_name, "requestCount": 4}),
            created_at=timezone.now() - timedelta(minutes=age_minutes),
            **fields,
        )
        optimization.set_keywords(keywords if keywords is not None else ["smart speaker", "alexa"])
        optimization.save()
        OptimizationAction.objects.create(
            asin=product.asin,
            optimization=optimization,
            action_type=ActionType.CREATED,
            performance_metrics={"score": score, "factors": ["Enhanced title length"]},
            created_at=optimization.created_at,
        )
        return optimization

    return _make


def fake_generation_responses(prompt, field="text"):
    """Deterministic answers for each of the four generation prompts."""
    answers = {
        "title": '"Echo Dot (4th Gen) Smart Speaker with Alexa, Rich Sound, Charcoal"',
        "bullets": (
            "• Rich, room-filling sound with crisp vocals and balanced bass\n"
            "• Hands-free voice control for music, news and smart home devices\n"
            "• Compact design that fits anywhere in the home"
        ),
        "description": (
            "Meet Echo Dot, the compact smart speaker that brings Alexa to every room. "
            "Enjoy crisp vocals, balanced bass and hands-free control of your day."
        ),
        "keywords": "smart speaker, alexa, echo dot, voice assistant, smart home, extra",
    }
    return answers[field]


@pytest.fixture
def fake_client():
    """Generative client double with the GeminiClient interface."""
    from unittest.mock import AsyncMock, MagicMock

    client = MagicMock()
    client.model_name = "gemini-test"
    client.generate = AsyncMock(side_effect=fake_generation_responses)
    return client


@pytest.fixture
def fast_limiter():
    """Rate limiter that never waits."""
    from listings.services.rate_limiter import GenerationRateLimiter

    return GenerationRateLimiter(min_interval=0)


@pytest.fixture
def engine(fake_client, fast_limiter):
    """OptimizationEngine backed by the fake client, no batch delay."""
    from listings.services.optimization_engine import OptimizationEngine

    return OptimizationEngine(client=fake_client, rate_limiter=fast_limiter, batch_delay=0)


@pytest.fixture
def generation_responses():
    """The answer function behind fake_client, for tests that wrap it."""
    return fake_generation_responses
