"""
Tests for prompt building and the optimization engine.

The generative client is an AsyncMock; see conftest.fake_generation_responses.
"""

from unittest.mock import AsyncMock

import pytest
from django.core.exceptions import ImproperlyConfigured

from listings.exceptions import GenerationFailure
from listings.services.ai_client import GeminiClient
from listings.services.optimization_engine import (
    OptimizationEngine,
    failure_entry,
    strip_wrapping_quotes,
)
from listings.services.optimization_types import ListingContent
from listings.services.prompts import build_context, build_prompts


def listing(asin="B08N5WRWNW", title="Echo Dot (4th Gen) | Smart speaker with Alexa", **kwargs):
    kwargs.setdefault("bullet_points", "• Meet the all-new Echo Dot")
    kwargs.setdefault("description", "Our most compact smart speaker.")
    return ListingContent(asin=asin, title=title, **kwargs)


class TestPrompts:

    def test_context_includes_brand_and_category(self):
        content = listing(brand="Amazon", category="Smart Speakers")
        assert build_context(content) == (
            "Product: Echo Dot (4th Gen) | Smart speaker with Alexa by Amazon (Smart Speakers)"
        )

    def test_context_without_brand_or_category(self):
        assert build_context(listing()) == "Product: Echo Dot (4th Gen) | Smart speaker with Alexa"

    def test_four_prompts(self):
        prompts = build_prompts(listing())
        assert list(prompts) == ["title", "bullets", "description", "keywords"]
        assert "Keep under 200 chars" in prompts["title"]
        assert "max 5" in prompts["bullets"]
        assert "persuasive yet compliant" in prompts["description"]
        assert "comma-separated" in prompts["keywords"]

    def test_keyword_prompt_uses_first_300_bullet_chars(self):
        prompts = build_prompts(listing(bullet_points="a" * 300 + "TAIL"))
        assert "a" * 300 in prompts["keywords"]
        assert "TAIL" not in prompts["keywords"]

    def test_keyword_prompt_without_bullets(self):
        prompts = build_prompts(listing(bullet_points=None))
        assert "Features: N/A" in prompts["keywords"]


class TestOptimize:

    @pytest.mark.asyncio
    async def test_assembles_result_from_four_calls(self, engine, fake_client):
        result = await engine.optimize(listing())

        assert fake_client.generate.await_count == 4
        fields = [call.kwargs["field"] for call in fake_client.generate.await_args_list]
        assert sorted(fields) == ["bullets", "description", "keywords", "title"]

        assert result.asin == "B08N5WRWNW"
        assert result.optimized.title == (
            "Echo Dot (4th Gen) Smart Speaker with Alexa, Rich Sound, Charcoal"
        )
        assert result.optimized.bullet_points.startswith("• Rich, room-filling sound")
        assert result.optimized.keywords == [
            "smart speaker",
            "alexa",
            "echo dot",
            "voice assistant",
            "smart home",
        ]

    @pytest.mark.asyncio
    async def test_metadata(self, engine):
        result = await engine.optimize(listing())

        assert result.metadata["modelUsed"] == "gemini-test"
        assert result.metadata["requestCount"] == 4
        assert isinstance(result.metadata["optimizationTime"], int)
        assert "timestamp" in result.metadata
        assert result.model_name == "gemini-test"

    @pytest.mark.asyncio
    async def test_every_call_acquires_a_rate_limit_slot(self, engine, fast_limiter):
        await engine.optimize(listing())
        assert fast_limiter.request_count == 4

    @pytest.mark.asyncio
    async def test_any_failed_call_fails_the_optimization(
        self, engine, fake_client, generation_responses
    ):
        def fail_description(prompt, field="text"):
            if field == "description":
                raise GenerationFailure("Description optimization failed: quota")
            return generation_responses(prompt, field)

        fake_client.generate.side_effect = fail_description

        with pytest.raises(GenerationFailure) as exc_info:
            await engine.optimize(listing())

        assert "Description" in exc_info.value.message
        assert fake_client.generate.await_count == 4

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_wrapped(self, engine, fake_client):
        fake_client.generate.side_effect = RuntimeError("boom")

        with pytest.raises(GenerationFailure) as exc_info:
            await engine.optimize(listing())

        assert "boom" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_api_key_is_not_a_generation_failure(self, settings, fast_limiter):
        settings.GEMINI_API_KEY = ""
        engine = OptimizationEngine(
            client=GeminiClient(), rate_limiter=fast_limiter, batch_delay=0
        )

        with pytest.raises(ImproperlyConfigured):
            await engine.optimize(listing())

    @pytest.mark.asyncio
    async def test_missing_api_key_stops_a_batch(self, settings, fast_limiter):
        settings.GEMINI_API_KEY = ""
        engine = OptimizationEngine(
            client=GeminiClient(), rate_limiter=fast_limiter, batch_delay=0
        )

        with pytest.raises(ImproperlyConfigured):
            await engine.optimize_batch([listing(asin="B000000001"), listing(asin="B000000002")])

    def test_strip_wrapping_quotes(self):
        assert strip_wrapping_quotes(' "A title" ') == "A title"
        assert strip_wrapping_quotes("“A title”") == "A title"
        assert strip_wrapping_quotes("A 12\" title") == "A 12\" title"


class TestOptimizeBatch:

    @pytest.mark.asyncio
    async def test_one_failure_does_not_abort_the_batch(
        self, engine, fake_client, generation_responses
    ):
        contents = [
            listing(asin=f"B00000000{i}", title=f"Product number {i} title") for i in range(5)
        ]

        def fail_third(prompt, field="text"):
            if "Product number 2 title" in prompt:
                raise GenerationFailure("Title optimization failed: overloaded")
            return generation_responses(prompt, field)

        fake_client.generate.side_effect = fail_third

        batch = await engine.optimize_batch(contents)

        assert [result.asin for result in batch.successful] == [
            "B000000000",
            "B000000001",
            "B000000003",
            "B000000004",
        ]
        assert len(batch.failed) == 1
        assert batch.failed[0]["asin"] == "B000000002"
        assert batch.failed[0]["errorKind"] == "GenerationFailure"
        assert batch.summary() == {"total": 5, "successful": 4, "failed": 1}
        assert batch.total_requests == 20

    @pytest.mark.asyncio
    async def test_delay_between_listings_only(self, fake_client, fast_limiter, monkeypatch):
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr(
            "listings.services.optimization_engine.asyncio.sleep", record_sleep
        )
        engine = OptimizationEngine(client=fake_client, rate_limiter=fast_limiter, batch_delay=5)

        await engine.optimize_batch(
            [listing(asin="B000000001"), listing(asin="B000000002"), listing(asin="B000000003")]
        )

        assert sleeps == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_empty_batch(self, engine):
        batch = await engine.optimize_batch([])
        assert batch.summary() == {"total": 0, "successful": 0, "failed": 0}


def test_failure_entry():
    entry = failure_entry("B08N5WRWNW", GenerationFailure("AI service unavailable"))
    assert entry["asin"] == "B08N5WRWNW"
    assert entry["error"] == "AI service unavailable"
    assert entry["errorKind"] == "GenerationFailure"
    assert "timestamp" in entry


def test_default_engine_uses_shared_limiter(settings):
    from listings.services.rate_limiter import get_rate_limiter

    engine = OptimizationEngine(client=AsyncMock())
    assert engine.rate_limiter is get_rate_limiter()
    assert engine.batch_delay == 0
