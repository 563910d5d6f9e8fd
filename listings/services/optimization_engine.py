"""
Generative optimization engine.

Runs the four field generations (title, bullets, description, keywords) for
one listing and assembles an OptimizationResult. The calls do not depend on
each other, so they are dispatched together with asyncio.gather; each one
first waits for its slot on the shared GenerationRateLimiter.

Batches are processed one listing at a time with a fixed delay between
listings. A failing listing is recorded and the batch moves on.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Sequence

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from listings.exceptions import GenerationFailure, ListingError
from listings.services.ai_client import GeminiClient
from listings.services.optimization_types import (
    BatchOptimizationResult,
    GeneratedContent,
    ListingContent,
    OptimizationResult,
)
from listings.services.prompts import build_prompts
from listings.services.rate_limiter import GenerationRateLimiter, get_rate_limiter
from listings.utils.keywords import split_keyword_response

logger = logging.getLogger(__name__)

REQUEST_COUNT = 4
MAX_KEYWORDS = 5
DEFAULT_BATCH_DELAY = 5.0
QUOTE_CHARS = "\"'“”"


def strip_wrapping_quotes(text: str) -> str:
    """Remove quote characters wrapping a generated title."""
    return text.strip().strip(QUOTE_CHARS).strip()


class OptimizationEngine:
    """
    Orchestrates the four generation calls for a listing.

    Usage:
        engine = OptimizationEngine()
        result = await engine.optimize(ListingContent.from_product(product))
    """

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        rate_limiter: Optional[GenerationRateLimiter] = None,
        batch_delay: Optional[float] = None,
    ):
        """
        Args:
            client: Generative client (default GeminiClient from settings)
            rate_limiter: Shared limiter (default the process-wide instance)
            batch_delay: Seconds between listings in a batch
                (default LISTING_OPTIMIZE_BATCH_DELAY)
        """
        self.client = client or GeminiClient()
        self.rate_limiter = rate_limiter or get_rate_limiter()
        if batch_delay is None:
            batch_delay = getattr(
                settings, "LISTING_OPTIMIZE_BATCH_DELAY", DEFAULT_BATCH_DELAY
            )
        self.batch_delay = float(batch_delay)

    @property
    def model_name(self) -> str:
        return self.client.model_name

    async def _generate(self, field: str, prompt: str) -> str:
        await self.rate_limiter.acquire()
        return await self.client.generate(prompt, field=field)

    async def optimize(self, content: ListingContent) -> OptimizationResult:
        """
        Generate optimized title, bullets, description and keywords.

        Raises:
            GenerationFailure: Any of the four calls failed. All four calls
                are allowed to finish before the failure is raised.
            ImproperlyConfigured: The generative client has no API key.
        """
        logger.info(f"Starting AI optimization for {content.asin}")
        started = time.monotonic()
        prompts = build_prompts(content)

        outcomes = await asyncio.gather(
            self._generate("title", prompts["title"]),
            self._generate("bullets", prompts["bullets"]),
            self._generate("description", prompts["description"]),
            self._generate("keywords", prompts["keywords"]),
            return_exceptions=True,
        )

        for outcome in outcomes:
            if isinstance(outcome, (GenerationFailure, ImproperlyConfigured)):
                raise outcome
            if isinstance(outcome, BaseException):
                raise GenerationFailure(
                    f"AI optimization failed: {outcome}",
                    {"asin": content.asin},
                ) from outcome

        title, bullets, description, keyword_text = outcomes
        elapsed_ms = int((time.monotonic() - started) * 1000)

        result = OptimizationResult(
            asin=content.asin,
            original=content,
            optimized=GeneratedContent(
                title=strip_wrapping_quotes(title),
                bullet_points=bullets,
                description=description,
                keywords=split_keyword_response(keyword_text, limit=MAX_KEYWORDS),
            ),
            metadata={
                "optimizationTime": elapsed_ms,
                "modelUsed": self.model_name,
                "requestCount": REQUEST_COUNT,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
        logger.info(f"Optimization of {content.asin} completed in {elapsed_ms}ms")
        return result

    async def optimize_batch(
        self, contents: Sequence[ListingContent]
    ) -> BatchOptimizationResult:
        """
        Optimize listings one after another with batch_delay between them.

        ListingError failures are collected per listing and the batch moves
        on. A configuration error stops the whole batch.
        """
        batch = BatchOptimizationResult()
        total = len(contents)

        for index, content in enumerate(contents):
            logger.info(f"Processing product {index + 1}/{total}: {content.asin}")
            try:
                batch.successful.append(await self.optimize(content))
            except ListingError as e:
                logger.error(f"Failed to optimize {content.asin}: {e.message}")
                batch.failed.append(failure_entry(content.asin, e))

            if index < total - 1 and self.batch_delay > 0:
                logger.debug(f"Waiting {self.batch_delay}s before next optimization")
                await asyncio.sleep(self.batch_delay)

        batch.total_requests = self.rate_limiter.request_count
        return batch


def failure_entry(asin: str, error: ListingError) -> dict:
    """Per-item failure record used by batch responses."""
    return {
        "asin": asin,
        "error": error.message,
        "errorKind": error.kind,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

