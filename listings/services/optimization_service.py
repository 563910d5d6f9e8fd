"""
Optimization workflow.

optimize: validate -> stored product (required) -> 1 hour freshness gate ->
    engine -> score -> persist
optimize_batch: the same per identifier, with generation serialized through
    OptimizationEngine.optimize_batch
submit_feedback: validated feedback action on a stored optimization

Generation never runs for an identifier without a stored product, and never
runs while a fresh optimization for it exists.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from django.conf import settings

from listings.exceptions import ListingError, NotFound
from listings.models import ActionType, Optimization, Product
from listings.monitoring import capture_listing_error
from listings.services.optimization_engine import OptimizationEngine, failure_entry
from listings.services.optimization_types import ListingContent, OptimizationResult
from listings.services.persistence import (
    record_feedback,
    record_optimization,
    store_errors,
)
from listings.services.product_service import validate_asin_list
from listings.services.scoring import score_result
from listings.utils.async_helpers import run_async
from listings.utils.freshness import is_fresh
from listings.validators import normalize_asin, require_valid_asin

logger = logging.getLogger(__name__)

DEFAULT_MAX_OPTIMIZE_BATCH = 5

FETCH_FIRST_MESSAGE = "Please fetch the product data first before optimizing"


def original_payload(product: Product) -> Dict[str, Any]:
    return {
        "title": product.title,
        "bulletPoints": product.bullet_points,
        "description": product.description,
    }


def stored_score_factors(optimization: Optimization) -> List[str]:
    """Factors recorded on the optimization's "created" action."""
    action = (
        optimization.actions.filter(action_type=ActionType.CREATED)
        .order_by("created_at")
        .first()
    )
    if action and isinstance(action.performance_metrics, dict):
        return list(action.performance_metrics.get("factors") or [])
    return []


def cached_payload(product: Product, optimization: Optimization) -> Dict[str, Any]:
    return {
        "asin": optimization.asin,
        "original": original_payload(product),
        "optimized": {
            "title": optimization.generated_title,
            "bulletPoints": optimization.generated_bullet_points,
            "description": optimization.generated_description,
            "suggestedKeywords": optimization.keywords,
        },
        "optimizationScore": optimization.score,
        "scoreFactors": stored_score_factors(optimization),
        "metadata": optimization.metadata,
        "optimizationId": optimization.pk,
        "createdAt": optimization.created_at.isoformat(),
        "source": "cached",
    }


class OptimizationService:
    """
    Runs and records optimizations.

    Args:
        engine: OptimizationEngine (default uses Gemini and the shared limiter)
        max_batch: Batch size limit (LISTING_MAX_OPTIMIZE_BATCH)
    """

    def __init__(
        self,
        engine: Optional[OptimizationEngine] = None,
        max_batch: Optional[int] = None,
    ):
        self.engine = engine or OptimizationEngine()
        self.max_batch = max_batch or getattr(
            settings, "LISTING_MAX_OPTIMIZE_BATCH", DEFAULT_MAX_OPTIMIZE_BATCH
        )

    def _latest_fresh_optimization(self, asin: str) -> Optional[Optimization]:
        with store_errors("optimization lookup", asin=asin):
            latest = (
                Optimization.objects.filter(asin=asin)
                .order_by("-created_at", "-id")
                .first()
            )
        if latest is not None and is_fresh(latest.created_at, "optimization"):
            return latest
        return None

    def _persist(self, product: Product, result: OptimizationResult) -> Dict[str, Any]:
        score = score_result(result)
        optimization, warnings = record_optimization(product, result, score)
        payload = result.to_dict()
        payload.update(
            {
                "optimizationScore": score.score,
                "scoreFactors": list(score.factors),
                "optimizationId": optimization.pk,
                "createdAt": optimization.created_at.isoformat(),
                "source": "fresh",
                "warnings": warnings,
            }
        )
        return payload

    def optimize(self, asin: str) -> Dict[str, Any]:
        """
        Optimize one stored product.

        Raises:
            InvalidIdentifier, NotFound, GenerationFailure, StoreFailure
        """
        asin = require_valid_asin(normalize_asin(asin))

        with store_errors("product lookup", asin=asin):
            product = Product.objects.filter(asin=asin).first()
        if product is None:
            raise NotFound(f"Product {asin} not found. {FETCH_FIRST_MESSAGE}", {"asin": asin})

        recent = self._latest_fresh_optimization(asin)
        if recent is not None:
            logger.info(f"Returning recent optimization for {asin}")
            return cached_payload(product, recent)

        try:
            result = run_async(self.engine.optimize(ListingContent.from_product(product)))
        except ListingError as e:
            capture_listing_error(e, asin=asin, operation="generate")
            raise

        payload = self._persist(product, result)
        logger.info(f"Optimization completed and stored for {asin}")
        return payload

    def optimize_batch(self, asins: Any) -> Dict[str, Any]:
        """
        Optimize up to max_batch stored products.

        Missing products and generation failures are reported per item in
        ``failed``; fresh cached optimizations are returned in ``successful``
        without calling the generative service.

        Raises:
            InvalidInput, InvalidIdentifier: before anything else happens
            NotFound: none of the identifiers has a stored product
        """
        asins = list(dict.fromkeys(validate_asin_list(asins, self.max_batch)))
        logger.info(f"Starting batch optimization for {len(asins)} products")

        with store_errors("batch product lookup"):
            products = {
                product.asin: product
                for product in Product.objects.filter(asin__in=asins)
            }
        if not products:
            raise NotFound(f"No products found. {FETCH_FIRST_MESSAGE}", {"asins": asins})

        outcomes: Dict[str, Dict[str, Any]] = {}
        to_generate = []
        for asin in asins:
            product = products.get(asin)
            if product is None:
                outcomes[asin] = failure_entry(
                    asin, NotFound(f"Product {asin} not found. {FETCH_FIRST_MESSAGE}")
                )
                continue
            recent = self._latest_fresh_optimization(asin)
            if recent is not None:
                outcomes[asin] = cached_payload(product, recent)
                continue
            to_generate.append(ListingContent.from_product(product))

        if to_generate:
            batch = run_async(self.engine.optimize_batch(to_generate))
            for failure in batch.failed:
                outcomes[failure["asin"]] = failure
            for result in batch.successful:
                try:
                    outcomes[result.asin] = self._persist(products[result.asin], result)
                except ListingError as e:
                    logger.error(f"Failed to store optimization for {result.asin}: {e.message}")
                    outcomes[result.asin] = failure_entry(result.asin, e)

        successful = [outcomes[asin] for asin in asins if "source" in outcomes[asin]]
        failed = [outcomes[asin] for asin in asins if "source" not in outcomes[asin]]

        logger.info(
            f"Batch optimization completed: {len(successful)} successful, "
            f"{len(failed)} failed"
        )
        return {
            "successful": successful,
            "failed": failed,
            "summary": {
                "total": len(asins),
                "successful": len(successful),
                "failed": len(failed),
            },
            "totalRequests": self.engine.rate_limiter.request_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def submit_feedback(self, optimization_id: int, payload: Any) -> Dict[str, Any]:
        """
        Record user feedback on an optimization.

        Raises:
            InvalidFeedback, NotFound, StoreFailure
        """
        action = record_feedback(optimization_id, payload)
        return {
            "success": True,
            "message": "Feedback recorded successfully",
            "optimizationId": optimization_id,
            "feedbackId": action.pk,
            "feedback": action.user_feedback,
        }
