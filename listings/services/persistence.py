"""
Persistence coordinator.

All writes go through here:

- upsert_product: insert or update a Product keyed by asin
- record_optimization: Optimization plus its "created" action in one
  transaction, then best-effort keyword tracking outside it
- track_keywords: insert-or-refresh KeywordTracking rows
- record_feedback: validated "feedback" action for an optimization

Database errors are re-raised as StoreFailure. Keyword tracking failures are
the one exception: they are logged, reported to Sentry and returned as
warnings, and never roll back the optimization that produced them.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.db import DatabaseError, transaction

from listings.exceptions import InvalidFeedback, NotFound, StoreFailure
from listings.models import (
    ActionType,
    KeywordSource,
    KeywordTracking,
    Optimization,
    OptimizationAction,
    Product,
)
from listings.monitoring import capture_listing_error
from listings.services.scoring import ScoreResult

logger = logging.getLogger(__name__)

KEYWORD_MAX_LENGTH = 255
MIN_RATING = 1
MAX_RATING = 5


@contextmanager
def store_errors(operation: str, **context):
    """Re-raise database errors as StoreFailure."""
    try:
        yield
    except DatabaseError as e:
        logger.error(f"Database error during {operation} {context}: {e}")
        raise StoreFailure(f"Database error during {operation}", context) from e


def upsert_product(candidate) -> Tuple[Product, bool]:
    """
    Insert or update the Product for candidate.asin.

    updated_at is refreshed on every call (auto_now).

    Returns:
        (product, created)
    """
    with store_errors("product upsert", asin=candidate.asin):
        product, created = Product.objects.update_or_create(
            asin=candidate.asin,
            defaults=candidate.to_model_fields(),
        )
    logger.info(f"{'Stored' if created else 'Updated'} product {product.asin}")
    return product, created


def record_optimization(
    product: Product,
    result,
    score: ScoreResult,
) -> Tuple[Optimization, List[str]]:
    """
    Persist one generation event.

    The Optimization row and its "created" action are written atomically.
    Keyword tracking runs afterwards; its failures come back as warnings.

    Returns:
        (optimization, warnings)
    """
    with store_errors("optimization insert", asin=product.asin):
        with transaction.atomic():
            optimization = Optimization(
                product=product,
                asin=product.asin,
                generated_title=result.optimized.title,
                generated_bullet_points=result.optimized.bullet_points,
                generated_description=result.optimized.description,
                score=score.score,
                model_name=result.model_name,
                metadata=result.metadata,
            )
            optimization.set_keywords(result.optimized.keywords)
            optimization.save()

            OptimizationAction.objects.create(
                asin=product.asin,
                optimization=optimization,
                action_type=ActionType.CREATED,
                performance_metrics={
                    "score": score.score,
                    "factors": list(score.factors),
                },
            )

    logger.info(
        f"Recorded optimization #{optimization.pk} for {product.asin} "
        f"(score {score.score})"
    )

    warnings = []
    try:
        track_keywords(product.asin, result.optimized.keywords)
    except StoreFailure as e:
        logger.warning(f"Keyword tracking failed for {product.asin}: {e.message}")
        capture_listing_error(e, asin=product.asin, operation="keyword_storage")
        warnings.append(
            "Suggested keywords could not be tracked; the optimization was saved."
        )

    return optimization, warnings


def track_keywords(
    asin: str,
    keywords: Iterable[str],
    source: str = KeywordSource.SUGGESTED,
) -> int:
    """
    Insert or refresh one KeywordTracking row per distinct keyword.

    Returns:
        Number of distinct keywords processed
    """
    seen = set()
    with store_errors("keyword tracking", asin=asin):
        for keyword in keywords:
            keyword = (keyword or "").strip()[:KEYWORD_MAX_LENGTH]
            if not keyword or keyword in seen:
                continue
            seen.add(keyword)
            with transaction.atomic():
                tracked, created = KeywordTracking.objects.get_or_create(
                    asin=asin,
                    keyword=keyword,
                    defaults={"source": source},
                )
                if not created:
                    tracked.save(update_fields=["updated_at"])
    return len(seen)


def validate_feedback(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Validate a feedback payload and fill defaults.

    Raises:
        InvalidFeedback: rating missing, not an integer, or outside 1-5;
            or an optional field of the wrong type
    """
    if not isinstance(payload, dict):
        raise InvalidFeedback("Feedback must be a JSON object")

    rating = payload.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidFeedback(
            "Rating must be an integer between 1 and 5", {"rating": rating}
        )
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidFeedback(
            "Rating must be an integer between 1 and 5", {"rating": rating}
        )

    comments = payload.get("comments") or ""
    if not isinstance(comments, str):
        raise InvalidFeedback("comments must be a string")

    helpful = payload.get("helpful", False)
    if helpful is None:
        helpful = False
    if not isinstance(helpful, bool):
        raise InvalidFeedback("helpful must be a boolean")

    improvements = payload.get("improvements") or []
    if not isinstance(improvements, list):
        raise InvalidFeedback("improvements must be a list")

    return {
        "rating": rating,
        "comments": comments,
        "helpful": helpful,
        "improvements": improvements,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def record_feedback(optimization_id: int, payload: Dict[str, Any]) -> OptimizationAction:
    """
    Append a feedback action to an optimization.

    Validation happens before any database access, so a rejected payload
    leaves no trace.

    Raises:
        InvalidFeedback, NotFound, StoreFailure
    """
    feedback = validate_feedback(payload)

    with store_errors("feedback insert", optimization_id=optimization_id):
        optimization = Optimization.objects.filter(pk=optimization_id).first()
        if optimization is None:
            raise NotFound(
                "Optimization not found", {"optimizationId": optimization_id}
            )
        action = OptimizationAction.objects.create(
            asin=optimization.asin,
            optimization=optimization,
            action_type=ActionType.FEEDBACK,
            user_feedback=feedback,
        )

    logger.info(
        f"Recorded feedback for optimization #{optimization_id} "
        f"(rating {feedback['rating']})"
    )
    return action
