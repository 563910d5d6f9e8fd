"""
Celery tasks for the listing optimizer.

- optimize_products_batch: batch optimization off the request path
- refresh_stale_products: periodic re-fetch of products older than the
  24 hour freshness window (daily via Celery Beat)

Both run on the "optimization" queue, which is meant to be consumed by a
single worker so generation stays serialized.
"""

import logging
from typing import Any, Dict, List

from celery import shared_task

from listings.exceptions import ListingError
from listings.services.optimization_service import OptimizationService
from listings.services.product_service import ProductService

logger = logging.getLogger(__name__)


@shared_task(name="listings.tasks.optimize_products_batch")
def optimize_products_batch(asins: List[str]) -> Dict[str, Any]:
    """
    Optimize stored products in the background.

    Args:
        asins: Up to LISTING_MAX_OPTIMIZE_BATCH identifiers

    Returns:
        The batch response, or {"success": False, "error", "errorKind"} when
        the whole batch was rejected
    """
    logger.info(f"Background batch optimization for {len(asins or [])} products")
    try:
        result = OptimizationService().optimize_batch(asins)
    except ListingError as e:
        logger.warning(f"Batch optimization rejected: {e.message}")
        return {"success": False, "error": e.message, "errorKind": e.kind}

    result["success"] = True
    return result


@shared_task(name="listings.tasks.refresh_stale_products")
def refresh_stale_products(limit: int = 50) -> Dict[str, Any]:
    """
    Re-fetch products whose data is outside the freshness window.

    Args:
        limit: Maximum products refreshed per run (oldest first)
    """
    logger.info(f"Refreshing up to {limit} stale products")
    result = ProductService().refresh_stale_products(limit=limit)
    logger.info(
        f"Stale refresh done: {result['refreshed']} refreshed, {result['failed']} failed"
    )
    return result
