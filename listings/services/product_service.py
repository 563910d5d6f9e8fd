"""
Product fetch workflow.

fetch_product: validate -> freshness gate -> fetch page -> extract -> upsert
fetch_products_batch: validate all -> fetch sequentially with a delay ->
    upsert each success
list_products: paginated stored products, most recently updated first
refresh_stale_products: re-fetch products outside the freshness window

Network and extraction run inside one event loop; database writes happen
afterwards in the calling (synchronous) thread.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from django.conf import settings

from listings.exceptions import InvalidIdentifier, InvalidInput, ListingError
from listings.extraction import ProductCandidate, ProductExtractor
from listings.fetchers import ProductPageFetcher
from listings.models import Product
from listings.monitoring import capture_listing_error
from listings.services.persistence import store_errors, upsert_product
from listings.utils.async_helpers import run_async
from listings.utils.freshness import is_fresh, stale_before
from listings.utils.pagination import build_pagination, parse_page_request
from listings.validators import is_valid_asin, normalize_asin, require_valid_asin

logger = logging.getLogger(__name__)

DEFAULT_FETCH_BATCH_DELAY = 2.0
DEFAULT_MAX_FETCH_BATCH = 10

ScrapeOutcome = Union[ProductCandidate, ListingError]


def product_payload(product: Product, source: str) -> Dict[str, Any]:
    payload = product.to_dict()
    payload["lastUpdated"] = payload["updatedAt"]
    payload["source"] = source
    return payload


def validate_asin_list(
    asins: Any, max_items: int, name: str = "asins"
) -> List[str]:
    """
    Normalize and validate a list of identifiers before any I/O.

    Raises:
        InvalidInput: not a non-empty list, or longer than max_items
        InvalidIdentifier: one or more identifiers are malformed
    """
    if not isinstance(asins, list) or not asins:
        raise InvalidInput(f"{name} must be provided as a non-empty array")
    if len(asins) > max_items:
        raise InvalidInput(f"Maximum {max_items} ASINs per batch request")

    normalized = [normalize_asin(asin) for asin in asins]
    invalid = [
        str(original)
        for original, asin in zip(asins, normalized)
        if not is_valid_asin(asin)
    ]
    if invalid:
        raise InvalidIdentifier(
            f"Invalid ASINs found: {', '.join(invalid)}",
            {"invalidAsins": invalid},
        )
    return normalized


class ProductService:
    """
    Fetches, stores and lists products.

    Args:
        fetcher_factory: Builds the page fetcher (tests inject a mock transport)
        extractor: ProductExtractor instance
        batch_delay: Seconds between batch fetches (LISTING_FETCH_BATCH_DELAY)
        max_batch: Batch size limit (LISTING_MAX_FETCH_BATCH)
    """

    def __init__(
        self,
        fetcher_factory: Callable[[], ProductPageFetcher] = ProductPageFetcher,
        extractor: Optional[ProductExtractor] = None,
        batch_delay: Optional[float] = None,
        max_batch: Optional[int] = None,
    ):
        self.fetcher_factory = fetcher_factory
        self.extractor = extractor or ProductExtractor()
        if batch_delay is None:
            batch_delay = getattr(
                settings, "LISTING_FETCH_BATCH_DELAY", DEFAULT_FETCH_BATCH_DELAY
            )
        self.batch_delay = float(batch_delay)
        self.max_batch = max_batch or getattr(
            settings, "LISTING_MAX_FETCH_BATCH", DEFAULT_MAX_FETCH_BATCH
        )

    async def _scrape(self, fetcher: ProductPageFetcher, asin: str) -> ProductCandidate:
        page = await fetcher.fetch(asin)
        return self.extractor.extract(page.content, asin)

    async def _scrape_one(self, asin: str) -> ProductCandidate:
        async with self.fetcher_factory() as fetcher:
            return await self._scrape(fetcher, asin)

    async def _scrape_many(self, asins: Sequence[str]) -> List[Tuple[str, ScrapeOutcome]]:
        outcomes = []
        async with self.fetcher_factory() as fetcher:
            for index, asin in enumerate(asins):
                try:
                    outcomes.append((asin, await self._scrape(fetcher, asin)))
                except ListingError as e:
                    logger.warning(f"Batch fetch failed for {asin}: {e.message}")
                    outcomes.append((asin, e))

                if index < len(asins) - 1 and self.batch_delay > 0:
                    await asyncio.sleep(self.batch_delay)
        return outcomes

    def fetch_product(self, asin: str) -> Dict[str, Any]:
        """
        Return product data, from storage when fresh, otherwise scraped.

        Raises:
            InvalidIdentifier, NotFoundUpstream, ExtractionFailure,
            UpstreamUnreachable, UpstreamTimeout, StoreFailure
        """
        asin = require_valid_asin(normalize_asin(asin))

        with store_errors("product lookup", asin=asin):
            existing = Product.objects.filter(asin=asin).first()

        if existing is not None and is_fresh(existing.updated_at, "product"):
            logger.info(f"Returning cached product data for {asin}")
            return product_payload(existing, "cached")

        try:
            candidate = run_async(self._scrape_one(asin))
        except ListingError as e:
            capture_listing_error(e, asin=asin, operation="fetch")
            raise

        product, _ = upsert_product(candidate)
        return product_payload(product, "fresh")

    def fetch_products_batch(self, asins: Any) -> Dict[str, Any]:
        """
        Scrape up to max_batch products sequentially and store the successes.

        Every identifier is validated before any network access.
        """
        asins = validate_asin_list(asins, self.max_batch)
        logger.info(f"Batch fetching {len(asins)} products")

        outcomes = run_async(self._scrape_many(asins))

        results = []
        for asin, outcome in outcomes:
            if isinstance(outcome, ListingError):
                results.append(self._failure(asin, outcome))
                continue
            try:
                product, _ = upsert_product(outcome)
            except ListingError as e:
                results.append(self._failure(asin, e))
                continue
            results.append(
                {"asin": asin, "success": True, "data": product_payload(product, "fresh")}
            )

        successful = sum(1 for result in results if result["success"])
        return {
            "results": results,
            "summary": {
                "total": len(asins),
                "successful": successful,
                "failed": len(results) - successful,
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def _failure(asin: str, error: ListingError) -> Dict[str, Any]:
        return {
            "asin": asin,
            "success": False,
            "error": error.message,
            "errorKind": error.kind,
        }

    def list_products(self, page: Any = None, limit: Any = None) -> Dict[str, Any]:
        """Stored products, most recently updated first."""
        page_request = parse_page_request(page, limit, default_limit=20, max_limit=100)

        with store_errors("product listing"):
            queryset = Product.objects.order_by("-updated_at", "-id")
            total = queryset.count()
            products = list(
                queryset[page_request.offset:page_request.offset + page_request.limit]
            )

        return {
            "products": [product.to_dict() for product in products],
            "pagination": build_pagination(total, page_request),
        }

    def refresh_stale_products(self, limit: int = 50) -> Dict[str, Any]:
        """
        Re-fetch stored products whose data is outside the freshness window.

        Used by the periodic Celery task. Processed sequentially with the
        batch delay; failures are counted, not raised.
        """
        cutoff = stale_before("product")
        with store_errors("stale product lookup"):
            asins = list(
                Product.objects.filter(updated_at__lt=cutoff)
                .order_by("updated_at")
                .values_list("asin", flat=True)[:limit]
            )

        if not asins:
            return {"total": 0, "refreshed": 0, "failed": 0, "errors": []}

        logger.info(f"Refreshing {len(asins)} stale products")
        outcomes = run_async(self._scrape_many(asins))

        refreshed = 0
        errors = []
        for asin, outcome in outcomes:
            if isinstance(outcome, ListingError):
                errors.append(self._failure(asin, outcome))
                continue
            try:
                upsert_product(outcome)
                refreshed += 1
            except ListingError as e:
                errors.append(self._failure(asin, e))

        return {
            "total": len(asins),
            "refreshed": refreshed,
            "failed": len(errors),
            "errors": errors,
        }
