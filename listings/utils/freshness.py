"""
Freshness windows for stored records.

Two independent windows decide whether an expensive operation can be skipped:

- product: scraped Product data, fresh for LISTING_PRODUCT_FRESHNESS_HOURS
  (default 24 hours) after its last update
- optimization: a generated Optimization, fresh for
  LISTING_OPTIMIZATION_FRESHNESS_MINUTES (default 60 minutes) after creation

These are pure time comparisons; callers load the timestamp themselves.
"""

from datetime import datetime, timedelta
from typing import Literal, Optional

from django.conf import settings
from django.utils import timezone

FreshnessKind = Literal["product", "optimization"]

FRESHNESS_KINDS = ("product", "optimization")

DEFAULT_PRODUCT_FRESHNESS_HOURS = 24
DEFAULT_OPTIMIZATION_FRESHNESS_MINUTES = 60


def freshness_window(kind: FreshnessKind) -> timedelta:
    """Return the configured freshness window for a record kind."""
    if kind == "product":
        hours = getattr(
            settings, "LISTING_PRODUCT_FRESHNESS_HOURS", DEFAULT_PRODUCT_FRESHNESS_HOURS
        )
        return timedelta(hours=float(hours))
    if kind == "optimization":
        minutes = getattr(
            settings,
            "LISTING_OPTIMIZATION_FRESHNESS_MINUTES",
            DEFAULT_OPTIMIZATION_FRESHNESS_MINUTES,
        )
        return timedelta(minutes=float(minutes))
    raise ValueError(f"Unknown freshness kind: {kind!r}")


def is_fresh(
    last_updated: Optional[datetime],
    kind: FreshnessKind,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check whether a record is still inside its freshness window.

    Args:
        last_updated: Product.updated_at or Optimization.created_at
            (None means never stored, which is never fresh)
        kind: "product" or "optimization"
        now: Reference time, defaults to timezone.now()

    Returns:
        True if the record may be served without recomputation
    """
    window = freshness_window(kind)
    if last_updated is None:
        return False

    now = now or timezone.now()
    return now - last_updated < window


def stale_before(kind: FreshnessKind, now: Optional[datetime] = None) -> datetime:
    """Cutoff timestamp: records last touched before it are stale."""
    now = now or timezone.now()
    return now - freshness_window(kind)
