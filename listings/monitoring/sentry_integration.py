"""
Sentry error tracking for the listing optimizer.

- Breadcrumbs for upstream calls (product page fetches, generative calls)
- Sensitive keys (api keys, tokens, cookies) filtered from event data
- Exceptions captured with asin/operation tags

Usage:
    from listings.monitoring import capture_listing_error, add_upstream_breadcrumb

    try:
        candidate = await service.fetch(asin)
    except UpstreamUnreachable as e:
        capture_listing_error(e, asin=asin, operation="fetch")
        raise

Sentry itself is initialised in settings when SENTRY_DSN is set; without a
DSN every call here is a cheap no-op inside the SDK.
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {
    "cookies",
    "cookie",
    "api_key",
    "apikey",
    "api-key",
    "authorization",
    "password",
    "secret",
    "token",
    "x-api-key",
}


def filter_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace values of sensitive keys with "[Filtered]", recursing into dicts.
    """
    if not isinstance(data, dict):
        return data

    filtered = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
            filtered[key] = "[Filtered]"
        elif isinstance(value, dict):
            filtered[key] = filter_sensitive_data(value)
        else:
            filtered[key] = value
    return filtered


def add_upstream_breadcrumb(
    operation: str,
    asin: Optional[str] = None,
    message: str = "Upstream call",
    level: str = "info",
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Record an upstream call as a Sentry breadcrumb.

    Args:
        operation: "fetch" or "generate"
        asin: Product identifier involved
        message: Short description
        level: info, warning or error
        extra_data: Additional context (filtered)
    """
    data = {"operation": operation, "asin": asin}
    if extra_data:
        data.update(filter_sensitive_data(extra_data))

    try:
        sentry_sdk.add_breadcrumb(
            category="listing",
            message=message,
            level=level,
            data=data,
        )
    except Exception as e:
        logger.warning(f"Failed to add Sentry breadcrumb: {e}")


def capture_listing_error(
    error: Exception,
    asin: Optional[str] = None,
    operation: Optional[str] = None,
    extra_context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Capture an exception to Sentry with listing context.

    Args:
        error: The exception
        asin: Product identifier involved
        operation: fetch, generate, keyword_storage, ...
        extra_context: Additional context (filtered)
    """
    add_upstream_breadcrumb(
        operation=operation or "unknown",
        asin=asin,
        message=f"Error: {type(error).__name__}",
        level="error",
        extra_data=extra_context,
    )

    try:
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("listing.operation", operation or "unknown")
            if asin:
                scope.set_tag("listing.asin", asin)
            kind = getattr(error, "kind", None)
            if kind:
                scope.set_tag("listing.error_kind", kind)
            if extra_context:
                scope.set_extra("listing_context", filter_sensitive_data(extra_context))
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.warning(f"Failed to capture exception to Sentry: {e}")
