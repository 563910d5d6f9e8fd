"""
Monitoring for the listing optimizer: Sentry breadcrumbs and error capture.
"""

from .sentry_integration import (
    add_upstream_breadcrumb,
    capture_listing_error,
    filter_sensitive_data,
)

__all__ = [
    "add_upstream_breadcrumb",
    "capture_listing_error",
    "filter_sensitive_data",
]
