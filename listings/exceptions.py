"""
Error kinds raised by the listing optimizer.

Every failure that reaches a caller is a ListingError subclass carrying a
stable ``kind`` string, a human-readable message and the HTTP status the
API layer answers with.
"""

from typing import Any, Dict, Optional


class ListingError(Exception):
    """Base class for all listing optimizer errors."""

    kind = "ListingError"
    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "error": self.kind,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidIdentifier(ListingError):
    """The token is not a 10-character uppercase alphanumeric ASIN."""

    kind = "InvalidIdentifier"
    http_status = 400


class InvalidInput(ListingError):
    """Malformed request parameters (batch size, filters, pagination)."""

    kind = "InvalidInput"
    http_status = 400


class InvalidFeedback(ListingError):
    """Feedback payload failed validation."""

    kind = "InvalidFeedback"
    http_status = 400


class NotFound(ListingError):
    """A stored record (product or optimization) does not exist."""

    kind = "NotFound"
    http_status = 404


class NotFoundUpstream(ListingError):
    """The product page answered with an explicit not-found."""

    kind = "NotFoundUpstream"
    http_status = 404


class ExtractionFailure(ListingError):
    """
    The page was fetched but no usable title could be extracted.

    Usually a blocked request (captcha/robot check) or an unusual layout.
    """

    kind = "ExtractionFailure"
    http_status = 404


class UpstreamUnreachable(ListingError):
    """Network-level failure talking to the product site."""

    kind = "UpstreamUnreachable"
    http_status = 502


class UpstreamTimeout(ListingError):
    """The product site did not answer within the configured timeout."""

    kind = "UpstreamTimeout"
    http_status = 504


class GenerationFailure(ListingError):
    """The generative service failed or is out of quota; retry later."""

    kind = "GenerationFailure"
    http_status = 503


class StoreFailure(ListingError):
    """The database rejected a read or write."""

    kind = "StoreFailure"
    http_status = 500
