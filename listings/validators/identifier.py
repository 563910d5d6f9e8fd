"""
ASIN validation.

An ASIN is exactly 10 characters from A-Z and 0-9. Validation never touches
the network or the database and never mutates its input; callers upper-case
user input with ``normalize_asin`` before validating.
"""

import re
from typing import Any

from listings.exceptions import InvalidIdentifier

ASIN_LENGTH = 10

_ASIN_PATTERN = re.compile(r"[A-Z0-9]+")


def is_valid_asin(token: Any) -> bool:
    """Return True iff token is a 10-character uppercase alphanumeric string."""
    if not isinstance(token, str):
        return False
    if len(token) != ASIN_LENGTH:
        return False
    return _ASIN_PATTERN.fullmatch(token) is not None


def normalize_asin(token: Any) -> Any:
    """Strip and upper-case a raw token; non-strings are returned unchanged."""
    if isinstance(token, str):
        return token.strip().upper()
    return token


def require_valid_asin(token: Any) -> str:
    """
    Validate a token and return it.

    Raises:
        InvalidIdentifier: If the token is not a valid ASIN
    """
    if not is_valid_asin(token):
        raise InvalidIdentifier(
            "ASIN must be a 10-character alphanumeric string",
            details={"asin": token if isinstance(token, str) else repr(token)},
        )
    return token
