"""
Keyword payload encoding and recovery.

New rows always store keywords as a JSON array of strings. Rows written by
earlier releases may hold a bracketed pseudo-array (``[a, b]``), plain
comma-separated text, a single bare keyword, or nothing at all. Every read
goes through ``parse_keywords`` so callers always get a list.

Resolution order for parse_keywords:
1. JSON decode; a decoded list is returned as-is (items coerced to str),
   null is empty and a JSON string is parsed again
2. ``[...]`` text: strip brackets, split on commas, trim, strip quotes
3. Text containing a comma: split and trim
4. Non-empty text: single-element list
5. Anything else: empty list
"""

import json
import logging
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)

QUOTE_CHARS = "\"'`"


def _split_and_trim(text: str) -> List[str]:
    return [piece.strip() for piece in text.split(",") if piece.strip()]


def parse_keywords(raw: Any) -> List[str]:
    """
    Recover an ordered keyword list from any historical encoding.

    Never raises.

    Args:
        raw: Stored value (JSON text, legacy text, list, or None)

    Returns:
        List of keyword strings, possibly empty
    """
    if raw is None:
        return []

    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw if item is not None]

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            pass
        else:
            if decoded is None:
                return []
            if isinstance(decoded, list):
                return [str(item) for item in decoded if item is not None]
            # double-encoded payloads: '"[\"a\", \"b\"]"'
            if isinstance(decoded, str):
                return parse_keywords(decoded)

    text = str(raw).strip()
    if not text:
        return []

    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1]
        keywords = []
        for piece in inner.split(","):
            cleaned = piece.strip().strip(QUOTE_CHARS).strip()
            if cleaned:
                keywords.append(cleaned)
        return keywords

    if "," in text:
        return _split_and_trim(text)

    return [text]


def encode_keywords(keywords: Iterable[str]) -> str:
    """Canonical storage encoding: a JSON array of strings."""
    return json.dumps([str(keyword) for keyword in keywords])


def split_keyword_response(text: str, limit: int = 5) -> List[str]:
    """
    Turn a generated comma-separated keyword answer into a list.

    Pieces are trimmed, empties dropped, and the result truncated to ``limit``.
    """
    if not text:
        return []
    return _split_and_trim(text)[:limit]
