"""
Read paths over stored optimizations: history, statistics and trends.

Every keyword list returned here goes through parse_keywords, so rows
written with older keyword encodings read the same as new ones.
"""

import logging
import math
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from django.db.models import Avg, Count, Max, Min, QuerySet
from django.db.models.functions import TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from listings.exceptions import InvalidInput
from listings.models import KeywordTracking, Optimization
from listings.services.persistence import store_errors
from listings.services.rate_limiter import get_rate_limiter
from listings.utils.keywords import parse_keywords
from listings.utils.pagination import build_pagination, parse_page_request
from listings.validators import normalize_asin, require_valid_asin

logger = logging.getLogger(__name__)

STATS_WINDOW_DAYS = 30
TOP_KEYWORDS = 20
TOP_IDENTIFIERS = 10
DEFAULT_TREND_DAYS = 30
MAX_TREND_DAYS = 365

# (label, lowest score in bucket), best bucket first
SCORE_BUCKETS = (
    ("Excellent (80-100)", 80),
    ("Good (60-79)", 60),
    ("Average (40-59)", 40),
    ("Poor (0-39)", 0),
)


def _round(value: Optional[float], digits: int = 2) -> Optional[float]:
    if value is None:
        return None
    return round(float(value), digits)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def score_bucket(score: int) -> str:
    for label, lowest in SCORE_BUCKETS:
        if score >= lowest:
            return label
    return SCORE_BUCKETS[-1][0]


def population_stddev(values: List[float]) -> Optional[float]:
    if not values:
        return None
    mean = sum(values) / len(values)
    return math.sqrt(sum((value - mean) ** 2 for value in values) / len(values))


def _parse_bound(value: str, name: str, end_of_day: bool) -> Tuple[datetime, bool]:
    """
    Parse an ISO date or datetime filter into an aware datetime.

    A bare date with end_of_day=True becomes midnight of the following day.

    Returns:
        (datetime, whether the value was a bare date)
    """
    # parse_datetime also accepts a bare date, so dates are checked first
    try:
        day = parse_date(value)
        parsed = parse_datetime(value) if day is None else None
    except ValueError:
        parsed, day = None, None
    if parsed is None and day is None:
        raise InvalidInput(f"{name} must be an ISO date or datetime", {name: value})
    is_bare_date = day is not None
    if is_bare_date:
        parsed = datetime.combine(day + timedelta(days=1) if end_of_day else day, time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed, is_bare_date


def _parse_score(value: str, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a number", {name: value})


def apply_history_filters(
    queryset: QuerySet, filters: Dict[str, Any]
) -> Tuple[QuerySet, Dict[str, Any]]:
    """
    Apply startDate/endDate/minScore/maxScore/model filters.

    A bare endDate (no time part) includes the whole day.

    Returns:
        (filtered queryset, applied filters echoed back)
    """
    applied = {}

    start = filters.get("startDate")
    if start:
        start_at, _ = _parse_bound(start, "startDate", end_of_day=False)
        queryset = queryset.filter(created_at__gte=start_at)
        applied["startDate"] = start

    end = filters.get("endDate")
    if end:
        end_at, is_bare_date = _parse_bound(end, "endDate", end_of_day=True)
        if is_bare_date:
            queryset = queryset.filter(created_at__lt=end_at)
        else:
            queryset = queryset.filter(created_at__lte=end_at)
        applied["endDate"] = end

    min_score = filters.get("minScore")
    if min_score not in (None, ""):
        queryset = queryset.filter(score__gte=_parse_score(min_score, "minScore"))
        applied["minScore"] = min_score

    max_score = filters.get("maxScore")
    if max_score not in (None, ""):
        queryset = queryset.filter(score__lte=_parse_score(max_score, "maxScore"))
        applied["maxScore"] = max_score

    model = filters.get("model")
    if model:
        queryset = queryset.filter(model_name=model)
        applied["model"] = model

    return queryset, applied


def _product_info(product) -> Dict[str, Any]:
    return {
        "price": product.price,
        "rating": float(product.rating) if product.rating is not None else None,
        "reviewCount": product.review_count,
    }


def history_entry(optimization: Optimization) -> Dict[str, Any]:
    """Full history entry: original, generated, product info and actions."""
    product = optimization.product
    actions = sorted(
        optimization.actions.all(),
        key=lambda action: (action.created_at, action.pk),
        reverse=True,
    )
    return {
        "id": optimization.pk,
        "asin": optimization.asin,
        "original": {
            "title": product.title,
            "bulletPoints": product.bullet_points,
            "description": product.description,
        },
        "optimized": {
            "title": optimization.generated_title,
            "bulletPoints": optimization.generated_bullet_points,
            "description": optimization.generated_description,
            "suggestedKeywords": parse_keywords(optimization.generated_keywords),
        },
        "optimizationScore": optimization.score,
        "modelUsed": optimization.model_name,
        "metadata": optimization.metadata or {},
        "productInfo": _product_info(product),
        "actions": [
            {
                "type": action.action_type,
                "feedback": action.user_feedback or {},
                "metrics": action.performance_metrics or {},
                "timestamp": _iso(action.created_at),
            }
            for action in actions
        ],
        "createdAt": _iso(optimization.created_at),
    }


def summary_entry(optimization: Optimization) -> Dict[str, Any]:
    """Compact entry used by the filtered history listing."""
    product = optimization.product
    return {
        "id": optimization.pk,
        "asin": optimization.asin,
        "original": {"title": product.title},
        "optimized": {
            "title": optimization.generated_title,
            "suggestedKeywords": parse_keywords(optimization.generated_keywords),
        },
        "optimizationScore": optimization.score,
        "modelUsed": optimization.model_name,
        "productInfo": _product_info(product),
        "createdAt": _iso(optimization.created_at),
    }


def get_history(asin: str, page: Any = None, limit: Any = None) -> Dict[str, Any]:
    """Optimizations for one ASIN, newest first, with their action logs."""
    asin = require_valid_asin(normalize_asin(asin))
    page_request = parse_page_request(page, limit, default_limit=10, max_limit=50)

    with store_errors("history lookup", asin=asin):
        queryset = (
            Optimization.objects.filter(asin=asin)
            .select_related("product")
            .prefetch_related("actions")
            .order_by("-created_at", "-id")
        )
        total = queryset.count()
        rows = list(queryset[page_request.offset:page_request.offset + page_request.limit])

    return {
        "asin": asin,
        "history": [history_entry(row) for row in rows],
        "pagination": build_pagination(total, page_request),
    }


def get_history_filtered(
    filters: Dict[str, Any], page: Any = None, limit: Any = None
) -> Dict[str, Any]:
    """All optimizations matching the filters, newest first."""
    page_request = parse_page_request(page, limit, default_limit=20, max_limit=100)
    queryset = Optimization.objects.select_related("product").order_by("-created_at", "-id")
    queryset, applied = apply_history_filters(queryset, filters)

    with store_errors("filtered history lookup"):
        total = queryset.count()
        rows = list(queryset[page_request.offset:page_request.offset + page_request.limit])

    return {
        "history": [summary_entry(row) for row in rows],
        "pagination": build_pagination(total, page_request),
        "filters": applied,
    }


def _daily_rows(queryset: QuerySet) -> List[Dict[str, Any]]:
    return list(
        queryset.annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(
            count=Count("id"),
            average_score=Avg("score"),
            max_score=Max("score"),
            min_score=Min("score"),
            unique_products=Count("asin", distinct=True),
        )
        .order_by("-day")
    )


def get_stats(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Thirty-day statistics: daily counts, model usage, top keywords."""
    now = now or timezone.now()
    since = now - timedelta(days=STATS_WINDOW_DAYS)

    with store_errors("statistics"):
        window = Optimization.objects.filter(created_at__gte=since)
        daily = _daily_rows(window)
        models = list(
            window.values("model_name")
            .annotate(usage_count=Count("id"), average_score=Avg("score"))
            .order_by("-usage_count", "model_name")
        )
        keywords = list(
            KeywordTracking.objects.filter(created_at__gte=since)
            .values("keyword")
            .annotate(usage_count=Count("id"))
            .order_by("-usage_count", "keyword")[:TOP_KEYWORDS]
        )

    return {
        "dailyCounts": [
            {
                "date": _iso(row["day"]),
                "count": row["count"],
                "averageScore": _round(row["average_score"]),
                "maxScore": row["max_score"],
                "minScore": row["min_score"],
                "uniqueProducts": row["unique_products"],
            }
            for row in daily
        ],
        "modelUsage": [
            {
                "model": row["model_name"],
                "usageCount": row["usage_count"],
                "averageScore": _round(row["average_score"]),
            }
            for row in models
        ],
        "topKeywords": [
            {"keyword": row["keyword"], "usageCount": row["usage_count"]}
            for row in keywords
        ],
        "aiServiceStats": get_rate_limiter().get_usage_stats(),
        "generatedAt": now.isoformat(),
    }


def parse_trend_days(value: Any) -> int:
    if value in (None, ""):
        return DEFAULT_TREND_DAYS
    if isinstance(value, bool):
        raise InvalidInput("days must be an integer between 1 and 365", {"days": value})
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise InvalidInput("days must be an integer between 1 and 365", {"days": value})
    if days < 1 or days > MAX_TREND_DAYS:
        raise InvalidInput("days must be an integer between 1 and 365", {"days": value})
    return days


def get_trends(days: Any = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Optimization trends over the last ``days`` days.

    Score buckets are computed in Python from the window's scores; empty
    buckets are left out. Standard deviation is the population value.
    """
    days = parse_trend_days(days)
    now = now or timezone.now()
    since = now - timedelta(days=days)

    with store_errors("trends"):
        window = Optimization.objects.filter(created_at__gte=since)
        daily = _daily_rows(window)
        rows = list(window.values("asin", "product__title", "score", "model_name", "created_at"))

    total = len(rows)
    bucket_counts = {label: 0 for label, _ in SCORE_BUCKETS}
    per_asin: Dict[str, Dict[str, Any]] = {}
    per_model: Dict[str, List[float]] = {}

    for row in rows:
        bucket_counts[score_bucket(row["score"])] += 1

        entry = per_asin.setdefault(
            row["asin"],
            {"title": row["product__title"], "scores": [], "last": row["created_at"]},
        )
        entry["scores"].append(row["score"])
        entry["last"] = max(entry["last"], row["created_at"])

        per_model.setdefault(row["model_name"], []).append(row["score"])

    score_distribution = [
        {
            "scoreRange": label,
            "count": bucket_counts[label],
            "percentage": round(bucket_counts[label] * 100.0 / total, 2),
        }
        for label, _ in SCORE_BUCKETS
        if bucket_counts[label]
    ]

    top_identifiers = sorted(
        (
            {
                "asin": asin,
                "title": entry["title"],
                "optimizationCount": len(entry["scores"]),
                "avgScore": _round(sum(entry["scores"]) / len(entry["scores"])),
                "bestScore": max(entry["scores"]),
                "lastOptimized": _iso(entry["last"]),
            }
            for asin, entry in per_asin.items()
        ),
        key=lambda item: (-item["avgScore"], item["asin"]),
    )[:TOP_IDENTIFIERS]

    model_performance = sorted(
        (
            {
                "model": model,
                "usageCount": len(scores),
                "avgScore": _round(sum(scores) / len(scores)),
                "scoreStdDev": _round(population_stddev(scores)),
            }
            for model, scores in per_model.items()
        ),
        key=lambda item: (-item["avgScore"], item["model"]),
    )

    return {
        "period": {
            "days": days,
            "startDate": since.isoformat(),
            "endDate": now.isoformat(),
        },
        "trends": {
            "dailyOptimizations": [
                {
                    "date": _iso(row["day"]),
                    "optimizations": row["count"],
                    "avgScore": _round(row["average_score"]),
                    "maxScore": row["max_score"],
                    "minScore": row["min_score"],
                }
                for row in daily
            ],
            "scoreDistribution": score_distribution,
            "topPerformingAsins": top_identifiers,
            "modelPerformance": model_performance,
        },
        "generatedAt": now.isoformat(),
    }
