"""
Health check endpoint for monitoring and load balancer checks.
"""

import logging

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils import timezone

from listings.services.rate_limiter import get_rate_limiter

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Service health.

    Endpoint: GET /api/health/
    No authentication required.

    Response fields:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "error"
        - aiModel: configured generative model
        - aiRequests: generative calls made by this process
        - timestamp: ISO timestamp

    Returns:
        HTTP 200 when healthy, HTTP 503 when the database is unreachable
    """
    status = "healthy"
    http_status = 200

    database_status = "connected"
    try:
        connection.ensure_connection()
    except DatabaseError as e:
        logger.error(f"Health check database error: {e}")
        database_status = "error"
        status = "unhealthy"
        http_status = 503

    usage = get_rate_limiter().get_usage_stats()

    return JsonResponse(
        {
            "status": status,
            "database": database_status,
            "aiModel": getattr(settings, "GEMINI_MODEL", ""),
            "aiRequests": usage["totalRequests"],
            "timestamp": timezone.now().isoformat(),
        },
        status=http_status,
    )
