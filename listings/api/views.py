"""
REST API endpoints for the listing optimizer.

This module provides endpoints for:
- Fetching product listings (single, batch, stored list)
- Generating optimized listings (single, batch) and statistics
- Optimization history, feedback and trends

Endpoints are open (AllowAny); the fetch and generation endpoints are
throttled. Every ListingError is answered with its HTTP status and a body of
the form {"error": <kind>, "message": <text>}.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from listings.api.throttling import FetchThrottle, GenerationThrottle
from listings.exceptions import ListingError
from listings.services import analytics

logger = logging.getLogger(__name__)

ASIN_PARAMETER = OpenApiParameter(
    'asin', OpenApiTypes.STR, OpenApiParameter.PATH,
    description='10-character ASIN (case-insensitive)',
)
PAGE_PARAMETERS = [
    OpenApiParameter('page', OpenApiTypes.INT, description='Page number (default 1)'),
    OpenApiParameter('limit', OpenApiTypes.INT, description='Page size'),
]
ASIN_LIST_REQUEST = {
    'application/json': {
        'type': 'object',
        'properties': {
            'asins': {'type': 'array', 'items': {'type': 'string'}},
        },
        'required': ['asins'],
    }
}


def _get_product_service():
    """ProductService instance (lazy import keeps URL loading light)."""
    from listings.services.product_service import ProductService
    return ProductService()


def _get_optimization_service():
    """OptimizationService instance."""
    from listings.services.optimization_service import OptimizationService
    return OptimizationService()


def error_response(error: ListingError) -> Response:
    """Translate a ListingError into its JSON error response."""
    return Response(
        {'error': error.kind, 'message': error.message},
        status=error.http_status,
    )


def _asins_from(request):
    data = request.data
    return data.get('asins') if isinstance(data, dict) else None


def _unexpected(operation: str, error: Exception) -> Response:
    logger.exception(f"{operation} failed: {error}")
    return Response(
        {'error': 'InternalError', 'message': f'{operation} failed: {error}'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# ============================================================
# Product Endpoints
# ============================================================

@extend_schema(
    tags=['Products'],
    summary='List stored products',
    parameters=PAGE_PARAMETERS,
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def list_products(request):
    """
    Stored products ordered by last update, newest first.

    Query params: page (default 1), limit (default 20, max 100)
    """
    try:
        result = _get_product_service().list_products(
            page=request.query_params.get('page'),
            limit=request.query_params.get('limit'),
        )
        return Response(result)
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Product listing', e)


@extend_schema(
    tags=['Products'],
    summary='Fetch product by ASIN',
    description='''
    Returns stored product data when it was updated in the last 24 hours
    (source "cached"), otherwise scrapes the product page, stores the result
    and returns it (source "fresh").
    ''',
    parameters=[ASIN_PARAMETER],
    responses={
        200: OpenApiTypes.OBJECT,
        400: {'description': 'Invalid ASIN'},
        404: {'description': 'Product not found or page unusable'},
        502: {'description': 'Product site unreachable'},
        504: {'description': 'Product site timed out'},
    },
)
@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([FetchThrottle])
def fetch_product(request, asin):
    try:
        return Response(_get_product_service().fetch_product(asin))
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Product fetch', e)


@extend_schema(
    tags=['Products'],
    summary='Batch fetch products',
    description='Scrapes up to 10 products sequentially and stores the successes.',
    request=ASIN_LIST_REQUEST,
    responses={200: OpenApiTypes.OBJECT, 400: {'description': 'Invalid request'}},
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([FetchThrottle])
def batch_fetch_products(request):
    """
    Request body:
    {
        "asins": ["B08N5WRWNW", "B07FZ8S74R"]
    }
    """
    try:
        return Response(
            _get_product_service().fetch_products_batch(_asins_from(request))
        )
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Batch fetch', e)


# ============================================================
# Optimization Endpoints
# ============================================================

@extend_schema(
    tags=['Optimization'],
    summary='Optimize a stored product listing',
    description='''
    Generates an optimized title, bullets, description and keywords for a
    stored product. A result generated in the last hour is returned as-is
    (source "cached").
    ''',
    parameters=[ASIN_PARAMETER],
    request=None,
    responses={
        200: OpenApiTypes.OBJECT,
        400: {'description': 'Invalid ASIN'},
        404: {'description': 'Product not fetched yet'},
        503: {'description': 'AI service unavailable'},
    },
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([GenerationThrottle])
def optimize_product(request, asin):
    try:
        return Response(_get_optimization_service().optimize(asin))
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Optimization', e)


@extend_schema(
    tags=['Optimization'],
    summary='Batch optimize stored products',
    description='Optimizes up to 5 stored products one after another.',
    request=ASIN_LIST_REQUEST,
    responses={200: OpenApiTypes.OBJECT, 400: {'description': 'Invalid request'}},
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([GenerationThrottle])
def batch_optimize(request):
    try:
        return Response(
            _get_optimization_service().optimize_batch(_asins_from(request))
        )
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Batch optimization', e)


@extend_schema(
    tags=['Optimization'],
    summary='Optimization statistics (last 30 days)',
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def optimization_stats(request):
    try:
        return Response(analytics.get_stats())
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Statistics', e)


# ============================================================
# History Endpoints
# ============================================================

@extend_schema(
    tags=['History'],
    summary='Filtered optimization history',
    parameters=PAGE_PARAMETERS + [
        OpenApiParameter('startDate', OpenApiTypes.STR, description='ISO date or datetime'),
        OpenApiParameter('endDate', OpenApiTypes.STR, description='ISO date (inclusive) or datetime'),
        OpenApiParameter('minScore', OpenApiTypes.NUMBER),
        OpenApiParameter('maxScore', OpenApiTypes.NUMBER),
        OpenApiParameter('model', OpenApiTypes.STR),
    ],
    responses={200: OpenApiTypes.OBJECT, 400: {'description': 'Invalid filter'}},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def history_list(request):
    params = request.query_params
    filters = {
        key: params.get(key)
        for key in ('startDate', 'endDate', 'minScore', 'maxScore', 'model')
    }
    try:
        return Response(
            analytics.get_history_filtered(
                filters, page=params.get('page'), limit=params.get('limit')
            )
        )
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('History lookup', e)


@extend_schema(
    tags=['History'],
    summary='Optimization history for one product',
    parameters=[ASIN_PARAMETER] + PAGE_PARAMETERS,
    responses={200: OpenApiTypes.OBJECT, 400: {'description': 'Invalid ASIN'}},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def history_for_product(request, asin):
    try:
        return Response(
            analytics.get_history(
                asin,
                page=request.query_params.get('page'),
                limit=request.query_params.get('limit'),
            )
        )
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('History lookup', e)


@extend_schema(
    tags=['History'],
    summary='Rate an optimization',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'rating': {'type': 'integer', 'minimum': 1, 'maximum': 5},
                'comments': {'type': 'string'},
                'helpful': {'type': 'boolean'},
                'improvements': {'type': 'array', 'items': {'type': 'string'}},
            },
            'required': ['rating'],
        }
    },
    responses={
        200: OpenApiTypes.OBJECT,
        400: {'description': 'Invalid feedback'},
        404: {'description': 'Optimization not found'},
    },
)
@api_view(['POST'])
@permission_classes([AllowAny])
def submit_feedback(request, optimization_id):
    try:
        return Response(
            _get_optimization_service().submit_feedback(optimization_id, request.data)
        )
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Feedback', e)


@extend_schema(
    tags=['History'],
    summary='Optimization trends',
    parameters=[
        OpenApiParameter('days', OpenApiTypes.INT, description='Window in days (1-365, default 30)'),
    ],
    responses={200: OpenApiTypes.OBJECT, 400: {'description': 'Invalid days'}},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def optimization_trends(request):
    try:
        return Response(analytics.get_trends(request.query_params.get('days')))
    except ListingError as e:
        return error_response(e)
    except Exception as e:
        return _unexpected('Trends', e)
