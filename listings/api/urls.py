"""
URL patterns for the listing optimizer REST API (mounted under /api/).

Endpoints:
- GET  products/                       - List stored products
- POST products/batch/                 - Batch fetch products
- GET  products/<asin>/                - Fetch one product (cached or scraped)
- POST optimize/batch/                 - Batch optimize stored products
- GET  optimize/stats/                 - 30-day optimization statistics
- POST optimize/<asin>/                - Optimize one stored product
- GET  history/                        - Filtered optimization history
- GET  history/analytics/trends/       - Optimization trends
- POST history/<id>/feedback/          - Rate an optimization
- GET  history/<asin>/                 - History for one product
"""

from django.urls import path

from listings.api.views import (
    batch_fetch_products,
    batch_optimize,
    fetch_product,
    history_for_product,
    history_list,
    list_products,
    optimization_stats,
    optimization_trends,
    optimize_product,
    submit_feedback,
)

app_name = 'listings_api'

urlpatterns = [
    # Products
    path('products/', list_products, name='list_products'),
    path('products/batch/', batch_fetch_products, name='batch_fetch_products'),
    path('products/<str:asin>/', fetch_product, name='fetch_product'),

    # Optimization
    path('optimize/batch/', batch_optimize, name='batch_optimize'),
    path('optimize/stats/', optimization_stats, name='optimization_stats'),
    path('optimize/<str:asin>/', optimize_product, name='optimize_product'),

    # History and analytics
    path('history/', history_list, name='history_list'),
    path('history/analytics/trends/', optimization_trends, name='optimization_trends'),
    path('history/<int:optimization_id>/feedback/', submit_feedback, name='submit_feedback'),
    path('history/<str:asin>/', history_for_product, name='history_for_product'),
]
