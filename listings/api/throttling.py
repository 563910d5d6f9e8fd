"""
API throttle classes.

Endpoints are open, so throttling keys on the client IP for anonymous
requests (UserRateThrottle falls back to the remote address).
"""

from rest_framework.throttling import UserRateThrottle


class GenerationThrottle(UserRateThrottle):
    """
    Throttle for endpoints that call the generative service.

    Rate: 30 requests per hour per client.
    Applied to: /api/optimize/<asin>/, /api/optimize/batch/
    """

    rate = '30/hour'
    scope = 'generation'


class FetchThrottle(UserRateThrottle):
    """
    Throttle for endpoints that scrape product pages.

    Rate: 120 requests per hour per client.
    Applied to: /api/products/<asin>/, /api/products/batch/
    """

    rate = '120/hour'
    scope = 'fetch'
