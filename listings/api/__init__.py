"""
REST API module for the listing optimizer.

Endpoints for product fetching, listing optimization, optimization history
and analytics. Open endpoints with per-client throttling on the fetch and
generation paths.
"""
