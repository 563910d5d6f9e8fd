"""
Services for the listing optimizer.

- product_service: fetch, store and list products
- optimization_engine: four-call generation with rate limiting
- optimization_service: optimize workflow, batch and feedback
- analytics: history, statistics and trends
- persistence: all database writes
- scoring: deterministic optimization score
"""
