"""
Listings Django application.

This app fetches public product listing data by ASIN, generates optimized
listing copy with a generative model, scores the result and keeps the
optimization history.
"""
