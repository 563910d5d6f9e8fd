"""
Test settings for the Listing Optimizer.

Uses in-memory SQLite, eager Celery and zero delays for fast test execution.
"""

import os
from .base import *

DEBUG = False

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "unique-snowflake",
    }
}

# Run tasks synchronously
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

LOGGING["loggers"]["django"]["level"] = "WARNING"
LOGGING["loggers"]["listings"]["level"] = "WARNING"

AUTH_PASSWORD_VALIDATORS = []

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Sentry disabled in tests
SENTRY_DSN = ""

# Never reach real services; no waiting between calls
GEMINI_API_KEY = "test-key"
GEMINI_MODEL = "gemini-test"
GEMINI_MIN_REQUEST_INTERVAL = 0
GEMINI_REQUEST_TIMEOUT = 5
LISTING_REQUEST_TIMEOUT = 5
LISTING_FETCH_BATCH_DELAY = 0
LISTING_OPTIMIZE_BATCH_DELAY = 0
