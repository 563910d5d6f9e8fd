"""
Celery configuration for the listing optimizer.

Background optimization and product refresh run on the "optimization" queue.
Run it with a single worker (--concurrency=1) so generative calls stay
serialized across batches.
"""

import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("listing_optimizer")

# All celery-related settings use the CELERY_ prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()

app.conf.task_queues = {
    "optimization": {
        "exchange": "optimization",
        "routing_key": "optimization",
    },
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
}

app.conf.task_default_queue = "default"
app.conf.task_default_exchange = "default"
app.conf.task_default_routing_key = "default"

app.conf.task_routes = {
    "listings.tasks.optimize_products_batch": {"queue": "optimization"},
    "listings.tasks.refresh_stale_products": {"queue": "optimization"},
}

app.conf.beat_schedule = {
    "refresh-stale-products-daily": {
        "task": "listings.tasks.refresh_stale_products",
        "schedule": crontab(hour=3, minute=0),
        "kwargs": {"limit": 50},
    },
}
