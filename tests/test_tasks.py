"""
Tests for Celery tasks and the beat schedule.

CELERY_TASK_ALWAYS_EAGER is on in test settings, so .delay() runs inline.
"""

from unittest.mock import patch

import pytest

from listings.exceptions import NotFound
from listings.tasks import optimize_products_batch, refresh_stale_products


@pytest.mark.django_db
class TestOptimizeProductsBatchTask:

    def test_runs_batch_workflow(self):
        with patch("listings.tasks.OptimizationService") as mock_service:
            mock_service.return_value.optimize_batch.return_value = {
                "successful": [],
                "failed": [],
                "summary": {"total": 0, "successful": 0, "failed": 0},
            }
            result = optimize_products_batch.delay(["B08N5WRWNW"]).get()

        mock_service.return_value.optimize_batch.assert_called_once_with(["B08N5WRWNW"])
        assert result["success"] is True

    def test_rejected_batch_is_reported_not_raised(self):
        result = optimize_products_batch.delay(["B000000001"]).get()

        assert result["success"] is False
        assert result["errorKind"] == NotFound.kind

    def test_invalid_input_is_reported(self):
        result = optimize_products_batch.delay([]).get()

        assert result["success"] is False
        assert result["errorKind"] == "InvalidInput"


@pytest.mark.django_db
class TestRefreshStaleProductsTask:

    def test_delegates_to_product_service(self):
        summary = {"total": 2, "refreshed": 1, "failed": 1, "errors": []}
        with patch("listings.tasks.ProductService") as mock_service:
            mock_service.return_value.refresh_stale_products.return_value = summary
            result = refresh_stale_products.delay(limit=5).get()

        mock_service.return_value.refresh_stale_products.assert_called_once_with(limit=5)
        assert result == summary

    def test_nothing_to_refresh(self, sample_product):
        result = refresh_stale_products.delay().get()
        assert result["total"] == 0


class TestCeleryConfig:

    def test_tasks_routed_to_optimization_queue(self):
        from config.celery import app

        routes = app.conf.task_routes
        assert routes["listings.tasks.optimize_products_batch"]["queue"] == "optimization"
        assert routes["listings.tasks.refresh_stale_products"]["queue"] == "optimization"

    def test_daily_refresh_is_scheduled(self):
        from config.celery import app

        entry = app.conf.beat_schedule["refresh-stale-products-daily"]
        assert entry["task"] == "listings.tasks.refresh_stale_products"
        assert entry["kwargs"] == {"limit": 50}
