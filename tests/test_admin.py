"""
Tests for Django Admin registrations.
"""

import pytest
from django.contrib.admin.sites import site

from listings.admin import OptimizationAdmin
from listings.models import KeywordTracking, Optimization, OptimizationAction, Product


class TestRegistrations:

    @pytest.mark.parametrize("model", [Product, Optimization, OptimizationAction, KeywordTracking])
    def test_models_are_registered(self, model):
        assert site.is_registered(model)


@pytest.mark.django_db
class TestOptimizationAdmin:

    def test_keyword_list_uses_recovery_parser(self, sample_product, make_optimization):
        optimization = make_optimization(sample_product)
        optimization.generated_keywords = "[alexa, echo]"

        model_admin = OptimizationAdmin(Optimization, site)

        assert model_admin.keyword_list(optimization) == "alexa, echo"

    def test_score_badge(self, sample_product, make_optimization):
        optimization = make_optimization(sample_product, score=85)
        badge = OptimizationAdmin(Optimization, site).score_badge(optimization)

        assert "#28a745" in badge
        assert ">85<" in badge


@pytest.mark.django_db
class TestChangelists:

    @pytest.mark.parametrize(
        "url",
        [
            "/admin/listings/product/",
            "/admin/listings/optimization/",
            "/admin/listings/optimizationaction/",
            "/admin/listings/keywordtracking/",
        ],
    )
    def test_changelist_renders(self, admin_client, sample_product, make_optimization, url):
        make_optimization(sample_product)

        response = admin_client.get(url)

        assert response.status_code == 200

    def test_search_by_asin(self, admin_client, sample_product):
        response = admin_client.get("/admin/listings/product/", {"q": "B08N5WRWNW"})

        assert response.status_code == 200
        assert b"B08N5WRWNW" in response.content
