"""
Tests for freshness windows and pagination helpers.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from listings.exceptions import InvalidInput
from listings.utils.freshness import freshness_window, is_fresh, stale_before
from listings.utils.pagination import build_pagination, parse_page_request


class TestFreshnessWindow:

    def test_default_windows(self):
        assert freshness_window("product") == timedelta(hours=24)
        assert freshness_window("optimization") == timedelta(minutes=60)

    def test_windows_follow_settings(self, settings):
        settings.LISTING_PRODUCT_FRESHNESS_HOURS = 2
        settings.LISTING_OPTIMIZATION_FRESHNESS_MINUTES = 5

        assert freshness_window("product") == timedelta(hours=2)
        assert freshness_window("optimization") == timedelta(minutes=5)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            freshness_window("brand")


class TestIsFresh:
    """Boundaries: strictly inside the window is fresh, at the edge is stale."""

    def test_product_just_inside_window(self):
        now = timezone.now()
        assert is_fresh(now - timedelta(hours=23, minutes=59), "product", now=now)

    def test_product_exactly_at_window_is_stale(self):
        now = timezone.now()
        assert not is_fresh(now - timedelta(hours=24), "product", now=now)

    def test_product_past_window(self):
        now = timezone.now()
        assert not is_fresh(now - timedelta(hours=25), "product", now=now)

    def test_optimization_boundaries(self):
        now = timezone.now()
        assert is_fresh(now - timedelta(minutes=59), "optimization", now=now)
        assert not is_fresh(now - timedelta(minutes=60), "optimization", now=now)

    def test_never_stored_is_not_fresh(self):
        assert not is_fresh(None, "product")

    def test_stale_before(self):
        now = timezone.now()
        assert stale_before("product", now) == now - timedelta(hours=24)


class TestPagination:

    def test_defaults(self):
        page_request = parse_page_request()
        assert page_request.page == 1
        assert page_request.limit == 20
        assert page_request.offset == 0

    def test_parses_query_strings(self):
        page_request = parse_page_request("3", "10")
        assert page_request.page == 3
        assert page_request.offset == 20

    def test_limit_is_clamped(self):
        assert parse_page_request(1, 500, max_limit=100).limit == 100

    @pytest.mark.parametrize("page", ["0", "-1", "abc", True])
    def test_rejects_bad_page(self, page):
        with pytest.raises(InvalidInput):
            parse_page_request(page=page)

    def test_envelope(self):
        envelope = build_pagination(45, parse_page_request(2, 20))
        assert envelope == {
            "currentPage": 2,
            "totalPages": 3,
            "totalCount": 45,
            "perPage": 20,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_envelope_for_empty_result(self):
        envelope = build_pagination(0, parse_page_request())
        assert envelope["totalPages"] == 0
        assert envelope["hasNext"] is False
        assert envelope["hasPrev"] is False
