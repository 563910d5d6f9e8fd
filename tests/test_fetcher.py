"""
Tests for the product page fetcher and its failure classification.

Uses httpx.MockTransport so no request leaves the process.
"""

import httpx
import pytest

from listings.exceptions import (
    ExtractionFailure,
    NotFoundUpstream,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from listings.fetchers import ProductPageFetcher


def fetcher_for(handler, **kwargs):
    return ProductPageFetcher(transport=httpx.MockTransport(handler), **kwargs)


class TestProductPageFetcher:

    @pytest.mark.asyncio
    async def test_fetches_product_page(self, product_page_html):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["user_agent"] = request.headers.get("user-agent")
            return httpx.Response(200, text=product_page_html)

        async with fetcher_for(handler) as fetcher:
            page = await fetcher.fetch("B08N5WRWNW")

        assert seen["url"] == "https://www.amazon.com/dp/B08N5WRWNW"
        assert "Mozilla/5.0" in seen["user_agent"]
        assert page.status_code == 200
        assert page.asin == "B08N5WRWNW"
        assert "productTitle" in page.content

    @pytest.mark.asyncio
    async def test_url_template_is_configurable(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, text="<html></html>")

        async with fetcher_for(handler, url_template="https://shop.test/item/{asin}") as fetcher:
            await fetcher.fetch("B08N5WRWNW")

        assert seen["url"] == "https://shop.test/item/B08N5WRWNW"

    @pytest.mark.asyncio
    async def test_404_is_not_found_upstream(self):
        async with fetcher_for(lambda request: httpx.Response(404)) as fetcher:
            with pytest.raises(NotFoundUpstream):
                await fetcher.fetch("B000000000")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [403, 410, 429])
    async def test_other_client_statuses_are_unusable_pages(self, status):
        async with fetcher_for(lambda request: httpx.Response(status)) as fetcher:
            with pytest.raises(ExtractionFailure) as exc_info:
                await fetcher.fetch("B08N5WRWNW")

        assert exc_info.value.details["status"] == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [500, 503])
    async def test_server_errors_are_unreachable(self, status):
        async with fetcher_for(lambda request: httpx.Response(status)) as fetcher:
            with pytest.raises(UpstreamUnreachable):
                await fetcher.fetch("B08N5WRWNW")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with fetcher_for(handler) as fetcher:
            with pytest.raises(UpstreamTimeout) as exc_info:
                await fetcher.fetch("B08N5WRWNW")

        assert exc_info.value.http_status == 504

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        async with fetcher_for(handler) as fetcher:
            with pytest.raises(UpstreamUnreachable) as exc_info:
                await fetcher.fetch("B08N5WRWNW")

        assert exc_info.value.http_status == 502

    @pytest.mark.asyncio
    async def test_close_releases_client(self):
        fetcher = fetcher_for(lambda request: httpx.Response(200, text=""))
        await fetcher.fetch("B08N5WRWNW")
        assert fetcher._http_client is not None

        await fetcher.close()
        assert fetcher._http_client is None
