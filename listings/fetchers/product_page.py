"""
Product page fetcher - async httpx.

Fetches one product detail page per identifier and classifies failures:

- 404 -> NotFoundUpstream
- other non-200 below 500 -> ExtractionFailure (blocked or unusable page)
- 5xx or connection errors -> UpstreamUnreachable
- timeouts -> UpstreamTimeout

There are no retries here; callers may re-invoke the fetch path.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from django.conf import settings

from listings.exceptions import (
    ExtractionFailure,
    NotFoundUpstream,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from listings.monitoring import add_upstream_breadcrumb

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_URL_TEMPLATE = "https://www.amazon.com/dp/{asin}"


@dataclass
class FetchResponse:
    """A successfully fetched product page."""

    asin: str
    url: str
    content: str
    status_code: int
    headers: Dict[str, str]


class ProductPageFetcher:
    """
    Async fetcher for product detail pages.

    Use as an async context manager so the connection pool is closed:

        async with ProductPageFetcher() as fetcher:
            page = await fetcher.fetch("B08N5WRWNW")
    """

    DEFAULT_USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )

    # brotli left out: httpx only decodes it when the brotli extra is installed
    DEFAULT_HEADERS = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }

    def __init__(
        self,
        timeout: Optional[float] = None,
        url_template: Optional[str] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            timeout: Request timeout in seconds (default LISTING_REQUEST_TIMEOUT)
            url_template: Page URL with an {asin} placeholder
            user_agent: Custom User-Agent string
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.timeout = timeout or getattr(settings, "LISTING_REQUEST_TIMEOUT", 30)
        self.url_template = url_template or getattr(
            settings, "LISTING_PRODUCT_URL_TEMPLATE", DEFAULT_PRODUCT_URL_TEMPLATE
        )
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self._init_http_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _init_http_client(self):
        if self._http_client is None:
            headers = {
                **self.DEFAULT_HEADERS,
                "User-Agent": self.user_agent,
            }
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                follow_redirects=True,
                transport=self._transport,
            )

    async def close(self):
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    def build_url(self, asin: str) -> str:
        return self.url_template.format(asin=asin)

    async def fetch(self, asin: str) -> FetchResponse:
        """
        Fetch the product page for an ASIN.

        Args:
            asin: Validated, uppercase ASIN

        Returns:
            FetchResponse for a 200 answer

        Raises:
            NotFoundUpstream, ExtractionFailure, UpstreamUnreachable, UpstreamTimeout
        """
        if self._http_client is None:
            await self._init_http_client()

        url = self.build_url(asin)
        logger.info(f"Fetching product page for {asin}: {url}")
        add_upstream_breadcrumb(
            "fetch", asin=asin, message="Product page request", extra_data={"url": url}
        )

        try:
            response = await self._http_client.get(url)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching {url}: {e}")
            raise UpstreamTimeout(
                "Request timeout. The product site may be temporarily unavailable.",
                {"asin": asin, "url": url},
            ) from e
        except httpx.TransportError as e:
            logger.warning(f"Network error fetching {url}: {type(e).__name__}: {e}")
            raise UpstreamUnreachable(
                "Network connection failed. Could not reach the product site.",
                {"asin": asin, "url": url},
            ) from e

        status = response.status_code
        if status == 404:
            logger.info(f"Product {asin} not found upstream")
            raise NotFoundUpstream(
                "Product not found. Please check the ASIN.",
                {"asin": asin, "status": status},
            )
        if status >= 500:
            logger.warning(f"Upstream HTTP {status} for {url}")
            raise UpstreamUnreachable(
                f"Product site returned status {status}",
                {"asin": asin, "status": status},
            )
        if status != 200:
            logger.warning(f"Unusable HTTP {status} for {url}")
            raise ExtractionFailure(
                f"Product site returned status {status}",
                {"asin": asin, "status": status},
            )

        return FetchResponse(
            asin=asin,
            url=str(response.url),
            content=response.text,
            status_code=status,
            headers=dict(response.headers),
        )
