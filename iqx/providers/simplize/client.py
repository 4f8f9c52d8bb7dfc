"""
Simplize HTTP Client

Reads company summaries from Simplize's Next.js data endpoint:

    GET {base_url}/co-phieu/{TICKER}/ho-so-doanh-nghiep.json?ticker={TICKER}

The response is ``{"pageProps": {"summary": {...}}}``. Transport failures,
timeouts, non-2xx statuses and malformed JSON are raised as
``ProviderError`` subclasses so the fetcher can retry them; a response
without ``pageProps.summary`` is returned as ``None``.
"""

import logging
from typing import Any, Optional

import httpx

from iqx.core.config import Settings, settings as default_settings
from iqx.core.exceptions import ProviderError, ProviderHTTPError, ProviderTimeoutError

logger = logging.getLogger(__name__)

PROVIDER = "simplize"


class SimplizeClient:
    """Async client for the Simplize company profile endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Settings = default_settings,
    ):
        self.base_url = (base_url or config.simplize_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.simplize_timeout
        self.health_timeout = config.simplize_health_timeout
        self.health_check_ticker = config.sync_health_check_ticker

        headers = {
            "User-Agent": config.simplize_user_agent,
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "vi-VN,vi;q=0.9,en-US;q=0.8,en;q=0.7",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=headers,
            follow_redirects=True,
        )
        if not self._owns_client:
            self._client.headers.update(headers)

    def summary_url(self, ticker: str) -> str:
        return f"{self.base_url}/co-phieu/{ticker}/ho-so-doanh-nghiep.json"

    async def fetch_summary(
        self,
        ticker: str,
        timeout: Optional[float] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Fetch the raw company summary for one ticker.

        Returns:
            The ``pageProps.summary`` dict, or None if the payload has none

        Raises:
            ProviderTimeoutError: Request exceeded the timeout
            ProviderHTTPError: Non-success HTTP status
            ProviderError: Connection failure or malformed JSON
        """
        ticker = ticker.upper().strip()
        url = self.summary_url(ticker)
        request_timeout = timeout if timeout is not None else self.timeout

        try:
            response = await self._client.get(
                url,
                params={"ticker": ticker},
                timeout=httpx.Timeout(request_timeout),
            )
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(PROVIDER, request_timeout) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Request for {ticker} failed: {e}",
                provider=PROVIDER,
                details={"ticker": ticker},
            ) from e

        if response.status_code >= 400:
            raise ProviderHTTPError(PROVIDER, response.status_code, str(response.url))

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Malformed JSON for {ticker}",
                provider=PROVIDER,
                details={"ticker": ticker},
            ) from e

        if not isinstance(payload, dict):
            return None
        page_props = payload.get("pageProps")
        if not isinstance(page_props, dict):
            return None
        summary = page_props.get("summary")
        return summary if isinstance(summary, dict) and summary else None

    async def health_check(self) -> bool:
        """Probe the source with a well-known ticker. Never raises."""
        try:
            summary = await self.fetch_summary(
                self.health_check_ticker, timeout=self.health_timeout
            )
        except ProviderError as e:
            logger.warning(f"Simplize health check failed: {e.message}")
            return False

        if summary is None:
            logger.warning(
                f"Simplize health check returned no data for {self.health_check_ticker}"
            )
            return False
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SimplizeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
