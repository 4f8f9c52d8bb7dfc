"""
Company Fetcher

Fetches and normalizes one ticker from Simplize with bounded retries.
Connection errors, timeouts, bad statuses, malformed JSON, empty
payloads and summaries failing validation are all retried with
exponential backoff:

    delay(n) = min(base_delay * 2 ** (n - 1), max_delay)

The fetcher never raises; every failure becomes a ``FetchOutcome``.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from iqx.core.config import Settings, settings as default_settings
from iqx.core.exceptions import DataValidationError, EmptyPayloadError, ProviderError
from iqx.providers.simplize.client import PROVIDER, SimplizeClient
from iqx.providers.simplize.schemas import CompanyRecord
from iqx.providers.simplize.transformer import transform_summary

logger = logging.getLogger(__name__)


@dataclass
class FetchOutcome:
    """Result of fetching one ticker."""
    ticker: str
    success: bool
    attempts: int
    record: Optional[CompanyRecord] = None
    error: Optional[str] = None


class CompanyFetcher:
    """Fetch-with-retry for a single company summary."""

    def __init__(
        self,
        client: SimplizeClient,
        base_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        config: Settings = default_settings,
    ):
        self.client = client
        self.base_delay = base_delay if base_delay is not None else config.sync_retry_base_delay
        self.max_delay = max_delay if max_delay is not None else config.sync_retry_max_delay
        self.max_attempts = max_attempts or config.sync_max_retries
        self._sleep = sleep

    def _retrying(self, max_attempts: int) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay),
            retry=retry_if_exception_type((ProviderError, DataValidationError)),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )

    async def fetch(self, ticker: str, max_attempts: Optional[int] = None) -> FetchOutcome:
        """
        Fetch and transform, retrying up to ``max_attempts`` times.

        Args:
            ticker: Stock ticker
            max_attempts: Attempt limit (defaults to the configured retries)

        Returns:
            FetchOutcome with the record on success, or the last error
        """
        ticker = ticker.upper().strip()
        max_attempts = max(1, max_attempts or self.max_attempts)
        attempts = 0

        try:
            async for attempt in self._retrying(max_attempts):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    summary = await self.client.fetch_summary(ticker)
                    if summary is None:
                        raise EmptyPayloadError(PROVIDER, ticker)
                    record = transform_summary(summary)
        except ProviderError as e:
            logger.warning(f"Giving up on {ticker} after {attempts} attempt(s): {e.message}")
            return FetchOutcome(ticker=ticker, success=False, attempts=attempts, error=e.message)
        except DataValidationError as e:
            logger.warning(
                f"Invalid summary for {ticker} after {attempts} attempt(s): {e.message}"
            )
            return FetchOutcome(ticker=ticker, success=False, attempts=attempts, error=e.message)
        except Exception as e:
            logger.exception(f"Unexpected error fetching {ticker}")
            return FetchOutcome(ticker=ticker, success=False, attempts=attempts, error=str(e))

        return FetchOutcome(ticker=ticker, success=True, attempts=attempts, record=record)
