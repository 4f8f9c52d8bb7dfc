"""
Chunked Sync Scheduler

Runs fetch-and-upsert for a list of tickers in fixed-size concurrent
chunks. Each chunk is one ``asyncio.gather`` barrier; the next chunk
starts only after every ticker of the current one has finished, with a
fixed pause in between.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from iqx.core.config import Settings, settings as default_settings
from iqx.core.exceptions import DatabaseError
from iqx.services.company_fetcher import CompanyFetcher, FetchOutcome
from iqx.services.company_store import CompanyStore

logger = logging.getLogger(__name__)


@dataclass
class SyncProgress:
    """Progress event emitted after each ticker completes."""
    ticker: str
    completed: int
    total: int
    success: bool

    @property
    def percent(self) -> float:
        return round(self.completed / self.total * 100, 1) if self.total else 100.0


@dataclass
class BatchResult:
    """Aggregated outcome of one scheduler run."""
    success_count: int = 0
    failed_count: int = 0
    outcomes: List[FetchOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count


class ChunkedSyncScheduler:
    """
    Drives ``CompanyFetcher`` over chunks of tickers and persists each
    success through ``CompanyStore`` as soon as it arrives.
    """

    def __init__(
        self,
        fetcher: CompanyFetcher,
        store: CompanyStore,
        chunk_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_progress: Optional[Callable[[SyncProgress], None]] = None,
        config: Settings = default_settings,
    ):
        self.fetcher = fetcher
        self.store = store
        self.chunk_delay = chunk_delay if chunk_delay is not None else config.sync_chunk_delay
        self.default_concurrency = config.sync_concurrency
        self._sleep = sleep
        self.on_progress = on_progress

    async def _process(self, ticker: str, max_attempts: Optional[int]) -> FetchOutcome:
        try:
            outcome = await self.fetcher.fetch(ticker, max_attempts)
        except Exception as e:
            logger.exception(f"Unexpected error fetching {ticker}")
            return FetchOutcome(
                ticker=ticker, success=False, attempts=0, error=str(e) or type(e).__name__
            )
        if not outcome.success or outcome.record is None:
            return outcome

        try:
            await self.store.upsert(outcome.record)
        except DatabaseError as e:
            # Fetched fine but not persisted; not retried
            outcome.success = False
            outcome.error = e.message
        except Exception as e:
            logger.exception(f"Unexpected error storing {ticker}")
            outcome.success = False
            outcome.error = str(e) or type(e).__name__
        return outcome

    def _report(self, outcome: FetchOutcome, completed: int, total: int) -> None:
        progress = SyncProgress(
            ticker=outcome.ticker,
            completed=completed,
            total=total,
            success=outcome.success,
        )
        extra = {"ticker": outcome.ticker, "position": completed, "total": total}
        if outcome.success:
            logger.info(f"[{completed}/{total}] {outcome.ticker} ({progress.percent}%)", extra=extra)
        else:
            logger.warning(
                f"[{completed}/{total}] {outcome.ticker} failed ({progress.percent}%): "
                f"{outcome.error}",
                extra=extra,
            )
        if self.on_progress is not None:
            try:
                self.on_progress(progress)
            except Exception:
                logger.exception(f"Progress callback failed for {outcome.ticker}")

    async def run(
        self,
        tickers: Sequence[str],
        concurrency: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ) -> BatchResult:
        """
        Fetch and upsert every ticker.

        Args:
            tickers: Tickers in processing order
            concurrency: Chunk size (defaults to the configured concurrency)
            max_attempts: Per-ticker attempt limit

        Returns:
            BatchResult with counts and per-ticker outcomes in input order
        """
        concurrency = concurrency or self.default_concurrency
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        result = BatchResult()
        total = len(tickers)
        completed = 0

        async def track(ticker: str) -> FetchOutcome:
            nonlocal completed
            outcome = await self._process(ticker, max_attempts)
            completed += 1
            self._report(outcome, completed, total)
            return outcome

        chunks = [tickers[i:i + concurrency] for i in range(0, total, concurrency)]
        for index, chunk in enumerate(chunks, start=1):
            logger.debug(f"Chunk {index}/{len(chunks)} ({len(chunk)} tickers)")
            outcomes = await asyncio.gather(*(track(ticker) for ticker in chunk))

            for outcome in outcomes:
                if outcome.success:
                    result.success_count += 1
                else:
                    result.failed_count += 1
            result.outcomes.extend(outcomes)

            if index < len(chunks) and self.chunk_delay > 0:
                await self._sleep(self.chunk_delay)

        return result
