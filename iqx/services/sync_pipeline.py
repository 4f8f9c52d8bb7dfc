"""
Company Sync Pipeline

End-to-end sync of Simplize company summaries into the companies table.

Flow:
1. Check the database and create the schema if needed (fatal on failure)
2. Probe Simplize with a known ticker (warning only)
3. Load the ticker universe (fatal on failure)
4. Filter: [start, end) slice, explicit tickers, skip existing rows
5. Run the chunked scheduler batch by batch with a pause in between
6. Report totals, success rate, duration and throughput
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from iqx.core.config import Settings, settings as default_settings
from iqx.core.database import check_database_connection
from iqx.core.exceptions import DatabaseError
from iqx.providers.simplize.client import SimplizeClient
from iqx.services.company_store import CompanyStore
from iqx.services.sync_scheduler import ChunkedSyncScheduler
from iqx.services.ticker_universe import load_tickers, normalize_tickers

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """Selection and pacing options for one sync run."""
    tickers_file: Optional[str] = None
    batch_size: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None
    tickers: Optional[List[str]] = None
    skip_existing: bool = False
    concurrency: Optional[int] = None
    max_attempts: Optional[int] = None


@dataclass
class SyncRunStats:
    """Aggregate statistics of a sync run."""
    total: int = 0
    success: int = 0
    failed: int = 0
    duration_seconds: float = 0.0

    @property
    def success_rate(self) -> float:
        return round(self.success / self.total * 100, 2) if self.total else 0.0

    @property
    def throughput_per_minute(self) -> float:
        if self.success == 0 or self.duration_seconds <= 0:
            return 0.0
        return round(self.success / self.duration_seconds * 60, 2)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "success_rate": self.success_rate,
            "duration_seconds": round(self.duration_seconds, 2),
            "throughput_per_minute": self.throughput_per_minute,
        }


class CompanySyncPipeline:
    """Orchestrates a full company sync run."""

    def __init__(
        self,
        store: CompanyStore,
        client: SimplizeClient,
        scheduler: ChunkedSyncScheduler,
        batch_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        config: Settings = default_settings,
    ):
        self.store = store
        self.client = client
        self.scheduler = scheduler
        self.batch_delay = batch_delay if batch_delay is not None else config.sync_batch_delay
        self.config = config
        self._sleep = sleep
        self._clock = clock

    async def prepare(self) -> None:
        """
        Verify the database, create the schema and probe the source.

        Raises:
            DatabaseError: If the database is unreachable or the schema
                cannot be created
        """
        if not await check_database_connection(self.store.session_factory, sleep=self._sleep):
            raise DatabaseError("Database is unreachable", operation="connect")
        await self.store.init_schema()

        if not await self.client.health_check():
            logger.warning("Simplize health check failed, continuing anyway")

    async def filter_tickers(self, universe: List[str], options: SyncOptions) -> List[str]:
        """Apply the range, explicit subset and skip-existing filters in order."""
        tickers = list(universe)

        if options.start is not None or options.end is not None:
            start = options.start or 0
            end = options.end if options.end is not None else len(tickers)
            tickers = tickers[start:end]
            logger.info(f"Range [{start}, {end}): {len(tickers)} tickers")

        if options.tickers:
            wanted = set(normalize_tickers(options.tickers))
            unknown = wanted.difference(universe)
            if unknown:
                logger.warning(f"Ignoring tickers not in universe: {', '.join(sorted(unknown))}")
            tickers = [t for t in tickers if t in wanted]
            logger.info(f"Explicit tickers: {len(tickers)} selected")

        if options.skip_existing and tickers:
            concurrency = options.concurrency or self.config.sync_concurrency
            semaphore = asyncio.Semaphore(concurrency)

            async def check(ticker: str) -> bool:
                async with semaphore:
                    return await self.store.exists(ticker)

            present = await asyncio.gather(*(check(t) for t in tickers))
            before = len(tickers)
            tickers = [t for t, exists in zip(tickers, present) if not exists]
            logger.info(f"Skip existing: {before - len(tickers)} skipped, {len(tickers)} remaining")

        return tickers

    async def run(self, options: Optional[SyncOptions] = None) -> SyncRunStats:
        """
        Execute a sync run.

        Raises:
            DatabaseError: Store unreachable or schema creation failed
            UniverseLoadError: Ticker file missing or malformed
        """
        options = options or SyncOptions()
        started = self._clock()

        logger.info("=" * 50)
        logger.info("Starting company sync")
        logger.info("=" * 50)

        await self.prepare()

        universe = load_tickers(options.tickers_file or self.config.tickers_file)
        tickers = await self.filter_tickers(universe, options)

        stats = SyncRunStats(total=len(tickers))
        if not tickers:
            logger.info("No tickers to sync")
            return stats

        batch_size = options.batch_size or len(tickers)
        batches = [tickers[i:i + batch_size] for i in range(0, len(tickers), batch_size)]

        for index, batch in enumerate(batches, start=1):
            logger.info(f"Batch {index}/{len(batches)}: {len(batch)} tickers")
            result = await self.scheduler.run(
                batch,
                concurrency=options.concurrency,
                max_attempts=options.max_attempts,
            )
            stats.success += result.success_count
            stats.failed += result.failed_count
            logger.info(
                f"Batch {index}/{len(batches)} done: "
                f"{result.success_count} ok, {result.failed_count} failed"
            )

            if index < len(batches) and self.batch_delay > 0:
                await self._sleep(self.batch_delay)

        stats.duration_seconds = self._clock() - started

        logger.info("=" * 50)
        logger.info("SYNC COMPLETE")
        logger.info(f"Total: {stats.total}")
        logger.info(f"Success: {stats.success}")
        logger.info(f"Failed: {stats.failed}")
        logger.info(f"Success rate: {stats.success_rate}%")
        logger.info(f"Duration: {stats.duration_seconds:.1f}s")
        logger.info(f"Throughput: {stats.throughput_per_minute}/min")
        logger.info("=" * 50)
        return stats
