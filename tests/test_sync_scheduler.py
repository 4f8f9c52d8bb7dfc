"""Tests for the chunked sync scheduler."""
import asyncio
from typing import List, Optional

from conftest import make_summary, summary_handler
from iqx.core.exceptions import DatabaseError
from iqx.providers.simplize.schemas import CompanyRecord
from iqx.services.company_fetcher import CompanyFetcher, FetchOutcome
from iqx.services.sync_scheduler import ChunkedSyncScheduler, SyncProgress


class RecordingFetcher:
    """Succeeds for every ticker and tracks how many fetches overlap."""

    def __init__(self, failing: Optional[set] = None):
        self.failing = failing or set()
        self.in_flight = 0
        self.peak = 0
        self.started: List[str] = []

    async def fetch(self, ticker: str, max_attempts: Optional[int] = None) -> FetchOutcome:
        self.started.append(ticker)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1

        if ticker in self.failing:
            return FetchOutcome(ticker=ticker, success=False, attempts=1, error="boom")
        return FetchOutcome(
            ticker=ticker, success=True, attempts=1, record=CompanyRecord(ticker=ticker)
        )


class MemoryStore:
    def __init__(self, broken: Optional[set] = None, crash: Optional[dict] = None):
        self.broken = broken or set()
        self.crash = crash or {}
        self.saved: List[str] = []

    async def upsert(self, record: CompanyRecord):
        if record.ticker in self.broken:
            raise DatabaseError("disk full", operation="upsert")
        if record.ticker in self.crash:
            raise self.crash[record.ticker]
        self.saved.append(record.ticker)


TICKERS = [f"T{i:02d}" for i in range(10)]


async def test_chunks_bound_concurrency_and_pause_between(sleep_recorder):
    fetcher = RecordingFetcher()
    scheduler = ChunkedSyncScheduler(fetcher, MemoryStore(), chunk_delay=1.0, sleep=sleep_recorder)

    result = await scheduler.run(TICKERS, concurrency=3, max_attempts=1)

    assert result.success_count == 10
    assert result.failed_count == 0
    assert len(result.outcomes) == 10
    assert fetcher.peak == 3
    # Four chunks (3, 3, 3, 1) and a pause between each pair
    assert sleep_recorder.delays == [1.0, 1.0, 1.0]


async def test_outcomes_keep_input_order(sleep_recorder):
    scheduler = ChunkedSyncScheduler(RecordingFetcher(), MemoryStore(), sleep=sleep_recorder)

    result = await scheduler.run(TICKERS, concurrency=4)

    assert [o.ticker for o in result.outcomes] == TICKERS


async def test_failures_are_counted_and_do_not_stop_the_run(sleep_recorder):
    fetcher = RecordingFetcher(failing={"T01", "T07"})
    store = MemoryStore()
    scheduler = ChunkedSyncScheduler(fetcher, store, sleep=sleep_recorder)

    result = await scheduler.run(TICKERS, concurrency=5)

    assert result.success_count == 8
    assert result.failed_count == 2
    assert result.total == 10
    assert "T01" not in store.saved
    assert len(store.saved) == 8


async def test_upsert_failure_counts_as_failure(sleep_recorder):
    store = MemoryStore(broken={"T02"})
    scheduler = ChunkedSyncScheduler(RecordingFetcher(), store, sleep=sleep_recorder)

    result = await scheduler.run(TICKERS[:4], concurrency=4)

    assert result.success_count == 3
    assert result.failed_count == 1
    failed = [o for o in result.outcomes if not o.success]
    assert failed[0].ticker == "T02"
    assert failed[0].error == "disk full"


async def test_single_chunk_never_sleeps(sleep_recorder):
    scheduler = ChunkedSyncScheduler(RecordingFetcher(), MemoryStore(), sleep=sleep_recorder)

    await scheduler.run(TICKERS[:3], concurrency=128)

    assert sleep_recorder.delays == []


async def test_progress_callback(sleep_recorder):
    events: List[SyncProgress] = []
    scheduler = ChunkedSyncScheduler(
        RecordingFetcher(failing={"T03"}),
        MemoryStore(),
        sleep=sleep_recorder,
        on_progress=events.append,
    )

    await scheduler.run(TICKERS[:5], concurrency=2)

    assert [e.completed for e in events] == [1, 2, 3, 4, 5]
    assert all(e.total == 5 for e in events)
    assert events[-1].percent == 100.0
    assert [e.success for e in events if e.ticker == "T03"] == [False]


async def test_empty_ticker_list(sleep_recorder):
    scheduler = ChunkedSyncScheduler(RecordingFetcher(), MemoryStore(), sleep=sleep_recorder)

    result = await scheduler.run([], concurrency=3)

    assert result.total == 0
    assert sleep_recorder.delays == []


async def test_persists_fetched_records(simplize_factory, store, sleep_recorder):
    client = simplize_factory(
        summary_handler({"VIC": make_summary("VIC"), "VNM": make_summary("VNM")})
    )
    fetcher = CompanyFetcher(client, sleep=sleep_recorder)
    scheduler = ChunkedSyncScheduler(fetcher, store, sleep=sleep_recorder)

    result = await scheduler.run(["VIC", "VNM", "NOPE"], concurrency=2, max_attempts=2)

    assert result.success_count == 2
    assert result.failed_count == 1
    assert await store.exists("VIC")
    assert await store.exists("VNM")
    assert not await store.exists("NOPE")


async def test_unexpected_store_error_is_isolated(sleep_recorder):
    store = MemoryStore(crash={"T01": OSError("connection reset")})
    scheduler = ChunkedSyncScheduler(RecordingFetcher(), store, sleep=sleep_recorder)

    result = await scheduler.run(TICKERS[:4], concurrency=2)

    assert (result.success_count, result.failed_count) == (3, 1)
    assert [o.ticker for o in result.outcomes if not o.success] == ["T01"]
    assert result.outcomes[1].error == "connection reset"
    assert store.saved == ["T00", "T02", "T03"]


async def test_unexpected_fetcher_error_is_isolated(sleep_recorder):
    class CrashingFetcher(RecordingFetcher):
        async def fetch(self, ticker, max_attempts=None):
            if ticker == "T02":
                raise asyncio.TimeoutError()
            return await super().fetch(ticker, max_attempts)

    scheduler = ChunkedSyncScheduler(CrashingFetcher(), MemoryStore(), sleep=sleep_recorder)

    result = await scheduler.run(TICKERS[:4], concurrency=4)

    assert (result.success_count, result.failed_count) == (3, 1)
    assert result.outcomes[2].ticker == "T02"
    assert result.outcomes[2].error == "TimeoutError"


async def test_failing_progress_callback_does_not_stop_the_run(sleep_recorder):
    def explode(progress: SyncProgress) -> None:
        raise RuntimeError("listener down")

    scheduler = ChunkedSyncScheduler(
        RecordingFetcher(), MemoryStore(), sleep=sleep_recorder, on_progress=explode
    )

    result = await scheduler.run(TICKERS[:3], concurrency=3)

    assert result.success_count == 3
