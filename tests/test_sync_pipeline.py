"""Tests for the sync orchestrator."""
import json

import pytest

from conftest import SleepRecorder, make_summary, summary_handler
from iqx.core.database import build_engine
from iqx.core.exceptions import DatabaseError, UniverseLoadError
from iqx.services.company_fetcher import CompanyFetcher
from iqx.services.company_store import CompanyStore
from iqx.services.sync_pipeline import CompanySyncPipeline, SyncOptions, SyncRunStats
from iqx.services.sync_scheduler import ChunkedSyncScheduler
from iqx.providers.simplize.transformer import transform_summary

UNIVERSE = ["AAA", "BBB", "CCC", "DDD", "EEE", "FFF", "GGG"]


def record_for(ticker: str):
    return transform_summary(make_summary(ticker))


class FakeClock:
    def __init__(self, *values: float):
        self.values = list(values)

    def __call__(self) -> float:
        return self.values.pop(0) if len(self.values) > 1 else self.values[0]


@pytest.fixture
def tickers_file(tmp_path):
    def write(tickers) -> str:
        path = tmp_path / "tickers.json"
        path.write_text(json.dumps(tickers), encoding="utf-8")
        return str(path)

    return write


def build_pipeline(store, client, sleep, clock=None) -> CompanySyncPipeline:
    fetcher = CompanyFetcher(client, sleep=sleep)
    scheduler = ChunkedSyncScheduler(fetcher, store, sleep=sleep)
    kwargs = {"clock": clock} if clock else {}
    return CompanySyncPipeline(store, client, scheduler, sleep=sleep, **kwargs)


@pytest.fixture
def pipeline(store, simplize_factory, sleep_recorder):
    client = simplize_factory(summary_handler({t: make_summary(t) for t in UNIVERSE}))
    return build_pipeline(store, client, sleep_recorder)


class TestFilterTickers:
    async def test_range_is_half_open(self, pipeline):
        result = await pipeline.filter_tickers(UNIVERSE, SyncOptions(start=2, end=5))
        assert result == ["CCC", "DDD", "EEE"]

    async def test_range_defaults(self, pipeline):
        assert await pipeline.filter_tickers(UNIVERSE, SyncOptions(start=5)) == ["FFF", "GGG"]
        assert await pipeline.filter_tickers(UNIVERSE, SyncOptions(end=2)) == ["AAA", "BBB"]

    async def test_explicit_tickers_keep_universe_order(self, pipeline):
        options = SyncOptions(tickers=["eee", " bbb", "ZZZ"])
        assert await pipeline.filter_tickers(UNIVERSE, options) == ["BBB", "EEE"]

    async def test_skip_existing_removes_stored_tickers(self, pipeline, store):
        await store.upsert(record_for("BBB"))
        await store.upsert(record_for("DDD"))

        result = await pipeline.filter_tickers(UNIVERSE, SyncOptions(skip_existing=True, concurrency=2))

        assert result == ["AAA", "CCC", "EEE", "FFF", "GGG"]

    async def test_filters_apply_in_order(self, pipeline, store):
        await store.upsert(record_for("CCC"))
        options = SyncOptions(start=1, end=5, tickers=["AAA", "CCC", "DDD"], skip_existing=True)

        assert await pipeline.filter_tickers(UNIVERSE, options) == ["DDD"]

    async def test_no_filters_returns_everything(self, pipeline):
        assert await pipeline.filter_tickers(UNIVERSE, SyncOptions()) == UNIVERSE


async def test_end_to_end_mixed_outcome(store, simplize_factory, tickers_file):
    sleep = SleepRecorder()
    client = simplize_factory(summary_handler({"VIC": make_summary("VIC")}))
    pipeline = build_pipeline(store, client, sleep, clock=FakeClock(100.0, 130.0))

    stats = await pipeline.run(
        SyncOptions(tickers_file=tickers_file(["VIC", "BADTICKER"]), max_attempts=2)
    )

    assert stats.total == 2
    assert stats.success == 1
    assert stats.failed == 1
    assert stats.success_rate == 50.0
    assert stats.duration_seconds == 30.0
    assert stats.throughput_per_minute == 2.0
    assert (await store.get("VIC")).name_vi == "Công ty Cổ phần VIC"
    assert not await store.exists("BADTICKER")
    # One backoff for BADTICKER between its two attempts
    assert sleep.delays == [1.0]


async def test_batches_pause_between_but_not_after(store, simplize_factory, tickers_file):
    sleep = SleepRecorder()
    client = simplize_factory(summary_handler({t: make_summary(t) for t in UNIVERSE}))
    fetcher = CompanyFetcher(client, sleep=sleep)
    scheduler = ChunkedSyncScheduler(fetcher, store, chunk_delay=0, sleep=sleep)
    pipeline = CompanySyncPipeline(store, client, scheduler, batch_delay=5.0, sleep=sleep)

    stats = await pipeline.run(
        SyncOptions(tickers_file=tickers_file(UNIVERSE[:5]), batch_size=2, concurrency=2)
    )

    assert stats.success == 5
    assert sleep.delays == [5.0, 5.0]


async def test_empty_selection_returns_zeroed_stats(pipeline, tickers_file, sleep_recorder):
    stats = await pipeline.run(SyncOptions(tickers_file=tickers_file(UNIVERSE), tickers=["ZZZ"]))

    assert stats.to_dict() == {
        "total": 0,
        "success": 0,
        "failed": 0,
        "success_rate": 0.0,
        "duration_seconds": 0.0,
        "throughput_per_minute": 0.0,
    }
    assert sleep_recorder.delays == []


async def test_missing_universe_is_fatal(pipeline, tmp_path):
    with pytest.raises(UniverseLoadError):
        await pipeline.run(SyncOptions(tickers_file=str(tmp_path / "missing.json")))


async def test_unreachable_database_is_fatal(tmp_path, simplize_factory):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'no' / 'such' / 'dir.db'}")
    store = CompanyStore(engine)
    sleep = SleepRecorder()
    pipeline = build_pipeline(store, simplize_factory(summary_handler({})), sleep)

    try:
        with pytest.raises(DatabaseError):
            await pipeline.run(SyncOptions())
    finally:
        await engine.dispose()


async def test_failed_source_health_check_only_warns(store, simplize_factory, tickers_file, caplog):
    client = simplize_factory(summary_handler({"FPT": make_summary("FPT")}))
    pipeline = build_pipeline(store, client, SleepRecorder())

    stats = await pipeline.run(SyncOptions(tickers_file=tickers_file(["FPT"])))

    assert stats.success == 1
    assert any("health check" in message for message in caplog.messages)


def test_stats_rates():
    stats = SyncRunStats(total=4, success=3, failed=1, duration_seconds=90.0)
    assert stats.success_rate == 75.0
    assert stats.throughput_per_minute == 2.0
    assert SyncRunStats(total=2, failed=2, duration_seconds=10).throughput_per_minute == 0.0
