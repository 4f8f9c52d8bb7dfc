"""
Company Sync CLI

Syncs Simplize company summaries into the database.
Run with: python -m iqx.cli.sync --batch-size 200 --skip-existing
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from iqx.core.config import settings
from iqx.core.database import build_engine, create_session_factory
from iqx.core.exceptions import IQXException
from iqx.core.logging_config import setup_logging
from iqx.providers.simplize.client import SimplizeClient
from iqx.services.company_fetcher import CompanyFetcher
from iqx.services.company_store import CompanyStore
from iqx.services.sync_pipeline import CompanySyncPipeline, SyncOptions, SyncRunStats
from iqx.services.sync_scheduler import ChunkedSyncScheduler

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="IQX company sync from Simplize")
    parser.add_argument("--batch-size", type=int, default=None, help="Tickers per batch (default: all)")
    parser.add_argument("--start", type=int, default=None, help="First universe index (inclusive)")
    parser.add_argument("--end", type=int, default=None, help="Last universe index (exclusive)")
    parser.add_argument("--tickers", type=str, default=None, help="Comma-separated tickers to sync")
    parser.add_argument("--skip-existing", action="store_true", help="Skip tickers already stored")
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.sync_concurrency,
        help=f"Concurrent fetches per chunk (default: {settings.sync_concurrency})",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=settings.sync_max_retries,
        help=f"Attempts per ticker (default: {settings.sync_max_retries})",
    )
    parser.add_argument("--tickers-file", type=str, default=None, help="Path to the tickers JSON file")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> SyncOptions:
    tickers = None
    if args.tickers:
        tickers = [t.strip() for t in args.tickers.split(",") if t.strip()]

    return SyncOptions(
        tickers_file=args.tickers_file,
        batch_size=args.batch_size,
        start=args.start,
        end=args.end,
        tickers=tickers,
        skip_existing=args.skip_existing,
        concurrency=args.workers,
        max_attempts=args.max_retries,
    )


async def run_sync(options: SyncOptions) -> SyncRunStats:
    """Wire the pipeline from settings, run it, and release resources."""
    engine = build_engine()
    store = CompanyStore(engine, create_session_factory(engine))
    client = SimplizeClient()
    try:
        fetcher = CompanyFetcher(client)
        scheduler = ChunkedSyncScheduler(fetcher, store)
        pipeline = CompanySyncPipeline(store, client, scheduler)
        return await pipeline.run(options)
    finally:
        await client.aclose()
        await engine.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    for name in ("batch_size", "workers", "max_retries"):
        value = getattr(args, name)
        if value is not None and value < 1:
            parser.error(f"--{name.replace('_', '-')} must be at least 1")
    for name in ("start", "end"):
        value = getattr(args, name)
        if value is not None and value < 0:
            parser.error(f"--{name} must not be negative")

    setup_logging(level=args.log_level)

    try:
        asyncio.run(run_sync(options_from_args(args)))
    except IQXException as e:
        logger.error(f"Sync failed: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Sync interrupted")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
