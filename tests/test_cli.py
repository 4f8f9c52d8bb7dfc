"""Tests for the sync CLI."""
import pytest

from iqx.cli import sync as sync_cli
from iqx.core.exceptions import UniverseLoadError
from iqx.services.sync_pipeline import SyncRunStats


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(sync_cli, "setup_logging", lambda **kwargs: None)


def test_arguments_map_to_options():
    args = sync_cli.build_parser().parse_args(
        [
            "--batch-size", "50",
            "--start", "10",
            "--end", "20",
            "--tickers", "vic, vnm,,fpt",
            "--skip-existing",
            "--workers", "16",
            "--max-retries", "5",
            "--tickers-file", "universe.json",
        ]
    )
    options = sync_cli.options_from_args(args)

    assert options.batch_size == 50
    assert options.start == 10
    assert options.end == 20
    assert options.tickers == ["vic", "vnm", "fpt"]
    assert options.skip_existing is True
    assert options.concurrency == 16
    assert options.max_attempts == 5
    assert options.tickers_file == "universe.json"


def test_defaults():
    options = sync_cli.options_from_args(sync_cli.build_parser().parse_args([]))

    assert options.batch_size is None
    assert options.tickers is None
    assert options.skip_existing is False
    assert options.concurrency == 128
    assert options.max_attempts == 3


def test_exit_zero_on_completion(monkeypatch):
    seen = []

    async def fake_run(options):
        seen.append(options)
        return SyncRunStats(total=1, success=1)

    monkeypatch.setattr(sync_cli, "run_sync", fake_run)

    assert sync_cli.main(["--tickers", "VIC"]) == 0
    assert seen[0].tickers == ["VIC"]


def test_exit_one_on_fatal_error(monkeypatch):
    async def fake_run(options):
        raise UniverseLoadError("Tickers file not found: x.json", path="x.json")

    monkeypatch.setattr(sync_cli, "run_sync", fake_run)

    assert sync_cli.main([]) == 1


@pytest.mark.parametrize("argv", [["--workers", "0"], ["--max-retries", "0"], ["--start", "-1"]])
def test_rejects_invalid_numbers(argv):
    with pytest.raises(SystemExit):
        sync_cli.main(argv)
