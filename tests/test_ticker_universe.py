"""Tests for loading the ticker universe."""
import json

import pytest

from iqx.core.exceptions import UniverseLoadError
from iqx.services.ticker_universe import load_tickers, normalize_tickers


def test_loads_and_normalizes(tmp_path):
    path = tmp_path / "tickers.json"
    path.write_text(json.dumps(["vic", " VNM ", "", "fpt", "   "]), encoding="utf-8")

    assert load_tickers(path) == ["VIC", "VNM", "FPT"]


def test_normalize_keeps_order_and_duplicates():
    assert normalize_tickers(["b", "a", "B"]) == ["B", "A", "B"]


@pytest.mark.parametrize(
    "content",
    ["not json", '{"tickers": ["VIC"]}', '"VIC"', '["VIC", 42]'],
)
def test_malformed_files_are_rejected(tmp_path, content):
    path = tmp_path / "tickers.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(UniverseLoadError) as exc_info:
        load_tickers(path)
    assert exc_info.value.path == str(path)


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(UniverseLoadError, match="not found"):
        load_tickers(tmp_path / "nope.json")


def test_empty_array_is_allowed(tmp_path):
    path = tmp_path / "tickers.json"
    path.write_text("[]", encoding="utf-8")
    assert load_tickers(path) == []
