"""
Ticker universe loading.

The universe is a JSON file holding a flat array of ticker strings.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from iqx.core.exceptions import UniverseLoadError

logger = logging.getLogger(__name__)


def normalize_tickers(tickers: List[str]) -> List[str]:
    """Upper-case and strip tickers, dropping blanks. Order is kept."""
    normalized = []
    for ticker in tickers:
        ticker = ticker.strip().upper()
        if ticker:
            normalized.append(ticker)
    return normalized


def load_tickers(path: Union[str, Path]) -> List[str]:
    """
    Load and normalize the ticker universe.

    Raises:
        UniverseLoadError: If the file is missing, is not valid JSON, or is
            not an array of strings
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise UniverseLoadError(f"Tickers file not found: {path}", path=str(path)) from e
    except OSError as e:
        raise UniverseLoadError(f"Cannot read tickers file {path}: {e}", path=str(path)) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise UniverseLoadError(f"Invalid JSON in {path}: {e}", path=str(path)) from e

    if not isinstance(data, list):
        raise UniverseLoadError(f"Tickers file {path} must contain a JSON array", path=str(path))
    if not all(isinstance(item, str) for item in data):
        raise UniverseLoadError(f"Tickers file {path} must contain only strings", path=str(path))

    tickers = normalize_tickers(data)
    logger.info(f"Loaded {len(tickers)} tickers from {path}")
    return tickers
