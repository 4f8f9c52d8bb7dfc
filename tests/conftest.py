"""
Shared test fixtures.

Provides a file-backed SQLite engine per test, the company store, a
Simplize client driven by ``httpx.MockTransport`` and an ASGI test client.
"""
import os
from datetime import datetime, timedelta
from typing import Any, AsyncGenerator, Callable, Dict, List

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# Set environment variables for testing BEFORE importing anything
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./iqx_test.db"
os.environ["LOG_FORMAT"] = "text"
os.environ["DEBUG"] = "false"

from iqx.api.main import create_app
from iqx.core.database import build_engine, create_session_factory, init_database
from iqx.providers.simplize.client import SimplizeClient
from iqx.services.company_store import CompanyStore

SIMPLIZE_TEST_URL = "http://simplize.test/_next/data/build-id"


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TickingClock:
    """Naive UTC clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 3, 5, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


def make_summary(ticker: str, **overrides: Any) -> Dict[str, Any]:
    """A realistic ``pageProps.summary`` payload."""
    summary = {
        "id": 1,
        "ticker": ticker,
        "nameVi": f"Công ty Cổ phần {ticker}",
        "nameEn": f"{ticker} Joint Stock Company",
        "industryActivity": "Bất động sản",
        "bcIndustryGroupId": 8633,
        "bcIndustryGroupSlug": "bat-dong-san",
        "bcIndustryGroupCode": "8633",
        "bcIndustryGroupType": "ICB",
        "bcEconomicSectorId": 8,
        "bcEconomicSectorSlug": "tai-chinh",
        "bcEconomicSectorName": "Tài chính",
        "stockExchange": "HOSE",
        "type": "STOCK",
        "country": "VN",
        "website": "https://example.vn",
        "marketCap": 150_000_000_000_000,
        "priceClose": 40_000,
        "priceOpen": 39_500,
        "priceHigh": 40_500,
        "priceLow": 39_000,
        "priceFloor": 37_000,
        "priceCeiling": 42_500,
        "priceReferrance": 39_750,
        "netChange": 250,
        "pctChange": 0.63,
        "volume": 2_500_000,
        "volume10dAvg": 3_100_000,
        "priceTimeStamp": "05/03/2024 09:30:00",
        "priceType": 1,
        "peRatio": 12.5,
        "pbRatio": 1.4,
        "roe": 11.2,
        "roa": 3.1,
        "beta5y": 1.1,
        "pricePctChgYtd": -4.2,
        "valuationPoint": 3,
        "growthPoint": 2,
        "companyQuality": 4,
        "overallRiskLevel": "Cao",
        "qualityValuation": "BC",
        "taSignal1d": "Mua",
        "watchlistCount": 1520,
        "analysisUpdated": "01/03/2024",
    }
    summary.update(overrides)
    return summary


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database file with the schema created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_database(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(engine, session_factory) -> CompanyStore:
    return CompanyStore(engine, session_factory, clock=TickingClock())


@pytest.fixture
async def simplize_factory() -> AsyncGenerator[Callable[..., SimplizeClient], None]:
    """
    Build ``SimplizeClient`` instances served by a request handler.

    The handler receives the ``httpx.Request`` and returns an ``httpx.Response``.
    """
    http_clients: List[httpx.AsyncClient] = []

    def factory(handler) -> SimplizeClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        http_clients.append(http_client)
        return SimplizeClient(base_url=SIMPLIZE_TEST_URL, http_client=http_client)

    yield factory

    for http_client in http_clients:
        await http_client.aclose()


def ticker_from_request(request: httpx.Request) -> str:
    return request.url.params["ticker"]


def summary_handler(known: Dict[str, Dict[str, Any]]):
    """Handler answering known tickers and an empty pageProps otherwise."""

    def handler(request: httpx.Request) -> httpx.Response:
        ticker = ticker_from_request(request)
        if ticker in known:
            return httpx.Response(200, json={"pageProps": {"summary": known[ticker]}})
        return httpx.Response(200, json={"pageProps": {}})

    return handler


@pytest.fixture
async def api_client(engine) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI test client bound to the test engine."""
    app = create_app(engine=engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
