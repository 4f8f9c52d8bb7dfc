"""Tests for the Simplize HTTP client."""
import httpx
import pytest

from conftest import make_summary, summary_handler
from iqx.core.exceptions import ProviderError, ProviderHTTPError, ProviderTimeoutError


async def test_requests_profile_json_with_browser_headers(simplize_factory):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"pageProps": {"summary": make_summary("VIC")}})

    client = simplize_factory(handler)
    summary = await client.fetch_summary("vic")

    assert summary["ticker"] == "VIC"
    request = seen[0]
    assert request.url.path.endswith("/co-phieu/VIC/ho-so-doanh-nghiep.json")
    assert request.url.params["ticker"] == "VIC"
    assert "Mozilla" in request.headers["User-Agent"]
    assert request.headers["Accept-Language"].startswith("vi-VN")


@pytest.mark.parametrize(
    "payload",
    [{"pageProps": {}}, {"pageProps": {"summary": None}}, {"notFound": True}, []],
)
async def test_missing_summary_is_no_data(simplize_factory, payload):
    client = simplize_factory(lambda request: httpx.Response(200, json=payload))
    assert await client.fetch_summary("XYZ") is None


async def test_error_status_raises_http_error(simplize_factory):
    client = simplize_factory(lambda request: httpx.Response(503))

    with pytest.raises(ProviderHTTPError) as exc_info:
        await client.fetch_summary("VIC")
    assert exc_info.value.status_code == 503


async def test_timeout_raises_timeout_error(simplize_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = simplize_factory(handler)
    with pytest.raises(ProviderTimeoutError):
        await client.fetch_summary("VIC")


async def test_connection_failure_raises_provider_error(simplize_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = simplize_factory(handler)
    with pytest.raises(ProviderError):
        await client.fetch_summary("VIC")


async def test_malformed_json_raises_provider_error(simplize_factory):
    client = simplize_factory(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(ProviderError, match="Malformed JSON"):
        await client.fetch_summary("VIC")


async def test_health_check(simplize_factory):
    healthy = simplize_factory(summary_handler({"VIC": make_summary("VIC")}))
    empty = simplize_factory(summary_handler({}))
    failing = simplize_factory(lambda request: httpx.Response(500))

    assert await healthy.health_check() is True
    assert await empty.health_check() is False
    assert await failing.health_check() is False
