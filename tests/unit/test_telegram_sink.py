from __future__ import annotations

import json

import httpx
import pytest

from sms_relay.infrastructure.delivery.telegram import TelegramDeliverySink
from tests.conftest import make_message


def _sink(handler) -> tuple[TelegramDeliverySink, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    sink = TelegramDeliverySink(
        client,
        "123:abc",
        "-100500",
        base_url="https://telegram.test/",
    )
    return sink, client


@pytest.mark.asyncio
async def test_send_posts_html_message():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    sink, client = _sink(handler)
    async with client:
        ok = await sink.send(make_message(body="code 4242"))

    assert ok is True
    assert len(seen) == 1
    assert str(seen[0].url) == "https://telegram.test/bot123:abc/sendMessage"
    payload = json.loads(seen[0].content)
    assert payload["chat_id"] == "-100500"
    assert payload["parse_mode"] == "HTML"
    assert "<code>4242</code>" in payload["text"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 429, 500, 502])
async def test_non_success_status_is_failure(status):
    sink, client = _sink(lambda request: httpx.Response(status, text="nope"))
    async with client:
        assert await sink.send(make_message()) is False


@pytest.mark.asyncio
async def test_transport_error_is_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    sink, client = _sink(handler)
    async with client:
        assert await sink.send(make_message()) is False


@pytest.mark.asyncio
async def test_timeout_is_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    sink, client = _sink(handler)
    async with client:
        assert await sink.send(make_message()) is False


@pytest.mark.asyncio
async def test_send_makes_a_single_attempt():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    sink, client = _sink(handler)
    async with client:
        await sink.send(make_message())

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_closed_client_is_failure():
    sink, client = _sink(lambda request: httpx.Response(200))
    await client.aclose()

    assert await sink.send(make_message()) is False
