"""Tests for the :mod:`laundry_bot.adapters.discord` module."""

import asyncio
from typing import Any

import httpx
import pytest

from laundry_bot.adapters.discord import DiscordAdapter


def run(coro: Any) -> Any:
    """Run an async coroutine synchronously for tests."""
    return asyncio.run(coro)


def test_send_message_makes_correct_request() -> None:
    """Ensure ``send_message`` posts the expected payload."""
    captured: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json={"id": "123"})

    transport = httpx.MockTransport(handler)
    client = httpx.AsyncClient(transport=transport)
    adapter = DiscordAdapter("TOKEN", client=client)

    run(adapter.send_message("chan", "hello"))

    request = captured["request"]
    assert request.headers["Authorization"] == "Bot TOKEN"
    assert request.url.path.endswith("/channels/chan/messages")


def test_open_direct_channel_is_cached() -> None:
    """The DM channel is created once per user."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/users/@me/channels")
        calls.append(request)
        return httpx.Response(200, json={"id": "555"})

    transport = httpx.MockTransport(handler)
    client = httpx.AsyncClient(transport=transport)
    adapter = DiscordAdapter("TOKEN", client=client)

    async def scenario() -> tuple[str, str]:
        first = await adapter.open_direct_channel("42")
        second = await adapter.open_direct_channel("42")
        await adapter.close()
        return first, second

    assert run(scenario()) == ("555", "555")
    assert len(calls) == 1


def test_http_errors_are_raised() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(403))
    adapter = DiscordAdapter("TOKEN", client=httpx.AsyncClient(transport=transport))
    with pytest.raises(httpx.HTTPStatusError):
        run(adapter.send_message("chan", "hello"))
