"""Discord adapter implementing the :class:`~laundry_bot.adapters.base.Adapter`.

Notifications are sent straight through Discord's HTTP API with :mod:`httpx`
so they can be delivered from the background sweep without going through
the gateway client.
"""

from __future__ import annotations

from typing import Any

import httpx

from .base import Adapter


class DiscordAdapter(Adapter):
    """Adapter that sends requests directly to the Discord HTTP API."""

    api_base = "https://discord.com/api/v10"

    def __init__(self, token: str, client: httpx.AsyncClient | None = None) -> None:
        """Store authentication ``token`` and optional HTTP ``client``."""
        self.token = token
        self.client = client or httpx.AsyncClient(timeout=10.0)
        self._dm_channels: dict[str, str] = {}

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self.token}"}

    # ------------------------------------------------------------------
    async def send_message(self, channel_id: str, content: str) -> None:
        """Send a message to a channel.

        Parameters
        ----------
        channel_id:
            Identifier of the Discord channel.
        content:
            Message body to send.

        """
        url = f"{self.api_base}/channels/{channel_id}/messages"
        response = await self.client.post(
            url, json={"content": content}, headers=self.headers
        )
        response.raise_for_status()

    async def open_direct_channel(self, user_id: str) -> str:
        """Return the DM channel id for ``user_id``, creating it on first use."""
        cached = self._dm_channels.get(user_id)
        if cached is not None:
            return cached
        url = f"{self.api_base}/users/@me/channels"
        response = await self.client.post(
            url, json={"recipient_id": user_id}, headers=self.headers
        )
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        channel_id = str(data["id"])
        self._dm_channels[user_id] = channel_id
        return channel_id

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()
