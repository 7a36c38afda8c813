"""Base adapter interface for delivering notifications to a chat platform."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Adapter(ABC):
    """Abstract adapter for communication platforms."""

    @abstractmethod
    async def send_message(self, channel_id: str, content: str) -> None:
        """Send ``content`` to the specified ``channel_id``."""

    @abstractmethod
    async def open_direct_channel(self, user_id: str) -> str:
        """Open (or reuse) a private channel with ``user_id`` and return its id."""
