"""Discord bot front end for the laundry booking service.

The bot owns the periodic status sweep: a :func:`discord.ext.tasks.loop`
re-evaluates every booking against the clock so statuses stay current even
when nobody lists their bookings.  The loop is cancelled when the bot closes.
"""

from __future__ import annotations

import asyncio
from typing import Any

import discord
from discord.ext import commands, tasks

from .config import Settings
from .logging_config import setup_logging
from .notifications import BookingNotifier
from .services import LaundryServices


class LaundryBot(commands.Bot):
    """``discord.py`` bot wired to one set of :class:`LaundryServices`."""

    background_task: tasks.Loop | None

    def __init__(
        self,
        services: LaundryServices,
        settings: Settings | None = None,
        notifier: BookingNotifier | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the bot with the minimal intents required."""
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # Slash commands and components only; message content is not needed.
        intents.message_content = False
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
        )
        self.log = setup_logging()
        self.services = services
        self.settings = settings or Settings(token="")
        self.notifier = notifier
        self.background_task = None

    async def setup_hook(self) -> None:
        """Start the status sweep and sync slash commands."""
        self.background_task = tasks.loop(
            seconds=self.settings.sweep_seconds, reconnect=True
        )(_sweep_booking_statuses)
        self.background_task.start(self)

        tree = getattr(self, "tree", None)
        if tree is not None and not self.settings.sync_per_guild:  # pragma: no cover
            await tree.sync()

        for notice in self.services.store.notices:
            self.log.warning("Store notice: %s", notice)

        await super().setup_hook()

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Sync commands per guild if configured, then report readiness."""
        if self.settings.sync_per_guild:
            for guild in self.guilds:
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
        await self.change_presence(activity=discord.Game(name="Laundry bookings"))
        self.log.info(
            "Logged in as %s (%s)",
            self.user,
            self.user.id if self.user else "?",
        )

    async def close(self) -> None:
        """Stop the sweep and release the notification client."""
        if self.background_task is not None:
            self.background_task.cancel()
        adapter = getattr(self.notifier, "adapter", None)
        if adapter is not None and hasattr(adapter, "close"):
            await adapter.close()
        await super().close()


async def _sweep_booking_statuses(bot: LaundryBot) -> None:
    """Background task bringing booking statuses up to date with the clock."""
    response = await asyncio.to_thread(
        bot.services.bookings.sweep_all_booking_statuses
    )
    if not response.success:
        bot.log.error(
            "Status sweep incomplete: %s (bookings: %s)",
            response.message,
            ", ".join(response.failed_ids) or "-",
        )
    result = response.data
    if result is None or not result.changes:
        return
    bot.log.info("Status sweep applied %d change(s)", len(result.changes))
    if bot.notifier is not None:
        await bot.notifier.notify(result.changes)


__all__ = [
    "LaundryBot",
    "_sweep_booking_statuses",
]
