from __future__ import annotations

import asyncio

from .adapters.discord import DiscordAdapter
from .bot import LaundryBot
from .commands.register import register_commands
from .config import load_settings
from .core.clock import SystemClock
from .core.storage import RecordStore
from .logging_config import setup_logging
from .notifications import BookingNotifier
from .services import build_services


def main() -> int:
    settings = load_settings()
    log = setup_logging(settings.log_level)
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    store = RecordStore(settings.data_path)
    store.open()
    services = build_services(store, SystemClock.from_name(settings.timezone))
    notifier = BookingNotifier(DiscordAdapter(settings.token), store)
    bot = LaundryBot(services, settings=settings, notifier=notifier)
    register_commands(bot, services)

    async def runner():
        try:
            async with bot:
                await bot.start(settings.token)
        except KeyboardInterrupt:
            log.info("Shutting down...")
        return 0

    try:
        return asyncio.run(runner())
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
