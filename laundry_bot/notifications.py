"""Direct-message notifications for booking status changes."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from .adapters.base import Adapter
from .core.models import BookingStatus, Machine, StatusChange, User
from .core.storage import RecordStore

log = logging.getLogger("laundry.notifications")


class BookingNotifier:
    """Tell linked users when their booking starts or their wash is done.

    Only users with a linked Discord account and push notifications enabled
    are messaged; ``booking_reminder`` and ``washing_complete`` gate the two
    message kinds.  Delivery is best effort and never touches booking state.
    """

    def __init__(self, adapter: Adapter, store: RecordStore) -> None:
        self.adapter = adapter
        self.store = store

    def message_for(self, change: StatusChange, user: User) -> str | None:
        prefs = user.preferences.notifications
        if user.discord_id is None or not prefs.push:
            return None
        machine = self.store.get(Machine, change.machine_id)
        name = machine.name if machine else change.machine_id
        if change.current is BookingStatus.IN_PROGRESS and prefs.booking_reminder:
            return f"Your booking on {name} has started."
        if change.current is BookingStatus.COMPLETED and prefs.washing_complete:
            return f"Your wash on {name} is complete. Please collect your laundry."
        return None

    async def notify(self, changes: Iterable[StatusChange]) -> int:
        """Send messages for ``changes``; return how many were delivered."""
        sent = 0
        for change in changes:
            user = self.store.get(User, change.user_id)
            if user is None:
                continue
            content = self.message_for(change, user)
            if content is None:
                continue
            try:
                channel_id = await self.adapter.open_direct_channel(str(user.discord_id))
                await self.adapter.send_message(channel_id, content)
            except httpx.HTTPError as exc:
                log.warning(
                    "Could not notify user %s about booking %s: %s",
                    user.id,
                    change.booking_id,
                    exc,
                )
                continue
            sent += 1
        return sent
