"""Slot-exact availability of machines.

A slot is the discrete ``(machine, date, start time)`` triple.  Durations are
not compared, so overlapping bookings with different start times count as
separate slots.
"""

from __future__ import annotations

import datetime

from ..core.models import Booking, TimeSlot
from ..core.storage import RecordStore

# Bookable hours shown to users: 06:00 through 22:00.
FIRST_HOUR = 6
LAST_HOUR = 22


def day_grid() -> list[datetime.time]:
    return [datetime.time(hour) for hour in range(FIRST_HOUR, LAST_HOUR + 1)]


class AvailabilityChecker:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def is_available(
        self,
        machine_id: str,
        day: datetime.date,
        start_time: datetime.time,
        exclude_booking_id: str | None = None,
    ) -> bool:
        """True iff no active booking other than ``exclude_booking_id`` holds the slot."""
        return not self.store.list(
            Booking,
            lambda b: b.machine_id == machine_id
            and b.date == day
            and b.start_time == start_time
            and b.is_active
            and b.id != exclude_booking_id,
        )

    def free_slots(
        self, machine_id: str, day: datetime.date, now: datetime.datetime
    ) -> list[TimeSlot]:
        """The hourly grid for ``day``; past or taken slots are unavailable."""
        taken = {
            b.start_time
            for b in self.store.list(
                Booking,
                lambda b: b.machine_id == machine_id and b.date == day and b.is_active,
            )
        }
        slots = []
        for start in day_grid():
            begins = datetime.datetime.combine(day, start, tzinfo=now.tzinfo)
            slots.append(
                TimeSlot(time=start, available=begins >= now and start not in taken)
            )
        return slots
