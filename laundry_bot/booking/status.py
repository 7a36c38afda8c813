"""Derive a booking's lifecycle status from its scheduled window."""

from __future__ import annotations

import datetime

from ..core.models import Booking, BookingStatus

_ORDER = {
    BookingStatus.UPCOMING: 0,
    BookingStatus.IN_PROGRESS: 1,
    BookingStatus.COMPLETED: 2,
}


def slot_window(
    booking: Booking, tz: datetime.tzinfo | None = None
) -> tuple[datetime.datetime, datetime.datetime]:
    """Return the ``(start, end)`` datetimes of ``booking``'s slot."""
    start = datetime.datetime.combine(booking.date, booking.start_time, tzinfo=tz)
    return start, start + datetime.timedelta(minutes=booking.duration)


def evaluate_status(booking: Booking, now: datetime.datetime) -> BookingStatus:
    """Status of ``booking`` at ``now``.

    Cancelled is terminal.  Otherwise the result depends only on the slot
    window: before the start it is upcoming, inside ``[start, end)`` it is
    in progress and from the end onwards it is completed.  The slot is read
    as wall-clock time in ``now``'s timezone.
    """
    if booking.status is BookingStatus.CANCELLED:
        return BookingStatus.CANCELLED
    start, end = slot_window(booking, now.tzinfo)
    if now < start:
        return BookingStatus.UPCOMING
    if now < end:
        return BookingStatus.IN_PROGRESS
    return BookingStatus.COMPLETED


def is_forward(previous: BookingStatus, current: BookingStatus) -> bool:
    """True when moving from ``previous`` to ``current`` never goes back."""
    if previous is BookingStatus.CANCELLED:
        return current is BookingStatus.CANCELLED
    if current is BookingStatus.CANCELLED:
        return previous is BookingStatus.UPCOMING
    return _ORDER[current] >= _ORDER[previous]
