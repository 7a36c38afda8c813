"""Daily and weekly booking quotas, always recomputed from active bookings."""

from __future__ import annotations

import datetime
from enum import Enum

from ..core.errors import ErrorReason, NotFoundError
from ..core.models import Booking, QuotaSummary, User
from ..core.storage import RecordStore


class QuotaDecision(str, Enum):
    ALLOWED = "Allowed"
    DAILY_EXCEEDED = "DailyExceeded"
    WEEKLY_EXCEEDED = "WeeklyExceeded"


def week_start(day: datetime.date) -> datetime.date:
    """Sunday on or before ``day``; weeks run Sunday to Saturday."""
    return day - datetime.timedelta(days=(day.weekday() + 1) % 7)


class QuotaEngine:
    """Read-only quota arbitration over the bookings in ``store``."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def _user(self, user_id: str) -> User:
        user = self.store.get(User, user_id)
        if user is None:
            raise NotFoundError(
                f"User {user_id} not found", ErrorReason.USER_NOT_FOUND
            )
        return user

    def daily_usage(self, user_id: str, day: datetime.date) -> int:
        return len(
            self.store.list(
                Booking,
                lambda b: b.user_id == user_id and b.date == day and b.is_active,
            )
        )

    def weekly_usage(self, user_id: str, reference: datetime.date) -> int:
        first = week_start(reference)
        last = first + datetime.timedelta(days=7)
        return len(
            self.store.list(
                Booking,
                lambda b: b.user_id == user_id
                and first <= b.date < last
                and b.is_active,
            )
        )

    def check_quota(self, user_id: str, day: datetime.date) -> QuotaDecision:
        """Decide whether ``user_id`` may hold one more booking on ``day``.

        Limits are inclusive upper bounds on current usage: a user already at
        the limit is refused.  The daily limit is checked first.  The weekly
        limit applies to the Sunday-to-Saturday week containing ``day`` (the
        booking's date), not to the week of today's date.
        """
        user = self._user(user_id)
        if self.daily_usage(user_id, day) >= user.quota.daily.limit:
            return QuotaDecision.DAILY_EXCEEDED
        if self.weekly_usage(user_id, day) >= user.quota.weekly.limit:
            return QuotaDecision.WEEKLY_EXCEEDED
        return QuotaDecision.ALLOWED

    def summary(self, user_id: str, day: datetime.date) -> QuotaSummary:
        user = self._user(user_id)
        return QuotaSummary(
            daily_used=self.daily_usage(user_id, day),
            daily_limit=user.quota.daily.limit,
            weekly_used=self.weekly_usage(user_id, day),
            weekly_limit=user.quota.weekly.limit,
        )
