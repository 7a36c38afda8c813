"""Quota arbitration over active bookings."""

import datetime

import pytest

from laundry_bot.booking.quota import QuotaDecision, QuotaEngine, week_start
from laundry_bot.core.errors import NotFoundError
from laundry_bot.core.models import Booking, QuotaLimit, User
from laundry_bot.core.storage import RecordStore

MONDAY = datetime.date(2024, 6, 10)


def add(
    store: RecordStore,
    day: datetime.date,
    hour: int,
    user: str = "u1",
    status: str = "upcoming",
) -> None:
    store.upsert(
        Booking(
            user_id=user,
            machine_id="M1",
            date=day,
            start_time=datetime.time(hour),
            duration=30,
            program="quick",
            status=status,
            verification_code="111111",
        )
    )


@pytest.mark.parametrize(
    "day, expected",
    [
        (datetime.date(2024, 6, 9), datetime.date(2024, 6, 9)),  # Sunday
        (datetime.date(2024, 6, 10), datetime.date(2024, 6, 9)),
        (datetime.date(2024, 6, 15), datetime.date(2024, 6, 9)),  # Saturday
        (datetime.date(2024, 6, 16), datetime.date(2024, 6, 16)),
    ],
)
def test_week_starts_on_sunday(day, expected) -> None:
    assert week_start(day) == expected


def test_daily_limit_reached(store: RecordStore) -> None:
    engine = QuotaEngine(store)
    add(store, MONDAY, 9)
    assert engine.check_quota("u1", MONDAY) is QuotaDecision.ALLOWED
    add(store, MONDAY, 10)
    assert engine.check_quota("u1", MONDAY) is QuotaDecision.DAILY_EXCEEDED
    # another day in the same week is still fine
    tuesday = MONDAY + datetime.timedelta(days=1)
    assert engine.check_quota("u1", tuesday) is QuotaDecision.ALLOWED


def test_weekly_limit_reached(store: RecordStore) -> None:
    engine = QuotaEngine(store)
    for offset in range(5):
        add(store, datetime.date(2024, 6, 9) + datetime.timedelta(days=offset), 9)
    assert engine.weekly_usage("u1", MONDAY) == 5
    saturday = datetime.date(2024, 6, 15)
    assert engine.check_quota("u1", saturday) is QuotaDecision.WEEKLY_EXCEEDED
    # the next week starts fresh
    assert engine.check_quota("u1", datetime.date(2024, 6, 16)) is QuotaDecision.ALLOWED


def test_daily_checked_before_weekly(store: RecordStore) -> None:
    engine = QuotaEngine(store)
    add(store, MONDAY, 9, user="u2")
    # bob: daily 1 and weekly 3; daily is already at its limit
    assert engine.check_quota("u2", MONDAY) is QuotaDecision.DAILY_EXCEEDED


def test_cancelled_bookings_do_not_count(store: RecordStore) -> None:
    engine = QuotaEngine(store)
    add(store, MONDAY, 9, status="cancelled")
    add(store, MONDAY, 10, status="completed")
    assert engine.daily_usage("u1", MONDAY) == 1


def test_zero_limit_always_refuses(store: RecordStore) -> None:
    user = store.get(User, "u1")
    quota = user.quota.model_copy(update={"daily": QuotaLimit(limit=0)})
    store.upsert(user.model_copy(update={"quota": quota}))
    assert QuotaEngine(store).check_quota("u1", MONDAY) is QuotaDecision.DAILY_EXCEEDED


def test_unknown_user(store: RecordStore) -> None:
    with pytest.raises(NotFoundError):
        QuotaEngine(store).check_quota("nobody", MONDAY)


def test_summary(store: RecordStore) -> None:
    add(store, MONDAY, 9)
    add(store, MONDAY + datetime.timedelta(days=2), 9)
    summary = QuotaEngine(store).summary("u1", MONDAY)
    assert (summary.daily_used, summary.daily_limit) == (1, 2)
    assert (summary.weekly_used, summary.weekly_limit) == (2, 5)
