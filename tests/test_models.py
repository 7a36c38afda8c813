"""Validation rules of the record models."""

import datetime

import pytest
from pydantic import ValidationError

from laundry_bot.core.models import (
    Booking,
    BookingStatus,
    BookingUpdate,
    Machine,
    MachineStatus,
    Report,
    ReportType,
    User,
)


def make_booking(**overrides) -> Booking:
    fields = dict(
        user_id="u1",
        machine_id="M1",
        date="2024-06-10",
        start_time="09:00",
        duration=30,
        program="quick",
        verification_code="123456",
    )
    fields.update(overrides)
    return Booking(**fields)


def test_booking_parses_iso_date_and_time() -> None:
    booking = make_booking()
    assert booking.date == datetime.date(2024, 6, 10)
    assert booking.start_time == datetime.time(9, 0)
    assert booking.status is BookingStatus.UPCOMING
    assert booking.slot == ("M1", datetime.date(2024, 6, 10), datetime.time(9, 0))
    assert booking.is_active


def test_booking_ids_are_unique() -> None:
    assert make_booking().id != make_booking().id


def test_unknown_status_is_rejected() -> None:
    with pytest.raises(ValidationError):
        make_booking(status="finished")


@pytest.mark.parametrize("code", ["12345", "1234567", "abcdef"])
def test_verification_code_must_be_six_digits(code: str) -> None:
    with pytest.raises(ValidationError):
        make_booking(verification_code=code)


def test_duration_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        make_booking(duration=0)


def test_cancelled_booking_is_inactive() -> None:
    assert not make_booking(status="cancelled").is_active


def test_machine_status_values() -> None:
    machine = Machine(name="Washer", status="in-use")
    assert machine.status is MachineStatus.IN_USE
    with pytest.raises(ValidationError):
        Machine(name="Washer", status="broken")


def test_user_defaults() -> None:
    user = User(username="carol", secret="x")
    assert user.quota.daily.limit == 2
    assert user.quota.weekly.limit == 5
    assert user.preferences.language == "en"
    assert user.discord_id is None


def test_legacy_quota_usage_counters_are_dropped() -> None:
    user = User.model_validate(
        {
            "username": "carol",
            "secret": "x",
            "quota": {"daily": {"limit": 3, "used": 2}, "weekly": {"limit": 4, "used": 1}},
        }
    )
    assert user.quota.daily.limit == 3
    assert "used" not in user.model_dump()["quota"]["daily"]


def test_negative_quota_limit_rejected() -> None:
    with pytest.raises(ValidationError):
        User.model_validate(
            {"username": "c", "secret": "x", "quota": {"daily": {"limit": -1}}}
        )


def test_machine_report_requires_machine() -> None:
    now = datetime.datetime(2024, 6, 10, 8)
    with pytest.raises(ValidationError):
        Report(
            type=ReportType.MACHINE,
            reporter_id="u1",
            issue_type="leak",
            description="water on floor",
            created_at=now,
        )
    report = Report(
        type=ReportType.USER,
        reporter_id="u1",
        reported_user_id="u2",
        issue_type="time-violation",
        description="left laundry",
        created_at=now,
    )
    assert report.status.value == "pending"


def test_booking_update_ignores_protected_fields() -> None:
    update = BookingUpdate.model_validate(
        {"program": "heavy", "status": "completed", "verification_code": "000000"}
    )
    assert update.program == "heavy"
    assert "status" not in update.model_dump()
