"""The service boundary never raises and reports specific reasons."""

import datetime

from laundry_bot.core.errors import ErrorCategory, ErrorReason
from laundry_bot.core.models import BookingStatus, MachineStatus, ReportType, User


def book(services, **overrides):
    payload = {
        "user_id": "u1",
        "machine_id": "M1",
        "date": "2024-06-10",
        "start_time": "09:00",
        "program": "quick",
    }
    payload.update(overrides)
    return services.bookings.create_booking(payload)


def test_login(services) -> None:
    ok = services.auth.login("alice", "pw1")
    assert ok.success and ok.data.id == "u1"
    bad = services.auth.login("alice", "nope")
    assert not bad.success
    assert bad.error is ErrorReason.INVALID_CREDENTIALS
    assert not services.auth.login("zoe", "pw1").success


def test_link_discord_moves_link(services) -> None:
    services.auth.link_discord("u1", 42)
    assert services.auth.user_for_discord(42).data.id == "u1"
    services.auth.link_discord("u2", 42)
    assert services.auth.user_for_discord(42).data.id == "u2"
    assert services.store.get(User, "u1").discord_id is None


def test_update_preferences(services) -> None:
    response = services.auth.update_preferences(
        "u1", {"language": "fr", "notifications": {"push": False}}
    )
    assert response.success
    assert response.data.preferences.language == "fr"
    assert response.data.preferences.notifications.push is False
    missing = services.auth.update_preferences("nobody", {})
    assert missing.error is ErrorReason.USER_NOT_FOUND


def test_daily_quota_scenario(services) -> None:
    assert book(services, start_time="09:00").success
    assert book(services, start_time="10:00").success
    third = book(services, start_time="11:00")
    assert not third.success
    assert third.error is ErrorReason.DAILY_QUOTA_EXCEEDED
    assert third.error.category is ErrorCategory.QUOTA_EXCEEDED


def test_slot_scenario(services) -> None:
    first = book(services)
    assert first.success
    again = book(services, user_id="u2")
    assert again.error is ErrorReason.SLOT_UNAVAILABLE
    assert services.bookings.cancel_booking(first.data.id).success
    assert book(services, user_id="u2").success


def test_status_scenario(services, clock) -> None:
    booking = book(services, start_time="10:00", program="normal").data
    assert booking.duration == 45
    for moment, expected in [
        ((9, 59), BookingStatus.UPCOMING),
        ((10, 20), BookingStatus.IN_PROGRESS),
        ((10, 46), BookingStatus.COMPLETED),
    ]:
        clock.set(datetime.datetime(2024, 6, 10, *moment))
        listed = services.bookings.get_user_bookings("u1").data
        assert listed[0].status is expected


def test_modify_scenario(services, clock) -> None:
    upcoming = book(services).data
    done = book(services, start_time="06:00").data
    clock.set(datetime.datetime(2024, 6, 10, 8, 30))

    refused = services.bookings.modify_booking(done.id, {"program": "heavy"})
    assert not refused.success
    assert refused.error is ErrorReason.INVALID_STATE

    changed = services.bookings.modify_booking(upcoming.id, {"program": "heavy"})
    assert changed.success
    assert changed.data.duration == 60
    assert changed.data.verification_code == upcoming.verification_code
    assert changed.data.status is BookingStatus.UPCOMING


def test_malformed_input_is_invalid_input(services) -> None:
    response = book(services, date="next tuesday")
    assert not response.success
    assert response.error is ErrorReason.INVALID_INPUT
    check = services.bookings.check_availability("M1", "2024-13-40", "09:00")
    assert check.error is ErrorReason.INVALID_INPUT


def test_unknown_program_reason(services) -> None:
    assert book(services, program="spin").error is ErrorReason.INVALID_PROGRAM


def test_check_availability(services) -> None:
    assert services.bookings.check_availability("M1", "2024-06-10", "09:00").data is True
    book(services)
    assert services.bookings.check_availability("M1", "2024-06-10", "09:00").data is False


def test_not_found_reasons(services) -> None:
    assert services.bookings.cancel_booking("nope").error is ErrorReason.NOT_FOUND
    assert services.bookings.modify_booking("nope", {}).error is ErrorReason.NOT_FOUND
    assert services.machines.get_machine_status("M9").error is ErrorReason.MACHINE_NOT_FOUND
    assert services.bookings.free_slots("M9", "2024-06-10").error is ErrorReason.MACHINE_NOT_FOUND


def test_sweep_partial_failure(services, clock, monkeypatch) -> None:
    booking = book(services).data
    clock.set(datetime.datetime(2024, 6, 10, 9, 5))

    def refuse(*_args, **_kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("laundry_bot.core.storage.os.replace", refuse)
    response = services.bookings.sweep_all_booking_statuses()
    assert not response.success
    assert response.error is ErrorReason.PARTIAL_FAILURE
    assert response.failed_ids == [booking.id]


def test_sweep_success(services, clock) -> None:
    book(services)
    clock.set(datetime.datetime(2024, 6, 10, 9, 5))
    response = services.bookings.sweep_all_booking_statuses()
    assert response.success
    assert response.data.changes[0].current is BookingStatus.IN_PROGRESS


def test_storage_failure_reason(services, monkeypatch) -> None:
    def refuse(*_args, **_kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("laundry_bot.core.storage.os.replace", refuse)
    assert book(services).error is ErrorReason.STORAGE_FAILURE


def test_quota_summary_defaults_to_today(services) -> None:
    book(services)
    summary = services.bookings.quota_summary("u1").data
    assert summary.daily_used == 1
    assert summary.weekly_limit == 5


def test_free_slots(services) -> None:
    book(services)
    slots = services.bookings.free_slots("M1", "2024-06-10").data
    taken = [s.time.hour for s in slots if not s.available]
    # 06:00 and 07:00 have passed at 08:00, 09:00 is booked
    assert taken == [6, 7, 9]


def test_machine_status_updates(services) -> None:
    response = services.machines.update_machine_status("M2", "error", "Drum stuck")
    assert response.data.status is MachineStatus.ERROR
    assert services.machines.get_machine_status("M2").data.error == "Drum stuck"
    bad = services.machines.update_machine_status("M2", "exploded")
    assert bad.error is ErrorReason.INVALID_INPUT
    assert len(services.machines.get_all_machines().data) == 2


def test_reports(services, clock) -> None:
    created = services.reports.create_report(
        {
            "type": "machine",
            "reporter_id": "u1",
            "machine_id": "M1",
            "issue_type": "leaking",
            "description": "Water under the door",
            "urgency": "high",
        }
    )
    assert created.success
    assert created.data.created_at == clock.now()
    assert [r.id for r in services.reports.get_user_reports("u1").data] == [created.data.id]
    assert services.reports.get_machine_reports("M1").data[0].type is ReportType.MACHINE

    missing_target = services.reports.create_report(
        {"type": "user", "reporter_id": "u1", "issue_type": "x", "description": "y"}
    )
    assert missing_target.error is ErrorReason.INVALID_INPUT
    unknown_machine = services.reports.create_report(
        {
            "type": "machine",
            "reporter_id": "u1",
            "machine_id": "M9",
            "issue_type": "x",
            "description": "y",
        }
    )
    assert unknown_machine.error is ErrorReason.MACHINE_NOT_FOUND


def test_closed_store_is_storage_failure(services) -> None:
    services.store.close()
    response = book(services)
    assert not response.success
    assert response.error is ErrorReason.STORAGE_FAILURE
    listed = services.bookings.get_user_bookings("u1")
    assert listed.error is ErrorReason.STORAGE_FAILURE
