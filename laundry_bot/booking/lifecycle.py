"""Create, modify and cancel bookings; keep their status in step with the clock."""

from __future__ import annotations

import datetime
import logging
import secrets

from ..core.catalog import ProgramCatalog
from ..core.clock import Clock
from ..core.errors import (
    ErrorReason,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    QuotaExceededError,
    SlotUnavailableError,
    StorageError,
)
from ..core.models import (
    Booking,
    BookingRequest,
    BookingStatus,
    BookingUpdate,
    Machine,
    Program,
    StatusChange,
    SweepResult,
    User,
)
from ..core.storage import RecordStore
from .availability import AvailabilityChecker
from .locks import KeyedLocks
from .quota import QuotaDecision, QuotaEngine, week_start
from .status import evaluate_status, is_forward, slot_window

log = logging.getLogger("laundry.booking")

# Statuses the clock can still move.
_OPEN = (BookingStatus.UPCOMING, BookingStatus.IN_PROGRESS)


def generate_verification_code() -> str:
    """Uniform six-digit code in ``100000..999999``."""
    return str(100000 + secrets.randbelow(900000))


def _slot_key(machine_id: str, day: datetime.date, start: datetime.time) -> tuple:
    return ("slot", machine_id, day, start)


def _quota_key(user_id: str, day: datetime.date) -> tuple:
    # Daily usage is a subset of the week, so one key per user-week covers both.
    return ("quota", user_id, week_start(day))


def _booking_key(booking_id: str) -> tuple:
    return ("booking", booking_id)


class BookingLifecycleManager:
    """The only component that writes bookings.

    Every check-then-act sequence runs while holding the keys it depends on:
    the slot for availability, the user-week for quota and the booking id
    for status changes.  Concurrent callers touching the same keys are
    therefore serialised, while unrelated bookings proceed in parallel.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock,
        catalog: ProgramCatalog | None = None,
        quota: QuotaEngine | None = None,
        availability: AvailabilityChecker | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.catalog = catalog or ProgramCatalog()
        self.quota = quota or QuotaEngine(store)
        self.availability = availability or AvailabilityChecker(store)
        self._locks = KeyedLocks()

    # ------------------------------------------------------------------
    # Internal helpers
    def _booking(self, booking_id: str) -> Booking:
        booking = self.store.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def _program(self, key: str) -> Program:
        program = self.catalog.get(key)
        if program is None:
            raise InvalidInputError(
                f"Unknown program '{key}'", ErrorReason.INVALID_PROGRAM
            )
        return program

    def _sync_status(self, booking: Booking, now: datetime.datetime) -> Booking:
        """Persist the evaluated status if it moved forward.

        The caller must hold the booking's key.  A sweep that read the clock
        earlier than a concurrent one can never move a status backwards.
        """
        status = evaluate_status(booking, now)
        if status is booking.status or not is_forward(booking.status, status):
            return booking
        updated = booking.model_copy(update={"status": status})
        self.store.upsert(updated)
        log.info(
            "Booking %s moved %s -> %s",
            booking.id,
            booking.status.value,
            status.value,
        )
        return updated

    # ------------------------------------------------------------------
    # Operations
    def create(self, request: BookingRequest) -> Booking:
        if self.store.get(Machine, request.machine_id) is None:
            raise NotFoundError(
                f"Machine {request.machine_id} not found",
                ErrorReason.MACHINE_NOT_FOUND,
            )
        if self.store.get(User, request.user_id) is None:
            raise NotFoundError(
                f"User {request.user_id} not found", ErrorReason.USER_NOT_FOUND
            )
        program = self._program(request.program)

        with self._locks.hold(
            _slot_key(request.machine_id, request.date, request.start_time),
            _quota_key(request.user_id, request.date),
        ):
            decision = self.quota.check_quota(request.user_id, request.date)
            if decision is QuotaDecision.DAILY_EXCEEDED:
                raise QuotaExceededError(
                    "Daily booking quota exceeded for this date",
                    ErrorReason.DAILY_QUOTA_EXCEEDED,
                )
            if decision is QuotaDecision.WEEKLY_EXCEEDED:
                raise QuotaExceededError(
                    "Weekly booking quota exceeded",
                    ErrorReason.WEEKLY_QUOTA_EXCEEDED,
                )
            if not self.availability.is_available(
                request.machine_id, request.date, request.start_time
            ):
                raise SlotUnavailableError("Time slot not available")

            booking = Booking(
                user_id=request.user_id,
                machine_id=request.machine_id,
                date=request.date,
                start_time=request.start_time,
                duration=program.duration,
                program=program.id,
                status=BookingStatus.UPCOMING,
                is_fixed_slot=request.is_fixed_slot,
                verification_code=generate_verification_code(),
                water_usage=program.water_usage,
                energy_usage=program.energy_usage,
                co2_impact=program.co2_impact,
            )
            self.store.upsert(booking)

        log.info(
            "Created booking %s: user=%s machine=%s %s %s",
            booking.id,
            booking.user_id,
            booking.machine_id,
            booking.date.isoformat(),
            booking.start_time.strftime("%H:%M"),
        )
        return booking

    def modify(self, booking_id: str, updates: BookingUpdate) -> Booking:
        """Apply ``updates`` to an upcoming or in-progress booking.

        A new date or start time must be free (the booking's own slot does
        not conflict with itself).  Changing the program updates the duration
        but leaves the resource-impact figures from creation in place.  Quota
        is not re-checked and the verification code never changes.  Callers
        cannot set the status; when the slot window moves, the status is
        evaluated afresh for the new window, which may move it back to
        upcoming.
        """
        while True:
            current = self._booking(booking_id)
            day = updates.date if updates.date is not None else current.date
            start = (
                updates.start_time
                if updates.start_time is not None
                else current.start_time
            )
            with self._locks.hold(
                _booking_key(booking_id),
                _slot_key(*current.slot),
                _slot_key(current.machine_id, day, start),
            ):
                booking = self._booking(booking_id)
                if booking.slot != current.slot:
                    # Moved by a concurrent modify before we got the lock.
                    continue
                now = self.clock.now()
                booking = self._sync_status(booking, now)
                if booking.status in (BookingStatus.COMPLETED, BookingStatus.CANCELLED):
                    raise InvalidStateError(
                        f"Cannot modify a {booking.status.value} booking"
                    )

                changes: dict[str, object] = {}
                if updates.program is not None:
                    program = self._program(updates.program)
                    changes["program"] = program.id
                    changes["duration"] = program.duration
                if updates.date is not None or updates.start_time is not None:
                    if not self.availability.is_available(
                        booking.machine_id, day, start, exclude_booking_id=booking.id
                    ):
                        raise SlotUnavailableError(
                            "Selected time slot is not available"
                        )
                    changes["date"] = day
                    changes["start_time"] = start
                if updates.is_fixed_slot is not None:
                    changes["is_fixed_slot"] = updates.is_fixed_slot

                updated = booking.model_copy(update=changes)
                if slot_window(updated) != slot_window(booking):
                    # New window: no forward-only guard, the evaluator decides.
                    status = evaluate_status(updated, now)
                    if status is not updated.status:
                        changes["status"] = status
                        updated = updated.model_copy(update={"status": status})
                self.store.upsert(updated)
                log.info("Modified booking %s: %s", booking_id, sorted(changes))
                return updated

    def cancel(self, booking_id: str) -> Booking:
        with self._locks.hold(_booking_key(booking_id)):
            booking = self._sync_status(self._booking(booking_id), self.clock.now())
            if booking.status is not BookingStatus.UPCOMING:
                raise InvalidStateError(
                    f"Can only cancel upcoming bookings (booking is {booking.status.value})"
                )
            cancelled = booking.model_copy(update={"status": BookingStatus.CANCELLED})
            self.store.upsert(cancelled)
        log.info("Cancelled booking %s", booking_id)
        return cancelled

    def list_for_user(self, user_id: str) -> list[Booking]:
        """The user's bookings, with any drifted status written back."""
        now = self.clock.now()
        bookings = []
        for stale in self.store.list(Booking, lambda b: b.user_id == user_id):
            with self._locks.hold(_booking_key(stale.id)):
                booking = self.store.get(Booking, stale.id)
                if booking is not None:
                    bookings.append(self._sync_status(booking, now))
        return sorted(bookings, key=lambda b: (b.date, b.start_time))

    def sweep_all(self) -> SweepResult:
        """Re-evaluate open bookings; per-booking write failures are collected.

        Safe to run concurrently with itself: each booking is re-read under
        its key, so a change is applied and reported once.
        """
        now = self.clock.now()
        result = SweepResult()
        for stale in self.store.list(Booking, lambda b: b.status in _OPEN):
            try:
                with self._locks.hold(_booking_key(stale.id)):
                    booking = self.store.get(Booking, stale.id)
                    if booking is None:
                        continue
                    updated = self._sync_status(booking, now)
            except StorageError as exc:
                log.error("Sweep could not persist booking %s: %s", stale.id, exc)
                result.failed_ids.append(stale.id)
                continue
            if updated.status is not booking.status:
                result.changes.append(
                    StatusChange(
                        booking_id=booking.id,
                        user_id=booking.user_id,
                        machine_id=booking.machine_id,
                        previous=booking.status,
                        current=updated.status,
                    )
                )
        return result
