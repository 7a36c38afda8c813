"""Service layer exposing the booking core to front ends.

Every public method returns a :class:`~laundry_bot.core.errors.ServiceResponse`.
Failures raised by the core are translated into a response carrying the
specific :class:`~laundry_bot.core.errors.ErrorReason`; nothing is raised
across this boundary.
"""

from __future__ import annotations

import datetime
import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .booking.availability import AvailabilityChecker
from .booking.lifecycle import BookingLifecycleManager
from .booking.quota import QuotaEngine
from .core.catalog import ProgramCatalog
from .core.clock import Clock
from .core.errors import ErrorReason, LaundryError, NotFoundError, ServiceResponse
from .core.models import (
    Booking,
    BookingRequest,
    BookingUpdate,
    Machine,
    MachineStatus,
    Preferences,
    Report,
    ReportRequest,
    ReportType,
    User,
)
from .core.storage import RecordStore

T = TypeVar("T")


def service_call(func: Callable[..., ServiceResponse]) -> Callable[..., ServiceResponse]:
    """Turn core exceptions into failed responses."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> ServiceResponse:
        try:
            return func(*args, **kwargs)
        except LaundryError as exc:
            return ServiceResponse.fail(exc.reason, exc.message)
        except ValidationError as exc:
            return ServiceResponse.fail(ErrorReason.INVALID_INPUT, str(exc))

    return wrapper


def _coerce(type_: type[T], value: Any) -> T:
    return TypeAdapter(type_).validate_python(value)


def _require_machine(store: RecordStore, machine_id: str) -> Machine:
    machine = store.get(Machine, machine_id)
    if machine is None:
        raise NotFoundError(
            f"Machine {machine_id} not found", ErrorReason.MACHINE_NOT_FOUND
        )
    return machine


def _require_user(store: RecordStore, user_id: str) -> User:
    user = store.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found", ErrorReason.USER_NOT_FOUND)
    return user


class AuthService:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @service_call
    def login(self, username: str, secret: str) -> ServiceResponse[User]:
        user = next(iter(self.store.list(User, lambda u: u.username == username)), None)
        if user is None or user.secret != secret:
            return ServiceResponse.fail(
                ErrorReason.INVALID_CREDENTIALS, "Invalid username or password"
            )
        return ServiceResponse.ok(user)

    @service_call
    def update_preferences(
        self, user_id: str, preferences: Preferences | dict[str, Any]
    ) -> ServiceResponse[User]:
        user = _require_user(self.store, user_id)
        updated = user.model_copy(
            update={"preferences": Preferences.model_validate(preferences)}
        )
        self.store.upsert(updated)
        return ServiceResponse.ok(updated)

    @service_call
    def link_discord(self, user_id: str, discord_id: int) -> ServiceResponse[User]:
        """Attach a Discord account to ``user_id``, detaching it elsewhere."""
        user = _require_user(self.store, user_id)
        for other in self.store.list(
            User, lambda u: u.discord_id == discord_id and u.id != user_id
        ):
            self.store.upsert(other.model_copy(update={"discord_id": None}))
        linked = user.model_copy(update={"discord_id": discord_id})
        self.store.upsert(linked)
        return ServiceResponse.ok(linked)

    @service_call
    def user_for_discord(self, discord_id: int) -> ServiceResponse[User]:
        user = next(
            iter(self.store.list(User, lambda u: u.discord_id == discord_id)), None
        )
        if user is None:
            return ServiceResponse.fail(
                ErrorReason.USER_NOT_FOUND,
                "No laundry account is linked to you yet. Use `/link` first.",
            )
        return ServiceResponse.ok(user)


class BookingService:
    def __init__(
        self,
        manager: BookingLifecycleManager,
        quota: QuotaEngine,
        availability: AvailabilityChecker,
    ) -> None:
        self.manager = manager
        self.quota = quota
        self.availability = availability

    @property
    def store(self) -> RecordStore:
        return self.manager.store

    @service_call
    def check_availability(
        self,
        machine_id: str,
        date: datetime.date | str,
        start_time: datetime.time | str,
    ) -> ServiceResponse[bool]:
        return ServiceResponse.ok(
            self.availability.is_available(
                machine_id, _coerce(datetime.date, date), _coerce(datetime.time, start_time)
            )
        )

    @service_call
    def create_booking(
        self, request: BookingRequest | dict[str, Any]
    ) -> ServiceResponse[Booking]:
        return ServiceResponse.ok(
            self.manager.create(BookingRequest.model_validate(request))
        )

    @service_call
    def modify_booking(
        self, booking_id: str, updates: BookingUpdate | dict[str, Any]
    ) -> ServiceResponse[Booking]:
        return ServiceResponse.ok(
            self.manager.modify(booking_id, BookingUpdate.model_validate(updates))
        )

    @service_call
    def cancel_booking(self, booking_id: str) -> ServiceResponse[Booking]:
        return ServiceResponse.ok(self.manager.cancel(booking_id))

    @service_call
    def get_user_bookings(self, user_id: str) -> ServiceResponse[list[Booking]]:
        return ServiceResponse.ok(self.manager.list_for_user(user_id))

    @service_call
    def sweep_all_booking_statuses(self) -> ServiceResponse:
        result = self.manager.sweep_all()
        if result.failed_ids:
            return ServiceResponse.fail(
                ErrorReason.PARTIAL_FAILURE,
                f"{len(result.failed_ids)} booking(s) could not be updated",
                data=result,
                failed_ids=list(result.failed_ids),
            )
        return ServiceResponse.ok(result)

    @service_call
    def free_slots(
        self, machine_id: str, date: datetime.date | str
    ) -> ServiceResponse:
        _require_machine(self.store, machine_id)
        return ServiceResponse.ok(
            self.availability.free_slots(
                machine_id, _coerce(datetime.date, date), self.manager.clock.now()
            )
        )

    @service_call
    def quota_summary(
        self, user_id: str, date: datetime.date | str | None = None
    ) -> ServiceResponse:
        day = (
            _coerce(datetime.date, date)
            if date is not None
            else self.manager.clock.now().date()
        )
        return ServiceResponse.ok(self.quota.summary(user_id, day))


class MachineService:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @service_call
    def get_all_machines(self) -> ServiceResponse[list[Machine]]:
        return ServiceResponse.ok(self.store.list(Machine))

    @service_call
    def get_machine_status(self, machine_id: str) -> ServiceResponse[Machine]:
        return ServiceResponse.ok(_require_machine(self.store, machine_id))

    @service_call
    def update_machine_status(
        self,
        machine_id: str,
        status: MachineStatus | str,
        error: str | None = None,
    ) -> ServiceResponse[Machine]:
        machine = _require_machine(self.store, machine_id)
        updated = machine.model_copy(
            update={"status": _coerce(MachineStatus, status), "error": error}
        )
        self.store.upsert(updated)
        return ServiceResponse.ok(updated)


class ReportService:
    def __init__(self, store: RecordStore, clock: Clock) -> None:
        self.store = store
        self.clock = clock

    @service_call
    def create_report(
        self, request: ReportRequest | dict[str, Any]
    ) -> ServiceResponse[Report]:
        req = ReportRequest.model_validate(request)
        _require_user(self.store, req.reporter_id)
        if req.type is ReportType.MACHINE and req.machine_id:
            _require_machine(self.store, req.machine_id)
        if req.type is ReportType.USER and req.reported_user_id:
            _require_user(self.store, req.reported_user_id)
        report = Report(**req.model_dump(), created_at=self.clock.now())
        self.store.upsert(report)
        return ServiceResponse.ok(report)

    @service_call
    def get_user_reports(self, user_id: str) -> ServiceResponse[list[Report]]:
        return ServiceResponse.ok(
            self.store.list(Report, lambda r: r.reporter_id == user_id)
        )

    @service_call
    def get_machine_reports(self, machine_id: str) -> ServiceResponse[list[Report]]:
        return ServiceResponse.ok(
            self.store.list(Report, lambda r: r.machine_id == machine_id)
        )


@dataclass
class LaundryServices:
    """All services sharing one store and one clock."""

    store: RecordStore
    clock: Clock
    auth: AuthService
    bookings: BookingService
    machines: MachineService
    reports: ReportService
    catalog: ProgramCatalog


def build_services(
    store: RecordStore, clock: Clock, catalog: ProgramCatalog | None = None
) -> LaundryServices:
    catalog = catalog or ProgramCatalog()
    quota = QuotaEngine(store)
    availability = AvailabilityChecker(store)
    manager = BookingLifecycleManager(
        store, clock, catalog=catalog, quota=quota, availability=availability
    )
    return LaundryServices(
        store=store,
        clock=clock,
        auth=AuthService(store),
        bookings=BookingService(manager, quota, availability),
        machines=MachineService(store),
        reports=ReportService(store, clock),
        catalog=catalog,
    )
