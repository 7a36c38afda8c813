"""Data models for the laundry booking core.

The models are implemented using :mod:`pydantic` so that records loaded from
the snapshot file are validated once, at the storage boundary.  Statuses,
report types and urgencies are closed enumerations; an unknown value in a
snapshot fails validation instead of being coerced later on.
"""

from __future__ import annotations

import datetime
import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


def new_id() -> str:
    return uuid.uuid4().hex


class MachineStatus(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in-use"
    MAINTENANCE = "maintenance"
    ERROR = "error"


class BookingStatus(str, Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReportType(str, Enum):
    MACHINE = "machine"
    USER = "user"


class ReportStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QuotaLimit(BaseModel):
    limit: int = Field(ge=0)


class QuotaConfig(BaseModel):
    """Per-user booking limits.

    Only limits are stored.  Usage is always recomputed from active bookings,
    so legacy ``used`` counters found in old snapshots are dropped on load.
    """

    daily: QuotaLimit = Field(default_factory=lambda: QuotaLimit(limit=2))
    weekly: QuotaLimit = Field(default_factory=lambda: QuotaLimit(limit=5))


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True
    sms: bool = False
    machine_available: bool = True
    booking_reminder: bool = True
    washing_complete: bool = True
    machine_error: bool = True


class Preferences(BaseModel):
    notifications: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )
    language: str = "en"


class User(BaseModel):
    """A resident allowed to book machines.

    Attributes
    ----------
    id:
        Internal unique identifier. Defaults to a random UUID4 hex string.
    username:
        Unique login name.
    secret:
        Stored secret compared verbatim on login.
    quota:
        Daily and weekly booking limits.
    preferences:
        Notification and language preferences; opaque to the booking core.
    discord_id:
        Discord account linked through ``/link``, if any.

    """

    id: str = Field(default_factory=new_id)
    username: str
    secret: str
    quota: QuotaConfig = Field(default_factory=QuotaConfig)
    preferences: Preferences = Field(default_factory=Preferences)
    discord_id: int | None = None


class Machine(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    status: MachineStatus = MachineStatus.AVAILABLE
    last_used: datetime.datetime | None = None
    next_booking: datetime.datetime | None = None
    time_remaining: int | None = None
    error: str | None = None


class Program(BaseModel):
    """A washing program from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    duration: int = Field(gt=0)  # minutes
    water_usage: float  # litres
    energy_usage: float  # kWh
    co2_impact: float  # kg CO2


class Booking(BaseModel):
    """A reservation of one machine slot.

    ``(machine_id, date, start_time)`` is unique among bookings that are not
    cancelled.  ``verification_code`` and the resource-impact figures are set
    once at creation and never recomputed.
    """

    id: str = Field(default_factory=new_id)
    user_id: str
    machine_id: str
    date: datetime.date
    start_time: datetime.time
    duration: int = Field(gt=0)
    program: str
    status: BookingStatus = BookingStatus.UPCOMING
    is_fixed_slot: bool = False
    verification_code: str = Field(pattern=r"^\d{6}$")
    water_usage: float | None = None
    energy_usage: float | None = None
    co2_impact: float | None = None

    @property
    def slot(self) -> tuple[str, datetime.date, datetime.time]:
        return (self.machine_id, self.date, self.start_time)

    @property
    def is_active(self) -> bool:
        return self.status is not BookingStatus.CANCELLED


class Report(BaseModel):
    id: str = Field(default_factory=new_id)
    type: ReportType
    reporter_id: str
    machine_id: str | None = None
    reported_user_id: str | None = None
    issue_type: str
    description: str
    urgency: Urgency = Urgency.MEDIUM
    status: ReportStatus = ReportStatus.PENDING
    created_at: datetime.datetime
    resolved_at: datetime.datetime | None = None

    @model_validator(mode="after")
    def _check_target(self) -> Report:
        if self.type is ReportType.MACHINE and not self.machine_id:
            raise ValueError("machine reports must name a machine_id")
        if self.type is ReportType.USER and not self.reported_user_id:
            raise ValueError("user reports must name a reported_user_id")
        return self


class BookingRequest(BaseModel):
    """Input for creating a booking.  Duration comes from the program."""

    user_id: str
    machine_id: str
    date: datetime.date
    start_time: datetime.time
    program: str
    is_fixed_slot: bool = False


class BookingUpdate(BaseModel):
    """Partial update accepted by ``modify``.

    Unknown keys such as ``status`` or ``verification_code`` are ignored, so
    callers can never overwrite them through a modification.
    """

    model_config = ConfigDict(extra="ignore")

    date: datetime.date | None = None
    start_time: datetime.time | None = None
    program: str | None = None
    is_fixed_slot: bool | None = None


class ReportRequest(BaseModel):
    type: ReportType
    reporter_id: str
    machine_id: str | None = None
    reported_user_id: str | None = None
    issue_type: str
    description: str
    urgency: Urgency = Urgency.MEDIUM


class StatusChange(BaseModel):
    booking_id: str
    user_id: str
    machine_id: str
    previous: BookingStatus
    current: BookingStatus


class SweepResult(BaseModel):
    changes: list[StatusChange] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)


class QuotaSummary(BaseModel):
    daily_used: int
    daily_limit: int
    weekly_used: int
    weekly_limit: int


class TimeSlot(BaseModel):
    time: datetime.time
    available: bool
