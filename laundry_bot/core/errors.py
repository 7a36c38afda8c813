"""Error taxonomy and the result type returned across the service boundary."""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorCategory(str, Enum):
    NOT_FOUND = "NotFound"
    INVALID_STATE = "InvalidState"
    QUOTA_EXCEEDED = "QuotaExceeded"
    SLOT_UNAVAILABLE = "SlotUnavailable"
    INVALID_INPUT = "InvalidInput"
    STORAGE_FAILURE = "StorageFailure"


class ErrorReason(str, Enum):
    NOT_FOUND = "NotFound"
    USER_NOT_FOUND = "UserNotFound"
    MACHINE_NOT_FOUND = "MachineNotFound"
    INVALID_STATE = "InvalidState"
    DAILY_QUOTA_EXCEEDED = "DailyQuotaExceeded"
    WEEKLY_QUOTA_EXCEEDED = "WeeklyQuotaExceeded"
    SLOT_UNAVAILABLE = "SlotUnavailable"
    INVALID_PROGRAM = "InvalidProgram"
    INVALID_INPUT = "InvalidInput"
    INVALID_CREDENTIALS = "InvalidCredentials"
    STORAGE_FAILURE = "StorageFailure"
    PARTIAL_FAILURE = "PartialFailure"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorReason.NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorReason.USER_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorReason.MACHINE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorReason.INVALID_STATE: ErrorCategory.INVALID_STATE,
    ErrorReason.DAILY_QUOTA_EXCEEDED: ErrorCategory.QUOTA_EXCEEDED,
    ErrorReason.WEEKLY_QUOTA_EXCEEDED: ErrorCategory.QUOTA_EXCEEDED,
    ErrorReason.SLOT_UNAVAILABLE: ErrorCategory.SLOT_UNAVAILABLE,
    ErrorReason.INVALID_PROGRAM: ErrorCategory.INVALID_INPUT,
    ErrorReason.INVALID_INPUT: ErrorCategory.INVALID_INPUT,
    ErrorReason.INVALID_CREDENTIALS: ErrorCategory.INVALID_INPUT,
    ErrorReason.STORAGE_FAILURE: ErrorCategory.STORAGE_FAILURE,
    ErrorReason.PARTIAL_FAILURE: ErrorCategory.STORAGE_FAILURE,
}


class LaundryError(Exception):
    """Base class for failures raised inside the booking core."""

    reason: ErrorReason = ErrorReason.INVALID_INPUT

    def __init__(self, message: str, reason: ErrorReason | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(LaundryError):
    reason = ErrorReason.NOT_FOUND


class InvalidStateError(LaundryError):
    reason = ErrorReason.INVALID_STATE


class QuotaExceededError(LaundryError):
    reason = ErrorReason.DAILY_QUOTA_EXCEEDED


class SlotUnavailableError(LaundryError):
    reason = ErrorReason.SLOT_UNAVAILABLE


class InvalidInputError(LaundryError):
    reason = ErrorReason.INVALID_INPUT


class StorageError(LaundryError):
    reason = ErrorReason.STORAGE_FAILURE


class ServiceResponse(BaseModel, Generic[T]):
    """Outcome of a service call: a success flag plus a value or a reason."""

    success: bool
    data: T | None = None
    error: ErrorReason | None = None
    message: str | None = None
    failed_ids: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: T | None = None) -> ServiceResponse[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        reason: ErrorReason,
        message: str | None = None,
        **extra: object,
    ) -> ServiceResponse[T]:
        return cls(success=False, error=reason, message=message, **extra)
