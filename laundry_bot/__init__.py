"""Laundry machine booking core with a Discord front end.

The booking core (models, storage, quota, availability and the status
lifecycle) does not depend on Discord and can be used on its own through
:func:`build_services`.
"""

from .core.clock import FixedClock, SystemClock
from .core.errors import ErrorReason, ServiceResponse
from .core.models import Booking, BookingStatus, Machine, User
from .core.storage import RecordStore
from .services import LaundryServices, build_services

__all__ = [
    "Booking",
    "BookingStatus",
    "ErrorReason",
    "FixedClock",
    "LaundryServices",
    "Machine",
    "RecordStore",
    "ServiceResponse",
    "SystemClock",
    "User",
    "build_services",
]
