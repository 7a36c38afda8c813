"""Booking lifecycle engine: quota, availability, status and orchestration."""

from .availability import AvailabilityChecker
from .lifecycle import BookingLifecycleManager
from .quota import QuotaDecision, QuotaEngine
from .status import evaluate_status

__all__ = [
    "AvailabilityChecker",
    "BookingLifecycleManager",
    "QuotaDecision",
    "QuotaEngine",
    "evaluate_status",
]
