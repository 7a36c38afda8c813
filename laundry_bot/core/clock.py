"""Wall-clock sources injected wherever temporal comparisons happen."""

from __future__ import annotations

import datetime
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    def now(self) -> datetime.datetime: ...


class SystemClock:
    """Reads the real time, in ``tz`` or the host's local zone."""

    def __init__(self, tz: datetime.tzinfo | None = None) -> None:
        self.tz = tz

    @classmethod
    def from_name(cls, name: str | None) -> SystemClock:
        return cls(ZoneInfo(name) if name else None)

    def now(self) -> datetime.datetime:
        if self.tz is None:
            return datetime.datetime.now()
        return datetime.datetime.now(tz=self.tz)


class FixedClock:
    """A clock pinned to a given instant; tests move it explicitly."""

    def __init__(self, current: datetime.datetime) -> None:
        self.current = current

    def now(self) -> datetime.datetime:
        return self.current

    def set(self, current: datetime.datetime) -> None:
        self.current = current

    def advance(self, **delta: float) -> None:
        self.current += datetime.timedelta(**delta)
