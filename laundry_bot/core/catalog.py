"""Read-only catalog of washing programs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import Program

DEFAULT_PROGRAMS: tuple[Program, ...] = (
    Program(
        id="quick",
        name="Quick Wash",
        duration=30,
        water_usage=30,
        energy_usage=0.6,
        co2_impact=0.3,
    ),
    Program(
        id="normal",
        name="Normal Wash",
        duration=45,
        water_usage=45,
        energy_usage=0.9,
        co2_impact=0.4,
    ),
    Program(
        id="heavy",
        name="Heavy Duty",
        duration=60,
        water_usage=60,
        energy_usage=1.2,
        co2_impact=0.6,
    ),
)


class ProgramCatalog:
    """Lookup of programs by id or display name (case-insensitive)."""

    def __init__(self, programs: Iterable[Program] = DEFAULT_PROGRAMS) -> None:
        self._programs = {p.id: p for p in programs}
        self._by_key: dict[str, Program] = {}
        for program in self._programs.values():
            self._by_key[program.id.lower()] = program
            self._by_key[program.name.lower()] = program

    def get(self, key: str) -> Program | None:
        return self._by_key.get(key.strip().lower())

    def __iter__(self) -> Iterator[Program]:
        return iter(self._programs.values())

    def __len__(self) -> int:
        return len(self._programs)
