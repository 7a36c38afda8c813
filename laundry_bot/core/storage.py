"""JSON snapshot storage for users, machines, bookings and reports."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Callable
from importlib import resources
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import StorageError
from .models import Booking, Machine, Report, User

log = logging.getLogger("laundry.storage")

E = TypeVar("E", bound=BaseModel)

COLLECTIONS: dict[str, type[BaseModel]] = {
    "users": User,
    "machines": Machine,
    "bookings": Booking,
    "reports": Report,
}
_NAMES = {model: name for name, model in COLLECTIONS.items()}


def load_seed() -> dict[str, Any]:
    """Return the bundled initial dataset."""
    text = resources.files("laundry_bot").joinpath("data/seed.json").read_text(
        encoding="utf-8"
    )
    return json.loads(text)


class RecordStore:
    """Persist the four record collections to a single JSON snapshot.

    The whole snapshot is rewritten atomically on every mutation, and the
    in-memory collections only change once the write succeeded, so memory
    and disk never disagree.  A snapshot that cannot be read at start-up is
    moved aside and replaced by the seed dataset; ``degraded`` is set and
    the event is reported through ``notices`` rather than raised.

    Records are handed out as copies, and writes replace whole records, so no
    caller can mutate stored state behind the store's back.
    """

    def __init__(self, path: Path | str, seed: dict[str, Any] | None = None) -> None:
        """Prepare a store for the snapshot at ``path``; call :meth:`open`."""
        self.path = Path(path)
        self._seed = seed
        self._lock = threading.RLock()
        self._data: dict[str, dict[str, BaseModel]] = {n: {} for n in COLLECTIONS}
        self._open = False
        self.degraded = False
        self.notices: list[str] = []

    # ------------------------------------------------------------------
    # Lifecycle
    def open(self) -> RecordStore:
        with self._lock:
            if self._open:
                return self
            if self.path.exists():
                self._load()
            else:
                self._data = self._parse(self._seed_data(), strict=True)
                self._write(self._data)
            self._open = True
        return self

    def close(self) -> None:
        with self._lock:
            self._open = False

    def __enter__(self) -> RecordStore:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._open

    # ------------------------------------------------------------------
    # Internal helpers
    def _seed_data(self) -> dict[str, Any]:
        return self._seed if self._seed is not None else load_seed()

    def _notice(self, message: str) -> None:
        self.notices.append(message)
        log.warning(message)

    def _parse(
        self, raw: dict[str, Any], strict: bool = False
    ) -> dict[str, dict[str, BaseModel]]:
        data: dict[str, dict[str, BaseModel]] = {}
        for name, model in COLLECTIONS.items():
            records = raw.get(name, [])
            if not isinstance(records, list):
                raise ValueError(f"collection '{name}' is not a list")
            data[name] = {}
            for item in records:
                try:
                    entity = model.model_validate(item)
                except ValidationError as exc:
                    if strict:
                        raise
                    rid = item.get("id", "?") if isinstance(item, dict) else "?"
                    self._notice(
                        f"Rejected {name} record {rid} from snapshot: "
                        f"{exc.error_count()} invalid field(s)"
                    )
                    continue
                data[name][entity.id] = entity
        return data

    def _load(self) -> None:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("snapshot root is not an object")
            self._data = self._parse(raw)
        except (OSError, ValueError) as exc:
            self._recover(exc)

    def _recover(self, exc: Exception) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            os.replace(self.path, backup)
        except OSError:
            backup = None
        self.degraded = True
        self._notice(
            f"Snapshot {self.path} is unreadable ({exc}); starting from seed data"
            + (f", previous file kept at {backup}" if backup else "")
        )
        self._data = self._parse(self._seed_data(), strict=True)
        self._write(self._data)

    def _write(self, data: dict[str, dict[str, BaseModel]]) -> None:
        payload = {
            name: [e.model_dump(mode="json") for e in data[name].values()]
            for name in COLLECTIONS
        }
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as exc:
            log.error("Failed to persist snapshot %s: %s", self.path, exc)
            raise StorageError(f"Could not persist snapshot: {exc}") from exc

    def _collection(self, model: type[BaseModel]) -> str:
        if not self._open:
            raise StorageError("RecordStore is not open")
        try:
            return _NAMES[model]
        except KeyError:
            raise TypeError(f"{model.__name__} is not a stored record type") from None

    # ------------------------------------------------------------------
    # Record operations
    def get(self, model: type[E], record_id: str) -> E | None:
        """Return a copy of the record with ``record_id`` or ``None``."""
        with self._lock:
            entity = self._data[self._collection(model)].get(record_id)
            return entity.model_copy(deep=True) if entity is not None else None

    def list(
        self, model: type[E], predicate: Callable[[E], bool] | None = None
    ) -> list[E]:
        """Return copies of all records of ``model`` matching ``predicate``."""
        with self._lock:
            records = self._data[self._collection(model)].values()
            return [
                e.model_copy(deep=True)
                for e in records
                if predicate is None or predicate(e)
            ]

    def upsert(self, entity: BaseModel) -> None:
        """Insert or replace ``entity`` and persist the snapshot."""
        with self._lock:
            name = self._collection(type(entity))
            updated = dict(self._data[name])
            updated[entity.id] = entity.model_copy(deep=True)
            self._write({**self._data, name: updated})
            self._data[name] = updated

    def delete(self, model: type[BaseModel], record_id: str) -> bool:
        """Remove a record; return ``False`` when it did not exist."""
        with self._lock:
            name = self._collection(model)
            if record_id not in self._data[name]:
                return False
            updated = dict(self._data[name])
            del updated[record_id]
            self._write({**self._data, name: updated})
            self._data[name] = updated
            return True
