"""Test configuration for ensuring package imports and shared fixtures."""

import datetime
import os
import sys

import pytest

# Add the repository root (the directory containing this file) to ``sys.path``
# if it is not already present.  This mirrors the behaviour of running the
# tests via ``python -m pytest`` where the working directory is automatically on
# the import path.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from laundry_bot.core.clock import FixedClock  # noqa: E402
from laundry_bot.core.storage import RecordStore  # noqa: E402
from laundry_bot.services import build_services  # noqa: E402

# A Monday morning; the surrounding week runs Sunday 2024-06-09 to Saturday 2024-06-15.
NOW = datetime.datetime(2024, 6, 10, 8, 0)


def seed_data() -> dict:
    """Small dataset independent of the bundled seed file."""
    return {
        "users": [
            {
                "id": "u1",
                "username": "alice",
                "secret": "pw1",
                "quota": {"daily": {"limit": 2}, "weekly": {"limit": 5}},
            },
            {
                "id": "u2",
                "username": "bob",
                "secret": "pw2",
                "quota": {"daily": {"limit": 1}, "weekly": {"limit": 3}},
            },
        ],
        "machines": [
            {"id": "M1", "name": "Washer 1", "status": "available"},
            {"id": "M2", "name": "Washer 2", "status": "available"},
        ],
        "bookings": [],
        "reports": [],
    }


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store(tmp_path):
    with RecordStore(tmp_path / "laundry.json", seed=seed_data()) as s:
        yield s


@pytest.fixture
def services(store, clock):
    return build_services(store, clock)
