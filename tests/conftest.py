from __future__ import annotations

import os
from typing import Iterator

import pytest

os.environ.setdefault("ORBIT_DATABASE_URL", "sqlite://")
os.environ.setdefault("ORBIT_PERSISTENCE_MODE", "local")

from orbit.config import get_settings  # noqa: E402
from orbit.db.session import dispose_engine, init_schema  # noqa: E402
from orbit.telemetry import TelemetryEvent, clear_listeners, register_listener  # noqa: E402


@pytest.fixture
def store_db() -> Iterator[None]:
    """Fresh in-memory store database per test."""
    get_settings.cache_clear()
    dispose_engine()
    init_schema()
    yield
    dispose_engine()


@pytest.fixture
def telemetry_events() -> Iterator[list[TelemetryEvent]]:
    events: list[TelemetryEvent] = []
    register_listener(events.append)
    yield events
    clear_listeners()
