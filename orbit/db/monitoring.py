"""Connection pool counters and the database health snapshot."""

from __future__ import annotations

import os
import time
import weakref
from dataclasses import dataclass
from typing import Any, Dict

from sqlalchemy import event, func, select, text
from sqlalchemy.engine import Engine

from ..telemetry import emit_event


@dataclass
class PoolCounters:
    connects: int = 0
    checkouts: int = 0
    last_emit: float = 0.0


_COUNTERS: "weakref.WeakKeyDictionary[Engine, PoolCounters]" = weakref.WeakKeyDictionary()
_TELEMETRY_INTERVAL = float(os.getenv("ORBIT_DB_TELEMETRY_INTERVAL", "60"))


def instrument_engine(engine: Engine) -> None:
    """Count pool connects/checkouts and periodically emit them as telemetry."""
    if engine in _COUNTERS:
        return
    counters = PoolCounters()
    _COUNTERS[engine] = counters

    def maybe_emit(trigger: str) -> None:
        now = time.time()
        if _TELEMETRY_INTERVAL > 0 and (now - counters.last_emit) < _TELEMETRY_INTERVAL:
            return
        counters.last_emit = now
        emit_event(
            "db_pool_status",
            trigger=trigger,
            status=_pool_status(engine),
            connects=counters.connects,
            checkouts=counters.checkouts,
        )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        counters.connects += 1
        maybe_emit("connect")

    @event.listens_for(engine, "checkout")
    def _on_checkout(dbapi_connection, connection_record, connection_proxy) -> None:  # type: ignore[no-untyped-def]
        counters.checkouts += 1
        maybe_emit("checkout")


def get_pool_snapshot(engine: Engine) -> Dict[str, Any]:
    counters = _COUNTERS.get(engine) or PoolCounters()
    return {
        "status": _pool_status(engine),
        "connects": counters.connects,
        "checkouts": counters.checkouts,
    }


def database_health(engine: Engine) -> Dict[str, Any]:
    """Run a trivial query and report pool counters plus stored log count."""
    from .models import DailyLogModel

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        logs = connection.execute(select(func.count()).select_from(DailyLogModel)).scalar_one()
    return {"pool": get_pool_snapshot(engine), "logs": int(logs)}


def _pool_status(engine: Engine) -> str:
    try:
        return engine.pool.status()  # type: ignore[no-untyped-call]
    except Exception as exc:  # pragma: no cover - depends on pool implementation
        return f"unavailable: {exc}"


__all__ = ["database_health", "get_pool_snapshot", "instrument_engine"]
