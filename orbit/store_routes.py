"""Keyed CRUD endpoints consumed by the tracker's remote persistence backend."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Response, status
from pydantic import BaseModel

from .db.session import session_scope
from .repositories.store import store_repository
from .telemetry import emit_event

router = APIRouter(prefix="/api", tags=["store"])
logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class LogUpsertRequest(BaseModel):
    date: Optional[str] = None
    log: Optional[Dict[str, Any]] = None


class MigrationRequest(BaseModel):
    store: Dict[str, Any]
    settings: Optional[Dict[str, Any]] = None


@router.get("/logs")
def list_logs() -> Dict[str, Any]:
    with session_scope(commit=False) as session:
        return store_repository.list_logs(session)


@router.post("/log")
def save_log(payload: LogUpsertRequest) -> Dict[str, str]:
    if not payload.date or payload.log is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fields")
    if not _ISO_DATE.match(payload.date):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date must be YYYY-MM-DD")
    with session_scope() as session:
        store_repository.upsert_log(session, payload.date, payload.log)
    return {"message": "Saved"}


@router.head("/settings")
def probe_settings() -> Response:
    with session_scope(commit=False) as session:
        store_repository.get_settings(session)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/settings")
def read_settings() -> Dict[str, Any]:
    with session_scope(commit=False) as session:
        value = store_repository.get_settings(session)
    return value if isinstance(value, dict) else {}


@router.post("/settings")
def write_settings(payload: Dict[str, Any] = Body(...)) -> Dict[str, str]:
    with session_scope() as session:
        store_repository.put_settings(session, payload)
    return {"message": "Settings Saved"}


@router.get("/meta")
def read_meta() -> Optional[Dict[str, Any]]:
    with session_scope(commit=False) as session:
        value = store_repository.get_meta(session)
    return value if isinstance(value, dict) else None


@router.post("/meta")
def write_meta(payload: Dict[str, Any] = Body(...)) -> Dict[str, str]:
    with session_scope() as session:
        store_repository.put_meta(session, payload)
    return {"message": "Meta Saved"}


@router.post("/migrate")
def migrate(payload: MigrationRequest) -> Dict[str, Any]:
    try:
        with session_scope() as session:
            migrated = store_repository.migrate(session, payload.store, payload.settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Migration rolled back")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Migration failed: {exc}",
        ) from exc
    emit_event("store_migrated", logs=migrated, settings=payload.settings is not None)
    return {"message": "Migration Successful", "logs": migrated}


__all__ = ["router"]
