"""Database-backed repository for daily logs and singleton blobs."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import APP_META_ID, USER_CONFIG_ID, DailyLogModel, SettingModel

logger = logging.getLogger(__name__)


class StoreRepository:
    """Replace-by-key persistence; callers own the transaction boundary."""

    def list_logs(self, session: Session) -> Dict[str, Any]:
        rows = session.execute(select(DailyLogModel).order_by(DailyLogModel.date)).scalars().all()
        return {row.date: row.data for row in rows}

    def upsert_log(self, session: Session, day: str, data: Mapping[str, Any]) -> None:
        model = session.get(DailyLogModel, day)
        if model is None:
            session.add(DailyLogModel(date=day, data=dict(data)))
        else:
            model.data = dict(data)
        session.flush()

    def get_blob(self, session: Session, blob_id: str) -> Optional[Any]:
        model = session.get(SettingModel, blob_id)
        return model.value if model is not None else None

    def put_blob(self, session: Session, blob_id: str, value: Any) -> None:
        model = session.get(SettingModel, blob_id)
        if model is None:
            session.add(SettingModel(id=blob_id, value=value))
        else:
            model.value = value
        session.flush()

    def get_settings(self, session: Session) -> Optional[Any]:
        return self.get_blob(session, USER_CONFIG_ID)

    def put_settings(self, session: Session, value: Any) -> None:
        self.put_blob(session, USER_CONFIG_ID, value)

    def get_meta(self, session: Session) -> Optional[Any]:
        return self.get_blob(session, APP_META_ID)

    def put_meta(self, session: Session, value: Any) -> None:
        self.put_blob(session, APP_META_ID, value)

    def migrate(
        self,
        session: Session,
        store: Mapping[str, Any],
        settings: Optional[Mapping[str, Any]],
    ) -> int:
        """Write a full client snapshot; nothing is committed here."""
        logs = store.get("logs") or {}
        for day, entry in logs.items():
            self.upsert_log(session, day, entry)

        meta = {key: value for key, value in store.items() if key != "logs"}
        self.put_meta(session, meta)

        if settings:
            self.put_settings(session, dict(settings))
        logger.info("Migrated %d logs (settings=%s)", len(logs), bool(settings))
        return len(logs)


store_repository = StoreRepository()

__all__ = ["StoreRepository", "store_repository"]
