"""ORM models backing the Orbit store service."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON

USER_CONFIG_ID = "user_config"
APP_META_ID = "app_meta"


class DailyLogModel(TimestampMixin, Base):
    __tablename__ = "daily_logs"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)


class SettingModel(TimestampMixin, Base):
    """Singleton JSON blobs keyed by a fixed id (user settings, app metadata)."""

    __tablename__ = "settings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSONType, nullable=True)


__all__ = ["APP_META_ID", "DailyLogModel", "SettingModel", "USER_CONFIG_ID"]
