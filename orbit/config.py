import os
from datetime import date, datetime
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///orbit.db", alias="ORBIT_DATABASE_URL")
    database_pool_size: int = Field(5, alias="ORBIT_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(5, alias="ORBIT_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="ORBIT_DATABASE_ECHO")
    database_auto_create: bool = Field(True, alias="ORBIT_DATABASE_AUTO_CREATE")
    host: str = Field("127.0.0.1", alias="ORBIT_HOST")
    port: int = Field(3000, alias="ORBIT_PORT")
    remote_url: str = Field("http://127.0.0.1:3000/api", alias="ORBIT_REMOTE_URL")
    remote_timeout_ms: int = Field(5000, alias="ORBIT_REMOTE_TIMEOUT_MS")
    persistence_mode: Literal["auto", "remote", "local"] = Field("auto", alias="ORBIT_PERSISTENCE_MODE")
    data_dir: str = Field(os.path.join(os.path.expanduser("~"), ".orbit"), alias="ORBIT_DATA_DIR")
    verify_api_url: str = Field("https://alfa-leetcode-api.onrender.com", alias="ORBIT_VERIFY_API_URL")
    verify_timeout_ms: int = Field(15000, alias="ORBIT_VERIFY_TIMEOUT_MS")
    verify_submission_limit: int = Field(20, alias="ORBIT_VERIFY_SUBMISSION_LIMIT")
    timezone: str = Field("UTC", alias="ORBIT_TIMEZONE")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid Orbit configuration: {exc}") from exc


def _zone(settings: Optional[Settings] = None) -> ZoneInfo:
    name = (settings or get_settings()).timezone
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise RuntimeError(f"Unknown ORBIT_TIMEZONE '{name}'") from exc


def now_local(settings: Optional[Settings] = None) -> datetime:
    """Current wall-clock time in the configured tracker timezone."""
    return datetime.now(_zone(settings))


def today_local(settings: Optional[Settings] = None) -> date:
    """Calendar date used as the key for today's log."""
    return now_local(settings).date()
