"""Dual-mode persistence: the remote store service with a local JSON fallback."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

import httpx
from pydantic import ValidationError

from .config import Settings
from .errors import MigrationFailedError, RemoteUnreachableError, SaveFailedError
from .models import Course, DailyLog, Store, UserSettings, default_courses
from .telemetry import emit_event

logger = logging.getLogger(__name__)

STORE_BLOB = "orbit_tracker_v1.json"
SETTINGS_BLOB = "orbit_settings_v1.json"


class PersistenceBackend(Protocol):
    """Contract shared by the local and remote storage strategies."""

    name: str

    def load(self) -> Tuple[Store, UserSettings]:  # pragma: no cover - protocol definition
        ...

    def save_log(self, day: str, log: DailyLog, store: Store) -> bool:  # pragma: no cover - protocol definition
        ...

    def save_meta(self, store: Store) -> None:  # pragma: no cover - protocol definition
        ...

    def save_settings(self, settings: UserSettings) -> bool:  # pragma: no cover - protocol definition
        ...


def _merge_settings(raw: Optional[Dict[str, Any]]) -> UserSettings:
    merged = {**UserSettings().to_payload(), **(raw or {})}
    return UserSettings.model_validate(merged)


def _validate_logs(raw: Any, source: str) -> Dict[str, DailyLog]:
    """Validate logs one date at a time; a bad entry is dropped, the rest kept."""
    logs: Dict[str, DailyLog] = {}
    if not isinstance(raw, dict):
        return logs
    for day, entry in raw.items():
        try:
            logs[day] = DailyLog.model_validate(entry)
        except ValidationError:
            logger.exception("Skipping invalid %s log for %s", source, day)
    return logs


def _validate_courses(raw: Any, source: str) -> List[Course]:
    if raw is None:
        return default_courses()
    if not isinstance(raw, list) or not raw:
        logger.warning("No courses in %s data; using the default catalogue", source)
        return default_courses()
    courses: List[Course] = []
    for entry in raw:
        try:
            courses.append(Course.model_validate(entry))
        except ValidationError:
            logger.exception("Skipping invalid %s course %r", source, entry)
    return courses or default_courses()


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class LocalBlobBackend:
    """Keeps the whole aggregate and the settings as two JSON blobs on disk."""

    name = "local"

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._lock = threading.RLock()

    @property
    def store_path(self) -> Path:
        return self._directory / STORE_BLOB

    @property
    def settings_path(self) -> Path:
        return self._directory / SETTINGS_BLOB

    def _read_blob(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except (OSError, ValueError):
            logger.exception("Failed to read local blob %s", path)
            return None
        if not isinstance(raw, dict):
            logger.warning("Ignoring local blob %s; expected an object", path)
            return None
        return raw

    def _write_blob(self, path: Path, payload: Dict[str, Any]) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except OSError as exc:
            raise SaveFailedError(f"Could not write {path}: {exc}") from exc

    def load(self) -> Tuple[Store, UserSettings]:
        with self._lock:
            raw_store = self._read_blob(self.store_path) or {}
            raw_settings = self._read_blob(self.settings_path)
        store = Store(
            courses=_validate_courses(raw_store.get("courses"), "local"),
            logs=_validate_logs(raw_store.get("logs"), "local"),
            last_login=_optional_str(raw_store.get("lastLogin")),
        )
        try:
            settings = _merge_settings(raw_settings)
        except ValidationError:
            logger.exception("Local settings blob is invalid; starting from defaults")
            settings = UserSettings()
        return store, settings

    def save_log(self, day: str, log: DailyLog, store: Store) -> bool:
        # The aggregate blob already carries every log, including this one.
        self.save_meta(store)
        return True

    def save_meta(self, store: Store) -> None:
        with self._lock:
            self._write_blob(self.store_path, store.to_payload())

    def save_settings(self, settings: UserSettings) -> bool:
        with self._lock:
            self._write_blob(self.settings_path, settings.to_payload())
        return True

    def clear(self) -> None:
        with self._lock:
            for path in (self.store_path, self.settings_path):
                path.unlink(missing_ok=True)


class RemoteStoreBackend:
    """Talks to the store service: logs per date, metadata and settings as blobs."""

    name = "remote"

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteStoreBackend":
        timeout = max(settings.remote_timeout_ms, 100) / 1000
        return cls(httpx.Client(base_url=settings.remote_url.rstrip("/"), timeout=timeout))

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            raise RemoteUnreachableError(f"{method} {path} failed: {exc}") from exc

    def _get_json(self, path: str) -> Any:
        response = self._send("GET", path)
        if not response.is_success:
            logger.warning("GET %s returned %s; using defaults", path, response.status_code)
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteUnreachableError(f"GET {path} returned invalid JSON") from exc

    def _post_json(self, path: str, payload: Any) -> None:
        response = self._send("POST", path, json=payload)
        if not response.is_success:
            raise SaveFailedError(f"POST {path} returned {response.status_code}: {_detail(response)}")

    def probe(self) -> bool:
        try:
            response = self._send("HEAD", "/settings")
        except RemoteUnreachableError:
            return False
        return response.is_success

    def load(self) -> Tuple[Store, UserSettings]:
        logs_payload = self._get_json("/logs")
        if logs_payload is not None and not isinstance(logs_payload, dict):
            raise RemoteUnreachableError(f"GET /logs returned {type(logs_payload).__name__}, expected an object")
        logs = _validate_logs(logs_payload, "remote")

        meta = self._get_json("/meta")
        courses = default_courses()
        last_login = None
        if isinstance(meta, dict):
            courses = _validate_courses(meta.get("courses"), "remote")
            last_login = _optional_str(meta.get("lastLogin"))

        raw_settings = self._get_json("/settings")
        settings = _merge_settings(raw_settings if isinstance(raw_settings, dict) else None)
        return Store(courses=courses, logs=logs, last_login=last_login), settings

    def save_log(self, day: str, log: DailyLog, store: Store) -> bool:
        self._post_json("/log", {"date": day, "log": log.to_payload()})
        self.save_meta(store)
        return True

    def save_meta(self, store: Store) -> None:
        self._post_json("/meta", store.meta_payload())

    def save_settings(self, settings: UserSettings) -> bool:
        self._post_json("/settings", settings.to_payload())
        return True

    def migrate(self, store: Store, settings: UserSettings) -> None:
        payload = {"store": store.to_payload(), "settings": settings.to_payload()}
        try:
            response = self._send("POST", "/migrate", json=payload)
        except RemoteUnreachableError as exc:
            raise MigrationFailedError(str(exc)) from exc
        if not response.is_success:
            raise MigrationFailedError(f"Migration rejected ({response.status_code}): {_detail(response)}")


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


class PersistenceAdapter:
    """Facade that picks remote or local storage once and demotes on failure."""

    def __init__(
        self,
        local: LocalBlobBackend,
        remote: Optional[RemoteStoreBackend] = None,
        *,
        mode: str = "auto",
    ) -> None:
        self._local = local
        self._remote = remote
        self._mode = mode
        self._active: PersistenceBackend = local

    @classmethod
    def from_settings(cls, settings: Settings) -> "PersistenceAdapter":
        local = LocalBlobBackend(Path(settings.data_dir).expanduser())
        remote = None if settings.persistence_mode == "local" else RemoteStoreBackend.from_settings(settings)
        return cls(local, remote, mode=settings.persistence_mode)

    @property
    def local(self) -> LocalBlobBackend:
        return self._local

    @property
    def active_name(self) -> str:
        return self._active.name

    @property
    def offline(self) -> bool:
        return self._active is self._local

    def connect(self) -> str:
        """Choose the storage strategy for this session."""
        if self._remote is None or self._mode == "local":
            self._active = self._local
        elif self._mode == "remote" or self._remote.probe():
            logger.info("Connected to Orbit store server.")
            self._active = self._remote
        else:
            logger.warning("Orbit store server unreachable. Running in local-only mode.")
            self._active = self._local
        return self._active.name

    def _demote(self, operation: str, exc: Exception) -> None:
        if self._active is self._local:
            return
        logger.warning("Remote persistence failed during %s; switching to local storage: %s", operation, exc)
        emit_event("persistence_demoted", operation=operation, error=str(exc))
        self._active = self._local

    def load(self) -> Tuple[Store, UserSettings]:
        if self._active is not self._local:
            try:
                return self._active.load()
            except (RemoteUnreachableError, ValidationError) as exc:
                self._demote("load", exc)
        return self._local.load()

    def save_log(self, day: str, log: DailyLog, store: Store) -> bool:
        try:
            return self._active.save_log(day, log, store)
        except RemoteUnreachableError as exc:
            self._demote("save_log", exc)
        except SaveFailedError as exc:
            logger.error("Log save failed for %s: %s", day, exc)
        return False

    def save_meta(self, store: Store) -> None:
        try:
            self._active.save_meta(store)
        except RemoteUnreachableError as exc:
            self._demote("save_meta", exc)
        except SaveFailedError as exc:
            logger.error("Meta save failed: %s", exc)

    def save_settings(self, settings: UserSettings) -> bool:
        try:
            return self._active.save_settings(settings)
        except RemoteUnreachableError as exc:
            self._demote("save_settings", exc)
        except SaveFailedError as exc:
            logger.error("Settings save failed: %s", exc)
        return False

    def migrate(self, store: Store, settings: UserSettings) -> None:
        """Upload a local snapshot to the store service in one transaction."""
        if self._remote is None:
            raise MigrationFailedError("No store server is configured.")
        self._remote.migrate(store, settings)
        emit_event("store_migrated", logs=len(store.logs))
        self._active = self._remote

    def reset_local(self) -> None:
        self._local.clear()


__all__ = [
    "LocalBlobBackend",
    "PersistenceAdapter",
    "PersistenceBackend",
    "RemoteStoreBackend",
    "SETTINGS_BLOB",
    "STORE_BLOB",
]
