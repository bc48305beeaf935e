from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

from orbit.config import Settings

TODAY = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


def make_settings(data_dir: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "ORBIT_DATA_DIR": str(data_dir),
        "ORBIT_PERSISTENCE_MODE": "local",
        "ORBIT_VERIFY_API_URL": "https://verify.test",
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]
