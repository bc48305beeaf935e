"""Upgrade the store schema with Alembic once the database answers a probe."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from orbit.config import get_settings

LOGGER = logging.getLogger("orbit.migrations")
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_TIMEOUT = int(os.getenv("ORBIT_DB_MIGRATION_TIMEOUT", "30"))
DEFAULT_POLL_INTERVAL = float(os.getenv("ORBIT_DB_MIGRATION_POLL_INTERVAL", "2"))
_PLACEHOLDER_URL = "%(ORBIT_DATABASE_URL)s"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply Orbit store migrations.")
    parser.add_argument("--revision", default="head", help="Target revision (default: head).")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Seconds to wait for the database.")
    parser.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL)
    parser.add_argument("--config", default=str(PROJECT_ROOT / "alembic.ini"), help="Path to alembic.ini.")
    return parser.parse_args(argv)


def load_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    """Prefer an explicit URL in the config, then ORBIT_DATABASE_URL via settings."""
    url = config.get_main_option("sqlalchemy.url")
    if url and url != _PLACEHOLDER_URL:
        return url
    resolved = os.getenv("ORBIT_DATABASE_URL") or get_settings().database_url
    config.set_main_option("sqlalchemy.url", resolved)
    return resolved


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    deadline = time.time() + timeout
    engine = create_engine(database_url, future=True, pool_pre_ping=True)
    last_error: Optional[Exception] = None
    try:
        while True:
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not reachable yet: %s", exc)
            except SQLAlchemyError as exc:
                last_error = exc
                break
            if time.time() >= deadline:
                break
            time.sleep(poll_interval)
    finally:
        engine.dispose()
    raise RuntimeError("Database did not become ready in time.") from last_error


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
) -> None:
    config = config or load_config(str(PROJECT_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    LOGGER.info("Upgrading store schema to %s", revision)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    command.upgrade(config, revision)
    LOGGER.info("Store schema is at %s.", revision)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    args = parse_args(argv)
    try:
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=load_config(args.config),
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
