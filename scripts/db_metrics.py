"""Print a one-off JSON snapshot of store database health."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from orbit.db.monitoring import database_health
from orbit.db.session import get_engine

LOGGER = logging.getLogger("orbit.db_metrics")


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    try:
        snapshot = database_health(get_engine())
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Failed to collect database metrics: %s", exc)
        return 1
    print(json.dumps({"timestamp": datetime.now(timezone.utc).isoformat(), **snapshot}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
