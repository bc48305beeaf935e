"""Consecutive-day logging streak."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Mapping

MAX_STREAK_WALK_DAYS = 365


def compute_streak(logs: Mapping[str, object], today: date) -> int:
    """Count consecutive logged days walking back from ``today``.

    Today may still be unlogged: on the first step only, a missing entry moves
    the walk to yesterday without ending it. Any later gap stops the count.
    """
    streak = 0
    cursor = today
    for step in range(MAX_STREAK_WALK_DAYS):
        if logs.get(cursor.isoformat()) is not None:
            streak += 1
        elif step != 0:
            break
        cursor -= timedelta(days=1)
    return streak


__all__ = ["MAX_STREAK_WALK_DAYS", "compute_streak"]
