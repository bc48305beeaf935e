from __future__ import annotations

from datetime import timedelta

from orbit.models import DailyLog
from orbit.streak import MAX_STREAK_WALK_DAYS, compute_streak

from .support import TODAY


def _logs_for(*offsets: int) -> dict[str, DailyLog]:
    return {(TODAY - timedelta(days=offset)).isoformat(): DailyLog() for offset in offsets}


def test_three_consecutive_days_ending_today() -> None:
    assert compute_streak(_logs_for(0, 1, 2, 4), TODAY) == 3


def test_unlogged_today_keeps_yesterdays_streak() -> None:
    assert compute_streak(_logs_for(1, 2), TODAY) == 2


def test_gap_before_yesterday_ends_streak() -> None:
    assert compute_streak(_logs_for(2, 3, 4), TODAY) == 0


def test_empty_logs_have_no_streak() -> None:
    assert compute_streak({}, TODAY) == 0


def test_walk_is_bounded() -> None:
    logs = _logs_for(*range(MAX_STREAK_WALK_DAYS + 30))
    assert compute_streak(logs, TODAY) == MAX_STREAK_WALK_DAYS


def test_empty_log_entry_still_counts() -> None:
    logs = {TODAY.isoformat(): DailyLog(courses={})}
    assert compute_streak(logs, TODAY) == 1
