"""Read-only dashboard figures and chart series derived from the store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .models import Course, DailyLog, Store

WEEKLY_WINDOW_DAYS = 7
TREND_WINDOW_DAYS = 14
PRACTICE_DAILY_GOAL = 3


@dataclass(frozen=True)
class SeriesPoint:
    day: date
    label: str
    value: int


@dataclass(frozen=True)
class CourseProgress:
    course_id: str
    name: str
    completed: int
    total: int
    percent: int


@dataclass(frozen=True)
class HistoryRow:
    day: str
    course_inputs: List[Tuple[str, int]]
    solved_count: int
    vocab_word: str
    practice_goal_met: bool
    habits_met: bool

    @property
    def goal_met(self) -> bool:
        return self.practice_goal_met and self.habits_met


@dataclass(frozen=True)
class Dashboard:
    completion_percent: int
    total_solved: int
    vocab_days: int
    streak: int
    courses: List[CourseProgress] = field(default_factory=list)


def overall_completion(courses: Sequence[Course]) -> int:
    total = sum(course.total for course in courses)
    if total <= 0:
        return 0
    completed = sum(course.completed for course in courses)
    return round(completed / total * 100)


def course_progress(courses: Sequence[Course]) -> List[CourseProgress]:
    return [
        CourseProgress(
            course_id=course.id,
            name=course.name,
            completed=course.completed,
            total=course.total,
            percent=course.percent,
        )
        for course in courses
    ]


def course_distribution(courses: Sequence[Course]) -> List[Tuple[str, int]]:
    return [(course.name, course.completed) for course in courses]


def total_solved(logs: Mapping[str, DailyLog]) -> int:
    return sum(log.solved_count for log in logs.values())


def total_vocab_days(logs: Mapping[str, DailyLog]) -> int:
    return sum(1 for log in logs.values() if log.vocab_word)


def activity_score(log: DailyLog | None) -> int:
    """Course inputs plus solved problems plus one point per vocab word and habit."""
    if log is None:
        return 0
    score = sum(log.courses.values())
    score += log.solved_count
    if log.vocab_word:
        score += 1
    if log.aptitude:
        score += 1
    if log.linux:
        score += 1
    return score


def _trailing_days(today: date, window: int) -> Iterable[date]:
    for offset in range(window - 1, -1, -1):
        yield today - timedelta(days=offset)


def weekly_activity(logs: Mapping[str, DailyLog], today: date) -> List[SeriesPoint]:
    return [
        SeriesPoint(day=day, label=day.strftime("%a"), value=activity_score(logs.get(day.isoformat())))
        for day in _trailing_days(today, WEEKLY_WINDOW_DAYS)
    ]


def solved_trend(logs: Mapping[str, DailyLog], today: date) -> List[SeriesPoint]:
    points: List[SeriesPoint] = []
    for day in _trailing_days(today, TREND_WINDOW_DAYS):
        log = logs.get(day.isoformat())
        points.append(SeriesPoint(day=day, label=str(day.day), value=log.solved_count if log else 0))
    return points


def history_rows(store: Store) -> List[HistoryRow]:
    names: Dict[str, str] = {course.id: course.name for course in store.courses}
    rows: List[HistoryRow] = []
    for day in sorted(store.logs, reverse=True):
        log = store.logs[day]
        inputs = [(names.get(course_id, course_id), value) for course_id, value in log.courses.items() if value > 0]
        solved = log.solved_count
        rows.append(
            HistoryRow(
                day=day,
                course_inputs=inputs,
                solved_count=solved,
                vocab_word=log.vocab_word or "-",
                practice_goal_met=solved >= PRACTICE_DAILY_GOAL,
                habits_met=log.aptitude and log.linux,
            )
        )
    return rows


def dashboard(store: Store) -> Dashboard:
    return Dashboard(
        completion_percent=overall_completion(store.courses),
        total_solved=total_solved(store.logs),
        vocab_days=total_vocab_days(store.logs),
        streak=store.streak,
        courses=course_progress(store.courses),
    )


__all__ = [
    "CourseProgress",
    "Dashboard",
    "HistoryRow",
    "PRACTICE_DAILY_GOAL",
    "SeriesPoint",
    "activity_score",
    "course_distribution",
    "course_progress",
    "dashboard",
    "history_rows",
    "overall_completion",
    "solved_trend",
    "total_solved",
    "total_vocab_days",
    "weekly_activity",
]
