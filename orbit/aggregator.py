"""Merge one day's inputs into the daily log and the cumulative course totals."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .models import Course, DailyLog, SolvedProblem, VocabEntry, clamp, lenient_int

logger = logging.getLogger(__name__)


class DayInput(BaseModel):
    """Raw values captured by the daily form."""

    courses: Dict[str, Any] = Field(default_factory=dict)
    vocab_word: str = ""
    vocab_definition: str = ""
    aptitude: bool = False
    linux: bool = False
    notes: str = ""


def apply_course_deltas(
    courses: List[Course],
    previous: Optional[DailyLog],
    inputs: Dict[str, Any],
) -> Dict[str, int]:
    """Shift each course's completed count by the change from the previous input.

    Inputs are cumulative for the day, so re-saving the same date only applies
    the difference against what was recorded last time, never against zero.
    Returns the per-course inputs to record on the new log.
    """
    recorded: Dict[str, int] = {}
    for course in courses:
        value = lenient_int(inputs.get(course.id))
        previous_value = previous.course_input(course.id) if previous else 0
        delta = value - previous_value
        if delta:
            course.completed = clamp(course.completed + delta, 0, course.total)
            logger.debug("Course %s moved by %+d to %d/%d", course.id, delta, course.completed, course.total)
        recorded[course.id] = value
    return recorded


def apply_day(
    courses: List[Course],
    previous: Optional[DailyLog],
    day_input: DayInput,
    now: datetime,
) -> DailyLog:
    """Build the replacement log for a date, updating ``courses`` in place."""
    recorded = apply_course_deltas(courses, previous, day_input.courses)

    solved: Optional[List[SolvedProblem]] = []
    legacy = None
    if previous is not None:
        if previous.dsa_solved is not None:
            solved = [problem.model_copy() for problem in previous.dsa_solved]
        elif previous.legacy_dsa is not None:
            solved = None
            legacy = previous.legacy_dsa.model_copy()

    return DailyLog(
        courses=recorded,
        dsa_solved=solved,
        legacy_dsa=legacy,
        vocab=VocabEntry(word=day_input.vocab_word, definition=day_input.vocab_definition),
        aptitude=day_input.aptitude,
        linux=day_input.linux,
        notes=day_input.notes,
        timestamp=now,
    )


def add_solved_problem(log: DailyLog, problem: SolvedProblem) -> bool:
    """Append ``problem`` unless the same slug was already recorded for the day."""
    if log.dsa_solved is None:
        log.dsa_solved = []
    if any(existing.id == problem.id for existing in log.dsa_solved):
        return False
    log.dsa_solved.append(problem)
    return True


__all__ = ["DayInput", "add_solved_problem", "apply_course_deltas", "apply_day"]
