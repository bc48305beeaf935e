from __future__ import annotations

from datetime import datetime, timezone

from orbit.aggregator import DayInput, add_solved_problem, apply_course_deltas, apply_day
from orbit.models import Course, DailyLog, LegacyPracticeCount, SolvedProblem

from .support import NOW


def _course(completed: int = 3, total: int = 10) -> Course:
    return Course(id="a", name="Alpha", total=total, completed=completed)


def _problem(slug: str) -> SolvedProblem:
    return SolvedProblem(
        id=slug,
        title=slug.upper(),
        link=f"https://leetcode.com/problems/{slug}/",
        timestamp=datetime(2026, 10, 18, tzinfo=timezone.utc),
    )


def test_day_inputs_move_completed_by_delta() -> None:
    courses = [_course()]

    day1 = apply_day(courses, None, DayInput(courses={"a": "5"}), NOW)
    assert courses[0].completed == 8
    assert day1.courses == {"a": 5}

    resaved = apply_day(courses, day1, DayInput(courses={"a": 5}), NOW)
    assert courses[0].completed == 8

    apply_day(courses, resaved, DayInput(courses={"a": 8}), NOW)
    assert courses[0].completed == 10


def test_lowering_an_input_subtracts_and_clamps_at_zero() -> None:
    courses = [_course(completed=2)]
    previous = DailyLog(courses={"a": 6})

    recorded = apply_course_deltas(courses, previous, {"a": 1})

    assert recorded == {"a": 1}
    assert courses[0].completed == 0


def test_unparseable_input_counts_as_zero() -> None:
    courses = [_course()]
    recorded = apply_course_deltas(courses, None, {"a": "lots"})
    assert recorded == {"a": 0}
    assert courses[0].completed == 3


def test_resave_keeps_solved_problems() -> None:
    previous = DailyLog(dsa_solved=[_problem("two-sum")])
    log = apply_day([_course()], previous, DayInput(vocab_word="terse", vocab_definition="brief"), NOW)

    assert [problem.id for problem in log.solved_problems] == ["two-sum"]
    assert log.vocab_word == "terse"
    assert log.timestamp == NOW


def test_resave_keeps_legacy_practice_count() -> None:
    previous = DailyLog(legacy_dsa=LegacyPracticeCount(count=4))
    log = apply_day([_course()], previous, DayInput(), NOW)

    assert log.dsa_solved is None
    assert log.solved_count == 4


def test_add_solved_problem_ignores_duplicates() -> None:
    log = DailyLog()

    assert add_solved_problem(log, _problem("two-sum")) is True
    assert add_solved_problem(log, _problem("two-sum")) is False
    assert add_solved_problem(log, _problem("add-two-numbers")) is True
    assert log.solved_count == 2
