"""Command-line front-end for the tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from . import reporting
from .aggregator import DayInput
from .config import get_settings
from .errors import MigrationFailedError, StaleSubmissionError, VerificationError
from .logging_config import configure_logging
from .tracker import Tracker

logger = logging.getLogger("orbit.cli")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="orbit", description="Daily study progress tracker.")
    parser.add_argument("--log-level", default=None, help="Override ORBIT_LOG_LEVEL for this run.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the store server.")
    commands.add_parser("dashboard", help="Show totals, streak and course progress.")
    commands.add_parser("history", help="List every logged day, newest first.")
    commands.add_parser("analytics", help="Show course distribution and the practice trend.")

    log = commands.add_parser("log", help="Save today's progress.")
    log.add_argument(
        "--course",
        action="append",
        default=[],
        metavar="ID=COUNT",
        help="Lectures completed today for a course (cumulative for the day).",
    )
    log.add_argument("--word", default=None, help="Vocabulary word of the day.")
    log.add_argument("--definition", default=None, help="Definition for the vocabulary word.")
    log.add_argument("--aptitude", action=argparse.BooleanOptionalAction, default=None)
    log.add_argument("--linux", action=argparse.BooleanOptionalAction, default=None)
    log.add_argument("--notes", default=None)

    verify = commands.add_parser("verify", help="Verify a solved practice problem.")
    verify.add_argument("url")
    verify.add_argument("--yes", action="store_true", help="Accept the manual override without prompting.")

    settings = commands.add_parser("settings", help="Show or change user settings.")
    settings.add_argument("--username", default=None, help="Practice-site username used for verification.")

    export = commands.add_parser("export", help="Write the full store snapshot as JSON.")
    export.add_argument("--output", type=Path, default=None)

    commands.add_parser("migrate", help="Upload local data to the store server.")

    reset = commands.add_parser("reset", help="Delete all local data.")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset.")
    return parser.parse_args(argv)


def _parse_course_inputs(pairs: List[str]) -> Dict[str, str]:
    inputs: Dict[str, str] = {}
    for pair in pairs:
        course_id, sep, value = pair.partition("=")
        if not sep or not course_id.strip():
            raise ValueError(f"Expected ID=COUNT, got '{pair}'")
        inputs[course_id.strip()] = value.strip()
    return inputs


def build_day_input(tracker: Tracker, args: argparse.Namespace) -> DayInput:
    """Start from what is already recorded today, like a pre-filled form."""
    previous = tracker.today_log()
    courses: Dict[str, object] = dict(previous.courses) if previous else {}
    courses.update(_parse_course_inputs(args.course))
    vocab = previous.vocab if previous and previous.vocab else None

    def pick(value: object, fallback: object) -> object:
        return fallback if value is None else value

    return DayInput(
        courses=courses,
        vocab_word=pick(args.word, vocab.word if vocab else ""),
        vocab_definition=pick(args.definition, vocab.definition if vocab else ""),
        aptitude=pick(args.aptitude, previous.aptitude if previous else False),
        linux=pick(args.linux, previous.linux if previous else False),
        notes=pick(args.notes, previous.notes if previous else ""),
    )


def _print_dashboard(tracker: Tracker) -> None:
    store = tracker.state.store
    summary = reporting.dashboard(store)
    suffix = " (Offline)" if tracker.adapter.offline else ""
    print(f"{tracker.today().strftime('%A, %b %d, %Y')}{suffix}")
    print(f"Overall progress: {summary.completion_percent}%")
    print(f"Problems solved: {summary.total_solved}   Vocab days: {summary.vocab_days}   Streak: {summary.streak}")
    for course in summary.courses:
        print(f"  {course.name:<34} {course.completed:>4} / {course.total:<4} {course.percent:>3}%")
    print("Last 7 days:")
    for point in reporting.weekly_activity(store.logs, tracker.today()):
        print(f"  {point.label:<4} {'#' * point.value} {point.value}")


def _print_history(tracker: Tracker) -> None:
    rows = reporting.history_rows(tracker.state.store)
    if not rows:
        print("No logs yet.")
        return
    for row in rows:
        courses = ", ".join(f"{name[:8]}...: {value}" for name, value in row.course_inputs) or "-"
        marks = ("*" if row.practice_goal_met else "") + ("+" if row.habits_met else "")
        print(f"{row.day}  {courses:<40} {row.solved_count} Qs  {row.vocab_word:<16} {marks}")


def _print_analytics(tracker: Tracker) -> None:
    store = tracker.state.store
    print("Course distribution:")
    for name, completed in reporting.course_distribution(store.courses):
        print(f"  {name:<34} {completed}")
    print("Questions solved (14 days):")
    for point in reporting.solved_trend(store.logs, tracker.today()):
        print(f"  {point.label:>2} {'#' * point.value} {point.value}")


def _confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _verify(tracker: Tracker, args: argparse.Namespace) -> int:
    def confirm_manual(reason: str) -> bool:
        message = f"Verification failed ({reason}). Did you honestly solve this today?"
        return args.yes or _confirm(message)

    try:
        result = tracker.verify_problem(args.url, confirm_manual=confirm_manual)
    except StaleSubmissionError as exc:
        print(str(exc))
        return 1
    except VerificationError as exc:
        print(f"Verification failed: {exc}")
        return 1
    if result.manual:
        print(f"Manually verified: {result.problem.title}")
    else:
        print(f"Accepted! {result.problem.title} added to today's log.")
    log = tracker.today_log()
    solved = log.solved_count if log else 0
    print(f"Solved today: {solved}{' - goal met!' if solved >= reporting.PRACTICE_DAILY_GOAL else ''}")
    return 0


def _log(tracker: Tracker, args: argparse.Namespace) -> int:
    try:
        day_input = build_day_input(tracker, args)
    except ValueError as exc:
        print(str(exc))
        return 2
    outcome = tracker.save_day(day_input)
    if outcome.persisted:
        print("Progress Saved Successfully!")
    else:
        print("Failed to save log to DB; today's progress is kept for this session only.")
    print(f"Streak: {tracker.state.store.streak}")
    return 0 if outcome.persisted else 1


def _settings(tracker: Tracker, args: argparse.Namespace) -> int:
    if args.username is not None:
        if not tracker.update_username(args.username):
            print("Failed to save settings; the change is kept for this session only.")
            return 1
        print("Settings Saved")
    print(f"username: {tracker.state.settings.lc_username or '(not set)'}")
    return 0


def _migrate(tracker: Tracker, _: argparse.Namespace) -> int:
    try:
        tracker.migrate_to_remote()
    except MigrationFailedError as exc:
        print(f"Migration failed: {exc}")
        return 1
    print("Migration Successful!")
    return 0


def _reset(tracker: Tracker, args: argparse.Namespace) -> int:
    if not (args.yes or _confirm("Reset ALL local data? This cannot be undone.")):
        print("Reset cancelled.")
        return 1
    tracker.reset()
    print("Local data cleared.")
    return 0


def _export(tracker: Tracker, args: argparse.Namespace) -> int:
    path = tracker.export_snapshot(args.output)
    print(f"Exported to {path}")
    return 0


def _report(printer: Callable[[Tracker], None]) -> Callable[[Tracker, argparse.Namespace], int]:
    def handler(tracker: Tracker, _: argparse.Namespace) -> int:
        printer(tracker)
        return 0

    return handler


HANDLERS: Dict[str, Callable[[Tracker, argparse.Namespace], int]] = {
    "dashboard": _report(_print_dashboard),
    "history": _report(_print_history),
    "analytics": _report(_print_analytics),
    "log": _log,
    "verify": _verify,
    "settings": _settings,
    "export": _export,
    "migrate": _migrate,
    "reset": _reset,
}


def main(argv: Optional[Sequence[str]] = None, *, tracker: Optional[Tracker] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    if args.command == "serve":
        from .main import run

        run()
        return 0

    tracker = tracker or Tracker.from_settings(get_settings())
    tracker.start()
    return HANDLERS[args.command](tracker, args)


if __name__ == "__main__":
    sys.exit(main())
