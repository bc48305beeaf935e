"""Application state and the user-facing operations that update it."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

from .aggregator import DayInput, add_solved_problem, apply_day
from .config import Settings, get_settings, now_local
from .errors import VerificationUnavailableError
from .models import DailyLog, SolvedProblem, Store, UserSettings, date_key
from .persistence import PersistenceAdapter
from .streak import compute_streak
from .telemetry import emit_event
from .verifier import SubmissionVerifier, VerificationResult, extract_slug, manual_problem

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "daily_study_progress.json"


@dataclass
class AppState:
    store: Store = field(default_factory=Store)
    settings: UserSettings = field(default_factory=UserSettings)


@dataclass(frozen=True)
class SaveOutcome:
    day: str
    log: DailyLog
    persisted: bool


class Tracker:
    """Owns the in-memory state and routes every change through persistence."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        *,
        settings: Optional[Settings] = None,
        verifier: Optional[SubmissionVerifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._adapter = adapter
        self._verifier = verifier or SubmissionVerifier(self._settings)
        self._clock = clock or (lambda: now_local(self._settings))
        self.state = AppState()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Tracker":
        resolved = settings or get_settings()
        return cls(PersistenceAdapter.from_settings(resolved), settings=resolved)

    @property
    def adapter(self) -> PersistenceAdapter:
        return self._adapter

    def today(self) -> date:
        return self._clock().date()

    def start(self) -> AppState:
        """Pick a storage mode and load state; the one startup probe happens here."""
        mode = self._adapter.connect()
        logger.debug("Tracker starting in %s mode", mode)
        return self.load()

    def load(self) -> AppState:
        store, settings = self._adapter.load()
        self.state = AppState(store=store, settings=settings)
        self.refresh_streak()
        return self.state

    def refresh_streak(self) -> int:
        self.state.store.streak = compute_streak(self.state.store.logs, self.today())
        return self.state.store.streak

    def today_log(self) -> Optional[DailyLog]:
        return self.state.store.logs.get(date_key(self.today()))

    def _persist_log(self, day: str, log: DailyLog) -> bool:
        store = self.state.store
        store.logs[day] = log
        persisted = self._adapter.save_log(day, log, store)
        if persisted:
            emit_event("daily_log_saved", day=day, mode=self._adapter.active_name)
        else:
            logger.warning("Log for %s kept in memory only; persistence did not complete", day)
        return persisted

    def save_day(self, day_input: DayInput) -> SaveOutcome:
        day = date_key(self.today())
        store = self.state.store
        log = apply_day(store.courses, store.logs.get(day), day_input, self._clock())
        persisted = self._persist_log(day, log)
        self.refresh_streak()
        return SaveOutcome(day=day, log=log, persisted=persisted)

    def record_problem(self, problem: SolvedProblem) -> SaveOutcome:
        day = date_key(self.today())
        log = self.state.store.logs.get(day) or DailyLog()
        if not add_solved_problem(log, problem):
            return SaveOutcome(day=day, log=log, persisted=True)
        persisted = self._persist_log(day, log)
        self.refresh_streak()
        return SaveOutcome(day=day, log=log, persisted=persisted)

    def verify_problem(
        self,
        url: str,
        *,
        confirm_manual: Optional[Callable[[str], bool]] = None,
    ) -> VerificationResult:
        """Verify a submission and record it, offering a manual override if the feed is down."""
        try:
            result = self._verifier.verify(url, self.state.settings.lc_username, now=self._clock())
        except VerificationUnavailableError as exc:
            logger.warning("Verification unavailable: %s", exc)
            if confirm_manual is None or not confirm_manual(str(exc)):
                raise
            slug = extract_slug(url)
            problem = manual_problem(slug, url, now=self._clock())
            result = VerificationResult(problem=problem, submitted_at=None, manual=True)
        self.record_problem(result.problem)
        return result

    def update_username(self, username: str) -> bool:
        """Trim and store the username; returns whether the settings were persisted."""
        self.state.settings.lc_username = username.strip()
        persisted = self._adapter.save_settings(self.state.settings)
        if not persisted:
            logger.warning("Settings kept in memory only; persistence did not complete")
        return persisted

    def export_snapshot(self, path: Optional[Path] = None) -> Path:
        target = path or Path(EXPORT_FILENAME)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as handle:
            json.dump(self.state.store.to_payload(), handle, indent=2)
        logger.info("Exported %d logs to %s", len(self.state.store.logs), target)
        return target

    def migrate_to_remote(self) -> AppState:
        """Upload the locally stored snapshot, then continue against the server."""
        store, settings = self._adapter.local.load()
        self._adapter.migrate(store, settings)
        return self.load()

    def reset(self) -> AppState:
        self._adapter.reset_local()
        self.state = AppState()
        return self.state


__all__ = ["AppState", "EXPORT_FILENAME", "SaveOutcome", "Tracker"]
