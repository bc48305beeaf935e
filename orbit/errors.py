"""Exception taxonomy shared by the tracker client and the store service."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class OrbitError(RuntimeError):
    """Base class for every recoverable tracker failure."""


class VerificationError(OrbitError):
    """Raised when a practice problem could not be verified."""


class InvalidURLError(VerificationError):
    pass


class MissingConfigError(VerificationError):
    pass


class SubmissionNotFoundError(VerificationError):
    pass


class StaleSubmissionError(VerificationError):
    """The problem was solved, but not within the last 24 hours."""

    def __init__(self, message: str, *, submitted_at: Optional[datetime] = None) -> None:
        super().__init__(message)
        self.submitted_at = submitted_at


class VerificationUnavailableError(VerificationError):
    """The verification source could not be queried; manual override is allowed."""


class PersistenceError(OrbitError):
    pass


class RemoteUnreachableError(PersistenceError):
    pass


class SaveFailedError(PersistenceError):
    pass


class MigrationFailedError(PersistenceError):
    pass


__all__ = [
    "InvalidURLError",
    "MigrationFailedError",
    "MissingConfigError",
    "OrbitError",
    "PersistenceError",
    "RemoteUnreachableError",
    "SaveFailedError",
    "StaleSubmissionError",
    "SubmissionNotFoundError",
    "VerificationError",
    "VerificationUnavailableError",
]
