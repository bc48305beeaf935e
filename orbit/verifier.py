"""Practice-problem verification against the public accepted-submissions feed."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import Settings
from .errors import (
    InvalidURLError,
    MissingConfigError,
    StaleSubmissionError,
    SubmissionNotFoundError,
    VerificationUnavailableError,
)
from .models import SolvedProblem
from .telemetry import emit_event

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"problems/([^/]+)/?")
ACCEPTANCE_WINDOW = timedelta(hours=24)


class AcceptedSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    title_slug: str = Field(alias="titleSlug")
    timestamp: str

    @property
    def submitted_at(self) -> datetime:
        return datetime.fromtimestamp(int(self.timestamp), tz=timezone.utc)


class AcceptedSubmissionsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    submission: List[AcceptedSubmission]


@dataclass(frozen=True)
class VerificationResult:
    problem: SolvedProblem
    submitted_at: Optional[datetime]
    manual: bool = False


def extract_slug(url: str) -> str:
    """Return the problem slug from a URL such as ``.../problems/two-sum/description/``."""
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidURLError("Please enter a valid URL")
    match = _SLUG_PATTERN.search(candidate)
    if not match or not match.group(1):
        raise InvalidURLError(f"Invalid LeetCode URL: {candidate}")
    return match.group(1)


def title_from_slug(slug: str) -> str:
    return slug.replace("-", " ").upper()


def manual_problem(slug: str, url: str, *, now: Optional[datetime] = None) -> SolvedProblem:
    """Record a problem the user vouches for when the feed could not be reached."""
    return SolvedProblem(
        id=slug,
        title=title_from_slug(slug),
        link=url.strip(),
        timestamp=now or datetime.now(timezone.utc),
    )


class SubmissionVerifier:
    """Looks up recent accepted submissions for a username."""

    def __init__(self, settings: Settings, *, client: Optional[httpx.Client] = None) -> None:
        self._base_url = settings.verify_api_url.rstrip("/")
        self._limit = settings.verify_submission_limit
        self._timeout = max(settings.verify_timeout_ms, 1000) / 1000
        self._client = client

    def fetch_accepted(self, username: str) -> List[AcceptedSubmission]:
        endpoint = f"{self._base_url}/{username}/ac-submission"
        local_client = self._client or httpx.Client(timeout=self._timeout)
        close_client = self._client is None
        try:
            response = local_client.get(endpoint, params={"limit": self._limit})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise VerificationUnavailableError(f"Submission lookup failed: {exc}") from exc
        finally:
            if close_client:
                local_client.close()

        try:
            payload = AcceptedSubmissionsPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise VerificationUnavailableError(f"Submission lookup returned invalid payload: {exc}") from exc
        return payload.submission

    def verify(self, url: str, username: str, *, now: Optional[datetime] = None) -> VerificationResult:
        slug = extract_slug(url)
        username = (username or "").strip()
        if not username:
            raise MissingConfigError("Please configure your username first")

        submissions = self.fetch_accepted(username)
        match = next((item for item in submissions if item.title_slug == slug), None)
        if match is None:
            raise SubmissionNotFoundError("No recent accepted submission found for this problem.")

        try:
            submitted_at = match.submitted_at
        except (ValueError, OverflowError, OSError) as exc:
            raise VerificationUnavailableError(f"Unreadable submission timestamp {match.timestamp!r}") from exc

        current = now or datetime.now(timezone.utc)
        if current - submitted_at >= ACCEPTANCE_WINDOW:
            raise StaleSubmissionError(
                f"Found solution, but it was submitted on {submitted_at.date().isoformat()}. Solve it again today!",
                submitted_at=submitted_at,
            )

        logger.debug("Verified %s for %s (submitted %s)", slug, username, submitted_at.isoformat())
        emit_event("submission_verified", slug=slug, submitted_at=submitted_at)
        problem = SolvedProblem(id=slug, title=match.title, link=url.strip(), timestamp=current)
        return VerificationResult(problem=problem, submitted_at=submitted_at)


__all__ = [
    "ACCEPTANCE_WINDOW",
    "AcceptedSubmission",
    "SubmissionVerifier",
    "VerificationResult",
    "extract_slug",
    "manual_problem",
    "title_from_slug",
]
