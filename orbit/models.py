"""Tracker domain models and their JSON wire shape."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_COURSES: tuple[tuple[str, str, int], ...] = (
    ("embedded", "Embedded Systems", 49),
    ("dsp", "DSP (Digital Signal Processing)", 107),
    ("analog", "Analog Circuit", 106),
    ("probability", "Probability", 49),
    ("emwaves", "Electromagnetic Waves", 28),
)


def lenient_int(value: Any) -> int:
    """Parse counters the way form inputs were read: leading digits, else 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return 0


def date_key(day: date) -> str:
    return day.isoformat()


class Course(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    total: int = Field(ge=0)
    completed: int = 0

    @model_validator(mode="after")
    def _clamp_completed(self) -> "Course":
        self.completed = clamp(self.completed, 0, self.total)
        return self

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.completed / self.total * 100)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def default_courses() -> List[Course]:
    return [Course(id=course_id, name=name, total=total) for course_id, name, total in DEFAULT_COURSES]


class SolvedProblem(BaseModel):
    id: str
    title: str
    link: str
    timestamp: datetime


class VocabEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word: str = ""
    definition: str = Field("", alias="def")


class LegacyPracticeCount(BaseModel):
    """Pre-verification practice shape that only stored how many problems were done."""

    model_config = ConfigDict(extra="allow")

    count: int = 0

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return lenient_int(value)


class DailyLog(BaseModel):
    """Everything recorded for one calendar date."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    courses: Dict[str, int] = Field(default_factory=dict)
    dsa_solved: Optional[List[SolvedProblem]] = Field(None, alias="dsaSolved")
    legacy_dsa: Optional[LegacyPracticeCount] = Field(None, alias="dsa")
    vocab: Optional[VocabEntry] = None
    aptitude: bool = False
    linux: bool = False
    notes: str = ""
    timestamp: Optional[datetime] = None

    @field_validator("courses", mode="before")
    @classmethod
    def _coerce_course_inputs(cls, value: Any) -> Dict[str, int]:
        if not isinstance(value, dict):
            return {}
        return {str(key): lenient_int(raw) for key, raw in value.items()}

    @property
    def solved_problems(self) -> List[SolvedProblem]:
        return list(self.dsa_solved or [])

    @property
    def solved_count(self) -> int:
        # A present list wins even when empty; the legacy count is only a fallback.
        if self.dsa_solved is not None:
            return len(self.dsa_solved)
        if self.legacy_dsa is not None:
            return self.legacy_dsa.count
        return 0

    @property
    def vocab_word(self) -> str:
        return self.vocab.word if self.vocab and self.vocab.word else ""

    def course_input(self, course_id: str) -> int:
        return self.courses.get(course_id, 0)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    lc_username: str = Field("", alias="lcUsername")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Store(BaseModel):
    """Aggregate root persisted by the tracker."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    courses: List[Course] = Field(default_factory=default_courses)
    logs: Dict[str, DailyLog] = Field(default_factory=dict)
    streak: int = 0
    last_login: Optional[str] = Field(None, alias="lastLogin")

    def course(self, course_id: str) -> Optional[Course]:
        for course in self.courses:
            if course.id == course_id:
                return course
        return None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def meta_payload(self) -> Dict[str, Any]:
        """The store without its logs, persisted as the singleton metadata blob."""
        payload = self.to_payload()
        payload.pop("logs", None)
        return payload


__all__ = [
    "Course",
    "DEFAULT_COURSES",
    "DailyLog",
    "LegacyPracticeCount",
    "SolvedProblem",
    "Store",
    "UserSettings",
    "VocabEntry",
    "clamp",
    "date_key",
    "default_courses",
    "lenient_int",
]
