"""
Domain models for flashcard scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum

from .constants import (
    DEFAULT_EASE_FACTOR,
    FLASHCARD_ACTIVITY,
    MAX_QUALITY,
    MIN_QUALITY,
    PASSING_QUALITY,
)
from .errors import InvalidQualityError


class Quality(IntEnum):
    """Self-rated recall quality on the SM-2 0-5 scale."""

    BLACKOUT = 0
    WRONG = 1
    WRONG_FAMILIAR = 2
    HARD = 3
    GOOD = 4
    PERFECT = 5

    @classmethod
    def coerce(cls, value: "int | Quality") -> "Quality":
        """
        Convert a raw integer into a Quality.

        Raises:
            InvalidQualityError: If the value is not an integer in [0, 5].
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidQualityError(f"Quality must be an integer, got {value!r}")
        if not MIN_QUALITY <= value <= MAX_QUALITY:
            raise InvalidQualityError(
                f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {value}"
            )
        return cls(value)

    @property
    def remembered(self) -> bool:
        return self >= PASSING_QUALITY


class ResponseLabel(str, Enum):
    """The four answer buttons shown after a card is flipped."""

    DONT_KNOW = "dont-know"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def _missing_(cls, value):
        # Accept "don't know", "Dont_Know" and similar spellings of the same button.
        if isinstance(value, str):
            normalized = value.strip().lower().replace("'", "").replace("_", "-").replace(" ", "-")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


@dataclass(frozen=True)
class CardSchedule:
    """
    Output of a single scheduling step.

    Attributes:
        level: Consecutive successful recalls after this review.
        ease_factor: Interval growth multiplier (never below 1.3).
        interval_days: Days until the card is due again (0 after forgetting).
        next_review_at: When the card becomes due.
    """

    level: int
    ease_factor: float
    interval_days: int
    next_review_at: datetime


@dataclass(frozen=True)
class MasteryRecord:
    """
    Stored mastery state for one flashcard.

    The record is owned by the caller's progress store. Scheduling returns
    a new record instead of mutating this one.
    """

    card_id: str
    level: int
    next_review_at: datetime
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    last_reviewed_at: datetime | None = None
    review_count: int = 0


@dataclass
class TriageResult:
    """Candidate cards split by urgency. Cards due in the future are in none of the lists."""

    overdue: list[str] = field(default_factory=list)
    due_today: list[str] = field(default_factory=list)
    new: list[str] = field(default_factory=list)

    @property
    def total_due(self) -> int:
        return len(self.overdue) + len(self.due_today)


@dataclass
class SessionPlan:
    """Ordered card ids to present in one sitting."""

    queue: list[str]
    triage: TriageResult
    recommended_size: int


@dataclass(frozen=True)
class StudySession:
    """
    One logged study sitting.

    Attributes:
        started_at: When the first item was studied.
        ended_at: When the last item was studied.
        activity: What was studied (flashcards, topics, practice, quiz).
        items_studied: Number of items answered during the sitting.
    """

    started_at: datetime
    ended_at: datetime
    activity: str = FLASHCARD_ACTIVITY
    items_studied: int = 0

    @property
    def minutes(self) -> float:
        return (self.ended_at - self.started_at).total_seconds() / 60
