# Domain Package
from .errors import (
    DeckFileError,
    IntervalOverflowError,
    InvalidArgumentError,
    InvalidQualityError,
    InvalidTimestampError,
    ProgressFileError,
    UnknownResponseLabelError,
)
from .models import (
    CardSchedule,
    MasteryRecord,
    Quality,
    ResponseLabel,
    SessionPlan,
    StudySession,
    TriageResult,
)
from .ports import ProgressRepository

__all__ = [
    "CardSchedule",
    "MasteryRecord",
    "Quality",
    "ResponseLabel",
    "SessionPlan",
    "StudySession",
    "TriageResult",
    "ProgressRepository",
    "DeckFileError",
    "IntervalOverflowError",
    "InvalidArgumentError",
    "InvalidQualityError",
    "InvalidTimestampError",
    "ProgressFileError",
    "UnknownResponseLabelError",
]
