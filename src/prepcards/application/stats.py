"""
Deck statistics derived from mastery records and the study log.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from prepcards.application.scheduler import recommend_session_size, triage_cards
from prepcards.application.utils.dates import calendar_day, local_now
from prepcards.domain.constants import MASTERED_LEVEL
from prepcards.domain.models import MasteryRecord, StudySession


@dataclass
class DeckStats:
    """
    Summary of a deck's review state.
    """

    total_cards: int
    tracked: int
    overdue: int
    due_today: int
    new: int
    total_due: int
    recommended_size: int
    mastery_rate: float  # Percent of tracked cards at or above MASTERED_LEVEL
    study_streak: int = 0
    study_minutes: float = 0.0
    days_until_interview: int | None = None


def mastery_rate(records: Iterable[MasteryRecord]) -> float:
    """
    Percentage of records at or above the mastered level.

    Returns 0.0 when there are no records.
    """
    records = list(records)
    if not records:
        return 0.0
    mastered = sum(1 for r in records if r.level >= MASTERED_LEVEL)
    return mastered / len(records) * 100


def study_streak(sessions: Sequence[StudySession], now: datetime | None = None) -> int:
    """
    Count consecutive calendar days with a study session, ending today.

    Sessions are walked newest first (the log is append-only, so list order).
    Several sessions on one day count once; a gap ends the streak, and with
    no session today the streak is 0. Sessions dated after today are ignored.
    """
    if now is None:
        now = local_now()
    today = now.date()

    streak = 0
    for session in reversed(sessions):
        days_ago = (today - calendar_day(session.started_at, now)).days
        if days_ago == streak:
            streak += 1
        elif days_ago > streak:
            break
    return streak


def total_study_minutes(sessions: Iterable[StudySession]) -> float:
    """Sum of session durations, in minutes."""
    return sum(session.minutes for session in sessions)


def days_until(target: datetime | None, now: datetime | None = None) -> int | None:
    """
    Calendar days from today to `target`; negative once it has passed.

    Returns None when no target is set.
    """
    if target is None:
        return None
    if now is None:
        now = local_now()
    return (calendar_day(target, now) - now.date()).days


class DeckStatsCalculator:
    """
    Computes DeckStats for a deck against a progress mapping.

    Stateless and side-effect free.
    """

    def summarize(
        self,
        card_ids: Iterable[str],
        progress: Mapping[str, MasteryRecord],
        now: datetime | None = None,
        sessions: Sequence[StudySession] = (),
        interview_date: datetime | None = None,
    ) -> DeckStats:
        if now is None:
            now = local_now()
        card_ids = list(card_ids)
        triage = triage_cards(card_ids, progress, now=now)
        tracked = [progress[cid] for cid in dict.fromkeys(card_ids) if cid in progress]

        return DeckStats(
            total_cards=len(card_ids),
            tracked=len(tracked),
            overdue=len(triage.overdue),
            due_today=len(triage.due_today),
            new=len(triage.new),
            total_due=triage.total_due,
            recommended_size=recommend_session_size(
                len(triage.overdue), len(triage.due_today), len(triage.new)
            ),
            mastery_rate=mastery_rate(tracked),
            study_streak=study_streak(sessions, now=now),
            study_minutes=total_study_minutes(sessions),
            days_until_interview=days_until(interview_date, now=now),
        )
