"""
Session builder for flashcard study sittings.

Builds ordered study queues by:
1. Triaging the deck into overdue / due today / new
2. Sizing the session with recommend_session_size
3. Concatenating the groups in priority order and slicing to that size

After each answer, apply_review turns the rating into a replacement record
and log_study_item adds the answer to the study log.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from prepcards.application.scheduler import (
    compute_next_review,
    map_response_to_quality,
    recommend_session_size,
    triage_cards,
)
from prepcards.application.utils.dates import local_now
from prepcards.domain.constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_NEW_CARD_LIMIT,
    FLASHCARD_ACTIVITY,
    STUDY_SESSION_IDLE_MINUTES,
)
from prepcards.domain.errors import InvalidArgumentError
from prepcards.domain.models import (
    MasteryRecord,
    Quality,
    ResponseLabel,
    SessionPlan,
    StudySession,
    TriageResult,
)
from prepcards.domain.ports import ProgressRepository

logger = logging.getLogger(__name__)


def build_study_queue(
    triage: TriageResult,
    new_card_limit: int = DEFAULT_NEW_CARD_LIMIT,
) -> SessionPlan:
    """
    Assemble the ordered queue for one sitting.

    Args:
        triage: Result of triage_cards for the deck.
        new_card_limit: Maximum new cards offered before sizing (default: 10).

    Returns:
        SessionPlan whose queue is overdue ++ due_today ++ new, cut to the
        recommended size.
    """
    if new_card_limit < 0:
        raise InvalidArgumentError(f"new_card_limit must be non-negative, got {new_card_limit}")

    recommended = recommend_session_size(
        len(triage.overdue), len(triage.due_today), len(triage.new)
    )
    candidates = triage.overdue + triage.due_today + triage.new[:new_card_limit]

    return SessionPlan(
        queue=candidates[:recommended],
        triage=triage,
        recommended_size=recommended,
    )


def plan_session(
    all_card_ids: Iterable[str],
    progress: Mapping[str, Any],
    now: datetime | None = None,
    new_card_limit: int = DEFAULT_NEW_CARD_LIMIT,
) -> SessionPlan:
    """Triage a deck and build its study queue in one step."""
    triage = triage_cards(all_card_ids, progress, now=now)
    return build_study_queue(triage, new_card_limit=new_card_limit)


def apply_review(
    card_id: str,
    previous: MasteryRecord | None,
    quality: int | Quality,
    now: datetime | None = None,
) -> MasteryRecord:
    """
    Produce the replacement record for a card that was just rated.

    A card with no previous record starts from level 0 and the default ease.
    """
    if now is None:
        now = local_now()

    level = previous.level if previous else 0
    ease = previous.ease_factor if previous else DEFAULT_EASE_FACTOR
    review_count = previous.review_count if previous else 0

    schedule = compute_next_review(level, ease, quality, now=now)

    return MasteryRecord(
        card_id=card_id,
        level=schedule.level,
        ease_factor=schedule.ease_factor,
        interval_days=schedule.interval_days,
        next_review_at=schedule.next_review_at,
        last_reviewed_at=now,
        review_count=review_count + 1,
    )


def log_study_item(
    sessions: Iterable[StudySession],
    now: datetime,
    activity: str = FLASHCARD_ACTIVITY,
) -> list[StudySession]:
    """
    Add one answered item to the study log.

    The item extends the latest session when it has the same activity and
    ended at most STUDY_SESSION_IDLE_MINUTES ago. Otherwise it opens a new
    one-item session.
    """
    log = list(sessions)
    last = log[-1] if log else None
    if last is not None and last.activity == activity and _continues(last, now):
        log[-1] = replace(last, ended_at=now, items_studied=last.items_studied + 1)
    else:
        log.append(StudySession(started_at=now, ended_at=now, activity=activity, items_studied=1))
    return log


def _continues(session: StudySession, now: datetime) -> bool:
    if (session.ended_at.tzinfo is None) != (now.tzinfo is None):
        return False
    gap = now - session.ended_at
    return timedelta(0) <= gap <= timedelta(minutes=STUDY_SESSION_IDLE_MINUTES)


class StudySessionService:
    """
    Application service for planning sessions and recording answers.

    Depends on the ProgressRepository abstraction; the scheduler itself
    never touches storage.
    """

    def __init__(self, repo: ProgressRepository, new_card_limit: int = DEFAULT_NEW_CARD_LIMIT):
        """
        Args:
            repo: The repository (port) holding mastery records.
            new_card_limit: Maximum new cards offered per session.
        """
        self._repo = repo
        self._new_card_limit = new_card_limit

    def plan(self, card_ids: Iterable[str], now: datetime | None = None) -> SessionPlan:
        """Build the study queue for the given deck."""
        progress = self._repo.load()
        plan = plan_session(card_ids, progress, now=now, new_card_limit=self._new_card_limit)
        logger.debug(f"Planned session of {len(plan.queue)} cards")
        return plan

    def record(
        self,
        card_id: str,
        response: ResponseLabel | str,
        now: datetime | None = None,
    ) -> MasteryRecord:
        """
        Rate a card, store its new mastery record and log the answer.

        Args:
            card_id: The card that was answered.
            response: The answer button pressed.
            now: Review time. Defaults to the system clock.

        Returns:
            The stored record.
        """
        quality = map_response_to_quality(response)
        if now is None:
            now = local_now()

        progress = self._repo.load()
        sessions = self._repo.load_sessions()
        updated = apply_review(card_id, progress.get(card_id), quality, now=now)
        self._repo.save_record(updated)
        self._repo.save_sessions(log_study_item(sessions, now))
        logger.info(
            f"Recorded {card_id}: quality={int(quality)} level={updated.level} "
            f"next={updated.next_review_at.isoformat()}"
        )
        return updated
