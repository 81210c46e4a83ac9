"""
Spaced-repetition scheduler (SM-2 variant).

Pure functions over their arguments plus an injectable "now":
1. compute_next_review: next schedule for one rated card
2. map_response_to_quality: answer button -> quality rating
3. triage_cards: split candidates into overdue / due today / new
4. recommend_session_size: how many cards to study in one sitting
"""

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any

from prepcards.application.utils.dates import calendar_day, is_due, local_now, parse_timestamp
from prepcards.domain.constants import (
    EASE_BASE_BONUS,
    EASE_LINEAR_PENALTY,
    EASE_QUADRATIC_PENALTY,
    FIRST_INTERVAL_DAYS,
    FORGET_EASE_PENALTY,
    MAX_OVERDUE_SESSION_SIZE,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    SECOND_INTERVAL_DAYS,
    TARGET_SESSION_SIZE,
)
from prepcards.domain.errors import (
    IntervalOverflowError,
    InvalidArgumentError,
    InvalidTimestampError,
    UnknownResponseLabelError,
)
from prepcards.domain.models import CardSchedule, Quality, ResponseLabel, TriageResult

logger = logging.getLogger(__name__)

QUALITY_BY_LABEL: dict[ResponseLabel, Quality] = {
    ResponseLabel.DONT_KNOW: Quality.BLACKOUT,
    ResponseLabel.HARD: Quality.HARD,
    ResponseLabel.GOOD: Quality.GOOD,
    ResponseLabel.EASY: Quality.PERFECT,
}


def compute_next_review(
    current_level: int,
    current_ease_factor: float,
    quality: int | Quality,
    now: datetime | None = None,
) -> CardSchedule:
    """
    Calculate the next review schedule for a card.

    Args:
        current_level: Consecutive successful recalls so far (>= 0).
        current_ease_factor: Current ease factor (starts at 2.5).
        quality: Self-assessed recall, 0 (blackout) to 5 (perfect).
        now: Computation time. Defaults to the system clock.

    Returns:
        A new CardSchedule. Quality below 3 resets the card and makes it due immediately.

    Raises:
        InvalidQualityError: If quality is outside [0, 5].
        InvalidArgumentError: If current_level is negative.
        IntervalOverflowError: If the next review date cannot be represented.
    """
    q = Quality.coerce(quality)
    if current_level < 0:
        raise InvalidArgumentError(f"Level must be non-negative, got {current_level}")
    if now is None:
        now = local_now()

    if not q.remembered:
        return CardSchedule(
            level=0,
            ease_factor=max(MIN_EASE_FACTOR, current_ease_factor - FORGET_EASE_PENALTY),
            interval_days=0,
            next_review_at=now,
        )

    miss = MAX_QUALITY - q
    new_ease = max(
        MIN_EASE_FACTOR,
        current_ease_factor
        + (EASE_BASE_BONUS - miss * (EASE_LINEAR_PENALTY + miss * EASE_QUADRATIC_PENALTY)),
    )

    if current_level == 0:
        interval = FIRST_INTERVAL_DAYS
    elif current_level == 1:
        interval = SECOND_INTERVAL_DAYS
    else:
        try:
            interval = _round_half_up(current_level * new_ease)
        except OverflowError as e:
            raise IntervalOverflowError(
                f"Interval for level {current_level} at ease {new_ease} is not finite"
            ) from e

    try:
        next_review_at = now + timedelta(days=interval)
    except OverflowError as e:
        raise IntervalOverflowError(
            f"Next review {interval} days after {now.isoformat()} is out of range"
        ) from e

    return CardSchedule(
        level=current_level + 1,
        ease_factor=new_ease,
        interval_days=interval,
        next_review_at=next_review_at,
    )


def map_response_to_quality(label: ResponseLabel | str) -> Quality:
    """
    Map an answer button to its quality rating.

    Raises:
        UnknownResponseLabelError: For anything but dont-know, hard, good, easy.
    """
    try:
        response = ResponseLabel(label)
    except ValueError as e:
        valid = ", ".join(member.value for member in ResponseLabel)
        raise UnknownResponseLabelError(
            f"Unknown response label {label!r}; expected one of: {valid}"
        ) from e
    return QUALITY_BY_LABEL[response]


def triage_cards(
    all_card_ids: Iterable[str],
    progress: Mapping[str, Any],
    now: datetime | None = None,
) -> TriageResult:
    """
    Split candidate cards into overdue, due-today and new groups.

    Cards with no progress record are new. Cards whose review day is after
    today belong to no group at all and are left out of the session.

    Args:
        all_card_ids: Candidate ids, in presentation order.
        progress: Card id -> record exposing `next_review_at`.
        now: Computation time. Defaults to the system clock.

    Raises:
        InvalidTimestampError: If a record's review timestamp is missing or malformed.
    """
    if now is None:
        now = local_now()
    today = now.date()

    result = TriageResult()
    future = 0

    for card_id in all_card_ids:
        record = progress.get(card_id)
        if record is None:
            result.new.append(card_id)
            continue

        due_day = calendar_day(_next_review_of(card_id, record), now)
        if due_day < today:
            result.overdue.append(card_id)
        elif due_day == today:
            result.due_today.append(card_id)
        else:
            future += 1

    logger.debug(
        f"Triage: overdue={len(result.overdue)} due_today={len(result.due_today)} "
        f"new={len(result.new)} not_due={future}"
    )
    return result


def recommend_session_size(overdue_count: int, due_today_count: int, new_count: int) -> int:
    """
    Recommend how many cards to study in one sitting.

    Priority is overdue, then due today, then new, filling a target of 25.
    An overdue backlog alone is capped at 30.
    """
    for name, count in (
        ("overdue_count", overdue_count),
        ("due_today_count", due_today_count),
        ("new_count", new_count),
    ):
        if count < 0:
            raise InvalidArgumentError(f"{name} must be non-negative, got {count}")

    if overdue_count >= TARGET_SESSION_SIZE:
        return min(overdue_count, MAX_OVERDUE_SESSION_SIZE)
    if overdue_count + due_today_count >= TARGET_SESSION_SIZE:
        return overdue_count + min(due_today_count, TARGET_SESSION_SIZE - overdue_count)

    remaining = TARGET_SESSION_SIZE - overdue_count - due_today_count
    return overdue_count + due_today_count + min(new_count, remaining)


def get_due_card_ids(progress: Mapping[str, Any], now: datetime | None = None) -> list[str]:
    """
    Return tracked cards whose review time has passed.

    Unlike triage_cards this compares exact instants, not calendar days.
    """
    if now is None:
        now = local_now()
    return [
        card_id
        for card_id, record in progress.items()
        if is_due(_next_review_of(card_id, record), now)
    ]


def _next_review_of(card_id: str, record: Any) -> datetime:
    if isinstance(record, Mapping):
        raw = record.get("next_review_at")
    else:
        raw = getattr(record, "next_review_at", None)
    try:
        return parse_timestamp(raw)
    except InvalidTimestampError as e:
        raise InvalidTimestampError(f"Card {card_id!r}: {e}") from e


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
