# Application Package
from .scheduler import (
    compute_next_review,
    get_due_card_ids,
    map_response_to_quality,
    recommend_session_size,
    triage_cards,
)
from .session_builder import (
    StudySessionService,
    apply_review,
    build_study_queue,
    log_study_item,
    plan_session,
)
from .stats import (
    DeckStats,
    DeckStatsCalculator,
    days_until,
    mastery_rate,
    study_streak,
    total_study_minutes,
)

__all__ = [
    "compute_next_review",
    "get_due_card_ids",
    "map_response_to_quality",
    "recommend_session_size",
    "triage_cards",
    "StudySessionService",
    "apply_review",
    "build_study_queue",
    "log_study_item",
    "plan_session",
    "DeckStats",
    "DeckStatsCalculator",
    "days_until",
    "mastery_rate",
    "study_streak",
    "total_study_minutes",
]
