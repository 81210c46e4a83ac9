"""Centralized constants for the prepcards scheduler.

All magic numbers live here so every layer imports from a single
source of truth. These are fixed SM-2 values, not configuration.
"""

# ---------- SM-2 ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
FORGET_EASE_PENALTY = 0.2
EASE_BASE_BONUS = 0.1
EASE_LINEAR_PENALTY = 0.08
EASE_QUADRATIC_PENALTY = 0.02

# ---------- SM-2 quality scale ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# ---------- SM-2 intervals (days) ----------
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6

# ---------- Study session ----------
TARGET_SESSION_SIZE = 25
MAX_OVERDUE_SESSION_SIZE = 30
DEFAULT_NEW_CARD_LIMIT = 10

# ---------- Study log ----------
FLASHCARD_ACTIVITY = "flashcards"
STUDY_SESSION_IDLE_MINUTES = 30  # a longer gap between answers starts a new session

# ---------- Mastery ----------
MASTERED_LEVEL = 4
