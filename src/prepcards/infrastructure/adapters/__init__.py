# Infrastructure Adapters Package
from .deck_file import load_deck_card_ids
from .progress_file import (
    JsonProgressRepository,
    decode_interview_date,
    decode_progress,
    decode_sessions,
    encode_progress,
)

__all__ = [
    "JsonProgressRepository",
    "decode_interview_date",
    "decode_progress",
    "decode_sessions",
    "encode_progress",
    "load_deck_card_ids",
]
