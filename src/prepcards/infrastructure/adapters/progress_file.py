"""
JSON Progress Repository: infrastructure adapter for the exported progress document.

Implements ProgressRepository over a single JSON file in the shape the study
app exports:

    {"flashcardProgress": {"<card id>": {"cardId": ..., "level": ..., ...}}, ...}

The studySessions log and settings.interviewDate are read as well. Every
other top-level key is carried through untouched.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from prepcards.application.utils.dates import parse_timestamp
from prepcards.domain.constants import DEFAULT_EASE_FACTOR, FLASHCARD_ACTIVITY
from prepcards.domain.errors import InvalidTimestampError, ProgressFileError
from prepcards.domain.models import MasteryRecord, StudySession
from prepcards.domain.ports import ProgressRepository

logger = logging.getLogger(__name__)

PROGRESS_KEY = "flashcardProgress"
SESSIONS_KEY = "studySessions"
SETTINGS_KEY = "settings"


def record_from_json(card_id: str, data: Any) -> MasteryRecord:
    """Decode one flashcardProgress entry."""
    if not isinstance(data, dict):
        raise ProgressFileError(f"Card {card_id!r}: expected an object, got {type(data).__name__}")

    try:
        next_review = parse_timestamp(data.get("nextReview"))
        last_raw = data.get("lastReviewed")
        last_reviewed = parse_timestamp(last_raw) if last_raw else None
    except InvalidTimestampError as e:
        raise InvalidTimestampError(f"Card {card_id!r}: {e}") from e

    try:
        return MasteryRecord(
            card_id=str(data.get("cardId", card_id)),
            level=int(data.get("level", 0)),
            ease_factor=float(data.get("easeFactor", DEFAULT_EASE_FACTOR)),
            interval_days=int(data.get("interval", 0)),
            next_review_at=next_review,
            last_reviewed_at=last_reviewed,
            review_count=int(data.get("reviewCount", 0)),
        )
    except (TypeError, ValueError) as e:
        raise ProgressFileError(f"Card {card_id!r}: {e}") from e


def record_to_json(record: MasteryRecord) -> dict[str, Any]:
    """Encode a record as a flashcardProgress entry."""
    return {
        "cardId": record.card_id,
        "level": record.level,
        "easeFactor": record.ease_factor,
        "interval": record.interval_days,
        "nextReview": _iso(record.next_review_at),
        "lastReviewed": _iso(record.last_reviewed_at) if record.last_reviewed_at else None,
        "reviewCount": record.review_count,
    }


def session_from_json(index: int, data: Any) -> StudySession:
    """Decode one studySessions entry."""
    if not isinstance(data, dict):
        raise ProgressFileError(f"Session #{index}: expected an object, got {type(data).__name__}")

    try:
        started_at = parse_timestamp(data.get("startTime"))
        ended_at = parse_timestamp(data.get("endTime", data.get("startTime")))
    except InvalidTimestampError as e:
        raise InvalidTimestampError(f"Session #{index}: {e}") from e

    try:
        return StudySession(
            started_at=started_at,
            ended_at=ended_at,
            activity=str(data.get("activity", FLASHCARD_ACTIVITY)),
            items_studied=int(data.get("itemsStudied", 0)),
        )
    except (TypeError, ValueError) as e:
        raise ProgressFileError(f"Session #{index}: {e}") from e


def session_to_json(session: StudySession) -> dict[str, Any]:
    return {
        "startTime": _iso(session.started_at),
        "endTime": _iso(session.ended_at),
        "activity": session.activity,
        "itemsStudied": session.items_studied,
    }


def decode_sessions(document: dict[str, Any]) -> list[StudySession]:
    """Decode the study log of a parsed progress document, oldest first."""
    raw = document.get(SESSIONS_KEY) or []
    if not isinstance(raw, list):
        raise ProgressFileError(f"'{SESSIONS_KEY}' must be a list")
    return [session_from_json(i + 1, entry) for i, entry in enumerate(raw)]


def decode_interview_date(document: dict[str, Any]) -> datetime | None:
    """Read settings.interviewDate; None when unset."""
    settings = document.get(SETTINGS_KEY) or {}
    if not isinstance(settings, dict):
        raise ProgressFileError(f"'{SETTINGS_KEY}' must be an object")
    raw = settings.get("interviewDate")
    if not raw:
        return None
    try:
        return parse_timestamp(raw)
    except InvalidTimestampError as e:
        raise InvalidTimestampError(f"Interview date: {e}") from e


def decode_progress(text: str) -> tuple[dict[str, Any], dict[str, MasteryRecord]]:
    """
    Parse a progress document.

    Returns:
        (document, records): the raw top-level object and the decoded mapping.

    Raises:
        ProgressFileError: If the text is not a JSON object or an entry is malformed.
        InvalidTimestampError: If an entry carries an unparseable timestamp.
    """
    try:
        document = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as e:
        raise ProgressFileError(f"Progress is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise ProgressFileError("Progress document must be a JSON object")

    raw = document.get(PROGRESS_KEY, {})
    if not isinstance(raw, dict):
        raise ProgressFileError(f"'{PROGRESS_KEY}' must be an object")

    records = {card_id: record_from_json(card_id, entry) for card_id, entry in raw.items()}
    return document, records


def encode_progress(document: dict[str, Any], records: dict[str, MasteryRecord]) -> str:
    """Serialize records back into the document, keeping its other keys."""
    updated = dict(document)
    updated[PROGRESS_KEY] = {card_id: record_to_json(r) for card_id, r in records.items()}
    return json.dumps(updated, indent=2)


def _iso(moment: datetime) -> str:
    return moment.isoformat()


def read_progress_text(path: Path) -> str:
    """
    Read a progress document from disk as UTF-8.

    Raises:
        ProgressFileError: If the file is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ProgressFileError(f"{path} is not UTF-8 text: {e}") from e


class JsonProgressRepository(ProgressRepository):
    """
    Stores mastery records in a JSON progress document on disk.

    A missing file reads as an empty mapping. Writes go to a sibling temp
    file that then replaces the document, so a reader never sees a partial
    file. Single writer only.
    """

    def __init__(self, path: Path):
        self.path = path

    @property
    def _temp_path(self) -> Path:
        return self.path.with_name(f".{self.path.name}.tmp")

    def _read(self) -> tuple[dict[str, Any], dict[str, MasteryRecord]]:
        if not self.path.exists():
            return {}, {}
        return decode_progress(read_progress_text(self.path))

    def _write(self, document: dict[str, Any], records: dict[str, MasteryRecord]) -> None:
        text = encode_progress(document, records)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._temp_path
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(self.path)

    def load(self) -> dict[str, MasteryRecord]:
        _, records = self._read()
        logger.debug(f"Loaded {len(records)} records from {self.path}")
        return records

    def save_record(self, record: MasteryRecord) -> None:
        document, records = self._read()
        records[record.card_id] = record
        self._write(document, records)
        logger.info(f"Saved progress for {record.card_id} to {self.path}")

    def load_sessions(self) -> list[StudySession]:
        document, _ = self._read()
        return decode_sessions(document)

    def save_sessions(self, sessions: list[StudySession]) -> None:
        document, records = self._read()
        document[SESSIONS_KEY] = [session_to_json(s) for s in sessions]
        self._write(document, records)
        logger.debug(f"Saved {len(sessions)} study sessions to {self.path}")

    def load_interview_date(self) -> datetime | None:
        document, _ = self._read()
        return decode_interview_date(document)

    def export_text(self) -> str:
        """Return the full progress document as pretty-printed JSON."""
        document, records = self._read()
        return encode_progress(document, records)

    def import_text(self, text: str) -> int:
        """
        Replace the stored document with `text` after validating every entry.

        The study log and interview date are validated too, so a document
        that imports cleanly can always be read back.

        Returns:
            Number of card records imported.
        """
        document, records = decode_progress(text)
        decode_sessions(document)
        decode_interview_date(document)
        self._write(document, records)
        logger.info(f"Imported {len(records)} records into {self.path}")
        return len(records)

    def import_file(self, source: Path) -> int:
        """Import a progress document stored at `source`."""
        return self.import_text(read_progress_text(source))
