"""Timestamp parsing and calendar-day helpers."""

from datetime import date, datetime
from typing import Any

from prepcards.domain.errors import InvalidTimestampError


def local_now() -> datetime:
    """Current local wall-clock time (naive)."""
    return datetime.now()


def parse_timestamp(value: Any) -> datetime:
    """
    Coerce a stored review timestamp into a datetime.

    Accepts datetime objects and ISO-8601 strings (a trailing 'Z' is read as UTC).

    Raises:
        InvalidTimestampError: If the value is missing or cannot be parsed.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidTimestampError(f"Unparseable timestamp: {value!r}") from e
    raise InvalidTimestampError(f"Missing or invalid timestamp: {value!r}")


def calendar_day(moment: datetime, reference: datetime) -> date:
    """
    Local calendar day of `moment`, as seen from the clock that produced `reference`.

    Aware timestamps are converted into the reference's zone (or the system
    zone when the reference is naive). Naive timestamps are read as-is.
    """
    if moment.tzinfo is None:
        return moment.date()
    if reference.tzinfo is None:
        return moment.astimezone().date()
    return moment.astimezone(reference.tzinfo).date()


def is_due(moment: datetime, now: datetime) -> bool:
    """True when `moment` is at or before `now`, tolerating naive/aware mixes."""
    if (moment.tzinfo is None) != (now.tzinfo is None):
        if moment.tzinfo is None:
            moment = moment.astimezone()
        else:
            now = now.astimezone()
    return moment <= now
