from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (``2026-02-01T09:00`` or with seconds).

    Values carrying an offset (``Z``, ``+00:00``) are converted to naive local
    time, the form every stored shift timestamp uses.
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def format_minutes(minutes: float) -> str:
    """HH:MM rendering used by reports."""
    total = int(minutes)
    return f"{total // 60:02d}:{total % 60:02d}"
