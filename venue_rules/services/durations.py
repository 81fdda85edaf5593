"""Duration parsing and clock arithmetic shared by every rule evaluator."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_UNIT = r"(?:hours?|hrs?|h|minutes?|mins?|m)"
_DURATION_FULL = re.compile(
    rf"^\s*(?:\d+(?:\.\d+)?\s*{_UNIT}\s*)*(?:\d+(?:\.\d+)?\s*)?$",
    re.IGNORECASE,
)
_DURATION_TOKEN = re.compile(r"(\d+(?:\.\d+)?)\s*(hours?|hrs?|h|minutes?|mins?|m)?", re.IGNORECASE)

_TIME_PART = re.compile(r"^(\d{1,2})(?::(\d{2}))?(am|pm)?$", re.IGNORECASE)
_RANGE_SEPARATORS = re.compile(r"—|–|\s+to\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Duration:
    """A span of time; minutes are the canonical unit."""

    minutes: float

    @property
    def hours(self) -> float:
        return self.minutes / 60

    @classmethod
    def parse(cls, value: Any, default_unit: str = "h") -> Optional["Duration"]:
        """Parse ``"2h"``, ``"30min"``, ``"1h30min"``, ``"2 hours"`` or a number.

        Bare numbers use ``default_unit`` (``"h"`` or ``"min"``); a bare
        number following an hour part (``"1h30"``) is minutes. Returns None
        for anything unparseable.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, dict):
            # {"value": 15, "unit": "minutes"}
            amount = value.get("value")
            if amount is None:
                return None
            return cls.parse(f"{amount}{value.get('unit') or ''}", default_unit)
        if isinstance(value, (int, float)):
            return cls(float(value) * 60 if default_unit == "h" else float(value))

        text = str(value).strip()
        if not text or not _DURATION_FULL.match(text):
            return None

        total = 0.0
        after_hours = False
        for number, unit in _DURATION_TOKEN.findall(text):
            amount = float(number)
            unit = unit.lower()
            if unit.startswith("h"):
                total += amount * 60
                after_hours = True
            elif unit.startswith("m"):
                total += amount
            elif after_hours:
                total += amount
            else:
                total += amount * 60 if default_unit == "h" else amount
        return cls(total)

    def __str__(self) -> str:
        hours, minutes = divmod(self.minutes, 60)
        if hours and minutes:
            return f"{hours:g}h{minutes:g}min"
        if hours:
            return f"{hours:g}h"
        return f"{minutes:g}min"


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def duration_hours(start_time: str, end_time: str) -> float:
    """Elapsed hours between two ``HH:MM`` wall-clock times."""
    return (time_to_minutes(end_time) - time_to_minutes(start_time)) / 60


def booking_datetime(value: date | datetime, now: datetime) -> datetime:
    """Resolve the request date into a timestamp comparable with ``now``.

    A bare date means midnight of that day. Naive values take ``now``'s
    time zone.
    """
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime(value.year, value.month, value.day)

    if moment.tzinfo is None and now.tzinfo is not None:
        moment = moment.replace(tzinfo=now.tzinfo)
    elif moment.tzinfo is not None and now.tzinfo is None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def advance_hours(now: datetime, booking_at: datetime) -> float:
    """Hours between evaluation time and the booking (full timestamps)."""
    return (booking_at - now).total_seconds() / 3600


def weekday_name(value: date) -> str:
    return WEEKDAYS[value.weekday()]


def day_matches(days: Iterable[str], weekday: str) -> bool:
    """Case-insensitive weekday match that also accepts ``Mon``/``Tue``."""
    key = weekday[:3].lower()
    return any(d.strip()[:3].lower() == key for d in days)


def split_time_range(text: Any) -> tuple[Optional[str], Optional[str]]:
    """Split ``"9am to 5pm"`` / ``"09:00–17:00"`` into ``HH:MM`` strings."""
    if not text or not isinstance(text, str):
        return None, None

    normalized = _RANGE_SEPARATORS.sub("-", text)
    normalized = re.sub(r"\s+", "", normalized)
    parts = normalized.split("-")
    if len(parts) != 2:
        return None, None
    return _parse_clock(parts[0]), _parse_clock(parts[1])


def _parse_clock(text: str) -> Optional[str]:
    m = _TIME_PART.match(text)
    if not m:
        return None
    hour = int(m.group(1))
    minute = int(m.group(2) or 0)
    ampm = (m.group(3) or "").lower()
    if ampm == "pm" and hour != 12:
        hour += 12
    elif ampm == "am" and hour == 12:
        hour = 0
    if hour > 24 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"
