"""Wall-clock helpers for ``HH:MM`` task start times and ``YYYY-MM-DD`` dates."""

from __future__ import annotations

import re
from datetime import date, datetime

from dateparser.date import DateDataParser

_CLOCK_RE = re.compile(r"^(\d{2}):(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidTimeFormat(ValueError):
    """Raised when a start time is not a valid 24-hour ``HH:MM`` string."""

    code = "INVALID_TIME_FORMAT"

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid time {value!r}: expected HH:MM in 24-hour format")


def to_minutes(value: str) -> int:
    """Convert ``HH:MM`` into minutes since midnight.

    Hours must be 00-23 and minutes 00-59; anything else raises
    ``InvalidTimeFormat`` instead of producing a bogus minute count.
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    m = _CLOCK_RE.match(value)
    if m is None:
        raise InvalidTimeFormat(value)
    hours, minutes = int(m.group(1), 10), int(m.group(2), 10)
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(value)
    return hours * 60 + minutes


def end_minutes(start_time: str, duration: int) -> int:
    return to_minutes(start_time) + duration


def format_minutes(minutes: int) -> str:
    """Inverse of ``to_minutes`` for values within a single day."""
    if not 0 <= minutes < 24 * 60:
        raise ValueError(f"{minutes} is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_clock(raw: str | None) -> str | None:
    """Leniently parse a clock time such as ``9am`` or ``21:30`` into ``HH:MM``.

    Returns ``None`` if nothing usable can be found, including inputs that
    name a day (``tomorrow``) but no time of day.
    """
    if not raw:
        return None
    raw = str(raw).strip()
    try:
        to_minutes(raw)
        return raw
    except InvalidTimeFormat:
        pass
    parser = DateDataParser(
        languages=["en"],
        settings={
            "RELATIVE_BASE": datetime(2000, 1, 1),
            "RETURN_AS_TIMEZONE_AWARE": False,
            "RETURN_TIME_AS_PERIOD": True,
        },
    )
    data = parser.get_date_data(raw)
    if data.date_obj is None or data.period != "time":
        return None
    result = data.date_obj
    return format_minutes(result.hour * 60 + result.minute)


def is_iso_date(value: str) -> bool:
    if not isinstance(value, str) or _DATE_RE.match(value) is None:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True
