"""
Clock-Time Parser (``payroll_engines.time_parser``).

Responsibility
--------------
Normalize the clock-time text found in attendance exports (``"0800"``,
``"800"``, ``"8:00"``, ``"8:00 AM"``, ``"17:00"``) into a canonical
``TimeOfDay``, and parse the ``MM/dd/yyyy`` attendance date.

Architecture position
---------------------
**Engines layer** -- pure functional core.  No I/O, no clock reads.

Invariants enforced
-------------------
* Unparseable input yields an explicit ``UnparsedTime`` marker, never a
  silently wrong time such as midnight.
* Rules are tried in a fixed order: 4-digit ``HHMM``, 3-digit ``HMM``,
  then ``H:MM`` / ``HH:MM`` with an optional ``AM``/``PM`` suffix.
* Without a suffix, colon times with hour 1-7 are read as afternoon
  (13:00-19:59).  Exports from the afternoon shift write ``5:30`` for
  17:30 and existing data depends on that reading.

Failure modes
-------------
* Never raises for bad text.  ``TimeOfDay`` itself raises ``ValueError``
  when constructed directly with an out-of-range hour or minute.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """A wall-clock time with minute resolution."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute out of range: {self.minute}")

    @classmethod
    def from_time(cls, value: time) -> TimeOfDay:
        return cls(value.hour, value.minute)

    @property
    def is_parsed(self) -> bool:
        return True

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    def minutes_until(self, other: TimeOfDay) -> int:
        """Signed minutes from this time to ``other`` on the same day."""
        return other.minutes_since_midnight - self.minutes_since_midnight

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def format(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def format_12h(self) -> str:
        suffix = "AM" if self.hour < 12 else "PM"
        hour = self.hour % 12 or 12
        return f"{hour:02d}:{self.minute:02d} {suffix}"

    def __str__(self) -> str:
        return self.format()


class UnparsedReason(str, Enum):
    EMPTY = "empty"
    UNRECOGNIZED = "unrecognized_format"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class UnparsedTime:
    """Marker for clock text that could not be read."""

    raw: str
    reason: UnparsedReason

    @property
    def is_parsed(self) -> bool:
        return False


ParsedTime = TimeOfDay | UnparsedTime

_FOUR_DIGITS = re.compile(r"^\d{4}$")
_THREE_DIGITS = re.compile(r"^\d{3}$")
_COLON_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?:\s*([AaPp][Mm]))?$")

# Hours written without a suffix that belong to the afternoon shift.
_AFTERNOON_HOURS = range(1, 8)

ATTENDANCE_DATE_FORMAT = "%m/%d/%Y"


def _build(raw: str, hour: int, minute: int) -> ParsedTime:
    if hour > 23 or minute > 59:
        return UnparsedTime(raw, UnparsedReason.OUT_OF_RANGE)
    return TimeOfDay(hour, minute)


def _from_meridiem(raw: str, hour: int, minute: int, suffix: str) -> ParsedTime:
    if not 1 <= hour <= 12 or minute > 59:
        return UnparsedTime(raw, UnparsedReason.OUT_OF_RANGE)
    if suffix == "AM":
        return TimeOfDay(0 if hour == 12 else hour, minute)
    return TimeOfDay(hour if hour == 12 else hour + 12, minute)


def parse_time_of_day(text: str | None) -> ParsedTime:
    """Parse one clock-time token.

    Args:
        text: Raw text from an attendance row.  ``None`` is accepted.

    Returns:
        ``TimeOfDay`` on success, otherwise ``UnparsedTime`` with the
        original text and a reason.
    """
    if text is None:
        return UnparsedTime("", UnparsedReason.EMPTY)
    raw = str(text)
    token = raw.strip()
    if not token:
        return UnparsedTime(raw, UnparsedReason.EMPTY)

    if _FOUR_DIGITS.match(token):
        return _build(raw, int(token[:2]), int(token[2:]))

    if _THREE_DIGITS.match(token):
        return _build(raw, int(token[0]), int(token[1:]))

    match = _COLON_TIME.match(token)
    if match is None:
        return UnparsedTime(raw, UnparsedReason.UNRECOGNIZED)

    hour = int(match.group(1))
    minute = int(match.group(2))
    suffix = match.group(3)
    if suffix:
        return _from_meridiem(raw, hour, minute, suffix.upper())
    if hour in _AFTERNOON_HOURS:
        hour += 12
    return _build(raw, hour, minute)


def parse_attendance_date(text: str | None) -> date | None:
    """Parse an ``MM/dd/yyyy`` attendance date, or return None."""
    if text is None:
        return None
    token = str(text).strip()
    if not token:
        return None
    try:
        return datetime.strptime(token, ATTENDANCE_DATE_FORMAT).date()
    except ValueError:
        return None
