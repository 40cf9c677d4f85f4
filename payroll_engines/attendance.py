"""
Daily Attendance Resolver (``payroll_engines.attendance``).

Responsibility
--------------
Turn collaborator attendance rows into ``AttendanceDay`` values and resolve
one day's time-in/time-out against a ``WorkSchedule``: late minutes,
undertime minutes, capped regular hours, and overtime eligibility.

Architecture position
---------------------
**Engines layer** -- pure functional core.  May only import from
``payroll_kernel`` and sibling engines.

Invariants enforced
-------------------
* A late arrival (after the grace-period end) forfeits overtime for that
  day, and the worked span is capped at the standard end time.
* Regular hours never exceed ``WorkSchedule.regular_hours``.
* A day whose time-out precedes its time-in is invalid: zero hours,
  flagged, never wrapped to the next day.
* A day with a missing or unparsed time is incomplete and contributes
  nothing; it is not treated as a zero-hour day.

Failure modes
-------------
* Row parsing never raises unless ``strict=True``, in which case the first
  dropped row raises ``AttendanceParseError``.
* ``WorkSchedule`` raises ``ValueError`` for an inconsistent schedule.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from payroll_engines.time_parser import (
    TimeOfDay,
    UnparsedTime,
    parse_attendance_date,
    parse_time_of_day,
)
from payroll_kernel.domain.values import ZERO, minutes_to_hours
from payroll_kernel.exceptions import AttendanceParseError


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkSchedule:
    """Company work schedule used to judge one day of attendance."""

    standard_start: TimeOfDay = TimeOfDay(8, 0)
    grace_end: TimeOfDay = TimeOfDay(8, 10)
    standard_end: TimeOfDay = TimeOfDay(17, 0)
    regular_hours: Decimal = Decimal("8")
    lunch_hours: Decimal = Decimal("1")
    lunch_threshold_hours: Decimal = Decimal("5")
    deduct_lunch: bool = False

    def __post_init__(self) -> None:
        if self.grace_end < self.standard_start:
            raise ValueError("grace_end must not precede standard_start")
        if self.standard_end <= self.grace_end:
            raise ValueError("standard_end must be after grace_end")
        if self.regular_hours <= 0:
            raise ValueError("regular_hours must be positive")
        if self.lunch_hours < 0 or self.lunch_threshold_hours < 0:
            raise ValueError("lunch settings must be non-negative")


# ---------------------------------------------------------------------------
# Attendance input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttendanceRow:
    """One raw row as supplied by the attendance-log reader."""

    employee_id: str
    date: str
    time_in: str | None
    time_out: str | None


@dataclass(frozen=True)
class AttendanceDay:
    """One employee's clock-in/clock-out for a date."""

    employee_id: str
    work_date: date
    time_in: TimeOfDay | None
    time_out: TimeOfDay | None

    @property
    def is_complete(self) -> bool:
        return self.time_in is not None and self.time_out is not None


@dataclass(frozen=True)
class RejectedRow:
    """Diagnostic for a row field that could not be parsed."""

    row_index: int
    employee_id: str
    field: str
    raw_value: str
    reason: str


@dataclass(frozen=True)
class ParsedAttendance:
    """Outcome of parsing a batch of attendance rows.

    ``rejected`` lists rows dropped because their date is unreadable.
    ``unparsed_times`` lists rows kept as incomplete days because a
    time-in or time-out could not be read.
    """

    days: tuple[AttendanceDay, ...]
    rejected: tuple[RejectedRow, ...] = ()
    unparsed_times: tuple[RejectedRow, ...] = ()

    @property
    def diagnostics(self) -> tuple[RejectedRow, ...]:
        return self.rejected + self.unparsed_times


def parse_attendance_rows(
    rows: Iterable[AttendanceRow],
    strict: bool = False,
) -> ParsedAttendance:
    """Parse collaborator rows into ``AttendanceDay`` values.

    Args:
        rows: Raw rows in input order.
        strict: Raise on the first row whose date cannot be parsed
            instead of reporting it in ``rejected``.

    Returns:
        ParsedAttendance with days in input order.
    """
    days: list[AttendanceDay] = []
    rejected: list[RejectedRow] = []
    unparsed: list[RejectedRow] = []

    for index, row in enumerate(rows):
        work_date = parse_attendance_date(row.date)
        if work_date is None:
            if strict:
                raise AttendanceParseError(row.employee_id, "date", str(row.date))
            rejected.append(RejectedRow(
                row_index=index,
                employee_id=row.employee_id,
                field="date",
                raw_value=str(row.date),
                reason="unrecognized_format",
            ))
            continue

        times: dict[str, TimeOfDay | None] = {}
        for field, raw in (("time_in", row.time_in), ("time_out", row.time_out)):
            parsed = parse_time_of_day(raw)
            if isinstance(parsed, UnparsedTime):
                unparsed.append(RejectedRow(
                    row_index=index,
                    employee_id=row.employee_id,
                    field=field,
                    raw_value=parsed.raw,
                    reason=parsed.reason.value,
                ))
                times[field] = None
            else:
                times[field] = parsed

        days.append(AttendanceDay(
            employee_id=row.employee_id,
            work_date=work_date,
            time_in=times["time_in"],
            time_out=times["time_out"],
        ))

    return ParsedAttendance(
        days=tuple(days),
        rejected=tuple(rejected),
        unparsed_times=tuple(unparsed),
    )


# ---------------------------------------------------------------------------
# Daily resolution
# ---------------------------------------------------------------------------


class DayIssue(str, Enum):
    INCOMPLETE = "incomplete"
    TIME_OUT_BEFORE_TIME_IN = "time_out_before_time_in"


@dataclass(frozen=True)
class DailyResult:
    """Derived figures for one day.  Hours are unrounded Decimals."""

    hours_worked: Decimal = ZERO
    late_minutes: int = 0
    undertime_minutes: int = 0
    overtime_hours: Decimal = ZERO
    is_late: bool = False
    is_undertime: bool = False
    is_valid: bool = True
    issue: DayIssue | None = None

    @classmethod
    def invalid(cls, issue: DayIssue) -> DailyResult:
        return cls(is_valid=False, issue=issue)

    @property
    def late_hours(self) -> Decimal:
        return minutes_to_hours(self.late_minutes)

    @property
    def undertime_hours(self) -> Decimal:
        return minutes_to_hours(self.undertime_minutes)


def resolve_day(
    day: AttendanceDay,
    schedule: WorkSchedule | None = None,
) -> DailyResult:
    """Resolve one day's attendance against the schedule.

    Example:
        08:15 to 17:30 -> late 5 minutes, 8 hours (capped), no overtime.
    """
    schedule = schedule or WorkSchedule()

    if day.time_in is None or day.time_out is None:
        return DailyResult.invalid(DayIssue.INCOMPLETE)
    time_in, time_out = day.time_in, day.time_out
    if time_out < time_in:
        return DailyResult.invalid(DayIssue.TIME_OUT_BEFORE_TIME_IN)

    is_late = time_in > schedule.grace_end
    late_minutes = schedule.grace_end.minutes_until(time_in) if is_late else 0

    is_undertime = time_out < schedule.standard_end
    undertime_minutes = (
        time_out.minutes_until(schedule.standard_end) if is_undertime else 0
    )

    effective_out = time_out
    if is_late and time_out > schedule.standard_end:
        effective_out = schedule.standard_end

    span = minutes_to_hours(max(0, time_in.minutes_until(effective_out)))
    if schedule.deduct_lunch and span >= schedule.lunch_threshold_hours:
        span -= schedule.lunch_hours
    hours_worked = min(span, schedule.regular_hours)

    overtime_hours = ZERO
    if not is_late and time_out > schedule.standard_end:
        overtime_hours = minutes_to_hours(schedule.standard_end.minutes_until(time_out))

    return DailyResult(
        hours_worked=hours_worked,
        late_minutes=late_minutes,
        undertime_minutes=undertime_minutes,
        overtime_hours=overtime_hours,
        is_late=is_late,
        is_undertime=is_undertime,
    )
