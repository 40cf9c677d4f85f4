"""
Hours Aggregator (``payroll_engines.aggregation``).

Responsibility
--------------
Sum daily attendance results for one employee over a date range into
``PeriodTotals``, with per-week subtotals for reporting, and derive the
unpaid-absence flag from an external absence classification.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Consumes ``AttendanceDay``
values and resolves them with ``payroll_engines.attendance``.

Invariants enforced
-------------------
* Only the requested employee's days inside ``[start, end]`` count.
* Incomplete and invalid days are skipped and reported, never counted
  as zero-hour days.
* When a date appears more than once, the last row in input order wins.
* An absence is unpaid only when the caller's classification says so.
  Without a classification ``has_unpaid_absence`` is always False.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from payroll_engines.attendance import (
    AttendanceDay,
    DailyResult,
    WorkSchedule,
    resolve_day,
)
from payroll_kernel.domain.values import ZERO, minutes_to_hours

AbsenceClassification = Mapping[date, "bool | str"]

UNPAID_MARKERS: tuple[str, ...] = ("unpaid", "unauthoriz", "unapproved")

MONDAY = 0
SUNDAY = 6


def is_unpaid_absence(value: bool | str | None) -> bool:
    """Read one absence classification entry.

    ``True`` or a category text containing ``unpaid``, ``unauthoriz`` or
    ``unapproved`` (any case) means unpaid.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    text = str(value).lower()
    return any(marker in text for marker in UNPAID_MARKERS)


def working_dates(start: date, end: date) -> list[date]:
    """Monday-Friday dates in ``[start, end]``."""
    dates: list[date] = []
    current = start
    while current <= end:
        if current.weekday() < 5:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def count_working_days(start: date, end: date) -> int:
    return len(working_dates(start, end))


@dataclass(frozen=True)
class WeeklySubtotal:
    """Hours for one calendar week of a period."""

    week_start: date
    week_end: date
    iso_year: int
    iso_week: int
    days_worked: int = 0
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    late_minutes: int = 0
    undertime_minutes: int = 0

    @property
    def label(self) -> str:
        return (
            f"Week {self.iso_week} "
            f"({self.week_start:%b %d} - {self.week_end:%b %d})"
        )


@dataclass(frozen=True)
class PeriodTotals:
    """Sum of daily results over a period for one employee."""

    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    late_minutes: int = 0
    undertime_minutes: int = 0
    is_late_any_day: bool = False
    has_unpaid_absence: bool = False
    unpaid_absence_days: int = 0
    expected_hours: Decimal = ZERO
    days_present: int = 0

    @property
    def late_hours(self) -> Decimal:
        return minutes_to_hours(self.late_minutes)

    @property
    def undertime_hours(self) -> Decimal:
        return minutes_to_hours(self.undertime_minutes)


@dataclass(frozen=True)
class PeriodSummary:
    """Totals plus the detail they were built from."""

    employee_id: str
    start: date
    end: date
    totals: PeriodTotals
    weeks: tuple[WeeklySubtotal, ...] = ()
    daily: tuple[tuple[AttendanceDay, DailyResult], ...] = ()
    skipped: tuple[AttendanceDay, ...] = ()


def _week_bounds(day: date, week_start: int) -> tuple[date, date]:
    first = day - timedelta(days=(day.weekday() - week_start) % 7)
    return first, first + timedelta(days=6)


def _weekly_subtotals(
    resolved: list[tuple[AttendanceDay, DailyResult]],
    week_start: int,
) -> tuple[WeeklySubtotal, ...]:
    buckets: dict[date, list[DailyResult]] = {}
    for day, result in resolved:
        first, _ = _week_bounds(day.work_date, week_start)
        buckets.setdefault(first, []).append(result)

    weeks: list[WeeklySubtotal] = []
    for first in sorted(buckets):
        results = buckets[first]
        # ISO week of the Monday inside the bucket, whatever day the week starts on
        monday = first + timedelta(days=(MONDAY - first.weekday()) % 7)
        iso = monday.isocalendar()
        weeks.append(WeeklySubtotal(
            week_start=first,
            week_end=first + timedelta(days=6),
            iso_year=iso.year,
            iso_week=iso.week,
            days_worked=len(results),
            hours_worked=sum((r.hours_worked for r in results), ZERO),
            overtime_hours=sum((r.overtime_hours for r in results), ZERO),
            late_minutes=sum(r.late_minutes for r in results),
            undertime_minutes=sum(r.undertime_minutes for r in results),
        ))
    return tuple(weeks)


def aggregate_period(
    days: Iterable[AttendanceDay],
    employee_id: str,
    start: date,
    end: date,
    schedule: WorkSchedule | None = None,
    absences: AbsenceClassification | None = None,
    week_start: int = MONDAY,
) -> PeriodSummary:
    """Aggregate one employee's attendance over ``[start, end]``.

    Args:
        days: Attendance for any number of employees, in input order.
        employee_id: Employee to aggregate.
        start: First date of the range (inclusive).
        end: Last date of the range (inclusive).
        schedule: Work schedule; defaults to 08:00-17:00 with grace 08:10.
        absences: Optional date -> bool/category classification.
        week_start: Weekday that begins a reporting week (0=Monday).

    Returns:
        PeriodSummary with totals, weekly subtotals, per-day detail and
        skipped (incomplete or invalid) days.

    Raises:
        ValueError: If ``end`` precedes ``start`` or ``week_start`` is not
            a weekday number.
    """
    if end < start:
        raise ValueError(f"end {end} precedes start {start}")
    if not MONDAY <= week_start <= SUNDAY:
        raise ValueError(f"week_start must be 0-6, got {week_start}")
    schedule = schedule or WorkSchedule()

    latest: dict[date, AttendanceDay] = {}
    for day in days:
        if day.employee_id != employee_id:
            continue
        if not start <= day.work_date <= end:
            continue
        latest.pop(day.work_date, None)
        latest[day.work_date] = day

    resolved: list[tuple[AttendanceDay, DailyResult]] = []
    skipped: list[AttendanceDay] = []
    for work_date in sorted(latest):
        day = latest[work_date]
        result = resolve_day(day, schedule)
        if result.is_valid:
            resolved.append((day, result))
        else:
            skipped.append(day)

    hours_worked = sum((r.hours_worked for _, r in resolved), ZERO)
    overtime_hours = sum((r.overtime_hours for _, r in resolved), ZERO)
    late_minutes = sum(r.late_minutes for _, r in resolved)
    undertime_minutes = sum(r.undertime_minutes for _, r in resolved)

    expected_dates = working_dates(start, end)
    expected_hours = schedule.regular_hours * len(expected_dates)

    unpaid_days = 0
    if absences:
        present = {day.work_date for day, _ in resolved}
        unpaid_days = sum(
            1
            for d in expected_dates
            if d not in present and is_unpaid_absence(absences.get(d))
        )

    gap = (
        expected_hours
        - hours_worked
        - minutes_to_hours(late_minutes)
        - minutes_to_hours(undertime_minutes)
    )

    totals = PeriodTotals(
        hours_worked=hours_worked,
        overtime_hours=overtime_hours,
        late_minutes=late_minutes,
        undertime_minutes=undertime_minutes,
        is_late_any_day=any(r.is_late for _, r in resolved),
        has_unpaid_absence=gap > 0 and unpaid_days > 0,
        unpaid_absence_days=unpaid_days,
        expected_hours=expected_hours,
        days_present=len(resolved),
    )

    return PeriodSummary(
        employee_id=employee_id,
        start=start,
        end=end,
        totals=totals,
        weeks=_weekly_subtotals(resolved, week_start),
        daily=tuple(resolved),
        skipped=tuple(skipped),
    )
