"""
Pay Period Calculator (``payroll_engines.pay_period``).

Responsibility
--------------
Derive the pay date and attendance cutoff for each half of a
semi-monthly payroll month.

    MID_MONTH  cutoff 27th of previous month .. 12th, paid on the 15th
    END_MONTH  cutoff 13th .. 26th, paid on the last day of the month

A pay date that lands on Saturday moves back one day, on Sunday two days,
so payday is always a Friday or earlier weekday.  The cutoffs form
contiguous, non-overlapping windows across the year.

Architecture position
---------------------
**Engines layer** -- pure functional core.

Invariants enforced
-------------------
* ``PayPeriod`` rejects ``start_date > end_date`` and a pay date before
  the cutoff end with ``InvalidPayPeriodError``.
* Unknown period types are clamped to MID_MONTH with a warning.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any

from payroll_engines.aggregation import count_working_days
from payroll_kernel.exceptions import InvalidPayPeriodError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.pay_period")

MID_MONTH_PAY_DAY = 15
MID_MONTH_CUTOFF_START_DAY = 27  # of the previous month
MID_MONTH_CUTOFF_END_DAY = 12
END_MONTH_CUTOFF_START_DAY = 13
END_MONTH_CUTOFF_END_DAY = 26

SATURDAY = 5
SUNDAY = 6


class PeriodType(str, Enum):
    """Half of the semi-monthly cycle."""

    MID_MONTH = "MID_MONTH"
    END_MONTH = "END_MONTH"

    @classmethod
    def coerce(cls, value: Any) -> PeriodType:
        """Read a period type leniently; unknown values become MID_MONTH."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls[key]
        # Legacy numeric codes: 1 = first half, 2 = second half
        if isinstance(value, int) and not isinstance(value, bool) and value in (1, 2):
            return cls.MID_MONTH if value == 1 else cls.END_MONTH
        logger.warning("period_type_clamped", extra={
            "raw_period_type": repr(value),
            "clamped_to": cls.MID_MONTH.value,
        })
        return cls.MID_MONTH


def adjust_for_weekend(day: date) -> date:
    """Move a Saturday back one day and a Sunday back two."""
    if day.weekday() == SATURDAY:
        return day - timedelta(days=1)
    if day.weekday() == SUNDAY:
        return day - timedelta(days=2)
    return day


def _previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def pay_date_for(year: int, month: int, period_type: PeriodType | str) -> date:
    period_type = PeriodType.coerce(period_type)
    if period_type is PeriodType.MID_MONTH:
        nominal = date(year, month, MID_MONTH_PAY_DAY)
    else:
        nominal = date(year, month, calendar.monthrange(year, month)[1])
    return adjust_for_weekend(nominal)


def cutoff_range(
    year: int, month: int, period_type: PeriodType | str
) -> tuple[date, date]:
    """Inclusive attendance window for a payroll half."""
    period_type = PeriodType.coerce(period_type)
    if period_type is PeriodType.MID_MONTH:
        prev_year, prev_month = _previous_month(year, month)
        return (
            date(prev_year, prev_month, MID_MONTH_CUTOFF_START_DAY),
            date(year, month, MID_MONTH_CUTOFF_END_DAY),
        )
    return (
        date(year, month, END_MONTH_CUTOFF_START_DAY),
        date(year, month, END_MONTH_CUTOFF_END_DAY),
    )


@dataclass(frozen=True)
class PayPeriod:
    """Cutoff window and pay date for one payroll half."""

    start_date: date
    end_date: date
    pay_date: date
    period_type: PeriodType

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise InvalidPayPeriodError(
                str(self.start_date), str(self.end_date), str(self.pay_date),
                "start date is after end date",
            )
        if self.pay_date < self.end_date:
            raise InvalidPayPeriodError(
                str(self.start_date), str(self.end_date), str(self.pay_date),
                "pay date precedes end of cutoff",
            )
        if not isinstance(self.period_type, PeriodType):
            object.__setattr__(self, "period_type", PeriodType.coerce(self.period_type))

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def weekly_ranges(self) -> list[tuple[date, date]]:
        """Seven-day chunks from the start date; the last may be shorter."""
        ranges: list[tuple[date, date]] = []
        chunk_start = self.start_date
        while chunk_start <= self.end_date:
            chunk_end = min(chunk_start + timedelta(days=6), self.end_date)
            ranges.append((chunk_start, chunk_end))
            chunk_start = chunk_end + timedelta(days=1)
        return ranges

    @property
    def working_days(self) -> int:
        return count_working_days(self.start_date, self.end_date)

    @property
    def label(self) -> str:
        return f"{self.period_type.value}:{self.pay_date.isoformat()}"

    def describe(self) -> str:
        return (
            f"Cutoff: {self.start_date:%b %d} - {self.end_date:%b %d}, "
            f"Pay date: {self.pay_date:%b %d}"
        )


def build_pay_period(
    year: int, month: int, period_type: PeriodType | str
) -> PayPeriod:
    """Pay period for ``year``/``month`` and the given half.

    Example:
        build_pay_period(2024, 11, PeriodType.MID_MONTH).describe()
        -> "Cutoff: Oct 27 - Nov 12, Pay date: Nov 15"
    """
    period_type = PeriodType.coerce(period_type)
    start, end = cutoff_range(year, month, period_type)
    return PayPeriod(
        start_date=start,
        end_date=end,
        pay_date=pay_date_for(year, month, period_type),
        period_type=period_type,
    )


def pay_period_for_pay_date(pay_date: date) -> PayPeriod:
    """Recover the pay period whose (weekend-adjusted) pay date is given.

    Raises:
        InvalidPayPeriodError: If ``pay_date`` is not a scheduled pay date.
    """
    period_type = (
        PeriodType.MID_MONTH if pay_date.day <= MID_MONTH_PAY_DAY
        else PeriodType.END_MONTH
    )
    period = build_pay_period(pay_date.year, pay_date.month, period_type)
    if period.pay_date != pay_date:
        raise InvalidPayPeriodError(
            str(period.start_date), str(period.end_date), str(pay_date),
            f"not a scheduled pay date (expected {period.pay_date})",
        )
    return period


def pay_periods_for_year(year: int) -> list[PayPeriod]:
    """All 24 pay periods of a year in pay-date order."""
    return [
        build_pay_period(year, month, period_type)
        for month in range(1, 13)
        for period_type in (PeriodType.MID_MONTH, PeriodType.END_MONTH)
    ]
