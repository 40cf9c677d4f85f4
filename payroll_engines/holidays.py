"""
Holiday Calendar and Holiday Pay (``payroll_engines.holidays``).

Responsibility
--------------
Hold the declared public holidays and price them:

* Period holiday pay -- every regular holiday inside a cutoff earns 100%
  of the daily rate, every special non-working holiday 30%.
* Holiday work pay -- working on a regular holiday pays 200% of the
  hourly rate for the first 8 hours, 130% on a special non-working
  holiday.  Holiday overtime earns a 30% holiday premium, times a further
  1.25 when the employee was not late.  A regular holiday that falls on
  the employee's rest day is paid a further 30%.

Architecture position
---------------------
**Engines layer** -- pure functional core.  The calendar is data loaded by
``payroll_config``; nothing here knows any particular year.

Invariants enforced
-------------------
* A date belongs to at most one holiday; duplicates are rejected.
* All rates are Decimal multipliers; results are rounded half-up to
  centavos and never negative.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.values import ZERO, non_negative, quantize_money, to_decimal


class HolidayKind(str, Enum):
    REGULAR = "REGULAR"
    SPECIAL_NON_WORKING = "SPECIAL_NON_WORKING"

    @property
    def label(self) -> str:
        if self is HolidayKind.REGULAR:
            return "Regular Holiday"
        return "Special Non-Working Holiday"


@dataclass(frozen=True)
class Holiday:
    name: str
    date: date
    kind: HolidayKind

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.kind.label})"


@dataclass(frozen=True)
class HolidayPayRates:
    """Multipliers applied to the daily or hourly rate."""

    regular_unworked: Decimal = Decimal("1.0")
    special_unworked: Decimal = Decimal("0.3")
    regular_worked: Decimal = Decimal("2.0")
    special_worked: Decimal = Decimal("1.3")
    overtime_holiday_premium: Decimal = Decimal("1.3")
    overtime_not_late_premium: Decimal = Decimal("1.25")
    rest_day_premium: Decimal = Decimal("1.3")
    regular_hours: Decimal = Decimal("8")


class HolidayCalendar:
    """Lookup over a set of declared holidays."""

    def __init__(
        self,
        holidays: Iterable[Holiday] = (),
        rates: HolidayPayRates | None = None,
    ):
        self.rates = rates or HolidayPayRates()
        self._by_date: dict[date, Holiday] = {}
        for holiday in holidays:
            if holiday.date in self._by_date:
                raise ValueError(
                    f"Duplicate holiday on {holiday.date}: "
                    f"{self._by_date[holiday.date].name} and {holiday.name}"
                )
            self._by_date[holiday.date] = holiday

    def __len__(self) -> int:
        return len(self._by_date)

    def __contains__(self, day: object) -> bool:
        return day in self._by_date

    def holiday_on(self, day: date) -> Holiday | None:
        return self._by_date.get(day)

    def is_holiday(self, day: date) -> bool:
        return day in self._by_date

    def is_regular_holiday(self, day: date) -> bool:
        holiday = self._by_date.get(day)
        return holiday is not None and holiday.kind is HolidayKind.REGULAR

    def is_special_holiday(self, day: date) -> bool:
        holiday = self._by_date.get(day)
        return holiday is not None and holiday.kind is HolidayKind.SPECIAL_NON_WORKING

    def holidays_in_range(self, start: date, end: date) -> list[Holiday]:
        """Holidays in ``[start, end]`` by date; empty when end < start."""
        return sorted(
            (h for d, h in self._by_date.items() if start <= d <= end),
            key=lambda h: h.date,
        )

    def holiday_pay_for_period(
        self, daily_rate: Decimal, start: date, end: date
    ) -> Decimal:
        """Holiday pay earned for the holidays inside a cutoff."""
        rate = non_negative(to_decimal(daily_rate))
        total = ZERO
        for holiday in self.holidays_in_range(start, end):
            if holiday.kind is HolidayKind.REGULAR:
                total += rate * self.rates.regular_unworked
            else:
                total += rate * self.rates.special_unworked
        return quantize_money(total)

    def work_pay(
        self,
        day: date,
        daily_rate: Decimal,
        hours_worked: Decimal,
        overtime_hours: Decimal = ZERO,
        is_late: bool = False,
        is_rest_day: bool = False,
    ) -> Decimal:
        """Pay for attendance on ``day``; zero when it is not a holiday."""
        holiday = self._by_date.get(day)
        if holiday is None:
            return ZERO
        return holiday_work_pay(
            holiday.kind,
            daily_rate,
            hours_worked,
            overtime_hours=overtime_hours,
            is_late=is_late,
            is_rest_day=is_rest_day,
            rates=self.rates,
        )


def holiday_work_pay(
    kind: HolidayKind,
    daily_rate: Decimal,
    hours_worked: Decimal,
    overtime_hours: Decimal = ZERO,
    is_late: bool = False,
    is_rest_day: bool = False,
    rates: HolidayPayRates | None = None,
) -> Decimal:
    """Pay for one holiday, given the hours actually worked.

    Negative inputs are treated as zero.  An unworked regular holiday
    still earns the full daily rate; an unworked special holiday earns
    nothing here (the period calculation covers it).

    Example:
        holiday_work_pay(REGULAR, 800, 8) -> 1600.00
    """
    rates = rates or HolidayPayRates()
    daily = non_negative(to_decimal(daily_rate))
    hours = non_negative(to_decimal(hours_worked))
    overtime = non_negative(to_decimal(overtime_hours))
    hourly = daily / rates.regular_hours

    if hours == 0:
        if kind is HolidayKind.REGULAR:
            return quantize_money(daily * rates.regular_unworked)
        return ZERO

    multiplier = (
        rates.regular_worked if kind is HolidayKind.REGULAR else rates.special_worked
    )
    pay = min(hours, rates.regular_hours) * hourly * multiplier

    if overtime > 0:
        overtime_rate = hourly * rates.overtime_holiday_premium
        if not is_late:
            overtime_rate *= rates.overtime_not_late_premium
        pay += overtime * overtime_rate

    if is_rest_day and kind is HolidayKind.REGULAR:
        pay *= rates.rest_day_premium

    return quantize_money(pay)
