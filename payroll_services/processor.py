"""
PayrollProcessor -- combine rates, period totals and deductions into pay.

Responsibility:
    Given an employee's rate profile, the aggregated attendance totals for
    a pay period, and the pay period itself, compute base pay, overtime,
    holiday pay, late / undertime / absence deductions, gross pay, the
    statutory deductions for the half being processed, and net pay.

Architecture position:
    Services -- orchestration over pure engines.  Holds no state between
    calls; the deduction engine, policy, and optional holiday calendar
    are injected at construction.

Invariants enforced:
    - Gross pay and net pay are never negative.
    - net_pay == max(0, gross_pay - deductions.total).
    - Overtime is paid only when the employee was not late on any day.
    - Absence is deducted only when the absence classification marked
      the gap as unpaid.
    - Every money figure is rounded half-up to centavos.

Failure modes:
    - Negative salary, rates, hours or minutes are clamped to zero with a
      ``negative_input_clamped`` warning; processing continues.
    - ``PayrollPolicy`` and ``EmployeeRateProfile`` raise ``ValueError``
      for structurally invalid construction.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal

from payroll_config.schema import PayrollPolicyDef
from payroll_engines.aggregation import PeriodTotals
from payroll_engines.deductions import DeductionEngine, DeductionResult
from payroll_engines.holidays import HolidayCalendar
from payroll_engines.pay_period import PayPeriod
from payroll_kernel.domain.values import (
    ZERO,
    minutes_to_hours,
    non_negative,
    quantize_money,
    to_decimal,
)
from payroll_kernel.logging_config import LogContext, get_logger

_logger = get_logger("services.processor")


@dataclass(frozen=True)
class EmployeeRateProfile:
    """Read-only pay rates supplied by the employee-records collaborator."""

    employee_id: str
    monthly_basic_salary: Decimal
    semi_monthly_rate: Decimal
    hourly_rate: Decimal
    daily_rate: Decimal

    @classmethod
    def from_monthly_salary(
        cls,
        employee_id: str,
        monthly_basic_salary: Decimal | int | str,
        semi_monthly_rate: Decimal | int | str | None = None,
        hourly_rate: Decimal | int | str | None = None,
        daily_rate: Decimal | int | str | None = None,
        working_days_per_month: int = 22,
        hours_per_day: int = 8,
    ) -> EmployeeRateProfile:
        """Build a profile, deriving any rate the record does not carry.

        semi-monthly = monthly / 2, daily = monthly / working days,
        hourly = monthly / (working days * hours per day).
        """
        monthly = to_decimal(monthly_basic_salary)
        return cls(
            employee_id=employee_id,
            monthly_basic_salary=monthly,
            semi_monthly_rate=(
                to_decimal(semi_monthly_rate)
                if semi_monthly_rate is not None else monthly / 2
            ),
            hourly_rate=(
                to_decimal(hourly_rate) if hourly_rate is not None
                else monthly / (working_days_per_month * hours_per_day)
            ),
            daily_rate=(
                to_decimal(daily_rate) if daily_rate is not None
                else monthly / working_days_per_month
            ),
        )


@dataclass(frozen=True)
class PayrollPolicy:
    overtime_premium: Decimal = Decimal("1.25")
    regular_hours_per_day: Decimal = Decimal("8")
    working_days_per_month: int = 22

    def __post_init__(self) -> None:
        if self.overtime_premium < 1:
            raise ValueError(
                f"overtime_premium must be at least 1, got {self.overtime_premium}"
            )
        if self.regular_hours_per_day <= 0:
            raise ValueError("regular_hours_per_day must be positive")
        if self.working_days_per_month <= 0:
            raise ValueError("working_days_per_month must be positive")

    @classmethod
    def from_config(cls, policy: PayrollPolicyDef) -> PayrollPolicy:
        return cls(
            overtime_premium=policy.overtime_premium,
            regular_hours_per_day=policy.regular_hours_per_day,
            working_days_per_month=policy.working_days_per_month,
        )


@dataclass(frozen=True)
class PayrollResult:
    """Pay computed for one employee and one pay period."""

    employee_id: str
    pay_period: PayPeriod
    base_pay: Decimal
    overtime_pay: Decimal
    holiday_pay: Decimal
    late_deduction: Decimal
    undertime_deduction: Decimal
    absence_deduction: Decimal
    gross_pay: Decimal
    deductions: DeductionResult
    net_pay: Decimal
    expected_hours: Decimal = ZERO
    absent_hours: Decimal = ZERO
    absent_days: Decimal = ZERO
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.gross_pay < 0:
            raise ValueError(f"gross_pay must be non-negative, got {self.gross_pay}")
        expected_net = non_negative(self.gross_pay - self.deductions.total)
        if self.net_pay != expected_net:
            raise ValueError(f"net_pay {self.net_pay} != {expected_net}")

    @property
    def total_time_deductions(self) -> Decimal:
        return self.late_deduction + self.undertime_deduction + self.absence_deduction


class PayrollProcessor:
    """
    Compute semi-monthly pay for one employee at a time.

    Contract:
        ``process`` is a pure function of its arguments plus the injected
        engine, policy and calendar.  It is safe to call concurrently.
    """

    def __init__(
        self,
        deduction_engine: DeductionEngine,
        policy: PayrollPolicy | None = None,
        holiday_calendar: HolidayCalendar | None = None,
        logger: logging.Logger | None = None,
    ):
        self._deductions = deduction_engine
        self._policy = policy or PayrollPolicy()
        self._holidays = holiday_calendar
        self._logger = logger or _logger

    @property
    def policy(self) -> PayrollPolicy:
        return self._policy

    def _clamp(
        self, name: str, value: Decimal | int, warnings: list[str]
    ) -> Decimal:
        amount = to_decimal(value)
        if amount < 0:
            warnings.append(name)
            self._logger.warning("negative_input_clamped", extra={
                "field": name,
                "value": amount,
            })
            return ZERO
        return amount

    def process(
        self,
        profile: EmployeeRateProfile,
        totals: PeriodTotals,
        pay_period: PayPeriod,
        monthly_gross: Decimal | None = None,
    ) -> PayrollResult:
        """Compute pay for ``profile`` over ``pay_period``.

        Args:
            profile: The employee's rates.
            totals: Aggregated attendance for the pay period.
            pay_period: Cutoff and pay date; its type selects deductions.
            monthly_gross: Monthly compensation for statutory deductions.
                Defaults to the monthly basic salary.

        Returns:
            PayrollResult with every amount rounded to centavos.
        """
        t0 = time.monotonic()
        with LogContext.bind(
            employee_id=profile.employee_id, pay_period=pay_period.label
        ):
            self._logger.info("payroll_processing_started", extra={
                "period_type": pay_period.period_type,
                "pay_date": pay_period.pay_date,
            })

            warnings: list[str] = []
            policy = self._policy
            monthly_salary = self._clamp(
                "monthly_basic_salary", profile.monthly_basic_salary, warnings
            )
            semi_monthly = self._clamp("semi_monthly_rate", profile.semi_monthly_rate, warnings)
            hourly = self._clamp("hourly_rate", profile.hourly_rate, warnings)
            daily = self._clamp("daily_rate", profile.daily_rate, warnings)
            hours_worked = self._clamp("hours_worked", totals.hours_worked, warnings)
            overtime_hours = self._clamp("overtime_hours", totals.overtime_hours, warnings)
            late_minutes = self._clamp("late_minutes", totals.late_minutes, warnings)
            undertime_minutes = self._clamp(
                "undertime_minutes", totals.undertime_minutes, warnings
            )

            base_pay = quantize_money(semi_monthly)
            per_minute = hourly / 60
            late_deduction = quantize_money(per_minute * late_minutes)
            undertime_deduction = quantize_money(per_minute * undertime_minutes)

            expected_hours = totals.expected_hours
            if expected_hours <= 0:
                expected_hours = pay_period.working_days * policy.regular_hours_per_day
            absent_hours = non_negative(
                expected_hours
                - hours_worked
                - minutes_to_hours(late_minutes)
                - minutes_to_hours(undertime_minutes)
            )
            absent_days = absent_hours / policy.regular_hours_per_day
            absence_deduction = ZERO
            if totals.has_unpaid_absence:
                absence_deduction = quantize_money(absent_days * daily)

            overtime_pay = ZERO
            if not totals.is_late_any_day:
                overtime_pay = quantize_money(
                    hourly * overtime_hours * policy.overtime_premium
                )

            holiday_pay = ZERO
            if self._holidays is not None:
                holiday_pay = self._holidays.holiday_pay_for_period(
                    daily, pay_period.start_date, pay_period.end_date
                )

            gross_pay = non_negative(
                base_pay + overtime_pay + holiday_pay
                - late_deduction - undertime_deduction - absence_deduction
            )

            if monthly_gross is None:
                deduction_base = monthly_salary
            else:
                deduction_base = self._clamp("monthly_gross", monthly_gross, warnings)
            deductions = self._deductions.calculate(
                deduction_base, pay_period.period_type
            )
            net_pay = non_negative(gross_pay - deductions.total)

            result = PayrollResult(
                employee_id=profile.employee_id,
                pay_period=pay_period,
                base_pay=base_pay,
                overtime_pay=overtime_pay,
                holiday_pay=holiday_pay,
                late_deduction=late_deduction,
                undertime_deduction=undertime_deduction,
                absence_deduction=absence_deduction,
                gross_pay=gross_pay,
                deductions=deductions,
                net_pay=net_pay,
                expected_hours=expected_hours,
                absent_hours=absent_hours,
                absent_days=absent_days,
                warnings=tuple(warnings),
            )

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            self._logger.info("payroll_processing_completed", extra={
                "gross_pay": result.gross_pay,
                "deductions_total": deductions.total,
                "net_pay": result.net_pay,
                "overtime_forfeited": totals.is_late_any_day and overtime_hours > 0,
                "duration_ms": duration_ms,
            })
            return result

    def with_policy(self, policy: PayrollPolicy) -> PayrollProcessor:
        """Copy of this processor under a different policy."""
        return PayrollProcessor(
            self._deductions, policy, self._holidays, self._logger
        )
