"""
Config-to-engine bridges.

Translate frozen ``PayrollConfiguration`` data into the engine objects that
do the arithmetic.  Engine constructors validate their tables, so building
every object here doubles as structural validation of a configuration.
"""

from __future__ import annotations

from payroll_config.schema import PayrollConfiguration
from payroll_engines.attendance import WorkSchedule
from payroll_engines.deductions import (
    DeductionEngine,
    DeductionSchedule,
    HealthInsuranceCalculator,
    HousingFundCalculator,
    IncomeTaxCalculator,
    ProgressiveTaxTable,
    RateCapSchedule,
    RateTier,
    SocialInsuranceCalculator,
    StepTable,
    TaxBracket,
    TieredRateSchedule,
)
from payroll_engines.holidays import (
    Holiday,
    HolidayCalendar,
    HolidayKind,
    HolidayPayRates,
)
from payroll_engines.time_parser import TimeOfDay, parse_time_of_day
from payroll_kernel.exceptions import ConfigurationError


def _clock(label: str, text: str) -> TimeOfDay:
    # Schedule times are 24-hour; the afternoon heuristic must not apply.
    hour, sep, minute = text.partition(":")
    if sep and hour.isdigit() and minute.isdigit():
        parsed = parse_time_of_day(f"{int(hour):02d}{minute}")
    else:
        parsed = parse_time_of_day(text)
    if not isinstance(parsed, TimeOfDay):
        raise ConfigurationError(f"work_schedule.{label}: unreadable time {text!r}")
    return parsed


def build_work_schedule(config: PayrollConfiguration) -> WorkSchedule:
    ws = config.work_schedule
    try:
        return WorkSchedule(
            standard_start=_clock("standard_start", ws.standard_start),
            grace_end=_clock("grace_end", ws.grace_end),
            standard_end=_clock("standard_end", ws.standard_end),
            regular_hours=ws.regular_hours,
            lunch_hours=ws.lunch_hours,
            lunch_threshold_hours=ws.lunch_threshold_hours,
            deduct_lunch=ws.deduct_lunch,
        )
    except ValueError as exc:
        raise ConfigurationError(f"work_schedule: {exc}") from exc


def build_deduction_schedule(config: PayrollConfiguration) -> DeductionSchedule:
    if not config.deduction_schedule:
        return DeductionSchedule()
    try:
        return DeductionSchedule.from_mapping(dict(config.deduction_schedule))
    except ValueError as exc:
        raise ConfigurationError(f"deduction_schedule: {exc}") from exc


def build_deduction_engine(config: PayrollConfiguration) -> DeductionEngine:
    sss = config.social_insurance
    housing = config.housing_fund
    return DeductionEngine(
        social_insurance=SocialInsuranceCalculator(
            StepTable(steps=sss.steps, name=sss.name)
        ),
        health_insurance=HealthInsuranceCalculator(
            RateCapSchedule(
                rate=config.health_insurance.rate,
                monthly_cap=config.health_insurance.monthly_cap,
                name="health_insurance",
            )
        ),
        housing_fund=HousingFundCalculator(
            TieredRateSchedule(
                minimum_compensation=housing.minimum_compensation,
                tiers=tuple(RateTier(bound, rate) for bound, rate in housing.tiers),
                floor=housing.floor,
                ceiling=housing.ceiling,
                name="housing_fund",
            )
        ),
        income_tax=IncomeTaxCalculator(
            ProgressiveTaxTable(
                brackets=tuple(
                    TaxBracket(
                        upper_bound=b.upper_bound,
                        base_tax=b.base_tax,
                        rate=b.rate,
                        excess_over=b.excess_over,
                    )
                    for b in config.income_tax
                ),
            )
        ),
        schedule=build_deduction_schedule(config),
    )


def build_holiday_calendar(config: PayrollConfiguration) -> HolidayCalendar:
    r = config.holiday_rates
    rates = HolidayPayRates(
        regular_unworked=r.regular_unworked,
        special_unworked=r.special_unworked,
        regular_worked=r.regular_worked,
        special_worked=r.special_worked,
        overtime_holiday_premium=r.overtime_holiday_premium,
        overtime_not_late_premium=r.overtime_not_late_premium,
        rest_day_premium=r.rest_day_premium,
        regular_hours=config.policy.regular_hours_per_day,
    )
    try:
        holidays = [
            Holiday(name=h.name, date=h.date, kind=HolidayKind(h.kind))
            for h in config.holidays
        ]
        return HolidayCalendar(holidays, rates=rates)
    except ValueError as exc:
        raise ConfigurationError(f"holidays: {exc}") from exc


def validate_configuration(config: PayrollConfiguration) -> None:
    """Build every engine object once; raises on the first invalid section."""
    build_work_schedule(config)
    build_deduction_engine(config)
    build_holiday_calendar(config)
    if config.policy.overtime_premium < 1:
        raise ConfigurationError(
            f"policy.overtime_premium must be at least 1, got "
            f"{config.policy.overtime_premium}"
        )
    if config.policy.working_days_per_month <= 0:
        raise ConfigurationError("policy.working_days_per_month must be positive")
    if not 0 <= config.work_schedule.week_start <= 6:
        raise ConfigurationError("work_schedule.week_start must be 0-6")
