"""
PayrollConfiguration schema.

The human-authored, reviewable source artifact for payroll rules.  YAML is
parsed into these types by the loader; ``payroll_config.bridges`` turns
them into engine objects.  Every type is frozen declarative data with no
executable logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

# ---------------------------------------------------------------------------
# Schedule and policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkScheduleDef:
    """Company work day.  Clock times are ``HH:MM`` text."""

    standard_start: str = "08:00"
    grace_end: str = "08:10"
    standard_end: str = "17:00"
    regular_hours: Decimal = Decimal("8")
    lunch_hours: Decimal = Decimal("1")
    lunch_threshold_hours: Decimal = Decimal("5")
    deduct_lunch: bool = False
    week_start: int = 0  # 0 = Monday


@dataclass(frozen=True)
class PayrollPolicyDef:
    """Pay computation knobs that are business policy, not law."""

    overtime_premium: Decimal = Decimal("1.25")
    regular_hours_per_day: Decimal = Decimal("8")
    working_days_per_month: int = 22


# ---------------------------------------------------------------------------
# Statutory tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepTableDef:
    """Ordered (threshold, amount) steps."""

    name: str
    steps: tuple[tuple[Decimal, Decimal], ...]


@dataclass(frozen=True)
class HealthInsuranceDef:
    rate: Decimal
    monthly_cap: Decimal


@dataclass(frozen=True)
class HousingFundDef:
    minimum_compensation: Decimal
    tiers: tuple[tuple[Decimal | None, Decimal], ...]  # (upper_bound, rate)
    floor: Decimal
    ceiling: Decimal


@dataclass(frozen=True)
class TaxBracketDef:
    upper_bound: Decimal | None  # None = open top bracket
    base_tax: Decimal
    rate: Decimal
    excess_over: Decimal


# ---------------------------------------------------------------------------
# Holidays
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HolidayDef:
    name: str
    date: date
    kind: str  # REGULAR | SPECIAL_NON_WORKING


@dataclass(frozen=True)
class HolidayRatesDef:
    regular_unworked: Decimal = Decimal("1.0")
    special_unworked: Decimal = Decimal("0.3")
    regular_worked: Decimal = Decimal("2.0")
    special_worked: Decimal = Decimal("1.3")
    overtime_holiday_premium: Decimal = Decimal("1.3")
    overtime_not_late_premium: Decimal = Decimal("1.25")
    rest_day_premium: Decimal = Decimal("1.3")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollConfiguration:
    """Complete payroll configuration set.

    ``checksum`` is the SHA-256 of the source YAML data and identifies
    the configuration in trace logs.
    """

    config_id: str
    version: int
    jurisdiction: str
    currency: str
    effective_from: date
    social_insurance: StepTableDef
    health_insurance: HealthInsuranceDef
    housing_fund: HousingFundDef
    income_tax: tuple[TaxBracketDef, ...]
    work_schedule: WorkScheduleDef = field(default_factory=WorkScheduleDef)
    policy: PayrollPolicyDef = field(default_factory=PayrollPolicyDef)
    deduction_schedule: tuple[tuple[str, tuple[str, ...]], ...] = ()
    holidays: tuple[HolidayDef, ...] = ()
    holiday_rates: HolidayRatesDef = field(default_factory=HolidayRatesDef)
    effective_to: date | None = None
    checksum: str = ""
