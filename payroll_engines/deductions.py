"""
Statutory Deduction Engine (``payroll_engines.deductions``).

Responsibility
--------------
Compute the four statutory deductions from **monthly** gross compensation
and apply the semi-monthly applicability schedule:

* Social insurance -- step table of compensation brackets.
* Health insurance -- flat rate with a monthly cap.
* Housing fund -- tiered rate with a floor and a ceiling.
* Income tax -- progressive brackets on taxable income, where taxable
  income is gross minus the three contributions, floored at zero.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Bracket tables are ordered
data supplied by the caller (normally built by ``payroll_config.bridges``
from the packaged YAML), never embedded constants.

Invariants enforced
-------------------
* Every calculator returns a non-negative amount rounded half-up to
  centavos; compensation at or below zero yields zero.
* Social insurance is non-decreasing in compensation (tables with
  decreasing amounts are rejected at construction).
* ``DeductionResult.total`` equals the sum of its four components.
* Components not scheduled for the processed half are zero.

Failure modes
-------------
* Malformed tables raise ``InvalidBracketTableError`` at construction.
* A negative monthly gross is clamped to zero with a warning.

Contracts
---------
* ``HealthInsuranceCalculator.calculate`` returns the MONTHLY amount.
  Callers that need a half-month share divide by two explicitly.
* Income tax is non-decreasing in taxable income except for one step
  built into the published table: bracket 4 starts from 10,833 over
  66,667 while bracket 3 ends at 10,833.25, so tax falls by 0.25 just
  above 66,666.  Taxable income between a bracket's ``excess_over`` and
  the previous upper bound is taxed at the bracket's base amount.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Protocol

from payroll_engines.pay_period import PeriodType
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import ZERO, non_negative, quantize_money, to_decimal
from payroll_kernel.exceptions import InvalidBracketTableError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.deductions")


class DeductionCode(str, Enum):
    SOCIAL_INSURANCE = "social_insurance"
    HEALTH_INSURANCE = "health_insurance"
    HOUSING_FUND = "housing_fund"
    INCOME_TAX = "income_tax"


# ---------------------------------------------------------------------------
# Bracket tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepTable:
    """Ordered ``(threshold, amount)`` steps.

    The amount of the last step whose threshold is at or below the
    compensation applies.  Compensation at or below zero maps to zero.
    """

    steps: tuple[tuple[Decimal, Decimal], ...]
    name: str = "step_table"

    def __post_init__(self) -> None:
        if not self.steps:
            raise InvalidBracketTableError(self.name, "no steps")
        previous: tuple[Decimal, Decimal] | None = None
        for threshold, amount in self.steps:
            if threshold < 0 or amount < 0:
                raise InvalidBracketTableError(
                    self.name, f"negative step ({threshold}, {amount})"
                )
            if previous is not None:
                if threshold <= previous[0]:
                    raise InvalidBracketTableError(
                        self.name, f"threshold {threshold} not ascending"
                    )
                if amount < previous[1]:
                    raise InvalidBracketTableError(
                        self.name, f"amount {amount} decreases at {threshold}"
                    )
            previous = (threshold, amount)

    def lookup(self, compensation: Decimal) -> Decimal:
        if compensation <= 0:
            return ZERO
        result = ZERO
        for threshold, amount in self.steps:
            if compensation < threshold:
                break
            result = amount
        return result


@dataclass(frozen=True)
class RateCapSchedule:
    """Flat rate of compensation, capped per month."""

    rate: Decimal
    monthly_cap: Decimal
    name: str = "rate_cap"

    def __post_init__(self) -> None:
        if self.rate < 0 or self.monthly_cap < 0:
            raise InvalidBracketTableError(self.name, "rate and cap must be non-negative")


@dataclass(frozen=True)
class RateTier:
    """Rate applied up to and including ``upper_bound`` (None = no limit)."""

    upper_bound: Decimal | None
    rate: Decimal


@dataclass(frozen=True)
class TieredRateSchedule:
    """Tiered rates with a zero band, then clamped to ``[floor, ceiling]``."""

    minimum_compensation: Decimal
    tiers: tuple[RateTier, ...]
    floor: Decimal
    ceiling: Decimal
    name: str = "tiered_rate"

    def __post_init__(self) -> None:
        if not self.tiers:
            raise InvalidBracketTableError(self.name, "no tiers")
        if self.floor > self.ceiling:
            raise InvalidBracketTableError(
                self.name, f"floor {self.floor} exceeds ceiling {self.ceiling}"
            )
        _check_bounds(self.name, [t.upper_bound for t in self.tiers])
        if any(t.rate < 0 for t in self.tiers):
            raise InvalidBracketTableError(self.name, "negative rate")

    def rate_for(self, compensation: Decimal) -> Decimal:
        for tier in self.tiers:
            if tier.upper_bound is None or compensation <= tier.upper_bound:
                return tier.rate
        return self.tiers[-1].rate


@dataclass(frozen=True)
class TaxBracket:
    """``base_tax + rate * (income - excess_over)`` up to ``upper_bound``."""

    upper_bound: Decimal | None
    base_tax: Decimal
    rate: Decimal
    excess_over: Decimal


@dataclass(frozen=True)
class ProgressiveTaxTable:
    brackets: tuple[TaxBracket, ...]
    name: str = "income_tax"

    def __post_init__(self) -> None:
        if not self.brackets:
            raise InvalidBracketTableError(self.name, "no brackets")
        _check_bounds(self.name, [b.upper_bound for b in self.brackets])
        for bracket in self.brackets:
            if bracket.base_tax < 0 or bracket.rate < 0 or bracket.excess_over < 0:
                raise InvalidBracketTableError(
                    self.name, f"negative value in bracket {bracket}"
                )

    def bracket_for(self, taxable_income: Decimal) -> TaxBracket:
        for bracket in self.brackets:
            if bracket.upper_bound is None or taxable_income <= bracket.upper_bound:
                return bracket
        return self.brackets[-1]


def _check_bounds(name: str, bounds: Sequence[Decimal | None]) -> None:
    """Upper bounds ascend strictly; only the last may be open (None)."""
    for index, bound in enumerate(bounds):
        is_last = index == len(bounds) - 1
        if bound is None and not is_last:
            raise InvalidBracketTableError(name, "open bracket before the last")
        if bound is not None and index > 0:
            previous = bounds[index - 1]
            if previous is not None and bound <= previous:
                raise InvalidBracketTableError(name, f"bound {bound} not ascending")


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------


class DeductionCalculator(Protocol):
    code: DeductionCode
    name: str

    def calculate(self, monthly_amount: Decimal) -> Decimal:
        ...


@dataclass(frozen=True)
class SocialInsuranceCalculator:
    table: StepTable
    code: DeductionCode = DeductionCode.SOCIAL_INSURANCE
    name: str = "Social Insurance (SSS)"

    def calculate(self, monthly_amount: Decimal) -> Decimal:
        return quantize_money(self.table.lookup(to_decimal(monthly_amount)))


@dataclass(frozen=True)
class HealthInsuranceCalculator:
    """Monthly health contribution: ``min(rate * compensation, cap)``."""

    schedule: RateCapSchedule
    code: DeductionCode = DeductionCode.HEALTH_INSURANCE
    name: str = "Health Insurance (PhilHealth)"

    def calculate(self, monthly_amount: Decimal) -> Decimal:
        compensation = to_decimal(monthly_amount)
        if compensation <= 0:
            return ZERO
        amount = min(compensation * self.schedule.rate, self.schedule.monthly_cap)
        return quantize_money(amount)


@dataclass(frozen=True)
class HousingFundCalculator:
    schedule: TieredRateSchedule
    code: DeductionCode = DeductionCode.HOUSING_FUND
    name: str = "Housing Fund (Pag-IBIG)"

    def calculate(self, monthly_amount: Decimal) -> Decimal:
        compensation = to_decimal(monthly_amount)
        if compensation <= 0 or compensation < self.schedule.minimum_compensation:
            return ZERO
        amount = compensation * self.schedule.rate_for(compensation)
        amount = max(self.schedule.floor, min(amount, self.schedule.ceiling))
        return quantize_money(amount)


@dataclass(frozen=True)
class IncomeTaxCalculator:
    """Progressive withholding tax on monthly taxable income."""

    table: ProgressiveTaxTable
    code: DeductionCode = DeductionCode.INCOME_TAX
    name: str = "Withholding Tax"

    def calculate(self, monthly_amount: Decimal) -> Decimal:
        taxable = to_decimal(monthly_amount)
        if taxable <= 0:
            return ZERO
        bracket = self.table.bracket_for(taxable)
        excess = non_negative(taxable - bracket.excess_over)
        return quantize_money(non_negative(bracket.base_tax + bracket.rate * excess))


# ---------------------------------------------------------------------------
# Applicability schedule
# ---------------------------------------------------------------------------


def _default_applicability() -> dict[DeductionCode, frozenset[PeriodType]]:
    mid = frozenset({PeriodType.MID_MONTH})
    return {
        DeductionCode.SOCIAL_INSURANCE: mid,
        DeductionCode.HEALTH_INSURANCE: mid,
        DeductionCode.HOUSING_FUND: mid,
        DeductionCode.INCOME_TAX: frozenset({PeriodType.END_MONTH}),
    }


@dataclass(frozen=True)
class DeductionSchedule:
    """Which payroll half each deduction is withheld on."""

    applicability: Mapping[DeductionCode, frozenset[PeriodType]] = field(
        default_factory=_default_applicability
    )

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[str, Iterable[str]]
    ) -> DeductionSchedule:
        return cls({
            DeductionCode(code): frozenset(PeriodType(p) for p in periods)
            for code, periods in mapping.items()
        })

    def applies(self, code: DeductionCode, period_type: PeriodType) -> bool:
        return period_type in self.applicability.get(code, frozenset())


# ---------------------------------------------------------------------------
# Result and engine
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeductionResult:
    social_insurance: Decimal = ZERO
    health_insurance: Decimal = ZERO
    housing_fund: Decimal = ZERO
    income_tax: Decimal = ZERO
    total: Decimal = ZERO
    taxable_income: Decimal = ZERO
    period_type: PeriodType | None = None

    def __post_init__(self) -> None:
        for code, amount in self.components.items():
            if amount < 0:
                raise ValueError(f"{code.value} must be non-negative, got {amount}")
        expected = sum(self.components.values(), ZERO)
        if self.total != expected:
            raise ValueError(f"total {self.total} != sum of components {expected}")

    @classmethod
    def from_components(
        cls,
        social_insurance: Decimal,
        health_insurance: Decimal,
        housing_fund: Decimal,
        income_tax: Decimal,
        taxable_income: Decimal = ZERO,
        period_type: PeriodType | None = None,
    ) -> DeductionResult:
        return cls(
            social_insurance=social_insurance,
            health_insurance=health_insurance,
            housing_fund=housing_fund,
            income_tax=income_tax,
            total=social_insurance + health_insurance + housing_fund + income_tax,
            taxable_income=taxable_income,
            period_type=period_type,
        )

    @property
    def components(self) -> dict[DeductionCode, Decimal]:
        return {
            DeductionCode.SOCIAL_INSURANCE: self.social_insurance,
            DeductionCode.HEALTH_INSURANCE: self.health_insurance,
            DeductionCode.HOUSING_FUND: self.housing_fund,
            DeductionCode.INCOME_TAX: self.income_tax,
        }


class DeductionEngine:
    """
    Combine the four calculators under an applicability schedule.

    Pure apart from the trace record; calculators and schedule are
    injected so tables can be swapped in tests.
    """

    def __init__(
        self,
        social_insurance: SocialInsuranceCalculator,
        health_insurance: HealthInsuranceCalculator,
        housing_fund: HousingFundCalculator,
        income_tax: IncomeTaxCalculator,
        schedule: DeductionSchedule | None = None,
    ):
        self.social_insurance = social_insurance
        self.health_insurance = health_insurance
        self.housing_fund = housing_fund
        self.income_tax = income_tax
        self.schedule = schedule or DeductionSchedule()

    @property
    def calculators(self) -> tuple[DeductionCalculator, ...]:
        return (
            self.social_insurance,
            self.health_insurance,
            self.housing_fund,
            self.income_tax,
        )

    def _clamped_gross(self, monthly_gross: Decimal) -> Decimal:
        gross = to_decimal(monthly_gross)
        if gross < 0:
            logger.warning("negative_monthly_gross_clamped", extra={
                "monthly_gross": gross,
            })
            return ZERO
        return gross

    def monthly_breakdown(self, monthly_gross: Decimal) -> DeductionResult:
        """All four monthly figures, ignoring the applicability schedule."""
        gross = self._clamped_gross(monthly_gross)
        sss = self.social_insurance.calculate(gross)
        health = self.health_insurance.calculate(gross)
        housing = self.housing_fund.calculate(gross)
        taxable = non_negative(gross - sss - health - housing)
        return DeductionResult.from_components(
            social_insurance=sss,
            health_insurance=health,
            housing_fund=housing,
            income_tax=self.income_tax.calculate(taxable),
            taxable_income=taxable,
        )

    @traced_engine(
        "deductions", "1.0", fingerprint_fields=("monthly_gross", "period_type")
    )
    def calculate(
        self,
        monthly_gross: Decimal,
        period_type: PeriodType | str,
    ) -> DeductionResult:
        """Deductions withheld for one payroll half.

        Args:
            monthly_gross: The employee's monthly gross compensation.
            period_type: Half being processed; unknown values are treated
                as MID_MONTH.

        Returns:
            DeductionResult with non-applicable components zeroed.
        """
        period_type = PeriodType.coerce(period_type)
        monthly = self.monthly_breakdown(monthly_gross)

        def scheduled(code: DeductionCode) -> Decimal:
            if self.schedule.applies(code, period_type):
                return monthly.components[code]
            return ZERO

        return DeductionResult.from_components(
            social_insurance=scheduled(DeductionCode.SOCIAL_INSURANCE),
            health_insurance=scheduled(DeductionCode.HEALTH_INSURANCE),
            housing_fund=scheduled(DeductionCode.HOUSING_FUND),
            income_tax=scheduled(DeductionCode.INCOME_TAX),
            taxable_income=monthly.taxable_income,
            period_type=period_type,
        )
