"""
Decimal helpers shared by the payroll engines.

All monetary amounts are ``Decimal`` and rounded half-up to centavos only
at result boundaries.  Hours are kept as unrounded ``Decimal`` fractions
of minutes so sums stay exact.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
CENT = Decimal("0.01")
MINUTES_PER_HOUR = Decimal("60")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Convert a collaborator-supplied number to ``Decimal``.

    Floats go through ``str`` so 0.1 stays 0.1.  ``None`` becomes zero.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(amount: Decimal) -> Decimal:
    """Round to two decimal places, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def non_negative(amount: Decimal) -> Decimal:
    """Clamp at zero."""
    return amount if amount > ZERO else ZERO


def minutes_to_hours(minutes: int | Decimal) -> Decimal:
    """Minutes as a Decimal number of hours (unrounded)."""
    return Decimal(minutes) / MINUTES_PER_HOUR
