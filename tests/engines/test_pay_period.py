"""
Tests for the pay period calculator.

Covers:
- Pay dates on the 15th / last day, rolled back off weekends
- Cutoff ranges for both halves, including across a year boundary
- PayPeriod construction invariants
- Period type coercion
- Contiguity of a year's cutoffs
"""

from datetime import date, timedelta

import pytest

from payroll_engines.pay_period import (
    PayPeriod,
    PeriodType,
    build_pay_period,
    cutoff_range,
    pay_date_for,
    pay_period_for_pay_date,
    pay_periods_for_year,
)
from payroll_kernel.exceptions import InvalidPayPeriodError


class TestPayDates:
    """Pay date derivation and weekend adjustment."""

    def test_mid_month_weekday(self):
        assert pay_date_for(2024, 11, PeriodType.MID_MONTH) == date(2024, 11, 15)

    @pytest.mark.parametrize("year,month,expected", [
        (2024, 9, date(2024, 9, 13)),
        (2024, 12, date(2024, 12, 13)),
    ])
    def test_sunday_fifteenth_moves_to_friday(self, year, month, expected):
        assert date(year, month, 15).weekday() == 6
        assert pay_date_for(year, month, PeriodType.MID_MONTH) == expected

    def test_saturday_fifteenth_moves_to_friday(self):
        assert pay_date_for(2024, 6, PeriodType.MID_MONTH) == date(2024, 6, 14)

    def test_end_month_saturday(self):
        assert pay_date_for(2024, 11, PeriodType.END_MONTH) == date(2024, 11, 29)

    def test_end_month_sunday(self):
        assert pay_date_for(2024, 3, PeriodType.END_MONTH) == date(2024, 3, 29)

    def test_end_month_leap_february(self):
        assert pay_date_for(2024, 2, PeriodType.END_MONTH) == date(2024, 2, 29)

    def test_pay_dates_are_never_weekends(self):
        for period in pay_periods_for_year(2025):
            assert period.pay_date.weekday() < 5


class TestCutoffs:
    def test_mid_month(self):
        assert cutoff_range(2024, 11, PeriodType.MID_MONTH) == (
            date(2024, 10, 27), date(2024, 11, 12),
        )

    def test_mid_month_january_crosses_year(self):
        assert cutoff_range(2025, 1, PeriodType.MID_MONTH) == (
            date(2024, 12, 27), date(2025, 1, 12),
        )

    def test_end_month(self):
        assert cutoff_range(2024, 11, PeriodType.END_MONTH) == (
            date(2024, 11, 13), date(2024, 11, 26),
        )

    def test_year_is_contiguous_and_non_overlapping(self):
        periods = pay_periods_for_year(2024)
        assert len(periods) == 24
        for previous, current in zip(periods, periods[1:]):
            assert current.start_date == previous.end_date + timedelta(days=1)


class TestPayPeriod:
    """Construction invariants and helpers."""

    def test_describe(self):
        period = build_pay_period(2024, 11, PeriodType.MID_MONTH)
        assert period.describe() == "Cutoff: Oct 27 - Nov 12, Pay date: Nov 15"

    def test_weekly_ranges(self):
        period = build_pay_period(2024, 11, PeriodType.MID_MONTH)
        assert period.weekly_ranges() == [
            (date(2024, 10, 27), date(2024, 11, 2)),
            (date(2024, 11, 3), date(2024, 11, 9)),
            (date(2024, 11, 10), date(2024, 11, 12)),
        ]

    def test_working_days(self):
        assert build_pay_period(2024, 11, PeriodType.MID_MONTH).working_days == 12

    def test_contains(self):
        period = build_pay_period(2024, 11, PeriodType.END_MONTH)
        assert period.contains(date(2024, 11, 13))
        assert period.contains(date(2024, 11, 26))
        assert not period.contains(date(2024, 11, 27))

    def test_start_after_end_rejected(self):
        with pytest.raises(InvalidPayPeriodError) as exc_info:
            PayPeriod(date(2024, 11, 26), date(2024, 11, 13), date(2024, 11, 29),
                      PeriodType.END_MONTH)
        assert exc_info.value.code == "INVALID_PAY_PERIOD"

    def test_pay_date_before_end_rejected(self):
        with pytest.raises(InvalidPayPeriodError):
            PayPeriod(date(2024, 11, 13), date(2024, 11, 26), date(2024, 11, 20),
                      PeriodType.END_MONTH)

    def test_pay_date_may_equal_cutoff_end(self):
        # Feb 28, 2027 is a Sunday: payday rolls back onto the cutoff end.
        period = build_pay_period(2027, 2, PeriodType.END_MONTH)
        assert period.pay_date == period.end_date == date(2027, 2, 26)

    def test_label(self):
        period = build_pay_period(2024, 11, PeriodType.MID_MONTH)
        assert period.label == "MID_MONTH:2024-11-15"


class TestPayPeriodForPayDate:
    def test_adjusted_mid_month(self):
        period = pay_period_for_pay_date(date(2024, 9, 13))
        assert period.period_type is PeriodType.MID_MONTH
        assert period.start_date == date(2024, 8, 27)

    def test_end_month(self):
        period = pay_period_for_pay_date(date(2024, 11, 29))
        assert period.period_type is PeriodType.END_MONTH

    def test_unscheduled_date_rejected(self):
        with pytest.raises(InvalidPayPeriodError):
            pay_period_for_pay_date(date(2024, 11, 20))


class TestPeriodTypeCoerce:
    @pytest.mark.parametrize("raw,expected", [
        (PeriodType.END_MONTH, PeriodType.END_MONTH),
        ("END_MONTH", PeriodType.END_MONTH),
        ("end-month", PeriodType.END_MONTH),
        ("mid month", PeriodType.MID_MONTH),
        (1, PeriodType.MID_MONTH),
        (2, PeriodType.END_MONTH),
    ])
    def test_known_values(self, raw, expected):
        assert PeriodType.coerce(raw) is expected

    def test_unknown_value_clamped_with_warning(self, captured_logs):
        assert PeriodType.coerce("weekly") is PeriodType.MID_MONTH
        warnings = [r for r in captured_logs() if r["message"] == "period_type_clamped"]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"
        assert warnings[0]["clamped_to"] == "MID_MONTH"

    def test_unknown_type_used_by_builder(self):
        assert build_pay_period(2024, 11, "bogus").period_type is PeriodType.MID_MONTH
