"""
Tests for configuration loading, validation and the config-to-engine bridges.
"""

import textwrap
from datetime import date
from decimal import Decimal

import pytest

from payroll_config import DEFAULT_CONFIG_PATH, get_active_config
from payroll_config.bridges import (
    build_deduction_engine,
    build_deduction_schedule,
    build_holiday_calendar,
    build_work_schedule,
)
from payroll_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_bool,
    parse_clock,
    parse_work_schedule,
)
from payroll_engines.deductions import DeductionCode
from payroll_engines.pay_period import PeriodType
from payroll_engines.time_parser import TimeOfDay
from payroll_kernel.exceptions import (
    ConfigurationError,
    ConfigurationNotFoundError,
    InvalidBracketTableError,
)

MINIMAL_YAML = textwrap.dedent("""\
    config_id: minimal
    effective_from: "2024-01-01"
    work_schedule:
      standard_end: "17:00"
    social_insurance:
      steps:
        - {threshold: "0", amount: "100"}
        - {threshold: "1000", amount: "200"}
    health_insurance: {rate: "0.03", monthly_cap: "1800"}
    housing_fund:
      minimum_compensation: "1000"
      tiers:
        - {upper_bound: null, rate: "0.02"}
      floor: "100"
      ceiling: "100"
    income_tax:
      - {upper_bound: null, base_tax: "0", rate: "0", excess_over: "0"}
""")


@pytest.fixture
def write_config(tmp_path):
    def _write(text: str):
        path = tmp_path / "payroll.yaml"
        path.write_text(text, encoding="utf-8")
        return path
    return _write


class TestPackagedConfiguration:
    def test_loads(self, payroll_config):
        assert payroll_config.config_id == "ph_semimonthly"
        assert payroll_config.currency == "PHP"
        assert payroll_config.effective_from == date(2024, 1, 1)
        assert len(payroll_config.social_insurance.steps) == 45
        assert len(payroll_config.income_tax) == 6

    def test_checksum_stable(self):
        first = get_active_config()
        second = get_active_config(DEFAULT_CONFIG_PATH)
        assert first.checksum == second.checksum
        assert len(first.checksum) == 64

    def test_checksum_changes_with_content(self):
        data = load_yaml_file(DEFAULT_CONFIG_PATH)
        before = compute_checksum(data)
        data["health_insurance"]["rate"] = "0.05"
        assert compute_checksum(data) != before

    def test_emits_config_trace(self, captured_logs):
        config = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_id"] == "ph_semimonthly"
        assert traces[0]["checksum"] == config.checksum
        assert traces[0]["sss_step_count"] == 45

    def test_work_schedule_is_24_hour(self, work_schedule):
        assert work_schedule.standard_start == TimeOfDay(8, 0)
        assert work_schedule.grace_end == TimeOfDay(8, 10)
        assert work_schedule.standard_end == TimeOfDay(17, 0)
        assert work_schedule.deduct_lunch is False

    def test_deduction_schedule(self, payroll_config):
        schedule = build_deduction_schedule(payroll_config)
        assert schedule.applies(DeductionCode.SOCIAL_INSURANCE, PeriodType.MID_MONTH)
        assert not schedule.applies(DeductionCode.SOCIAL_INSURANCE, PeriodType.END_MONTH)
        assert schedule.applies(DeductionCode.INCOME_TAX, PeriodType.END_MONTH)

    def test_holiday_calendar(self, holiday_calendar):
        assert holiday_calendar.is_regular_holiday(date(2025, 12, 25))
        assert holiday_calendar.rates.special_unworked == Decimal("0.3")


class TestMinimalConfiguration:
    def test_defaults_fill_missing_sections(self, write_config):
        config = get_active_config(write_config(MINIMAL_YAML))

        assert config.version == 1
        assert config.policy.overtime_premium == Decimal("1.25")
        assert config.holidays == ()
        assert len(build_holiday_calendar(config)) == 0
        engine = build_deduction_engine(config)
        assert engine.calculate(Decimal("2000"), PeriodType.MID_MONTH).social_insurance == Decimal("200.00")
        assert build_work_schedule(config).standard_end == TimeOfDay(17, 0)


class TestConfigurationErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationNotFoundError) as exc_info:
            get_active_config(tmp_path / "absent.yaml")
        assert exc_info.value.code == "CONFIGURATION_NOT_FOUND"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_unquoted_clock_time_rejected(self, write_config):
        text = MINIMAL_YAML.replace('standard_end: "17:00"', "standard_end: 17:00")
        with pytest.raises(ValueError):
            get_active_config(write_config(text))

    def test_parse_clock_rejects_numbers(self):
        with pytest.raises(ValueError):
            parse_clock(1020)

    def test_unordered_steps_rejected(self, write_config):
        text = MINIMAL_YAML.replace('{threshold: "1000", amount: "200"}',
                                    '{threshold: "0", amount: "200"}')
        with pytest.raises(InvalidBracketTableError):
            get_active_config(write_config(text))

    def test_duplicate_holidays_rejected(self, write_config):
        text = MINIMAL_YAML + textwrap.dedent("""\
            holidays:
              - {name: "A", date: "2024-01-01", kind: REGULAR}
              - {name: "B", date: "2024-01-01", kind: SPECIAL_NON_WORKING}
        """)
        with pytest.raises(ConfigurationError):
            get_active_config(write_config(text))

    def test_unknown_holiday_kind_rejected(self, write_config):
        text = MINIMAL_YAML + textwrap.dedent("""\
            holidays:
              - {name: "A", date: "2024-01-01", kind: FLOATING}
        """)
        with pytest.raises(ConfigurationError):
            get_active_config(write_config(text))

    def test_overtime_premium_below_one_rejected(self, write_config):
        text = MINIMAL_YAML + 'policy: {overtime_premium: "0.5"}\n'
        with pytest.raises(ConfigurationError):
            get_active_config(write_config(text))

    def test_invalid_week_start_rejected(self, write_config):
        text = MINIMAL_YAML.replace(
            'standard_end: "17:00"', 'standard_end: "17:00"\n  week_start: 9'
        )
        with pytest.raises(ConfigurationError):
            get_active_config(write_config(text))

    def test_grace_before_start_rejected(self, write_config):
        text = MINIMAL_YAML.replace(
            'standard_end: "17:00"', 'standard_end: "17:00"\n  grace_end: "07:00"'
        )
        with pytest.raises(ConfigurationError):
            get_active_config(write_config(text))


class TestFlags:
    @pytest.mark.parametrize("raw,expected", [
        (True, True),
        (False, False),
        ("false", False),
        ("False", False),
        ("no", False),
        ("true", True),
        (" YES ", True),
    ])
    def test_parse_bool(self, raw, expected):
        assert parse_bool(raw) is expected

    @pytest.mark.parametrize("raw", ["maybe", "", 1, 0, None])
    def test_parse_bool_rejects_other_values(self, raw):
        with pytest.raises(ValueError):
            parse_bool(raw)

    def test_quoted_false_keeps_lunch_deduction_off(self):
        assert parse_work_schedule({"deduct_lunch": "false"}).deduct_lunch is False

    def test_quoted_true_enables_lunch_deduction(self, write_config):
        text = MINIMAL_YAML.replace(
            'standard_end: "17:00"', 'standard_end: "17:00"\n  deduct_lunch: "true"'
        )
        config = get_active_config(write_config(text))
        assert build_work_schedule(config).deduct_lunch is True

    def test_unreadable_flag_rejected(self, write_config):
        text = MINIMAL_YAML.replace(
            'standard_end: "17:00"', 'standard_end: "17:00"\n  deduct_lunch: "sometimes"'
        )
        with pytest.raises(ValueError):
            get_active_config(write_config(text))
