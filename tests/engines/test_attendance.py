"""
Tests for the daily attendance resolver and row parsing.

Covers:
- Lateness measured from the grace-period end
- Late arrivals forfeit overtime and are capped at the standard end
- Undertime, the 8-hour cap, and the optional lunch deduction
- Invalid and incomplete days
- Collaborator row parsing with diagnostics
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_engines.attendance import (
    AttendanceRow,
    DayIssue,
    WorkSchedule,
    parse_attendance_rows,
    resolve_day,
)
from payroll_engines.time_parser import TimeOfDay
from payroll_kernel.exceptions import AttendanceParseError
from tests.conftest import make_day

MONDAY = date(2024, 11, 4)


class TestLateness:
    """Late minutes count from the grace-period end (08:10)."""

    def test_on_time(self):
        result = resolve_day(make_day(MONDAY, "08:00", "17:00"))
        assert not result.is_late
        assert result.late_minutes == 0
        assert result.hours_worked == Decimal("8")

    def test_within_grace_period(self):
        result = resolve_day(make_day(MONDAY, "08:10", "17:00"))
        assert not result.is_late
        assert result.late_minutes == 0

    def test_one_minute_after_grace(self):
        result = resolve_day(make_day(MONDAY, "08:11", "17:00"))
        assert result.is_late
        assert result.late_minutes == 1

    def test_late_scenario_caps_and_forfeits_overtime(self):
        """08:15 to 17:30: 5 minutes late, 8 hours capped, no overtime."""
        result = resolve_day(make_day(MONDAY, "08:15", "17:30"))
        assert result.is_late
        assert result.late_minutes == 5
        assert result.hours_worked == Decimal("8")
        assert result.overtime_hours == 0
        assert not result.is_undertime

    def test_late_span_is_capped_at_standard_end(self):
        result = resolve_day(make_day(MONDAY, "10:00", "20:00"))
        assert result.hours_worked == Decimal("7")
        assert result.overtime_hours == 0

    def test_arriving_after_standard_end(self):
        result = resolve_day(make_day(MONDAY, "17:30", "19:00"))
        assert result.is_late
        assert result.hours_worked == 0
        assert result.overtime_hours == 0


class TestOvertimeAndUndertime:
    def test_overtime_when_on_time(self):
        result = resolve_day(make_day(MONDAY, "08:00", "18:30"))
        assert result.overtime_hours == Decimal("1.5")
        assert result.hours_worked == Decimal("8")

    def test_hours_are_capped_at_regular_hours(self):
        result = resolve_day(make_day(MONDAY, "07:00", "17:00"))
        assert result.hours_worked == Decimal("8")
        assert result.overtime_hours == 0

    def test_undertime(self):
        result = resolve_day(make_day(MONDAY, "08:00", "16:30"))
        assert result.is_undertime
        assert result.undertime_minutes == 30
        assert result.hours_worked == Decimal("8")
        assert result.undertime_hours == Decimal("0.5")

    def test_late_and_undertime(self):
        result = resolve_day(make_day(MONDAY, "09:10", "16:00"))
        assert result.late_minutes == 60
        assert result.undertime_minutes == 60
        assert result.hours_worked == Decimal(410) / 60

    def test_lunch_deduction_when_enabled(self):
        schedule = WorkSchedule(deduct_lunch=True)
        full = resolve_day(make_day(MONDAY, "08:00", "17:00"), schedule)
        short = resolve_day(make_day(MONDAY, "08:00", "12:00"), schedule)
        assert full.hours_worked == Decimal("8")
        assert short.hours_worked == Decimal("4")  # below the 5-hour threshold

    def test_lunch_deduction_applies_at_threshold(self):
        schedule = WorkSchedule(deduct_lunch=True)
        result = resolve_day(make_day(MONDAY, "08:00", "13:00"), schedule)
        assert result.hours_worked == Decimal("4")


class TestInvalidDays:
    def test_time_out_before_time_in(self):
        result = resolve_day(make_day(MONDAY, "17:00", "08:00"))
        assert not result.is_valid
        assert result.issue is DayIssue.TIME_OUT_BEFORE_TIME_IN
        assert result.hours_worked == 0
        assert result.late_minutes == 0

    @pytest.mark.parametrize("time_in,time_out", [(None, "17:00"), ("08:00", None)])
    def test_incomplete(self, time_in, time_out):
        result = resolve_day(make_day(MONDAY, time_in, time_out))
        assert not result.is_valid
        assert result.issue == "incomplete"


class TestWorkSchedule:
    def test_defaults(self):
        schedule = WorkSchedule()
        assert schedule.grace_end == TimeOfDay(8, 10)
        assert schedule.standard_end == TimeOfDay(17, 0)
        assert not schedule.deduct_lunch

    def test_rejects_end_before_grace(self):
        with pytest.raises(ValueError):
            WorkSchedule(standard_end=TimeOfDay(8, 5))


class TestParseAttendanceRows:
    """Collaborator rows -> AttendanceDay values plus diagnostics."""

    def test_parses_mixed_formats(self):
        parsed = parse_attendance_rows([
            AttendanceRow("10001", "11/04/2024", "0800", "5:30"),
            AttendanceRow("10001", "11/05/2024", "8:15 AM", "17:00"),
        ])
        assert len(parsed.days) == 2
        first = parsed.days[0]
        assert first.work_date == MONDAY
        assert first.time_in == TimeOfDay(8, 0)
        assert first.time_out == TimeOfDay(17, 30)
        assert parsed.diagnostics == ()

    def test_bad_date_rejects_row(self):
        parsed = parse_attendance_rows([
            AttendanceRow("10001", "2024-11-04", "0800", "1700"),
            AttendanceRow("10001", "11/05/2024", "0800", "1700"),
        ])
        assert len(parsed.days) == 1
        assert len(parsed.rejected) == 1
        assert parsed.rejected[0].row_index == 0
        assert parsed.rejected[0].field == "date"

    def test_bad_time_keeps_incomplete_day(self):
        parsed = parse_attendance_rows([
            AttendanceRow("10001", "11/04/2024", "0800", "late"),
        ])
        day = parsed.days[0]
        assert day.time_out is None
        assert not day.is_complete
        assert parsed.unparsed_times[0].field == "time_out"
        assert parsed.unparsed_times[0].raw_value == "late"

    def test_strict_mode_raises(self):
        with pytest.raises(AttendanceParseError) as exc_info:
            parse_attendance_rows(
                [AttendanceRow("10001", "not a date", "0800", "1700")],
                strict=True,
            )
        assert exc_info.value.code == "ATTENDANCE_PARSE_ERROR"
        assert exc_info.value.employee_id == "10001"
