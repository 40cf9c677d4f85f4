"""
Pytest fixtures for the payroll test suite.

Provides:
- Structured logging configuration and a ``captured_logs`` fixture
- Engines built from the packaged configuration
- Attendance helpers
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from payroll_config import get_active_config
from payroll_config.bridges import (
    build_deduction_engine,
    build_holiday_calendar,
    build_work_schedule,
)
from payroll_engines.attendance import AttendanceDay, WorkSchedule
from payroll_engines.time_parser import TimeOfDay
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_services.processor import (
    EmployeeRateProfile,
    PayrollPolicy,
    PayrollProcessor,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, processor):
            processor.process(...)
            logs = captured_logs()
            assert any(r["message"] == "payroll_processing_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Configuration-backed engines
# =============================================================================


@pytest.fixture(scope="session")
def payroll_config():
    return get_active_config()


@pytest.fixture(scope="session")
def deduction_engine(payroll_config):
    return build_deduction_engine(payroll_config)


@pytest.fixture(scope="session")
def holiday_calendar(payroll_config):
    return build_holiday_calendar(payroll_config)


@pytest.fixture(scope="session")
def work_schedule(payroll_config) -> WorkSchedule:
    return build_work_schedule(payroll_config)


@pytest.fixture
def processor(deduction_engine) -> PayrollProcessor:
    return PayrollProcessor(deduction_engine, PayrollPolicy())


@pytest.fixture
def profile() -> EmployeeRateProfile:
    """Monthly 20,000 employee with an hourly rate of exactly 100."""
    return EmployeeRateProfile(
        employee_id="10001",
        monthly_basic_salary=Decimal("20000"),
        semi_monthly_rate=Decimal("10000"),
        hourly_rate=Decimal("100"),
        daily_rate=Decimal("800"),
    )


# =============================================================================
# Attendance helpers
# =============================================================================


def tod(text: str) -> TimeOfDay:
    """``"08:15"`` -> TimeOfDay(8, 15) without the afternoon heuristic."""
    hour, minute = text.split(":")
    return TimeOfDay(int(hour), int(minute))


def make_day(
    work_date: date,
    time_in: str | None = "08:00",
    time_out: str | None = "17:00",
    employee_id: str = "10001",
) -> AttendanceDay:
    return AttendanceDay(
        employee_id=employee_id,
        work_date=work_date,
        time_in=tod(time_in) if time_in else None,
        time_out=tod(time_out) if time_out else None,
    )
