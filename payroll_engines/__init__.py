"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the import surface for higher
    layers (payroll_config, payroll_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (and sibling engine modules).
    MUST NOT import payroll_config or payroll_services.

Invariants enforced:
    - Purity: engines never read the clock.  Dates are explicit arguments.
    - Decimal-only arithmetic for hours and money.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from payroll_engines import parse_time_of_day, resolve_day
    from payroll_engines import aggregate_period, build_pay_period
    from payroll_engines import DeductionEngine, HolidayCalendar
"""

from payroll_engines.aggregation import (
    AbsenceClassification,
    PeriodSummary,
    PeriodTotals,
    WeeklySubtotal,
    aggregate_period,
    count_working_days,
    is_unpaid_absence,
    working_dates,
)
from payroll_engines.attendance import (
    AttendanceDay,
    AttendanceRow,
    DailyResult,
    DayIssue,
    ParsedAttendance,
    RejectedRow,
    WorkSchedule,
    parse_attendance_rows,
    resolve_day,
)
from payroll_engines.deductions import (
    DeductionCalculator,
    DeductionCode,
    DeductionEngine,
    DeductionResult,
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
    holiday_work_pay,
)
from payroll_engines.pay_period import (
    PayPeriod,
    PeriodType,
    adjust_for_weekend,
    build_pay_period,
    cutoff_range,
    pay_date_for,
    pay_period_for_pay_date,
    pay_periods_for_year,
)
from payroll_engines.time_parser import (
    ParsedTime,
    TimeOfDay,
    UnparsedReason,
    UnparsedTime,
    parse_attendance_date,
    parse_time_of_day,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Time parsing
    "ParsedTime",
    "TimeOfDay",
    "UnparsedReason",
    "UnparsedTime",
    "parse_attendance_date",
    "parse_time_of_day",
    # Attendance
    "AttendanceDay",
    "AttendanceRow",
    "DailyResult",
    "DayIssue",
    "ParsedAttendance",
    "RejectedRow",
    "WorkSchedule",
    "parse_attendance_rows",
    "resolve_day",
    # Aggregation
    "AbsenceClassification",
    "PeriodSummary",
    "PeriodTotals",
    "WeeklySubtotal",
    "aggregate_period",
    "count_working_days",
    "is_unpaid_absence",
    "working_dates",
    # Pay periods
    "PayPeriod",
    "PeriodType",
    "adjust_for_weekend",
    "build_pay_period",
    "cutoff_range",
    "pay_date_for",
    "pay_period_for_pay_date",
    "pay_periods_for_year",
    # Deductions
    "DeductionCalculator",
    "DeductionCode",
    "DeductionEngine",
    "DeductionResult",
    "DeductionSchedule",
    "HealthInsuranceCalculator",
    "HousingFundCalculator",
    "IncomeTaxCalculator",
    "ProgressiveTaxTable",
    "RateCapSchedule",
    "RateTier",
    "SocialInsuranceCalculator",
    "StepTable",
    "TaxBracket",
    "TieredRateSchedule",
    # Holidays
    "Holiday",
    "HolidayCalendar",
    "HolidayKind",
    "HolidayPayRates",
    "holiday_work_pay",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
