"""
Typed Exception Hierarchy for the Payroll Kernel.

Every error has a TYPED exception class, a machine-readable ``code`` class
attribute, and structured attributes instead of a message to be parsed.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- PayPeriodError
    |   +-- InvalidPayPeriodError
    |
    +-- EmployeeError
    |   +-- EmployeeNotFoundError
    |   +-- RateProfileMissingError
    |
    +-- AttendanceError
    |   +-- AttendanceParseError
    |
    +-- ConfigurationError
        +-- ConfigurationNotFoundError
        +-- InvalidBracketTableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Pay period      | INVALID_PAY_PERIOD          | start > end, or pay date before end
----------------|-----------------------------|-----------------------------------------
Employee        | EMPLOYEE_NOT_FOUND          | Employee ID unknown to the rate source
                | RATE_PROFILE_MISSING        | Employee known but has no rate profile
----------------|-----------------------------|-----------------------------------------
Attendance      | ATTENDANCE_PARSE_ERROR      | Row cannot be parsed (strict callers)
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_NOT_FOUND     | Config file path does not exist
                | INVALID_BRACKET_TABLE       | Bracket thresholds not ascending, etc.

===============================================================================
HANDLING PATTERNS
===============================================================================

Parse failures and negative amounts are NOT exceptions: they resolve to
explicit markers or clamped values so one malformed record never stops a
payroll run.  Exceptions are reserved for caller bugs detected at
construction time and for per-employee lookups that the run service
converts into ``NOT_FOUND`` outcomes:

    try:
        profile = require_rate_profile(rate_source, employee_id)
    except EmployeeError as exc:
        return EmployeeOutcome(
            employee_id=employee_id,
            status=OutcomeStatus.NOT_FOUND,
            error_code=exc.code,
        )
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Pay period exceptions


class PayPeriodError(PayrollKernelError):
    """Base exception for pay period errors."""

    code: str = "PAY_PERIOD_ERROR"


class InvalidPayPeriodError(PayPeriodError):
    """Pay period dates violate start <= end <= pay_date."""

    code: str = "INVALID_PAY_PERIOD"

    def __init__(self, start_date: str, end_date: str, pay_date: str, reason: str):
        self.start_date = start_date
        self.end_date = end_date
        self.pay_date = pay_date
        self.reason = reason
        super().__init__(
            f"Invalid pay period {start_date} to {end_date} "
            f"(pay date {pay_date}): {reason}"
        )


# Employee exceptions


class EmployeeError(PayrollKernelError):
    """Base exception for employee lookup errors."""

    code: str = "EMPLOYEE_ERROR"


class EmployeeNotFoundError(EmployeeError):
    """Employee ID is unknown to the rate source."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class RateProfileMissingError(EmployeeError):
    """Employee exists but no rate profile was supplied for them."""

    code: str = "RATE_PROFILE_MISSING"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"No rate profile for employee: {employee_id}")


# Attendance exceptions


class AttendanceError(PayrollKernelError):
    """Base exception for attendance errors."""

    code: str = "ATTENDANCE_ERROR"


class AttendanceParseError(AttendanceError):
    """An attendance row could not be parsed."""

    code: str = "ATTENDANCE_PARSE_ERROR"

    def __init__(self, employee_id: str, field: str, raw_value: str):
        self.employee_id = employee_id
        self.field = field
        self.raw_value = raw_value
        super().__init__(
            f"Cannot parse {field} {raw_value!r} for employee {employee_id}"
        )


# Configuration exceptions


class ConfigurationError(PayrollKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigurationNotFoundError(ConfigurationError):
    """Configuration file does not exist."""

    code: str = "CONFIGURATION_NOT_FOUND"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Payroll configuration not found: {path}")


class InvalidBracketTableError(ConfigurationError):
    """A bracket or rate table is structurally invalid."""

    code: str = "INVALID_BRACKET_TABLE"

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"Invalid bracket table {table}: {reason}")
