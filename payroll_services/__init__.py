"""
payroll_services -- orchestration over the payroll engines.

    PayrollProcessor   one employee, one pay period
    PayrollRunService  many employees, one pay period, isolated failures
"""

from payroll_services.payroll_run import (
    EmployeeOutcome,
    OutcomeStatus,
    PayrollRunResult,
    PayrollRunService,
)
from payroll_services.ports import (
    EmployeeRateSource,
    InMemoryRateSource,
    require_rate_profile,
)
from payroll_services.processor import (
    EmployeeRateProfile,
    PayrollPolicy,
    PayrollProcessor,
    PayrollResult,
)

__all__ = [
    "EmployeeOutcome",
    "EmployeeRateProfile",
    "EmployeeRateSource",
    "InMemoryRateSource",
    "OutcomeStatus",
    "PayrollPolicy",
    "PayrollProcessor",
    "PayrollResult",
    "PayrollRunResult",
    "PayrollRunService",
    "require_rate_profile",
]
