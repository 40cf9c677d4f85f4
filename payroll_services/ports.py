"""
Collaborator ports for the payroll services.

The employee-records reader and the absence tracker live outside this
project.  Services depend on these protocols only; ``InMemoryRateSource``
is the simple adapter used by callers that already hold profiles in
memory.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol

from payroll_kernel.exceptions import EmployeeNotFoundError, RateProfileMissingError

if TYPE_CHECKING:
    from payroll_services.processor import EmployeeRateProfile


class EmployeeRateSource(Protocol):
    """Supplies rate profiles.

    Implementations raise ``EmployeeNotFoundError`` for an unknown
    employee and return ``None`` when the employee has no profile.
    """

    def get_rate_profile(self, employee_id: str) -> EmployeeRateProfile | None:
        ...


class InMemoryRateSource:
    """Rate source over a prepared mapping of employee ID to profile."""

    def __init__(self, profiles: Mapping[str, EmployeeRateProfile | None]):
        self._profiles = dict(profiles)

    def get_rate_profile(self, employee_id: str) -> EmployeeRateProfile | None:
        if employee_id not in self._profiles:
            raise EmployeeNotFoundError(employee_id)
        return self._profiles[employee_id]


def require_rate_profile(
    source: EmployeeRateSource, employee_id: str
) -> EmployeeRateProfile:
    """Fetch a profile or raise a typed not-found error."""
    profile = source.get_rate_profile(employee_id)
    if profile is None:
        raise RateProfileMissingError(employee_id)
    return profile
