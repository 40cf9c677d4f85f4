"""
PayrollRunService -- process one pay period for many employees.

Responsibility:
    Parse the attendance rows once, aggregate each employee's cutoff,
    fetch the employee's rates from the injected rate source, and run the
    ``PayrollProcessor``.  Every employee yields exactly one
    ``EmployeeOutcome``.

Architecture position:
    Services -- batch orchestration.  No persistence; the caller owns the
    outcome tuple.

Invariants enforced:
    - Per-employee failure isolation: an unknown employee or a failing
      computation is recorded on that employee's outcome and never aborts
      the run.
    - Deterministic ordering: outcomes follow the order of the requested
      employee IDs, also when ``max_workers`` runs them concurrently.
    - Malformed attendance rows are reported as diagnostics, never fatal.

Failure modes:
    - ``EmployeeNotFoundError`` / ``RateProfileMissingError`` -> NOT_FOUND.
    - Any other ``PayrollKernelError`` -> FAILED with the error's code.
    - Unexpected exceptions -> FAILED with ``UNHANDLED_EXCEPTION``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from payroll_engines.aggregation import (
    MONDAY,
    AbsenceClassification,
    PeriodSummary,
    aggregate_period,
)
from payroll_engines.attendance import (
    AttendanceDay,
    AttendanceRow,
    RejectedRow,
    WorkSchedule,
    parse_attendance_rows,
)
from payroll_engines.pay_period import PayPeriod
from payroll_kernel.domain.values import ZERO
from payroll_kernel.exceptions import EmployeeError, PayrollKernelError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_services.ports import EmployeeRateSource, require_rate_profile
from payroll_services.processor import PayrollProcessor, PayrollResult

_logger = get_logger("services.payroll_run")


class OutcomeStatus(str, Enum):
    """Per-employee result of a payroll run."""

    PROCESSED = "processed"
    NOT_FOUND = "not_found"  # Unknown employee or no rate profile
    FAILED = "failed"  # Computation raised


@dataclass(frozen=True)
class EmployeeOutcome:
    employee_id: str
    status: OutcomeStatus
    result: PayrollResult | None = None
    summary: PeriodSummary | None = None
    error_code: str | None = None
    error_message: str | None = None
    diagnostics: tuple[RejectedRow, ...] = ()
    duration_ms: float = 0.0

    @property
    def is_processed(self) -> bool:
        return self.status is OutcomeStatus.PROCESSED


@dataclass(frozen=True)
class PayrollRunResult:
    run_id: str
    pay_period: PayPeriod
    outcomes: tuple[EmployeeOutcome, ...]
    rejected_rows: tuple[RejectedRow, ...] = ()
    duration_ms: float = 0.0

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def processed_count(self) -> int:
        return self._count(OutcomeStatus.PROCESSED)

    @property
    def not_found_count(self) -> int:
        return self._count(OutcomeStatus.NOT_FOUND)

    @property
    def failed_count(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def results(self) -> tuple[PayrollResult, ...]:
        return tuple(o.result for o in self.outcomes if o.result is not None)

    @property
    def total_net_pay(self) -> Decimal:
        return sum((r.net_pay for r in self.results), ZERO)

    def outcome_for(self, employee_id: str) -> EmployeeOutcome | None:
        for outcome in self.outcomes:
            if outcome.employee_id == employee_id:
                return outcome
        return None


class PayrollRunService:
    """
    Batch payroll for one pay period.

    Args:
        processor: Computes pay for a single employee.
        rate_source: Supplies each employee's rate profile.
        schedule: Work schedule for attendance resolution.
        week_start: First weekday of reporting weeks (0=Monday).
        max_workers: Run employees on a thread pool of this size.
            ``None`` or 1 processes sequentially.
        logger: Injected logger; defaults to
            ``payroll_kernel.services.payroll_run``.
    """

    def __init__(
        self,
        processor: PayrollProcessor,
        rate_source: EmployeeRateSource,
        schedule: WorkSchedule | None = None,
        week_start: int = MONDAY,
        max_workers: int | None = None,
        logger: logging.Logger | None = None,
    ):
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self._processor = processor
        self._rate_source = rate_source
        self._schedule = schedule or WorkSchedule()
        self._week_start = week_start
        self._max_workers = max_workers
        self._logger = logger or _logger

    def run(
        self,
        employee_ids: Sequence[str],
        attendance_rows: Iterable[AttendanceRow],
        pay_period: PayPeriod,
        absences: Mapping[str, AbsenceClassification] | None = None,
        monthly_gross: Mapping[str, Decimal] | None = None,
        run_id: str | None = None,
    ) -> PayrollRunResult:
        """Process every requested employee for ``pay_period``.

        Args:
            employee_ids: Employees to pay, in output order.
            attendance_rows: Raw rows for any employees.
            pay_period: Period being paid.
            absences: Optional absence classification per employee.
            monthly_gross: Optional monthly gross per employee for the
                statutory deductions; defaults to the basic salary.
            run_id: Identifier for log correlation; generated if omitted.
        """
        t0 = time.monotonic()
        run_id = run_id or str(uuid4())
        absences = absences or {}
        monthly_gross = monthly_gross or {}

        with LogContext.bind(run_id=run_id, pay_period=pay_period.label):
            parsed = parse_attendance_rows(attendance_rows)
            for diag in parsed.diagnostics:
                self._logger.warning("attendance_row_unparsed", extra={
                    "row_index": diag.row_index,
                    "row_employee_id": diag.employee_id,
                    "field": diag.field,
                    "raw_value": diag.raw_value,
                    "reason": diag.reason,
                })

            days_by_employee: dict[str, list[AttendanceDay]] = {}
            for day in parsed.days:
                days_by_employee.setdefault(day.employee_id, []).append(day)
            diags_by_employee: dict[str, list[RejectedRow]] = {}
            for diag in parsed.diagnostics:
                diags_by_employee.setdefault(diag.employee_id, []).append(diag)

            self._logger.info("payroll_run_started", extra={
                "employee_count": len(employee_ids),
                "row_count": len(parsed.days) + len(parsed.rejected),
                "rejected_row_count": len(parsed.rejected),
                "max_workers": self._max_workers,
            })

            def job(employee_id: str) -> EmployeeOutcome:
                with LogContext.bind(run_id=run_id, pay_period=pay_period.label):
                    return self._process_employee(
                        employee_id,
                        days_by_employee.get(employee_id, ()),
                        tuple(diags_by_employee.get(employee_id, ())),
                        pay_period,
                        absences.get(employee_id),
                        monthly_gross.get(employee_id),
                    )

            if self._max_workers and self._max_workers > 1:
                with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                    outcomes = tuple(pool.map(job, employee_ids))
            else:
                outcomes = tuple(job(e) for e in employee_ids)

            result = PayrollRunResult(
                run_id=run_id,
                pay_period=pay_period,
                outcomes=outcomes,
                rejected_rows=parsed.rejected,
                duration_ms=round((time.monotonic() - t0) * 1000, 2),
            )
            self._logger.info("payroll_run_completed", extra={
                "processed": result.processed_count,
                "not_found": result.not_found_count,
                "failed": result.failed_count,
                "total_net_pay": result.total_net_pay,
                "duration_ms": result.duration_ms,
            })
            return result

    def _process_employee(
        self,
        employee_id: str,
        days: Iterable[AttendanceDay],
        diagnostics: tuple[RejectedRow, ...],
        pay_period: PayPeriod,
        absences: AbsenceClassification | None,
        monthly_gross: Decimal | None,
    ) -> EmployeeOutcome:
        t0 = time.monotonic()
        with LogContext.bind(employee_id=employee_id):
            try:
                profile = require_rate_profile(self._rate_source, employee_id)
                summary = aggregate_period(
                    days,
                    employee_id,
                    pay_period.start_date,
                    pay_period.end_date,
                    schedule=self._schedule,
                    absences=absences,
                    week_start=self._week_start,
                )
                for day in summary.skipped:
                    self._logger.warning("attendance_day_skipped", extra={
                        "work_date": day.work_date,
                        "has_time_in": day.time_in is not None,
                        "has_time_out": day.time_out is not None,
                    })
                result = self._processor.process(
                    profile, summary.totals, pay_period, monthly_gross
                )
            except EmployeeError as exc:
                self._logger.warning("employee_not_found", extra={
                    "error_code": exc.code,
                })
                return EmployeeOutcome(
                    employee_id=employee_id,
                    status=OutcomeStatus.NOT_FOUND,
                    error_code=exc.code,
                    error_message=str(exc),
                    diagnostics=diagnostics,
                    duration_ms=round((time.monotonic() - t0) * 1000, 2),
                )
            except PayrollKernelError as exc:
                self._logger.error("employee_payroll_failed", extra={
                    "error_code": exc.code,
                }, exc_info=True)
                return EmployeeOutcome(
                    employee_id=employee_id,
                    status=OutcomeStatus.FAILED,
                    error_code=exc.code,
                    error_message=str(exc),
                    diagnostics=diagnostics,
                    duration_ms=round((time.monotonic() - t0) * 1000, 2),
                )
            except Exception as exc:
                self._logger.error("employee_payroll_failed", extra={
                    "error_code": "UNHANDLED_EXCEPTION",
                }, exc_info=True)
                return EmployeeOutcome(
                    employee_id=employee_id,
                    status=OutcomeStatus.FAILED,
                    error_code="UNHANDLED_EXCEPTION",
                    error_message=str(exc),
                    diagnostics=diagnostics,
                    duration_ms=round((time.monotonic() - t0) * 1000, 2),
                )

            return EmployeeOutcome(
                employee_id=employee_id,
                status=OutcomeStatus.PROCESSED,
                result=result,
                summary=summary,
                diagnostics=diagnostics,
                duration_ms=round((time.monotonic() - t0) * 1000, 2),
            )
