"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Load a payroll configuration YAML file and parse it into typed
``payroll_config.schema`` dataclasses.  The single runtime entry point is
``payroll_config.get_active_config()``; services never call the loader
directly.

Architecture position
---------------------
**Config layer** -- the only module in the project that reads files.

Invariants enforced
-------------------
* Amounts and rates become ``Decimal`` via ``str`` so YAML floats never
  leak binary rounding into money.
* Clock times must be text; an integer (YAML's reading of an unquoted
  ``17:00``) is rejected.
* ``compute_checksum`` is a deterministic SHA-256 of the source data.

Failure modes
-------------
* Missing file  -> ``ConfigurationNotFoundError``.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Bad dates, decimals or times  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    HealthInsuranceDef,
    HolidayDef,
    HolidayRatesDef,
    HousingFundDef,
    PayrollConfiguration,
    PayrollPolicyDef,
    StepTableDef,
    TaxBracketDef,
    WorkScheduleDef,
)
from payroll_kernel.exceptions import ConfigurationNotFoundError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigurationNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationNotFoundError(str(path))
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Cannot parse decimal from {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot parse decimal from {value!r}") from exc


def parse_optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else parse_decimal(value)


_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})


def parse_bool(value: Any) -> bool:
    """Read a YAML flag; quoted "true"/"false" are accepted, anything else raises."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"Cannot parse boolean from {value!r}")


def parse_clock(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(
            f"Clock time must be quoted text like \"17:00\", got {value!r}"
        )
    return value.strip()


def parse_work_schedule(data: dict[str, Any]) -> WorkScheduleDef:
    defaults = WorkScheduleDef()
    return WorkScheduleDef(
        standard_start=parse_clock(data.get("standard_start", defaults.standard_start)),
        grace_end=parse_clock(data.get("grace_end", defaults.grace_end)),
        standard_end=parse_clock(data.get("standard_end", defaults.standard_end)),
        regular_hours=parse_decimal(data.get("regular_hours", defaults.regular_hours)),
        lunch_hours=parse_decimal(data.get("lunch_hours", defaults.lunch_hours)),
        lunch_threshold_hours=parse_decimal(
            data.get("lunch_threshold_hours", defaults.lunch_threshold_hours)
        ),
        deduct_lunch=parse_bool(data.get("deduct_lunch", defaults.deduct_lunch)),
        week_start=int(data.get("week_start", defaults.week_start)),
    )


def parse_policy(data: dict[str, Any]) -> PayrollPolicyDef:
    defaults = PayrollPolicyDef()
    return PayrollPolicyDef(
        overtime_premium=parse_decimal(
            data.get("overtime_premium", defaults.overtime_premium)
        ),
        regular_hours_per_day=parse_decimal(
            data.get("regular_hours_per_day", defaults.regular_hours_per_day)
        ),
        working_days_per_month=int(
            data.get("working_days_per_month", defaults.working_days_per_month)
        ),
    )


def parse_step_table(data: dict[str, Any]) -> StepTableDef:
    return StepTableDef(
        name=data.get("name", "step_table"),
        steps=tuple(
            (parse_decimal(s["threshold"]), parse_decimal(s["amount"]))
            for s in data["steps"]
        ),
    )


def parse_health_insurance(data: dict[str, Any]) -> HealthInsuranceDef:
    return HealthInsuranceDef(
        rate=parse_decimal(data["rate"]),
        monthly_cap=parse_decimal(data["monthly_cap"]),
    )


def parse_housing_fund(data: dict[str, Any]) -> HousingFundDef:
    return HousingFundDef(
        minimum_compensation=parse_decimal(data["minimum_compensation"]),
        tiers=tuple(
            (parse_optional_decimal(t.get("upper_bound")), parse_decimal(t["rate"]))
            for t in data["tiers"]
        ),
        floor=parse_decimal(data["floor"]),
        ceiling=parse_decimal(data["ceiling"]),
    )


def parse_tax_bracket(data: dict[str, Any]) -> TaxBracketDef:
    return TaxBracketDef(
        upper_bound=parse_optional_decimal(data.get("upper_bound")),
        base_tax=parse_decimal(data["base_tax"]),
        rate=parse_decimal(data["rate"]),
        excess_over=parse_decimal(data["excess_over"]),
    )


def parse_holiday(data: dict[str, Any]) -> HolidayDef:
    return HolidayDef(
        name=data["name"],
        date=parse_date(data["date"]),
        kind=str(data["kind"]).upper(),
    )


def parse_holiday_rates(data: dict[str, Any]) -> HolidayRatesDef:
    defaults = HolidayRatesDef()
    return HolidayRatesDef(**{
        name: parse_decimal(data.get(name, getattr(defaults, name)))
        for name in HolidayRatesDef.__dataclass_fields__
    })


def parse_configuration(data: dict[str, Any]) -> PayrollConfiguration:
    """Parse a full configuration document."""
    schedule = data.get("deduction_schedule") or {}
    return PayrollConfiguration(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        jurisdiction=data.get("jurisdiction", ""),
        currency=data.get("currency", ""),
        effective_from=parse_date(data["effective_from"]),
        effective_to=(
            parse_date(data["effective_to"]) if data.get("effective_to") else None
        ),
        work_schedule=parse_work_schedule(data.get("work_schedule") or {}),
        policy=parse_policy(data.get("policy") or {}),
        social_insurance=parse_step_table(data["social_insurance"]),
        health_insurance=parse_health_insurance(data["health_insurance"]),
        housing_fund=parse_housing_fund(data["housing_fund"]),
        income_tax=tuple(parse_tax_bracket(b) for b in data["income_tax"]),
        deduction_schedule=tuple(
            (code, tuple(periods)) for code, periods in schedule.items()
        ),
        holidays=tuple(parse_holiday(h) for h in data.get("holidays") or ()),
        holiday_rates=parse_holiday_rates(data.get("holiday_rates") or {}),
        checksum=compute_checksum(data),
    )


def load_configuration(path: Path) -> PayrollConfiguration:
    return parse_configuration(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
