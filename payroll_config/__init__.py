"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``PayrollConfiguration``;
    ``payroll_config.bridges`` turns it into engine objects.

Architecture position:
    Configuration -- YAML-driven statutory tables and policy.  Sits above
    ``payroll_kernel`` / ``payroll_engines`` and below
    ``payroll_services``.  Engines MUST NEVER import from this package.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Load-time validation: every bracket table, the schedule and the
      holiday calendar are built once before the configuration is
      returned.

Failure modes:
    - ``ConfigurationNotFoundError`` -- the file does not exist.
    - ``InvalidBracketTableError`` -- a table is out of order or negative.
    - ``ConfigurationError`` -- any other structural problem.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, so each payroll run can be tied to the exact tables used.
"""

from __future__ import annotations

import logging
from pathlib import Path

from payroll_config.bridges import validate_configuration
from payroll_config.loader import load_configuration
from payroll_config.schema import PayrollConfiguration

_logger = logging.getLogger("payroll_kernel.config")

# Packaged configuration sets
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "ph_semimonthly.yaml"


def get_active_config(
    config_path: Path | str | None = None,
    logger: logging.Logger | None = None,
) -> PayrollConfiguration:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a configuration YAML file.
            Defaults to the packaged ``sets/ph_semimonthly.yaml``.
        logger: Logger for the trace record; defaults to
            ``payroll_kernel.config``.

    Returns:
        A validated, frozen PayrollConfiguration.
    """
    log = logger or _logger
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    config = load_configuration(path)
    validate_configuration(config)

    log.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "jurisdiction": config.jurisdiction,
            "source_path": str(path),
            "sss_step_count": len(config.social_insurance.steps),
            "tax_bracket_count": len(config.income_tax),
            "holiday_count": len(config.holidays),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "PayrollConfiguration",
    "get_active_config",
]
