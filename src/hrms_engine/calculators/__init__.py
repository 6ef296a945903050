"""Payroll calculation engine."""

from hrms_engine.calculators.engine import PayrollEngine, compute_payroll
from hrms_engine.calculators.statutory import StatutoryCalculator, round_to_cents
from hrms_engine.calculators.types import (
    ConfigurationError,
    EmployeePayProfile,
    PayrollConfig,
    PayrollResult,
    PayrollValidationError,
    StatutoryRule,
    TaxBracket,
    WorkerType,
)

__all__ = [
    "compute_payroll",
    "ConfigurationError",
    "EmployeePayProfile",
    "PayrollConfig",
    "PayrollEngine",
    "PayrollResult",
    "PayrollValidationError",
    "StatutoryCalculator",
    "StatutoryRule",
    "TaxBracket",
    "WorkerType",
    "round_to_cents",
]
