"""Payroll calculation engine."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from hrms_engine.calculators.statutory import StatutoryCalculator, round_to_cents
from hrms_engine.calculators.types import (
    ZERO,
    BatchCalculationResult,
    EmployeePayProfile,
    PayrollConfig,
    PayrollResult,
    PayrollValidationError,
    WorkerType,
    to_decimal,
)

logger = logging.getLogger(__name__)

ADJUSTMENT_FIELDS = ("allowances", "deductions", "overtime", "bonus", "reimbursements")


def compute_payroll(employee: EmployeePayProfile, config: PayrollConfig) -> PayrollResult:
    """Compute gross pay, statutory deductions and net pay for one employee.

    Calculation pipeline:
    1) Validate and convert every input field (fails before any arithmetic)
    2) Base pay from worker type (salary, or hourly rate x hours worked)
    3) Gross = base + overtime + bonus
    4) Statutory deductions from the configured rules
    5) Net = gross + allowances + reimbursements - deductions - statutory

    Pure: no I/O, and identical inputs give identical Decimal output.
    """
    worker_type = _resolve_worker_type(employee.worker_type)
    base_inputs = _validated_base_inputs(employee, worker_type)
    adjustments = {
        name: _non_negative(getattr(employee, name), name, required=False)
        for name in ADJUSTMENT_FIELDS
    }

    if worker_type == WorkerType.HOURLY:
        base_pay = base_inputs["hourly_rate"] * base_inputs["hours_worked"]
    else:
        base_pay = base_inputs["salary"]

    gross_pay = round_to_cents(base_pay + adjustments["overtime"] + adjustments["bonus"])

    statutory_lines, employer_lines = StatutoryCalculator(config).calculate(
        gross_pay, worker_type
    )
    total_deductions = sum((line.amount for line in statutory_lines), ZERO)

    net_pay = round_to_cents(
        gross_pay
        + adjustments["allowances"]
        + adjustments["reimbursements"]
        - adjustments["deductions"]
        - total_deductions
    )

    return PayrollResult(
        base_pay=round_to_cents(base_pay),
        gross_pay=gross_pay,
        total_deductions=round_to_cents(total_deductions),
        net_pay=net_pay,
        statutory_lines=tuple(statutory_lines),
        employer_contributions=tuple(employer_lines),
        employee_id=employee.employee_id,
    )


def _resolve_worker_type(value: WorkerType | str) -> WorkerType:
    try:
        return WorkerType(value)
    except ValueError:
        raise PayrollValidationError(
            "worker_type", f"unknown worker type {value!r}"
        ) from None


def _validated_base_inputs(
    employee: EmployeePayProfile, worker_type: WorkerType
) -> dict[str, Decimal]:
    if worker_type in (WorkerType.SALARIED, WorkerType.CONTRACTOR):
        return {"salary": _non_negative(employee.salary, "salary", required=True)}
    if worker_type == WorkerType.HOURLY:
        return {
            "hourly_rate": _non_negative(employee.hourly_rate, "hourly_rate", required=True),
            "hours_worked": _non_negative(employee.hours_worked, "hours_worked", required=True),
        }
    raise PayrollValidationError("worker_type", f"unhandled worker type {worker_type!r}")


def _non_negative(value: object, field_name: str, required: bool) -> Decimal:
    if value is None:
        if required:
            raise PayrollValidationError(field_name, "required for this worker type")
        return ZERO
    amount = to_decimal(value, field_name)
    if amount < 0:
        raise PayrollValidationError(field_name, f"must not be negative, got {amount}")
    return amount


class PayrollEngine:
    """Computes payroll for a batch of employees against one config.

    Each employee is independent; a validation error for one employee is
    recorded and the rest of the batch still runs.
    """

    def __init__(self, config: PayrollConfig):
        self.config = config

    def calculate(self, employee: EmployeePayProfile) -> PayrollResult:
        return compute_payroll(employee, self.config)

    def calculate_many(self, employees: Iterable[EmployeePayProfile]) -> BatchCalculationResult:
        batch = BatchCalculationResult()

        for index, employee in enumerate(employees):
            key = employee.employee_id or str(index)
            try:
                result = self.calculate(employee)
            except PayrollValidationError as e:
                logger.warning("Payroll validation failed for employee %s: %s", key, e)
                batch.errors[key] = e
                continue

            batch.results[key] = result
            batch.total_gross += result.gross_pay
            batch.total_net += result.net_pay

        return batch
