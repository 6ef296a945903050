"""Payroll configuration storage and payroll runs."""

from __future__ import annotations

import base64
import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_engine.calculators import PayrollConfig, PayrollEngine, PayrollResult
from hrms_engine.config import get_settings
from hrms_engine.models import Company, Employee, PayrollRun, PayrollRunEmployee
from hrms_engine.services.quota_service import CompanyNotFoundError

logger = logging.getLogger(__name__)

ACH_HEADER = ["EmployeeName", "BankName", "AccountNumber", "BranchCode", "Amount"]


class PayrollConfigNotFoundError(Exception):
    """Raised when a company has no payroll configuration."""

    def __init__(self, company_id: UUID):
        self.company_id = company_id
        super().__init__(f"Payroll configuration not found for company {company_id}")


@dataclass
class PayrollRunOutcome:
    """Result of a payroll run request."""

    success: bool
    message: str
    payroll_run_id: UUID | None = None
    employee_count: int = 0
    error_count: int = 0
    flagged_count: int = 0
    total_gross: Decimal = Decimal("0")
    total_net: Decimal = Decimal("0")
    ach_file_name: str | None = None
    ach_file_content: str | None = None  # base64 CSV
    results: dict[str, PayrollResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    flagged: list[str] = field(default_factory=list)  # negative net, not paid


class PayrollService:
    """Stores payroll configuration and executes payroll runs.

    A run computes every active employee with bank details against the
    company's stored configuration, records one row per employee (included,
    flagged or error), and builds a bank payment CSV for the included
    employees. A negative net pay is flagged for review and never paid.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings()

    async def get_config(self, company_id: UUID) -> PayrollConfig:
        company = await self._get_company(company_id)
        if company.payroll_config is None:
            raise PayrollConfigNotFoundError(company_id)
        return PayrollConfig.from_payload(company.payroll_config)

    async def save_config(self, company_id: UUID, config: PayrollConfig) -> PayrollConfig:
        company = await self._get_company(company_id)
        company.payroll_config = config.to_payload()
        await self.session.flush()
        logger.info(
            "Payroll configuration updated for company %s (%d rules)",
            company_id,
            len(config.rules),
        )
        return config

    async def run_payroll(self, company_id: UUID, actor: str) -> PayrollRunOutcome:
        config = await self.get_config(company_id)

        employees = await self._get_active_employees(company_id)
        if not employees:
            return PayrollRunOutcome(
                success=False, message="No active employees found to process payroll for."
            )

        payable: list[Employee] = []
        for employee in employees:
            if not employee.has_bank_details:
                logger.warning(
                    "Skipping employee %s (%s): missing bank details",
                    employee.name,
                    employee.employee_id,
                )
                continue
            payable.append(employee)

        if not payable:
            return PayrollRunOutcome(
                success=False, message="No employees with complete bank details found."
            )

        batch = PayrollEngine(config).calculate_many(e.to_pay_profile() for e in payable)
        flagged = [key for key, result in batch.results.items() if result.is_negative]

        run_date = datetime.now(timezone.utc)
        ach_file_name = f"ACH-PAYROLL-{run_date:%Y-%m-%d}.csv"
        run = PayrollRun(
            company_id=company_id,
            run_date=run_date,
            executed_by=actor,
            engine_version=self.settings.engine_version,
            employee_count=len(batch.results),
            error_count=batch.error_count,
            flagged_count=len(flagged),
            total_gross=batch.total_gross,
            total_net=batch.total_net,
            ach_file_name=ach_file_name,
            config_snapshot=config.to_payload(),
        )

        for employee in payable:
            key = str(employee.employee_id)
            result = batch.results.get(key)
            if result is not None:
                run.employees.append(_computed_row(employee, result))
            else:
                run.employees.append(
                    PayrollRunEmployee(
                        employee_id=employee.employee_id,
                        employee_name=employee.name,
                        status="error",
                        error_message=str(batch.errors[key]),
                    )
                )

        self.session.add(run)
        await self.session.flush()

        paid = [e for e in payable if str(e.employee_id) in batch.results]
        csv_content = build_ach_csv(paid, batch.results)

        for key in flagged:
            logger.warning(
                "Employee %s held from payment: negative net pay %s",
                key,
                batch.results[key].net_pay,
            )
        logger.info(
            "Payroll run %s by %s: %d employees, %d errors, %d flagged, total net %s",
            run.payroll_run_id,
            actor,
            len(batch.results),
            batch.error_count,
            len(flagged),
            batch.total_net,
        )

        return PayrollRunOutcome(
            success=True,
            message="Payroll processed successfully.",
            payroll_run_id=run.payroll_run_id,
            employee_count=len(batch.results),
            error_count=batch.error_count,
            flagged_count=len(flagged),
            total_gross=batch.total_gross,
            total_net=batch.total_net,
            ach_file_name=ach_file_name,
            ach_file_content=base64.b64encode(csv_content.encode()).decode(),
            results=batch.results,
            errors={k: str(v) for k, v in batch.errors.items()},
            flagged=flagged,
        )

    async def _get_company(self, company_id: UUID) -> Company:
        company = await self.session.get(Company, company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    async def _get_active_employees(self, company_id: UUID) -> list[Employee]:
        result = await self.session.execute(
            select(Employee)
            .where(Employee.company_id == company_id, Employee.status == "Active")
            .order_by(Employee.name)
        )
        return list(result.scalars().all())


def _computed_row(employee: Employee, result: PayrollResult) -> PayrollRunEmployee:
    return PayrollRunEmployee(
        employee_id=employee.employee_id,
        employee_name=employee.name,
        status="flagged" if result.is_negative else "included",
        base_pay=result.base_pay,
        gross_pay=result.gross_pay,
        total_deductions=result.total_deductions,
        net_pay=result.net_pay,
        statutory_lines={
            "employee": [
                {"code": l.code, "amount": str(l.amount)} for l in result.statutory_lines
            ],
            "employer": [
                {"code": l.code, "amount": str(l.amount)} for l in result.employer_contributions
            ],
        },
    )


def build_ach_csv(employees: list[Employee], results: dict[str, PayrollResult]) -> str:
    """Build the bank payment CSV (net pay at 2 decimal places).

    Results with a negative net are skipped.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(ACH_HEADER)
    for employee in employees:
        result = results[str(employee.employee_id)]
        if result.is_negative:
            continue
        writer.writerow(
            [
                employee.name,
                employee.bank_name,
                employee.account_number,
                employee.branch_code or "",
                f"{result.net_pay:.2f}",
            ]
        )
    return buffer.getvalue()
