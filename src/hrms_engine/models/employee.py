"""Employee model."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_engine.calculators.types import EmployeePayProfile
from hrms_engine.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hrms_engine.models.company import Company


class Employee(Base, TimestampMixin):
    """Employee record with the fields payroll reads."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Active")

    # Pay
    worker_type: Mapped[str] = mapped_column(String, nullable=False)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(14, 4), nullable=True)
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    allowances: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    overtime: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    bonus: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    reimbursements: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)

    # Bank details for the payment file
    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    account_number: Mapped[str | None] = mapped_column(String, nullable=True)
    branch_code: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "worker_type IN ('Salaried', 'Hourly', 'Contractor')",
            name="employee_worker_type_check",
        ),
        CheckConstraint("status IN ('Active', 'Inactive')", name="employee_status_check"),
    )

    company: Mapped[Company] = relationship(back_populates="employees")

    @property
    def has_bank_details(self) -> bool:
        return bool(self.bank_name and self.account_number)

    def to_pay_profile(self) -> EmployeePayProfile:
        """Build the calculation input for this employee."""
        return EmployeePayProfile(
            worker_type=self.worker_type,
            salary=self.salary,
            hourly_rate=self.hourly_rate,
            hours_worked=self.hours_worked,
            allowances=self.allowances,
            deductions=self.deductions,
            overtime=self.overtime,
            bonus=self.bonus,
            reimbursements=self.reimbursements,
            employee_id=str(self.employee_id),
        )
