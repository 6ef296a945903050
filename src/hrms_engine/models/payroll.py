"""Payroll run and per-employee result models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_engine.models.base import Base, TimestampMixin


class PayrollRun(Base, TimestampMixin):
    """One executed payroll run for a company."""

    __tablename__ = "payroll_run"

    payroll_run_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    run_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    executed_by: Mapped[str] = mapped_column(String, nullable=False)
    engine_version: Mapped[str] = mapped_column(String, nullable=False)
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False)
    error_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    flagged_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_gross: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    total_net: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    ach_file_name: Mapped[str] = mapped_column(String, nullable=False)
    config_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    employees: Mapped[list[PayrollRunEmployee]] = relationship(
        back_populates="payroll_run", cascade="all, delete-orphan"
    )


class PayrollRunEmployee(Base):
    """Computed pay for one employee within a payroll run.

    ``flagged`` rows computed to a negative net and are held out of the
    payment file for review.
    """

    __tablename__ = "payroll_run_employee"

    payroll_run_employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_run_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_run.payroll_run_id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    employee_name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="included")
    base_pay: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    gross_pay: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    total_deductions: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    net_pay: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    statutory_lines: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('included', 'flagged', 'error')", name="payroll_run_employee_status_check"),
    )

    payroll_run: Mapped[PayrollRun] = relationship(back_populates="employees")
