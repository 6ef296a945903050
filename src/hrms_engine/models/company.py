"""Company (tenant), subscription quota and job vacancy models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_engine.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hrms_engine.models.employee import Employee
    from hrms_engine.models.verification import VerificationDocumentRecord


class Company(Base, TimestampMixin):
    """Multi-tenant container: one company account."""

    __tablename__ = "company"

    company_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    # Subscription
    subscription_plan: Mapped[str | None] = mapped_column(String, nullable=True)
    subscription_status: Mapped[str] = mapped_column(String, nullable=False, default="inactive")
    job_postings_remaining: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )

    # Payroll configuration payload (see PayrollConfig.from_payload)
    payroll_config: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Verification aggregate, derived from verification_document rows
    verification_status: Mapped[str] = mapped_column(
        String, nullable=False, default="Not Started"
    )
    verification_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verification_submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint("status IN ('active', 'suspended', 'closed')", name="company_status_check"),
        CheckConstraint(
            "job_postings_remaining IS NULL OR job_postings_remaining >= 0",
            name="company_job_postings_non_negative",
        ),
        CheckConstraint(
            "verification_progress >= 0 AND verification_progress <= 100",
            name="company_verification_progress_range",
        ),
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="company")
    verification_documents: Mapped[list[VerificationDocumentRecord]] = relationship(
        back_populates="company"
    )
    job_vacancies: Mapped[list[JobVacancy]] = relationship(back_populates="company")


class JobVacancy(Base, TimestampMixin):
    """A posted job. Created only through the job-posting quota transaction."""

    __tablename__ = "job_vacancy"

    job_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    department_name: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    job_type: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Open")
    closing_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('Open', 'Closed')", name="job_vacancy_status_check"),
    )

    company: Mapped[Company] = relationship(back_populates="job_vacancies")
