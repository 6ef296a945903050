"""ORM models."""

from hrms_engine.models.base import Base, TimestampMixin
from hrms_engine.models.company import Company, JobVacancy
from hrms_engine.models.employee import Employee
from hrms_engine.models.payroll import PayrollRun, PayrollRunEmployee
from hrms_engine.models.verification import VerificationDocumentRecord

__all__ = [
    "Base",
    "Company",
    "Employee",
    "JobVacancy",
    "PayrollRun",
    "PayrollRunEmployee",
    "TimestampMixin",
    "VerificationDocumentRecord",
]
