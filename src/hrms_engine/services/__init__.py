"""HRMS engine services."""

from hrms_engine.services.payroll_service import PayrollConfigNotFoundError, PayrollService
from hrms_engine.services.quota_service import (
    CompanyNotFoundError,
    JobDraft,
    JobPostingQuotaService,
    QuotaOutcome,
    QuotaStoreUnavailableError,
)
from hrms_engine.services.verification_service import (
    CompanyVerification,
    DocumentUpload,
    VerificationService,
)

__all__ = [
    "CompanyNotFoundError",
    "CompanyVerification",
    "DocumentUpload",
    "JobDraft",
    "JobPostingQuotaService",
    "PayrollConfigNotFoundError",
    "PayrollService",
    "QuotaOutcome",
    "QuotaStoreUnavailableError",
    "VerificationService",
]
