"""Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from hrms_engine.calculators import EmployeePayProfile, PayrollResult, WorkerType
from hrms_engine.services import CompanyVerification
from hrms_engine.verification import REQUIRED_DOCUMENTS


class ErrorResponse(BaseModel):
    """Error body returned by exception handlers."""

    detail: str
    code: str
    field: str | None = None


# ============================================================================
# Payroll schemas
# ============================================================================


class _EmployeeAdjustments(BaseModel):
    employee_id: str | None = None
    allowances: Decimal = Field(default=Decimal("0"), ge=0)
    deductions: Decimal = Field(default=Decimal("0"), ge=0)
    overtime: Decimal = Field(default=Decimal("0"), ge=0)
    bonus: Decimal = Field(default=Decimal("0"), ge=0)
    reimbursements: Decimal = Field(default=Decimal("0"), ge=0)


class SalariedEmployeeInput(_EmployeeAdjustments):
    worker_type: Literal["Salaried"]
    salary: Decimal = Field(ge=0)


class ContractorEmployeeInput(_EmployeeAdjustments):
    worker_type: Literal["Contractor"]
    salary: Decimal = Field(ge=0, description="Contract amount for the period")


class HourlyEmployeeInput(_EmployeeAdjustments):
    worker_type: Literal["Hourly"]
    hourly_rate: Decimal = Field(ge=0)
    hours_worked: Decimal = Field(ge=0)


EmployeeInput = Annotated[
    Union[SalariedEmployeeInput, HourlyEmployeeInput, ContractorEmployeeInput],
    Field(discriminator="worker_type"),
]


def to_pay_profile(employee: EmployeeInput) -> EmployeePayProfile:
    """Convert a validated request body into the calculation input."""
    adjustments = {
        "allowances": employee.allowances,
        "deductions": employee.deductions,
        "overtime": employee.overtime,
        "bonus": employee.bonus,
        "reimbursements": employee.reimbursements,
    }
    if isinstance(employee, HourlyEmployeeInput):
        return EmployeePayProfile(
            worker_type=WorkerType.HOURLY,
            hourly_rate=employee.hourly_rate,
            hours_worked=employee.hours_worked,
            employee_id=employee.employee_id,
            **adjustments,
        )
    if isinstance(employee, SalariedEmployeeInput):
        worker_type = WorkerType.SALARIED
    elif isinstance(employee, ContractorEmployeeInput):
        worker_type = WorkerType.CONTRACTOR
    else:
        raise TypeError(f"Unhandled employee input {type(employee).__name__}")
    return EmployeePayProfile(
        worker_type=worker_type,
        salary=employee.salary,
        employee_id=employee.employee_id,
        **adjustments,
    )


class PayrollConfigPayload(BaseModel):
    """Payroll configuration as submitted or stored."""

    rules: list[dict[str, Any]]
    daily_target_hours: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rules": self.rules,
            "daily_target_hours": (
                str(self.daily_target_hours) if self.daily_target_hours is not None else None
            ),
        }


class PayrollPreviewRequest(BaseModel):
    """Compute pay for one employee without touching stored data."""

    employee: EmployeeInput
    config: PayrollConfigPayload


class StatutoryLineResponse(BaseModel):
    code: str
    name: str
    amount: Decimal


class PayrollResultResponse(BaseModel):
    """Computed pay for one employee."""

    employee_id: str | None = None
    base_pay: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    is_negative: bool
    statutory_lines: list[StatutoryLineResponse]
    employer_contributions: list[StatutoryLineResponse]

    @classmethod
    def from_result(cls, result: PayrollResult) -> "PayrollResultResponse":
        return cls(
            employee_id=result.employee_id,
            base_pay=result.base_pay,
            gross_pay=result.gross_pay,
            total_deductions=result.total_deductions,
            net_pay=result.net_pay,
            is_negative=result.is_negative,
            statutory_lines=[
                StatutoryLineResponse(code=l.code, name=l.name, amount=l.amount)
                for l in result.statutory_lines
            ],
            employer_contributions=[
                StatutoryLineResponse(code=l.code, name=l.name, amount=l.amount)
                for l in result.employer_contributions
            ],
        )


class PayrollRunRequest(BaseModel):
    actor: str = Field(min_length=1)


class PayrollRunResponse(BaseModel):
    success: bool
    message: str
    payroll_run_id: UUID | None = None
    employee_count: int = 0
    error_count: int = 0
    flagged_count: int = 0
    total_gross: Decimal = Decimal("0")
    total_net: Decimal = Decimal("0")
    ach_file_name: str | None = None
    ach_file_content: str | None = None
    errors: dict[str, str] = Field(default_factory=dict)
    flagged: list[str] = Field(default_factory=list)


# ============================================================================
# Verification schemas
# ============================================================================


class DocumentUploadRequest(BaseModel):
    """Metadata for a file already written to the blob store."""

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    content_type: str
    size_bytes: int = Field(gt=0)


class DocumentApproveRequest(BaseModel):
    reviewer: str = Field(min_length=1)
    expected_version: int = Field(ge=1)


class DocumentRejectRequest(BaseModel):
    reviewer: str = Field(min_length=1)
    reason: str
    expected_version: int = Field(ge=1)


class VerificationDocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_type: str
    label: str
    weight: int
    status: str
    name: str | None = None
    url: str | None = None
    version: int | None = None
    uploaded_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    rejection_reason: str | None = None


class CompanyVerificationResponse(BaseModel):
    company_id: UUID
    progress: int
    status: str
    submitted_at: datetime | None = None
    documents: list[VerificationDocumentResponse]

    @classmethod
    def from_aggregate(cls, verification: CompanyVerification) -> "CompanyVerificationResponse":
        documents = []
        for doc_type, requirement in REQUIRED_DOCUMENTS.items():
            doc = verification.documents.get(doc_type)
            if doc is None:
                documents.append(
                    VerificationDocumentResponse(
                        document_type=doc_type.value,
                        label=requirement.label,
                        weight=requirement.weight,
                        status="Not Uploaded",
                    )
                )
                continue
            documents.append(
                VerificationDocumentResponse(
                    document_type=doc_type.value,
                    label=requirement.label,
                    weight=requirement.weight,
                    status=doc.status.value,
                    name=doc.name,
                    url=doc.url,
                    version=doc.version,
                    uploaded_at=doc.uploaded_at,
                    reviewed_at=doc.reviewed_at,
                    reviewed_by=doc.reviewed_by,
                    rejection_reason=doc.rejection_reason,
                )
            )
        return cls(
            company_id=verification.company_id,
            progress=verification.progress,
            status=verification.status.value,
            submitted_at=verification.submitted_at,
            documents=documents,
        )


# ============================================================================
# Job posting schemas
# ============================================================================


class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    department_name: str | None = None
    description: str | None = None
    location: str | None = None
    job_type: str | None = None
    closing_date: datetime | None = None


class JobCreateResponse(BaseModel):
    job_id: UUID
    job_postings_remaining: int


class SubscriptionActivateRequest(BaseModel):
    job_postings: int = Field(ge=0)
    plan: str | None = None


class QuotaResponse(BaseModel):
    job_postings_remaining: int
