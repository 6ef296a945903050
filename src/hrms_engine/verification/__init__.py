"""Company verification progress model."""

from hrms_engine.verification.checklist import (
    REQUIRED_DOCUMENTS,
    DocumentRequirement,
    VerificationDocumentType,
)
from hrms_engine.verification.model import (
    DocumentNotFoundError,
    InvalidUploadError,
    RejectionReasonRequiredError,
    StaleDocumentError,
    VerificationDocument,
    VerificationSummary,
    approve_document,
    recompute_verification,
    reject_document,
    upload_document,
    validate_upload,
)
from hrms_engine.verification.state_machine import (
    DocumentStateMachine,
    DocumentStatus,
    InvalidTransitionError,
    VerificationStatus,
)

__all__ = [
    "REQUIRED_DOCUMENTS",
    "DocumentNotFoundError",
    "DocumentRequirement",
    "DocumentStateMachine",
    "DocumentStatus",
    "InvalidTransitionError",
    "InvalidUploadError",
    "RejectionReasonRequiredError",
    "StaleDocumentError",
    "VerificationDocument",
    "VerificationDocumentType",
    "VerificationStatus",
    "VerificationSummary",
    "approve_document",
    "recompute_verification",
    "reject_document",
    "upload_document",
    "validate_upload",
]
