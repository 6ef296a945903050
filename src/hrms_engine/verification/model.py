"""Company verification progress model.

Every operation here is pure: it takes the current document map and
returns a new one. The aggregate progress and status are always derived
from scratch by :func:`recompute_verification`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime

from hrms_engine.verification.checklist import REQUIRED_DOCUMENTS, VerificationDocumentType
from hrms_engine.verification.state_machine import (
    DocumentStateMachine,
    DocumentStatus,
    VerificationStatus,
)

ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", "image/jpeg", "image/png"})
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class DocumentNotFoundError(Exception):
    """Raised when a review targets a document type with no upload."""

    def __init__(self, document_type: VerificationDocumentType):
        self.document_type = document_type
        super().__init__(f"No document uploaded for '{document_type.value}'")


class StaleDocumentError(Exception):
    """Raised when a review was made against a superseded upload."""

    def __init__(
        self,
        document_type: VerificationDocumentType,
        expected_version: int,
        current_version: int,
    ):
        self.document_type = document_type
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Document '{document_type.value}' is at version {current_version}, "
            f"review was for version {expected_version}"
        )


class RejectionReasonRequiredError(ValueError):
    """Raised when a rejection is submitted without a reason."""

    def __init__(self) -> None:
        super().__init__("A non-empty rejection reason is required")


class InvalidUploadError(ValueError):
    """Raised when upload metadata fails validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid upload field '{field}': {message}")


@dataclass(frozen=True)
class VerificationDocument:
    """The current upload for one document type."""

    document_type: VerificationDocumentType
    status: DocumentStatus
    name: str
    url: str
    uploaded_at: datetime
    version: int = 1
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    rejection_reason: str | None = None


@dataclass(frozen=True)
class VerificationSummary:
    progress: int
    status: VerificationStatus


DocumentMap = Mapping[VerificationDocumentType, VerificationDocument]


def recompute_verification(documents: DocumentMap) -> VerificationSummary:
    """Derive progress and status from the current document map.

    - progress: sum of weights of Approved documents
    - Not Started: no documents at all
    - Verified: every required type Approved (progress == 100)
    - Pending Review: every required type has a Pending or Approved document
    - In Progress: anything else, including any Rejected required document
    """
    progress = sum(
        REQUIRED_DOCUMENTS[doc_type].weight
        for doc_type, doc in documents.items()
        if doc.status == DocumentStatus.APPROVED
    )

    if not documents:
        status = VerificationStatus.NOT_STARTED
    elif all(
        _status_of(documents, t) == DocumentStatus.APPROVED for t in REQUIRED_DOCUMENTS
    ):
        status = VerificationStatus.VERIFIED
    elif all(
        _status_of(documents, t) is not None
        and DocumentStateMachine.counts_as_submitted(_status_of(documents, t))
        for t in REQUIRED_DOCUMENTS
    ):
        status = VerificationStatus.PENDING_REVIEW
    else:
        status = VerificationStatus.IN_PROGRESS

    return VerificationSummary(progress=progress, status=status)


def _status_of(
    documents: DocumentMap, document_type: VerificationDocumentType
) -> DocumentStatus | None:
    doc = documents.get(document_type)
    return doc.status if doc is not None else None


def validate_upload(
    name: str,
    url: str,
    content_type: str,
    size_bytes: int,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> None:
    """Check upload metadata before it is recorded."""
    if not name or not name.strip():
        raise InvalidUploadError("name", "file name is required")
    if not url or not url.strip():
        raise InvalidUploadError("url", "stored file URL is required")
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidUploadError(
            "content_type", f"'{content_type}' is not one of PDF, JPEG or PNG"
        )
    if size_bytes <= 0:
        raise InvalidUploadError("size_bytes", "file is empty")
    if size_bytes > max_bytes:
        raise InvalidUploadError(
            "size_bytes", f"{size_bytes} bytes exceeds the {max_bytes} byte limit"
        )


def upload_document(
    documents: DocumentMap,
    document_type: VerificationDocumentType,
    name: str,
    url: str,
    uploaded_at: datetime,
) -> dict[VerificationDocumentType, VerificationDocument]:
    """Record a new upload, replacing any existing document of that type.

    The replacement starts Pending with a bumped version and carries no
    review fields, so a rejected document's reason ends here.
    """
    previous = documents.get(document_type)
    updated = dict(documents)
    updated[document_type] = VerificationDocument(
        document_type=document_type,
        status=DocumentStatus.PENDING,
        name=name,
        url=url,
        uploaded_at=uploaded_at,
        version=previous.version + 1 if previous is not None else 1,
    )
    return updated


def approve_document(
    documents: DocumentMap,
    document_type: VerificationDocumentType,
    reviewer: str,
    reviewed_at: datetime,
    expected_version: int | None = None,
) -> dict[VerificationDocumentType, VerificationDocument]:
    """Approve the current upload of ``document_type``."""
    doc = _reviewable(documents, document_type, expected_version, DocumentStatus.APPROVED)
    updated = dict(documents)
    updated[document_type] = replace(
        doc,
        status=DocumentStatus.APPROVED,
        reviewed_at=reviewed_at,
        reviewed_by=reviewer,
        rejection_reason=None,
    )
    return updated


def reject_document(
    documents: DocumentMap,
    document_type: VerificationDocumentType,
    reviewer: str,
    reason: str,
    reviewed_at: datetime,
    expected_version: int | None = None,
) -> dict[VerificationDocumentType, VerificationDocument]:
    """Reject the current upload of ``document_type`` with a reason."""
    if reason is None or not reason.strip():
        raise RejectionReasonRequiredError()

    doc = _reviewable(documents, document_type, expected_version, DocumentStatus.REJECTED)
    updated = dict(documents)
    updated[document_type] = replace(
        doc,
        status=DocumentStatus.REJECTED,
        reviewed_at=reviewed_at,
        reviewed_by=reviewer,
        rejection_reason=reason.strip(),
    )
    return updated


def _reviewable(
    documents: DocumentMap,
    document_type: VerificationDocumentType,
    expected_version: int | None,
    to_status: DocumentStatus,
) -> VerificationDocument:
    doc = documents.get(document_type)
    if doc is None:
        raise DocumentNotFoundError(document_type)
    if expected_version is not None and expected_version != doc.version:
        raise StaleDocumentError(document_type, expected_version, doc.version)
    DocumentStateMachine.validate_transition(doc.status, to_status)
    return doc
