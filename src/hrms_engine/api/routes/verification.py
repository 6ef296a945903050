"""Company verification API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path

from hrms_engine.api.dependencies import CompanyId, DbSession
from hrms_engine.api.schemas import (
    CompanyVerificationResponse,
    DocumentApproveRequest,
    DocumentRejectRequest,
    DocumentUploadRequest,
    ErrorResponse,
)
from hrms_engine.services import DocumentUpload, VerificationService
from hrms_engine.verification import VerificationDocumentType

router = APIRouter(prefix="/verification", tags=["verification"])

DocumentTypePath = Annotated[VerificationDocumentType, Path()]


@router.get(
    "",
    response_model=CompanyVerificationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_verification(db: DbSession, company_id: CompanyId) -> CompanyVerificationResponse:
    verification = await VerificationService(db).get_verification(company_id)
    return CompanyVerificationResponse.from_aggregate(verification)


@router.post(
    "/documents/{document_type}",
    response_model=CompanyVerificationResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def upload_document(
    db: DbSession,
    company_id: CompanyId,
    document_type: DocumentTypePath,
    payload: DocumentUploadRequest,
) -> CompanyVerificationResponse:
    """Record an uploaded document as Pending, replacing any earlier upload."""
    verification = await VerificationService(db).upload_document(
        company_id,
        document_type,
        DocumentUpload(
            name=payload.name,
            url=payload.url,
            content_type=payload.content_type,
            size_bytes=payload.size_bytes,
        ),
    )
    await db.commit()
    return CompanyVerificationResponse.from_aggregate(verification)


@router.post(
    "/documents/{document_type}/approve",
    response_model=CompanyVerificationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_document(
    db: DbSession,
    company_id: CompanyId,
    document_type: DocumentTypePath,
    payload: DocumentApproveRequest,
) -> CompanyVerificationResponse:
    verification = await VerificationService(db).approve_document(
        company_id,
        document_type,
        reviewer=payload.reviewer,
        expected_version=payload.expected_version,
    )
    await db.commit()
    return CompanyVerificationResponse.from_aggregate(verification)


@router.post(
    "/documents/{document_type}/reject",
    response_model=CompanyVerificationResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def reject_document(
    db: DbSession,
    company_id: CompanyId,
    document_type: DocumentTypePath,
    payload: DocumentRejectRequest,
) -> CompanyVerificationResponse:
    verification = await VerificationService(db).reject_document(
        company_id,
        document_type,
        reviewer=payload.reviewer,
        reason=payload.reason,
        expected_version=payload.expected_version,
    )
    await db.commit()
    return CompanyVerificationResponse.from_aggregate(verification)
