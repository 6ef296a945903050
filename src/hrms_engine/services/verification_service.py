"""Stored company verification: document uploads, reviews and the aggregate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms_engine.config import get_settings
from hrms_engine.models import Company, VerificationDocumentRecord
from hrms_engine.services.quota_service import CompanyNotFoundError
from hrms_engine.verification import (
    VerificationDocument,
    VerificationDocumentType,
    VerificationStatus,
    approve_document,
    recompute_verification,
    reject_document,
    upload_document,
    validate_upload,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentUpload:
    """Metadata of a file already stored in the blob store."""

    name: str
    url: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True)
class CompanyVerification:
    """Aggregate verification state of one company."""

    company_id: UUID
    documents: dict[VerificationDocumentType, VerificationDocument]
    progress: int
    status: VerificationStatus
    submitted_at: datetime | None = None


class VerificationService:
    """Applies verification transitions to stored records.

    Every operation locks the company row, loads all of its documents,
    applies one pure transition, recomputes progress and status from the
    whole document map, and writes both back. The aggregate is never
    patched incrementally.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.max_upload_bytes = get_settings().verification_max_upload_bytes

    async def get_verification(self, company_id: UUID) -> CompanyVerification:
        company = await self._load_company(company_id, lock=False)
        records = await self._load_records(company_id)
        documents = {doc_type: record.to_domain() for doc_type, record in records.items()}
        return self._to_aggregate(company, documents)

    async def upload_document(
        self,
        company_id: UUID,
        document_type: VerificationDocumentType,
        upload: DocumentUpload,
        uploaded_at: datetime | None = None,
    ) -> CompanyVerification:
        """Record an upload as a new Pending document for its type."""
        validate_upload(
            upload.name,
            upload.url,
            upload.content_type,
            upload.size_bytes,
            max_bytes=self.max_upload_bytes,
        )
        company, records, documents = await self._load_for_update(company_id)

        updated = upload_document(
            documents,
            document_type,
            name=upload.name,
            url=upload.url,
            uploaded_at=uploaded_at or _now(),
        )
        return await self._save(company, records, updated, document_type, "uploaded")

    async def approve_document(
        self,
        company_id: UUID,
        document_type: VerificationDocumentType,
        reviewer: str,
        expected_version: int | None = None,
    ) -> CompanyVerification:
        company, records, documents = await self._load_for_update(company_id)

        updated = approve_document(
            documents,
            document_type,
            reviewer=reviewer,
            reviewed_at=_now(),
            expected_version=expected_version,
        )
        return await self._save(company, records, updated, document_type, "approved")

    async def reject_document(
        self,
        company_id: UUID,
        document_type: VerificationDocumentType,
        reviewer: str,
        reason: str,
        expected_version: int | None = None,
    ) -> CompanyVerification:
        company, records, documents = await self._load_for_update(company_id)

        updated = reject_document(
            documents,
            document_type,
            reviewer=reviewer,
            reason=reason,
            reviewed_at=_now(),
            expected_version=expected_version,
        )
        return await self._save(company, records, updated, document_type, "rejected")

    async def _load_for_update(
        self, company_id: UUID
    ) -> tuple[
        Company,
        dict[VerificationDocumentType, VerificationDocumentRecord],
        dict[VerificationDocumentType, VerificationDocument],
    ]:
        company = await self._load_company(company_id, lock=True)
        records = await self._load_records(company_id)
        documents = {doc_type: record.to_domain() for doc_type, record in records.items()}
        return company, records, documents

    async def _save(
        self,
        company: Company,
        records: dict[VerificationDocumentType, VerificationDocumentRecord],
        documents: dict[VerificationDocumentType, VerificationDocument],
        changed: VerificationDocumentType,
        action: str,
    ) -> CompanyVerification:
        record = records.get(changed)
        if record is None:
            record = VerificationDocumentRecord(company_id=company.company_id)
            self.session.add(record)
        record.apply(documents[changed])

        summary = recompute_verification(documents)
        previous_status = company.verification_status
        company.verification_progress = summary.progress
        company.verification_status = summary.status.value
        if company.verification_submitted_at is None and summary.status in (
            VerificationStatus.PENDING_REVIEW,
            VerificationStatus.VERIFIED,
        ):
            company.verification_submitted_at = _now()

        await self.session.flush()

        logger.info(
            "Verification document %s %s for company %s: %s -> %s (%d%%)",
            changed.value,
            action,
            company.company_id,
            previous_status,
            summary.status.value,
            summary.progress,
        )
        return self._to_aggregate(company, documents)

    def _to_aggregate(
        self,
        company: Company,
        documents: dict[VerificationDocumentType, VerificationDocument],
    ) -> CompanyVerification:
        summary = recompute_verification(documents)
        return CompanyVerification(
            company_id=company.company_id,
            documents=documents,
            progress=summary.progress,
            status=summary.status,
            submitted_at=company.verification_submitted_at,
        )

    async def _load_company(self, company_id: UUID, lock: bool) -> Company:
        query = select(Company).where(Company.company_id == company_id)
        if lock:
            query = query.with_for_update()
        company = (await self.session.execute(query)).scalar_one_or_none()
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company

    async def _load_records(
        self, company_id: UUID
    ) -> dict[VerificationDocumentType, VerificationDocumentRecord]:
        result = await self.session.execute(
            select(VerificationDocumentRecord).where(
                VerificationDocumentRecord.company_id == company_id
            )
        )
        return {
            VerificationDocumentType(record.document_type): record
            for record in result.scalars().all()
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)
