"""Company verification document model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrms_engine.models.base import Base
from hrms_engine.verification import (
    DocumentStatus,
    VerificationDocument,
    VerificationDocumentType,
)

if TYPE_CHECKING:
    from hrms_engine.models.company import Company


class VerificationDocumentRecord(Base):
    """The live upload for one (company, document type) pair."""

    __tablename__ = "verification_document"

    verification_document_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("company.company_id", ondelete="CASCADE"),
        nullable=False,
    )
    document_type: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("company_id", "document_type", name="verification_document_type_unique"),
        CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected')",
            name="verification_document_status_check",
        ),
    )

    company: Mapped[Company] = relationship(back_populates="verification_documents")

    def to_domain(self) -> VerificationDocument:
        return VerificationDocument(
            document_type=VerificationDocumentType(self.document_type),
            status=DocumentStatus(self.status),
            name=self.name,
            url=self.url,
            uploaded_at=self.uploaded_at,
            version=self.version,
            reviewed_at=self.reviewed_at,
            reviewed_by=self.reviewed_by,
            rejection_reason=self.rejection_reason,
        )

    def apply(self, document: VerificationDocument) -> None:
        """Copy a domain document's state onto this row."""
        self.document_type = document.document_type.value
        self.status = document.status.value
        self.name = document.name
        self.url = document.url
        self.uploaded_at = document.uploaded_at
        self.version = document.version
        self.reviewed_at = document.reviewed_at
        self.reviewed_by = document.reviewed_by
        self.rejection_reason = document.rejection_reason
