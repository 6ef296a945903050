"""Required company verification documents and their weights."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class VerificationDocumentType(str, Enum):
    """Document kinds a company must submit to be verified."""

    CERTIFICATE_OF_INCORPORATION = "certificate_of_incorporation"
    TAX_CLEARANCE = "tax_clearance"
    BUSINESS_LICENSE = "business_license"
    DIRECTOR_ID = "director_id"
    PROOF_OF_ADDRESS = "proof_of_address"
    BANK_CONFIRMATION = "bank_confirmation"

    @property
    def weight(self) -> int:
        return REQUIRED_DOCUMENTS[self].weight

    @property
    def label(self) -> str:
        return REQUIRED_DOCUMENTS[self].label


@dataclass(frozen=True)
class DocumentRequirement:
    """Static checklist entry. ``weight`` is in percentage points."""

    weight: int
    label: str
    description: str


# Weights sum to 100.
REQUIRED_DOCUMENTS: dict[VerificationDocumentType, DocumentRequirement] = {
    VerificationDocumentType.CERTIFICATE_OF_INCORPORATION: DocumentRequirement(
        weight=25,
        label="Certificate of Incorporation",
        description="Registration certificate issued by the companies registry.",
    ),
    VerificationDocumentType.TAX_CLEARANCE: DocumentRequirement(
        weight=20,
        label="Tax Clearance Certificate",
        description="Current tax clearance or taxpayer registration certificate.",
    ),
    VerificationDocumentType.BUSINESS_LICENSE: DocumentRequirement(
        weight=20,
        label="Business License",
        description="Trading or operating license for the company's main activity.",
    ),
    VerificationDocumentType.DIRECTOR_ID: DocumentRequirement(
        weight=15,
        label="Director Identification",
        description="National ID or passport of a registered director.",
    ),
    VerificationDocumentType.PROOF_OF_ADDRESS: DocumentRequirement(
        weight=10,
        label="Proof of Address",
        description="Utility bill or lease for the registered business address.",
    ),
    VerificationDocumentType.BANK_CONFIRMATION: DocumentRequirement(
        weight=10,
        label="Bank Confirmation Letter",
        description="Letter from the company's bank confirming the account holder.",
    ),
}
