"""Document review state machine with transition validation."""

from __future__ import annotations

from enum import Enum


class DocumentStatus(str, Enum):
    """Review status of a single uploaded document."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class VerificationStatus(str, Enum):
    """Aggregate verification status of a company."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    PENDING_REVIEW = "Pending Review"
    VERIFIED = "Verified"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class DocumentStateMachine:
    """State machine for reviewer actions on a document.

    Allowed transitions:
    - Pending → Approved
    - Pending → Rejected

    Approved and Rejected are final for that upload. A new upload replaces
    the document with a fresh Pending one; that is a replacement, not a
    transition, and is always allowed.
    """

    VALID_TRANSITIONS: dict[DocumentStatus, list[DocumentStatus]] = {
        DocumentStatus.PENDING: [DocumentStatus.APPROVED, DocumentStatus.REJECTED],
        DocumentStatus.APPROVED: [],
        DocumentStatus.REJECTED: [],
    }

    # Statuses that count as a live submission for a required type
    SUBMITTED = {
        DocumentStatus.PENDING,
        DocumentStatus.APPROVED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(DocumentStatus(from_status), [])
        return DocumentStatus(to_status) in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(
                DocumentStatus(from_status).value,
                DocumentStatus(to_status).value,
                "document has already been reviewed",
            )

    @classmethod
    def is_reviewable(cls, status: str) -> bool:
        """Check if a reviewer may act on a document in this status."""
        return bool(cls.VALID_TRANSITIONS.get(DocumentStatus(status)))

    @classmethod
    def counts_as_submitted(cls, status: str) -> bool:
        """Check if a document in this status satisfies its type for review."""
        return DocumentStatus(status) in cls.SUBMITTED
