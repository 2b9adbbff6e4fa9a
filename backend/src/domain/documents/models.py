"""Domain models for student documents.

These are plain dataclasses independent of the persistence layer. The SQL
repository maps them to and from the SQLAlchemy models in models/document.py.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
from uuid import UUID

from .review_status import ReviewStatus


class ProtectionLevel(str, Enum):
    """How a stored document is served to viewers.

    NONE: raw file download
    WATERMARK: watermarked with the viewer's identity (PDF only)
    FULL: watermarked and access-gated behind signed URLs (PDF only)
    """
    NONE = "NONE"
    WATERMARK = "WATERMARK"
    FULL = "FULL"


class DocumentType(str, Enum):
    """Coarse classification derived from the MIME type at ingestion."""
    PDF = "PDF"
    WORD = "WORD"
    EXCEL = "EXCEL"
    IMAGE = "IMAGE"
    OTHER = "OTHER"


class ActorRole(str, Enum):
    """Role of an actor as reported by the identity directory."""
    STUDENT = "STUDENT"
    REVIEWER = "REVIEWER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded file as received from the client."""
    file_name: str
    mime_type: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class TranslationInput:
    """Title and description of a document in one locale."""
    locale: str
    title: str
    description: str


@dataclass
class NewDocument:
    """Everything needed to create a document record (id not yet assigned)."""
    owner_id: UUID
    lesson_id: UUID
    original_file_name: str
    stored_file_name: str
    storage_key: str
    file_url: str
    file_size_bytes: int
    mime_type: str
    document_type: DocumentType
    protection_level: ProtectionLevel
    translations: Dict[str, TranslationInput]
    review_status: ReviewStatus = ReviewStatus.PENDING_REVIEW


@dataclass
class DocumentRecord:
    """A persisted student document."""
    id: UUID
    owner_id: UUID
    lesson_id: UUID
    original_file_name: str
    stored_file_name: str
    storage_key: str
    file_url: str
    file_size_bytes: int
    mime_type: str
    document_type: DocumentType
    protection_level: ProtectionLevel
    translations: Dict[str, TranslationInput]
    review_status: ReviewStatus
    created_at: datetime
    updated_at: datetime
    rejection_reason: Optional[str] = None
    review_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class ReviewUpdate:
    """A status change as handed to the repository in a single write."""
    review_status: ReviewStatus
    expected_status: ReviewStatus
    reviewer_id: UUID
    reviewed_at: datetime
    rejection_reason: Optional[str] = None
    review_notes: Optional[str] = None


@dataclass
class TransitionResult:
    """Outcome of a review transition.

    changed is False for an idempotent self-transition (nothing written).
    """
    document: DocumentRecord
    changed: bool
    previous_status: ReviewStatus
