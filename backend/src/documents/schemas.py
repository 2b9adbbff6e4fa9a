"""Student document API request/response schemas

Owner and reviewer views are separate models so that reviewer-only fields
(review_notes, reviewed_by, owner_id, stored_file_name) can never be
serialized into an owner response.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.documents.review_status import ReviewStatus


class TranslationPayload(BaseModel):
    """Title and description in one locale (upload form, JSON-encoded list)"""
    locale: str = Field(..., description="Locale code, e.g. 'pt'")
    title: str = Field(..., description="Title, 1-100 characters")
    description: str = Field(..., description="Description, 5-500 characters")


class TranslationView(BaseModel):
    locale: str
    title: str
    description: str


class OwnerDocumentView(BaseModel):
    """Document as seen by the uploading student"""
    model_config = ConfigDict(extra="ignore")

    id: UUID
    lesson_id: UUID
    original_file_name: str
    file_url: str
    file_size_bytes: int
    file_size_label: str = Field(..., description="Human-readable size, e.g. '1.5 MB'")
    mime_type: str
    mime_type_label: str = Field(..., description="Short type label, e.g. 'PDF'")
    document_type: str
    protection_level: str
    translations: List[TranslationView]
    review_status: ReviewStatus
    status_label: str
    status_severity: str
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ReviewerDocumentView(OwnerDocumentView):
    """Document as seen by reviewers and admins"""
    owner_id: UUID
    stored_file_name: str
    review_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None


class ReviewRequest(BaseModel):
    """Review decision submitted by a reviewer"""
    review_status: ReviewStatus = Field(..., description="Target review status")
    rejection_reason: Optional[str] = Field(
        None,
        description="Owner-visible reason; required for REJECTED, NEEDS_REPLACEMENT, NEEDS_ADDITIONAL_INFO",
    )
    review_notes: Optional[str] = Field(None, description="Reviewer-only notes")


class ReviewResponse(BaseModel):
    """Result of a review transition"""
    document: ReviewerDocumentView
    changed: bool = Field(..., description="False when the document already had the target status")
    previous_status: ReviewStatus


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error code (e.g., FILE_TOO_LARGE, REASON_REQUIRED)")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(None, description="Structured error details")
