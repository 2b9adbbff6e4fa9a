"""Audience-aware presentation of document review state.

Maps (review_status, audience) to a label/severity badge and projects a
DocumentRecord into the fields an audience may see. Owners never see
review_notes or reviewed_by; reviewers and admins see everything.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from .errors import DocumentNotFoundError, UnknownReviewStatusError
from .models import ActorRole, DocumentRecord
from .review_status import ReviewStatus, requires_reason


class Audience(str, Enum):
    """Who a view is rendered for."""
    OWNER = "OWNER"
    REVIEWER = "REVIEWER"  # reviewers and admins


class BadgeSeverity(str, Enum):
    NEUTRAL = "neutral"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class StatusBadge:
    status: ReviewStatus
    label: str
    severity: BadgeSeverity
    icon: str
    requires_reason: bool


# (severity, icon) per status
_STATUS_STYLE = {
    ReviewStatus.PENDING_REVIEW: (BadgeSeverity.NEUTRAL, "clock"),
    ReviewStatus.UNDER_REVIEW: (BadgeSeverity.INFO, "search"),
    ReviewStatus.APPROVED: (BadgeSeverity.SUCCESS, "check-circle"),
    ReviewStatus.REJECTED: (BadgeSeverity.DANGER, "x-circle"),
    ReviewStatus.NEEDS_REPLACEMENT: (BadgeSeverity.WARNING, "refresh"),
    ReviewStatus.NEEDS_ADDITIONAL_INFO: (BadgeSeverity.WARNING, "alert-triangle"),
}

_LABELS = {
    Audience.REVIEWER: {
        ReviewStatus.PENDING_REVIEW: "Pending review",
        ReviewStatus.UNDER_REVIEW: "Under review",
        ReviewStatus.APPROVED: "Approved",
        ReviewStatus.REJECTED: "Rejected",
        ReviewStatus.NEEDS_REPLACEMENT: "Needs replacement",
        ReviewStatus.NEEDS_ADDITIONAL_INFO: "Needs additional info",
    },
    Audience.OWNER: {
        ReviewStatus.PENDING_REVIEW: "Waiting for review",
        ReviewStatus.UNDER_REVIEW: "Being reviewed",
        ReviewStatus.APPROVED: "Approved",
        ReviewStatus.REJECTED: "Rejected",
        ReviewStatus.NEEDS_REPLACEMENT: "Please upload a replacement",
        ReviewStatus.NEEDS_ADDITIONAL_INFO: "More information requested",
    },
}

MIME_TYPE_LABELS = {
    'application/pdf': 'PDF',
    'application/msword': 'Word (.doc)',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': 'Word (.docx)',
    'application/vnd.ms-excel': 'Excel (.xls)',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet': 'Excel (.xlsx)',
    'application/vnd.ms-powerpoint': 'PowerPoint (.ppt)',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation': 'PowerPoint (.pptx)',
    'text/plain': 'Text (.txt)',
    'text/csv': 'CSV',
    'application/rtf': 'RTF',
    'application/zip': 'ZIP',
}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def present_status(status: Any, audience: Audience = Audience.OWNER) -> StatusBadge:
    """Badge for a status as shown to an audience.

    Raises:
        UnknownReviewStatusError: status is not a ReviewStatus (programming
            error; the state machine only produces known statuses)
    """
    try:
        status = ReviewStatus(status)
    except ValueError as e:
        raise UnknownReviewStatusError(f"Unknown review status: {status!r}") from e

    severity, icon = _STATUS_STYLE[status]
    return StatusBadge(
        status=status,
        label=_LABELS[Audience(audience)][status],
        severity=severity,
        icon=icon,
        requires_reason=requires_reason(status),
    )


def get_mime_type_label(mime_type: str) -> str:
    """Readable format name, falling back to the raw MIME type."""
    return MIME_TYPE_LABELS.get(mime_type, mime_type)


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display.

    Example:
        >>> format_file_size(0)
        '0 Bytes'
        >>> format_file_size(1536)
        '1.5 KB'
        >>> format_file_size(5 * 1024 * 1024)
        '5 MB'
    """
    if size_bytes == 0:
        return "0 Bytes"

    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def audience_for_role(role: ActorRole) -> Optional[Audience]:
    if role in (ActorRole.REVIEWER, ActorRole.ADMIN):
        return Audience.REVIEWER
    return None


def resolve_audience(record: DocumentRecord, actor_id: UUID, role: ActorRole) -> Audience:
    """Decide which view an actor gets for a document.

    Reviewers and admins get the reviewer view; the owning student gets the
    owner view. Anyone else is told the document does not exist.

    Raises:
        DocumentNotFoundError: Actor may not see this document
    """
    audience = audience_for_role(role)
    if audience is not None:
        return audience
    if record.owner_id == actor_id:
        return Audience.OWNER
    raise DocumentNotFoundError(record.id)


def project_document(record: DocumentRecord, audience: Audience) -> Dict[str, Any]:
    """Project a record into the fields visible to an audience."""
    audience = Audience(audience)
    badge = present_status(record.review_status, audience)

    view: Dict[str, Any] = {
        "id": record.id,
        "lesson_id": record.lesson_id,
        "original_file_name": record.original_file_name,
        "file_url": record.file_url,
        "file_size_bytes": record.file_size_bytes,
        "file_size_label": format_file_size(record.file_size_bytes),
        "mime_type": record.mime_type,
        "mime_type_label": get_mime_type_label(record.mime_type),
        "document_type": record.document_type.value,
        "protection_level": record.protection_level.value,
        "translations": [
            {"locale": locale, "title": t.title, "description": t.description}
            for locale, t in sorted(record.translations.items())
        ],
        "review_status": record.review_status.value,
        "status_label": badge.label,
        "status_severity": badge.severity.value,
        "rejection_reason": record.rejection_reason,
        "reviewed_at": record.reviewed_at,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }

    if audience == Audience.REVIEWER:
        view.update({
            "owner_id": record.owner_id,
            "stored_file_name": record.stored_file_name,
            "review_notes": record.review_notes,
            "reviewed_by": record.reviewed_by,
        })

    return view
