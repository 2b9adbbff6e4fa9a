"""Documents domain module - ingestion, review workflow, audience-filtered views"""

from .review_status import (
    ReviewStatus,
    ALLOWED_TRANSITIONS,
    REASON_REQUIRED_STATUSES,
    can_transition,
    get_allowed_transitions,
    requires_reason,
    validate_transition,
)
from .models import (
    ActorRole,
    DocumentRecord,
    DocumentType,
    IncomingFile,
    NewDocument,
    ProtectionLevel,
    ReviewUpdate,
    TransitionResult,
    TranslationInput,
)
from .file_validation import (
    is_supported_mime_type,
    validate_file_size,
    validate_filename,
    validate_upload,
    sanitize_filename,
    classify_document_type,
    get_accepted_mime_types,
    get_accepted_extensions,
    get_accepted_formats_description,
    NONE_PROTECTION_MIME_TYPES,
    PROTECTED_MIME_TYPES,
    MAX_FILE_SIZE,
)
from .translation_validation import validate_translations, DEFAULT_REQUIRED_LOCALES
from .ingestion import DocumentIngestionService
from .review import DocumentReviewService
from .deletion import DocumentDeletionService
from .queries import DocumentQueryService
from .presentation import (
    Audience,
    BadgeSeverity,
    StatusBadge,
    present_status,
    project_document,
    resolve_audience,
    format_file_size,
    get_mime_type_label,
)

__all__ = [
    "ReviewStatus",
    "ALLOWED_TRANSITIONS",
    "REASON_REQUIRED_STATUSES",
    "can_transition",
    "get_allowed_transitions",
    "requires_reason",
    "validate_transition",
    "ActorRole",
    "DocumentRecord",
    "DocumentType",
    "IncomingFile",
    "NewDocument",
    "ProtectionLevel",
    "ReviewUpdate",
    "TransitionResult",
    "TranslationInput",
    "is_supported_mime_type",
    "validate_file_size",
    "validate_filename",
    "validate_upload",
    "sanitize_filename",
    "classify_document_type",
    "get_accepted_mime_types",
    "get_accepted_extensions",
    "get_accepted_formats_description",
    "NONE_PROTECTION_MIME_TYPES",
    "PROTECTED_MIME_TYPES",
    "MAX_FILE_SIZE",
    "validate_translations",
    "DEFAULT_REQUIRED_LOCALES",
    "DocumentIngestionService",
    "DocumentReviewService",
    "DocumentDeletionService",
    "DocumentQueryService",
    "Audience",
    "BadgeSeverity",
    "StatusBadge",
    "present_status",
    "project_document",
    "resolve_audience",
    "format_file_size",
    "get_mime_type_label",
]
