"""Typed error taxonomy for the document lifecycle.

Every failure a caller can act on is a DocumentError subclass carrying a
stable machine code and a category. The API layer maps categories to HTTP
status codes, so classification never depends on message text.

Categories:
- VALIDATION: malformed request, rejected before any I/O
- NOT_FOUND: referenced lesson or document does not exist
- DEPENDENCY: storage, repository or directory failure (caller may retry)
- CONFLICT: a concurrent review write won
- FORBIDDEN: actor lacks the role required for the action
"""

from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID


class ErrorCategory(str, Enum):
    """Coarse error classification used for propagation policy."""
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    DEPENDENCY = "DEPENDENCY"
    CONFLICT = "CONFLICT"
    FORBIDDEN = "FORBIDDEN"


class DocumentError(Exception):
    """Base class for all document lifecycle errors."""

    code: str = "DOCUMENT_ERROR"
    category: ErrorCategory = ErrorCategory.VALIDATION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        return self.category == ErrorCategory.DEPENDENCY


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------

class FileValidationError(DocumentError):
    """File rejected by the file validator."""
    code = "FILE_INVALID"


class InvalidFileNameError(FileValidationError):
    code = "INVALID_FILE_NAME"


class EmptyFileError(FileValidationError):
    code = "EMPTY_FILE"


class FileTooLargeError(FileValidationError):
    code = "FILE_TOO_LARGE"

    def __init__(self, size_bytes: int, max_size_bytes: int):
        super().__init__(
            f"File exceeds maximum size of {max_size_bytes} bytes (got {size_bytes} bytes)",
            details={"size_bytes": size_bytes, "max_size_bytes": max_size_bytes},
        )
        self.size_bytes = size_bytes
        self.max_size_bytes = max_size_bytes


class UnsupportedFileTypeError(FileValidationError):
    """MIME type is not in the allow-list at all (protection level NONE)."""
    code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, mime_type: str, accepted: str):
        super().__init__(
            f"Unsupported file type: {mime_type}. Accepted: {accepted}",
            details={"mime_type": mime_type},
        )
        self.mime_type = mime_type


class UnsupportedTypeForProtectionError(FileValidationError):
    """Protected documents (WATERMARK, FULL) must be PDF."""
    code = "UNSUPPORTED_TYPE_FOR_PROTECTION"

    def __init__(self, mime_type: str, protection_level: str):
        super().__init__(
            f"Documents with protection {protection_level} must be PDF "
            f"(watermarking requires PDF). Received: {mime_type}",
            details={"mime_type": mime_type, "protection_level": protection_level},
        )
        self.mime_type = mime_type
        self.protection_level = protection_level


class TranslationValidationError(DocumentError):
    """A per-locale translation failed validation."""
    code = "TRANSLATION_INVALID"

    def __init__(self, locale: str, message: str):
        super().__init__(message, details={"locale": locale})
        self.locale = locale


class MissingTranslationError(TranslationValidationError):
    code = "MISSING_TRANSLATION"

    def __init__(self, locale: str):
        super().__init__(locale, f"Missing translation for locale '{locale}'")


class DuplicateTranslationError(TranslationValidationError):
    code = "DUPLICATE_TRANSLATION"

    def __init__(self, locale: str):
        super().__init__(locale, f"Translation for locale '{locale}' given more than once")


class UnsupportedLocaleError(TranslationValidationError):
    code = "UNSUPPORTED_LOCALE"

    def __init__(self, locale: str):
        super().__init__(locale, f"Locale '{locale}' is not configured")


class TitleInvalidError(TranslationValidationError):
    code = "TITLE_INVALID"


class DescriptionInvalidError(TranslationValidationError):
    code = "DESCRIPTION_INVALID"


class MalformedTranslationsError(DocumentError):
    """The translations form field is not a list of {locale, title, description}."""
    code = "INVALID_TRANSLATIONS"

    def __init__(self, errors: list):
        super().__init__(
            "translations must be a JSON list of {locale, title, description}",
            details={"errors": errors},
        )


class ReasonRequiredError(DocumentError):
    code = "REASON_REQUIRED"

    def __init__(self, target_status: str):
        super().__init__(
            f"A non-empty reason is required to move a document to {target_status}",
            details={"target_status": target_status},
        )
        self.target_status = target_status


class InvalidTransitionError(DocumentError):
    code = "INVALID_TRANSITION"

    def __init__(self, current_status: str, target_status: str, allowed: list):
        super().__init__(
            f"Invalid transition: {current_status} -> {target_status}. "
            f"Allowed transitions from {current_status}: {allowed}",
            details={
                "current_status": current_status,
                "target_status": target_status,
                "allowed": allowed,
            },
        )


# ---------------------------------------------------------------------------
# Not-found errors
# ---------------------------------------------------------------------------

class LessonNotFoundError(DocumentError):
    code = "LESSON_NOT_FOUND"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, lesson_id: UUID):
        super().__init__(f"Lesson {lesson_id} not found", details={"lesson_id": str(lesson_id)})
        self.lesson_id = lesson_id


class DocumentNotFoundError(DocumentError):
    code = "DOCUMENT_NOT_FOUND"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, document_id: UUID):
        super().__init__(
            f"Document {document_id} not found",
            details={"document_id": str(document_id)},
        )
        self.document_id = document_id


# ---------------------------------------------------------------------------
# Dependency errors
# ---------------------------------------------------------------------------

class DependencyError(DocumentError):
    """A collaborator (storage, repository, directory) failed."""
    code = "DEPENDENCY_FAILED"
    category = ErrorCategory.DEPENDENCY


class UploadFailedError(DependencyError):
    code = "UPLOAD_FAILED"


class PersistFailedError(DependencyError):
    code = "PERSIST_FAILED"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        compensated: Optional[bool] = None,
    ):
        super().__init__(message, details=details)
        # None when no compensation was attempted (review writes, deletes)
        self.compensated = compensated


class StorageDeleteFailedError(DependencyError):
    code = "STORAGE_DELETE_FAILED"


class DirectoryUnavailableError(DependencyError):
    """Lesson catalog or identity lookup could not be reached."""
    code = "DIRECTORY_UNAVAILABLE"


# ---------------------------------------------------------------------------
# Conflict / permission errors
# ---------------------------------------------------------------------------

class ReviewConflictError(DocumentError):
    code = "REVIEW_CONFLICT"
    category = ErrorCategory.CONFLICT

    def __init__(self, document_id: UUID, expected_status: str):
        super().__init__(
            f"Document {document_id} is no longer in status {expected_status}; "
            f"another review was recorded first",
            details={"document_id": str(document_id), "expected_status": expected_status},
        )


class AccessDeniedError(DocumentError):
    code = "ACCESS_DENIED"
    category = ErrorCategory.FORBIDDEN


# ---------------------------------------------------------------------------
# Programming errors (never user-facing)
# ---------------------------------------------------------------------------

class UnknownReviewStatusError(RuntimeError):
    """Raised by the presentation adapter for a status it cannot map."""
    pass
