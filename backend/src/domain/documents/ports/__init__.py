"""Ports (hexagonal interfaces) consumed by the document services."""

from .directory_port import DirectoryError, IdentityPort, LessonLookupPort
from .document_repository_port import (
    DocumentRepositoryPort,
    RecordNotFound,
    RepositoryError,
    StaleReviewStatus,
)
from .object_storage_port import ObjectStoragePort, StorageError

__all__ = [
    "DirectoryError",
    "IdentityPort",
    "LessonLookupPort",
    "DocumentRepositoryPort",
    "RecordNotFound",
    "RepositoryError",
    "StaleReviewStatus",
    "ObjectStoragePort",
    "StorageError",
]
