"""Document Repository Port - persistence contract for document records."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from ..models import DocumentRecord, NewDocument, ReviewUpdate
from ..review_status import ReviewStatus


class RepositoryError(Exception):
    """Base exception for repository backend failures."""
    pass


class RecordNotFound(RepositoryError):
    """No record with the given id."""

    def __init__(self, document_id: UUID):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class StaleReviewStatus(RepositoryError):
    """Conditional review update lost against a concurrent writer."""

    def __init__(self, document_id: UUID, expected_status: ReviewStatus):
        super().__init__(
            f"Document {document_id} is not in expected status {expected_status.value}"
        )
        self.document_id = document_id
        self.expected_status = expected_status


class DocumentRepositoryPort(ABC):
    """Port interface for document record persistence.

    Implementations must make update_review_status atomic per call: the new
    status, reason, notes, reviewer and timestamp are written together or not
    at all, and only if the stored status still equals expected_status.
    """

    @abstractmethod
    async def create(self, document: NewDocument) -> DocumentRecord:
        """Persist a new record with its translations and assign its id.

        Raises:
            RepositoryError: If the write fails (nothing is persisted)
        """
        pass

    @abstractmethod
    async def get(self, document_id: UUID) -> DocumentRecord:
        """Load a record.

        Raises:
            RecordNotFound: If no record has this id
            RepositoryError: If the read fails
        """
        pass

    @abstractmethod
    async def update_review_status(self, document_id: UUID, update: ReviewUpdate) -> DocumentRecord:
        """Apply a review update as one conditional write.

        Returns:
            DocumentRecord: The record as stored after the write

        Raises:
            RecordNotFound: If no record has this id
            StaleReviewStatus: If the stored status is not update.expected_status
            RepositoryError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, document_id: UUID) -> None:
        """Hard-delete a record and its translations.

        Raises:
            RecordNotFound: If no record has this id
            RepositoryError: If the delete fails
        """
        pass

    @abstractmethod
    async def list_documents(
        self,
        owner_id: Optional[UUID] = None,
        review_status: Optional[ReviewStatus] = None,
    ) -> List[DocumentRecord]:
        """List records, newest first, optionally filtered by owner and status."""
        pass
