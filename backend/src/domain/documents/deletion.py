"""Administrative hard delete of documents.

The blob is deleted first, then the record. If the blob delete fails the
record stays and the admin can retry; a blob that is already gone counts as
deleted, so retries after a failed record delete are safe too. Either way no
blob is left behind without a record pointing at it.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from .errors import DocumentNotFoundError, PersistFailedError, StorageDeleteFailedError
from .models import ActorRole, DocumentRecord
from .ports import DocumentRepositoryPort, IdentityPort, ObjectStoragePort, RecordNotFound
from .review import require_role

logger = logging.getLogger(__name__)

ADMIN_ROLES = frozenset({ActorRole.ADMIN})


class DocumentDeletionService:

    def __init__(
        self,
        storage: ObjectStoragePort,
        repository: DocumentRepositoryPort,
        identity: IdentityPort,
        storage_timeout: Optional[float] = None,
        repository_timeout: Optional[float] = None,
    ):
        self.storage = storage
        self.repository = repository
        self.identity = identity
        self.storage_timeout = storage_timeout
        self.repository_timeout = repository_timeout

    async def delete(self, document_id: UUID, actor_id: UUID) -> DocumentRecord:
        """Delete a document and its blob.

        Returns:
            DocumentRecord: The record as it was before deletion

        Raises:
            AccessDeniedError: Actor is not an admin
            DocumentNotFoundError: Unknown document
            StorageDeleteFailedError: Blob delete failed (record kept)
            PersistFailedError: Record delete failed (blob already gone)
        """
        await require_role(self.identity, actor_id, ADMIN_ROLES)

        try:
            record = await asyncio.wait_for(self.repository.get(document_id), self.repository_timeout)
        except RecordNotFound as e:
            raise DocumentNotFoundError(document_id) from e
        except Exception as e:
            logger.error(f"Failed to load document for deletion: document_id={document_id}", exc_info=True)
            raise PersistFailedError(
                "Failed to load the document",
                details={"step": "load", "document_id": str(document_id)},
            ) from e

        try:
            existed = await asyncio.wait_for(
                self.storage.delete_file(record.storage_key),
                self.storage_timeout,
            )
        except Exception as e:
            logger.error(
                f"Blob delete failed, record kept: document_id={document_id}, "
                f"storage_key={record.storage_key}",
                exc_info=True,
            )
            raise StorageDeleteFailedError(
                "Failed to delete the stored file",
                details={"step": "blob_delete", "storage_key": record.storage_key},
            ) from e

        if not existed:
            logger.warning(f"Blob already absent: storage_key={record.storage_key}")

        try:
            await asyncio.wait_for(self.repository.delete(document_id), self.repository_timeout)
        except RecordNotFound as e:
            raise DocumentNotFoundError(document_id) from e
        except Exception as e:
            logger.error(
                f"Record delete failed after blob removal: document_id={document_id}",
                exc_info=True,
            )
            raise PersistFailedError(
                "Failed to delete the document record",
                details={"step": "record_delete", "document_id": str(document_id)},
            ) from e

        logger.info(f"Deleted document: id={document_id}, actor_id={actor_id}")
        return record
