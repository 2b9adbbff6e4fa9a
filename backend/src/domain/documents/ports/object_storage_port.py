"""Object Storage Port - Domain interface for the document blob store.

The ingestion saga relies only on this contract: put a blob under a key and
get back a URL, delete a blob by key. Adapters provide S3, MinIO or other
backends.
"""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ObjectStoragePort(ABC):
    """Port interface for S3-compatible object storage operations.

    Key Design Principles:
    - Keys are chosen by the caller (the orchestrator derives them from
      owner, lesson and a random id), so compensation can delete by key
    - delete_file is idempotent: deleting a missing key returns False
    - Adapters raise StorageError (or a subclass) for backend failures and
      never retry internally unless configured to at the client level

    Example Usage:
        storage = S3StorageAdapter(...)

        url = await storage.put_file(
            content=b"%PDF-1.7 ...",
            storage_key="documents/<owner>/<lesson>/<uuid>-notes.pdf",
            mime_type="application/pdf",
        )
        await storage.delete_file("documents/<owner>/<lesson>/<uuid>-notes.pdf")
    """

    @abstractmethod
    async def put_file(self, content: bytes, storage_key: str, mime_type: str) -> str:
        """Store bytes under storage_key.

        Args:
            content: File bytes
            storage_key: Destination key
            mime_type: MIME type of the file (stored as Content-Type)

        Returns:
            str: URL the stored file can be reached at

        Raises:
            StorageError: If upload fails or storage is unavailable
        """
        pass

    @abstractmethod
    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from object storage.

        Returns:
            bool: True if file was deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in object storage (HEAD request)."""
        pass
