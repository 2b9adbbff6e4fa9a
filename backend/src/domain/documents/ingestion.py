"""Document ingestion orchestrator.

Validates an upload, stores the blob and creates the document record in
PENDING_REVIEW as one operation. Storage and the repository share no
transaction, so a failed record write is compensated by deleting the blob
that was just uploaded.

Processing:
0. An admin may upload on a student's behalf (owner != actor)
1. Validate file against protection level (no I/O)
2. Validate all locale translations (no I/O)
3. Check the target lesson exists (catalog lookup)
4. Upload blob to object storage -> UploadFailedError on failure
5. Create record -> on failure delete blob, PersistFailedError

A document exists if and only if step 5 succeeded. A step that times out or
is cancelled keeps running in the background; once it settles, whatever it
wrote is removed again (or, for a cancelled persist, kept as a complete
ingest).
"""

import asyncio
import logging
from typing import Awaitable, Callable, Coroutine, Iterable, Optional, Sequence, Set, TypeVar
from uuid import UUID, uuid4

from .errors import (
    AccessDeniedError,
    DirectoryUnavailableError,
    LessonNotFoundError,
    PersistFailedError,
    UploadFailedError,
)
from .file_validation import sanitize_filename, validate_upload
from .models import ActorRole, DocumentRecord, IncomingFile, NewDocument, ProtectionLevel, TranslationInput
from .ports import DirectoryError, DocumentRepositoryPort, IdentityPort, LessonLookupPort, ObjectStoragePort
from .review import require_role
from .review_status import INITIAL_STATUS
from .translation_validation import DEFAULT_REQUIRED_LOCALES, validate_translations

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORAGE_KEY_PREFIX = "documents"

UPLOAD_FOR_OTHERS_ROLES = frozenset({ActorRole.ADMIN})

# Settle tasks for abandoned steps; referenced here until they finish
_pending_settlements: Set["asyncio.Task[None]"] = set()


def build_storage_key(owner_id: UUID, lesson_id: UUID, stored_file_name: str) -> str:
    """Storage key for a document blob.

    Format: documents/{owner_id}/{lesson_id}/{stored_file_name}. The key does
    not depend on any locale, so one blob serves every translation.
    """
    return f"{STORAGE_KEY_PREFIX}/{owner_id}/{lesson_id}/{stored_file_name}"


def build_stored_file_name(original_file_name: str, token: Optional[str] = None) -> str:
    """Unique, storage-safe file name.

    Example:
        >>> build_stored_file_name("Prova final.pdf", token="ab12")
        'ab12-Prova-final.pdf'
    """
    token = token or uuid4().hex
    return f"{token}-{sanitize_filename(original_file_name)}"


async def _with_timeout(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    return await asyncio.wait_for(awaitable, timeout)


def _track(coro: Coroutine) -> "asyncio.Task[None]":
    task = asyncio.ensure_future(coro)
    _pending_settlements.add(task)
    task.add_done_callback(_pending_settlements.discard)
    return task


async def wait_for_pending_settlements() -> None:
    """Wait until every abandoned upload or persist has been settled.

    Called on shutdown so late writes are compensated before the loop stops.
    """
    while _pending_settlements:
        await asyncio.gather(*list(_pending_settlements), return_exceptions=True)


class DocumentIngestionService:
    """Ingests uploaded documents with compensation on partial failure.

    Ingest calls share no mutable state, so concurrent calls for different
    documents are independent.

    Example:
        service = DocumentIngestionService(
            storage=S3StorageAdapter(...),
            repository=SqlDocumentRepository(session_factory),
            lessons=HttpDirectoryClient(...),
            required_locales=["pt", "es", "it"],
        )
        record = await service.ingest(
            file=IncomingFile("notes.pdf", "application/pdf", content),
            protection_level=ProtectionLevel.WATERMARK,
            translations=[...],
            lesson_id=lesson_id,
            owner_id=student_id,
        )
    """

    def __init__(
        self,
        storage: ObjectStoragePort,
        repository: DocumentRepositoryPort,
        lessons: LessonLookupPort,
        required_locales: Sequence[str] = DEFAULT_REQUIRED_LOCALES,
        max_file_size: Optional[int] = None,
        storage_timeout: Optional[float] = None,
        repository_timeout: Optional[float] = None,
        name_token_factory: Callable[[], str] = lambda: uuid4().hex,
        identity: Optional[IdentityPort] = None,
    ):
        self.storage = storage
        self.repository = repository
        self.lessons = lessons
        self.required_locales = tuple(required_locales)
        self.max_file_size = max_file_size
        self.storage_timeout = storage_timeout
        self.repository_timeout = repository_timeout
        self._name_token_factory = name_token_factory
        self.identity = identity

    async def ingest(
        self,
        file: IncomingFile,
        protection_level: ProtectionLevel,
        translations: Iterable[TranslationInput],
        lesson_id: UUID,
        owner_id: UUID,
        actor_id: Optional[UUID] = None,
    ) -> DocumentRecord:
        """Validate, store and persist a document.

        Args:
            file: Uploaded file
            protection_level: Requested protection level
            translations: One title/description per configured locale
            lesson_id: Lesson the document is attached to
            owner_id: Student the document belongs to
            actor_id: Uploading user when it is not the owner (admins only)

        Returns:
            DocumentRecord: The created record, in PENDING_REVIEW

        Raises:
            FileValidationError subclasses: File rejected (no I/O done)
            TranslationValidationError subclasses: Translations rejected
            AccessDeniedError: Non-admin uploading for someone else
            LessonNotFoundError: Lesson does not exist (no blob, no record)
            DirectoryUnavailableError: Catalog lookup failed
            UploadFailedError: Blob upload failed or timed out (nothing persisted)
            PersistFailedError: Record write failed or timed out; blob compensated
        """
        protection_level = ProtectionLevel(protection_level)

        document_type = validate_upload(file, protection_level, self.max_file_size)
        validated_translations = validate_translations(translations, self.required_locales)
        if actor_id is not None and actor_id != owner_id:
            await self._ensure_may_upload_for(actor_id, owner_id)
        await self._ensure_lesson_exists(lesson_id)

        stored_file_name = build_stored_file_name(file.file_name, self._name_token_factory())
        storage_key = build_storage_key(owner_id, lesson_id, stored_file_name)

        file_url = await self._upload(file, storage_key)

        new_document = NewDocument(
            owner_id=owner_id,
            lesson_id=lesson_id,
            original_file_name=file.file_name,
            stored_file_name=stored_file_name,
            storage_key=storage_key,
            file_url=file_url,
            file_size_bytes=file.size_bytes,
            mime_type=file.mime_type,
            document_type=document_type,
            protection_level=protection_level,
            translations=validated_translations,
            review_status=INITIAL_STATUS,
        )
        record = await self._persist(new_document)

        logger.info(
            f"Ingested document: id={record.id}, owner_id={owner_id}, lesson_id={lesson_id}, "
            f"protection_level={protection_level.value}, type={document_type.value}, "
            f"size={file.size_bytes}"
        )
        return record

    async def _ensure_may_upload_for(self, actor_id: UUID, owner_id: UUID) -> None:
        if self.identity is None:
            raise AccessDeniedError(
                "Uploading for another user is not enabled",
                details={"actor_id": str(actor_id), "owner_id": str(owner_id)},
            )
        await require_role(self.identity, actor_id, UPLOAD_FOR_OTHERS_ROLES)
        logger.info(f"Upload on behalf of student: actor_id={actor_id}, owner_id={owner_id}")

    async def _ensure_lesson_exists(self, lesson_id: UUID) -> None:
        try:
            exists = await self.lessons.lesson_exists(lesson_id)
        except DirectoryError as e:
            logger.error(f"Lesson lookup failed: lesson_id={lesson_id}", exc_info=True)
            raise DirectoryUnavailableError(
                "Lesson catalog is unavailable",
                details={"step": "lesson_lookup", "lesson_id": str(lesson_id)},
            ) from e

        if not exists:
            logger.warning(f"Ingestion rejected, lesson not found: lesson_id={lesson_id}")
            raise LessonNotFoundError(lesson_id)

    async def _upload(self, file: IncomingFile, storage_key: str) -> str:
        # Runs on past a timeout or cancellation; the put may still land
        put_task = asyncio.ensure_future(
            self.storage.put_file(file.content, storage_key, file.mime_type)
        )
        try:
            return await _with_timeout(asyncio.shield(put_task), self.storage_timeout)
        except asyncio.CancelledError:
            logger.warning(f"Ingestion cancelled during upload, compensating: storage_key={storage_key}")
            await asyncio.shield(_track(self._settle_upload(put_task, storage_key)))
            raise
        except asyncio.TimeoutError as e:
            logger.error(
                f"Upload timed out: storage_key={storage_key}, size={file.size_bytes}, "
                f"timeout={self.storage_timeout}"
            )
            _track(self._settle_upload(put_task, storage_key))
            raise UploadFailedError(
                "Timed out storing the uploaded file",
                details={"step": "upload", "storage_key": storage_key, "timeout": True},
            ) from e
        except Exception as e:
            logger.error(
                f"Upload failed: storage_key={storage_key}, size={file.size_bytes}, "
                f"error={type(e).__name__}",
                exc_info=True,
            )
            raise UploadFailedError(
                "Failed to store the uploaded file",
                details={"step": "upload", "storage_key": storage_key},
            ) from e

    async def _settle_upload(self, put_task: "asyncio.Future[str]", storage_key: str) -> None:
        """Wait for an abandoned put to finish, then delete whatever it stored."""
        try:
            await put_task
        except Exception:
            logger.info(f"Abandoned upload did not complete: storage_key={storage_key}")
            return
        await self._compensate(storage_key)

    async def _persist(self, new_document: NewDocument) -> DocumentRecord:
        storage_key = new_document.storage_key
        persist_task = asyncio.ensure_future(self.repository.create(new_document))

        try:
            return await _with_timeout(asyncio.shield(persist_task), self.repository_timeout)
        except asyncio.CancelledError:
            logger.warning(
                f"Ingestion cancelled after upload, finishing persist step: storage_key={storage_key}"
            )
            await asyncio.shield(_track(self._settle_persist(persist_task, storage_key, keep_record=True)))
            raise
        except asyncio.TimeoutError as e:
            logger.error(
                f"Persist timed out, compensating once the write settles: storage_key={storage_key}, "
                f"timeout={self.repository_timeout}"
            )
            _track(self._settle_persist(persist_task, storage_key, keep_record=False))
            raise PersistFailedError(
                "Timed out saving the document record",
                details={"step": "persist", "storage_key": storage_key, "timeout": True},
            ) from e
        except Exception as e:
            logger.error(
                f"Persist failed, compensating: storage_key={storage_key}, "
                f"error={type(e).__name__}",
                exc_info=True,
            )
            compensated = await self._compensate(storage_key)
            raise PersistFailedError(
                "Failed to save the document record",
                details={"step": "persist", "storage_key": storage_key, "compensated": compensated},
                compensated=compensated,
            ) from e

    async def _settle_persist(
        self,
        persist_task: "asyncio.Future[DocumentRecord]",
        storage_key: str,
        keep_record: bool,
    ) -> None:
        """Drive an abandoned ingest to a consistent end state.

        keep_record=False means the caller was already told the ingest
        failed, so a record that lands late is removed together with its blob.
        """
        try:
            record = await persist_task
        except Exception:
            logger.error(
                f"Persist failed for abandoned ingestion: storage_key={storage_key}",
                exc_info=True,
            )
            await self._compensate(storage_key)
            return

        if keep_record:
            logger.warning(f"Abandoned ingestion completed: id={record.id}, storage_key={storage_key}")
            return

        logger.warning(f"Record written after timeout, removing: id={record.id}, storage_key={storage_key}")
        try:
            await _with_timeout(self.repository.delete(record.id), self.repository_timeout)
        except Exception:
            # Record and blob stay together
            logger.error(
                f"Compensation failed: late record kept id={record.id}, storage_key={storage_key}",
                exc_info=True,
            )
            return
        await self._compensate(storage_key)

    async def _compensate(self, storage_key: str) -> bool:
        """Delete a just-uploaded blob. Never raises.

        Returns:
            bool: True if the blob is gone afterwards
        """
        try:
            await _with_timeout(self.storage.delete_file(storage_key), self.storage_timeout)
        except Exception:
            logger.error(
                f"Compensation failed: orphaned blob storage_key={storage_key}",
                exc_info=True,
            )
            return False

        logger.info(f"Compensation succeeded: deleted blob storage_key={storage_key}")
        return True
