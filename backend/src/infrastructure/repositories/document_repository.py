"""SQL document repository.

Implements DocumentRepositoryPort on top of SQLAlchemy. Each call runs in its
own session and transaction, so a failed call leaves nothing behind.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database import session_scope
from domain.documents.models import DocumentRecord, NewDocument, ReviewUpdate, TranslationInput
from domain.documents.ports.document_repository_port import (
    DocumentRepositoryPort,
    RecordNotFound,
    RepositoryError,
    StaleReviewStatus,
)
from domain.documents.review_status import ReviewStatus
from models.document import StudentDocument, StudentDocumentTranslation

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on read
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_record(row: StudentDocument) -> DocumentRecord:
    """Map a StudentDocument row to the domain record."""
    return DocumentRecord(
        id=row.id,
        owner_id=row.owner_id,
        lesson_id=row.lesson_id,
        original_file_name=row.original_file_name,
        stored_file_name=row.stored_file_name,
        storage_key=row.storage_key,
        file_url=row.file_url,
        file_size_bytes=row.file_size_bytes,
        mime_type=row.mime_type,
        document_type=row.document_type,
        protection_level=row.protection_level,
        translations={
            t.locale: TranslationInput(locale=t.locale, title=t.title, description=t.description)
            for t in row.translations
        },
        review_status=row.review_status,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
        rejection_reason=row.rejection_reason,
        review_notes=row.review_notes,
        reviewed_by=row.reviewed_by,
        reviewed_at=_as_utc(row.reviewed_at),
    )


class SqlDocumentRepository(DocumentRepositoryPort):
    """Document repository backed by PostgreSQL (SQLite in tests).

    SQLAlchemy sessions are blocking, so each call does its session work in
    the default executor. A caller that times out stops waiting; the
    transaction in the worker thread still commits or rolls back on its own.

    Args:
        session_factory: sessionmaker bound to the target engine
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    async def _run(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, func)

    async def create(self, document: NewDocument) -> DocumentRecord:
        def _create() -> DocumentRecord:
            row = StudentDocument(
                owner_id=document.owner_id,
                lesson_id=document.lesson_id,
                original_file_name=document.original_file_name,
                stored_file_name=document.stored_file_name,
                storage_key=document.storage_key,
                file_url=document.file_url,
                file_size_bytes=document.file_size_bytes,
                mime_type=document.mime_type,
                document_type=document.document_type,
                protection_level=document.protection_level,
                review_status=document.review_status,
                translations=[
                    StudentDocumentTranslation(
                        locale=t.locale,
                        title=t.title,
                        description=t.description,
                    )
                    for t in document.translations.values()
                ],
            )
            with session_scope(self._session_factory) as session:
                session.add(row)
                session.flush()
                return to_record(row)

        try:
            record = await self._run(_create)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to create document: {e}") from e

        logger.info(f"Document record created: id={record.id} storage_key={record.storage_key}")
        return record

    async def get(self, document_id: UUID) -> DocumentRecord:
        def _get() -> DocumentRecord:
            with session_scope(self._session_factory) as session:
                row = session.get(StudentDocument, document_id)
                if row is None:
                    raise RecordNotFound(document_id)
                return to_record(row)

        try:
            return await self._run(_get)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to load document {document_id}: {e}") from e

    async def update_review_status(self, document_id: UUID, update: ReviewUpdate) -> DocumentRecord:
        """Compare-and-set on review_status.

        The UPDATE only matches while the stored status equals
        update.expected_status, so two reviewers racing on the same record
        cannot both win.
        """
        stmt = (
            sql_update(StudentDocument)
            .where(
                StudentDocument.id == document_id,
                StudentDocument.review_status == update.expected_status,
            )
            .values(
                review_status=update.review_status,
                rejection_reason=update.rejection_reason,
                review_notes=update.review_notes,
                reviewed_by=update.reviewer_id,
                reviewed_at=update.reviewed_at,
                updated_at=update.reviewed_at,
            )
            .execution_options(synchronize_session=False)
        )

        def _update() -> DocumentRecord:
            with session_scope(self._session_factory) as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    if session.get(StudentDocument, document_id) is None:
                        raise RecordNotFound(document_id)
                    raise StaleReviewStatus(document_id, update.expected_status)
                session.flush()
                row = session.get(StudentDocument, document_id, populate_existing=True)
                return to_record(row)

        try:
            record = await self._run(_update)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to update document {document_id}: {e}") from e

        logger.info(
            f"Review status updated: id={document_id} "
            f"{update.expected_status.value} -> {update.review_status.value}"
        )
        return record

    async def delete(self, document_id: UUID) -> None:
        def _delete() -> None:
            with session_scope(self._session_factory) as session:
                row = session.get(StudentDocument, document_id)
                if row is None:
                    raise RecordNotFound(document_id)
                session.delete(row)

        try:
            await self._run(_delete)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to delete document {document_id}: {e}") from e

        logger.info(f"Document record deleted: id={document_id}")

    async def list_documents(
        self,
        owner_id: Optional[UUID] = None,
        review_status: Optional[ReviewStatus] = None,
    ) -> List[DocumentRecord]:
        query = select(StudentDocument)
        if owner_id is not None:
            query = query.where(StudentDocument.owner_id == owner_id)
        if review_status is not None:
            query = query.where(StudentDocument.review_status == review_status)
        query = query.order_by(StudentDocument.created_at.desc(), StudentDocument.id)

        def _list() -> List[DocumentRecord]:
            with session_scope(self._session_factory) as session:
                rows = session.execute(query).scalars().all()
                return [to_record(row) for row in rows]

        try:
            return await self._run(_list)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list documents: {e}") from e
