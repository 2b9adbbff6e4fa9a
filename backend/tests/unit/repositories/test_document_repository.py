"""Unit tests for SqlDocumentRepository on an in-memory SQLite database"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from domain.documents import (
    DocumentType,
    NewDocument,
    ProtectionLevel,
    ReviewStatus,
    ReviewUpdate,
    TranslationInput,
)
from domain.documents.ports import RecordNotFound, RepositoryError, StaleReviewStatus
from infrastructure.repositories.document_repository import SqlDocumentRepository
from models.document import StudentDocument, StudentDocumentTranslation

REVIEWED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sql_repository(session_factory):
    return SqlDocumentRepository(session_factory)


def _new_document(owner_id=None, storage_key=None) -> NewDocument:
    owner_id = owner_id or uuid4()
    lesson_id = uuid4()
    storage_key = storage_key or f"documents/{owner_id}/{lesson_id}/{uuid4().hex}-notes.pdf"
    return NewDocument(
        owner_id=owner_id,
        lesson_id=lesson_id,
        original_file_name="notes.pdf",
        stored_file_name=storage_key.rsplit("/", 1)[-1],
        storage_key=storage_key,
        file_url=f"https://cdn.test/{storage_key}",
        file_size_bytes=2048,
        mime_type="application/pdf",
        document_type=DocumentType.PDF,
        protection_level=ProtectionLevel.WATERMARK,
        translations={
            locale: TranslationInput(locale=locale, title=f"Título {locale}", description="Descrição longa")
            for locale in ("es", "it", "pt")
        },
    )


def _update(target, expected=ReviewStatus.PENDING_REVIEW, reason=None, notes=None):
    return ReviewUpdate(
        review_status=target,
        expected_status=expected,
        reviewer_id=uuid4(),
        reviewed_at=REVIEWED_AT,
        rejection_reason=reason,
        review_notes=notes,
    )


class TestCreateAndGet:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_round_trips(self, sql_repository):
        new_document = _new_document()

        created = await sql_repository.create(new_document)
        loaded = await sql_repository.get(created.id)

        assert created.id is not None
        assert loaded.storage_key == new_document.storage_key
        assert loaded.review_status == ReviewStatus.PENDING_REVIEW
        assert loaded.protection_level == ProtectionLevel.WATERMARK
        assert loaded.document_type == DocumentType.PDF
        assert loaded.translations == new_document.translations
        assert loaded.created_at.tzinfo is not None
        assert loaded.reviewed_by is None

    @pytest.mark.asyncio
    async def test_get_unknown(self, sql_repository):
        with pytest.raises(RecordNotFound):
            await sql_repository.get(uuid4())

    @pytest.mark.asyncio
    async def test_failed_create_persists_nothing(self, sql_repository, session_factory):
        """Test a constraint violation rolls the whole write back"""
        first = await sql_repository.create(_new_document(storage_key="documents/a/b/dup.pdf"))

        with pytest.raises(RepositoryError):
            await sql_repository.create(_new_document(storage_key="documents/a/b/dup.pdf"))

        assert [r.id for r in await sql_repository.list_documents()] == [first.id]
        with session_factory() as session:
            count = session.execute(select(func.count()).select_from(StudentDocumentTranslation)).scalar()
        assert count == 3


class TestConditionalReviewUpdate:

    @pytest.mark.asyncio
    async def test_update_writes_all_review_fields(self, sql_repository):
        created = await sql_repository.create(_new_document())
        update = _update(ReviewStatus.REJECTED, reason="Ilegível", notes="Reenviar digitalização")

        updated = await sql_repository.update_review_status(created.id, update)

        assert updated.review_status == ReviewStatus.REJECTED
        assert updated.rejection_reason == "Ilegível"
        assert updated.review_notes == "Reenviar digitalização"
        assert updated.reviewed_by == update.reviewer_id
        assert updated.reviewed_at == REVIEWED_AT
        assert (await sql_repository.get(created.id)).review_status == ReviewStatus.REJECTED

    @pytest.mark.asyncio
    async def test_stale_expected_status(self, sql_repository):
        """Test the second of two racing reviews loses"""
        created = await sql_repository.create(_new_document())
        await sql_repository.update_review_status(created.id, _update(ReviewStatus.APPROVED))

        with pytest.raises(StaleReviewStatus):
            await sql_repository.update_review_status(
                created.id, _update(ReviewStatus.REJECTED, reason="Tarde demais")
            )

        stored = await sql_repository.get(created.id)
        assert stored.review_status == ReviewStatus.APPROVED
        assert stored.rejection_reason is None

    @pytest.mark.asyncio
    async def test_update_unknown(self, sql_repository):
        with pytest.raises(RecordNotFound):
            await sql_repository.update_review_status(uuid4(), _update(ReviewStatus.APPROVED))


class TestDeleteAndList:

    @pytest.mark.asyncio
    async def test_delete_removes_translations(self, sql_repository, session_factory):
        created = await sql_repository.create(_new_document())

        await sql_repository.delete(created.id)

        with pytest.raises(RecordNotFound):
            await sql_repository.get(created.id)
        with session_factory() as session:
            count = session.execute(select(func.count()).select_from(StudentDocumentTranslation)).scalar()
        assert count == 0

    @pytest.mark.asyncio
    async def test_delete_unknown(self, sql_repository):
        with pytest.raises(RecordNotFound):
            await sql_repository.delete(uuid4())

    @pytest.mark.asyncio
    async def test_list_filters(self, sql_repository):
        owner_id = uuid4()
        mine = await sql_repository.create(_new_document(owner_id=owner_id))
        other = await sql_repository.create(_new_document())
        await sql_repository.update_review_status(other.id, _update(ReviewStatus.APPROVED))

        assert [r.id for r in await sql_repository.list_documents(owner_id=owner_id)] == [mine.id]
        approved = await sql_repository.list_documents(review_status=ReviewStatus.APPROVED)
        assert [r.id for r in approved] == [other.id]
        assert {r.id for r in await sql_repository.list_documents()} == {mine.id, other.id}

    @pytest.mark.asyncio
    async def test_list_newest_first(self, sql_repository):
        for _ in range(3):
            await sql_repository.create(_new_document())

        created_at = [r.created_at for r in await sql_repository.list_documents()]

        assert created_at == sorted(created_at, reverse=True)


class TestModelSerialization:

    @pytest.mark.asyncio
    async def test_row_to_dict(self, sql_repository, session_factory):
        created = await sql_repository.create(_new_document())

        with session_factory() as session:
            row = session.get(StudentDocument, created.id)
            data = row.to_dict()

        assert data["id"] == str(created.id)
        assert data["review_status"] == "PENDING_REVIEW"
        assert data["protection_level"] == "WATERMARK"
        assert [t["locale"] for t in data["translations"]] == ["es", "it", "pt"]
