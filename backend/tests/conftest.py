"""Pytest fixtures for the student document service.

Provides reusable test fixtures for:
- In-memory fakes of every port (storage, repository, directory)
- Well-known actors (student, reviewer, admin) and a known lesson
- Sample uploads and translations
- SQLite-backed SQLAlchemy session factory for repository tests

Usage:
    @pytest.mark.asyncio
    async def test_ingest(ingestion_service, pdf_file, translations, lesson_id, student_id):
        record = await ingestion_service.ingest(pdf_file, "NONE", translations, lesson_id, student_id)
"""

import itertools
import os
import sys
from pathlib import Path
from uuid import UUID

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("ENVIRONMENT", "test")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from domain.documents import (
    ActorRole,
    DocumentDeletionService,
    DocumentIngestionService,
    DocumentQueryService,
    DocumentReviewService,
    IncomingFile,
    TranslationInput,
)
from models.base import Base
from fakes import FakeDirectory, FakeObjectStorage, InMemoryDocumentRepository


STUDENT_ID = UUID("11111111-1111-4111-8111-111111111111")
OTHER_STUDENT_ID = UUID("22222222-2222-4222-8222-222222222222")
REVIEWER_ID = UUID("33333333-3333-4333-8333-333333333333")
ADMIN_ID = UUID("44444444-4444-4444-8444-444444444444")
LESSON_ID = UUID("55555555-5555-4555-8555-555555555555")

# Minimal bytes; content is never parsed
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"


def _name_tokens():
    """Deterministic stored-name tokens: tok, tok2, tok3, ..."""
    counter = itertools.count(1)

    def _next():
        n = next(counter)
        return "tok" if n == 1 else f"tok{n}"
    return _next


@pytest.fixture
def student_id() -> UUID:
    return STUDENT_ID


@pytest.fixture
def other_student_id() -> UUID:
    return OTHER_STUDENT_ID


@pytest.fixture
def reviewer_id() -> UUID:
    return REVIEWER_ID


@pytest.fixture
def admin_id() -> UUID:
    return ADMIN_ID


@pytest.fixture
def lesson_id() -> UUID:
    return LESSON_ID


@pytest.fixture
def storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def repository() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        lessons={LESSON_ID},
        roles={REVIEWER_ID: ActorRole.REVIEWER, ADMIN_ID: ActorRole.ADMIN},
    )


@pytest.fixture
def ingestion_service(storage, repository, directory) -> DocumentIngestionService:
    return DocumentIngestionService(
        storage=storage,
        repository=repository,
        lessons=directory,
        required_locales=("pt", "es", "it"),
        name_token_factory=_name_tokens(),
        identity=directory,
    )


@pytest.fixture
def review_service(repository, directory) -> DocumentReviewService:
    return DocumentReviewService(repository=repository, identity=directory)


@pytest.fixture
def query_service(repository, directory) -> DocumentQueryService:
    return DocumentQueryService(repository=repository, identity=directory)


@pytest.fixture
def deletion_service(storage, repository, directory) -> DocumentDeletionService:
    return DocumentDeletionService(storage=storage, repository=repository, identity=directory)


@pytest.fixture
def translations():
    return [
        TranslationInput(locale="pt", title="Anatomia do coração", description="Resumo da aula de anatomia"),
        TranslationInput(locale="es", title="Anatomía del corazón", description="Resumen de la clase de anatomía"),
        TranslationInput(locale="it", title="Anatomia del cuore", description="Riassunto della lezione di anatomia"),
    ]


@pytest.fixture
def pdf_file() -> IncomingFile:
    return IncomingFile(file_name="Resumo Aula 1.pdf", mime_type="application/pdf", content=PDF_BYTES)


@pytest.fixture
def docx_file() -> IncomingFile:
    return IncomingFile(
        file_name="notes.docx",
        mime_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        content=b"PK\x03\x04 docx body",
    )


@pytest.fixture
def make_record(ingestion_service, pdf_file, translations):
    """Ingest a PDF for an owner and return the record."""
    async def _make(owner_id: UUID = STUDENT_ID, file: IncomingFile = None):
        return await ingestion_service.ingest(
            file=file or pdf_file,
            protection_level="NONE",
            translations=translations,
            lesson_id=LESSON_ID,
            owner_id=owner_id,
        )
    return _make


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()
