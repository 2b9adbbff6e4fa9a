"""Student document API endpoints

Provides:
- POST   /student-documents              upload a document for a lesson
- PATCH  /student-documents/{id}/review  apply a review decision
- GET    /student-documents/{id}         audience-filtered document view
- GET    /student-documents              review queue (reviewers/admins)
- GET    /student-documents/mine         the caller's own documents
- DELETE /student-documents/{id}         remove document and blob (admins)

Domain errors propagate to the DocumentError handler in main.py, which maps
their category to an HTTP status.
"""

import logging
import time
from typing import Annotated, List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from pydantic import TypeAdapter, ValidationError

from dependencies import (
    ActorId,
    get_deletion_service,
    get_ingestion_service,
    get_query_service,
    get_review_service,
)
from domain.documents import (
    DocumentDeletionService,
    DocumentIngestionService,
    DocumentQueryService,
    DocumentReviewService,
    IncomingFile,
    ProtectionLevel,
    ReviewStatus,
    TranslationInput,
)
from domain.documents.errors import DocumentError, MalformedTranslationsError, PersistFailedError
from domain.documents.presentation import Audience, project_document
from observability.metrics import (
    documents_deleted_total,
    documents_ingested_total,
    ingest_compensations_total,
    ingest_duration_seconds,
    review_transitions_total,
)
from .schemas import (
    ErrorResponse,
    OwnerDocumentView,
    ReviewerDocumentView,
    ReviewRequest,
    ReviewResponse,
    TranslationPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student-documents", tags=["Student Documents"])

_translations_adapter = TypeAdapter(List[TranslationPayload])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


def _parse_translations(raw: str) -> List[TranslationInput]:
    try:
        items = _translations_adapter.validate_json(raw)
    except ValidationError as e:
        raise MalformedTranslationsError(
            [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
        ) from e
    return [TranslationInput(locale=t.locale, title=t.title, description=t.description) for t in items]


def _as_view(projection: dict) -> Union[OwnerDocumentView, ReviewerDocumentView]:
    if "review_notes" in projection:
        return ReviewerDocumentView(**projection)
    return OwnerDocumentView(**projection)


@router.post(
    "",
    response_model=OwnerDocumentView,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def upload_document(
    actor_id: ActorId,
    file: Annotated[UploadFile, File(...)],
    protection_level: Annotated[ProtectionLevel, Form(...)],
    lesson_id: Annotated[UUID, Form(...)],
    translations: Annotated[str, Form(..., description="JSON list of {locale, title, description}")],
    service: Annotated[DocumentIngestionService, Depends(get_ingestion_service)],
    student_id: Annotated[
        Optional[UUID],
        Form(description="Owner when an admin uploads for a student; defaults to the caller"),
    ] = None,
):
    """Upload a document for a lesson

    Accepts multipart/form-data. PDFs may use any protection level; other
    supported formats (Word, Excel, PowerPoint, text, CSV, RTF, ZIP) only
    NONE. Every configured locale needs exactly one translation.
    Admins may pass student_id to upload on a student's behalf; anyone else
    doing so gets 403.

    The new document starts in PENDING_REVIEW. If the record cannot be
    written after the file was stored, the stored file is removed again.

    Example:
        curl -X POST https://api.example.com/api/v1/student-documents \\
          -H "X-Actor-Id: 7b0d..." \\
          -F "file=@notes.pdf;type=application/pdf" \\
          -F "protection_level=WATERMARK" \\
          -F "lesson_id=2f6c..." \\
          -F 'translations=[{"locale":"pt","title":"...","description":"..."}, ...]'
    """
    parsed_translations = _parse_translations(translations)
    content = await file.read()
    incoming = IncomingFile(
        file_name=file.filename or "",
        mime_type=file.content_type or "application/octet-stream",
        content=content,
    )

    start = time.time()
    try:
        record = await service.ingest(
            file=incoming,
            protection_level=protection_level,
            translations=parsed_translations,
            lesson_id=lesson_id,
            owner_id=student_id or actor_id,
            actor_id=actor_id,
        )
    except DocumentError as e:
        documents_ingested_total.labels(outcome=e.code, protection_level=protection_level.value).inc()
        if isinstance(e, PersistFailedError) and e.compensated is not None:
            ingest_compensations_total.labels(result="removed" if e.compensated else "orphaned").inc()
        raise
    finally:
        ingest_duration_seconds.observe(time.time() - start)

    documents_ingested_total.labels(outcome="success", protection_level=protection_level.value).inc()
    return OwnerDocumentView(**project_document(record, Audience.OWNER))


@router.patch(
    "/{document_id}/review",
    response_model=ReviewResponse,
    responses=ERROR_RESPONSES,
)
async def review_document(
    document_id: UUID,
    request: ReviewRequest,
    actor_id: ActorId,
    service: Annotated[DocumentReviewService, Depends(get_review_service)],
):
    """Apply a review decision (reviewers and admins)

    REJECTED, NEEDS_REPLACEMENT and NEEDS_ADDITIONAL_INFO require a
    rejection_reason. Submitting the current status again is a no-op and
    returns changed=false.
    """
    try:
        result = await service.transition(
            document_id=document_id,
            target_status=request.review_status,
            reviewer_id=actor_id,
            reason=request.rejection_reason,
            notes=request.review_notes,
        )
    except DocumentError as e:
        review_transitions_total.labels(target_status=request.review_status.value, outcome=e.code).inc()
        raise

    review_transitions_total.labels(
        target_status=request.review_status.value,
        outcome="changed" if result.changed else "unchanged",
    ).inc()
    return ReviewResponse(
        document=ReviewerDocumentView(**project_document(result.document, Audience.REVIEWER)),
        changed=result.changed,
        previous_status=result.previous_status,
    )


@router.get(
    "",
    response_model=List[ReviewerDocumentView],
    responses=ERROR_RESPONSES,
)
async def list_documents_for_review(
    actor_id: ActorId,
    service: Annotated[DocumentQueryService, Depends(get_query_service)],
    review_status: Annotated[Optional[ReviewStatus], Query()] = None,
):
    """List documents for reviewers, newest first, optionally by status"""
    views = await service.list_documents_for_review(actor_id, review_status=review_status)
    return [ReviewerDocumentView(**v) for v in views]


@router.get(
    "/mine",
    response_model=List[OwnerDocumentView],
    responses=ERROR_RESPONSES,
)
async def list_my_documents(
    actor_id: ActorId,
    service: Annotated[DocumentQueryService, Depends(get_query_service)],
):
    """List the caller's own documents, newest first"""
    views = await service.list_documents_for_owner(actor_id)
    return [OwnerDocumentView(**v) for v in views]


@router.get(
    "/{document_id}",
    response_model=None,
    responses={200: {"model": ReviewerDocumentView}, **ERROR_RESPONSES},
)
async def get_document(
    document_id: UUID,
    actor_id: ActorId,
    service: Annotated[DocumentQueryService, Depends(get_query_service)],
) -> Union[OwnerDocumentView, ReviewerDocumentView]:
    """Get a document

    Owners get the owner view (no reviewer notes). Reviewers and admins get
    the full view. Anyone else gets 404.
    """
    return _as_view(await service.get_document_view(document_id, actor_id))


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
)
async def delete_document(
    document_id: UUID,
    actor_id: ActorId,
    service: Annotated[DocumentDeletionService, Depends(get_deletion_service)],
) -> Response:
    """Delete a document and its stored file (admins only)"""
    try:
        await service.delete(document_id, actor_id)
    except DocumentError as e:
        documents_deleted_total.labels(outcome=e.code).inc()
        raise

    documents_deleted_total.labels(outcome="success").inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
