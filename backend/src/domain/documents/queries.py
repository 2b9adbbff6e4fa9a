"""Audience-filtered reads of documents."""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from .errors import DirectoryUnavailableError, DocumentNotFoundError, PersistFailedError
from .models import ActorRole
from .ports import DirectoryError, DocumentRepositoryPort, IdentityPort, RecordNotFound
from .presentation import Audience, project_document, resolve_audience
from .review import REVIEWER_ROLES, require_role
from .review_status import ReviewStatus

logger = logging.getLogger(__name__)


class DocumentQueryService:

    def __init__(
        self,
        repository: DocumentRepositoryPort,
        identity: IdentityPort,
        repository_timeout: Optional[float] = None,
    ):
        self.repository = repository
        self.identity = identity
        self.repository_timeout = repository_timeout

    async def get_document_view(self, document_id: UUID, actor_id: UUID) -> Dict[str, Any]:
        """Load a document and project it for the asking actor.

        Raises:
            DocumentNotFoundError: Unknown document, or actor may not see it
        """
        try:
            record = await asyncio.wait_for(self.repository.get(document_id), self.repository_timeout)
        except RecordNotFound as e:
            raise DocumentNotFoundError(document_id) from e
        except Exception as e:
            logger.error(f"Failed to load document: document_id={document_id}", exc_info=True)
            raise PersistFailedError(
                "Failed to load the document",
                details={"step": "load", "document_id": str(document_id)},
            ) from e

        role = await self._role(actor_id)
        audience = resolve_audience(record, actor_id, role)
        return project_document(record, audience)

    async def list_documents_for_review(
        self,
        actor_id: UUID,
        review_status: Optional[ReviewStatus] = None,
    ) -> List[Dict[str, Any]]:
        """All documents (optionally one status), reviewer view."""
        await require_role(self.identity, actor_id, REVIEWER_ROLES)
        records = await self._list(review_status=review_status)
        return [project_document(r, Audience.REVIEWER) for r in records]

    async def list_documents_for_owner(self, actor_id: UUID) -> List[Dict[str, Any]]:
        """The actor's own documents, owner view."""
        records = await self._list(owner_id=actor_id)
        return [project_document(r, Audience.OWNER) for r in records]

    async def _list(self, **filters):
        try:
            return await asyncio.wait_for(
                self.repository.list_documents(**filters),
                self.repository_timeout,
            )
        except Exception as e:
            logger.error(f"Failed to list documents: filters={filters}", exc_info=True)
            raise PersistFailedError("Failed to list documents", details={"step": "list"}) from e

    async def _role(self, actor_id: UUID) -> ActorRole:
        try:
            return await self.identity.role(actor_id)
        except DirectoryError as e:
            logger.error(f"Identity lookup failed: actor_id={actor_id}", exc_info=True)
            raise DirectoryUnavailableError(
                "Identity service is unavailable",
                details={"step": "identity_lookup", "actor_id": str(actor_id)},
            ) from e
