"""Review service for student documents.

Applies review status transitions with state validation, mandatory reasons
and reviewer stamping. The repository write is conditional on the status the
decision was made against, so two concurrent reviews cannot both win.

Rules:
- target == current status: idempotent no-op, nothing written, no re-stamp
- REJECTED / NEEDS_REPLACEMENT / NEEDS_ADDITIONAL_INFO need a non-blank reason
- UNDER_REVIEW / APPROVED clear rejection_reason
- notes are optional and only ever shown to reviewers
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Union
from uuid import UUID

from .errors import (
    AccessDeniedError,
    DirectoryUnavailableError,
    DocumentNotFoundError,
    PersistFailedError,
    ReasonRequiredError,
    ReviewConflictError,
)
from .models import ActorRole, DocumentRecord, ReviewUpdate, TransitionResult
from .ports import (
    DirectoryError,
    DocumentRepositoryPort,
    IdentityPort,
    RecordNotFound,
    StaleReviewStatus,
)
from .review_status import ReviewStatus, requires_reason, validate_transition

logger = logging.getLogger(__name__)

REVIEWER_ROLES = frozenset({ActorRole.REVIEWER, ActorRole.ADMIN})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


async def require_role(identity: IdentityPort, actor_id: UUID, allowed: frozenset) -> ActorRole:
    """Resolve an actor's role and check it against the allowed set.

    Raises:
        AccessDeniedError: Role not allowed
        DirectoryUnavailableError: Identity lookup failed
    """
    try:
        role = await identity.role(actor_id)
    except DirectoryError as e:
        logger.error(f"Identity lookup failed: actor_id={actor_id}", exc_info=True)
        raise DirectoryUnavailableError(
            "Identity service is unavailable",
            details={"step": "identity_lookup", "actor_id": str(actor_id)},
        ) from e

    if role not in allowed:
        logger.warning(f"Permission denied: actor_id={actor_id}, role={role.value}")
        raise AccessDeniedError(
            "You do not have permission to perform this action",
            details={"actor_id": str(actor_id), "role": role.value},
        )
    return role


class DocumentReviewService:
    """Drives persisted documents through the review workflow."""

    def __init__(
        self,
        repository: DocumentRepositoryPort,
        identity: IdentityPort,
        repository_timeout: Optional[float] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.identity = identity
        self.repository_timeout = repository_timeout
        self.clock = clock

    async def transition(
        self,
        document_id: UUID,
        target_status: Union[ReviewStatus, str],
        reviewer_id: UUID,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """Move a document to a new review status.

        Args:
            document_id: Document to review
            target_status: Desired status
            reviewer_id: Acting reviewer (must be REVIEWER or ADMIN)
            reason: Owner-visible reason, required for reason-gated statuses
            notes: Reviewer-only notes

        Returns:
            TransitionResult: The stored document and whether anything changed

        Raises:
            AccessDeniedError: Actor is not a reviewer/admin
            DocumentNotFoundError: Unknown document
            ReasonRequiredError: Reason missing or blank for a gated status
            InvalidTransitionError: Target not reachable from current status
            ReviewConflictError: A concurrent review was recorded first
            PersistFailedError: Repository write failed; status unchanged
        """
        target_status = ReviewStatus(target_status)
        await require_role(self.identity, reviewer_id, REVIEWER_ROLES)

        document = await self._load(document_id)
        current_status = document.review_status

        if target_status == current_status:
            logger.info(
                f"Review no-op, document already {current_status.value}: document_id={document_id}"
            )
            return TransitionResult(document=document, changed=False, previous_status=current_status)

        rejection_reason = _clean_text(reason)
        if requires_reason(target_status):
            if rejection_reason is None:
                logger.warning(
                    f"Review rejected, reason required: document_id={document_id}, "
                    f"target={target_status.value}"
                )
                raise ReasonRequiredError(target_status.value)
        else:
            rejection_reason = None

        validate_transition(current_status, target_status)

        update = ReviewUpdate(
            review_status=target_status,
            expected_status=current_status,
            reviewer_id=reviewer_id,
            reviewed_at=self.clock(),
            rejection_reason=rejection_reason,
            review_notes=_clean_text(notes),
        )
        updated = await self._write(document_id, update)

        logger.info(
            f"Review recorded: document_id={document_id}, "
            f"{current_status.value} -> {target_status.value}, reviewer_id={reviewer_id}"
        )
        return TransitionResult(document=updated, changed=True, previous_status=current_status)

    async def _load(self, document_id: UUID) -> DocumentRecord:
        try:
            return await asyncio.wait_for(self.repository.get(document_id), self.repository_timeout)
        except RecordNotFound as e:
            raise DocumentNotFoundError(document_id) from e
        except Exception as e:
            logger.error(f"Failed to load document: document_id={document_id}", exc_info=True)
            raise PersistFailedError(
                "Failed to load the document",
                details={"step": "load", "document_id": str(document_id)},
            ) from e

    async def _write(self, document_id: UUID, update: ReviewUpdate) -> DocumentRecord:
        try:
            return await asyncio.wait_for(
                self.repository.update_review_status(document_id, update),
                self.repository_timeout,
            )
        except RecordNotFound as e:
            raise DocumentNotFoundError(document_id) from e
        except StaleReviewStatus as e:
            logger.warning(
                f"Review conflict: document_id={document_id}, "
                f"expected={update.expected_status.value}, target={update.review_status.value}"
            )
            raise ReviewConflictError(document_id, update.expected_status.value) from e
        except Exception as e:
            logger.error(
                f"Review write failed: document_id={document_id}, target={update.review_status.value}",
                exc_info=True,
            )
            raise PersistFailedError(
                "Failed to save the review decision",
                details={"step": "review_update", "document_id": str(document_id)},
            ) from e
