"""Unit tests for DocumentReviewService"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from domain.documents import DocumentReviewService, ReviewStatus
from domain.documents.errors import (
    AccessDeniedError,
    DirectoryUnavailableError,
    DocumentNotFoundError,
    InvalidTransitionError,
    PersistFailedError,
    ReasonRequiredError,
    ReviewConflictError,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def review_service(repository, directory):
    return DocumentReviewService(repository=repository, identity=directory, clock=lambda: FIXED_NOW)


class TestTransitions:

    @pytest.mark.asyncio
    async def test_approve_stamps_reviewer(self, review_service, repository, make_record, reviewer_id):
        record = await make_record()

        result = await review_service.transition(record.id, ReviewStatus.APPROVED, reviewer_id, notes="  ok  ")

        assert result.changed is True
        assert result.previous_status == ReviewStatus.PENDING_REVIEW
        assert result.document.review_status == ReviewStatus.APPROVED
        assert result.document.reviewed_by == reviewer_id
        assert result.document.reviewed_at == FIXED_NOW
        assert result.document.review_notes == "ok"
        assert repository.records[record.id].review_status == ReviewStatus.APPROVED

    @pytest.mark.asyncio
    async def test_reject_with_reason(self, review_service, make_record, reviewer_id):
        record = await make_record()

        result = await review_service.transition(
            record.id, "REJECTED", reviewer_id, reason="  Arquivo ilegível  "
        )

        assert result.document.review_status == ReviewStatus.REJECTED
        assert result.document.rejection_reason == "Arquivo ilegível"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [
        ReviewStatus.REJECTED,
        ReviewStatus.NEEDS_REPLACEMENT,
        ReviewStatus.NEEDS_ADDITIONAL_INFO,
    ])
    @pytest.mark.parametrize("reason", [None, "", "   "])
    async def test_reason_required(self, review_service, repository, make_record, reviewer_id, target, reason):
        """Test gated statuses need a non-blank reason and nothing is written"""
        record = await make_record()

        with pytest.raises(ReasonRequiredError):
            await review_service.transition(record.id, target, reviewer_id, reason=reason)

        assert repository.update_calls == 0
        assert repository.records[record.id].review_status == ReviewStatus.PENDING_REVIEW

    @pytest.mark.asyncio
    async def test_approve_ignores_supplied_reason(self, review_service, make_record, reviewer_id):
        record = await make_record()

        result = await review_service.transition(record.id, "APPROVED", reviewer_id, reason="irrelevant")

        assert result.document.rejection_reason is None

    @pytest.mark.asyncio
    async def test_self_transition_is_noop(self, review_service, repository, make_record, reviewer_id):
        """Test re-applying the current status writes nothing and keeps the stamp"""
        record = await make_record()
        first = await review_service.transition(record.id, "REJECTED", reviewer_id, reason="Faltam páginas")

        other_reviewer = uuid4()
        repository_calls = repository.update_calls
        review_service.identity.roles[other_reviewer] = review_service.identity.roles[reviewer_id]
        second = await review_service.transition(record.id, "REJECTED", other_reviewer)

        assert second.changed is False
        assert second.previous_status == ReviewStatus.REJECTED
        assert repository.update_calls == repository_calls
        assert second.document.reviewed_by == first.document.reviewed_by == reviewer_id
        assert second.document.rejection_reason == "Faltam páginas"

    @pytest.mark.asyncio
    async def test_terminal_status_cannot_change(self, review_service, make_record, reviewer_id):
        record = await make_record()
        await review_service.transition(record.id, "APPROVED", reviewer_id)

        with pytest.raises(InvalidTransitionError):
            await review_service.transition(record.id, "UNDER_REVIEW", reviewer_id)

    @pytest.mark.asyncio
    async def test_reason_checked_before_graph(self, review_service, make_record, reviewer_id):
        """Test a reasonless gated target from a terminal status reports the reason"""
        record = await make_record()
        await review_service.transition(record.id, "APPROVED", reviewer_id)

        with pytest.raises(ReasonRequiredError):
            await review_service.transition(record.id, "REJECTED", reviewer_id)

    @pytest.mark.asyncio
    async def test_unknown_document(self, review_service, reviewer_id):
        with pytest.raises(DocumentNotFoundError):
            await review_service.transition(uuid4(), "APPROVED", reviewer_id)


class TestAuthorizationAndFailures:

    @pytest.mark.asyncio
    async def test_student_cannot_review(self, review_service, make_record, student_id):
        record = await make_record()

        with pytest.raises(AccessDeniedError):
            await review_service.transition(record.id, "APPROVED", student_id)

    @pytest.mark.asyncio
    async def test_identity_outage(self, review_service, directory, make_record, reviewer_id):
        record = await make_record()
        directory.fail_identity = True

        with pytest.raises(DirectoryUnavailableError):
            await review_service.transition(record.id, "APPROVED", reviewer_id)

    @pytest.mark.asyncio
    async def test_concurrent_review_conflict(self, review_service, repository, make_record, reviewer_id):
        """Test losing a compare-and-set race raises a conflict, not a silent overwrite"""
        record = await make_record()
        repository.race_to = ReviewStatus.APPROVED

        with pytest.raises(ReviewConflictError):
            await review_service.transition(record.id, "REJECTED", reviewer_id, reason="Ilegível")

        assert repository.records[record.id].review_status == ReviewStatus.APPROVED
        assert repository.records[record.id].rejection_reason is None

    @pytest.mark.asyncio
    async def test_write_failure_keeps_status(self, review_service, repository, make_record, reviewer_id):
        record = await make_record()
        repository.fail_update = True

        with pytest.raises(PersistFailedError):
            await review_service.transition(record.id, "APPROVED", reviewer_id)

        assert repository.records[record.id].review_status == ReviewStatus.PENDING_REVIEW

    @pytest.mark.asyncio
    async def test_load_failure(self, review_service, repository, make_record, reviewer_id):
        record = await make_record()
        repository.fail_get = True

        with pytest.raises(PersistFailedError):
            await review_service.transition(record.id, "APPROVED", reviewer_id)
