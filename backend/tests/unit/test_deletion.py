"""Unit tests for DocumentDeletionService"""

from uuid import uuid4

import pytest

from domain.documents.errors import (
    AccessDeniedError,
    DocumentNotFoundError,
    PersistFailedError,
    StorageDeleteFailedError,
)


class TestDeletion:

    @pytest.mark.asyncio
    async def test_admin_deletes_blob_then_record(self, deletion_service, storage, repository, make_record, admin_id):
        record = await make_record()

        deleted = await deletion_service.delete(record.id, admin_id)

        assert deleted.id == record.id
        assert storage.delete_calls == [record.storage_key]
        assert storage.blobs == {}
        assert repository.records == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor", ["student", "reviewer"])
    async def test_only_admins_may_delete(self, deletion_service, repository, make_record, student_id, reviewer_id, actor):
        record = await make_record()
        actor_id = student_id if actor == "student" else reviewer_id

        with pytest.raises(AccessDeniedError):
            await deletion_service.delete(record.id, actor_id)

        assert record.id in repository.records

    @pytest.mark.asyncio
    async def test_unknown_document(self, deletion_service, admin_id):
        with pytest.raises(DocumentNotFoundError):
            await deletion_service.delete(uuid4(), admin_id)

    @pytest.mark.asyncio
    async def test_missing_blob_still_deletes_record(self, deletion_service, storage, repository, make_record, admin_id):
        record = await make_record()
        storage.blobs.clear()

        await deletion_service.delete(record.id, admin_id)

        assert repository.records == {}

    @pytest.mark.asyncio
    async def test_blob_delete_failure_keeps_record(self, deletion_service, storage, repository, make_record, admin_id):
        """Test the record survives so the delete can be retried"""
        record = await make_record()
        storage.fail_delete = True

        with pytest.raises(StorageDeleteFailedError):
            await deletion_service.delete(record.id, admin_id)

        assert record.id in repository.records

    @pytest.mark.asyncio
    async def test_record_delete_failure(self, deletion_service, storage, repository, make_record, admin_id):
        record = await make_record()
        repository.fail_delete = True

        with pytest.raises(PersistFailedError):
            await deletion_service.delete(record.id, admin_id)

        assert storage.blobs == {}
