"""Global FastAPI dependencies for actor identity and service wiring.

This module provides:
- get_actor_id: Acting user from the X-Actor-Id header set by the gateway
- get_storage / get_repository / get_directory: Port adapters built from settings
- get_*_service: Document services assembled from the ports

Tests replace the port providers through app.dependency_overrides, so every
service dependency picks up in-memory fakes without touching settings.
"""

from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from config import Settings, get_settings
from database import get_session_factory
from domain.documents import (
    DocumentDeletionService,
    DocumentIngestionService,
    DocumentQueryService,
    DocumentReviewService,
)
from domain.documents.ports import DocumentRepositoryPort, ObjectStoragePort
from infrastructure.directory import HttpDirectoryClient
from infrastructure.repositories.document_repository import SqlDocumentRepository
from infrastructure.storage.s3_storage_adapter import S3StorageAdapter
from infrastructure.storage.storage_config import load_storage_config


def get_actor_id(x_actor_id: Annotated[UUID, Header(alias="X-Actor-Id")]) -> UUID:
    """Extract the acting user's id.

    Authentication happens upstream; the gateway forwards the verified user
    id in X-Actor-Id. A missing or malformed header fails request validation.
    """
    return x_actor_id


@lru_cache()
def get_storage() -> ObjectStoragePort:
    """Dependency for object storage adapter

    Loads storage config from settings and returns a shared S3 adapter.
    """
    config = load_storage_config()
    return S3StorageAdapter(
        endpoint_url=config.endpoint_url,
        access_key=config.access_key,
        secret_key=config.secret_key,
        bucket_name=config.bucket_name,
        region=config.region,
        public_base_url=config.public_base_url,
    )


@lru_cache()
def get_repository() -> DocumentRepositoryPort:
    return SqlDocumentRepository(get_session_factory())


@lru_cache()
def get_directory() -> HttpDirectoryClient:
    settings = get_settings()
    return HttpDirectoryClient(
        base_url=settings.CATALOG_API_URL,
        token=settings.CATALOG_API_TOKEN,
        timeout=settings.DIRECTORY_TIMEOUT_SECONDS,
    )


ActorId = Annotated[UUID, Depends(get_actor_id)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Storage = Annotated[ObjectStoragePort, Depends(get_storage)]
Repository = Annotated[DocumentRepositoryPort, Depends(get_repository)]
Directory = Annotated[HttpDirectoryClient, Depends(get_directory)]


def get_ingestion_service(
    settings: AppSettings,
    storage: Storage,
    repository: Repository,
    directory: Directory,
) -> DocumentIngestionService:
    return DocumentIngestionService(
        storage=storage,
        repository=repository,
        lessons=directory,
        required_locales=settings.REQUIRED_LOCALES,
        max_file_size=settings.MAX_UPLOAD_SIZE_BYTES,
        storage_timeout=settings.STORAGE_TIMEOUT_SECONDS,
        repository_timeout=settings.REPOSITORY_TIMEOUT_SECONDS,
        identity=directory,
    )


def get_review_service(
    settings: AppSettings,
    repository: Repository,
    directory: Directory,
) -> DocumentReviewService:
    return DocumentReviewService(
        repository=repository,
        identity=directory,
        repository_timeout=settings.REPOSITORY_TIMEOUT_SECONDS,
    )


def get_query_service(
    settings: AppSettings,
    repository: Repository,
    directory: Directory,
) -> DocumentQueryService:
    return DocumentQueryService(
        repository=repository,
        identity=directory,
        repository_timeout=settings.REPOSITORY_TIMEOUT_SECONDS,
    )


def get_deletion_service(
    settings: AppSettings,
    storage: Storage,
    repository: Repository,
    directory: Directory,
) -> DocumentDeletionService:
    return DocumentDeletionService(
        storage=storage,
        repository=repository,
        identity=directory,
        storage_timeout=settings.STORAGE_TIMEOUT_SECONDS,
        repository_timeout=settings.REPOSITORY_TIMEOUT_SECONDS,
    )
