"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other
S3-compatible services.

Architecture: Hexagonal - Adapter implementation in infrastructure layer

boto3 is blocking, so every call runs in the default executor and the
event loop stays free while S3 is slow.
"""

import asyncio
import logging
from functools import partial
from io import BytesIO
from typing import Optional

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from domain.documents.ports.object_storage_port import ObjectStoragePort, StorageError

logger = logging.getLogger(__name__)


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Example:
        config = load_storage_config()
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            public_base_url=config.public_base_url,
        )

        url = await storage.put_file(content, "documents/.../notes.pdf", "application/pdf")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')
            public_base_url: Base URL files are served from (CDN); derived
                from endpoint and bucket when not set

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region
            self.endpoint_url = endpoint_url
            self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    async def _run(self, func, **kwargs):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))

    def build_url(self, storage_key: str) -> str:
        """URL a stored object is reachable at."""
        if self.public_base_url:
            return f"{self.public_base_url}/{storage_key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{storage_key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{storage_key}"

    async def put_file(self, content: bytes, storage_key: str, mime_type: str) -> str:
        """Upload bytes to S3 under storage_key.

        Returns:
            str: URL of the stored file

        Raises:
            StorageError: If upload fails
            ValueError: If content is empty
        """
        if not content:
            raise ValueError("Cannot store empty file")

        try:
            await self._run(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(content),
                ContentType=mime_type,
            )

            logger.info(
                f"Uploaded file: storage_key={storage_key}, "
                f"size={len(content)}, mime_type={mime_type}"
            )
            return self.build_url(storage_key)

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: storage_key={storage_key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}")
            raise StorageError(f"Failed to upload file: {e}")

    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from S3.

        Returns:
            bool: True if deleted, False if didn't exist

        Raises:
            StorageError: If deletion fails
        """
        try:
            if not await self.file_exists(storage_key):
                logger.info(f"File not found for deletion: storage_key={storage_key}")
                return False

            await self._run(
                self.s3_client.delete_object,
                Bucket=self.bucket_name,
                Key=storage_key,
            )

            logger.info(f"Deleted file: storage_key={storage_key}")
            return True

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 deletion failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")

    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in S3 (HEAD request).

        Raises:
            StorageError: For errors other than a missing key
        """
        try:
            await self._run(
                self.s3_client.head_object,
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey", "NotFound"):
                return False
            logger.warning(
                f"Error checking file existence: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to check file: {error_code}")
