"""
S3-compatible blob store (AWS S3, MinIO, Supabase storage S3 endpoint).

Features:
- SHA-256 checksum stored as object metadata
- Pre-signed URLs with expiration
- Paginated prefix listing for reconciliation
"""

from __future__ import annotations

import hashlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, BinaryIO

import aioboto3
from botocore.exceptions import ClientError

from src.infrastructure.exceptions import (StorageDeleteError,
                                           StorageDownloadError,
                                           StorageListError,
                                           StorageNotFoundError,
                                           StorageUploadError)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


def _object_metadata(checksum: str, size: int, custom: dict[str, str] | None) -> dict[str, str]:
    """S3 user metadata; keys must be lowercase with hyphens"""
    metadata = {"sha256": checksum, "original-size": str(size)}
    for key, value in (custom or {}).items():
        metadata[key.lower().replace("_", "-")] = value
    return metadata


class S3StorageService:
    """
    S3-compatible object storage.

    Object keys: {owner_id}/{cuid}-{file name}

    Backend errors are wrapped in Storage*Error; a missing object is always
    StorageNotFoundError.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ):
        """
        Args:
            bucket: S3 bucket name
            region: AWS region (default: us-east-1)
            endpoint_url: Custom endpoint for MinIO/Supabase (optional)
            access_key: AWS access key (optional, uses IAM role if not provided)
            secret_key: AWS secret key (optional, uses IAM role if not provided)
        """
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url

        self.session = aioboto3.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[Any]:
        options = {"endpoint_url": self.endpoint_url} if self.endpoint_url else {}
        async with self.session.client("s3", **options) as s3:
            yield s3

    async def _head(self, s3: Any, storage_key: str) -> dict[str, Any]:
        """head_object that maps a missing key to StorageNotFoundError"""
        try:
            return await s3.head_object(Bucket=self.bucket, Key=storage_key)
        except ClientError as e:
            if _is_not_found(e):
                raise StorageNotFoundError(file_path=storage_key) from e
            raise

    async def put(
        self,
        storage_key: str,
        file_data: BinaryIO | bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Upload an object, replacing existing content at the key.

        Raises:
            StorageUploadError: If upload fails
        """
        if isinstance(file_data, bytes):
            content = file_data
        else:
            file_data.seek(0)
            content = file_data.read()
        checksum = hashlib.sha256(content).hexdigest()

        try:
            async with self._client() as s3:
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=storage_key,
                    Body=content,
                    ContentType=content_type,
                    Metadata=_object_metadata(checksum, len(content), metadata),
                )
                head = await s3.head_object(Bucket=self.bucket, Key=storage_key)
        except Exception as e:
            raise StorageUploadError(file_path=storage_key, reason=str(e)) from e

        return {
            "storage_key": storage_key,
            "checksum": checksum,
            "size": len(content),
            "uploaded_at": head["LastModified"].isoformat(),
        }

    async def get(self, storage_key: str) -> bytes:
        """
        Read a whole object.

        Raises:
            StorageNotFoundError: If object doesn't exist
            StorageDownloadError: If download fails
        """
        chunks: list[bytes] = []
        try:
            async with self._client() as s3:
                try:
                    response = await s3.get_object(Bucket=self.bucket, Key=storage_key)
                except ClientError as e:
                    if _is_not_found(e):
                        raise StorageNotFoundError(file_path=storage_key) from e
                    raise

                async with response["Body"] as stream:
                    while True:
                        chunk = await stream.read(self.CHUNK_SIZE)
                        if not chunk:
                            break
                        chunks.append(chunk)
        except StorageNotFoundError:
            raise
        except Exception as e:
            raise StorageDownloadError(file_path=storage_key, reason=str(e)) from e

        return b"".join(chunks)

    async def delete(self, storage_key: str) -> None:
        """
        Delete an object.

        S3 deletes are silent for missing keys, so existence is checked first.

        Raises:
            StorageNotFoundError: If object doesn't exist
            StorageDeleteError: If deletion fails
        """
        try:
            async with self._client() as s3:
                await self._head(s3, storage_key)
                await s3.delete_object(Bucket=self.bucket, Key=storage_key)
        except StorageNotFoundError:
            raise
        except Exception as e:
            raise StorageDeleteError(file_path=storage_key, reason=str(e)) from e

    async def list(self, prefix: str) -> list[str]:
        """
        All keys under a prefix, sorted.

        Raises:
            StorageListError: If listing fails
        """
        keys: list[str] = []
        try:
            async with self._client() as s3:
                paginator = s3.get_paginator("list_objects_v2")
                async for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                    keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except Exception as e:
            raise StorageListError(prefix=prefix, reason=str(e)) from e
        return sorted(keys)

    async def exists(self, storage_key: str) -> bool:
        try:
            async with self._client() as s3:
                await self._head(s3, storage_key)
        except StorageNotFoundError:
            return False
        except Exception as e:
            raise StorageDownloadError(file_path=storage_key, reason=str(e)) from e
        return True

    async def generate_download_url(
        self, storage_key: str, expiration: timedelta = timedelta(hours=1)
    ) -> str:
        """
        Pre-signed GET URL for an existing object.

        Raises:
            StorageNotFoundError: If object doesn't exist
            StorageDownloadError: If signing fails
        """
        try:
            async with self._client() as s3:
                await self._head(s3, storage_key)
                url: str = await s3.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": self.bucket, "Key": storage_key},
                    ExpiresIn=int(expiration.total_seconds()),
                )
        except StorageNotFoundError:
            raise
        except Exception as e:
            raise StorageDownloadError(file_path=storage_key, reason=str(e)) from e

        return url
