"""
Blob storage protocol for helper document storage.

Provides abstract interface for object storage backends following
Dependency Inversion Principle (DIP) - enables switching between
local filesystem, S3, MinIO, Supabase storage, etc. without domain logic changes.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, BinaryIO, Protocol


class IBlobStore(Protocol):
    """
    Protocol for object storage backends (DIP compliance).

    Implementations:
    - LocalStorageService: Filesystem storage with atomic writes
    - S3StorageService: AWS S3 or any S3-compatible storage
    """

    async def put(
        self,
        storage_key: str,
        file_data: BinaryIO | bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Write an object, replacing any existing content at the key.

        Returns:
            dict: storage_key, checksum (SHA-256 hex), size, uploaded_at

        Raises:
            StorageUploadError: If the write fails
        """
        ...

    async def get(self, storage_key: str) -> bytes:
        """
        Read a whole object.

        Raises:
            StorageNotFoundError: If the key does not exist
            StorageDownloadError: If the read fails
        """
        ...

    async def delete(self, storage_key: str) -> None:
        """
        Remove an object.

        Raises:
            StorageNotFoundError: If the key does not exist (never a silent no-op)
            StorageDeleteError: If deletion fails
        """
        ...

    async def list(self, prefix: str) -> list[str]:
        """
        All keys under a prefix, sorted. Operational use (reconciliation).

        Raises:
            StorageListError: If listing fails
        """
        ...

    async def exists(self, storage_key: str) -> bool:
        """Check if an object exists"""
        ...

    async def generate_download_url(
        self, storage_key: str, expiration: timedelta = timedelta(hours=1)
    ) -> str:
        """
        URL for direct reads without proxying through the API.

        Raises:
            StorageNotFoundError: If the key does not exist
            StorageNotSupportedError: If the backend cannot serve direct URLs
        """
        ...
