"""
Infrastructure exceptions for the helper document service.

This module defines infrastructure-level exceptions related to
blob storage operations.
"""

from src.domain.exceptions import CaseworkException


# Storage Exceptions
class StorageException(CaseworkException):
    """Base exception for storage operations (transient backend failures)."""

    pass


class StorageNotFoundError(StorageException):
    """Object not found in storage."""

    def __init__(self, file_path: str):
        super().__init__(
            f"File not found: {file_path}",
            "STORAGE_NOT_FOUND",
            {"file_path": file_path},
        )


class StorageUploadError(StorageException):
    """Object upload failed."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            f"Failed to upload file: {file_path}",
            "STORAGE_UPLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """Object download failed."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            f"Failed to download file: {file_path}",
            "STORAGE_DOWNLOAD_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """Object deletion failed."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(
            f"Failed to delete file: {file_path}",
            "STORAGE_DELETE_ERROR",
            {"file_path": file_path, "reason": reason},
        )


class StorageListError(StorageException):
    """Listing a prefix failed."""

    def __init__(self, prefix: str, reason: str):
        super().__init__(
            f"Failed to list prefix: {prefix}",
            "STORAGE_LIST_ERROR",
            {"prefix": prefix, "reason": reason},
        )


class StorageNotSupportedError(StorageException):
    """Operation not supported by this storage backend."""

    def __init__(self, operation: str, backend: str):
        super().__init__(
            f"Operation '{operation}' not supported by {backend} backend",
            "STORAGE_NOT_SUPPORTED",
            {"operation": operation, "backend": backend},
        )


class StoragePermissionError(StorageException):
    """Key resolves outside the storage root."""

    def __init__(self, file_path: str, operation: str):
        super().__init__(
            f"Permission denied for {operation} on {file_path}",
            "STORAGE_PERMISSION_ERROR",
            {"file_path": file_path, "operation": operation},
        )
