"""
Domain exceptions for the helper document service.

This module defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns.
"""

from typing import Any


class CaseworkException(Exception):
    """
    Base exception for all application errors.

    All custom exceptions should inherit from this class to allow
    for consistent error handling and logging.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CaseworkException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidOwnerIdError(CaseworkException):
    """Owner id cannot be used as a storage namespace."""

    def __init__(self, owner_id: str):
        super().__init__(
            f"Invalid owner id: {owner_id!r}",
            "INVALID_OWNER_ID",
            {"owner_id": owner_id},
        )


class OwnerNotFoundError(CaseworkException):
    """Raised when the target helper does not exist."""

    def __init__(self, owner_id: str):
        super().__init__(
            f"Helper not found: {owner_id}",
            "OWNER_NOT_FOUND",
            {"owner_id": owner_id},
        )


class UnsupportedMediaTypeError(CaseworkException):
    """Content type is not on the upload allow-list."""

    def __init__(self, content_type: str, allowed: list[str]):
        super().__init__(
            f"Content type '{content_type}' not allowed",
            "UNSUPPORTED_MEDIA_TYPE",
            {"content_type": content_type, "allowed": allowed},
        )


class PayloadTooLargeError(CaseworkException):
    """Payload or form field exceeds the configured ceiling."""

    def __init__(self, size_bytes: int, max_bytes: int, field: str = "file"):
        super().__init__(
            f"{field} size {size_bytes} bytes exceeds maximum allowed size of {max_bytes} bytes",
            "PAYLOAD_TOO_LARGE",
            {"field": field, "size_bytes": size_bytes, "max_bytes": max_bytes},
        )


class ForbiddenError(CaseworkException):
    """Storage key is outside the requesting owner's namespace."""

    def __init__(self, storage_key: str, owner_id: str):
        super().__init__(
            "Document does not belong to this helper",
            "FORBIDDEN",
            {"storage_key": storage_key, "owner_id": owner_id},
        )


class DocumentNotFoundError(CaseworkException):
    """Neither blob nor metadata exists for the storage key."""

    def __init__(self, storage_key: str):
        super().__init__(
            f"Document not found: {storage_key}",
            "DOCUMENT_NOT_FOUND",
            {"storage_key": storage_key},
        )
