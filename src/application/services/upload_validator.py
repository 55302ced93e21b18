"""
Upload validation.

Checks an incoming multipart upload against an explicit UploadPolicy before
any byte is written to the blob store.
"""

from dataclasses import dataclass, field

from src.domain.exceptions import (PayloadTooLargeError,
                                   UnsupportedMediaTypeError,
                                   ValidationException)

DEFAULT_MAX_PAYLOAD_BYTES = 50 * 1024 * 1024

DEFAULT_ALLOWED_MIME_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied to a single upload."""

    max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    allowed_mime_types: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_ALLOWED_MIME_TYPES)
    )


def normalize_content_type(content_type: str | None) -> str:
    """Strip parameters and case: 'Application/PDF; charset=x' -> 'application/pdf'"""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class UploadValidator:
    """
    Validates content type and sizes of an upload.

    Raises:
        UnsupportedMediaTypeError: content type not on the allow-list
        PayloadTooLargeError: file or a form field exceeds the ceiling
        ValidationException: empty payload or negative sizes
    """

    def __init__(self, policy: UploadPolicy | None = None) -> None:
        self.policy = policy or UploadPolicy()

    def validate(
        self, content_type: str | None, size_bytes: int, field_size_bytes: int = 0
    ) -> None:
        mime_type = normalize_content_type(content_type)
        if mime_type not in self.policy.allowed_mime_types:
            raise UnsupportedMediaTypeError(
                content_type or "", sorted(self.policy.allowed_mime_types)
            )

        if size_bytes < 0 or field_size_bytes < 0:
            raise ValidationException("Sizes must not be negative", field="size_bytes")
        if size_bytes == 0:
            raise ValidationException("Uploaded file is empty", field="file")

        if size_bytes > self.policy.max_payload_bytes:
            raise PayloadTooLargeError(size_bytes, self.policy.max_payload_bytes)

        # Form fields share the ceiling but are checked on their own
        if field_size_bytes > self.policy.max_payload_bytes:
            raise PayloadTooLargeError(
                field_size_bytes, self.policy.max_payload_bytes, field="form_field"
            )
