"""Application services."""

from src.application.services.storage_key_policy import StorageKeyPolicy
from src.application.services.upload_validator import (UploadPolicy,
                                                       UploadValidator)

__all__ = [
    "StorageKeyPolicy",
    "UploadPolicy",
    "UploadValidator",
]
