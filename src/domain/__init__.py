"""
Domain layer - Enterprise Business Rules.

This is the innermost layer containing business entities, enums,
and domain exceptions. It has no dependencies on other layers.
"""

from src.domain.entities import (DocumentDownload, DocumentFields,
                                 ReconciliationReport)
from src.domain.enums import CallerRole, DocumentType
from src.domain.exceptions import (CaseworkException, DocumentNotFoundError,
                                   ForbiddenError, InvalidOwnerIdError,
                                   OwnerNotFoundError, PayloadTooLargeError,
                                   UnsupportedMediaTypeError,
                                   ValidationException)

__all__ = [
    # Entities
    "DocumentDownload",
    "DocumentFields",
    "ReconciliationReport",
    # Enums
    "CallerRole",
    "DocumentType",
    # Exceptions
    "CaseworkException",
    "ValidationException",
    "InvalidOwnerIdError",
    "OwnerNotFoundError",
    "UnsupportedMediaTypeError",
    "PayloadTooLargeError",
    "ForbiddenError",
    "DocumentNotFoundError",
]
