"""Application use cases."""

from src.application.use_cases.documents.document_operations import \
    DocumentService

__all__ = [
    "DocumentService",
]
