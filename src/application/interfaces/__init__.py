"""
Application layer interfaces (ports).

These protocols define the contracts between the application layer
and the infrastructure layer, following the Dependency Inversion Principle.
"""

from src.application.interfaces.services import (IDocumentMetadataStore,
                                                 IHelperDirectory)
from src.application.interfaces.storage import IBlobStore

__all__ = [
    # Repository interfaces
    "IDocumentMetadataStore",
    "IHelperDirectory",
    # Storage interface
    "IBlobStore",
]
