""" Repository module for the persistence layer. """

from src.infrastructure.persistence.repositories.base import BaseRepository
from src.infrastructure.persistence.repositories.document_repo import DocumentRepository
from src.infrastructure.persistence.repositories.helper_repo import HelperRepository

__all__ = [
    "BaseRepository",
    "DocumentRepository",
    "HelperRepository",
]
