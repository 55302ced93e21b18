"""
Repository interfaces (ports) for the application layer.

These protocols define the contracts the document service depends on.
Following Dependency Inversion Principle (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from src.infrastructure.persistence.models.document import HelperDocument


class IHelperDirectory(Protocol):
    """Protocol for the external helper directory (DIP)"""

    async def exists(self, owner_id: str) -> bool:
        """Check whether a helper with this id exists"""
        ...


class IDocumentMetadataStore(Protocol):
    """Protocol for document metadata persistence (DIP)"""

    async def create(self, obj: HelperDocument) -> HelperDocument:
        """Persist a new record"""
        ...

    async def list_by_owner(self, owner_id: str) -> list[HelperDocument]:
        """All records of an owner, most recent upload first"""
        ...

    async def get_by_key(self, storage_key: str) -> HelperDocument | None:
        """Record addressed by a storage key"""
        ...

    async def delete_by_key(self, storage_key: str) -> None:
        """Remove the record for a key; raises DocumentNotFoundError if absent"""
        ...

    async def list_keys_by_owner(self, owner_id: str) -> list[str]:
        """Storage keys of all records of an owner"""
        ...
