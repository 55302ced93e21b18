from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.exceptions import DocumentNotFoundError
from src.infrastructure.persistence.models.document import HelperDocument
from src.infrastructure.persistence.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[HelperDocument]):
    """Metadata store for helper documents."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, HelperDocument)

    async def list_by_owner(self, owner_id: str) -> list[HelperDocument]:
        """Get all documents of a helper, most recent upload first"""
        result = await self.db.execute(
            select(HelperDocument)
            .where(HelperDocument.owner_id == owner_id)
            .order_by(HelperDocument.created_at.desc(), HelperDocument.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_key(self, storage_key: str) -> HelperDocument | None:
        """Get the document addressed by a storage key"""
        result = await self.db.execute(
            select(HelperDocument).where(HelperDocument.storage_key == storage_key)
        )
        return result.scalar_one_or_none()

    async def delete_by_key(self, storage_key: str) -> None:
        """Delete the document record for a storage key"""
        document = await self.get_by_key(storage_key)
        if document is None:
            raise DocumentNotFoundError(storage_key)
        await self.delete(document)

    async def list_keys_by_owner(self, owner_id: str) -> list[str]:
        """Storage keys of every record of a helper (for reconciliation)"""
        result = await self.db.execute(
            select(HelperDocument.storage_key)
            .where(HelperDocument.owner_id == owner_id)
            .order_by(HelperDocument.storage_key)
        )
        return list(result.scalars().all())
