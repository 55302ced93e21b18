from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.helper import Helper
from src.infrastructure.persistence.repositories.base import BaseRepository


class HelperRepository(BaseRepository[Helper]):
    """Read access to the helper directory."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Helper)

    async def exists(self, owner_id: str) -> bool:
        """Check whether a helper with this id exists"""
        result = await self.db.execute(select(exists().where(Helper.id == owner_id)))
        return bool(result.scalar())
