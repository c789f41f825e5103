"""Shared repository base helpers."""
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Base repository with common DB helpers."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self):
        """Commit the pending unit of work."""
        await self.db.commit()

    async def rollback(self):
        """Discard the pending unit of work."""
        await self.db.rollback()
