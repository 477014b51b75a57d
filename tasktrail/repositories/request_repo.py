"""
Work request repository.
"""
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.models.request import Request
from tasktrail.repositories.base import BaseRepository


class RequestRepository(BaseRepository[Request]):
    """Repository for Request operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Request, session)

    async def get_by_requester(self, requester_id: uuid.UUID) -> List[Request]:
        return await self.list(filters={"requester_id": requester_id})
