"""
Base repository shared by every model repository.
"""
from typing import Generic, TypeVar, Type, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic create/get for an integer-keyed model.

    Repositories only flush; committing belongs to the caller's unit_of_work.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, **kwargs) -> ModelType:
        """
        Add a new row and flush it so its id is available.

        Example:
            ```python
            message = await message_repo.create(conversation_id=1, participation_id=3, body="hi")
            ```
        """
        instance = self.model(**kwargs)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def get(self, id: int) -> Optional[ModelType]:
        """Get a row by id, or None."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()
