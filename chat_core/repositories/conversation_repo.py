"""
Conversation repository for database operations.
Handles conversations, participations, and the participant listing query.
"""
from typing import Dict, Optional, List, Tuple

from sqlalchemy import select, update, func, and_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.models.conversation import Conversation, Participation
from chat_core.models.participant import ParticipantRef, participant_clause
from chat_core.repositories.base import BaseRepository
from chat_core.utils.datetime_utils import utc_now


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversation database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(Conversation, db)

    async def touch(self, conversation_id: int) -> None:
        """
        Bump the conversation's updated_at to now.

        Last writer wins; the value only drives listing order.

        Args:
            conversation_id: Conversation id
        """
        await self.db.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )
        await self.db.flush()

    def _participant_conditions(
        self,
        participant: ParticipantRef,
        private: Optional[bool],
        direct_message: Optional[bool],
        conversation_ids: Optional[List[int]] = None
    ) -> list:
        # Subquery keeps one row per conversation whatever the join fan-out
        participant_subquery = (
            select(Participation.conversation_id)
            .where(participant_clause(Participation, participant))
        )
        conditions = [Conversation.id.in_(participant_subquery)]

        if conversation_ids is not None:
            conditions.append(Conversation.id.in_(conversation_ids))

        if private is not None:
            conditions.append(Conversation.private == private)

        if direct_message is not None:
            conditions.append(Conversation.direct_message == direct_message)

        return conditions

    async def get_participant_conversations(
        self,
        participant: ParticipantRef,
        private: Optional[bool] = None,
        direct_message: Optional[bool] = None,
        conversation_ids: Optional[List[int]] = None,
        limit: int = 25,
        offset: int = 0
    ) -> Tuple[List[Conversation], int]:
        """
        Get a page of the conversations a participant takes part in.

        Ordered by updated_at descending, ties broken by id descending.
        One row per conversation.

        Args:
            participant: Participant reference
            private: Restrict to private (True) or public (False) conversations
            direct_message: Restrict to 1:1 (True) or group (False) conversations
            conversation_ids: Restrict to these conversations
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (conversations, total matching conversations)
        """
        conditions = self._participant_conditions(
            participant, private, direct_message, conversation_ids
        )

        count_result = await self.db.execute(
            select(func.count())
            .select_from(Conversation)
            .where(and_(*conditions))
        )
        total = count_result.scalar() or 0

        query = (
            select(Conversation)
            .where(and_(*conditions))
            .order_by(desc(Conversation.updated_at), desc(Conversation.id))
            .limit(limit)
            .offset(offset)
        )

        result = await self.db.execute(query)
        return list(result.scalars().all()), total


class ParticipationRepository(BaseRepository[Participation]):
    """Repository for participation lookups."""

    def __init__(self, db: AsyncSession):
        super().__init__(Participation, db)

    async def get_for_conversation(self, conversation_id: int) -> List[Participation]:
        """
        Get all participations of a conversation.

        Args:
            conversation_id: Conversation id

        Returns:
            Participations ordered by id
        """
        result = await self.db.execute(
            select(Participation)
            .where(Participation.conversation_id == conversation_id)
            .order_by(Participation.id)
        )
        return list(result.scalars().all())

    async def get_for_conversations(self, conversation_ids: List[int]) -> Dict[int, List[Participation]]:
        """
        Get participations of several conversations in one query.

        Args:
            conversation_ids: Conversation ids

        Returns:
            Mapping of conversation id to its participations ordered by id
        """
        if not conversation_ids:
            return {}

        result = await self.db.execute(
            select(Participation)
            .where(Participation.conversation_id.in_(conversation_ids))
            .order_by(Participation.conversation_id, Participation.id)
        )

        grouped: Dict[int, List[Participation]] = {conversation_id: [] for conversation_id in conversation_ids}
        for participation in result.scalars().all():
            grouped[participation.conversation_id].append(participation)
        return grouped
