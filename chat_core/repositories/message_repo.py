"""
Message repository for database operations.
Handles message creation, locking and per-participant last-message lookups.
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.models.conversation import Participation
from chat_core.models.message import Message, MessageNotification
from chat_core.models.participant import ParticipantRef, participant_clause
from chat_core.repositories.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for message database operations."""

    def __init__(self, db: AsyncSession):
        """Initialize message repository."""
        super().__init__(Message, db)

    async def get_for_update(self, message_id: int) -> Optional[Message]:
        """
        Get a message and lock its row until the transaction ends.

        Concurrent deleters of the same message queue up behind this lock, so
        the active-notification recount that follows is consistent.
        SQLite has no row locks; there the database-level write lock applies.

        Args:
            message_id: Message id

        Returns:
            Locked message or None
        """
        result = await self.db.execute(
            select(Message)
            .where(Message.id == message_id)
            .with_for_update(of=Message)
        )
        return result.scalar_one_or_none()

    async def get_last_for_participant(
        self,
        participant: ParticipantRef,
        conversation_ids: List[int]
    ) -> Dict[int, Tuple[Message, MessageNotification, Optional[Participation]]]:
        """
        Newest message per conversation that the participant still sees.

        Messages whose notification for this participant is soft-deleted are
        skipped, so a participant who deleted the newest message gets the
        next-newest one instead.

        Args:
            participant: Participant reference
            conversation_ids: Conversations to look at

        Returns:
            Mapping of conversation id to (message, participant's notification,
            sender participation or None)
        """
        if not conversation_ids:
            return {}

        ranked = (
            select(
                Message.id.label("message_id"),
                MessageNotification.id.label("notification_id"),
                func.row_number().over(
                    partition_by=Message.conversation_id,
                    order_by=(Message.created_at.desc(), Message.id.desc())
                ).label("position")
            )
            .join(MessageNotification, MessageNotification.message_id == Message.id)
            .where(
                and_(
                    Message.conversation_id.in_(conversation_ids),
                    participant_clause(MessageNotification, participant),
                    MessageNotification.deleted.is_(False)
                )
            )
            .subquery()
        )

        result = await self.db.execute(
            select(Message, MessageNotification, Participation)
            .join(ranked, ranked.c.message_id == Message.id)
            .join(MessageNotification, MessageNotification.id == ranked.c.notification_id)
            .outerjoin(Participation, Participation.id == Message.participation_id)
            .where(ranked.c.position == 1)
        )

        return {
            message.conversation_id: (message, notification, sender)
            for message, notification, sender in result.all()
        }
