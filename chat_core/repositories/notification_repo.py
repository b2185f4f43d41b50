"""
Message notification repository for database operations.
Handles the per-participant read, flagged and deleted state of messages.
"""
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.models.conversation import Participation
from chat_core.models.message import Message, MessageNotification
from chat_core.models.participant import ParticipantRef, participant_clause
from chat_core.repositories.base import BaseRepository
from chat_core.utils.datetime_utils import utc_now


class MessageNotificationRepository(BaseRepository[MessageNotification]):
    """Repository for message notification operations."""

    def __init__(self, db: AsyncSession):
        """Initialize message notification repository."""
        super().__init__(MessageNotification, db)

    async def create_many(
        self,
        message: Message,
        participations: Iterable[Participation]
    ) -> List[MessageNotification]:
        """
        Fan a message out to every participation of its conversation.

        The sender's own row starts as seen; everyone else starts unseen.

        Args:
            message: Freshly created message
            participations: All participations of the message's conversation

        Returns:
            Created notifications, one per participation
        """
        notifications = []
        for participation in participations:
            is_sender = participation.id == message.participation_id
            notifications.append(
                MessageNotification(
                    message_id=message.id,
                    conversation_id=message.conversation_id,
                    participation_id=participation.id,
                    messageable_type=participation.messageable_type,
                    messageable_id=participation.messageable_id,
                    is_seen=is_sender,
                    is_sender=is_sender,
                    flagged=False,
                    deleted=False,
                    created_at=message.created_at
                )
            )

        self.db.add_all(notifications)
        await self.db.flush()
        return notifications

    async def find(
        self,
        message_id: int,
        participant: ParticipantRef,
        for_update: bool = False
    ) -> Optional[MessageNotification]:
        """
        Get a participant's active notification for a message.

        Args:
            message_id: Message id
            participant: Participant reference
            for_update: Lock the row until the transaction ends

        Returns:
            Active notification or None when absent or soft-deleted
        """
        query = select(MessageNotification).where(
            and_(
                MessageNotification.message_id == message_id,
                participant_clause(MessageNotification, participant),
                MessageNotification.deleted.is_(False)
            )
        )

        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def soft_delete(self, notification: MessageNotification) -> MessageNotification:
        """
        Remove a message from one participant's view.

        Callers hold the message row lock, so two deleters of the same
        notification never both see it active.
        """
        notification.deleted = True
        await self.db.flush()
        return notification

    async def count_active(self, message_id: int) -> int:
        """Count notifications of a message that are not soft-deleted."""
        result = await self.db.execute(
            select(func.count())
            .select_from(MessageNotification)
            .where(
                and_(
                    MessageNotification.message_id == message_id,
                    MessageNotification.deleted.is_(False)
                )
            )
        )
        return result.scalar() or 0

    async def count_unread(self, participant: ParticipantRef) -> int:
        """Count a participant's active, unseen notifications across all conversations."""
        result = await self.db.execute(
            select(func.count())
            .select_from(MessageNotification)
            .where(
                and_(
                    participant_clause(MessageNotification, participant),
                    MessageNotification.is_seen.is_(False),
                    MessageNotification.deleted.is_(False)
                )
            )
        )
        return result.scalar() or 0

    async def count_unread_by_conversation(
        self,
        participant: ParticipantRef,
        conversation_ids: List[int]
    ) -> Dict[int, int]:
        """
        Unread tally per conversation for one participant.

        Conversations without unread notifications are absent from the result.
        """
        if not conversation_ids:
            return {}

        result = await self.db.execute(
            select(MessageNotification.conversation_id, func.count())
            .where(
                and_(
                    MessageNotification.conversation_id.in_(conversation_ids),
                    participant_clause(MessageNotification, participant),
                    MessageNotification.is_seen.is_(False),
                    MessageNotification.deleted.is_(False)
                )
            )
            .group_by(MessageNotification.conversation_id)
        )
        return {conversation_id: count for conversation_id, count in result.all()}

    async def mark_seen(self, notification: MessageNotification) -> MessageNotification:
        """Mark a notification seen and stamp its read timestamp."""
        notification.is_seen = True
        notification.updated_at = utc_now()
        await self.db.flush()
        return notification

    async def set_flagged(self, notification: MessageNotification, flagged: bool) -> MessageNotification:
        """Set the flagged state of a notification."""
        notification.flagged = flagged
        await self.db.flush()
        return notification

