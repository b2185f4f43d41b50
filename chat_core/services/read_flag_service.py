"""
Read and flag state per participant.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.core.cache import (
    cache_unread_count,
    get_cached_unread_count,
    invalidate_unread_count_cache
)
from chat_core.core.database import unit_of_work
from chat_core.core.exceptions import NotificationNotFound
from chat_core.models.message import MessageNotification
from chat_core.models.participant import ParticipantRef
from chat_core.repositories.notification_repo import MessageNotificationRepository

logger = logging.getLogger(__name__)


class ReadFlagService:
    """Read/unread and flag toggling on a participant's message notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notification_repo = MessageNotificationRepository(db)

    async def _require_notification(
        self,
        message_id: int,
        participant: ParticipantRef,
        for_update: bool = False
    ) -> MessageNotification:
        notification = await self.notification_repo.find(message_id, participant, for_update=for_update)
        if notification is None:
            raise NotificationNotFound(message_id, participant)
        return notification

    async def mark_read(self, message_id: int, participant: ParticipantRef) -> MessageNotification:
        """
        Mark a message read for a participant.

        Idempotent on is_seen; the read timestamp moves forward on every call.

        Raises:
            NotificationNotFound: If the participant has no active notification
        """
        # Checked before the write transaction so a miss rolls nothing back
        await self._require_notification(message_id, participant)

        async with unit_of_work(self.db):
            notification = await self._require_notification(message_id, participant, for_update=True)
            await self.notification_repo.mark_seen(notification)

        await invalidate_unread_count_cache(participant.kind, participant.id)
        return notification

    async def flagged(self, message_id: int, participant: ParticipantRef) -> bool:
        """True if the participant has an active notification for the message and flagged it."""
        notification = await self.notification_repo.find(message_id, participant)
        return bool(notification and notification.flagged)

    async def toggle_flag(self, message_id: int, participant: ParticipantRef) -> bool:
        """
        Flip the participant's flag on a message.

        Returns:
            The new flagged value

        Raises:
            NotificationNotFound: If the participant has no active notification
        """
        await self._require_notification(message_id, participant)

        async with unit_of_work(self.db):
            notification = await self._require_notification(message_id, participant, for_update=True)
            await self.notification_repo.set_flagged(notification, not notification.flagged)

        logger.debug(f"Message {message_id} flagged={notification.flagged} for {participant}")
        return notification.flagged

    async def unread_count(self, participant: ParticipantRef) -> int:
        """
        Count a participant's unread messages across all conversations.

        Read-through cache: served from Redis when present, otherwise counted
        and cached.
        """
        cached = await get_cached_unread_count(participant.kind, participant.id)
        if cached is not None:
            return cached

        count = await self.notification_repo.count_unread(participant)
        await cache_unread_count(participant.kind, participant.id, count)
        return count
