"""
Message service containing the message lifecycle.
Handles send with notification fan-out, per-participant trash, and the
"deleted for everyone" transition.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.config import settings
from chat_core.core.cache import invalidate_unread_count_cache
from chat_core.core.database import unit_of_work
from chat_core.core.events import AllParticipantsDeletedMessage, EventSink, MessageSent
from chat_core.core.exceptions import ConversationNotFound, ParticipantNotAuthorized
from chat_core.models.conversation import Participation
from chat_core.models.message import DEFAULT_MESSAGE_TYPE, Message, MessageNotification
from chat_core.models.participant import ParticipantRef
from chat_core.repositories.conversation_repo import ConversationRepository, ParticipationRepository
from chat_core.repositories.message_repo import MessageRepository
from chat_core.repositories.notification_repo import MessageNotificationRepository
from chat_core.schemas.message import MessageResponse
from chat_core.services.sender_projector import DefaultSenderProjector, SenderProjector

logger = logging.getLogger(__name__)


class MessageService:
    """Service for the message lifecycle with business logic."""

    def __init__(
        self,
        db: AsyncSession,
        event_sink: EventSink,
        sender_projector: Optional[SenderProjector] = None
    ):
        """
        Initialize message service.

        Args:
            db: Database session
            event_sink: Receives MessageSent and AllParticipantsDeletedMessage
            sender_projector: Builds the sender field of MessageSent payloads
        """
        self.db = db
        self.message_repo = MessageRepository(db)
        self.notification_repo = MessageNotificationRepository(db)
        self.conversation_repo = ConversationRepository(db)
        self.participation_repo = ParticipationRepository(db)
        self.event_sink = event_sink
        self.sender_projector = sender_projector or DefaultSenderProjector()

    async def build_response(
        self,
        message: Message,
        sender: Optional[Participation]
    ) -> MessageResponse:
        """
        Project a message for event consumers.

        Args:
            message: Message instance
            sender: The message's participation, if it still exists

        Returns:
            MessageResponse with the projected sender
        """
        sender_ref = ParticipantRef.of(sender) if sender is not None else None
        return MessageResponse(
            id=message.id,
            body=message.body,
            conversation_id=message.conversation_id,
            type=message.type,
            data=message.data or {},
            created_at=message.created_at,
            sender=await self.sender_projector.project(sender_ref)
        )

    async def send(
        self,
        conversation_id: int,
        body: str,
        participation_id: int,
        type: str = DEFAULT_MESSAGE_TYPE,
        data: Optional[Dict[str, Any]] = None,
        skip_sid: Optional[str] = None
    ) -> Message:
        """
        Send a message and fan it out to every participant.

        The message, one notification per participation (sender included) and
        the conversation touch are committed together or not at all.

        Args:
            conversation_id: Target conversation id
            body: Message text
            participation_id: Sender's participation id
            type: Message type tag
            data: Opaque structured payload
            skip_sid: Socket id of the sending client, excluded from the MessageSent broadcast

        Returns:
            Created message

        Raises:
            ConversationNotFound: If the conversation does not exist
            ParticipantNotAuthorized: If the participation is not part of the conversation
            StoreUnavailable: If persistence fails
        """
        conversation = await self.conversation_repo.get(conversation_id)
        if conversation is None:
            raise ConversationNotFound(conversation_id)

        sender = await self.participation_repo.get(participation_id)
        if sender is None or sender.conversation_id != conversation.id:
            raise ParticipantNotAuthorized(participation_id, conversation_id)

        async with unit_of_work(self.db):
            message = await self.message_repo.create(
                conversation_id=conversation.id,
                participation_id=sender.id,
                body=body,
                type=type,
                data=data or {}
            )

            participations = await self.participation_repo.get_for_conversation(conversation.id)
            notifications = await self.notification_repo.create_many(message, participations)

            await self.conversation_repo.touch(conversation.id)

        logger.info(
            f"Message {message.id} sent to conversation {conversation_id} "
            f"with {len(notifications)} notifications"
        )

        # The event goes out even if the cache is down
        try:
            if settings.broadcasts:
                await self.event_sink.dispatch(
                    MessageSent(
                        conversation_id=message.conversation_id,
                        message=await self.build_response(message, sender)
                    ),
                    skip_sid=skip_sid
                )
        finally:
            for notification in notifications:
                if not notification.is_sender:
                    await invalidate_unread_count_cache(
                        notification.messageable_type,
                        notification.messageable_id
                    )

        return message

    async def trash(self, message_id: int, participant: ParticipantRef) -> bool:
        """
        Delete a message for one participant.

        The message row is locked for the whole transaction, so the recount
        after the delete sees every concurrent trash of the same message.
        AllParticipantsDeletedMessage fires only from the call that removed
        the last active notification.

        Args:
            message_id: Message id
            participant: Participant removing the message from their view

        Returns:
            True if this call removed the notification, False if it was
            already gone (not an error)

        Raises:
            StoreUnavailable: If persistence fails
        """
        removed = False
        remaining = None

        async with unit_of_work(self.db):
            message = await self.message_repo.get_for_update(message_id)
            if message is not None:
                notification = await self.notification_repo.find(message.id, participant, for_update=True)
                if notification is not None:
                    await self.notification_repo.soft_delete(notification)
                    removed = True
                    remaining = await self.notification_repo.count_active(message.id)

        if message is None:
            logger.debug(f"Trash of unknown message {message_id} by {participant} ignored")
            return False

        if not removed:
            logger.debug(f"Message {message_id} already trashed for {participant}")
            return False

        try:
            if remaining == 0:
                logger.info(f"Message {message_id} deleted by all participants")
                await self.event_sink.dispatch(
                    AllParticipantsDeletedMessage(
                        conversation_id=message.conversation_id,
                        message_id=message.id
                    )
                )
        finally:
            await invalidate_unread_count_cache(participant.kind, participant.id)

        return True

    async def un_deleted_count(self, message_id: int) -> int:
        """
        Count participants that still have the message in their view.

        Args:
            message_id: Message id

        Returns:
            Number of active notifications (0 means fully deleted)
        """
        return await self.notification_repo.count_active(message_id)

    async def get_notification(
        self,
        message_id: int,
        participant: ParticipantRef
    ) -> Optional[MessageNotification]:
        """
        Get a participant's active notification for a message.

        The notification's read_at is its updated_at once is_seen is true.
        """
        return await self.notification_repo.find(message_id, participant)
