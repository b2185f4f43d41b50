"""
Conversation service building per-participant conversation summaries.
Handles the paginated conversation list and single conversation entities.
"""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from chat_core.config import settings
from chat_core.models.conversation import Conversation, Participation
from chat_core.models.message import Message, MessageNotification
from chat_core.models.participant import ParticipantRef
from chat_core.repositories.conversation_repo import ConversationRepository, ParticipationRepository
from chat_core.repositories.message_repo import MessageRepository
from chat_core.repositories.notification_repo import MessageNotificationRepository
from chat_core.schemas.conversation import (
    ConversationFilters,
    ConversationPage,
    ConversationSummary,
    ParticipantResponse
)
from chat_core.schemas.message import LastMessageResponse
from chat_core.services.sender_projector import DefaultSenderProjector, SenderProjector

logger = logging.getLogger(__name__)

LastMessageRow = Tuple[Message, MessageNotification, Optional[Participation]]


class ConversationAggregator:
    """Read-only view over a participant's conversations."""

    def __init__(
        self,
        db: AsyncSession,
        sender_projector: Optional[SenderProjector] = None
    ):
        """
        Initialize conversation aggregator.

        Args:
            db: Database session
            sender_projector: Builds the sender field of last messages
        """
        self.db = db
        self.conversation_repo = ConversationRepository(db)
        self.participation_repo = ParticipationRepository(db)
        self.message_repo = MessageRepository(db)
        self.notification_repo = MessageNotificationRepository(db)
        self.sender_projector = sender_projector or DefaultSenderProjector()

    async def list_conversations(
        self,
        participant: ParticipantRef,
        filters: Optional[ConversationFilters] = None,
        page: int = 1,
        per_page: Optional[int] = None
    ) -> ConversationPage:
        """
        Get a page of a participant's conversation summaries.

        Conversations are ordered by most recent activity first, ties broken
        by id descending. Each conversation appears once.

        Args:
            participant: Requesting participant
            filters: Optional private/direct_message filters and unread flag
            page: 1-based page number
            per_page: Page size (defaults to settings.conversations_per_page)

        Returns:
            ConversationPage with items, total and has_more

        Example:
            ```python
            aggregator = ConversationAggregator(db)
            page = await aggregator.list_conversations(
                ParticipantRef("user", "42"),
                ConversationFilters(direct_message=True, include_unread_count=True)
            )
            ```
        """
        if page < 1:
            raise ValueError("page must be >= 1")

        filters = filters or ConversationFilters()
        per_page = per_page or settings.conversations_per_page

        conversations, total = await self.conversation_repo.get_participant_conversations(
            participant,
            private=filters.private,
            direct_message=filters.direct_message,
            limit=per_page,
            offset=(page - 1) * per_page
        )

        items = await self._summarize(conversations, participant, filters)

        return ConversationPage(
            items=items,
            total=total,
            page=page,
            per_page=per_page,
            has_more=page * per_page < total
        )

    async def get_conversation_entity(
        self,
        message_id: int,
        participant: ParticipantRef,
        filters: Optional[ConversationFilters] = None
    ) -> Optional[ConversationSummary]:
        """
        Build the summary of the conversation a message belongs to.

        Returns:
            The summary, or None when the message is unknown, the participant
            is not part of its conversation, or the filters exclude it
        """
        message = await self.message_repo.get(message_id)
        if message is None:
            return None

        filters = filters or ConversationFilters()
        conversations, _ = await self.conversation_repo.get_participant_conversations(
            participant,
            private=filters.private,
            direct_message=filters.direct_message,
            conversation_ids=[message.conversation_id],
            limit=1
        )
        if not conversations:
            return None

        summaries = await self._summarize(conversations, participant, filters)
        return summaries[0]

    async def _summarize(
        self,
        conversations: List[Conversation],
        participant: ParticipantRef,
        filters: ConversationFilters
    ) -> List[ConversationSummary]:
        conversation_ids = [conversation.id for conversation in conversations]
        if not conversation_ids:
            return []

        last_messages = await self.message_repo.get_last_for_participant(participant, conversation_ids)

        unread_counts: Dict[int, int] = {}
        if filters.include_unread_count:
            unread_counts = await self.notification_repo.count_unread_by_conversation(
                participant, conversation_ids
            )

        participations: Dict[int, List[Participation]] = {}
        if filters.direct_message is not None:
            participations = await self.participation_repo.get_for_conversations(conversation_ids)

        summaries = []
        for conversation in conversations:
            summary = ConversationSummary(
                id=conversation.id,
                private=conversation.private,
                direct_message=conversation.direct_message,
                data=conversation.data or {},
                created_at=conversation.created_at,
                updated_at=conversation.updated_at,
                last_message=await self._last_message(last_messages.get(conversation.id))
            )

            if filters.include_unread_count:
                summary.unread_count = unread_counts.get(conversation.id, 0)

            members = participations.get(conversation.id, [])
            if filters.direct_message is True:
                other = next(
                    (member for member in members if ParticipantRef.of(member) != participant),
                    None
                )
                if other is not None:
                    summary.participant = ParticipantResponse.model_validate(other)
            elif filters.direct_message is False:
                summary.participants = [ParticipantResponse.model_validate(member) for member in members]

            summaries.append(summary)

        logger.debug(f"Summarized {len(summaries)} conversations for {participant}")
        return summaries

    async def _last_message(self, row: Optional[LastMessageRow]) -> Optional[LastMessageResponse]:
        if row is None:
            return None

        message, notification, sender = row
        sender_ref = ParticipantRef.of(sender) if sender is not None else None
        return LastMessageResponse(
            id=message.id,
            body=message.body,
            conversation_id=message.conversation_id,
            type=message.type,
            data=message.data or {},
            created_at=message.created_at,
            sender=await self.sender_projector.project(sender_ref),
            is_seen=notification.is_seen,
            flagged=notification.flagged,
            read_at=notification.read_at
        )
