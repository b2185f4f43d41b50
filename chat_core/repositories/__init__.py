"""
Repository layer exports.
Provides database access layer for the message state core.
"""
from chat_core.repositories.base import BaseRepository
from chat_core.repositories.message_repo import MessageRepository
from chat_core.repositories.notification_repo import MessageNotificationRepository
from chat_core.repositories.conversation_repo import (
    ConversationRepository,
    ParticipationRepository
)

__all__ = [
    "BaseRepository",
    "MessageRepository",
    "MessageNotificationRepository",
    "ConversationRepository",
    "ParticipationRepository",
]
