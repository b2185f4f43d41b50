"""
Domain exceptions raised by the message state services.
Callers map these to their own transport (HTTP status codes, socket errors, ...).
"""
from typing import Any, Optional


class ChatCoreError(Exception):
    """Base exception for all message state errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class ConversationNotFound(ChatCoreError):
    """Raised when the target conversation does not exist."""

    def __init__(self, conversation_id: Any):
        super().__init__(
            f"Conversation {conversation_id} not found",
            conversation_id=conversation_id
        )


class ParticipantNotAuthorized(ChatCoreError):
    """Raised when a sender's participation does not belong to the target conversation."""

    def __init__(self, participation_id: Any, conversation_id: Any):
        super().__init__(
            f"Participation {participation_id} is not part of conversation {conversation_id}",
            participation_id=participation_id,
            conversation_id=conversation_id
        )


class NotificationNotFound(ChatCoreError):
    """Raised when a participant has no active notification for a message."""

    def __init__(self, message_id: Any, participant: Optional[Any] = None):
        super().__init__(
            f"No active notification for message {message_id} and participant {participant}",
            message_id=message_id,
            participant=participant
        )


class StoreUnavailable(ChatCoreError):
    """Raised when the persistence layer fails. Never retried here."""
    pass
