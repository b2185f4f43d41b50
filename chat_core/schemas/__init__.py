"""
Pydantic schema exports.
Provides the data shapes handed to callers and event consumers.
"""
from chat_core.schemas.message import (
    MessageResponse,
    NotificationResponse,
    LastMessageResponse
)
from chat_core.schemas.conversation import (
    ConversationFilters,
    ParticipantResponse,
    ConversationSummary,
    ConversationPage
)

__all__ = [
    "MessageResponse",
    "NotificationResponse",
    "LastMessageResponse",
    "ConversationFilters",
    "ParticipantResponse",
    "ConversationSummary",
    "ConversationPage",
]
