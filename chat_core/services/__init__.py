"""
Service layer exports.
Provides the message lifecycle, read/flag state and conversation summaries.
"""
from chat_core.services.message_service import MessageService
from chat_core.services.read_flag_service import ReadFlagService
from chat_core.services.conversation_service import ConversationAggregator
from chat_core.services.sender_projector import (
    DefaultSenderProjector,
    SenderProjector,
    WhitelistSenderProjector
)

__all__ = [
    "MessageService",
    "ReadFlagService",
    "ConversationAggregator",
    "SenderProjector",
    "DefaultSenderProjector",
    "WhitelistSenderProjector",
]
