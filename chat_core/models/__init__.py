"""
SQLAlchemy models for the message state core.

All models must be imported here for Alembic auto-generation to work.
"""

# Import Base first
from chat_core.models.base import Base, TimestampMixin, IntegerIDMixin

# Import all models (order matters for relationships)
from chat_core.models.participant import ParticipantRef, participant_clause
from chat_core.models.conversation import Conversation, Participation
from chat_core.models.message import Message, MessageNotification, DEFAULT_MESSAGE_TYPE

# Export all models
__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "IntegerIDMixin",
    # Participants
    "ParticipantRef",
    "participant_clause",
    # Conversations
    "Conversation",
    "Participation",
    # Messages
    "Message",
    "MessageNotification",
    "DEFAULT_MESSAGE_TYPE",
]
