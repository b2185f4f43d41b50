"""
Pydantic schemas for messages and their per-participant state.
"""
from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, ConfigDict


class MessageResponse(BaseModel):
    """Message as exposed to event consumers and conversation listings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    body: str
    conversation_id: int
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    sender: Optional[Dict[str, Any]] = Field(None, description="Sender projection (see SenderProjector)")


class NotificationResponse(BaseModel):
    """A participant's state for one message."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    message_id: int
    conversation_id: int
    participant_type: str = Field(..., validation_alias="messageable_type")
    participant_id: str = Field(..., validation_alias="messageable_id")
    is_seen: bool
    is_sender: bool
    flagged: bool
    read_at: Optional[datetime] = None


class LastMessageResponse(MessageResponse):
    """Last message of a conversation with the requesting participant's state."""

    is_seen: bool
    flagged: bool
    read_at: Optional[datetime] = None
