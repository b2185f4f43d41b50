"""
Pydantic schemas for conversation listings.
"""
from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, ConfigDict

from chat_core.schemas.message import LastMessageResponse


class ConversationFilters(BaseModel):
    """
    Query specification for conversation summaries.

    Every filter is optional and independent:
    - private: only conversations whose private flag equals the value
    - direct_message: True lists 1:1 conversations with the other participant
      resolved, False lists group conversations with all participants resolved
    - include_unread_count: attach the requester's unread tally per conversation
    """

    model_config = ConfigDict(frozen=True)

    private: Optional[bool] = Field(None, description="Filter on the private flag")
    direct_message: Optional[bool] = Field(None, description="Filter on 1:1 vs group conversations")
    include_unread_count: bool = Field(default=False, description="Attach unread counts")


class ParticipantResponse(BaseModel):
    """A conversation participant as known to this core."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    participation_id: int = Field(..., validation_alias="id")
    participant_type: str = Field(..., validation_alias="messageable_type")
    participant_id: str = Field(..., validation_alias="messageable_id")


class ConversationSummary(BaseModel):
    """One row of a participant's conversation list."""

    id: int
    private: bool
    direct_message: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_message: Optional[LastMessageResponse] = None
    unread_count: Optional[int] = Field(None, description="Present only when requested")
    participant: Optional[ParticipantResponse] = Field(
        None,
        description="The other participant (direct_message=True only)"
    )
    participants: Optional[List[ParticipantResponse]] = Field(
        None,
        description="All participants (direct_message=False only)"
    )


class ConversationPage(BaseModel):
    """Page of conversation summaries."""

    items: List[ConversationSummary]
    total: int
    page: int
    per_page: int
    has_more: bool
