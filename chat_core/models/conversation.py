"""
Conversation and Participation models.

Conversations and their membership are owned by the host application; this
core reads them and only ever writes Conversation.updated_at.
"""
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import ForeignKey, Index, String, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_core.models.base import Base, IntegerIDMixin, TimestampMixin

if TYPE_CHECKING:
    from chat_core.models.message import Message


class Conversation(Base, IntegerIDMixin, TimestampMixin):
    """
    Conversation model for direct messages and group chats.

    - private: hidden from public listings
    - direct_message: exactly two participants
    """

    __tablename__ = "conversations"

    private: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        doc="Whether the conversation is private"
    )

    direct_message: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
        doc="Whether the conversation is a 1:1 direct message"
    )

    data: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
        doc="Opaque conversation metadata (title, description, ...)"
    )

    # Relationships
    participations: Mapped[List["Participation"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        lazy="select"  # Loaded explicitly by ParticipationRepository
    )

    messages: Mapped[List["Message"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        lazy="select"  # Potentially large collection
    )

    def __repr__(self) -> str:
        return (
            f"<Conversation(id={self.id}, private={self.private}, "
            f"direct_message={self.direct_message})>"
        )


class Participation(Base, IntegerIDMixin, TimestampMixin):
    """
    A participant's membership in one conversation.

    The participant itself is a polymorphic (messageable_type, messageable_id)
    pair resolved by the host application.
    """

    __tablename__ = "participation"

    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Conversation this participation belongs to"
    )

    messageable_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Participant kind (e.g. 'user', 'bot')"
    )

    messageable_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Participant id within its kind"
    )

    settings: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
        doc="Per-participant conversation settings"
    )

    # Relationships
    conversation: Mapped["Conversation"] = relationship(back_populates="participations")

    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "messageable_type", "messageable_id",
            name="uq_participation_conversation_participant"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Participation(id={self.id}, conversation_id={self.conversation_id}, "
            f"participant={self.messageable_type}:{self.messageable_id})>"
        )


# Indexes for performance
Index("idx_participation_participant", Participation.messageable_type, Participation.messageable_id)
Index("idx_conversations_updated", Conversation.updated_at.desc(), Conversation.id.desc())
