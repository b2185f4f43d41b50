"""
Message and MessageNotification models.

A Message is written once by send. Every participant of the conversation gets
a MessageNotification row that carries their own read, flagged and deleted state.
"""
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    ForeignKey,
    Index,
    String,
    Text,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_core.models.base import Base, IntegerIDMixin, TimestampMixin
from chat_core.models.participant import ParticipantRef

if TYPE_CHECKING:
    from chat_core.models.conversation import Conversation, Participation


DEFAULT_MESSAGE_TYPE = "text"


class Message(Base, IntegerIDMixin, TimestampMixin):
    """
    Message model.

    The sender is the participation that wrote it; the participant identity is
    resolved through that participation.
    """

    __tablename__ = "messages"

    # References
    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Conversation this message belongs to"
    )

    participation_id: Mapped[int | None] = mapped_column(
        ForeignKey("participation.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Sender's participation"
    )

    # Message content
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Message text"
    )

    type: Mapped[str] = mapped_column(
        String(50),
        default=DEFAULT_MESSAGE_TYPE,
        nullable=False,
        doc="Message type tag (text, image, ...)"
    )

    data: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
        doc="Opaque structured payload (file URLs, dimensions, ...)"
    )

    # Relationships
    conversation: Mapped["Conversation"] = relationship(back_populates="messages")
    participation: Mapped[Optional["Participation"]] = relationship("Participation")

    notifications: Mapped[List["MessageNotification"]] = relationship(
        back_populates="message",
        cascade="all, delete-orphan",
        lazy="select"
    )

    def __repr__(self) -> str:
        body_preview = self.body[:50] if self.body else f"<{self.type}>"
        return f"<Message(id={self.id}, type={self.type}, body='{body_preview}')>"


class MessageNotification(Base, IntegerIDMixin, TimestampMixin):
    """
    Per-participant state of a message.

    - is_seen: read by this participant (updated_at doubles as read timestamp)
    - flagged: flagged by this participant
    - deleted: removed from this participant's view (soft delete)
    """

    __tablename__ = "message_notifications"

    message_id: Mapped[int] = mapped_column(
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Message ID"
    )

    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Conversation ID (denormalized for per-conversation counts)"
    )

    participation_id: Mapped[int | None] = mapped_column(
        ForeignKey("participation.id", ondelete="SET NULL"),
        nullable=True,
        doc="Recipient's participation at fan-out time"
    )

    messageable_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Participant kind"
    )

    messageable_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Participant id"
    )

    is_seen: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_sender: Mapped[bool] = mapped_column(default=False, nullable=False)
    flagged: Mapped[bool] = mapped_column(default=False, nullable=False)
    deleted: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
        doc="Soft-deleted for this participant"
    )

    # Relationships
    message: Mapped["Message"] = relationship(back_populates="notifications")

    __table_args__ = (
        UniqueConstraint(
            "message_id", "messageable_type", "messageable_id",
            name="uq_message_notification_participant"
        ),
    )

    @property
    def participant(self) -> ParticipantRef:
        return ParticipantRef.of(self)

    @property
    def read_at(self) -> datetime | None:
        return self.updated_at if self.is_seen else None

    def __repr__(self) -> str:
        return (
            f"<MessageNotification(message_id={self.message_id}, "
            f"participant={self.messageable_type}:{self.messageable_id}, "
            f"is_seen={self.is_seen}, flagged={self.flagged}, deleted={self.deleted})>"
        )


# Indexes for performance
Index(
    "idx_notifications_participant_unread",
    MessageNotification.messageable_type,
    MessageNotification.messageable_id,
    MessageNotification.is_seen,
    MessageNotification.deleted
)
Index(
    "idx_notifications_message_active",
    MessageNotification.message_id,
    MessageNotification.deleted
)
Index("idx_messages_conversation_created", Message.conversation_id, Message.created_at.desc(), Message.id.desc())
