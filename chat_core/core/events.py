"""
Domain events and event sinks.

Services hand events to an EventSink after their transaction commits. The sink
decides how to deliver them; SocketIOEventSink broadcasts to conversation rooms.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional, Protocol, runtime_checkable

import socketio
from pydantic import BaseModel

from chat_core.schemas.message import MessageResponse
from chat_core.utils.datetime_utils import json_ready

logger = logging.getLogger(__name__)


class ChatEvent(BaseModel, ABC):
    """Base class for events emitted by the message state core."""

    name: ClassVar[str]

    conversation_id: int

    @abstractmethod
    def broadcast_with(self) -> Dict[str, Any]:
        """JSON-ready payload for transports."""


class MessageSent(ChatEvent):
    """A message was persisted and fanned out to every participant."""

    name: ClassVar[str] = "message_sent"

    message: MessageResponse

    def broadcast_with(self) -> Dict[str, Any]:
        return {"message": json_ready(self.message.model_dump())}


class AllParticipantsDeletedMessage(ChatEvent):
    """
    The last active notification of a message was removed.

    Consumers decide whether to archive or hard-delete the message.
    """

    name: ClassVar[str] = "all_participants_deleted_message"

    message_id: int

    def broadcast_with(self) -> Dict[str, Any]:
        return {"message_id": self.message_id, "conversation_id": self.conversation_id}


@runtime_checkable
class EventSink(Protocol):
    """Receives events once the producing transaction has committed."""

    async def dispatch(self, event: ChatEvent, skip_sid: Optional[str] = None) -> None:
        ...


class SocketIOEventSink:
    """
    Broadcast events to Socket.IO conversation rooms.

    Each event is emitted under its name to room ``conversation:{conversation_id}``.
    ``skip_sid`` leaves out one client, typically the sender's own socket.
    Emit failures propagate to the caller.
    """

    def __init__(self, sio: socketio.AsyncServer):
        self.sio = sio

    @staticmethod
    def room_for(conversation_id: int) -> str:
        return f"conversation:{conversation_id}"

    async def dispatch(self, event: ChatEvent, skip_sid: Optional[str] = None) -> None:
        room = self.room_for(event.conversation_id)
        logger.info(f"[dispatch] Emitting '{event.name}' to room {room}")
        await self.sio.emit(event.name, event.broadcast_with(), room=room, skip_sid=skip_sid)
