"""
Tests for domain events and the Socket.IO event sink.
"""
from datetime import datetime, timezone

import pytest

from chat_core.core.events import (
    AllParticipantsDeletedMessage,
    ChatEvent,
    EventSink,
    MessageSent,
    SocketIOEventSink,
)
from chat_core.schemas.message import MessageResponse


@pytest.fixture
def message_sent() -> MessageSent:
    return MessageSent(
        conversation_id=12,
        message=MessageResponse(
            id=5,
            body="hello",
            conversation_id=12,
            type="text",
            data={},
            created_at=datetime(2026, 10, 17, 8, 30, tzinfo=timezone.utc),
            sender={"participant_type": "user", "participant_id": "alice"}
        )
    )


class TestEvents:
    """Event payload shapes."""

    def test_message_sent_payload(self, message_sent):
        assert message_sent.name == "message_sent"
        assert message_sent.broadcast_with() == {
            "message": {
                "id": 5,
                "body": "hello",
                "conversation_id": 12,
                "type": "text",
                "data": {},
                "created_at": "2026-10-17T08:30:00Z",
                "sender": {"participant_type": "user", "participant_id": "alice"},
            }
        }

    def test_all_participants_deleted_payload(self):
        event = AllParticipantsDeletedMessage(conversation_id=3, message_id=9)

        assert event.name == "all_participants_deleted_message"
        assert event.broadcast_with() == {"message_id": 9, "conversation_id": 3}

    def test_base_event_is_abstract(self):
        with pytest.raises(TypeError):
            ChatEvent(conversation_id=1)


class TestSocketIOEventSink:
    """SocketIOEventSink emits to the conversation room."""

    async def test_emits_to_conversation_room(self, message_sent, mocker):
        sio = mocker.Mock()
        sio.emit = mocker.AsyncMock()
        sink = SocketIOEventSink(sio)

        await sink.dispatch(message_sent)

        sio.emit.assert_awaited_once_with(
            "message_sent",
            message_sent.broadcast_with(),
            room="conversation:12",
            skip_sid=None
        )

    async def test_skips_sending_client(self, message_sent, mocker):
        sio = mocker.Mock()
        sio.emit = mocker.AsyncMock()

        await SocketIOEventSink(sio).dispatch(message_sent, skip_sid="sid-1")

        sio.emit.assert_awaited_once_with(
            "message_sent",
            message_sent.broadcast_with(),
            room="conversation:12",
            skip_sid="sid-1"
        )

    async def test_emit_errors_propagate(self, mocker):
        sio = mocker.Mock()
        sio.emit = mocker.AsyncMock(side_effect=ConnectionError("gone"))

        with pytest.raises(ConnectionError):
            await SocketIOEventSink(sio).dispatch(AllParticipantsDeletedMessage(conversation_id=1, message_id=2))

    def test_satisfies_event_sink_protocol(self, mocker):
        assert isinstance(SocketIOEventSink(mocker.Mock()), EventSink)
