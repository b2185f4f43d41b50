"""
Unit tests for ReadFlagService.
"""
import pytest

from chat_core.core.exceptions import NotificationNotFound
from chat_core.models import ParticipantRef
from chat_core.services.message_service import MessageService
from chat_core.services.read_flag_service import ReadFlagService
from chat_core.utils.datetime_utils import ensure_utc


@pytest.fixture
async def sent_message(db_session, event_sink, group, alice):
    """A message from alice to the group."""
    conversation, members = group
    return await MessageService(db_session, event_sink).send(conversation.id, "Read me", members[alice].id)


class TestMarkRead:
    """Test cases for ReadFlagService.mark_read."""

    async def test_marks_seen_and_sets_read_at(self, db_session, sent_message, bob):
        service = ReadFlagService(db_session)

        notification = await service.mark_read(sent_message.id, bob)

        assert notification.is_seen is True
        assert notification.read_at is not None
        assert notification.read_at == notification.updated_at

    async def test_idempotent_but_timestamp_advances(self, db_session, sent_message, bob):
        """Reading twice keeps is_seen true and never moves read_at backwards."""
        service = ReadFlagService(db_session)

        first = ensure_utc((await service.mark_read(sent_message.id, bob)).read_at)
        notification = await service.mark_read(sent_message.id, bob)

        assert notification.is_seen is True
        assert ensure_utc(notification.read_at) >= first

    async def test_only_affects_the_reader(self, db_session, event_sink, sent_message, bob, carol):
        await ReadFlagService(db_session).mark_read(sent_message.id, bob)

        other = await MessageService(db_session, event_sink).get_notification(sent_message.id, carol)
        assert other.is_seen is False

    async def test_raises_after_trash(self, db_session, event_sink, sent_message, bob):
        """A trashed notification can no longer be read."""
        await MessageService(db_session, event_sink).trash(sent_message.id, bob)

        with pytest.raises(NotificationNotFound) as exc_info:
            await ReadFlagService(db_session).mark_read(sent_message.id, bob)

        assert exc_info.value.context["message_id"] == sent_message.id
        assert exc_info.value.context["participant"] == bob

    async def test_raises_for_outsider(self, db_session, sent_message):
        with pytest.raises(NotificationNotFound):
            await ReadFlagService(db_session).mark_read(sent_message.id, ParticipantRef("user", "zed"))

    async def test_miss_keeps_loaded_objects(self, db_session, event_sink, sent_message, bob):
        """A NotificationNotFound leaves the caller's loaded message intact."""
        await MessageService(db_session, event_sink).trash(sent_message.id, bob)
        service = ReadFlagService(db_session)

        with pytest.raises(NotificationNotFound):
            await service.mark_read(sent_message.id, bob)
        with pytest.raises(NotificationNotFound):
            await service.toggle_flag(sent_message.id, bob)

        assert sent_message.body == "Read me"
        assert sent_message.type == "text"


class TestFlags:
    """Test cases for flagged and toggle_flag."""

    async def test_toggle_twice_restores_state(self, db_session, sent_message, bob):
        service = ReadFlagService(db_session)

        assert await service.flagged(sent_message.id, bob) is False
        assert await service.toggle_flag(sent_message.id, bob) is True
        assert await service.flagged(sent_message.id, bob) is True
        assert await service.toggle_flag(sent_message.id, bob) is False
        assert await service.flagged(sent_message.id, bob) is False

    async def test_flag_is_per_participant(self, db_session, sent_message, bob, carol):
        service = ReadFlagService(db_session)

        await service.toggle_flag(sent_message.id, bob)

        assert await service.flagged(sent_message.id, bob) is True
        assert await service.flagged(sent_message.id, carol) is False

    async def test_flagged_is_false_after_trash(self, db_session, event_sink, sent_message, bob):
        service = ReadFlagService(db_session)
        await service.toggle_flag(sent_message.id, bob)

        await MessageService(db_session, event_sink).trash(sent_message.id, bob)

        assert await service.flagged(sent_message.id, bob) is False
        with pytest.raises(NotificationNotFound):
            await service.toggle_flag(sent_message.id, bob)

    async def test_flag_does_not_mark_read(self, db_session, event_sink, sent_message, bob):
        await ReadFlagService(db_session).toggle_flag(sent_message.id, bob)

        notification = await MessageService(db_session, event_sink).get_notification(sent_message.id, bob)
        assert notification.flagged is True
        assert notification.is_seen is False


class TestUnreadCount:
    """Test cases for ReadFlagService.unread_count."""

    async def test_counts_across_conversations(
        self,
        db_session,
        event_sink,
        group,
        make_conversation,
        alice,
        bob
    ):
        """Two unseen and one seen notification count as two; reading one more leaves one."""
        conversation, members = group
        direct, direct_members = await make_conversation(alice, bob, direct_message=True)
        messages = MessageService(db_session, event_sink)
        service = ReadFlagService(db_session)

        already_read = await messages.send(conversation.id, "seen earlier", members[alice].id)
        await service.mark_read(already_read.id, bob)
        first = await messages.send(conversation.id, "group hello", members[alice].id)
        await messages.send(direct.id, "direct hello", direct_members[alice].id)

        assert await service.unread_count(bob) == 2

        await service.mark_read(first.id, bob)
        assert await service.unread_count(bob) == 1

    async def test_sender_has_nothing_unread(self, db_session, sent_message, alice):
        assert await ReadFlagService(db_session).unread_count(alice) == 0

    async def test_trashed_messages_are_not_unread(self, db_session, event_sink, sent_message, carol):
        await MessageService(db_session, event_sink).trash(sent_message.id, carol)

        assert await ReadFlagService(db_session).unread_count(carol) == 0

    async def test_served_from_cache(self, db_session, sent_message, bob, mocker):
        """A cached total short-circuits the database count."""
        mocker.patch(
            "chat_core.services.read_flag_service.get_cached_unread_count",
            mocker.AsyncMock(return_value=7)
        )
        service = ReadFlagService(db_session)
        count_unread = mocker.patch.object(service.notification_repo, "count_unread")

        assert await service.unread_count(bob) == 7
        count_unread.assert_not_called()

    async def test_cache_miss_populates_cache(self, db_session, sent_message, bob, mocker):
        store = mocker.patch(
            "chat_core.services.read_flag_service.cache_unread_count",
            mocker.AsyncMock(return_value=True)
        )

        assert await ReadFlagService(db_session).unread_count(bob) == 1
        store.assert_awaited_once_with("user", "bob", 1)
