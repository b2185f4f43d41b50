"""
Tests for message and notification repositories.
"""
from chat_core.models import Message
from chat_core.repositories.message_repo import MessageRepository
from chat_core.repositories.notification_repo import MessageNotificationRepository
from chat_core.repositories.conversation_repo import ConversationRepository, ParticipationRepository


async def _post(db_session, conversation, participation, body):
    message = await MessageRepository(db_session).create(
        conversation_id=conversation.id,
        participation_id=participation.id,
        body=body,
        data={}
    )
    participations = await ParticipationRepository(db_session).get_for_conversation(conversation.id)
    await MessageNotificationRepository(db_session).create_many(message, participations)
    await db_session.commit()
    return message


class TestMessageRepository:
    """Tests for MessageRepository."""

    async def test_get_for_update(self, db_session, group, alice):
        conversation, members = group
        message = await _post(db_session, conversation, members[alice], "lock me")

        locked = await MessageRepository(db_session).get_for_update(message.id)

        assert locked is message
        assert await MessageRepository(db_session).get_for_update(message.id + 100) is None

    async def test_last_message_per_conversation(self, db_session, group, make_conversation, alice, bob):
        conversation, members = group
        direct, direct_members = await make_conversation(alice, bob, direct_message=True)
        await _post(db_session, conversation, members[alice], "old")
        newest = await _post(db_session, conversation, members[bob], "new")
        direct_message = await _post(db_session, direct, direct_members[alice], "dm")

        last = await MessageRepository(db_session).get_last_for_participant(alice, [conversation.id, direct.id])

        message, notification, sender = last[conversation.id]
        assert message.id == newest.id
        assert notification.participant == alice
        assert sender.id == members[bob].id
        assert last[direct.id][0].id == direct_message.id

    async def test_last_message_skips_deleted(self, db_session, group, alice):
        conversation, members = group
        older = await _post(db_session, conversation, members[alice], "keep")
        newer = await _post(db_session, conversation, members[alice], "hide")
        repo = MessageNotificationRepository(db_session)

        await repo.soft_delete(await repo.find(newer.id, alice))
        await db_session.commit()

        last = await MessageRepository(db_session).get_last_for_participant(alice, [conversation.id])
        assert last[conversation.id][0].id == older.id

    async def test_last_message_without_sender(self, db_session, group, alice):
        """A message whose sender participation is gone still shows up."""
        conversation, members = group
        message = await _post(db_session, conversation, members[alice], "orphan")
        message.participation_id = None
        await db_session.commit()

        last = await MessageRepository(db_session).get_last_for_participant(alice, [conversation.id])

        assert last[conversation.id][0].id == message.id
        assert last[conversation.id][2] is None

    async def test_empty_ids(self, db_session, alice):
        assert await MessageRepository(db_session).get_last_for_participant(alice, []) == {}


class TestMessageNotificationRepository:
    """Tests for MessageNotificationRepository."""

    async def test_counts(self, db_session, group, alice, bob):
        conversation, members = group
        first = await _post(db_session, conversation, members[alice], "one")
        await _post(db_session, conversation, members[alice], "two")
        repo = MessageNotificationRepository(db_session)

        assert await repo.count_active(first.id) == 3
        assert await repo.count_unread(bob) == 2
        assert await repo.count_unread(alice) == 0
        assert await repo.count_unread_by_conversation(bob, [conversation.id]) == {conversation.id: 2}
        assert await repo.count_unread_by_conversation(alice, [conversation.id]) == {}

    async def test_soft_delete_hides_only_that_row(self, db_session, group, alice, bob):
        conversation, members = group
        message = await _post(db_session, conversation, members[alice], "x")
        repo = MessageNotificationRepository(db_session)
        notification = await repo.find(message.id, bob)

        await repo.soft_delete(notification)

        assert notification.deleted is True
        assert await repo.find(message.id, bob) is None
        assert await repo.find(message.id, alice) is not None
        assert await repo.count_active(message.id) == 2


class TestConversationRepository:
    """Tests for ConversationRepository."""

    async def test_touch_updates_timestamp(self, db_session, group):
        conversation, _ = group
        before = conversation.updated_at

        await ConversationRepository(db_session).touch(conversation.id)

        assert conversation.updated_at != before

    async def test_participant_conversations_counts_once(self, db_session, make_conversation, alice, bob):
        """A conversation with many participants appears a single time."""
        conversation, _ = await make_conversation(alice, bob)

        rows, total = await ConversationRepository(db_session).get_participant_conversations(alice)

        assert [row.id for row in rows] == [conversation.id]
        assert total == 1

    async def test_participations_grouped(self, db_session, group, make_conversation, alice, bob):
        conversation, _ = group
        direct, _ = await make_conversation(alice, bob, direct_message=True)

        grouped = await ParticipationRepository(db_session).get_for_conversations([conversation.id, direct.id])

        assert len(grouped[conversation.id]) == 3
        assert len(grouped[direct.id]) == 2
        assert await ParticipationRepository(db_session).get_for_conversations([]) == {}
