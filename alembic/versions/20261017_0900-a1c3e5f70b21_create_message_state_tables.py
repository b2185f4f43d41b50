"""create_message_state_tables

Revision ID: a1c3e5f70b21
Revises:
Create Date: 2026-10-17 09:00:12.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f70b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
    ]


def upgrade() -> None:
    """
    Create conversations, participation, messages and message_notifications.

    message_notifications holds one row per (message, participant) with that
    participant's is_seen / flagged / deleted state.
    """
    op.create_table(
        'conversations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('private', sa.Boolean(), nullable=False),
        sa.Column('direct_message', sa.Boolean(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_conversations_updated', 'conversations', [sa.text('updated_at DESC'), sa.text('id DESC')])

    op.create_table(
        'participation',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('conversation_id', sa.Integer(), nullable=False),
        sa.Column('messageable_type', sa.String(length=255), nullable=False),
        sa.Column('messageable_id', sa.String(length=255), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'conversation_id', 'messageable_type', 'messageable_id',
            name='uq_participation_conversation_participant'
        ),
    )
    op.create_index('ix_participation_conversation_id', 'participation', ['conversation_id'])
    op.create_index('idx_participation_participant', 'participation', ['messageable_type', 'messageable_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('conversation_id', sa.Integer(), nullable=False),
        sa.Column('participation_id', sa.Integer(), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['participation_id'], ['participation.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_messages_conversation_id', 'messages', ['conversation_id'])
    op.create_index('ix_messages_participation_id', 'messages', ['participation_id'])
    op.create_index(
        'idx_messages_conversation_created',
        'messages',
        ['conversation_id', sa.text('created_at DESC'), sa.text('id DESC')]
    )

    op.create_table(
        'message_notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('message_id', sa.Integer(), nullable=False),
        sa.Column('conversation_id', sa.Integer(), nullable=False),
        sa.Column('participation_id', sa.Integer(), nullable=True),
        sa.Column('messageable_type', sa.String(length=255), nullable=False),
        sa.Column('messageable_id', sa.String(length=255), nullable=False),
        sa.Column('is_seen', sa.Boolean(), nullable=False),
        sa.Column('is_sender', sa.Boolean(), nullable=False),
        sa.Column('flagged', sa.Boolean(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['message_id'], ['messages.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['participation_id'], ['participation.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'message_id', 'messageable_type', 'messageable_id',
            name='uq_message_notification_participant'
        ),
    )
    op.create_index('ix_message_notifications_message_id', 'message_notifications', ['message_id'])
    op.create_index('ix_message_notifications_conversation_id', 'message_notifications', ['conversation_id'])
    op.create_index(
        'idx_notifications_participant_unread',
        'message_notifications',
        ['messageable_type', 'messageable_id', 'is_seen', 'deleted']
    )
    op.create_index('idx_notifications_message_active', 'message_notifications', ['message_id', 'deleted'])


def downgrade() -> None:
    """Drop the message state tables in reverse dependency order."""
    op.drop_table('message_notifications')
    op.drop_table('messages')
    op.drop_table('participation')
    op.drop_table('conversations')
