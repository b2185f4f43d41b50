"""
Pytest configuration and fixtures for tests.
Provides the in-memory database, an event collector and conversation setup.
"""
import pytest
from typing import AsyncGenerator, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from chat_core.core.cache import cache
from chat_core.core.events import ChatEvent
from chat_core.models import Base, Conversation, Participation, ParticipantRef


# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class CollectingEventSink:
    """EventSink that records dispatched events in order."""

    def __init__(self):
        self.events: List[ChatEvent] = []
        self.skipped: List[Optional[str]] = []

    async def dispatch(self, event: ChatEvent, skip_sid: Optional[str] = None) -> None:
        self.events.append(event)
        self.skipped.append(skip_sid)

    def named(self, name: str) -> List[ChatEvent]:
        return [event for event in self.events if event.name == name]


@pytest.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture(autouse=True)
def no_redis():
    """Run every test without a Redis connection unless it installs a fake one."""
    cache.redis = None
    yield
    cache.redis = None


@pytest.fixture
def event_sink() -> CollectingEventSink:
    """Collect events dispatched by services."""
    return CollectingEventSink()


@pytest.fixture
def alice() -> ParticipantRef:
    return ParticipantRef("user", "alice")


@pytest.fixture
def bob() -> ParticipantRef:
    return ParticipantRef("user", "bob")


@pytest.fixture
def carol() -> ParticipantRef:
    return ParticipantRef("user", "carol")


@pytest.fixture
def make_conversation(db_session: AsyncSession):
    """
    Factory creating a committed conversation with the given participants.

    Returns (conversation, {participant: participation}).
    """
    async def _make(*participants: ParticipantRef, private: bool = True, direct_message: bool = False, data=None):
        conversation = Conversation(private=private, direct_message=direct_message, data=data or {})
        db_session.add(conversation)
        await db_session.flush()

        participations = {}
        for participant in participants:
            participation = Participation(
                conversation_id=conversation.id,
                messageable_type=participant.kind,
                messageable_id=participant.id,
                settings={}
            )
            db_session.add(participation)
            participations[participant] = participation

        await db_session.commit()
        return conversation, participations

    return _make


@pytest.fixture
async def group(make_conversation, alice, bob, carol):
    """A group conversation of alice, bob and carol."""
    return await make_conversation(alice, bob, carol, data={"title": "Team"})
