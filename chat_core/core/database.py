"""
Database configuration and session management.
Uses SQLAlchemy 2.0 with async support.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from chat_core.config import settings
from chat_core.core.exceptions import StoreUnavailable


def _engine_options() -> dict:
    # Pool sizing only applies to server databases; SQLite uses its own pools
    if settings.database_url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_size": 20, "max_overflow": 10}


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a request-scoped async session.

    Commits when the caller finishes cleanly, rolls back otherwise.

    Example:
        ```python
        async for db in get_db():
            service = MessageService(db, event_sink)
            await service.send(conversation_id, "hi", participation_id)
        ```
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a block as one atomic transaction on ``session``.

    Everything flushed inside the block is committed together or rolled back
    together. Driver and ORM failures surface as StoreUnavailable; domain
    errors raised inside the block propagate unchanged after the rollback.

    Example:
        ```python
        async with unit_of_work(db):
            message = await message_repo.create(...)
            await notification_repo.create_many(message, participations)
        ```
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StoreUnavailable(f"Store operation failed: {e}") from e
    except BaseException:
        await session.rollback()
        raise
