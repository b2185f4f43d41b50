"""
Process lifecycle for hosts embedding the message state core.
Wires logging, the unread count cache and the Socket.IO event sink.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import socketio

from chat_core.config import settings
from chat_core.core.cache import cache
from chat_core.core.database import engine
from chat_core.core.events import SocketIOEventSink
from chat_core.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_event_sink(sio: Optional[socketio.AsyncServer] = None) -> SocketIOEventSink:
    """
    Build the Socket.IO event sink.

    Pass the host's own AsyncServer to broadcast through its rooms; otherwise
    an ASGI server is created with Socket.IO's internal loggers disabled.
    """
    if sio is None:
        sio = socketio.AsyncServer(
            async_mode="asgi",
            logger=False,
            engineio_logger=False,
        )
    return SocketIOEventSink(sio)


@asynccontextmanager
async def lifespan() -> AsyncIterator[None]:
    """
    Startup and shutdown of shared resources.

    Example:
        ```python
        async with lifespan():
            async with AsyncSessionLocal() as db:
                await MessageService(db, create_event_sink(sio)).send(1, "hi", 3)
        ```
    """
    # Startup
    setup_logging()
    logger.info(f"Starting message state core ({settings.environment})")
    await cache.connect()
    try:
        yield
    finally:
        # Shutdown
        await cache.disconnect()
        await engine.dispose()
