"""
Base model classes and mixins for SQLAlchemy ORM.
Provides common functionality for all database models.
"""
from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from chat_core.utils.datetime_utils import utc_now


class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Includes AsyncAttrs mixin for async relationship access.
    All models should inherit from this class.
    """
    pass


class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps.

    Values are generated client-side so they stay loaded after a flush;
    the server defaults only cover rows inserted outside the ORM.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created"
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=True,
        doc="Timestamp when the record was last updated"
    )


class IntegerIDMixin:
    """
    Mixin for an auto-incrementing integer primary key.

    Ids grow with insertion order, which the conversation listing relies on
    as a tie-breaker when updated_at values are equal.
    """

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Auto-incrementing primary key"
    )
