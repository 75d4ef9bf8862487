"""Database setup for async SQLAlchemy 2.0."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, MetaData
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.core.config import get_settings
from app.shared.utils import utc_now

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base class for all ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDMixin:
    """Provide UUID primary key."""

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)


class TimestampMixin:
    """Provide UTC audit timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class BaseModelMixin(UUIDMixin, TimestampMixin):
    """Base mixin used by all business entities."""


def _connect_args(statement_timeout_ms: int) -> dict:
    if statement_timeout_ms <= 0:
        return {}
    return {"server_settings": {"statement_timeout": str(statement_timeout_ms)}}


settings = get_settings()
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_statement_timeout_ms),
)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


AFTER_COMMIT_KEY = "after_commit_callbacks"


def run_after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """Queue a coroutine to run once the request transaction has committed.

    Callbacks are dropped on rollback.
    """
    session.info.setdefault(AFTER_COMMIT_KEY, []).append(callback)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides DB session per request."""
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            session.info.pop(AFTER_COMMIT_KEY, None)
            await session.rollback()
            raise
        for callback in session.info.pop(AFTER_COMMIT_KEY, []):
            await callback()


async def close_engine() -> None:
    """Close SQLAlchemy engine."""
    await engine.dispose()
