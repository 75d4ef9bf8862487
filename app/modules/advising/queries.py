"""Read side for advising sessions: per-user lists and the view cache."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Iterable
from uuid import UUID

from fastapi import Depends
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheBackend, get_cache_backend
from app.core.config import get_settings
from app.core.database import get_db_session, run_after_commit
from app.core.enums import SessionStatusEnum
from app.modules.advising.repository import AdvisingSessionRepository
from app.modules.advising.schemas import AdvisingSessionRead, SessionListRead
from app.modules.identity.schemas import Caller
from app.shared.exceptions import NotFoundException, UnauthorizedException
from app.shared.utils import institution_today

logger = logging.getLogger(__name__)
settings = get_settings()

_session_list_adapter = TypeAdapter(list[AdvisingSessionRead])


class SessionViewCache:
    """Cached raw session lists keyed by participant.

    Cache errors never fail a request: reads fall back to the store and
    invalidation failures are logged, leaving the TTL to expire the entry.
    Writers call `mark_stale`; the queued keys are dropped by `flush`, which
    runs after the request transaction commits.
    """

    def __init__(self, backend: CacheBackend, ttl_seconds: int) -> None:
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self._stale: dict[UUID, None] = {}

    @staticmethod
    def key_for(user_id: UUID) -> str:
        return f"advising:sessions:{user_id}"

    async def get(self, user_id: UUID) -> list[AdvisingSessionRead] | None:
        try:
            cached = await self.backend.get(self.key_for(user_id))
        except Exception:
            logger.warning("Session view cache read failed for %s", user_id, exc_info=True)
            return None
        if cached is None:
            return None
        try:
            return _session_list_adapter.validate_json(cached)
        except ValidationError:
            logger.warning("Discarding unreadable session view cache entry for %s", user_id, exc_info=True)
            await self.invalidate(user_id)
            return None

    async def set(self, user_id: UUID, sessions: list[AdvisingSessionRead]) -> None:
        try:
            await self.backend.set(
                self.key_for(user_id),
                _session_list_adapter.dump_json(sessions).decode("utf-8"),
                ttl_seconds=self.ttl_seconds,
            )
        except Exception:
            logger.warning("Session view cache write failed for %s", user_id, exc_info=True)

    async def invalidate(self, *user_ids: UUID) -> None:
        """Drop cached views of the given participants now."""
        for user_id in dict.fromkeys(user_ids):
            try:
                await self.backend.delete(self.key_for(user_id))
            except Exception:
                logger.warning("Session view cache invalidation failed for %s", user_id, exc_info=True)

    def mark_stale(self, *user_ids: UUID) -> None:
        """Queue participants whose views must be dropped after commit."""
        for user_id in user_ids:
            self._stale[user_id] = None

    async def flush(self) -> None:
        stale = list(self._stale)
        self._stale.clear()
        await self.invalidate(*stale)


def partition_sessions(
    sessions: Iterable[AdvisingSessionRead],
    today: dt.date,
) -> SessionListRead:
    """Split sessions into upcoming (scheduled, today or later) and past (everything else)."""
    upcoming: list[AdvisingSessionRead] = []
    past: list[AdvisingSessionRead] = []
    for item in sessions:
        if item.status == SessionStatusEnum.SCHEDULED and item.date >= today:
            upcoming.append(item)
        else:
            past.append(item)
    return SessionListRead(upcoming=upcoming, past=past)


class SessionQueryService:
    """Read-only access to a caller's advising sessions."""

    def __init__(
        self,
        repository: AdvisingSessionRepository,
        view_cache: SessionViewCache,
        today_provider: Callable[[], dt.date] | None = None,
    ) -> None:
        self.repository = repository
        self.view_cache = view_cache
        self._today = today_provider or (lambda: institution_today(settings.institution_timezone))

    async def list_for_user(self, actor: Caller) -> SessionListRead:
        """Return the caller's sessions split into upcoming and past."""
        sessions = await self.view_cache.get(actor.id)
        if sessions is None:
            rows = await self.repository.list_sessions_for_user(actor.id, actor.role)
            sessions = [AdvisingSessionRead.model_validate(row) for row in rows]
            await self.view_cache.set(actor.id, sessions)
        return partition_sessions(sessions, self._today())

    async def get_session(self, session_id: UUID, actor: Caller) -> AdvisingSessionRead:
        """Return one session visible to a participant or an admin."""
        advising_session = await self.repository.get_session_by_id(session_id)
        if advising_session is None:
            raise NotFoundException("Session not found")
        if not actor.is_admin and actor.id not in (advising_session.student_id, advising_session.advisor_id):
            raise UnauthorizedException("You cannot view this session")
        return AdvisingSessionRead.model_validate(advising_session)


def get_session_view_cache(session: AsyncSession = Depends(get_db_session)) -> SessionViewCache:
    """Dependency provider for the session view cache, flushed after commit."""
    view_cache = SessionViewCache(get_cache_backend(), settings.session_cache_ttl_seconds)
    run_after_commit(session, view_cache.flush)
    return view_cache


async def get_session_query_service(
    session: AsyncSession = Depends(get_db_session),
    view_cache: SessionViewCache = Depends(get_session_view_cache),
) -> SessionQueryService:
    """Dependency provider for session query service."""
    return SessionQueryService(AdvisingSessionRepository(session), view_cache)
