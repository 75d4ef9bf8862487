"""Slot conflict detection."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from app.modules.advising.repository import AdvisingSessionRepository


class ConflictChecker:
    """Tell whether an advisor slot is held by a live session.

    This is a plain read. Two requests can both see a free slot; the partial
    unique index on scheduled sessions decides which insert wins.
    """

    def __init__(self, repository: AdvisingSessionRepository) -> None:
        self.repository = repository

    async def has_conflict(self, advisor_id: UUID, date: dt.date, start_time: dt.time) -> bool:
        """Return True if a scheduled session occupies the slot."""
        return await self.repository.has_scheduled_session(advisor_id, date, start_time)
