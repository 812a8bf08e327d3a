"""Bounded history of executed requests."""

import logging
import uuid
from datetime import datetime

from chainpost.config import get_settings
from chainpost.db.repository import Repository
from chainpost.models.history import RequestHistoryEntry

logger = logging.getLogger(__name__)


class RequestHistoryService:
    """Keeps the most recent executions, newest first."""

    def __init__(self, repository: Repository[RequestHistoryEntry], max_entries: int | None = None):
        self.repository = repository
        self.max_entries = max_entries or get_settings().history_max_entries

    async def add_entry(self, entry: RequestHistoryEntry) -> RequestHistoryEntry:
        entry.id = uuid.uuid4()
        entry.timestamp = datetime.utcnow()
        await self.repository.add(entry)
        await self._trim()
        return entry

    async def get_history(self, max_count: int | None = None) -> list[RequestHistoryEntry]:
        limit = min(max_count or self.max_entries, self.max_entries)
        return (await self._newest_first())[:limit]

    async def clear(self) -> None:
        for entry in await self.repository.get_all():
            await self.repository.delete(entry.id)

    async def _newest_first(self) -> list[RequestHistoryEntry]:
        entries = await self.repository.get_all()
        # Insertion order breaks timestamp ties
        ranked = sorted(enumerate(entries), key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
        return [entry for _, entry in ranked]

    async def _trim(self) -> None:
        stale = (await self._newest_first())[self.max_entries:]
        for entry in stale:
            await self.repository.delete(entry.id)
        if stale:
            logger.debug("Trimmed %d history entries", len(stale))
