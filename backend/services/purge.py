"""Background sweep that deletes cache records older than their category TTL.

Storage hygiene only: reads already reject stale records.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from services.cache import CACHE_TTLS, is_expired, utcnow
from services.models import Category
from services.store import DocumentStore, Record

logger = logging.getLogger(__name__)

_timestamp = TypeAdapter(datetime)


class PurgeLoop:
    def __init__(
        self,
        store: DocumentStore,
        interval: timedelta = timedelta(hours=1),
        ttls: dict[Category, timedelta] = CACHE_TTLS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._interval = interval
        self._ttls = ttls
        self._clock = clock
        self._stop = asyncio.Event()
        self._task: asyncio.Task | None = None

    async def run_cycle(self) -> dict[Category, int]:
        """Sweep every category once. Returns deletions per successfully swept category."""
        logger.info("Starting cache purge...")
        purged: dict[Category, int] = {}
        for category, ttl in self._ttls.items():
            try:
                purged[category] = await self._purge(category, ttl)
            except Exception as e:
                logger.error("%s cache purge error: %s", category.value.capitalize(), e)
        logger.info("Cache purge completed. Waiting for next cycle...")
        return purged

    async def _purge(self, category: Category, ttl: timedelta) -> int:
        now = self._clock()

        def stale(record: Record) -> bool:
            try:
                written = _timestamp.validate_python(record.get("timestamp"))
            except ValidationError:
                return False
            return is_expired(written, ttl, now)

        count = await self._store.delete_where(category.collection, stale)
        logger.info("Purged %d documents from %s", count, category.collection)
        return count

    async def run(self) -> None:
        """Purge now, then every interval until ``stop()`` is called."""
        while not self._stop.is_set():
            await self.run_cycle()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval.total_seconds())
            except asyncio.TimeoutError:
                pass

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._stop.clear()
            self._task = asyncio.create_task(self.run(), name="cache-purge")
        return self._task

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
