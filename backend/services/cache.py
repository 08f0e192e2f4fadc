"""TTL cache on top of the document store.

Each category writes ``{timestamp, data}`` records into its own collection.
Freshness is checked on every read; the purge loop only reclaims storage.

Concurrent writers to the same key are not coordinated. The last write wins,
which at worst costs an extra provider call.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, TypeVar

from pydantic import BaseModel, ValidationError

from errors import CacheMiss, MissKind, RecordDecodeError, StoreWriteError
from services.models import CacheEntry, Category
from services.store import DocumentStore, Record

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Fixed per category. Read-path expiry and the purge loop both use this table.
CACHE_TTLS: dict[Category, timedelta] = {
    Category.COUNTRY: timedelta(hours=24),
    Category.WEATHER: timedelta(hours=2),
    Category.CURRENCY: timedelta(hours=12),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_expired(timestamp: datetime, max_age: timedelta, now: datetime) -> bool:
    # Records written without an offset are UTC.
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return now - timestamp > max_age


class CacheStore:
    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utcnow):
        self._store = store
        self._clock = clock

    async def write(self, category: Category, key: str, payload: BaseModel) -> None:
        """Overwrite ``key`` with ``payload`` stamped with the current time.

        Raises StoreWriteError if the backend rejects the write.
        """
        entry = CacheEntry[type(payload)](timestamp=self._clock(), data=payload)
        try:
            await self._store.set(category.collection, key, entry.model_dump(mode="json"))
        except Exception as e:
            raise StoreWriteError(category.collection, key, e) from e

    async def read(
        self,
        category: Category,
        key: str,
        model: type[M],
        max_age: timedelta | None = None,
    ) -> M:
        """Return the cached payload, or raise CacheMiss if absent, stale or undecodable."""
        collection = category.collection
        try:
            record = await self._store.get(collection, key)
        except RecordDecodeError as e:
            logger.warning("Discarding undecodable cache record %s/%s: %s", collection, key, e)
            raise CacheMiss(MissKind.DECODE, collection, key) from e
        if record is None:
            raise CacheMiss(MissKind.NOT_FOUND, collection, key)

        entry = _decode(record, model, collection, key)
        if max_age is None:
            max_age = CACHE_TTLS[category]
        if is_expired(entry.timestamp, max_age, self._clock()):
            raise CacheMiss(MissKind.EXPIRED, collection, key)
        return entry.data


def _decode(record: Record, model: type[M], collection: str, key: str) -> CacheEntry:
    try:
        return CacheEntry[model].model_validate(record)
    except ValidationError as e:
        logger.warning("Discarding undecodable cache record %s/%s: %s", collection, key, e)
        raise CacheMiss(MissKind.DECODE, collection, key) from e
