"""Durable document store used for cache entries, dashboard configs and webhooks.

Records are JSON-serializable dicts grouped into named collections. Two
backends are provided:

- ``MemoryDocumentStore``: process-local, the default and what tests use.
  Each uvicorn worker gets its own copy.
- ``RedisDocumentStore``: one Redis hash per collection, JSON values. Shared
  across workers and restarts.

Reads raise ``RecordDecodeError`` when a stored value is not valid JSON.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any, Callable

import redis.asyncio as redis

from errors import RecordDecodeError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

DEFAULT_REDIS_TIMEOUT_SECONDS = 2.0


def _loads(collection: str, key: str, encoded: str) -> Record:
    try:
        return json.loads(encoded)
    except ValueError as e:
        raise RecordDecodeError(collection, key, e) from e


class DocumentStore(ABC):
    @abstractmethod
    async def set(self, collection: str, key: str, record: Record) -> None:
        """Write ``record`` under ``key``, replacing any previous record."""

    @abstractmethod
    async def get(self, collection: str, key: str) -> Record | None: ...

    @abstractmethod
    async def all(self, collection: str) -> list[tuple[str, Record]]: ...

    @abstractmethod
    async def delete(self, collection: str, key: str) -> bool:
        """Delete one record. Returns False if it did not exist."""

    async def add(self, collection: str, record: Record) -> str:
        """Store ``record`` under a newly generated key and return the key."""
        key = uuid.uuid4().hex
        await self.set(collection, key, record)
        return key

    async def delete_where(self, collection: str, predicate: Callable[[Record], bool]) -> int:
        """Delete every record matching ``predicate``. Returns the count deleted."""
        deleted = 0
        for key, record in await self.all(collection):
            if predicate(record) and await self.delete(collection, key):
                deleted += 1
        return deleted

    async def ping(self) -> None:
        """Raise if the backend is unreachable."""

    async def close(self) -> None:
        pass


class MemoryDocumentStore(DocumentStore):
    """In-memory store. Records are kept as JSON text so reads never alias writes."""

    def __init__(self):
        self._lock = Lock()
        self._data: dict[str, dict[str, str]] = {}

    async def set(self, collection: str, key: str, record: Record) -> None:
        encoded = json.dumps(record)
        with self._lock:
            self._data.setdefault(collection, {})[key] = encoded

    async def get(self, collection: str, key: str) -> Record | None:
        with self._lock:
            encoded = self._data.get(collection, {}).get(key)
        return _loads(collection, key, encoded) if encoded is not None else None

    async def all(self, collection: str) -> list[tuple[str, Record]]:
        with self._lock:
            items = list(self._data.get(collection, {}).items())
        return [(key, _loads(collection, key, encoded)) for key, encoded in items]

    async def delete(self, collection: str, key: str) -> bool:
        with self._lock:
            return self._data.get(collection, {}).pop(key, None) is not None


class RedisDocumentStore(DocumentStore):
    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float = DEFAULT_REDIS_TIMEOUT_SECONDS) -> "RedisDocumentStore":
        logger.info("Using Redis document store (timeout %.1fs)", timeout)
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    async def set(self, collection: str, key: str, record: Record) -> None:
        await self._client.hset(collection, key, json.dumps(record))

    async def get(self, collection: str, key: str) -> Record | None:
        encoded = await self._client.hget(collection, key)
        return _loads(collection, key, encoded) if encoded is not None else None

    async def all(self, collection: str) -> list[tuple[str, Record]]:
        raw = await self._client.hgetall(collection)
        return [(key, _loads(collection, key, encoded)) for key, encoded in raw.items()]

    async def delete(self, collection: str, key: str) -> bool:
        return bool(await self._client.hdel(collection, key))

    async def delete_where(self, collection: str, predicate: Callable[[Record], bool]) -> int:
        raw = await self._client.hgetall(collection)
        stale = []
        for key, encoded in raw.items():
            try:
                record = _loads(collection, key, encoded)
            except RecordDecodeError as e:
                # Overwritten by the next successful fetch.
                logger.warning("Skipping %s", e)
                continue
            if predicate(record):
                stale.append(key)
        if not stale:
            return 0
        return int(await self._client.hdel(collection, *stale))

    async def ping(self) -> None:
        await self._client.ping()

    async def close(self) -> None:
        await self._client.aclose()


def build_store(
    backend: str,
    redis_url: str | None = None,
    redis_timeout: float = DEFAULT_REDIS_TIMEOUT_SECONDS,
) -> DocumentStore:
    """Construct the configured backend. Called once at process start."""
    if backend == "redis":
        if not redis_url:
            raise ValueError("REDIS_URL is required when STORE_BACKEND=redis")
        return RedisDocumentStore.from_url(redis_url, timeout=redis_timeout)
    if backend != "memory":
        raise ValueError(f"Unknown store backend: {backend}. Supported: ['memory', 'redis']")
    return MemoryDocumentStore()
