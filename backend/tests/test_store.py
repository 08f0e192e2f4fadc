"""Document store backends."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from errors import RecordDecodeError
from services.store import MemoryDocumentStore, RedisDocumentStore, build_store


@pytest.mark.asyncio
async def test_memory_store_basic_operations():
    store = MemoryDocumentStore()

    key = await store.add("things", {"n": 1})
    await store.set("things", "fixed", {"n": 2})

    assert await store.get("things", key) == {"n": 1}
    assert sorted(r["n"] for _, r in await store.all("things")) == [1, 2]
    assert await store.delete("things", "fixed") is True
    assert await store.delete("things", "fixed") is False
    assert await store.get("other", key) is None


@pytest.mark.asyncio
async def test_memory_store_returns_copies():
    store = MemoryDocumentStore()
    record = {"data": {"n": 1}}
    await store.set("c", "k", record)

    record["data"]["n"] = 99
    fetched = await store.get("c", "k")
    fetched["data"]["n"] = 42

    assert await store.get("c", "k") == {"data": {"n": 1}}


@pytest.mark.asyncio
async def test_delete_where():
    store = MemoryDocumentStore()
    for n in range(5):
        await store.set("c", str(n), {"n": n})

    deleted = await store.delete_where("c", lambda r: r["n"] % 2 == 0)

    assert deleted == 3
    assert sorted(k for k, _ in await store.all("c")) == ["1", "3"]


@pytest.mark.asyncio
async def test_redis_store_uses_one_hash_per_collection():
    client = AsyncMock()
    client.hget.return_value = '{"n": 1}'
    client.hgetall.return_value = {"a": '{"n": 1}', "b": '{"n": 2}'}
    client.hdel.return_value = 1
    store = RedisDocumentStore(client)

    await store.set("weather_cache", "k", {"n": 1})
    assert await store.get("weather_cache", "k") == {"n": 1}
    deleted = await store.delete_where("weather_cache", lambda r: r["n"] == 2)

    client.hset.assert_awaited_once_with("weather_cache", "k", '{"n": 1}')
    client.hdel.assert_awaited_once_with("weather_cache", "b")
    assert deleted == 1


def test_build_store():
    assert isinstance(build_store("memory"), MemoryDocumentStore)
    with pytest.raises(ValueError):
        build_store("redis")
    with pytest.raises(ValueError):
        build_store("firestore")


@pytest.mark.asyncio
async def test_redis_store_reports_non_json_values():
    client = AsyncMock()
    client.hget.return_value = "{not json"
    store = RedisDocumentStore(client)

    with pytest.raises(RecordDecodeError) as exc_info:
        await store.get("weather_cache", "k")
    assert exc_info.value.key == "k"


@pytest.mark.asyncio
async def test_redis_delete_where_skips_non_json_values():
    client = AsyncMock()
    client.hgetall.return_value = {"bad": "{not json", "old": '{"n": 1}', "new": '{"n": 2}'}
    client.hdel.return_value = 1
    store = RedisDocumentStore(client)

    deleted = await store.delete_where("weather_cache", lambda r: r["n"] == 1)

    client.hdel.assert_awaited_once_with("weather_cache", "old")
    assert deleted == 1


def test_redis_client_has_socket_timeouts(monkeypatch):
    from_url = MagicMock()
    monkeypatch.setattr("services.store.redis.from_url", from_url)

    store = build_store("redis", "redis://cache:6379/0", redis_timeout=1.5)

    assert isinstance(store, RedisDocumentStore)
    from_url.assert_called_once_with(
        "redis://cache:6379/0",
        decode_responses=True,
        socket_timeout=1.5,
        socket_connect_timeout=1.5,
    )
