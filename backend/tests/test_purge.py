"""Purge loop: single cycles and start/stop of the background task."""

import asyncio
from datetime import timedelta

import pytest

from services.cache import CACHE_TTLS
from services.models import Category, CountryInfo, CurrencyRates, WeatherData
from services.purge import PurgeLoop
from services.store import MemoryDocumentStore


class FailingCollectionStore(MemoryDocumentStore):
    def __init__(self, failing: str):
        super().__init__()
        self._failing = failing

    async def all(self, collection):
        if collection == self._failing:
            raise ConnectionError("collection unavailable")
        return await super().all(collection)


@pytest.mark.asyncio
async def test_cycle_removes_old_and_keeps_young_entries(store, cache, clock):
    await cache.write(Category.COUNTRY, "SE", CountryInfo(name="Sweden"))
    await cache.write(Category.WEATHER, "old", WeatherData(temperature=1.0, precipitation=0.0))
    clock.advance(hours=2, minutes=30)
    await cache.write(Category.WEATHER, "young", WeatherData(temperature=2.0, precipitation=0.0))
    await cache.write(Category.CURRENCY, "NOK_USD", CurrencyRates(rates={"USD": 0.1}))

    purged = await PurgeLoop(store, clock=clock).run_cycle()

    assert purged == {Category.COUNTRY: 0, Category.WEATHER: 1, Category.CURRENCY: 0}
    assert await store.get("weather_cache", "old") is None
    assert await store.get("weather_cache", "young") is not None
    assert await store.get("country_cache", "SE") is not None
    assert await store.get("currency_cache", "NOK_USD") is not None


@pytest.mark.asyncio
async def test_cycle_uses_each_category_ttl(store, cache, clock):
    await cache.write(Category.COUNTRY, "NO", CountryInfo(name="Norway"))
    await cache.write(Category.CURRENCY, "NOK_USD", CurrencyRates(rates={"USD": 0.1}))
    clock.advance(hours=13)

    await PurgeLoop(store, clock=clock).run_cycle()

    assert await store.get("currency_cache", "NOK_USD") is None
    assert await store.get("country_cache", "NO") is not None

    clock.advance(hours=12)
    await PurgeLoop(store, clock=clock).run_cycle()
    assert await store.get("country_cache", "NO") is None


@pytest.mark.asyncio
async def test_records_without_timestamp_are_left_alone(store, clock):
    await store.set("weather_cache", "odd", {"data": {"temperature": 1.0}})

    await PurgeLoop(store, clock=clock).run_cycle()

    assert await store.get("weather_cache", "odd") is not None


@pytest.mark.asyncio
async def test_failure_in_one_category_does_not_stop_others(clock):
    store = FailingCollectionStore("weather_cache")
    await store.set("country_cache", "NO", {"timestamp": "2020-01-01T00:00:00Z", "data": {}})
    await store.set("currency_cache", "NOK_USD", {"timestamp": "2020-01-01T00:00:00Z", "data": {}})

    purged = await PurgeLoop(store, clock=clock).run_cycle()

    assert Category.WEATHER not in purged
    assert purged[Category.COUNTRY] == 1
    assert purged[Category.CURRENCY] == 1


def test_purge_and_read_path_share_ttls():
    loop = PurgeLoop(MemoryDocumentStore())
    assert loop._ttls is CACHE_TTLS


@pytest.mark.asyncio
async def test_background_loop_runs_until_stopped(store, cache, clock):
    await cache.write(Category.WEATHER, "old", WeatherData(temperature=1.0, precipitation=0.0))
    clock.advance(hours=3)
    loop = PurgeLoop(store, interval=timedelta(hours=1), clock=clock)

    task = loop.start()
    for _ in range(50):
        if await store.get("weather_cache", "old") is None:
            break
        await asyncio.sleep(0.01)

    assert await store.get("weather_cache", "old") is None
    assert not task.done()

    await loop.stop()
    assert task.done()
