"""Cache-aside enrichment of dashboard configurations.

For every requested category the cache is consulted first; on a miss the
provider is called and the result written back. Country data is resolved
before weather and currency because they need its coordinates and currency.
A provider failure in any category fails the whole enrichment.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, TypeVar

import httpx
from pydantic import BaseModel

from errors import CacheMiss, ProviderError, StoreWriteError
from services import providers
from services.cache import CacheStore, utcnow
from services.cache_keys import country_key, currency_key, weather_key
from services.models import (
    Category,
    Coordinates,
    CountryInfo,
    CurrencyRates,
    DashboardConfig,
    Event,
    FeatureConfig,
    PopulatedDashboard,
    PopulatedFeatures,
    WeatherData,
    format_timestamp,
)
from services.notifier import Notifier
from services.repositories import DashboardConfigRepository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

LOW_TEMPERATURE_C = 0.0


class DashboardEnricher:
    def __init__(
        self,
        cache: CacheStore,
        configs: DashboardConfigRepository,
        client: httpx.AsyncClient,
        notifier: Notifier,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._cache = cache
        self._configs = configs
        self._client = client
        self._notifier = notifier
        self._clock = clock

    async def enrich_one(self, config_id: str) -> PopulatedDashboard:
        """Enrich a single dashboard and report INVOKE (and LOW_TEMP) events."""
        config = await self._configs.get(config_id)
        dashboard = await self.enrich(config)

        temperature = dashboard.features.temperature
        if temperature is not None and temperature < LOW_TEMPERATURE_C:
            self._notifier.dispatch(Event.LOW_TEMP, config.iso_code)
        self._notifier.dispatch(Event.INVOKE, config.iso_code)
        return dashboard

    async def enrich_all(self) -> list[PopulatedDashboard]:
        """Enrich every stored dashboard. Any single failure fails the batch."""
        configs = await self._configs.list_all()
        return [await self.enrich(config) for config in configs]

    async def enrich(self, config: DashboardConfig) -> PopulatedDashboard:
        features = config.features
        result = PopulatedFeatures()

        if features.wants_country or features.wants_weather or features.wants_currency:
            country = await self._country(config.iso_code)
            if features.wants_country:
                _apply_country(features, country, result)

            try:
                async with asyncio.TaskGroup() as group:
                    group.create_task(self._enrich_weather(config, country, result))
                    group.create_task(self._enrich_currency(config, country, result))
            except ExceptionGroup as failed:
                # The other category has been cancelled by the group.
                raise failed.exceptions[0] from None

        return PopulatedDashboard(
            id=config.id,
            country=config.country,
            iso_code=config.iso_code,
            features=result,
            last_retrieval=format_timestamp(self._clock()),
        )

    async def _country(self, iso_code: str) -> CountryInfo:
        return await self._cached(
            Category.COUNTRY,
            country_key(iso_code),
            CountryInfo,
            lambda: providers.fetch_country(self._client, iso_code),
        )

    async def _enrich_weather(self, config: DashboardConfig, country: CountryInfo, result: PopulatedFeatures) -> None:
        features = config.features
        if not features.wants_weather:
            return
        if len(country.latlng) != 2:
            raise ProviderError(Category.WEATHER, f"no coordinates known for {config.iso_code}")

        lat, lon = country.latlng
        weather = await self._cached(
            Category.WEATHER,
            weather_key(lat, lon),
            WeatherData,
            lambda: providers.fetch_weather(self._client, lat, lon),
        )
        if features.temperature:
            result.temperature = weather.temperature
        if features.precipitation:
            result.precipitation = weather.precipitation

    async def _enrich_currency(self, config: DashboardConfig, country: CountryInfo, result: PopulatedFeatures) -> None:
        targets = config.features.target_currencies
        if not targets:
            return

        base = providers.base_currency(country, config.iso_code)
        rates = await self._cached(
            Category.CURRENCY,
            currency_key(base, targets),
            CurrencyRates,
            lambda: providers.fetch_currency_rates(self._client, base, targets),
        )
        result.target_currencies = dict(rates.rates)

    async def _cached(
        self,
        category: Category,
        key: str,
        model: type[M],
        fetch: Callable[[], Awaitable[M]],
    ) -> M:
        try:
            return await self._cache.read(category, key, model)
        except CacheMiss as miss:
            logger.debug("%s", miss)

        value = await fetch()
        try:
            await self._cache.write(category, key, value)
        except StoreWriteError as e:
            logger.warning("Cache write failed, continuing without cache: %s", e)
        return value


def _apply_country(features: FeatureConfig, country: CountryInfo, result: PopulatedFeatures) -> None:
    if features.capital and country.capital:
        result.capital = country.capital[0]
    if features.coordinates and len(country.latlng) == 2:
        result.coordinates = Coordinates(latitude=country.latlng[0], longitude=country.latlng[1])
    if features.population:
        result.population = country.population
    if features.area:
        result.area = country.area
