"""Shared fixtures: in-memory store, controllable clock and stubbed upstream APIs.

All HTTP traffic (providers and webhook receivers) goes through
``httpx.MockTransport`` so no test touches the network.
"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from services.cache import CacheStore
from services.enrichment import DashboardEnricher
from services.models import DashboardConfig, FeatureConfig
from services.notifier import Notifier
from services.repositories import DashboardConfigRepository, WebhookRepository
from services.store import MemoryDocumentStore

COUNTRIES_HOST = "restcountries.com"
WEATHER_HOST = "api.open-meteo.com"
CURRENCY_HOST = "api.frankfurter.app"
WEBHOOK_HOST = "hooks.example.com"


class FakeClock:
    def __init__(self, now: datetime = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class UpstreamStub:
    """Canned responses for the three providers plus a webhook receiver."""

    def __init__(self):
        self.country = [
            {
                "name": {"common": "Norway"},
                "capital": ["Oslo"],
                "latlng": [62.0, 10.0],
                "population": 123456,
                "area": 6543.21,
                "currencies": {"NOK": {"name": "Norwegian krone", "symbol": "kr"}},
            }
        ]
        self.weather = {"current": {"temperature_2m": -2.0, "precipitation": 1.5}}
        self.rates = {"amount": 1.0, "base": "NOK", "rates": {"USD": 1.23, "EUR": 1.05}}
        self.failing_hosts: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.webhook_posts: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host in self.failing_hosts:
            return httpx.Response(500, json={"error": "upstream down"})
        if host == COUNTRIES_HOST:
            return httpx.Response(200, json=self.country)
        if host == WEATHER_HOST:
            return httpx.Response(200, json=self.weather)
        if host == CURRENCY_HOST:
            return httpx.Response(200, json=self.rates)
        if host == WEBHOOK_HOST and request.method == "POST":
            self.webhook_posts.append(json.loads(request.content))
            return httpx.Response(200)
        return httpx.Response(404)

    def calls(self, host: str) -> int:
        return sum(1 for r in self.requests if r.url.host == host)


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def cache(store, clock):
    return CacheStore(store, clock=clock)


@pytest.fixture
def configs(store):
    return DashboardConfigRepository(store)


@pytest.fixture
def webhooks(store):
    return WebhookRepository(store)


@pytest.fixture
def notifier(webhooks, http_client, clock):
    return Notifier(webhooks, http_client, clock=clock)


@pytest.fixture
def enricher(cache, configs, http_client, notifier, clock):
    return DashboardEnricher(cache, configs, http_client, notifier, clock=clock)


@pytest.fixture
def full_features():
    return FeatureConfig(
        capital=True,
        coordinates=True,
        population=True,
        area=True,
        temperature=True,
        precipitation=True,
        target_currencies=["USD", "EUR"],
    )


@pytest.fixture
def make_config(configs):
    async def _make(features: FeatureConfig, iso_code: str = "NO", country: str = "Norway") -> DashboardConfig:
        config = DashboardConfig(country=country, iso_code=iso_code, features=features, last_change="20260115 12:00")
        config.id = await configs.add(config)
        return config

    return _make
