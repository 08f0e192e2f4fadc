"""Process-wide service wiring.

The document store and HTTP client are created once and shared by reference
with every service; there is no module-level store handle.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

import httpx

from config import Settings
from services import providers
from services.cache import CacheStore
from services.enrichment import DashboardEnricher
from services.notifier import Notifier
from services.purge import PurgeLoop
from services.registrations import RegistrationService
from services.repositories import DashboardConfigRepository, WebhookRepository
from services.store import DocumentStore, build_store

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    store: DocumentStore
    client: httpx.AsyncClient
    cache: CacheStore
    configs: DashboardConfigRepository
    webhooks: WebhookRepository
    notifier: Notifier
    enricher: DashboardEnricher
    registrations: RegistrationService
    purge_loop: PurgeLoop

    @classmethod
    def build(
        cls,
        settings: Settings,
        store: DocumentStore | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "ServiceContainer":
        store = store or build_store(settings.store_backend, settings.redis_url, settings.redis_timeout_seconds)
        client = client or providers.new_client()

        cache = CacheStore(store)
        configs = DashboardConfigRepository(store)
        webhooks = WebhookRepository(store)
        notifier = Notifier(webhooks, client)

        return cls(
            store=store,
            client=client,
            cache=cache,
            configs=configs,
            webhooks=webhooks,
            notifier=notifier,
            enricher=DashboardEnricher(cache, configs, client, notifier),
            registrations=RegistrationService(configs, client, notifier),
            purge_loop=PurgeLoop(store, interval=timedelta(seconds=settings.cache_purge_interval_seconds)),
        )

    async def aclose(self) -> None:
        await self.purge_loop.stop()
        await self.notifier.drain()
        await self.client.aclose()
        await self.store.close()
