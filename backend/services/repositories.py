"""Dashboard configuration and webhook persistence on the document store."""

import logging

from errors import ConfigNotFoundError, WebhookNotFoundError
from services.models import DashboardConfig, Event, Webhook
from services.store import DocumentStore

logger = logging.getLogger(__name__)

DASHBOARD_COLLECTION = "dashboard_configs"
WEBHOOK_COLLECTION = "webhooks"


class DashboardConfigRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def add(self, config: DashboardConfig) -> str:
        config_id = await self._store.add(DASHBOARD_COLLECTION, _config_record(config))
        logger.info("Saved dashboard config %s", config_id)
        return config_id

    async def get(self, config_id: str) -> DashboardConfig:
        record = await self._store.get(DASHBOARD_COLLECTION, config_id)
        if record is None:
            raise ConfigNotFoundError(config_id)
        return DashboardConfig.model_validate({**record, "id": config_id})

    async def list_all(self) -> list[DashboardConfig]:
        return [
            DashboardConfig.model_validate({**record, "id": config_id})
            for config_id, record in await self._store.all(DASHBOARD_COLLECTION)
        ]

    async def save(self, config: DashboardConfig) -> None:
        await self._store.set(DASHBOARD_COLLECTION, config.id, _config_record(config))

    async def delete(self, config_id: str) -> None:
        if not await self._store.delete(DASHBOARD_COLLECTION, config_id):
            raise ConfigNotFoundError(config_id)


class WebhookRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def add(self, webhook: Webhook) -> str:
        return await self._store.add(WEBHOOK_COLLECTION, webhook.model_dump(mode="json", exclude={"id"}))

    async def get(self, webhook_id: str) -> Webhook:
        record = await self._store.get(WEBHOOK_COLLECTION, webhook_id)
        if record is None:
            raise WebhookNotFoundError(webhook_id)
        return Webhook.model_validate({**record, "id": webhook_id})

    async def list_all(self) -> list[Webhook]:
        return [
            Webhook.model_validate({**record, "id": webhook_id})
            for webhook_id, record in await self._store.all(WEBHOOK_COLLECTION)
        ]

    async def matching(self, event: Event, country: str) -> list[Webhook]:
        """Webhooks for ``event`` scoped to ``country`` or to every country."""
        country = country.strip().upper()
        return [
            hook for hook in await self.list_all()
            if hook.event == event and hook.country in (country, "")
        ]

    async def delete(self, webhook_id: str) -> None:
        if not await self._store.delete(WEBHOOK_COLLECTION, webhook_id):
            raise WebhookNotFoundError(webhook_id)

    async def count(self) -> int:
        return len(await self._store.all(WEBHOOK_COLLECTION))


def _config_record(config: DashboardConfig) -> dict:
    return config.model_dump(mode="json", by_alias=True, exclude={"id"})
