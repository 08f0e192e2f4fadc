"""Service status: upstream reachability, store connectivity and uptime."""

import asyncio
import logging
import time

import httpx

from config import settings
from services.models import StatusReport
from services.repositories import WebhookRepository
from services.store import DocumentStore

logger = logging.getLogger(__name__)

VERSION = "v1"
UNAVAILABLE = 503

_started_at = time.monotonic()


async def _check(client: httpx.AsyncClient, url: str, params: dict | None = None) -> int:
    try:
        resp = await client.get(url, params=params)
        return resp.status_code
    except httpx.HTTPError as e:
        logger.warning("Status check failed for %s: %s", url, e)
        return UNAVAILABLE


async def _check_store(store: DocumentStore) -> int:
    try:
        await store.ping()
    except Exception as e:
        logger.warning("Document store ping failed: %s", e)
        return UNAVAILABLE
    return 200


async def get_status(client: httpx.AsyncClient, store: DocumentStore, webhooks: WebhookRepository) -> StatusReport:
    countries, meteo, currency, db = await asyncio.gather(
        _check(client, f"{settings.countries_api_url}/alpha/no"),
        _check(
            client,
            f"{settings.weather_api_url}/v1/forecast",
            params={"latitude": 60, "longitude": 10, "current": "temperature_2m"},
        ),
        _check(client, f"{settings.currency_api_url}/latest", params={"from": "EUR", "to": "NOK"}),
        _check_store(store),
    )

    try:
        webhook_count = await webhooks.count()
    except Exception as e:
        logger.warning("Failed to count webhooks: %s", e)
        webhook_count = 0

    return StatusReport(
        countries_api=countries,
        meteo_api=meteo,
        currency_api=currency,
        notification_db=db,
        webhooks=webhook_count,
        version=VERSION,
        uptime=int(time.monotonic() - _started_at),
    )
