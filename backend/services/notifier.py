"""Webhook fan-out for dashboard events.

``dispatch`` schedules delivery as a background task and returns immediately,
so a slow or failing subscriber never delays or fails the triggering request.
Each subscriber is attempted independently.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable

import httpx

from services.cache import utcnow
from services.models import Event, format_timestamp
from services.repositories import WebhookRepository

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(
        self,
        webhooks: WebhookRepository,
        client: httpx.AsyncClient,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._webhooks = webhooks
        self._client = client
        self._clock = clock
        self._pending: set[asyncio.Task] = set()

    def dispatch(self, event: Event, country: str) -> asyncio.Task:
        """Deliver ``event`` in the background. Must be called from a running loop."""
        task = asyncio.create_task(self.notify(event, country), name=f"notify-{event.value}")
        self._pending.add(task)
        task.add_done_callback(self._finished)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight delivery. Used on shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def notify(self, event: Event, country: str) -> int:
        """POST ``event`` to every matching webhook. Returns the number delivered."""
        try:
            hooks = await self._webhooks.matching(event, country)
        except Exception as e:
            logger.warning("Failed to fetch webhooks for %s/%s: %s", event.value, country, e)
            return 0

        logger.info("Found %d webhooks for event=%s, country=%s", len(hooks), event.value, country)

        delivered = 0
        for hook in hooks:
            payload = {
                "id": hook.id,
                "country": country,
                "event": event.value,
                "time": format_timestamp(self._clock()),
            }
            try:
                resp = await self._client.post(hook.url, json=payload)
                resp.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                logger.warning("Webhook %s call failed: %s", hook.id, e)
                continue
            logger.info("Webhook %s responded with status: %d", hook.id, resp.status_code)
            delivered += 1
        return delivered

    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Notification task %s failed: %s", task.get_name(), task.exception())
