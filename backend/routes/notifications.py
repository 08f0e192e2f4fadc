"""Webhook subscription routes."""

import logging

import httpx
from fastapi import APIRouter, Depends, Response

from errors import DashboardError
from routes.deps import get_services
from services.container import ServiceContainer
from services.models import Event, Webhook, WebhookRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/v1/notifications", tags=["notifications"])

ALLOWED_EVENTS = {event.value for event in Event}


def _is_deliverable(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


@router.post("", status_code=201)
async def register_webhook(request: WebhookRequest, services: ServiceContainer = Depends(get_services)) -> dict:
    if not request.url or not request.event:
        raise DashboardError("Missing required fields: url or event", status_code=400)
    if not _is_deliverable(request.url):
        raise DashboardError(f"Invalid webhook url: {request.url}", status_code=400)

    event = request.event.strip().upper()
    if event not in ALLOWED_EVENTS:
        raise DashboardError(f"Unsupported event type: {event}. Supported: {sorted(ALLOWED_EVENTS)}", status_code=400)

    webhook = Webhook(url=request.url, event=Event(event), country=request.country.strip().upper())
    webhook_id = await services.webhooks.add(webhook)
    logger.info("Registered webhook %s for %s/%s", webhook_id, event, webhook.country or "*")
    return {"id": webhook_id}


@router.get("", response_model=list[Webhook])
async def list_webhooks(services: ServiceContainer = Depends(get_services)):
    return await services.webhooks.list_all()


@router.get("/{webhook_id}", response_model=Webhook)
async def get_webhook(webhook_id: str, services: ServiceContainer = Depends(get_services)):
    return await services.webhooks.get(webhook_id)


@router.delete("/{webhook_id}", status_code=204)
async def delete_webhook(webhook_id: str, services: ServiceContainer = Depends(get_services)) -> Response:
    await services.webhooks.delete(webhook_id)
    return Response(status_code=204)
