"""Health, readiness and status routes."""

import logging

from fastapi import APIRouter, Depends

from config import settings
from routes.deps import get_services
from services.container import ServiceContainer
from services.models import StatusReport
from services.status import get_status

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check, no external calls."""
    return {"status": "ok", "service": "dashboard-api", "commit": settings.git_sha}


@router.get("/dashboard/v1/status", response_model=StatusReport)
async def status(services: ServiceContainer = Depends(get_services)):
    """Deep status check: upstream providers, document store and webhook count."""
    return await get_status(services.client, services.store, services.webhooks)
