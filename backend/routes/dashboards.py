"""Populated dashboard routes: configs enriched with country, weather and currency data."""

import logging

from fastapi import APIRouter, Depends

from routes.deps import get_services
from services.container import ServiceContainer
from services.models import PopulatedDashboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/v1/dashboards", tags=["dashboards"])


@router.get("", response_model=list[PopulatedDashboard], response_model_exclude_none=True)
async def list_dashboards(services: ServiceContainer = Depends(get_services)):
    """Every registered dashboard, enriched. Fails if any single dashboard fails."""
    return await services.enricher.enrich_all()


@router.get("/{dashboard_id}", response_model=PopulatedDashboard, response_model_exclude_none=True)
async def get_dashboard(dashboard_id: str, services: ServiceContainer = Depends(get_services)):
    return await services.enricher.enrich_one(dashboard_id)
