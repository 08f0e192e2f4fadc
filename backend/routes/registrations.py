"""Dashboard registration routes (create, read, replace, patch, delete)."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from routes.deps import get_services
from services.container import ServiceContainer
from services.models import DashboardConfig, RegistrationRequest, RegistrationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/v1/registrations", tags=["registrations"])


@router.post("", response_model=RegistrationResponse, status_code=201)
async def register_dashboard(request: RegistrationRequest, services: ServiceContainer = Depends(get_services)):
    return await services.registrations.register(request)


@router.get("", response_model=list[DashboardConfig])
async def list_registrations(services: ServiceContainer = Depends(get_services)):
    return await services.registrations.list_all()


@router.get("/{config_id}", response_model=DashboardConfig)
async def get_registration(config_id: str, services: ServiceContainer = Depends(get_services)):
    return await services.registrations.get(config_id)


@router.head("/{config_id}")
async def head_registration(config_id: str, services: ServiceContainer = Depends(get_services)) -> Response:
    await services.registrations.get(config_id)
    return Response(status_code=200)


@router.put("/{config_id}", response_model=RegistrationResponse)
async def update_registration(
    config_id: str,
    request: RegistrationRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.registrations.update(config_id, request)


@router.patch("/{config_id}", response_model=RegistrationResponse)
async def patch_registration(
    config_id: str,
    patch: dict[str, Any] = Body(...),
    services: ServiceContainer = Depends(get_services),
):
    return await services.registrations.patch(config_id, patch)


@router.delete("/{config_id}", status_code=204)
async def delete_registration(config_id: str, services: ServiceContainer = Depends(get_services)) -> Response:
    await services.registrations.delete(config_id)
    return Response(status_code=204)
