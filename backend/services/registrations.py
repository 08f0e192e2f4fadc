"""Registration workflow for dashboard configurations.

Every successful mutation reports its lifecycle event (REGISTER, CHANGE,
PATCH, DELETE) through the notifier.
"""

import logging
from datetime import datetime
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from errors import InvalidRegistrationError
from services import providers
from services.cache import utcnow
from services.models import (
    DashboardConfig,
    Event,
    FeatureConfig,
    RegistrationRequest,
    RegistrationResponse,
    format_timestamp,
)
from services.notifier import Notifier
from services.repositories import DashboardConfigRepository

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(
        self,
        configs: DashboardConfigRepository,
        client: httpx.AsyncClient,
        notifier: Notifier,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._configs = configs
        self._client = client
        self._notifier = notifier
        self._clock = clock

    async def register(self, request: RegistrationRequest) -> RegistrationResponse:
        if not request.country and not request.iso_code:
            raise InvalidRegistrationError("either 'country' or 'isoCode' must be provided")

        country = request.country
        if not country:
            country = await providers.fetch_country_name(self._client, request.iso_code)

        config = DashboardConfig(
            country=country,
            iso_code=request.iso_code,
            features=request.features,
            last_change=self._now(),
        )
        config.id = await self._configs.add(config)
        self._notifier.dispatch(Event.REGISTER, config.iso_code)
        return RegistrationResponse(id=config.id, last_change=config.last_change)

    async def get(self, config_id: str) -> DashboardConfig:
        return await self._configs.get(config_id)

    async def list_all(self) -> list[DashboardConfig]:
        return await self._configs.list_all()

    async def update(self, config_id: str, request: RegistrationRequest) -> RegistrationResponse:
        """Replace the whole configuration."""
        await self._configs.get(config_id)
        config = DashboardConfig(
            id=config_id,
            country=request.country,
            iso_code=request.iso_code,
            features=request.features,
            last_change=self._now(),
        )
        await self._configs.save(config)
        self._notifier.dispatch(Event.CHANGE, config.iso_code)
        return RegistrationResponse(id=config_id, last_change=config.last_change)

    async def patch(self, config_id: str, patch: dict[str, Any]) -> RegistrationResponse:
        """Apply only the fields present in ``patch``."""
        config = await self._configs.get(config_id)

        if isinstance(patch.get("country"), str):
            config.country = patch["country"]
        if isinstance(patch.get("isoCode"), str):
            config.iso_code = patch["isoCode"]
        if isinstance(patch.get("features"), dict):
            config.features = _patch_features(config.features, patch["features"])

        config.last_change = self._now()
        await self._configs.save(config)
        self._notifier.dispatch(Event.PATCH, config.iso_code)
        return RegistrationResponse(id=config.id, last_change=config.last_change)

    async def delete(self, config_id: str) -> None:
        config = await self._configs.get(config_id)
        await self._configs.delete(config_id)
        self._notifier.dispatch(Event.DELETE, config.iso_code)

    def _now(self) -> str:
        return format_timestamp(self._clock())


def _patch_features(current: FeatureConfig, patch: dict[str, Any]) -> FeatureConfig:
    merged = current.model_dump(by_alias=True)
    merged.update({k: v for k, v in patch.items() if k in merged})
    try:
        return FeatureConfig.model_validate(merged)
    except ValidationError as e:
        raise InvalidRegistrationError(f"invalid features patch: {e}") from e
