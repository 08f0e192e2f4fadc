"""Custom exceptions and centralized FastAPI error handlers."""

import enum
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.models import Category

logger = logging.getLogger(__name__)


class DashboardError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ProviderError(DashboardError):
    """An upstream data provider was unreachable or returned unusable data."""

    def __init__(self, category: Category, detail: str):
        super().__init__(f"failed to fetch {category.value} data: {detail}", status_code=502)
        self.category = category
        self.detail = detail


class NoBaseCurrencyError(ProviderError):
    def __init__(self, iso_code: str):
        super().__init__(Category.CURRENCY, f"no base currency found for {iso_code}")


class ConfigNotFoundError(DashboardError):
    def __init__(self, config_id: str):
        super().__init__(f"dashboard config not found: {config_id}", status_code=404)
        self.config_id = config_id


class WebhookNotFoundError(DashboardError):
    def __init__(self, webhook_id: str):
        super().__init__(f"webhook not found: {webhook_id}", status_code=404)


class InvalidRegistrationError(DashboardError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class StoreWriteError(DashboardError):
    """The document store rejected a write. Never surfaced from enrichment."""

    def __init__(self, collection: str, key: str, cause: Exception):
        super().__init__(f"failed to write {collection}/{key}: {cause}")
        self.collection = collection
        self.key = key


class RecordDecodeError(Exception):
    """A stored record is not valid JSON."""

    def __init__(self, collection: str, key: str, cause: Exception):
        super().__init__(f"undecodable record {collection}/{key}: {cause}")
        self.collection = collection
        self.key = key


class MissKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    DECODE = "decode"


class CacheMiss(Exception):
    """Internal signal that a cached value must be re-fetched."""

    def __init__(self, kind: MissKind, collection: str, key: str):
        super().__init__(f"cache miss ({kind.value}) for {collection}/{key}")
        self.kind = kind
        self.collection = collection
        self.key = key


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(DashboardError)
    async def handle_dashboard_error(_request: Request, exc: DashboardError):
        if exc.status_code >= 500:
            logger.warning("Request failed: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
