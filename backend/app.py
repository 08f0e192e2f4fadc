"""FastAPI application entry point for the dashboard API."""

import logging
import sys

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.container import ServiceContainer

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    app = FastAPI(title="Country Dashboard API", version="1.0.0")
    app.state.services = services or ServiceContainer.build(settings)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.dashboards import router as dashboards_router
    from routes.health import router as health_router
    from routes.notifications import router as notifications_router
    from routes.registrations import router as registrations_router

    app.include_router(health_router)
    app.include_router(dashboards_router)
    app.include_router(registrations_router)
    app.include_router(notifications_router)

    @app.on_event("startup")
    async def _startup() -> None:
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars: %s", ", ".join(missing))
        app.state.services.purge_loop.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.services.aclose()

    return app


app = create_app()
