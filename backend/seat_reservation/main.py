"""
Seat Reservation API entry point.

Run with:
    uvicorn seat_reservation.main:app --app-dir backend

Routes:
- /api/v1/bookings        reserve seats, read booking history
- /api/v1/events          catalog reads and live seat availability
- /health, /metrics       liveness with cache status, Prometheus exposition
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seat_reservation.api.errors import register_exception_handlers
from seat_reservation.api.middleware import RequestLoggingMiddleware
from seat_reservation.api.router import api_router
from seat_reservation.core.config import Settings, get_settings
from seat_reservation.core.logging import get_logger, setup_logging
from seat_reservation.core.metrics import metrics_endpoint
from seat_reservation.db.session import dispose_engine
from seat_reservation.infrastructure.redis_client import close_redis, get_redis
from seat_reservation.services.cache_service import get_cache_stats

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info(
        "application_starting",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        ledger_backend=settings.LEDGER_BACKEND,
        max_attempts=settings.RESERVATION_MAX_ATTEMPTS,
    )

    if await get_redis():
        logger.info("redis_ready")
    elif settings.REDIS_ENABLED:
        logger.warning("redis_unavailable", message="Serving availability without cache")

    yield

    await close_redis()
    await dispose_engine()
    logger.info("application_shutdown")


def _register_service_routes(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "ledger_backend": settings.LEDGER_BACKEND,
            "cache": await get_cache_stats(),
        }

    @app.get("/metrics", tags=["Health"], include_in_schema=False)
    def metrics():
        return metrics_endpoint()

    @app.get("/", tags=["Root"], include_in_schema=False)
    async def root():
        return {"service": settings.APP_NAME, "version": settings.APP_VERSION, "docs": "/docs"}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Reserve specific seats for events without double booking",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)
    _register_service_routes(app)
    return app


app = create_app()
