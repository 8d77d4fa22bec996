"""
FastAPI application for the barber booking webhooks

Stateless per request: the calendar and the database hold all state
"""
import logging
from collections import defaultdict
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from barberbook.api.router import api_router
from barberbook.config.settings import get_settings
from barberbook.core.errors import SchedulingError, scheduling_error_handler
from barberbook.core.middleware import correlation_id_middleware, request_logging_middleware
from barberbook.core.monitoring import health_router
from barberbook.services.calendar.calendar_gateway import CalendarGatewayFactory
from barberbook.services.calendar.google_calendar_service import google_gateway_factory
from barberbook.utils.my_logging import setup_logging

settings = get_settings()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info(f"{settings.APP_NAME} starting up (calendar timezone {settings.CALENDAR_TIMEZONE})")

    routes_by_tag = defaultdict(list)
    for route in app.routes:
        if isinstance(route, APIRoute):
            tag = route.tags[0] if route.tags else "other"
            for method in sorted(route.methods):
                routes_by_tag[tag].append(f"{method} {route.path}")

    for tag, routes in sorted(routes_by_tag.items()):
        logger.info(f"[{tag}] {', '.join(sorted(routes))}")

    yield

    # Shutdown
    logger.info(f"{settings.APP_NAME} shutting down")


def create_app(gateway_factory: CalendarGatewayFactory = google_gateway_factory) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="SMS booking webhooks backed by the barber's Google Calendar",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Calendar access is injected so it can be swapped per deployment or in tests
    app.state.gateway_factory = gateway_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Registered in reverse: correlation id runs first
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(SchedulingError, scheduling_error_handler)

    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "appointments": "/client-appointment",
                "availability": ["/check-availability", "/find-available-slots"],
                "conversation": "/conversation/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "barberbook.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
