"""
FastAPI application factory and configuration.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import Settings, get_settings
from ..core.exceptions import BookingFlowError, BookingValidationError
from ..utils.logging import configure_logging
from .handlers import FlowHandler, HealthHandler, VehicleHandler
from .middleware import LoggingMiddleware, SecurityHeaders
from .sessions import FlowRegistry


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[FlowRegistry] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    registry = registry or FlowRegistry.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Booking flow and pricing for mobile car detailing",
        version=settings.app_version,
        debug=settings.debug,
    )
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeaders)
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(BookingValidationError)
    async def validation_error_handler(request: Request, exc: BookingValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "field_errors": exc.field_errors},
        )

    @app.exception_handler(BookingFlowError)
    async def flow_error_handler(request: Request, exc: BookingFlowError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    health_handler = HealthHandler(settings)
    flow_handler = FlowHandler(registry)
    vehicle_handler = VehicleHandler()

    app.include_router(health_handler.router, prefix="/health", tags=["health"])
    app.include_router(flow_handler.router, prefix="/flow", tags=["booking"])
    app.include_router(vehicle_handler.router, prefix="/vehicle-sizes", tags=["vehicles"])

    return app
