from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.metrics import build_metrics_router
from app.api.resources import customers_router, products_router
from app.api.root import router as root_router
from app.config import Settings, get_settings
from app.errors import InternalServiceError, ResourceNotFoundError
from app.observability.logging import configure_logging
from app.observability.middleware import RequestTimingMiddleware
from app.services.context import ServiceContext

logger = logging.getLogger(__name__)


async def _not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": exc.message})


async def _internal_error_handler(request: Request, exc: InternalServiceError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": exc.message})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an app with its own stores and metrics registry."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Storefront Metrics API", version="0.1.0")
    app.state.context = ServiceContext.create(settings)

    app.add_exception_handler(ResourceNotFoundError, _not_found_handler)
    app.add_exception_handler(InternalServiceError, _internal_error_handler)

    app.include_router(root_router)
    app.include_router(customers_router)
    app.include_router(products_router)
    app.include_router(build_metrics_router(settings.metrics_path))

    # Added last so timing wraps CORS and sees the final status code.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RequestTimingMiddleware,
        metrics=app.state.context.metrics,
        project=settings.metrics_project_label,
        route_label=settings.metrics_route_label,
        excluded_paths=(settings.metrics_path,),
    )

    logger.info(
        "app.created",
        extra={"metrics_path": settings.metrics_path, "route_label": settings.metrics_route_label},
    )
    return app


app = create_app()
