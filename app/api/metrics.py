from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.services.context import ServiceContext, get_context


def build_metrics_router(path: str = "/metrics") -> APIRouter:
    router = APIRouter(tags=["metrics"])

    @router.get(path, include_in_schema=False)
    async def metrics(context: ServiceContext = Depends(get_context)) -> Response:
        registry = context.metrics
        return Response(content=registry.render(), media_type=registry.content_type)

    return router
