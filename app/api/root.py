from __future__ import annotations

from fastapi import APIRouter, Depends

from app.models.schemas import DirectoryResponse, EndpointInfo, HealthResponse
from app.services.context import ServiceContext, get_context

router = APIRouter(tags=["meta"])


@router.get("/", response_model=DirectoryResponse, response_model_exclude_none=True)
async def index(context: ServiceContext = Depends(get_context)) -> DirectoryResponse:
    return DirectoryResponse(
        message="API Server is running",
        endpoints=[
            EndpointInfo(path="/customers", methods=["GET", "POST"]),
            EndpointInfo(path="/customers/:id", methods=["GET"]),
            EndpointInfo(path="/products", methods=["GET", "POST"]),
            EndpointInfo(path="/products/:id", methods=["GET"]),
            EndpointInfo(
                path=context.settings.metrics_path,
                methods=["GET"],
                description="Prometheus metrics",
            ),
        ],
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")
