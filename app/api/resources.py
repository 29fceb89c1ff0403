from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, Request

from app.errors import InternalServiceError, ResourceNotFoundError
from app.models.schemas import ErrorResponse, NotFoundResponse
from app.observability.instruments import (
    API_ERROR_TOTAL,
    CUSTOMER_OPERATIONS_TOTAL,
    PRODUCT_OPERATIONS_TOTAL,
)
from app.services.context import ServiceContext, get_context
from app.services.resource_store import Record, parse_record_id

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON value: {name}")


@dataclass(frozen=True)
class ResourceDefinition:
    collection: str
    label: str
    operations_counter: str

    @property
    def prefix(self) -> str:
        return f"/{self.collection}"

    @property
    def item_route(self) -> str:
        # Label value used for api_error_total on id lookups.
        return f"{self.prefix}/:id"


CUSTOMERS = ResourceDefinition(collection="customers", label="Customer", operations_counter=CUSTOMER_OPERATIONS_TOTAL)
PRODUCTS = ResourceDefinition(collection="products", label="Product", operations_counter=PRODUCT_OPERATIONS_TOTAL)


async def read_record_fields(request: Request) -> dict[str, Any]:
    """Client fields from a JSON object or urlencoded form body; empty body -> {}."""

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPE):
        form = await request.form()
        return {key: value for key, value in form.items()}

    body = await request.body()
    if not body.strip():
        return {}

    payload = json.loads(body, parse_constant=_reject_constant)
    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    return payload


def build_resource_router(resource: ResourceDefinition) -> APIRouter:
    router = APIRouter(prefix=resource.prefix, tags=[resource.collection])

    @router.get("")
    async def list_records(context: ServiceContext = Depends(get_context)) -> list[Record]:
        records = context.store(resource.collection).list_records()
        context.metrics.increment(resource.operations_counter, {"operation": "get_all"})
        return records

    @router.post("", status_code=201, responses={500: {"model": ErrorResponse}})
    async def create_record(request: Request, context: ServiceContext = Depends(get_context)) -> Record:
        try:
            fields = await read_record_fields(request)
            record = context.store(resource.collection).create(fields)
            context.metrics.increment(resource.operations_counter, {"operation": "create"})
        except Exception as exc:  # noqa: BLE001 - reported to the client as a 500
            context.metrics.increment(API_ERROR_TOTAL, {"route": resource.prefix, "method": "POST"})
            logger.exception("record.create_failed", extra={"resource": resource.collection})
            raise InternalServiceError(str(exc)) from exc
        return record

    @router.get(
        "/{record_id}",
        responses={404: {"model": NotFoundResponse}, 500: {"model": ErrorResponse}},
    )
    async def get_record(record_id: str, context: ServiceContext = Depends(get_context)) -> Record:
        try:
            key = parse_record_id(record_id)
            record = context.store(resource.collection).get(key) if key is not None else None
        except Exception as exc:  # noqa: BLE001 - reported to the client as a 500
            context.metrics.increment(API_ERROR_TOTAL, {"route": resource.item_route, "method": "GET"})
            logger.exception("record.lookup_failed", extra={"resource": resource.collection, "record_id": record_id})
            raise InternalServiceError(str(exc)) from exc

        if record is None:
            context.metrics.increment(API_ERROR_TOTAL, {"route": resource.item_route, "method": "GET"})
            raise ResourceNotFoundError(f"{resource.label} not found")

        context.metrics.increment(resource.operations_counter, {"operation": "get_by_id"})
        return record

    return router


customers_router = build_resource_router(CUSTOMERS)
products_router = build_resource_router(PRODUCTS)
