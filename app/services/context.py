from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Request

from app.config import Settings
from app.observability.instruments import build_service_metrics
from app.observability.metrics import MetricsRegistry
from app.services.resource_store import ResourceStore


@dataclass
class ServiceContext:
    """State owned by one application instance: the stores and the metrics registry."""

    settings: Settings
    metrics: MetricsRegistry
    stores: dict[str, ResourceStore] = field(default_factory=dict)

    @classmethod
    def create(cls, settings: Settings) -> ServiceContext:
        return cls(
            settings=settings,
            metrics=build_service_metrics(settings),
            stores={
                "customers": ResourceStore("customer"),
                "products": ResourceStore("product"),
            },
        )

    def store(self, collection: str) -> ResourceStore:
        return self.stores[collection]


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context
