from __future__ import annotations

import uuid
from collections.abc import Iterable
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from app.observability.instruments import (
    BUNDLE_REQUEST_DURATION_SECONDS,
    HTTP_REQUEST_DURATION_MS,
    normalize_path,
)
from app.observability.metrics import MetricsRegistry


class RequestTimingMiddleware:
    """Adds request_id context, access logs, and per-request duration histograms.

    A request is observed exactly once, after its final body chunk was handed
    to the server. Requests whose client went away first are not observed.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        *,
        metrics: MetricsRegistry,
        project: str,
        route_label: str = "path",
        excluded_paths: Iterable[str] = ("/metrics",),
    ) -> None:
        self.app = app
        self.metrics = metrics
        self.project = project
        self.route_label = route_label
        # The exposition endpoint is not timed, so scrapes don't show up in dashboards.
        self._excluded_metric_paths = set(excluded_paths)

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path", "")
        method = scope.get("method", "")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=method,
        )

        start = perf_counter()
        status_code: int = 500
        response_started = False
        response_complete = False
        failed_before_start = False
        disconnected = False

        async def receive_wrapper() -> dict[str, Any]:
            nonlocal disconnected

            message = await receive()
            if message.get("type") == "http.disconnect" and not response_complete:
                disconnected = True
            return message

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code, response_started, response_complete

            final_chunk = False
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                response_started = True
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
            elif message.get("type") == "http.response.body":
                final_chunk = not message.get("more_body", False)

            await send(message)

            if final_chunk:
                response_complete = True

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        except Exception:
            # The server error layer answers with a 500 once this propagates.
            if not response_started:
                failed_before_start = True
                status_code = 500
            raise
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0
            completed = (response_complete or failed_before_start) and not disconnected

            # Update metrics first so they update even if logging misbehaves.
            if path not in self._excluded_metric_paths:
                if completed:
                    self._observe(scope, method, path, status_code, elapsed_ms)
                else:
                    structlog.get_logger("access").warning(
                        "http_request_aborted",
                        response_started=response_started,
                        elapsed_ms=round(elapsed_ms, 2),
                    )

            structlog.get_logger("access").info(
                "http_request",
                status_code=status_code,
                elapsed_ms=round(elapsed_ms, 2),
            )

            structlog.contextvars.clear_contextvars()

    def _route_for(self, scope: dict[str, Any], path: str) -> str:
        if self.route_label == "template":
            # FastAPI stores the matched route in the (shared) scope while routing.
            route = scope.get("route")
            template = getattr(route, "path", None)
            if template:
                return str(template)
        return path

    def _observe(self, scope: dict[str, Any], method: str, path: str, status_code: int, elapsed_ms: float) -> None:
        self.metrics.observe(
            HTTP_REQUEST_DURATION_MS,
            {"method": method, "route": self._route_for(scope, path), "status_code": status_code},
            elapsed_ms,
        )
        self.metrics.observe(
            BUNDLE_REQUEST_DURATION_SECONDS,
            {
                "status_code": status_code,
                "method": method,
                "path": normalize_path(path),
                "project": self.project,
            },
            elapsed_ms / 1000.0,
        )
