from __future__ import annotations

from pydantic import BaseModel


class EndpointInfo(BaseModel):
    path: str
    methods: list[str]
    description: str | None = None


class DirectoryResponse(BaseModel):
    message: str
    endpoints: list[EndpointInfo]


class HealthResponse(BaseModel):
    status: str


class NotFoundResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
