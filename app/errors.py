from __future__ import annotations


class ResourceNotFoundError(Exception):
    """Lookup by id missed; rendered as 404 ``{"message": ...}``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InternalServiceError(Exception):
    """Any unexpected failure inside a handler; rendered as 500 ``{"error": ...}``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
