"""Base error type shared by the domain services."""

from __future__ import annotations


class ServiceError(Exception):
    """A failure that maps onto an HTTP status and a machine-readable reason."""

    status_code = 400

    def __init__(self, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        if status_code is not None:
            self.status_code = status_code


class NotFound(ServiceError):
    status_code = 404


class Forbidden(ServiceError):
    status_code = 403


class Conflict(ServiceError):
    status_code = 409
