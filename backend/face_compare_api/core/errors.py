"""Error hierarchy for the face comparison service.

Every error carries the HTTP status it maps to and renders its own JSON body,
so the global handlers in ``api.error_handlers`` stay generic.
"""

from typing import Optional

from ..models.types import ErrorResponse


class ServiceError(Exception):
    """Base exception for all errors surfaced to API clients."""

    http_status = 500

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> ErrorResponse:
        """Convert to the JSON error body."""
        return {
            'success': False,
            'error': self.message,
            'message': self.message
        }


class ValidationError(ServiceError):
    """Request input is missing or malformed."""

    http_status = 400


class NotReadyError(ServiceError):
    """Recognition models have not finished loading."""

    http_status = 503

    def __init__(self, message: str = "Models still loading"):
        super().__init__(message)


class NotFoundError(ServiceError):
    """No route matches the requested path and method."""

    http_status = 404

    def __init__(self, path: str):
        super().__init__("url not found")
        self.path = path

    def to_response(self) -> ErrorResponse:
        return {
            'message': self.message,
            'error': 'Not Found',
            'path': self.path
        }


class InternalError(ServiceError):
    """Unexpected failure while serving a request."""

    http_status = 500
