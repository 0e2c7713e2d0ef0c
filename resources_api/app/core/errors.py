"""
Error taxonomy of the resources service.

Every error raised by the store, the indexes, the lookup clients and
the aggregate service derives from ``ServiceError`` and carries the
HTTP status code the API layer reports it with.
"""

from fastapi import HTTPException


class ServiceError(Exception):
    """Base class for all service errors."""

    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.__class__.__name__)
        self.message = str(self)


class NotFoundError(ServiceError):
    """Referenced entity was not found."""

    status_code = 404


class DuplicateError(ServiceError):
    """Entity with the same identity already exists."""

    status_code = 409


class ValidationError(ServiceError):
    """Input is malformed or not allowed."""

    status_code = 400


class InternalServerError(ServiceError):
    """Internal consistency violation."""

    status_code = 500


class StorageError(InternalServerError):
    """Durable storage could not be written."""


class ServiceUnavailableError(ServiceError):
    """An upstream service could not be reached."""

    status_code = 503


def to_http_exception(exc: ServiceError) -> HTTPException:
    """Translate a service error into the matching ``HTTPException``."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
