"""Shared FastAPI dependencies for the API routers."""

from fastapi import HTTPException, Request, status

from ..services.resource_service import ResourceService


def get_resource_service(request: Request) -> ResourceService:
    """Return the ``ResourceService`` attached to the application.

    Raises HTTP 503 until the service has been built at startup.
    """
    service = getattr(request.app.state, "resource_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Resource store is not initialised",
        )
    return service
