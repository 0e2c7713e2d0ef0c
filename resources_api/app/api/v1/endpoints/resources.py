"""
Resource endpoints for API v1.

CRUD operations on resources.  Handlers are plain (synchronous)
functions: FastAPI runs them in its thread pool, and the service's lock
serialises the writes and the file rewrite that follows each of them.
Service errors are translated into HTTP errors with the status code
the error carries.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from resources_api.app.api.deps import get_resource_service
from resources_api.app.core.errors import ServiceError, to_http_exception
from resources_api.app.core.security import get_current_principal
from resources_api.app.schemas.resource import ResourceCount, ResourceModel
from resources_api.app.services.resource_service import DEFAULT_SIZE, ResourceService

router = APIRouter()


@router.get("/", response_model=List[ResourceModel])
def list_resources(
    position: int = Query(0, ge=0),
    size: int = Query(DEFAULT_SIZE, ge=0, le=1000),
    service: ResourceService = Depends(get_resource_service),
) -> List[ResourceModel]:
    """Return a page of resources ordered by name, then id."""
    try:
        return service.list_resources(position=position, size=size)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/count", response_model=ResourceCount)
def count_resources(service: ResourceService = Depends(get_resource_service)) -> ResourceCount:
    return ResourceCount(count=service.count_resources())


@router.post("/", response_model=ResourceModel, status_code=status.HTTP_201_CREATED)
def create_resource(
    resource: ResourceModel,
    principal: str = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceModel:
    """Create a resource.

    ``name`` and ``contactId`` are required; ``id`` must not be sent.
    ``firstName`` and ``lastName`` are taken from the contact.
    """
    try:
        return service.create_resource(resource, principal)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/{resource_id}", response_model=ResourceModel)
def read_resource(
    resource_id: str,
    service: ResourceService = Depends(get_resource_service),
) -> ResourceModel:
    try:
        return service.read_resource(resource_id)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.put("/{resource_id}", response_model=ResourceModel)
def update_resource(
    resource_id: str,
    resource: ResourceModel,
    principal: str = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceModel:
    """Update name and contact of a resource.

    Creation metadata and names sent by the client are ignored.
    """
    try:
        return service.update_resource(resource_id, resource, principal)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
    resource_id: str,
    principal: str = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> None:
    """Delete a resource and all of its rate references."""
    try:
        service.delete_resource(resource_id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return None
