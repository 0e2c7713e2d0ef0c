"""
Rate reference endpoints for API v1.

Rate references only exist below a resource, so every route is nested
under ``/resources/{resource_id}/raterefs``.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from resources_api.app.api.deps import get_resource_service
from resources_api.app.core.errors import ServiceError, to_http_exception
from resources_api.app.core.security import get_current_principal
from resources_api.app.schemas.resource import RateRefModel
from resources_api.app.services.resource_service import DEFAULT_SIZE, ResourceService

router = APIRouter()


@router.get("/{resource_id}/raterefs/", response_model=List[RateRefModel])
def list_rate_refs(
    resource_id: str,
    position: int = Query(0, ge=0),
    size: int = Query(DEFAULT_SIZE, ge=0, le=1000),
    service: ResourceService = Depends(get_resource_service),
) -> List[RateRefModel]:
    try:
        return service.list_rate_refs(resource_id, position=position, size=size)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post(
    "/{resource_id}/raterefs/",
    response_model=RateRefModel,
    status_code=status.HTTP_201_CREATED,
)
def create_rate_ref(
    resource_id: str,
    rate_ref: RateRefModel,
    principal: str = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> RateRefModel:
    """Attach a rate to a resource.

    Returns 409 if the resource already references the rate.
    """
    try:
        return service.create_rate_ref(resource_id, rate_ref, principal)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/{resource_id}/raterefs/{rate_ref_id}", response_model=RateRefModel)
def read_rate_ref(
    resource_id: str,
    rate_ref_id: str,
    service: ResourceService = Depends(get_resource_service),
) -> RateRefModel:
    try:
        return service.read_rate_ref(resource_id, rate_ref_id)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.delete("/{resource_id}/raterefs/{rate_ref_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rate_ref(
    resource_id: str,
    rate_ref_id: str,
    principal: str = Depends(get_current_principal),
    service: ResourceService = Depends(get_resource_service),
) -> None:
    try:
        service.delete_rate_ref(resource_id, rate_ref_id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return None
