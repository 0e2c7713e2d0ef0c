"""
Top‑level router for version 1 of the API.

Both routers share the ``/resources`` prefix: rate references are
addressed through the resource that owns them.
"""

from fastapi import APIRouter

from .endpoints import rate_refs, resources

router = APIRouter()

router.include_router(resources.router, prefix="/resources", tags=["resources"])
router.include_router(rate_refs.router, prefix="/resources", tags=["raterefs"])
