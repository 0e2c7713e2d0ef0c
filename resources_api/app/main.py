"""
Main entrypoint for the Resources API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  ``create_app`` builds and configures the
app, which is then instantiated at module import time as ``app``, e.g.::

    uvicorn resources_api.app.main:app --reload

The resource store is loaded on startup, not at import time, so that
importing this module never touches the data directory.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings, settings
from .core.logging_config import setup_logging
from .services.resource_service import ResourceService


def create_app(
    service: Optional[ResourceService] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    service : Optional[ResourceService]
        A ready service to serve.  If omitted, one is built on startup
        from ``app_settings``.
    app_settings : Optional[Settings]
        Settings to use instead of the module level ``settings``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    cfg = app_settings or settings
    setup_logging(cfg.log_level, cfg.log_file or None)

    app = FastAPI(title=cfg.project_name, version=cfg.api_version, debug=cfg.debug)
    app.state.resource_service = service
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    def startup_event() -> None:
        if app.state.resource_service is None:
            app.state.resource_service = ResourceService.from_settings(cfg)
            logging.getLogger(__name__).info(
                "Serving %d resources from %s",
                app.state.resource_service.count_resources(),
                app.state.resource_service.store.data_path,
            )

    return app


app = create_app()
