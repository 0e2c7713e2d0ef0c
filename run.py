"""Entry point for the Resources API.

Serves ``resources_api.app.main:app`` with uvicorn.  Host and port are
read from the environment variables ``HOST`` and ``PORT`` (defaults
``0.0.0.0`` and ``8000``); everything else is configured through the
variables documented in ``resources_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from resources_api.app.core.config import settings


async def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(
        app="resources_api.app.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
