"""Run the authorization server with uvicorn: ``python -m cimd_server``."""

from __future__ import annotations

import logging

import uvicorn

from cimd_server.core.config import get_settings
from cimd_server.main import app

logger = logging.getLogger("cimd_server")


def main() -> None:
    # Host and port come from settings so the advertised issuer stays in sync.
    settings = get_settings()
    logger.info(
        "CIMD test OAuth server listening on port %d (issuer %s)",
        settings.port,
        settings.effective_issuer,
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
