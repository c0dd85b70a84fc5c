"""``python -m reelscout`` and the ``reelscout`` console script."""

from __future__ import annotations

import logging

import uvicorn

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


def main(settings: Settings | None = None) -> None:
    """Serve the search and recommendation API with uvicorn."""

    settings = settings or get_settings()
    logger.info(
        "Starting %s on %s:%s (%s)",
        settings.app_name,
        settings.server_host,
        settings.server_port,
        settings.environment,
    )
    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
