"""Run the Bookxpert API server: python -m bookxpert"""

import logging
import os
import sys
from collections.abc import Mapping

import uvicorn

from bookxpert.config import Settings, settings


def startup_banner(config: Settings, environ: Mapping[str, str]) -> list[str]:
    """Lines describing where the server listens and what it caches."""
    if "PORT" in environ:
        port_source = "PORT"
    elif "BOOKXPERT_PORT" in environ:
        port_source = "BOOKXPERT_PORT"
    else:
        port_source = "default"

    lines = [
        f"Starting Bookxpert on {config.host}:{config.port} (port from {port_source})",
        f"Catalogue source: {config.catalogue_source}"
        + (f" ({config.catalogue_url})" if config.catalogue_source == "rest" else ""),
        f"Catalogue cache: {config.storage_backend}",
    ]
    if config.storage_backend == "memory":
        lines.append("! The memory cache is emptied on every restart")
    return lines


def main():
    """Run the Bookxpert REST API server."""
    for line in startup_banner(settings, os.environ):
        print(line)

    logging.basicConfig(level=settings.log_level.upper())

    # Startup checks print their own explanation, so uvicorn stays quiet
    try:
        uvicorn.run(
            "bookxpert.api.main:app",
            host=settings.host,
            port=settings.port,
            reload=settings.debug,
            log_level=settings.log_level.lower() if settings.debug else "critical",
        )
    except SystemExit:
        sys.exit(1)


if __name__ == "__main__":
    main()
