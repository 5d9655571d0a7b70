#!/usr/bin/env python3
"""Start the Clippy chat API with uvicorn (settings come from env / .env)."""
import logging
import sys

import uvicorn

from clippy.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("clippy.server")


def main():
    logger.info(f"Clippy listening on http://{settings.host}:{settings.port} (python {sys.version.split()[0]})")
    uvicorn.run(
        "clippy.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
