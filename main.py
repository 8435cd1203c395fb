"""Application entry point."""

from __future__ import annotations

import asyncio
import logging

from config import load_config
from core import setup_logger
from core.app_initializer import ApplicationInitializer

logger = logging.getLogger("app")


async def main() -> None:
    """Main application entry point."""
    config = load_config()

    # Root logger so every module logger shares the handlers
    setup_logger(
        name=None,
        level=config.log_level,
        log_file=config.log_file,
        colored=True
    )

    app = ApplicationInitializer(config)
    await app.initialize()
    await app.run()


def run() -> None:
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
