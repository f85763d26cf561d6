from __future__ import annotations

import sys

from loguru import logger

from ochistory.config import Settings

HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(settings: Settings) -> None:
    logger.remove()
    if settings.is_production:
        logger.add(sys.stderr, level=settings.loguru_level, serialize=True)
    else:
        logger.add(sys.stderr, level=settings.loguru_level, format=HUMAN_FORMAT)
