"""Настройка loguru для продакшена."""

from __future__ import annotations

import sys

from loguru import logger


def setup_logging(json: bool = False, level: str = "DEBUG") -> None:
    logger.remove()
    if json:
        # serialize=True отдаёт record целиком одной JSON-строкой
        logger.add(sys.stdout, level=level, serialize=True, backtrace=False, enqueue=True)
        return
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
        level=level,
        colorize=True,
        backtrace=False,
        enqueue=True,
    )


__all__ = ["setup_logging"]
