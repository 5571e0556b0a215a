"""Утилита для первичной инициализации базы данных."""

from __future__ import annotations

import asyncio

from loguru import logger

from affiliate.database import create_engine, init_db
from config.settings import get_settings


async def _run() -> None:
    engine = create_engine(get_settings().database)
    try:
        await init_db(engine)
        logger.info("Таблицы созданы: {url}", url=engine.url.render_as_string())
    finally:
        await engine.dispose()


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
