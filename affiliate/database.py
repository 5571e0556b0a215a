"""Async движок SQLModel и фабрика сессий."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from affiliate import models  # noqa: F401  импортируем модели для регистрации метаданных
from config.settings import DatabaseSettings


def is_memory_sqlite(dsn: str) -> bool:
    """In-memory SQLite: все сессии делят одно соединение (StaticPool)."""

    if not dsn.startswith("sqlite"):
        return False
    _, _, path = dsn.partition("://")
    return path in ("", "/") or ":memory:" in path


def create_engine(db: DatabaseSettings) -> AsyncEngine:
    kwargs: dict = {"echo": db.echo}
    if is_memory_sqlite(db.dsn):
        # одна общая in-memory база на весь процесс
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        kwargs.update(pool_pre_ping=True)
    return create_async_engine(db.dsn, **kwargs)


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Создаёт таблицы, если их ещё нет."""

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


__all__ = ["create_engine", "init_db", "is_memory_sqlite", "make_session_maker"]
