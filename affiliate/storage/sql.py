"""SQL-хранилище поверх SQLModel / async SQLAlchemy."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, nullcontext
from decimal import Decimal
from typing import AsyncIterator, Sequence

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from affiliate import repositories as repo
from affiliate.database import create_engine, init_db, is_memory_sqlite, make_session_maker
from affiliate.models import Affiliate, DiscountCode, Sale
from affiliate.models.base import utcnow
from affiliate.services.errors import ConflictError, NotFoundError, StoreFailure
from affiliate.utils.money import ZERO
from config.settings import DatabaseSettings

from .base import CommissionTotals


class _SqlWriter:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_affiliate(self, affiliate: Affiliate, code: DiscountCode) -> Affiliate:
        return await repo.add_affiliate(self._session, affiliate, code)

    async def insert_sale(self, sale: Sale) -> Sale:
        return await repo.add_sale(self._session, sale)

    async def increment_counters(
        self,
        affiliate_id: int,
        *,
        earnings: Decimal = ZERO,
        sales: int = 0,
        recruits: int = 0,
    ) -> None:
        updated = await repo.increment_affiliate_counters(
            self._session,
            affiliate_id,
            earnings=earnings,
            sales=sales,
            recruits=recruits,
        )
        if not updated:
            raise NotFoundError(f"Affiliate {affiliate_id} not found")


class SqlStore:
    """Хранилище с явным жизненным циклом: open() создаёт движок, close() его закрывает."""

    def __init__(self, db: DatabaseSettings, *, create_tables: bool = True) -> None:
        self._db = db
        self._create_tables = create_tables
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None
        # на общем соединении параллельные сессии откатывают чужие транзакции
        self._lock = asyncio.Lock() if is_memory_sqlite(db.dsn) else None

    async def open(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_engine(self._db)
        self._session_maker = make_session_maker(self._engine)
        if self._create_tables:
            await init_db(self._engine)
        logger.debug("SQL-хранилище открыто: {dsn}", dsn=self._engine.url.render_as_string())

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        logger.debug("SQL-хранилище закрыто")

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            raise StoreFailure("Store is not open")
        return self._session_maker

    def _exclusive(self):
        return self._lock if self._lock is not None else nullcontext()

    @asynccontextmanager
    async def _reading(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._exclusive(), self._sessions()() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Ошибка чтения из БД: {error}", error=exc)
            raise StoreFailure("Database error") from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_SqlWriter]:
        """Одна транзакция БД: commit при успехе, rollback при любой ошибке."""

        try:
            async with self._exclusive(), self._sessions()() as session:
                async with session.begin():
                    yield _SqlWriter(session)
        except IntegrityError as exc:
            logger.warning("Нарушение уникальности, транзакция откатена: {error}", error=exc.orig)
            raise ConflictError("Record already exists") from exc
        except SQLAlchemyError as exc:
            logger.error("Ошибка записи в БД, транзакция откатена: {error}", error=exc)
            raise StoreFailure("Database error") from exc

    async def find_by_code(self, code: str) -> DiscountCode | None:
        async with self._reading() as session:
            return await repo.get_active_code(session, code)

    async def find_by_id(self, affiliate_id: int) -> Affiliate | None:
        async with self._reading() as session:
            return await repo.get_affiliate(session, affiliate_id)

    async def find_by_email(self, email: str) -> Affiliate | None:
        async with self._reading() as session:
            return await repo.get_affiliate_by_email(session, email)

    async def find_by_discount_code(self, code: str) -> Affiliate | None:
        async with self._reading() as session:
            return await repo.get_affiliate_by_discount_code(session, code)

    async def code_exists(self, code: str) -> bool:
        async with self._reading() as session:
            return await repo.code_taken(session, code)

    async def list_recent_sales(self, affiliate_id: int, limit: int) -> Sequence[Sale]:
        async with self._reading() as session:
            return await repo.list_recent_sales(session, affiliate_id, limit)

    async def list_children(self, affiliate_id: int) -> Sequence[Affiliate]:
        async with self._reading() as session:
            return await repo.list_recruits(session, affiliate_id)

    async def sum_commissions(self, affiliate_id: int) -> CommissionTotals:
        async with self._reading() as session:
            commission, discount = await repo.sum_affiliate_sales(session, affiliate_id)
            parent = await repo.sum_parent_commission(session, affiliate_id)
        return CommissionTotals(
            affiliate_commission=commission,
            parent_commission=parent,
            discount_given=discount,
        )

    async def list_affiliates(self) -> Sequence[Affiliate]:
        async with self._reading() as session:
            return await repo.list_affiliates(session)

    async def list_sales(self) -> Sequence[Sale]:
        async with self._reading() as session:
            return await repo.list_sales(session)

    async def get_sale(self, sale_id: int) -> Sale | None:
        async with self._reading() as session:
            return await repo.get_sale(session, sale_id)

    async def save_sale_status(self, sale: Sale) -> Sale:
        async with self._reading() as session:
            stored = await repo.get_sale(session, sale.id)
            if stored is None:
                raise NotFoundError("Sale not found")
            stored.status = sale.status
            stored.processed_at = sale.processed_at or utcnow()
            stored.touch()
            session.add(stored)
            await session.commit()
            await session.refresh(stored)
            return stored


__all__ = ["SqlStore"]
