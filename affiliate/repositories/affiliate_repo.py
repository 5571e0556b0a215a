"""Функции для работы с таблицей партнёров."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import update
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from affiliate.models import Affiliate, DiscountCode
from affiliate.models.base import utcnow


async def get_affiliate(session: AsyncSession, affiliate_id: int) -> Optional[Affiliate]:
    return await session.get(Affiliate, affiliate_id)


async def get_affiliate_by_email(session: AsyncSession, email: str) -> Optional[Affiliate]:
    stmt = select(Affiliate).where(Affiliate.email == email)
    result = await session.exec(stmt)
    return result.one_or_none()


async def get_affiliate_by_discount_code(session: AsyncSession, code: str) -> Optional[Affiliate]:
    stmt = select(Affiliate).where(Affiliate.discount_code == code)
    result = await session.exec(stmt)
    return result.one_or_none()


async def list_recruits(session: AsyncSession, parent_id: int) -> Sequence[Affiliate]:
    stmt = (
        select(Affiliate)
        .where(Affiliate.parent_id == parent_id)
        .order_by(col(Affiliate.created_at).desc(), col(Affiliate.id).desc())
    )
    result = await session.exec(stmt)
    return result.all()


async def list_affiliates(session: AsyncSession) -> Sequence[Affiliate]:
    stmt = select(Affiliate).order_by(col(Affiliate.created_at).desc(), col(Affiliate.id).desc())
    result = await session.exec(stmt)
    return result.all()


async def add_affiliate(
    session: AsyncSession,
    affiliate: Affiliate,
    code: DiscountCode,
) -> Affiliate:
    """Добавляет партнёра и его код в текущую транзакцию (без commit)."""

    session.add(affiliate)
    await session.flush()
    code.affiliate_id = affiliate.id
    session.add(code)
    await session.flush()
    return affiliate


async def increment_affiliate_counters(
    session: AsyncSession,
    affiliate_id: int,
    *,
    earnings: Decimal,
    sales: int,
    recruits: int,
) -> bool:
    """UPDATE ... SET col = col + delta на стороне БД, без read-modify-write."""

    stmt = (
        update(Affiliate)
        .where(col(Affiliate.id) == affiliate_id)
        .values(
            total_earnings=col(Affiliate.total_earnings) + earnings,
            total_sales=col(Affiliate.total_sales) + sales,
            total_recruits=col(Affiliate.total_recruits) + recruits,
            updated_at=utcnow(),
        )
    )
    result = await session.execute(stmt)
    return result.rowcount > 0


__all__ = [
    "add_affiliate",
    "get_affiliate",
    "get_affiliate_by_discount_code",
    "get_affiliate_by_email",
    "increment_affiliate_counters",
    "list_affiliates",
    "list_recruits",
]
