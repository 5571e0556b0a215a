"""Работа с продажами."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from affiliate.models import Sale


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


async def add_sale(session: AsyncSession, sale: Sale) -> Sale:
    session.add(sale)
    await session.flush()
    return sale


async def get_sale(session: AsyncSession, sale_id: int) -> Optional[Sale]:
    return await session.get(Sale, sale_id)


async def list_recent_sales(session: AsyncSession, affiliate_id: int, limit: int) -> Sequence[Sale]:
    stmt = (
        select(Sale)
        .where(Sale.affiliate_id == affiliate_id)
        .order_by(col(Sale.created_at).desc(), col(Sale.id).desc())
        .limit(limit)
    )
    result = await session.exec(stmt)
    return result.all()


async def list_sales(session: AsyncSession) -> Sequence[Sale]:
    stmt = select(Sale).order_by(col(Sale.created_at).desc(), col(Sale.id).desc())
    result = await session.exec(stmt)
    return result.all()


async def sum_affiliate_sales(session: AsyncSession, affiliate_id: int) -> tuple[Decimal, Decimal]:
    """(сумма комиссий партнёра, сумма выданных скидок) по его продажам."""

    stmt = select(
        func.coalesce(func.sum(Sale.affiliate_commission), 0),
        func.coalesce(func.sum(Sale.discount_amount), 0),
    ).where(Sale.affiliate_id == affiliate_id)
    commission, discount = (await session.exec(stmt)).one()
    return _as_decimal(commission), _as_decimal(discount)


async def sum_parent_commission(session: AsyncSession, parent_id: int) -> Decimal:
    stmt = select(func.coalesce(func.sum(Sale.parent_commission), 0)).where(
        Sale.parent_id == parent_id
    )
    return _as_decimal((await session.exec(stmt)).one())


__all__ = [
    "add_sale",
    "get_sale",
    "list_recent_sales",
    "list_sales",
    "sum_affiliate_sales",
    "sum_parent_commission",
]
