"""Коды скидки."""

from __future__ import annotations

from typing import Optional

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from affiliate.models import Affiliate, DiscountCode


async def get_active_code(session: AsyncSession, code: str) -> Optional[DiscountCode]:
    stmt = select(DiscountCode).where(
        DiscountCode.code == code,
        col(DiscountCode.is_active).is_(True),
    )
    result = await session.exec(stmt)
    return result.one_or_none()


async def code_taken(session: AsyncSession, code: str) -> bool:
    stmt = select(DiscountCode.id).where(DiscountCode.code == code)
    if (await session.exec(stmt)).first() is not None:
        return True
    stmt_owner = select(Affiliate.id).where(Affiliate.discount_code == code)
    return (await session.exec(stmt_owner)).first() is not None


__all__ = ["code_taken", "get_active_code"]
