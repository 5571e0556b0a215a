"""Модерация продаж и сводка для админки."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from loguru import logger

from affiliate.models import Affiliate, Sale, SaleStatus
from affiliate.models.base import utcnow
from affiliate.storage import LedgerStore
from affiliate.utils.money import ZERO

from .errors import NotFoundError, ValidationError

ACTIONS = {
    "approve": SaleStatus.APPROVED,
    "reject": SaleStatus.REJECTED,
}


@dataclass(slots=True)
class AdminOverview:
    total_affiliates: int
    total_sales: int
    pending_sales: int
    approved_sales: int
    total_commission: Decimal
    affiliates: Sequence[Affiliate] = field(default_factory=list)
    sales: Sequence[Sale] = field(default_factory=list)


class AdminService:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    async def overview(self) -> AdminOverview:
        affiliates = list(await self._store.list_affiliates())
        sales = list(await self._store.list_sales())
        approved = [s for s in sales if s.status == SaleStatus.APPROVED]
        return AdminOverview(
            total_affiliates=len(affiliates),
            total_sales=len(sales),
            pending_sales=sum(1 for s in sales if s.status == SaleStatus.PENDING),
            approved_sales=len(approved),
            total_commission=sum((s.affiliate_commission for s in approved), ZERO),
            affiliates=affiliates,
            sales=sales,
        )

    async def review_sale(self, sale_id: int, action: str) -> Sale:
        """Одобряет или отклоняет продажу. Деньги и счётчики не меняются."""

        status = ACTIONS.get((action or "").strip().lower())
        if status is None:
            raise ValidationError("Action must be 'approve' or 'reject'")
        sale = await self._store.get_sale(sale_id)
        if sale is None:
            raise NotFoundError("Sale not found")
        sale.status = status
        sale.processed_at = utcnow()
        sale = await self._store.save_sale_status(sale)
        logger.info("Продажа #{sid} -> {status}", sid=sale_id, status=status)
        return sale


__all__ = ["ACTIONS", "AdminOverview", "AdminService"]
