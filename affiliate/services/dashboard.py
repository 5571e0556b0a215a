"""Дашборд партнёра: кэшированные счётчики и пересчёт по истории продаж."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from affiliate.models import Affiliate, Sale
from affiliate.storage import LedgerStore

from .errors import NotFoundError, UnauthorizedError


@dataclass(slots=True)
class DashboardStats:
    total_earnings: Decimal
    total_sales: int
    total_recruits: int
    sales_earnings: Decimal
    parent_earnings: Decimal
    total_discount_given: Decimal

    @property
    def recomputed_earnings(self) -> Decimal:
        return self.sales_earnings + self.parent_earnings

    @property
    def in_sync(self) -> bool:
        """Счётчик total_earnings совпадает с суммой по истории продаж."""

        return self.recomputed_earnings == self.total_earnings


@dataclass(slots=True)
class DashboardView:
    affiliate: Affiliate
    stats: DashboardStats
    recent_sales: Sequence[Sale] = field(default_factory=list)
    recruits: Sequence[Affiliate] = field(default_factory=list)


class DashboardService:
    def __init__(self, store: LedgerStore, *, recent_limit: int = 10) -> None:
        self._store = store
        self._recent_limit = recent_limit

    async def get_dashboard(self, caller_id: int, affiliate_id: int) -> DashboardView:
        # чужой дашборд отклоняем до любых чтений
        if caller_id != affiliate_id:
            raise UnauthorizedError("Access denied")

        affiliate = await self._store.find_by_id(affiliate_id)
        if affiliate is None:
            raise NotFoundError("Affiliate not found")

        recent = await self._store.list_recent_sales(affiliate_id, self._recent_limit)
        recruits = await self._store.list_children(affiliate_id)
        totals = await self._store.sum_commissions(affiliate_id)

        return DashboardView(
            affiliate=affiliate,
            stats=DashboardStats(
                total_earnings=affiliate.total_earnings,
                total_sales=affiliate.total_sales,
                total_recruits=affiliate.total_recruits,
                sales_earnings=totals.affiliate_commission,
                parent_earnings=totals.parent_commission,
                total_discount_given=totals.discount_given,
            ),
            recent_sales=list(recent),
            recruits=list(recruits),
        )


__all__ = ["DashboardService", "DashboardStats", "DashboardView"]
