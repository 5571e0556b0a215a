"""In-memory хранилище (демо-режим и тесты).

Транзакция копит изменения и применяет их одним синхронным шагом при выходе
из контекста, поэтому конкурентные корутины не теряют инкременты, а ошибка
внутри транзакции не оставляет частичного состояния.
"""

from __future__ import annotations

import itertools
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Callable

from affiliate.models import Affiliate, DiscountCode, Sale
from affiliate.models.base import utcnow
from affiliate.services.errors import ConflictError, NotFoundError, StoreFailure
from affiliate.utils.money import ZERO

from .base import CommissionTotals


def _newest_first(item) -> tuple:
    return (item.created_at, item.id or 0)


class _MemoryWriter:
    def __init__(self, store: "MemoryStore") -> None:
        self._store = store
        self._pending: list[Callable[[], None]] = []
        self._emails: set[str] = set()
        self._codes: set[str] = set()
        self._new_affiliates: set[int] = set()

    async def insert_affiliate(self, affiliate: Affiliate, code: DiscountCode) -> Affiliate:
        store = self._store
        if affiliate.email in self._emails or await store.find_by_email(affiliate.email):
            raise ConflictError("User already exists")
        if code.code in self._codes or await store.code_exists(code.code):
            raise ConflictError("Discount code already taken")
        affiliate.id = next(store._affiliate_ids)
        code.id = next(store._code_ids)
        code.affiliate_id = affiliate.id
        self._emails.add(affiliate.email)
        self._codes.add(code.code)
        self._new_affiliates.add(affiliate.id)

        def apply() -> None:
            store._affiliates[affiliate.id] = affiliate
            store._codes[code.code] = code

        self._pending.append(apply)
        return affiliate

    async def insert_sale(self, sale: Sale) -> Sale:
        store = self._store
        sale.id = next(store._sale_ids)
        self._pending.append(lambda: store._sales.append(sale))
        return sale

    async def increment_counters(
        self,
        affiliate_id: int,
        *,
        earnings: Decimal = ZERO,
        sales: int = 0,
        recruits: int = 0,
    ) -> None:
        store = self._store
        if affiliate_id not in store._affiliates and affiliate_id not in self._new_affiliates:
            raise NotFoundError(f"Affiliate {affiliate_id} not found")

        def apply() -> None:
            affiliate = store._affiliates[affiliate_id]
            affiliate.total_earnings += earnings
            affiliate.total_sales += sales
            affiliate.total_recruits += recruits
            affiliate.touch()

        self._pending.append(apply)

    def commit(self) -> None:
        # уникальность перепроверяется непосредственно перед применением
        store = self._store
        for affiliate in store._affiliates.values():
            if affiliate.email in self._emails:
                raise ConflictError("User already exists")
        if self._codes & store._codes.keys():
            raise ConflictError("Discount code already taken")
        for apply in self._pending:
            apply()
        self._pending.clear()


class MemoryStore:
    """Хранилище на словарях; жизненный цикл open/close как у SQL-версии."""

    def __init__(self) -> None:
        self._affiliates: dict[int, Affiliate] = {}
        self._codes: dict[str, DiscountCode] = {}
        self._sales: list[Sale] = []
        self._affiliate_ids = itertools.count(1)
        self._code_ids = itertools.count(1)
        self._sale_ids = itertools.count(1)
        self._opened = False

    async def open(self) -> None:
        self._opened = True

    async def close(self) -> None:
        self._opened = False

    def _ensure_open(self) -> None:
        if not self._opened:
            raise StoreFailure("Store is not open")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_MemoryWriter]:
        self._ensure_open()
        writer = _MemoryWriter(self)
        yield writer
        writer.commit()

    async def find_by_code(self, code: str) -> DiscountCode | None:
        self._ensure_open()
        record = self._codes.get(code)
        if record is None or not record.is_active:
            return None
        return record

    async def find_by_id(self, affiliate_id: int) -> Affiliate | None:
        self._ensure_open()
        return self._affiliates.get(affiliate_id)

    async def find_by_email(self, email: str) -> Affiliate | None:
        self._ensure_open()
        return next((a for a in self._affiliates.values() if a.email == email), None)

    async def find_by_discount_code(self, code: str) -> Affiliate | None:
        self._ensure_open()
        return next((a for a in self._affiliates.values() if a.discount_code == code), None)

    async def code_exists(self, code: str) -> bool:
        self._ensure_open()
        if code in self._codes:
            return True
        return await self.find_by_discount_code(code) is not None

    async def list_recent_sales(self, affiliate_id: int, limit: int) -> list[Sale]:
        self._ensure_open()
        sales = [s for s in self._sales if s.affiliate_id == affiliate_id]
        sales.sort(key=_newest_first, reverse=True)
        return sales[:limit]

    async def list_children(self, affiliate_id: int) -> list[Affiliate]:
        self._ensure_open()
        children = [a for a in self._affiliates.values() if a.parent_id == affiliate_id]
        children.sort(key=_newest_first, reverse=True)
        return children

    async def sum_commissions(self, affiliate_id: int) -> CommissionTotals:
        self._ensure_open()
        totals = CommissionTotals()
        for sale in self._sales:
            if sale.affiliate_id == affiliate_id:
                totals.affiliate_commission += sale.affiliate_commission
                totals.discount_given += sale.discount_amount
            if sale.parent_id == affiliate_id:
                totals.parent_commission += sale.parent_commission
        return totals

    async def list_affiliates(self) -> list[Affiliate]:
        self._ensure_open()
        return sorted(self._affiliates.values(), key=_newest_first, reverse=True)

    async def list_sales(self) -> list[Sale]:
        self._ensure_open()
        return sorted(self._sales, key=_newest_first, reverse=True)

    async def get_sale(self, sale_id: int) -> Sale | None:
        self._ensure_open()
        return next((s for s in self._sales if s.id == sale_id), None)

    async def save_sale_status(self, sale: Sale) -> Sale:
        self._ensure_open()
        stored = await self.get_sale(sale.id)
        if stored is None:
            raise NotFoundError("Sale not found")
        stored.status = sale.status
        stored.processed_at = sale.processed_at or utcnow()
        stored.touch()
        return stored


__all__ = ["MemoryStore"]
