"""Контракт хранилища партнёрской программы.

Бизнес-логика работает только через ``LedgerStore`` и не знает, лежат ли
данные в SQL-базе или в памяти процесса. Все записи, которые должны
примениться вместе, выполняются внутри ``transaction()``: либо применяются
все, либо ни одна.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import AsyncContextManager, Protocol, Sequence

from affiliate.models import Affiliate, DiscountCode, Sale
from affiliate.utils.money import ZERO


@dataclass(slots=True)
class CommissionTotals:
    """Суммы, пересчитанные по истории продаж."""

    affiliate_commission: Decimal = ZERO
    parent_commission: Decimal = ZERO
    discount_given: Decimal = ZERO


class LedgerWriter(Protocol):
    """Операции записи, доступные внутри транзакции."""

    async def insert_affiliate(self, affiliate: Affiliate, code: DiscountCode) -> Affiliate:
        """Создаёт партнёра вместе с его кодом скидки."""

    async def insert_sale(self, sale: Sale) -> Sale:
        ...

    async def increment_counters(
        self,
        affiliate_id: int,
        *,
        earnings: Decimal = ZERO,
        sales: int = 0,
        recruits: int = 0,
    ) -> None:
        """Атомарно увеличивает счётчики партнёра (``col = col + delta``)."""


class LedgerStore(Protocol):
    async def open(self) -> None:
        ...

    async def close(self) -> None:
        ...

    def transaction(self) -> AsyncContextManager[LedgerWriter]:
        ...

    async def find_by_code(self, code: str) -> DiscountCode | None:
        """Активный код скидки по точному совпадению строки."""

    async def find_by_id(self, affiliate_id: int) -> Affiliate | None:
        ...

    async def find_by_email(self, email: str) -> Affiliate | None:
        ...

    async def find_by_discount_code(self, code: str) -> Affiliate | None:
        """Партнёр-владелец кода (без учёта активности кода)."""

    async def code_exists(self, code: str) -> bool:
        ...

    async def list_recent_sales(self, affiliate_id: int, limit: int) -> Sequence[Sale]:
        """Продажи партнёра, новые первыми."""

    async def list_children(self, affiliate_id: int) -> Sequence[Affiliate]:
        """Партнёры, приглашённые данным (parent_id == affiliate_id)."""

    async def sum_commissions(self, affiliate_id: int) -> CommissionTotals:
        ...

    async def list_affiliates(self) -> Sequence[Affiliate]:
        ...

    async def list_sales(self) -> Sequence[Sale]:
        ...

    async def get_sale(self, sale_id: int) -> Sale | None:
        ...

    async def save_sale_status(self, sale: Sale) -> Sale:
        """Сохраняет status / processed_at продажи (денежные поля не трогаются)."""


__all__ = ["CommissionTotals", "LedgerStore", "LedgerWriter"]
