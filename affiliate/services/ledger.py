"""Запись продажи и обновление накопительных счётчиков."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger

from affiliate.models import Sale
from affiliate.storage import LedgerStore
from affiliate.utils.money import ZERO


@dataclass(frozen=True, slots=True)
class SaleInput:
    amount: Decimal
    final_amount: Decimal
    customer_email: str
    discount_amount: Decimal = ZERO
    discount_code: str | None = None
    affiliate_id: int | None = None
    parent_id: int | None = None
    affiliate_commission: Decimal = ZERO
    parent_commission: Decimal = ZERO


class LedgerService:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    async def record_sale(self, data: SaleInput) -> Sale:
        """Сохраняет продажу и начисляет комиссии одной транзакцией.

        Партнёру: +комиссия к total_earnings и +1 к total_sales.
        Родителю: только +комиссия к total_earnings, total_sales не меняется.
        """

        attributed = data.affiliate_id is not None
        parent_id = data.parent_id if attributed else None
        sale = Sale(
            affiliate_id=data.affiliate_id,
            parent_id=parent_id,
            amount=data.amount,
            discount_amount=data.discount_amount,
            final_amount=data.final_amount,
            affiliate_commission=data.affiliate_commission if attributed else ZERO,
            parent_commission=data.parent_commission if parent_id is not None else ZERO,
            customer_email=data.customer_email,
            discount_code=data.discount_code,
        )
        async with self._store.transaction() as tx:
            sale = await tx.insert_sale(sale)
            if sale.affiliate_id is not None:
                await tx.increment_counters(
                    sale.affiliate_id,
                    earnings=sale.affiliate_commission,
                    sales=1,
                )
            if sale.parent_id is not None:
                await tx.increment_counters(sale.parent_id, earnings=sale.parent_commission)

        logger.info(
            "Продажа #{sid}: {amount} (партнёр {aid} +{ac}, родитель {pid} +{pc})",
            sid=sale.id,
            amount=sale.amount,
            aid=sale.affiliate_id,
            ac=sale.affiliate_commission,
            pid=sale.parent_id,
            pc=sale.parent_commission,
        )
        return sale


__all__ = ["LedgerService", "SaleInput"]
