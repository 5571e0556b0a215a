"""Оформление покупки: скидка -> комиссии -> запись в леджер."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from affiliate.models import Sale
from affiliate.utils.money import ZERO, to_amount

from .commissions import CommissionEngine
from .discounts import DiscountOutcome, DiscountResolver
from .errors import ValidationError
from .ledger import LedgerService, SaleInput


@dataclass(frozen=True, slots=True)
class PurchaseResult:
    sale: Sale
    discount: DiscountOutcome
    affiliate_commission: Decimal
    parent_commission: Decimal


class CheckoutService:
    def __init__(
        self,
        resolver: DiscountResolver,
        engine: CommissionEngine,
        ledger: LedgerService,
    ) -> None:
        self._resolver = resolver
        self._engine = engine
        self._ledger = ledger

    async def purchase(
        self,
        amount: Decimal | int | float | str,
        customer_email: str,
        discount_code: str | None = None,
    ) -> PurchaseResult:
        """Проводит покупку.

        Неизвестный или неактивный код не блокирует покупку: скидка 0,
        продажа без партнёра. Строка кода всё равно сохраняется в продаже.
        """

        try:
            amount = to_amount(amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if amount <= ZERO:
            raise ValidationError("Amount and customer email are required")
        customer_email = (customer_email or "").strip()
        if not customer_email:
            raise ValidationError("Amount and customer email are required")

        code = discount_code.strip() if discount_code else None
        if code:
            outcome = await self._resolver.resolve(code, amount)
        else:
            outcome = DiscountOutcome.invalid(amount)

        commissions = self._engine.compute(amount, outcome.affiliate_id, outcome.parent_id)
        sale = await self._ledger.record_sale(
            SaleInput(
                amount=amount,
                discount_amount=outcome.discount_amount,
                final_amount=outcome.final_amount,
                customer_email=customer_email,
                discount_code=code or None,
                affiliate_id=commissions.affiliate_id,
                parent_id=commissions.parent_id,
                affiliate_commission=commissions.affiliate_commission,
                parent_commission=commissions.parent_commission,
            )
        )
        return PurchaseResult(
            sale=sale,
            discount=outcome,
            affiliate_commission=sale.affiliate_commission,
            parent_commission=sale.parent_commission,
        )


__all__ = ["CheckoutService", "PurchaseResult"]
