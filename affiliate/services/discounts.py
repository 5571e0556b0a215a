"""Проверка кода скидки и расчёт итоговой цены."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger

from affiliate.storage import LedgerStore
from affiliate.utils.money import ZERO, percent_of, to_amount

from .errors import ValidationError


@dataclass(frozen=True, slots=True)
class DiscountOutcome:
    """Результат проверки кода. ``valid=False`` означает «без скидки и без партнёра»."""

    valid: bool
    original_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    code: str | None = None
    discount_percent: int = 0
    affiliate_id: int | None = None
    affiliate_email: str | None = None
    parent_id: int | None = None

    @classmethod
    def invalid(cls, amount: Decimal, code: str | None = None) -> "DiscountOutcome":
        return cls(
            valid=False,
            original_amount=amount,
            discount_amount=ZERO,
            final_amount=amount,
            code=code,
        )


class DiscountResolver:
    """Только читает хранилище: повторные вызовы дают тот же результат."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    async def resolve(self, code: str, amount: Decimal | int | float | str) -> DiscountOutcome:
        if not code or not code.strip():
            raise ValidationError("Discount code is required")
        try:
            amount = to_amount(amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        record = await self._store.find_by_code(code)
        if record is None:
            logger.debug("Код {code} не найден или неактивен", code=code)
            return DiscountOutcome.invalid(amount, code)

        affiliate = await self._store.find_by_id(record.affiliate_id)
        if affiliate is None:
            logger.warning(
                "Код {code} ссылается на несуществующего партнёра {aid}",
                code=code,
                aid=record.affiliate_id,
            )
            return DiscountOutcome.invalid(amount, code)

        discount = percent_of(amount, record.discount_percent)
        return DiscountOutcome(
            valid=True,
            original_amount=amount,
            discount_amount=discount,
            final_amount=amount - discount,
            code=record.code,
            discount_percent=record.discount_percent,
            affiliate_id=affiliate.id,
            affiliate_email=affiliate.email,
            parent_id=affiliate.parent_id,
        )


__all__ = ["DiscountOutcome", "DiscountResolver"]
