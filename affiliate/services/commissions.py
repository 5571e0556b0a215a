"""Расчёт комиссий партнёра и пригласившего его партнёра."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from affiliate.utils.money import ZERO, to_rate


@dataclass(frozen=True, slots=True)
class Commissions:
    affiliate_commission: Decimal = ZERO
    parent_commission: Decimal = ZERO
    affiliate_id: int | None = None
    parent_id: int | None = None


class CommissionEngine:
    """Комиссии считаются от полной суммы (до скидки) и только на один уровень вверх."""

    def __init__(self, affiliate_rate: Decimal | float, parent_rate: Decimal | float) -> None:
        self.affiliate_rate = to_rate(affiliate_rate)
        self.parent_rate = to_rate(parent_rate)

    def compute(
        self,
        amount: Decimal,
        affiliate_id: int | None = None,
        parent_id: int | None = None,
    ) -> Commissions:
        if affiliate_id is None:
            return Commissions()
        if parent_id is None or parent_id == affiliate_id:
            return Commissions(
                affiliate_commission=amount * self.affiliate_rate,
                affiliate_id=affiliate_id,
            )
        return Commissions(
            affiliate_commission=amount * self.affiliate_rate,
            parent_commission=amount * self.parent_rate,
            affiliate_id=affiliate_id,
            parent_id=parent_id,
        )


__all__ = ["CommissionEngine", "Commissions"]
