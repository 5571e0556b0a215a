"""Продажи и их статус модерации."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Field

from .base import TimeStampedModel


class SaleStatus(str):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Sale(TimeStampedModel, table=True):
    """Запись о покупке. Денежные поля после создания не меняются."""

    __tablename__ = "sales"

    id: Optional[int] = Field(default=None, primary_key=True)
    affiliate_id: Optional[int] = Field(default=None, foreign_key="affiliates.id", index=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="affiliates.id", index=True)
    amount: Decimal = Field(max_digits=14, decimal_places=4)
    discount_amount: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=4)
    final_amount: Decimal = Field(max_digits=14, decimal_places=4)
    affiliate_commission: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=4)
    parent_commission: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=4)
    customer_email: str = Field(max_length=255)
    discount_code: Optional[str] = Field(default=None, max_length=64)
    status: str = Field(default=SaleStatus.PENDING, max_length=16, index=True)
    processed_at: Optional[datetime] = Field(default=None)


__all__ = ["Sale", "SaleStatus"]
