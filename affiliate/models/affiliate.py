"""SQLModel модель партнёра."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlmodel import Field

from .base import TimeStampedModel


class Affiliate(TimeStampedModel, table=True):
    """Партнёр с персональным кодом скидки и накопительными счётчиками.

    Счётчики total_* дублируют историю продаж для быстрого дашборда и меняются
    только атомарными инкрементами в одной транзакции с записью продажи.
    """

    __tablename__ = "affiliates"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, index=True, unique=True)
    password_hash: str = Field(default="", max_length=128)
    discount_code: str = Field(max_length=32, index=True, unique=True)
    parent_id: Optional[int] = Field(default=None, foreign_key="affiliates.id", index=True)
    parent_discount_code: Optional[str] = Field(default=None, max_length=32)
    total_earnings: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=4)
    total_sales: int = Field(default=0)
    total_recruits: int = Field(default=0)


__all__ = ["Affiliate"]
