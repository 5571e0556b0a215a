"""Таблица кодов скидки (1:1 с партнёром)."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from .base import TimeStampedModel


class DiscountCode(TimeStampedModel, table=True):
    __tablename__ = "discount_codes"

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(max_length=32, index=True, unique=True)
    affiliate_id: int = Field(foreign_key="affiliates.id", unique=True, index=True)
    discount_percent: int = Field(default=10)
    is_active: bool = Field(default=True)


__all__ = ["DiscountCode"]
