"""SQLModel сущности партнёрской программы."""

from .affiliate import Affiliate  # noqa: F401
from .discount_code import DiscountCode  # noqa: F401
from .sale import Sale, SaleStatus  # noqa: F401

__all__ = [
    "Affiliate",
    "DiscountCode",
    "Sale",
    "SaleStatus",
]
