"""Репозитории для работы с БД."""

from .affiliate_repo import (
    add_affiliate,
    get_affiliate,
    get_affiliate_by_discount_code,
    get_affiliate_by_email,
    increment_affiliate_counters,
    list_affiliates,
    list_recruits,
)
from .discount_repo import code_taken, get_active_code
from .sale_repo import (
    add_sale,
    get_sale,
    list_recent_sales,
    list_sales,
    sum_affiliate_sales,
    sum_parent_commission,
)

__all__ = [
    "add_affiliate",
    "add_sale",
    "code_taken",
    "get_active_code",
    "get_affiliate",
    "get_affiliate_by_discount_code",
    "get_affiliate_by_email",
    "get_sale",
    "increment_affiliate_counters",
    "list_affiliates",
    "list_recent_sales",
    "list_recruits",
    "list_sales",
    "sum_affiliate_sales",
    "sum_parent_commission",
]
