"""Pydantic модели запросов и ответов API (JSON в camelCase)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from affiliate.models import Affiliate, Sale
from affiliate.services.admin import AdminOverview
from affiliate.services.dashboard import DashboardView
from affiliate.services.discounts import DiscountOutcome

# суммы отдаём числами, как их ждёт фронтенд
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Запросы
# ============================================================================

class RegisterRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    parent_discount_code: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class ValidateDiscountRequest(CamelModel):
    code: str | None = None
    amount: Decimal = Field(Decimal("0"), ge=0)


class PurchaseRequest(CamelModel):
    amount: Decimal | None = None
    customer_email: str | None = None
    discount_code: str | None = None


class ReviewRequest(CamelModel):
    action: str


# ============================================================================
# Ответы
# ============================================================================

class AffiliateOut(CamelModel):
    id: int
    email: str
    discount_code: str
    parent_discount_code: str | None = None
    total_earnings: Money
    total_sales: int
    total_recruits: int
    created_at: datetime

    @classmethod
    def from_model(cls, affiliate: Affiliate) -> "AffiliateOut":
        return cls(
            id=affiliate.id,
            email=affiliate.email,
            discount_code=affiliate.discount_code,
            parent_discount_code=affiliate.parent_discount_code,
            total_earnings=affiliate.total_earnings,
            total_sales=affiliate.total_sales,
            total_recruits=affiliate.total_recruits,
            created_at=affiliate.created_at,
        )


class SaleOut(CamelModel):
    id: int
    affiliate_id: int | None = None
    parent_id: int | None = None
    amount: Money
    discount_amount: Money
    final_amount: Money
    affiliate_commission: Money
    parent_commission: Money
    customer_email: str
    discount_code: str | None = None
    status: str
    processed_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, sale: Sale) -> "SaleOut":
        return cls(
            id=sale.id,
            affiliate_id=sale.affiliate_id,
            parent_id=sale.parent_id,
            amount=sale.amount,
            discount_amount=sale.discount_amount,
            final_amount=sale.final_amount,
            affiliate_commission=sale.affiliate_commission,
            parent_commission=sale.parent_commission,
            customer_email=sale.customer_email,
            discount_code=sale.discount_code,
            status=sale.status,
            processed_at=sale.processed_at,
            created_at=sale.created_at,
        )


class AuthResponse(CamelModel):
    message: str
    user: AffiliateOut


class MessageResponse(CamelModel):
    message: str


class DiscountResponse(CamelModel):
    valid: bool
    discount_code: str | None = None
    discount_percent: int = 0
    discount_amount: Money = Decimal("0")
    original_amount: Money = Decimal("0")
    final_amount: Money = Decimal("0")
    affiliate_id: int | None = None
    affiliate_email: str | None = None

    @classmethod
    def from_outcome(cls, outcome: DiscountOutcome) -> "DiscountResponse":
        return cls(
            valid=outcome.valid,
            discount_code=outcome.code,
            discount_percent=outcome.discount_percent,
            discount_amount=outcome.discount_amount,
            original_amount=outcome.original_amount,
            final_amount=outcome.final_amount,
            affiliate_id=outcome.affiliate_id,
            affiliate_email=outcome.affiliate_email,
        )


class PurchaseResponse(CamelModel):
    message: str = "Purchase completed successfully"
    sale: SaleOut
    affiliate_commission: Money
    parent_commission: Money


class DashboardStatsOut(CamelModel):
    total_earnings: Money
    total_sales: int
    total_recruits: int
    total_sales_earnings: Money
    parent_earnings: Money
    recomputed_earnings: Money
    total_discount_given: Money
    in_sync: bool


class DashboardResponse(CamelModel):
    affiliate: AffiliateOut
    stats: DashboardStatsOut
    recent_sales: list[SaleOut]
    recruits: list[AffiliateOut]
    discount_code: str

    @classmethod
    def from_view(cls, view: DashboardView) -> "DashboardResponse":
        stats = view.stats
        return cls(
            affiliate=AffiliateOut.from_model(view.affiliate),
            stats=DashboardStatsOut(
                total_earnings=stats.total_earnings,
                total_sales=stats.total_sales,
                total_recruits=stats.total_recruits,
                total_sales_earnings=stats.sales_earnings,
                parent_earnings=stats.parent_earnings,
                recomputed_earnings=stats.recomputed_earnings,
                total_discount_given=stats.total_discount_given,
                in_sync=stats.in_sync,
            ),
            recent_sales=[SaleOut.from_model(s) for s in view.recent_sales],
            recruits=[AffiliateOut.from_model(a) for a in view.recruits],
            discount_code=view.affiliate.discount_code,
        )


class AdminStatsOut(CamelModel):
    total_affiliates: int
    total_sales: int
    pending_sales: int
    approved_sales: int
    total_commission: Money


class AdminOverviewResponse(CamelModel):
    stats: AdminStatsOut
    users: list[AffiliateOut]
    sales: list[SaleOut]
    pending_sales: list[SaleOut]

    @classmethod
    def from_overview(cls, overview: AdminOverview) -> "AdminOverviewResponse":
        sales = [SaleOut.from_model(s) for s in overview.sales]
        return cls(
            stats=AdminStatsOut(
                total_affiliates=overview.total_affiliates,
                total_sales=overview.total_sales,
                pending_sales=overview.pending_sales,
                approved_sales=overview.approved_sales,
                total_commission=overview.total_commission,
            ),
            users=[AffiliateOut.from_model(a) for a in overview.affiliates],
            sales=sales,
            pending_sales=[s for s in sales if s.status == "pending"],
        )


class ReviewResponse(CamelModel):
    success: bool = True
    message: str
    sale: SaleOut


__all__ = [
    "AdminOverviewResponse",
    "AffiliateOut",
    "AuthResponse",
    "DashboardResponse",
    "DiscountResponse",
    "LoginRequest",
    "MessageResponse",
    "PurchaseRequest",
    "PurchaseResponse",
    "RegisterRequest",
    "ReviewRequest",
    "ReviewResponse",
    "SaleOut",
    "ValidateDiscountRequest",
]
