"""HTTP эндпоинты партнёрской программы."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)

from affiliate.context import Services
from affiliate.models import Affiliate
from affiliate.utils.security import decode_session_token, issue_session_token
from config.settings import AppSettings

from .schemas import (
    AdminOverviewResponse,
    AffiliateOut,
    AuthResponse,
    DashboardResponse,
    DiscountResponse,
    LoginRequest,
    MessageResponse,
    PurchaseRequest,
    PurchaseResponse,
    RegisterRequest,
    ReviewRequest,
    ReviewResponse,
    SaleOut,
    ValidateDiscountRequest,
)

router = APIRouter()
bearer_scheme = HTTPBearer(auto_error=False)
basic_scheme = HTTPBasic()


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_affiliate_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: AppSettings = Depends(get_app_settings),
) -> int:
    """ID партнёра из cookie-сессии (или заголовка Authorization: Bearer)."""

    token = request.cookies.get(settings.security.cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
        )
    try:
        payload = decode_session_token(token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return int(payload["sub"])


def require_admin(
    credentials: HTTPBasicCredentials = Depends(basic_scheme),
    settings: AppSettings = Depends(get_app_settings),
) -> str:
    email_ok = secrets.compare_digest(credentials.username.encode(), settings.admin.email.encode())
    password_ok = secrets.compare_digest(
        credentials.password.encode(),
        settings.admin.password.get_secret_value().encode(),
    )
    if not (email_ok and password_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


def _start_session(response: Response, affiliate: Affiliate, settings: AppSettings) -> None:
    token = issue_session_token(affiliate.id)
    response.set_cookie(
        key=settings.security.cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.security.jwt_ttl_minutes * 60,
    )


# ============================================================================
# Регистрация и сессии
# ============================================================================

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    services: Services = Depends(get_services),
    settings: AppSettings = Depends(get_app_settings),
) -> AuthResponse:
    affiliate = await services.registration.register(
        payload.email or "",
        payload.password or "",
        payload.parent_discount_code,
    )
    _start_session(response, affiliate, settings)
    return AuthResponse(
        message="User registered successfully",
        user=AffiliateOut.from_model(affiliate),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    services: Services = Depends(get_services),
    settings: AppSettings = Depends(get_app_settings),
) -> AuthResponse:
    affiliate = await services.registration.authenticate(payload.email or "", payload.password or "")
    _start_session(response, affiliate, settings)
    return AuthResponse(message="Login successful", user=AffiliateOut.from_model(affiliate))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    settings: AppSettings = Depends(get_app_settings),
) -> MessageResponse:
    response.delete_cookie(settings.security.cookie_name)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AffiliateOut)
async def me(
    affiliate_id: int = Depends(get_affiliate_id),
    services: Services = Depends(get_services),
) -> AffiliateOut:
    affiliate = await services.registration.get_profile(affiliate_id)
    return AffiliateOut.from_model(affiliate)


# ============================================================================
# Скидки, покупки, дашборд
# ============================================================================

@router.post("/validate-discount", response_model=DiscountResponse)
async def validate_discount(
    payload: ValidateDiscountRequest,
    services: Services = Depends(get_services),
):
    outcome = await services.resolver.resolve(payload.code or "", payload.amount)
    if not outcome.valid:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "error": "Invalid discount code"},
        )
    return DiscountResponse.from_outcome(outcome)


@router.post("/purchase", response_model=PurchaseResponse)
async def purchase(
    payload: PurchaseRequest,
    services: Services = Depends(get_services),
) -> PurchaseResponse:
    result = await services.checkout.purchase(
        payload.amount,
        payload.customer_email or "",
        payload.discount_code,
    )
    return PurchaseResponse(
        sale=SaleOut.from_model(result.sale),
        affiliate_commission=result.affiliate_commission,
        parent_commission=result.parent_commission,
    )


@router.get("/affiliate/{affiliate_id}/dashboard", response_model=DashboardResponse)
async def dashboard(
    affiliate_id: int,
    caller_id: int = Depends(get_affiliate_id),
    services: Services = Depends(get_services),
) -> DashboardResponse:
    view = await services.dashboard.get_dashboard(caller_id, affiliate_id)
    return DashboardResponse.from_view(view)


# ============================================================================
# Админка
# ============================================================================

@router.get("/admin/overview", response_model=AdminOverviewResponse)
async def admin_overview(
    _: str = Depends(require_admin),
    services: Services = Depends(get_services),
) -> AdminOverviewResponse:
    overview = await services.admin.overview()
    return AdminOverviewResponse.from_overview(overview)


@router.post("/admin/sales/{sale_id}/review", response_model=ReviewResponse)
async def admin_review_sale(
    sale_id: int,
    payload: ReviewRequest,
    _: str = Depends(require_admin),
    services: Services = Depends(get_services),
) -> ReviewResponse:
    sale = await services.admin.review_sale(sale_id, payload.action)
    return ReviewResponse(
        message=f"Sale {sale.status}",
        sale=SaleOut.from_model(sale),
    )


@router.get("/health")
async def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


__all__ = ["get_affiliate_id", "get_services", "require_admin", "router"]
