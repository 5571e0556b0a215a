"""Сборка сервисов вокруг одного хранилища."""

from __future__ import annotations

from dataclasses import dataclass

from config.settings import AppSettings, get_settings

from .services.admin import AdminService
from .services.checkout import CheckoutService
from .services.codes import CodeGenerator
from .services.commissions import CommissionEngine
from .services.dashboard import DashboardService
from .services.discounts import DiscountResolver
from .services.ledger import LedgerService
from .services.registration import RegistrationService
from .storage import LedgerStore


@dataclass(slots=True)
class Services:
    store: LedgerStore
    registration: RegistrationService
    resolver: DiscountResolver
    checkout: CheckoutService
    dashboard: DashboardService
    admin: AdminService


def build_services(store: LedgerStore, settings: AppSettings | None = None) -> Services:
    cfg = (settings or get_settings()).commission
    resolver = DiscountResolver(store)
    engine = CommissionEngine(cfg.affiliate_rate, cfg.parent_rate)
    return Services(
        store=store,
        registration=RegistrationService(
            store,
            CodeGenerator(store, attempts=cfg.code_attempts),
            discount_percent=cfg.discount_percent,
        ),
        resolver=resolver,
        checkout=CheckoutService(resolver, engine, LedgerService(store)),
        dashboard=DashboardService(store, recent_limit=cfg.recent_sales_limit),
        admin=AdminService(store),
    )


__all__ = ["Services", "build_services"]
