"""Pytest configuration and shared fixtures for all tests."""

import os

# Минимальные переменные окружения до импорта настроек
os.environ.setdefault("SECURITY__JWT_SECRET", "test_secret_key_for_testing_only")
os.environ.setdefault("STORAGE__BACKEND", "memory")
os.environ.setdefault("DATABASE__DSN", "sqlite+aiosqlite://")
os.environ.setdefault("ADMIN__EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN__PASSWORD", "admin123")

import pytest

from affiliate.context import build_services
from affiliate.models import Affiliate, DiscountCode
from affiliate.storage import MemoryStore, SqlStore
from config.settings import DatabaseSettings, get_settings


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
async def memory_store():
    """Открытое in-memory хранилище."""
    store = MemoryStore()
    await store.open()
    yield store
    await store.close()


@pytest.fixture
async def sql_store():
    """SQL-хранилище на in-memory SQLite."""
    store = SqlStore(DatabaseSettings(dsn="sqlite+aiosqlite://"))
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def services(memory_store, settings):
    return build_services(memory_store, settings)


async def _seed_affiliate(
    store,
    email: str,
    code: str,
    *,
    parent: Affiliate | None = None,
    discount_percent: int = 10,
    is_active: bool = True,
) -> Affiliate:
    affiliate = Affiliate(
        email=email,
        password_hash="",
        discount_code=code,
        parent_id=parent.id if parent else None,
        parent_discount_code=parent.discount_code if parent else None,
    )
    record = DiscountCode(
        code=code,
        affiliate_id=0,
        discount_percent=discount_percent,
        is_active=is_active,
    )
    async with store.transaction() as tx:
        affiliate = await tx.insert_affiliate(affiliate, record)
        if parent is not None:
            await tx.increment_counters(parent.id, recruits=1)
    return affiliate


@pytest.fixture
def seed():
    """Создаёт партнёра с кодом напрямую через хранилище (без bcrypt)."""
    return _seed_affiliate
