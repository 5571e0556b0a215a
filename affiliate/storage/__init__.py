"""Хранилища партнёрской программы (SQL и in-memory) за общим контрактом."""

from __future__ import annotations

from config.settings import AppSettings

from .base import CommissionTotals, LedgerStore, LedgerWriter
from .memory import MemoryStore
from .sql import SqlStore


def create_store(settings: AppSettings) -> LedgerStore:
    """Хранилище согласно STORAGE__BACKEND (ещё не открытое)."""

    if settings.storage.backend == "memory":
        return MemoryStore()
    return SqlStore(settings.database)


__all__ = [
    "CommissionTotals",
    "LedgerStore",
    "LedgerWriter",
    "MemoryStore",
    "SqlStore",
    "create_store",
]
