"""Генерация уникальных кодов скидки."""

from __future__ import annotations

import secrets
from typing import Callable

from loguru import logger

from affiliate.storage import LedgerStore

from .errors import CodeGenerationError

CODE_BYTES = 4  # 8 hex-символов


def generate_code() -> str:
    """Случайный код из 8 заглавных hex-символов, например ``3FA9C01B``."""

    return secrets.token_hex(CODE_BYTES).upper()


class CodeGenerator:
    """Подбирает свободный код с ограниченным числом попыток."""

    def __init__(
        self,
        store: LedgerStore,
        *,
        attempts: int = 10,
        factory: Callable[[], str] = generate_code,
    ) -> None:
        self._store = store
        self._attempts = attempts
        self._factory = factory

    def generate(self) -> str:
        return self._factory()

    async def allocate(self) -> str:
        for attempt in range(1, self._attempts + 1):
            code = self.generate()
            if not code:
                continue
            if not await self._store.code_exists(code):
                return code
            logger.debug("Коллизия кода {code}, попытка {n}", code=code, n=attempt)
        raise CodeGenerationError(
            f"Could not allocate a unique discount code in {self._attempts} attempts"
        )


__all__ = ["CODE_BYTES", "CodeGenerator", "generate_code"]
