"""Регистрация и вход партнёров."""

from __future__ import annotations

import re

from loguru import logger

from affiliate.models import Affiliate, DiscountCode
from affiliate.storage import LedgerStore
from affiliate.utils.security import (
    MAX_PASSWORD_BYTES,
    hash_password,
    random_password,
    verify_password,
)

from .codes import CodeGenerator
from .errors import ConflictError, InvalidCredentialsError, NotFoundError, ValidationError

AUTO_PASSWORD = "auto-generated"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class RegistrationService:
    def __init__(
        self,
        store: LedgerStore,
        codes: CodeGenerator,
        *,
        discount_percent: int = 10,
    ) -> None:
        self._store = store
        self._codes = codes
        self._discount_percent = discount_percent

    async def register(
        self,
        email: str,
        password: str,
        parent_discount_code: str | None = None,
    ) -> Affiliate:
        """Создаёт партнёра и его код скидки.

        Если ``parent_discount_code`` принадлежит существующему партнёру,
        тот становится родителем и получает +1 к total_recruits в той же
        транзакции. Неизвестный код родителя игнорируется.
        """

        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")
        if not EMAIL_RE.match(email):
            raise ValidationError("Email is malformed")
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        if await self._store.find_by_email(email):
            raise ConflictError("User already exists")

        if password == AUTO_PASSWORD:
            password = random_password()
        password_hash = hash_password(password)

        code = await self._codes.allocate()

        parent = None
        parent_code = (parent_discount_code or "").strip()
        if parent_code:
            parent = await self._store.find_by_discount_code(parent_code)
            if parent is None:
                logger.info("Код родителя {code} не найден, регистрация без родителя", code=parent_code)

        affiliate = Affiliate(
            email=email,
            password_hash=password_hash,
            discount_code=code,
            parent_id=parent.id if parent else None,
            parent_discount_code=parent.discount_code if parent else None,
        )
        record = DiscountCode(
            code=code,
            affiliate_id=0,
            discount_percent=self._discount_percent,
            is_active=True,
        )
        async with self._store.transaction() as tx:
            affiliate = await tx.insert_affiliate(affiliate, record)
            if parent is not None:
                await tx.increment_counters(parent.id, recruits=1)

        logger.info(
            "Новый партнёр #{aid} {email} с кодом {code} (родитель {pid})",
            aid=affiliate.id,
            email=email,
            code=code,
            pid=affiliate.parent_id,
        )
        return affiliate

    async def authenticate(self, email: str, password: str) -> Affiliate:
        affiliate = await self._store.find_by_email(normalize_email(email))
        if affiliate is None or not verify_password(password or "", affiliate.password_hash):
            raise InvalidCredentialsError("Invalid credentials")
        return affiliate

    async def get_profile(self, affiliate_id: int) -> Affiliate:
        affiliate = await self._store.find_by_id(affiliate_id)
        if affiliate is None:
            raise NotFoundError("User not found")
        return affiliate


__all__ = ["AUTO_PASSWORD", "RegistrationService", "normalize_email"]
