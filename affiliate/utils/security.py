"""JWT-сессии партнёров и хеширование паролей."""

from __future__ import annotations

import secrets
import time
from typing import Any, Dict

import bcrypt
import jwt
from jwt import InvalidTokenError

from config.settings import get_settings

# bcrypt учитывает только первые 72 байта пароля
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def random_password() -> str:
    """Пароль для регистрации без пароля (password == "auto-generated")."""

    return secrets.token_hex(8)


def issue_session_token(affiliate_id: int, ttl_minutes: int | None = None) -> str:
    """Выдаёт JWT для cookie-сессии партнёра."""

    settings = get_settings()
    ttl = ttl_minutes or settings.security.jwt_ttl_minutes
    now = int(time.time())
    payload = {
        "sub": str(affiliate_id),
        "iat": now,
        "exp": now + ttl * 60,
    }
    return jwt.encode(
        payload,
        settings.security.jwt_secret.get_secret_value(),
        algorithm=settings.security.jwt_algorithm,
    )


def decode_session_token(token: str) -> Dict[str, Any]:
    """Валидирует и возвращает payload JWT."""

    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.security.jwt_secret.get_secret_value(),
            algorithms=[settings.security.jwt_algorithm],
        )
    except InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc
    if not str(payload.get("sub", "")).isdigit():
        raise ValueError("Invalid token")
    return payload


__all__ = [
    "MAX_PASSWORD_BYTES",
    "decode_session_token",
    "hash_password",
    "issue_session_token",
    "random_password",
    "verify_password",
]
