"""Глобальные настройки партнёрской программы.

Настройки разделены по доменам (БД, комиссии, безопасность, админка, веб),
вся конфигурация загружается из переменных окружения через Pydantic Settings.
Вложенные секции задаются через разделитель ``__``, например
``COMMISSION__PARENT_RATE=0.05`` или ``SECURITY__JWT_SECRET=...``.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
ACCESSIBLE_ENV_FILE = BASE_DIR / "config" / "runtime.env"
DEFAULT_ENV_FILE = BASE_DIR / ".env"
ENV_FILE = ACCESSIBLE_ENV_FILE if ACCESSIBLE_ENV_FILE.exists() else DEFAULT_ENV_FILE


class DatabaseSettings(BaseModel):
    """SQLModel + aiosqlite (по умолчанию) и готовность к Postgres."""

    dsn: str = Field(
        "sqlite+aiosqlite:///./affiliate.db",
        description="Строка подключения SQLAlchemy/SQLModel",
    )
    echo: bool = False


class StorageSettings(BaseModel):
    """Выбор хранилища: SQL-база или in-memory (демо и тесты)."""

    backend: Literal["sql", "memory"] = "sql"


class CommissionSettings(BaseModel):
    """Ставки скидки и комиссий.

    Комиссия партнёра и его «родителя» считаются от полной суммы продажи,
    а не от суммы после скидки.
    """

    affiliate_rate: Decimal = Field(Decimal("0.20"), ge=0, le=1)
    parent_rate: Decimal = Field(
        Decimal("0.05"), ge=0, le=1, description="Комиссия пригласившего партнёра"
    )
    discount_percent: int = Field(10, ge=0, le=100, description="Скидка покупателю, %")
    recent_sales_limit: int = Field(10, gt=0)
    code_attempts: int = Field(10, gt=0, description="Попыток подобрать свободный код")


class SecuritySettings(BaseModel):
    """JWT-сессии партнёров."""

    jwt_secret: SecretStr = Field(..., description="Секрет для подписания JWT")
    jwt_algorithm: str = "HS256"
    jwt_ttl_minutes: int = 7 * 24 * 60
    cookie_name: str = "token"
    cookie_secure: bool | None = Field(
        None, description="Secure-флаг cookie (по умолчанию включён в prod)"
    )


class AdminSettings(BaseModel):
    """Учётные данные панели модерации продаж."""

    email: str = "admin@example.com"
    password: SecretStr = SecretStr("admin123")


class WebSettings(BaseModel):
    """Параметры FastAPI приложения."""

    title: str = "Affiliate Tracking API"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:8000", "http://127.0.0.1:8000"]
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


class AppSettings(BaseSettings):
    """Главный контейнер настроек."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "prod"] = "dev"
    log_json: bool = False
    database: DatabaseSettings = DatabaseSettings()
    storage: StorageSettings = StorageSettings()
    commission: CommissionSettings = CommissionSettings()
    security: SecuritySettings
    admin: AdminSettings = AdminSettings()
    web: WebSettings = WebSettings()

    @property
    def is_production(self) -> bool:
        """True, если сервис запущен в продовой среде."""

        return self.environment == "prod"

    @property
    def cookie_secure(self) -> bool:
        if self.security.cookie_secure is not None:
            return self.security.cookie_secure
        return self.is_production


# Ленивый синглтон (избегаем глобальных переменных в модулях).
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Возвращает единый экземпляр настроек.

    Значения кэшируются, поэтому .env читается ровно один раз за процесс.
    """

    global _settings
    if _settings is None:
        _settings = AppSettings()  # type: ignore[call-arg]
    return _settings


__all__ = [
    "AdminSettings",
    "AppSettings",
    "CommissionSettings",
    "DatabaseSettings",
    "SecuritySettings",
    "StorageSettings",
    "WebSettings",
    "get_settings",
]
