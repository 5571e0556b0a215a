"""Доменные исключения партнёрской программы.

Сервисы бросают только эти исключения, веб-слой переводит их в HTTP-ответы.
"""

from __future__ import annotations


class AffiliateError(Exception):
    """Базовое исключение сервиса."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AffiliateError):
    """Не хватает обязательного поля или оно некорректно."""

    status_code = 400


class NotFoundError(AffiliateError):
    status_code = 404


class UnauthorizedError(AffiliateError):
    """Нет прав на ресурс (чужой дашборд)."""

    status_code = 403


class InvalidCredentialsError(UnauthorizedError):
    """Неверный email или пароль при входе."""

    status_code = 401


class ConflictError(AffiliateError):
    """Нарушение уникальности (email, код)."""

    status_code = 409


class StoreFailure(AffiliateError):
    """Ошибка хранилища; частичные изменения откатываются."""

    status_code = 500


class CodeGenerationError(AffiliateError):
    """Не удалось подобрать свободный код скидки за отведённые попытки."""

    status_code = 500


__all__ = [
    "AffiliateError",
    "CodeGenerationError",
    "ConflictError",
    "InvalidCredentialsError",
    "NotFoundError",
    "StoreFailure",
    "UnauthorizedError",
    "ValidationError",
]
