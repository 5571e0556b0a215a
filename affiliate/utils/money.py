"""Денежная арифметика на Decimal."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")
# сумма покупки хранится с точностью до цента
AMOUNT_PLACES = 2


def _decimal_places(amount: Decimal) -> int:
    """Число значащих знаков после запятой без арифметики в контексте Decimal."""

    _, digits, exponent = amount.as_tuple()
    if not any(digits):
        return 0
    places = -exponent
    for digit in reversed(digits):
        if places <= 0 or digit:
            break
        places -= 1
    return max(places, 0)


def to_amount(value: object, *, field: str = "amount") -> Decimal:
    """Приводит сумму к Decimal и проверяет: конечная, >= 0, не больше 2 знаков.

    Бросает ValueError с понятным сообщением.
    """

    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field} is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"{field} must be a number") from exc
    if not amount.is_finite():
        raise ValueError(f"{field} must be a finite number")
    if amount < ZERO:
        raise ValueError(f"{field} must not be negative")
    if _decimal_places(amount) > AMOUNT_PLACES:
        raise ValueError(f"{field} must have at most {AMOUNT_PLACES} decimal places")
    return amount


def to_rate(value: object) -> Decimal:
    """Ставка из настроек (float/str/Decimal) в Decimal без двоичных артефактов."""

    return value if isinstance(value, Decimal) else Decimal(str(value))


def percent_of(amount: Decimal, percent: int | Decimal) -> Decimal:
    return amount * to_rate(percent) / HUNDRED


__all__ = ["HUNDRED", "ZERO", "percent_of", "to_amount", "to_rate"]
