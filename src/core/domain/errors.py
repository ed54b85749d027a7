"""
Errors — Типизированные отказы операций пула

Каждая ошибка прерывает операцию целиком (atomic abort).
Внутренних повторов нет: retry — ответственность вызывающего кода.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from src.pool.collateralization import CollateralizationResult


class SyntheticPoolError(Exception):
    """Базовый класс для всех отказов пула синтетиков."""

    pass


class DuplicateAsset(SyntheticPoolError):
    """Символ уже зарегистрирован в AssetRegistry."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Asset already exists: {symbol}")


class UnknownAsset(SyntheticPoolError):
    """Синтетик не найден ни по символу, ни по token id."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown synthetic asset: {key}")


class AccountNotFound(SyntheticPoolError):
    """Аккаунт не создан (stake ещё не выполнялся)."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class InsufficientCollateral(SyntheticPoolError):
    """Запрошено больше залога, чем есть на аккаунте."""

    def __init__(self, user_id: str, requested: Decimal, available: Decimal):
        self.user_id = user_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient collateral for {user_id}: requested {requested}, available {available}"
        )


class InsufficientShareBalance(SyntheticPoolError):
    """Для сжигания требуется больше долей долга, чем держит аккаунт."""

    def __init__(self, user_id: str, required: Decimal, available: Decimal):
        self.user_id = user_id
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient debt shares for {user_id}: required {required}, available {available}"
        )


class Undercollateralized(SyntheticPoolError):
    """
    Коэффициент обеспечения после операции ниже порога.

    Содержит результат оценки (ratio, threshold, user_debt_value) для диагностики.
    """

    def __init__(self, user_id: str, result: "CollateralizationResult"):
        self.user_id = user_id
        self.result = result
        super().__init__(f"Under collateralized! {user_id}: {result.details}")


class PriceUnavailable(SyntheticPoolError):
    """
    Оракул не вернул пригодную цену.

    Фатально для операции: дефолтная или устаревшая цена не подставляется.
    """

    def __init__(self, base_asset: str, quote_asset: str, reason: str = "no price"):
        self.base_asset = base_asset
        self.quote_asset = quote_asset
        self.reason = reason
        super().__init__(f"Failed to obtain price of {base_asset}/{quote_asset}: {reason}")


class InvalidAmount(SyntheticPoolError, ValueError):
    """Неположительное количество или бакет чужого токена."""

    pass


class Unauthorized(SyntheticPoolError, PermissionError):
    """Capability не даёт права mint/burn/withdraw для данного токена."""

    pass


class LedgerInvariantViolation(SyntheticPoolError):
    """
    Внутренняя ошибка: нарушен инвариант учёта долей.

    Например: burn при нулевом глобальном долге, или
    total_share_supply != Σ debt_share_balance.
    Не является пользовательской ошибкой и никогда не маскируется.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(message if detail is None else f"{message} ({detail})")
