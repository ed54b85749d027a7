"""
CollateralAccount — Модель аккаунта участника пула

Immutable Pydantic модель: залог и доли глобального долга одного пользователя.
Все изменения создают новый провалидированный экземпляр, поэтому снапшот ledger'а
для отката операции — это просто копия словаря аккаунтов.

Инвариант: оба баланса >= 0 (обеспечивается валидацией полей).
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.core.math.share_math import ZERO


class CollateralAccount(BaseModel):
    """
    Аккаунт пользователя.

    Создаётся лениво при первом stake, никогда не удаляется.
    Аккаунт с нулевыми балансами валиден и инертен.
    """

    user_id: str = Field(..., min_length=1, description="Стабильный идентификатор пользователя")
    collateral_balance: Decimal = Field(
        default=ZERO, ge=0, description="Застейканный залог (в единицах collateral asset)"
    )
    debt_share_balance: Decimal = Field(
        default=ZERO, ge=0, description="Доли глобального долга (безразмерные)"
    )

    model_config = {"frozen": True}

    def with_collateral(self, collateral_balance: Decimal) -> "CollateralAccount":
        """Новый экземпляр с другим балансом залога (с валидацией)."""
        return self.model_validate(
            {**self.model_dump(), "collateral_balance": collateral_balance}
        )

    def with_debt_shares(self, debt_share_balance: Decimal) -> "CollateralAccount":
        """Новый экземпляр с другим балансом долей (с валидацией)."""
        return self.model_validate(
            {**self.model_dump(), "debt_share_balance": debt_share_balance}
        )

    @property
    def has_debt(self) -> bool:
        return self.debt_share_balance > ZERO
