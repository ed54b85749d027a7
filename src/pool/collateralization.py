"""CollateralizationEngine — проверка платёжеспособности аккаунта

Чистое вычисление над tentative-состоянием (после вывода залога / после mint),
до commit операции. Единственный gate против небезопасного состояния.

Порядок проверок:
1. total_share_supply == 0 или debt_share_balance == 0 → PASS (нет долга)
2. user_debt_value = global_debt_value × debt_share_balance / total_share_supply
3. user_debt_value == 0 → PASS (доли без стоимости)
4. ratio = collateral_balance × collateral_price / user_debt_value
5. ratio < threshold → BLOCK (Undercollateralized)

Залог оценивается только ценой collateral asset; балансы долей
дополнительным обеспечением не считаются.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from src.core.domain.account import CollateralAccount
from src.core.domain.errors import Undercollateralized
from src.core.math.share_math import ZERO, div_down, mul_div_down, mul_down


@dataclass(frozen=True)
class CollateralizationResult:
    """Результат оценки обеспечения."""

    passed: bool
    block_reason: str

    # Входные параметры для диагностики
    user_id: str
    collateral_value: Decimal
    user_debt_value: Decimal
    threshold: Decimal

    # None если долга нет
    ratio: Optional[Decimal]

    # Детали
    details: str


class CollateralizationEngine:
    """Stateless оценка коэффициента обеспечения."""

    def evaluate(
        self,
        account: CollateralAccount,
        collateral_price: Decimal,
        global_debt_value: Decimal,
        total_share_supply: Decimal,
        threshold: Decimal,
    ) -> CollateralizationResult:
        """Оценка обеспечения без исключений.

        Args:
            account: tentative-состояние аккаунта
            collateral_price: цена collateral asset в unit-of-account
            global_debt_value: глобальный долг в tentative-состоянии
            total_share_supply: supply долей в tentative-состоянии
            threshold: минимальный допустимый ratio

        Returns:
            CollateralizationResult с решением
        """
        collateral_value = mul_down(account.collateral_balance, collateral_price)

        # 1. Нет долга → тривиально платёжеспособен
        if total_share_supply.is_zero() or account.debt_share_balance.is_zero():
            return CollateralizationResult(
                passed=True,
                block_reason="",
                user_id=account.user_id,
                collateral_value=collateral_value,
                user_debt_value=ZERO,
                threshold=threshold,
                ratio=None,
                details="PASS: no debt shares",
            )

        # 2. Доля пользователя в глобальном долге
        user_debt_value = mul_div_down(
            global_debt_value, account.debt_share_balance, total_share_supply
        )

        # 3. Доли без стоимости (глобальный долг нулевой)
        if user_debt_value.is_zero():
            return CollateralizationResult(
                passed=True,
                block_reason="",
                user_id=account.user_id,
                collateral_value=collateral_value,
                user_debt_value=ZERO,
                threshold=threshold,
                ratio=None,
                details="PASS: debt shares carry zero value",
            )

        # 4-5. Ratio против порога
        ratio = div_down(collateral_value, user_debt_value)
        if ratio < threshold:
            return CollateralizationResult(
                passed=False,
                block_reason="under_collateralized",
                user_id=account.user_id,
                collateral_value=collateral_value,
                user_debt_value=user_debt_value,
                threshold=threshold,
                ratio=ratio,
                details=(
                    f"ratio={ratio:.6f} < threshold={threshold} "
                    f"(collateral_value={collateral_value}, debt_value={user_debt_value})"
                ),
            )

        return CollateralizationResult(
            passed=True,
            block_reason="",
            user_id=account.user_id,
            collateral_value=collateral_value,
            user_debt_value=user_debt_value,
            threshold=threshold,
            ratio=ratio,
            details=f"PASS: ratio={ratio:.6f} >= threshold={threshold}",
        )

    def check(
        self,
        account: CollateralAccount,
        collateral_price: Decimal,
        global_debt_value: Decimal,
        total_share_supply: Decimal,
        threshold: Decimal,
    ) -> CollateralizationResult:
        """Оценка обеспечения с исключением при BLOCK.

        Raises:
            Undercollateralized: ratio < threshold
        """
        result = self.evaluate(
            account, collateral_price, global_debt_value, total_share_supply, threshold
        )
        if not result.passed:
            raise Undercollateralized(account.user_id, result)
        return result
