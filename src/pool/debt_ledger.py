"""
DebtShareLedger — Глобальный учёт долей долга

Доли — нормализованная безразмерная единица "доли глобального долга".
Стоимость одной доли = global_debt_value / total_share_supply и плавает
вместе с ценами синтетиков; сами доли от цен не зависят.

ФОРМУЛЫ:
    global_debt_value = Σ price(underlying) × circulating_supply   (по всем синтетикам)

    mint (supply == 0):  shares = bootstrap_share_amount
    mint (supply > 0):   shares = new_debt_value × supply / global_debt_before
    burn:                shares = supply × debt_value_removed / global_debt_before

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. total_share_supply == Σ debt_share_balance по всем аккаунтам
2. total_share_supply >= 0, debt_share_balance >= 0
3. total_share_supply == 0 ⇔ ещё никто не минтил
4. Одно правило округления (ROUND_DOWN) для mint и burn
   (mint, усечённый до нуля долей при ненулевом долге, отвергается: InvalidAmount)
5. Нулевой global_debt_before при supply > 0 (rounding dust) → re-bootstrap на mint,
   LedgerInvariantViolation на burn
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from src.core.domain.account import CollateralAccount
from src.core.domain.errors import (
    AccountNotFound,
    InsufficientShareBalance,
    InvalidAmount,
    LedgerInvariantViolation,
)
from src.core.math.share_math import (
    ZERO,
    add,
    mul_div_down,
    mul_down,
    sub,
    total,
    validate_non_negative,
)
from src.pool.config import BOOTSTRAP_SHARE_AMOUNT
from src.pool.gateways import PriceGateway
from src.pool.registry import AssetRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerCheckpoint:
    """Снапшот состояния ledger'а для отката операции (аккаунты immutable)."""

    accounts: Dict[str, CollateralAccount]
    total_share_supply: Decimal


class DebtShareLedger:
    """
    Singleton ledger долей долга и владелец всех CollateralAccount.

    Не синхронизирован сам по себе: сериализация доступа — на границе
    вызова SyntheticPoolEngine.
    """

    def __init__(
        self,
        registry: AssetRegistry,
        prices: PriceGateway,
        bootstrap_share_amount: Decimal = BOOTSTRAP_SHARE_AMOUNT,
    ):
        self._registry = registry
        self._prices = prices
        self.bootstrap_share_amount = bootstrap_share_amount
        self._accounts: Dict[str, CollateralAccount] = {}
        self._total_share_supply: Decimal = ZERO

    @property
    def total_share_supply(self) -> Decimal:
        return self._total_share_supply

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def find_account(self, user_id: str) -> Optional[CollateralAccount]:
        return self._accounts.get(user_id)

    def get_account(self, user_id: str) -> CollateralAccount:
        """
        Raises:
            AccountNotFound: аккаунт ещё не создан
        """
        account = self._accounts.get(user_id)
        if account is None:
            raise AccountNotFound(user_id)
        return account

    def open_account(self, user_id: str) -> CollateralAccount:
        """Существующий аккаунт или новый пустой (ленивое создание при stake)."""
        account = self._accounts.get(user_id)
        if account is None:
            account = CollateralAccount(user_id=user_id)
            self._accounts[user_id] = account
            logger.info("Opened collateral account for %s", user_id)
        return account

    def put_account(self, account: CollateralAccount) -> None:
        """Замена состояния аккаунта (доли долга меняются только через mint/burn_shares)."""
        current = self.get_account(account.user_id)
        if current.debt_share_balance != account.debt_share_balance:
            raise LedgerInvariantViolation(
                "debt_share_balance can only change through mint_shares/burn_shares",
                detail=account.user_id,
            )
        self._accounts[account.user_id] = account

    def accounts(self) -> List[CollateralAccount]:
        return list(self._accounts.values())

    # -------------------------------------------------------------------------
    # Global debt
    # -------------------------------------------------------------------------

    def total_global_debt_value(
        self, pending_supply: Optional[Mapping[str, Decimal]] = None
    ) -> Decimal:
        """
        Σ price(underlying) × circulating_supply по всем синтетикам.

        Args:
            pending_supply: token_id → дополнительный supply, ещё не выпущенный
                custody-коллаборатором (оценка tentative-состояния до mint)

        Raises:
            PriceUnavailable: если цена хотя бы одного синтетика недоступна
        """
        pending_supply = pending_supply or {}
        debt = ZERO
        for asset in self._registry:
            supply = add(
                self._registry.circulating_supply(asset),
                pending_supply.get(asset.synthetic_token_id, ZERO),
            )
            price = self._prices.price_of(asset.underlying_asset_id)
            debt = add(debt, mul_down(price, supply))
        return debt

    # -------------------------------------------------------------------------
    # Mint / burn
    # -------------------------------------------------------------------------

    def mint_shares(
        self, user_id: str, global_debt_before: Decimal, new_debt_value: Decimal
    ) -> Decimal:
        """
        Выпуск долей под новый долг пользователя.

        Bootstrap (supply == 0): фиксированное bootstrap_share_amount независимо
        от new_debt_value. Иначе доли пропорциональны добавленной стоимости,
        стоимость доли существующих держателей сохраняется.

        Zero-debt (supply > 0, global_debt_before == 0): оставшиеся доли — rounding
        dust без стоимости, курс задаётся заново через bootstrap_share_amount.

        Returns:
            Количество выпущенных долей

        Raises:
            AccountNotFound: аккаунт не создан
            InvalidAmount: new_debt_value > 0 усекается до нуля долей
        """
        validate_non_negative(new_debt_value, "new_debt_value")
        validate_non_negative(global_debt_before, "global_debt_before")
        account = self.get_account(user_id)

        if self._total_share_supply.is_zero():
            shares = self.bootstrap_share_amount
            logger.debug("Bootstrap mint: %s shares for %s", shares, user_id)
        elif global_debt_before.is_zero():
            # Оставшаяся rounding dust ничего не стоит: курс доли задаётся заново
            shares = self.bootstrap_share_amount
            logger.warning(
                "Re-bootstrap mint: global debt is zero with %s dust shares outstanding",
                self._total_share_supply,
            )
        else:
            shares = mul_div_down(new_debt_value, self._total_share_supply, global_debt_before)
            logger.debug(
                "Mint shares: %s × %s / %s = %s",
                new_debt_value, self._total_share_supply, global_debt_before, shares,
            )
            if shares.is_zero() and new_debt_value > ZERO:
                # Долг без долей: синтетик был бы выпущен без обеспечения
                raise InvalidAmount(
                    f"Mint of debt value {new_debt_value} is below the smallest share unit "
                    f"(supply={self._total_share_supply}, global_debt={global_debt_before})"
                )

        self._accounts[user_id] = account.with_debt_shares(add(account.debt_share_balance, shares))
        self._total_share_supply = add(self._total_share_supply, shares)
        return shares

    def burn_shares(
        self, user_id: str, global_debt_before: Decimal, debt_value_removed: Decimal
    ) -> Decimal:
        """
        Погашение долей пропорционально снятому долгу.

        debt_value_removed = price(underlying) × сожжённое количество синтетика,
        вычисляется вызывающим кодом.

        Returns:
            Количество сожжённых долей

        Raises:
            AccountNotFound: аккаунт не создан
            InsufficientShareBalance: у аккаунта меньше долей, чем требуется
            LedgerInvariantViolation: global_debt_before == 0 (burn без долга невозможен)
        """
        validate_non_negative(debt_value_removed, "debt_value_removed")
        account = self.get_account(user_id)

        if global_debt_before.is_zero():
            raise LedgerInvariantViolation(
                "Burn against zero global debt",
                detail=f"debt_value_removed={debt_value_removed}",
            )

        shares = mul_div_down(self._total_share_supply, debt_value_removed, global_debt_before)
        if shares > account.debt_share_balance:
            raise InsufficientShareBalance(user_id, shares, account.debt_share_balance)

        self._accounts[user_id] = account.with_debt_shares(sub(account.debt_share_balance, shares))
        self._total_share_supply = sub(self._total_share_supply, shares)
        logger.debug(
            "Burn shares: %s × %s / %s = %s",
            add(self._total_share_supply, shares), debt_value_removed, global_debt_before, shares,
        )
        return shares

    # -------------------------------------------------------------------------
    # Checkpoint / invariants
    # -------------------------------------------------------------------------

    def checkpoint(self) -> LedgerCheckpoint:
        return LedgerCheckpoint(
            accounts=dict(self._accounts),
            total_share_supply=self._total_share_supply,
        )

    def restore(self, checkpoint: LedgerCheckpoint) -> None:
        self._accounts = dict(checkpoint.accounts)
        self._total_share_supply = checkpoint.total_share_supply

    def verify_invariants(self) -> None:
        """
        Raises:
            LedgerInvariantViolation: total_share_supply != Σ debt_share_balance
        """
        share_sum = total(a.debt_share_balance for a in self._accounts.values())
        if share_sum != self._total_share_supply:
            raise LedgerInvariantViolation(
                "total_share_supply does not match sum of account balances",
                detail=f"supply={self._total_share_supply}, sum={share_sum}",
            )
        if self._total_share_supply < ZERO:
            raise LedgerInvariantViolation(
                "negative total_share_supply", detail=str(self._total_share_supply)
            )
