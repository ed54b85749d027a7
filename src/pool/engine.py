"""SyntheticPoolEngine — оркестратор пула синтетиков

Публичные операции (каждая атомарна и сериализована глобальным lock'ом):
- register_asset: новый синтетик (DuplicateAsset)
- new_user: выпуск user badge
- stake: депозит залога, ленивое создание аккаунта
- unstake: вывод залога с проверкой обеспечения post-withdrawal
- mint: выпуск синтетика + долей долга с проверкой обеспечения post-mint
- burn: сжигание синтетика и пропорциональных долей долга
- total_global_debt_value / asset_price / collateral_price / account_summary /
  position_health / pool_snapshot: read-only отчёты

Схема мутирующей операции:
    resolve caller → lock + price session → checkpoint ledger →
    compute tentative state → collateralization check → verify_invariants →
    external side effect → commit

Любое исключение восстанавливает checkpoint (accounts + total_share_supply).
Внешние вызовы custody выполняются последними, поэтому откат их не требует:
отказ любой проверки, включая verify_invariants, до custody не доходит.
"""

import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterator, Mapping, Optional, Tuple

from src.core.domain.account import CollateralAccount
from src.core.domain.errors import (
    InsufficientCollateral,
    InvalidAmount,
    Undercollateralized,
)
from src.core.domain.reports import AccountSummary, AssetQuote, PoolSnapshot
from src.core.domain.value import Bucket, Capability
from src.core.math.share_math import ZERO, add, mul_down, sub, to_decimal
from src.pool.collateralization import CollateralizationEngine, CollateralizationResult
from src.pool.config import PoolConfig
from src.pool.debt_ledger import DebtShareLedger
from src.pool.gateways import (
    IdentityResolver,
    LiquidationHook,
    PriceGateway,
    PriceOracle,
    TokenLedger,
)
from src.pool.registry import AssetRegistry

logger = logging.getLogger(__name__)


class SyntheticPoolEngine:
    """Пул синтетиков с глобальным учётом долей долга.

    Все коллабораторы передаются явно; capability пула (authority) — единственный
    способ mint/burn синтетиков и вывода залога из хранилища пула.
    """

    def __init__(
        self,
        config: PoolConfig,
        oracle: PriceOracle,
        token_ledger: TokenLedger,
        identity: IdentityResolver,
        authority: Capability,
        liquidation_hook: Optional[LiquidationHook] = None,
    ):
        """
        Args:
            config: конфигурация пула
            oracle: внешний сервис цен
            token_ledger: custody-коллаборатор
            identity: резолвер credential → user id
            authority: capability пула для custody
            liquidation_hook: точка расширения для уже небезопасных позиций
        """
        self.config = config
        self._token_ledger = token_ledger
        self._identity = identity
        self._authority = authority
        self._liquidation_hook = liquidation_hook

        self._prices = PriceGateway(oracle, config.unit_of_account_asset_id)
        self.registry = AssetRegistry(token_ledger, authority)
        self.ledger = DebtShareLedger(
            self.registry, self._prices, config.bootstrap_share_amount
        )
        self.collateralization = CollateralizationEngine()

        self._badge_count = 0
        self._lock = threading.RLock()

    # =========================================================================
    # ATOMIC SECTIONS
    # =========================================================================

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        """Эксклюзивная секция с откатом ledger'а при любом исключении."""
        with self._lock, self._prices.session():
            checkpoint = self.ledger.checkpoint()
            try:
                yield
            except Exception as e:
                self.ledger.restore(checkpoint)
                logger.warning("%s aborted, ledger state restored: %s", operation, e)
                raise

    @contextmanager
    def _read(self) -> Iterator[None]:
        with self._lock, self._prices.session():
            yield

    # =========================================================================
    # ASSETS / USERS
    # =========================================================================

    def register_asset(self, symbol: str, underlying_asset_id: str) -> str:
        """Регистрация синтетика.

        Returns:
            synthetic_token_id

        Raises:
            DuplicateAsset: символ уже зарегистрирован
        """
        with self._atomic("register_asset"):
            return self.registry.register(symbol, underlying_asset_id)

    def new_user(self) -> Bucket:
        """Выпуск user badge (один неделимый токен). Token id бейджа — user id."""
        with self._lock:
            self._badge_count += 1
            badge_token_id = self._token_ledger.create_token(
                name="Synthetic Pool User Badge",
                symbol=f"BADGE{self._badge_count}",
                authority=self._authority,
            )
            badge = self._token_ledger.mint(badge_token_id, Decimal(1), self._authority)
            logger.info("Issued user badge %s", badge_token_id)
            return badge

    # =========================================================================
    # COLLATERAL
    # =========================================================================

    def stake(self, caller: Any, collateral_deposit: Bucket) -> CollateralAccount:
        """Депозит залога. Аккаунт создаётся при первом stake.

        Проверка обеспечения не нужна: залог только растёт.

        Returns:
            Новое состояние аккаунта

        Raises:
            InvalidAmount: бакет не collateral asset
        """
        user_id = self._identity.resolve_caller(caller)
        if collateral_deposit.token_id != self.config.collateral_asset_id:
            raise InvalidAmount(
                f"Expected collateral {self.config.collateral_asset_id}, got {collateral_deposit.token_id}"
            )

        with self._atomic("stake"):
            account = self.ledger.open_account(user_id)
            account = account.with_collateral(add(account.collateral_balance, collateral_deposit.amount))
            self.ledger.put_account(account)
            self._verify_invariants()
            self._token_ledger.deposit(collateral_deposit, self._authority)

        logger.info("stake: %s deposited %s", user_id, collateral_deposit.amount)
        return account

    def unstake(self, caller: Any, amount: Decimal) -> Bucket:
        """Вывод залога.

        Returns:
            Бакет collateral asset

        Raises:
            AccountNotFound: аккаунт не создан
            InvalidAmount: amount <= 0
            InsufficientCollateral: amount > collateral_balance
            Undercollateralized: ratio после вывода ниже порога
            PriceUnavailable: нет цены залога или синтетика (только при наличии долга)
        """
        user_id = self._identity.resolve_caller(caller)
        amount = self._positive_amount(amount)

        with self._atomic("unstake"):
            before = self.ledger.get_account(user_id)
            if amount > before.collateral_balance:
                raise InsufficientCollateral(user_id, amount, before.collateral_balance)

            after = before.with_collateral(sub(before.collateral_balance, amount))
            self.ledger.put_account(after)

            self._assert_solvent(after, pre_account=before)
            self._verify_invariants()

            withdrawal = self._token_ledger.withdraw(
                self.config.collateral_asset_id, amount, self._authority
            )

        logger.info("unstake: %s withdrew %s", user_id, amount)
        return withdrawal

    # =========================================================================
    # SYNTHETICS
    # =========================================================================

    def mint(self, caller: Any, amount: Decimal, symbol: str) -> Bucket:
        """Выпуск синтетика под долг пользователя.

        Returns:
            Бакет синтетика

        Raises:
            AccountNotFound: аккаунт не создан
            UnknownAsset: символ не зарегистрирован
            InvalidAmount: amount <= 0, или долг усекается до нуля (стоимость либо доли)
            Undercollateralized: ratio после mint ниже порога
            PriceUnavailable: нет цены любого синтетика или залога
        """
        user_id = self._identity.resolve_caller(caller)
        amount = self._positive_amount(amount)

        with self._atomic("mint"):
            before = self.ledger.get_account(user_id)
            asset = self.registry.lookup_by_symbol(symbol)

            new_debt_value = mul_down(self._prices.price_of(asset.underlying_asset_id), amount)
            if new_debt_value.is_zero():
                raise InvalidAmount(f"Mint of {amount} {symbol} has zero debt value")
            global_debt_before = self.ledger.total_global_debt_value()
            supply_before = self.ledger.total_share_supply

            shares = self.ledger.mint_shares(user_id, global_debt_before, new_debt_value)

            # Tentative global debt: синтетик ещё не выпущен custody-коллаборатором
            self._assert_solvent(
                self.ledger.get_account(user_id),
                pre_account=before,
                pending_supply={asset.synthetic_token_id: amount},
                pre_global_debt=global_debt_before,
                pre_supply=supply_before,
            )
            self._verify_invariants()

            tokens = self._token_ledger.mint(asset.synthetic_token_id, amount, self._authority)

        logger.info(
            "mint: %s minted %s s%s (debt_value=%s, shares=%s)",
            user_id, amount, symbol, new_debt_value, shares,
        )
        return tokens

    def burn(self, caller: Any, synthetic_tokens: Bucket) -> Decimal:
        """Сжигание синтетика и пропорциональных долей долга.

        Post-check не нужен: снятие долга не ухудшает ratio.

        Returns:
            Количество сожжённых долей

        Raises:
            AccountNotFound: аккаунт не создан
            UnknownAsset: бакет не синтетик пула
            InsufficientShareBalance: у аккаунта недостаточно долей
            PriceUnavailable: нет цены любого синтетика
        """
        user_id = self._identity.resolve_caller(caller)

        with self._atomic("burn"):
            self.ledger.get_account(user_id)
            asset = self.registry.lookup_by_token(synthetic_tokens.token_id)

            debt_value_removed = mul_down(
                self._prices.price_of(asset.underlying_asset_id), synthetic_tokens.amount
            )
            global_debt_before = self.ledger.total_global_debt_value()

            shares = self.ledger.burn_shares(user_id, global_debt_before, debt_value_removed)
            self._verify_invariants()
            self._token_ledger.burn(synthetic_tokens, self._authority)

        logger.info(
            "burn: %s burned %s s%s (debt_value=%s, shares=%s)",
            user_id, synthetic_tokens.amount, asset.symbol, debt_value_removed, shares,
        )
        return shares

    # =========================================================================
    # READ-ONLY REPORTS
    # =========================================================================

    def total_global_debt_value(self) -> Decimal:
        with self._read():
            return self.ledger.total_global_debt_value()

    def asset_price(self, symbol: str) -> Decimal:
        """Цена базового актива синтетика в unit-of-account."""
        with self._read():
            asset = self.registry.lookup_by_symbol(symbol)
            return self._prices.price_of(asset.underlying_asset_id)

    def collateral_price(self) -> Decimal:
        with self._read():
            return self._prices.price_of(self.config.collateral_asset_id)

    def position_health(self, user_id: str) -> CollateralizationResult:
        """Оценка обеспечения текущего состояния аккаунта (без исключения)."""
        with self._read():
            return self._evaluate(self.ledger.get_account(user_id))

    def account_summary(self, user_id: str) -> AccountSummary:
        with self._read():
            account = self.ledger.get_account(user_id)
            collateral_price = self._prices.price_of(self.config.collateral_asset_id)
            global_debt_value = self.ledger.total_global_debt_value()
            result = self.collateralization.evaluate(
                account,
                collateral_price,
                global_debt_value,
                self.ledger.total_share_supply,
                self.config.collateralization_threshold,
            )
            return AccountSummary(
                user_id=user_id,
                collateral_balance=account.collateral_balance,
                collateral_price=collateral_price,
                collateral_value=result.collateral_value,
                debt_share_balance=account.debt_share_balance,
                total_share_supply=self.ledger.total_share_supply,
                global_debt_value=global_debt_value,
                debt_value=result.user_debt_value,
                collateralization_ratio=result.ratio,
            )

    def pool_snapshot(self) -> PoolSnapshot:
        with self._read():
            quotes = []
            for asset in self.registry:
                price = self._prices.price_of(asset.underlying_asset_id)
                supply = self.registry.circulating_supply(asset)
                quotes.append(
                    AssetQuote(
                        symbol=asset.symbol,
                        underlying_asset_id=asset.underlying_asset_id,
                        synthetic_token_id=asset.synthetic_token_id,
                        price=price,
                        circulating_supply=supply,
                        debt_value=mul_down(price, supply),
                    )
                )
            return PoolSnapshot(
                unit_of_account_asset_id=self.config.unit_of_account_asset_id,
                assets=quotes,
                total_share_supply=self.ledger.total_share_supply,
                global_debt_value=self.ledger.total_global_debt_value(),
                account_count=len(self.ledger.accounts()),
            )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _gate_inputs(
        self,
        pending_supply: Optional[Mapping[str, Decimal]] = None,
        global_debt_value: Optional[Decimal] = None,
        total_share_supply: Optional[Decimal] = None,
    ) -> Tuple[Decimal, Decimal, Decimal]:
        """(collateral_price, global_debt_value, total_share_supply) для gate."""
        if global_debt_value is None:
            global_debt_value = self.ledger.total_global_debt_value(pending_supply)
        if total_share_supply is None:
            total_share_supply = self.ledger.total_share_supply
        collateral_price = self._prices.price_of(self.config.collateral_asset_id)
        return collateral_price, global_debt_value, total_share_supply

    def _evaluate(
        self,
        account: CollateralAccount,
        pending_supply: Optional[Mapping[str, Decimal]] = None,
        global_debt_value: Optional[Decimal] = None,
        total_share_supply: Optional[Decimal] = None,
    ) -> CollateralizationResult:
        return self.collateralization.evaluate(
            account,
            *self._gate_inputs(pending_supply, global_debt_value, total_share_supply),
            self.config.collateralization_threshold,
        )

    def _assert_solvent(
        self,
        account: CollateralAccount,
        pre_account: CollateralAccount,
        pending_supply: Optional[Mapping[str, Decimal]] = None,
        pre_global_debt: Optional[Decimal] = None,
        pre_supply: Optional[Decimal] = None,
    ) -> None:
        """Gate на tentative-состоянии. При BLOCK — liquidation hook для уже небезопасной позиции.

        Raises:
            Undercollateralized: ratio tentative-состояния ниже порога
        """
        if self.ledger.total_share_supply.is_zero() or not account.has_debt:
            # Нулевой долг: цены не запрашиваются, вывод залога всегда возможен
            return

        try:
            self.collateralization.check(
                account,
                *self._gate_inputs(pending_supply),
                self.config.collateralization_threshold,
            )
        except Undercollateralized as e:
            logger.warning("Undercollateralized %s: %s", account.user_id, e.result.details)
            if self._liquidation_hook is not None:
                pre_result = self._evaluate(
                    pre_account, global_debt_value=pre_global_debt, total_share_supply=pre_supply
                )
                if not pre_result.passed:
                    self._liquidation_hook(account.user_id, pre_result)
            raise

    def _verify_invariants(self) -> None:
        """Сверка ledger'а перед внешним side effect (если включено в конфиге)."""
        if self.config.verify_invariants:
            self.ledger.verify_invariants()

    @staticmethod
    def _positive_amount(amount: Decimal) -> Decimal:
        amount = to_decimal(amount)
        if amount <= ZERO:
            raise InvalidAmount(f"Amount must be positive, got {amount}")
        return amount
