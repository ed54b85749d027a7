"""
Gateways — Интерфейсы внешних коллабораторов пула

Пул не владеет ни хранением стоимости, ни идентификацией, ни ценами:
- PriceOracle: price_of(base, quote) -> Optional[Decimal]
- TokenLedger: custody + authorized mint/burn fungible-токенов
- IdentityResolver: credential → стабильный user id
- LiquidationHook: точка расширения (ликвидация не реализована)

PriceGateway — адаптер над оракулом: всегда котирует против одного
unit-of-account актива, отсутствие цены фатально для операции,
внутри price session цены мемоизируются (одна цена на актив за операцию).
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Protocol, runtime_checkable

from src.core.domain.errors import PriceUnavailable
from src.core.domain.value import Bucket, Capability
from src.core.math.share_math import ShareMathDomainViolation, ZERO, to_decimal

if TYPE_CHECKING:
    from src.pool.collateralization import CollateralizationResult

logger = logging.getLogger(__name__)


# =============================================================================
# COLLABORATOR PROTOCOLS
# =============================================================================


@runtime_checkable
class PriceOracle(Protocol):
    """Внешний сервис цен."""

    def price_of(self, base_asset: str, quote_asset: str) -> Optional[Decimal]:
        ...


@runtime_checkable
class TokenLedger(Protocol):
    """
    Custody-коллаборатор: хранит балансы и выполняет authorized mint/burn.

    Все мутирующие вызовы принимают Capability. Контроллер токена
    фиксируется при create_token.
    """

    def create_token(self, name: str, symbol: str, authority: Capability) -> str:
        ...

    def mint(self, token_id: str, amount: Decimal, authority: Capability) -> Bucket:
        ...

    def burn(self, bucket: Bucket, authority: Capability) -> None:
        ...

    def total_issued(self, token_id: str) -> Decimal:
        ...

    def deposit(self, bucket: Bucket, authority: Capability) -> None:
        ...

    def withdraw(self, token_id: str, amount: Decimal, authority: Capability) -> Bucket:
        ...


@runtime_checkable
class IdentityResolver(Protocol):
    """Credential вызывающего → стабильный, неподделываемый user id."""

    def resolve_caller(self, credential: Any) -> str:
        ...


@runtime_checkable
class LiquidationHook(Protocol):
    """
    Точка расширения для ликвидации.

    Вызывается, когда операция отклонена как Undercollateralized, а позиция
    уже была небезопасной до операции. Политика ликвидации не реализована.
    """

    def __call__(self, user_id: str, result: "CollateralizationResult") -> None:
        ...


# =============================================================================
# PRICE GATEWAY
# =============================================================================


class PriceGateway:
    """
    Адаптер оракула с единым unit-of-account.

    Вне session каждый вызов идёт в оракул. Внутри session (одна операция
    пула) первая полученная цена актива переиспользуется до конца session.
    """

    def __init__(self, oracle: PriceOracle, unit_of_account_asset_id: str):
        self._oracle = oracle
        self.unit_of_account_asset_id = unit_of_account_asset_id
        self._session: Optional[Dict[str, Decimal]] = None

    def price_of(self, asset_id: str) -> Decimal:
        """
        Цена asset_id в unit-of-account.

        Raises:
            PriceUnavailable: Оракул вернул None, нечисловое или неположительное значение
        """
        if self._session is not None and asset_id in self._session:
            return self._session[asset_id]

        raw = self._oracle.price_of(asset_id, self.unit_of_account_asset_id)
        if raw is None:
            logger.warning("No price for %s/%s", asset_id, self.unit_of_account_asset_id)
            raise PriceUnavailable(asset_id, self.unit_of_account_asset_id)

        try:
            price = to_decimal(raw)
        except (TypeError, ShareMathDomainViolation) as e:
            raise PriceUnavailable(
                asset_id, self.unit_of_account_asset_id, reason=f"invalid quote {raw!r}"
            ) from e

        if price <= ZERO:
            raise PriceUnavailable(
                asset_id, self.unit_of_account_asset_id, reason=f"non-positive quote {price}"
            )

        if self._session is not None:
            self._session[asset_id] = price
        return price

    @contextmanager
    def session(self) -> Iterator["PriceGateway"]:
        """Мемоизация цен на время одной операции. Вложенные session переиспользуют внешнюю."""
        if self._session is not None:
            yield self
            return

        self._session = {}
        try:
            yield self
        finally:
            self._session = None
