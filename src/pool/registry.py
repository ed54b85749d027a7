"""AssetRegistry — каталог синтетиков пула.

- register: символ уникален на всё время жизни реестра
- Токен синтетика создаётся custody-коллаборатором под capability пула
- Нет deregistration и нет update
"""

import logging
from decimal import Decimal
from typing import Dict, Iterator, List

from src.core.domain.asset import SyntheticAsset
from src.core.domain.errors import DuplicateAsset, UnknownAsset
from src.core.domain.value import Capability
from src.pool.gateways import TokenLedger

logger = logging.getLogger(__name__)


class AssetRegistry:
    """Реестр синтетиков с индексами по символу и по token id."""

    def __init__(self, token_ledger: TokenLedger, authority: Capability):
        self._token_ledger = token_ledger
        self._authority = authority
        self._by_symbol: Dict[str, SyntheticAsset] = {}
        self._by_token: Dict[str, SyntheticAsset] = {}

    def register(self, symbol: str, underlying_asset_id: str) -> str:
        """Регистрация нового синтетика.

        Args:
            symbol: символ базового актива (например, 'BTC')
            underlying_asset_id: идентификатор базового актива у оракула

        Returns:
            synthetic_token_id

        Raises:
            DuplicateAsset: символ уже зарегистрирован
        """
        if symbol in self._by_symbol:
            raise DuplicateAsset(symbol)

        token_id = self._token_ledger.create_token(
            name=f"Synthetic {symbol}",
            symbol=f"s{symbol}",
            authority=self._authority,
        )
        asset = SyntheticAsset(
            symbol=symbol,
            underlying_asset_id=underlying_asset_id,
            synthetic_token_id=token_id,
        )
        self._by_symbol[symbol] = asset
        self._by_token[token_id] = asset

        logger.info("Registered synthetic %s (underlying=%s, token=%s)", symbol, underlying_asset_id, token_id)
        return token_id

    def lookup_by_symbol(self, symbol: str) -> SyntheticAsset:
        try:
            return self._by_symbol[symbol]
        except KeyError:
            raise UnknownAsset(symbol) from None

    def lookup_by_token(self, token_id: str) -> SyntheticAsset:
        try:
            return self._by_token[token_id]
        except KeyError:
            raise UnknownAsset(token_id) from None

    def circulating_supply(self, asset: SyntheticAsset) -> Decimal:
        """Total issued синтетика по данным custody-коллаборатора."""
        return self._token_ledger.total_issued(asset.synthetic_token_id)

    def assets(self) -> List[SyntheticAsset]:
        """Синтетики в порядке регистрации."""
        return list(self._by_symbol.values())

    def __iter__(self) -> Iterator[SyntheticAsset]:
        return iter(self.assets())

    def __len__(self) -> int:
        return len(self._by_symbol)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._by_symbol
