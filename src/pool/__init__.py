"""Synthetic pool — глобальный ledger долей долга и проверка обеспечения.

- AssetRegistry: каталог синтетиков
- DebtShareLedger: пропорциональный учёт долей глобального долга
- CollateralizationEngine: gate платёжеспособности
- SyntheticPoolEngine: атомарные публичные операции
"""

from .collateralization import CollateralizationEngine, CollateralizationResult
from .config import BOOTSTRAP_SHARE_AMOUNT, PoolConfig
from .debt_ledger import DebtShareLedger, LedgerCheckpoint
from .engine import SyntheticPoolEngine
from .gateways import IdentityResolver, LiquidationHook, PriceGateway, PriceOracle, TokenLedger
from .registry import AssetRegistry

__all__ = [
    "AssetRegistry",
    "BOOTSTRAP_SHARE_AMOUNT",
    "CollateralizationEngine",
    "CollateralizationResult",
    "DebtShareLedger",
    "IdentityResolver",
    "LedgerCheckpoint",
    "LiquidationHook",
    "PoolConfig",
    "PriceGateway",
    "PriceOracle",
    "SyntheticPoolEngine",
    "TokenLedger",
]
