"""
Domain models and value objects.

Contains fundamental domain entities like CollateralAccount, SyntheticAsset, Bucket.
"""

from src.core.domain.account import CollateralAccount
from src.core.domain.asset import SyntheticAsset
from src.core.domain.errors import (
    AccountNotFound,
    DuplicateAsset,
    InsufficientCollateral,
    InsufficientShareBalance,
    InvalidAmount,
    LedgerInvariantViolation,
    PriceUnavailable,
    SyntheticPoolError,
    Unauthorized,
    Undercollateralized,
    UnknownAsset,
)
from src.core.domain.reports import AccountSummary, AssetQuote, PoolSnapshot
from src.core.domain.value import Bucket, Capability

__all__ = [
    # Account / asset models
    "CollateralAccount",
    "SyntheticAsset",
    # Value handles
    "Bucket",
    "Capability",
    # Reports
    "AccountSummary",
    "AssetQuote",
    "PoolSnapshot",
    # Errors
    "SyntheticPoolError",
    "DuplicateAsset",
    "UnknownAsset",
    "AccountNotFound",
    "InsufficientCollateral",
    "InsufficientShareBalance",
    "Undercollateralized",
    "PriceUnavailable",
    "InvalidAmount",
    "Unauthorized",
    "LedgerInvariantViolation",
]
