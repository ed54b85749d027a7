"""
Contract Validation Module

Модуль для валидации JSON-форм отчётов пула синтетиков.
"""

from .validators import (
    AccountSummaryValidator,
    ContractValidator,
    PoolSnapshotValidator,
    SchemaLoader,
    validate_account_summary,
    validate_pool_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "AccountSummaryValidator",
    "PoolSnapshotValidator",
    # Functions
    "validate_account_summary",
    "validate_pool_snapshot",
]
