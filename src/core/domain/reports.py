"""
Reports — Read-only отчёты пула

Immutable Pydantic модели для account_summary и pool_snapshot.
JSON-форма (model_dump(mode="json")) совместима с JSON Schema
(contracts/schema/account_summary.json, contracts/schema/pool_snapshot.json).
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AccountSummary(BaseModel):
    """
    Сводка по аккаунту пользователя.

    debt_value = global_debt_value × debt_share_balance / total_share_supply
    collateralization_ratio = collateral_value / debt_value (None если долга нет)
    """

    user_id: str = Field(..., min_length=1)
    collateral_balance: Decimal = Field(..., ge=0)
    collateral_price: Decimal = Field(..., gt=0)
    collateral_value: Decimal = Field(..., ge=0)
    debt_share_balance: Decimal = Field(..., ge=0)
    total_share_supply: Decimal = Field(..., ge=0)
    global_debt_value: Decimal = Field(..., ge=0)
    debt_value: Decimal = Field(..., ge=0)
    collateralization_ratio: Optional[Decimal] = Field(
        None, description="None для аккаунта без долга"
    )

    model_config = {"frozen": True}

    def describe(self) -> str:
        """Однострочное текстовое представление."""
        return (
            f"Collateral balance: {self.collateral_balance}, "
            f"Collateral price: {self.collateral_price}, "
            f"Debt: {self.global_debt_value} * {self.debt_share_balance} / {self.total_share_supply}"
        )


class AssetQuote(BaseModel):
    """Котировка одного синтетика в снапшоте пула."""

    symbol: str = Field(..., min_length=1)
    underlying_asset_id: str = Field(..., min_length=1)
    synthetic_token_id: str = Field(..., min_length=1)
    price: Decimal = Field(..., gt=0)
    circulating_supply: Decimal = Field(..., ge=0)
    debt_value: Decimal = Field(..., ge=0)

    model_config = {"frozen": True}


class PoolSnapshot(BaseModel):
    """Снапшот пула: все синтетики, глобальный долг и supply долей."""

    unit_of_account_asset_id: str = Field(..., min_length=1)
    assets: list[AssetQuote] = Field(default_factory=list)
    total_share_supply: Decimal = Field(..., ge=0)
    global_debt_value: Decimal = Field(..., ge=0)
    account_count: int = Field(..., ge=0)

    model_config = {"frozen": True}
