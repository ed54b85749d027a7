"""
SyntheticAsset — Модель зарегистрированного синтетика

Регистрируется один раз, после этого неизменяем (нет update/remove).
circulating_supply не хранится: запрашивается у внешнего token ledger.
"""

from pydantic import BaseModel, Field, field_validator


class SyntheticAsset(BaseModel):
    """
    Синтетический актив пула.

    Attributes:
        symbol: Уникальный символ базового актива (например, 'BTC')
        underlying_asset_id: Идентификатор базового актива у оракула
        synthetic_token_id: Идентификатор токена sXYZ у token ledger
    """

    symbol: str = Field(..., min_length=1, description="Символ актива (уникальный)")
    underlying_asset_id: str = Field(..., min_length=1, description="Базовый актив для оракула")
    synthetic_token_id: str = Field(..., min_length=1, description="Токен синтетика")

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        """Символ без пробелов по краям — иначе уникальность теряет смысл."""
        if v != v.strip():
            raise ValueError(f"symbol must not have surrounding whitespace: {v!r}")
        return v

