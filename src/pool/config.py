"""PoolConfig — конфигурация SyntheticPoolEngine."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Final

# Номинальное количество долей при первом mint (bootstrap).
# Фиксирует только начальный курс доля/стоимость.
BOOTSTRAP_SHARE_AMOUNT: Final[Decimal] = Decimal("100")


@dataclass(frozen=True)
class PoolConfig:
    """Конфигурация пула синтетиков.

    - collateral_asset_id: актив залога (стейкается пользователями)
    - unit_of_account_asset_id: актив, против которого котируются все цены
    - collateralization_threshold: минимальный collateral_value / debt_value
    - bootstrap_share_amount: доли, выдаваемые при mint против нулевого supply
    - verify_invariants: пересчитывать Σ debt_share_balance после каждой мутации
    """

    collateral_asset_id: str
    unit_of_account_asset_id: str
    collateralization_threshold: Decimal = Decimal("1.5")
    bootstrap_share_amount: Decimal = field(default=BOOTSTRAP_SHARE_AMOUNT)
    verify_invariants: bool = False

    def __post_init__(self):
        if not self.collateral_asset_id or not self.unit_of_account_asset_id:
            raise ValueError("collateral_asset_id and unit_of_account_asset_id are required")
        if self.collateral_asset_id == self.unit_of_account_asset_id:
            raise ValueError(
                f"collateral asset cannot be the unit of account: {self.collateral_asset_id}"
            )
        if not isinstance(self.collateralization_threshold, Decimal):
            raise TypeError("collateralization_threshold must be Decimal")
        if self.collateralization_threshold <= 0:
            raise ValueError(
                f"collateralization_threshold must be positive, got {self.collateralization_threshold}"
            )
        if not isinstance(self.bootstrap_share_amount, Decimal):
            raise TypeError("bootstrap_share_amount must be Decimal")
        if self.bootstrap_share_amount <= 0:
            raise ValueError(
                f"bootstrap_share_amount must be positive, got {self.bootstrap_share_amount}"
            )
