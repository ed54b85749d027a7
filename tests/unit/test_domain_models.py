"""
Unit tests для domain моделей

Покрывает:
- CollateralAccount (immutability, неотрицательные балансы, with_* копии)
- SyntheticAsset (валидация символа)
- Bucket / Capability
- PoolConfig (валидация конфигурации)
- Typed errors (сообщения и атрибуты)
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.core.domain import (
    AccountNotFound,
    Bucket,
    Capability,
    CollateralAccount,
    DuplicateAsset,
    InsufficientCollateral,
    InvalidAmount,
    PriceUnavailable,
    SyntheticAsset,
    SyntheticPoolError,
    Unauthorized,
)
from src.pool.config import BOOTSTRAP_SHARE_AMOUNT, PoolConfig


# =============================================================================
# COLLATERAL ACCOUNT
# =============================================================================


class TestCollateralAccount:
    """Тесты CollateralAccount."""

    def test_new_account_is_empty(self):
        """Новый аккаунт — нулевые балансы, без долга."""
        account = CollateralAccount(user_id="alice")
        assert account.collateral_balance == 0
        assert account.debt_share_balance == 0
        assert not account.has_debt

    def test_frozen(self):
        """Immutable: прямое присваивание запрещено."""
        account = CollateralAccount(user_id="alice")
        with pytest.raises(ValidationError):
            account.collateral_balance = Decimal("10")

    def test_negative_collateral_rejected(self):
        with pytest.raises(ValidationError):
            CollateralAccount(user_id="alice", collateral_balance=Decimal("-1"))

    def test_negative_shares_rejected(self):
        with pytest.raises(ValidationError):
            CollateralAccount(user_id="alice", debt_share_balance=Decimal("-0.1"))

    def test_empty_user_id_rejected(self):
        with pytest.raises(ValidationError):
            CollateralAccount(user_id="")

    def test_with_collateral_returns_new_instance(self):
        """with_collateral создаёт новый экземпляр, исходный не меняется."""
        account = CollateralAccount(user_id="alice")
        updated = account.with_collateral(Decimal("1000"))
        assert updated.collateral_balance == Decimal("1000")
        assert account.collateral_balance == 0
        assert updated.user_id == "alice"

    def test_with_collateral_validates(self):
        """with_collateral не обходит валидацию."""
        account = CollateralAccount(user_id="alice")
        with pytest.raises(ValidationError):
            account.with_collateral(Decimal("-5"))

    def test_with_debt_shares(self):
        account = CollateralAccount(user_id="alice", collateral_balance=Decimal("7"))
        updated = account.with_debt_shares(Decimal("100"))
        assert updated.has_debt
        assert updated.collateral_balance == Decimal("7")


# =============================================================================
# SYNTHETIC ASSET
# =============================================================================


class TestSyntheticAsset:
    """Тесты SyntheticAsset."""

    def test_valid_asset(self):
        asset = SyntheticAsset(symbol="BTC", underlying_asset_id="btc", synthetic_token_id="sbtc")
        assert asset.symbol == "BTC"

    def test_whitespace_symbol_rejected(self):
        with pytest.raises(ValidationError):
            SyntheticAsset(symbol=" BTC", underlying_asset_id="btc", synthetic_token_id="sbtc")

    def test_empty_symbol_rejected(self):
        with pytest.raises(ValidationError):
            SyntheticAsset(symbol="", underlying_asset_id="btc", synthetic_token_id="sbtc")

    def test_frozen(self):
        asset = SyntheticAsset(symbol="BTC", underlying_asset_id="btc", synthetic_token_id="sbtc")
        with pytest.raises(ValidationError):
            asset.symbol = "ETH"


# =============================================================================
# VALUE HANDLES
# =============================================================================


class TestValueHandles:
    """Тесты Bucket / Capability."""

    def test_bucket_requires_positive_amount(self):
        with pytest.raises(ValidationError):
            Bucket(token_id="t", amount=Decimal("0"))

    def test_bucket_ids_unique(self):
        a = Bucket(token_id="t", amount=Decimal("1"))
        b = Bucket(token_id="t", amount=Decimal("1"))
        assert a.bucket_id != b.bucket_id

    def test_capability_key_hidden_from_repr(self):
        """Секрет capability не попадает в repr/логи."""
        cap = Capability(holder="pool", key="s3cr3t")
        assert "s3cr3t" not in repr(cap)


# =============================================================================
# POOL CONFIG
# =============================================================================


class TestPoolConfig:
    """Тесты PoolConfig."""

    def test_defaults(self):
        config = PoolConfig(collateral_asset_id="snx", unit_of_account_asset_id="usd")
        assert config.collateralization_threshold == Decimal("1.5")
        assert config.bootstrap_share_amount == BOOTSTRAP_SHARE_AMOUNT == Decimal("100")
        assert config.verify_invariants is False

    def test_non_positive_threshold_rejected(self):
        with pytest.raises(ValueError, match="collateralization_threshold"):
            PoolConfig("snx", "usd", collateralization_threshold=Decimal("0"))

    def test_float_threshold_rejected(self):
        with pytest.raises(TypeError):
            PoolConfig("snx", "usd", collateralization_threshold=1.5)

    def test_non_positive_bootstrap_rejected(self):
        with pytest.raises(ValueError, match="bootstrap_share_amount"):
            PoolConfig("snx", "usd", bootstrap_share_amount=Decimal("-1"))

    def test_collateral_cannot_be_unit_of_account(self):
        with pytest.raises(ValueError):
            PoolConfig("usd", "usd")

    def test_missing_asset_ids_rejected(self):
        with pytest.raises(ValueError):
            PoolConfig("", "usd")


# =============================================================================
# ERRORS
# =============================================================================


class TestErrors:
    """Типизированные ошибки несут контекст."""

    def test_hierarchy(self):
        assert issubclass(DuplicateAsset, SyntheticPoolError)
        assert issubclass(InvalidAmount, ValueError)
        assert issubclass(Unauthorized, PermissionError)

    def test_duplicate_asset_message(self):
        err = DuplicateAsset("BTC")
        assert err.symbol == "BTC"
        assert "Asset already exists" in str(err)

    def test_account_not_found_message(self):
        assert "User not found" in str(AccountNotFound("bob"))

    def test_insufficient_collateral_attributes(self):
        err = InsufficientCollateral("bob", Decimal("5"), Decimal("3"))
        assert err.requested == Decimal("5")
        assert err.available == Decimal("3")

    def test_price_unavailable_attributes(self):
        err = PriceUnavailable("btc", "usd")
        assert err.base_asset == "btc"
        assert err.quote_asset == "usd"
        assert "btc/usd" in str(err)
