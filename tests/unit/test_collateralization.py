"""Unit тесты для CollateralizationEngine.

Coverage:
- Zero-debt exemption (supply == 0, debt_share_balance == 0)
- Ratio против порога (граница включительно)
- check() → Undercollateralized с результатом
- Доли без стоимости (global debt == 0)
"""

from decimal import Decimal

import pytest

from src.core.domain import CollateralAccount, Undercollateralized
from src.pool.collateralization import CollateralizationEngine


THRESHOLD = Decimal("1.5")


@pytest.fixture
def engine():
    """Fixture для CollateralizationEngine."""
    return CollateralizationEngine()


def make_account(collateral: str, shares: str) -> CollateralAccount:
    return CollateralAccount(
        user_id="alice",
        collateral_balance=Decimal(collateral),
        debt_share_balance=Decimal(shares),
    )


# =============================================================================
# ZERO-DEBT EXEMPTION
# =============================================================================


def test_pass_when_supply_zero(engine):
    """PASS: total_share_supply == 0 (до bootstrap)."""
    result = engine.evaluate(make_account("0", "0"), Decimal("1"), Decimal("0"), Decimal("0"), THRESHOLD)

    assert result.passed
    assert result.ratio is None
    assert result.user_debt_value == 0


def test_pass_when_account_has_no_shares(engine):
    """PASS: у аккаунта нет долей, даже без залога и при огромном долге пула."""
    result = engine.evaluate(
        make_account("0", "0"), Decimal("1"), Decimal("1000000"), Decimal("100"), THRESHOLD
    )

    assert result.passed
    assert result.details == "PASS: no debt shares"


def test_pass_when_shares_carry_zero_value(engine):
    """PASS: доли есть, но глобальный долг нулевой."""
    result = engine.evaluate(make_account("0", "5"), Decimal("1"), Decimal("0"), Decimal("100"), THRESHOLD)

    assert result.passed
    assert result.ratio is None


# =============================================================================
# RATIO
# =============================================================================


def test_pass_above_threshold(engine):
    """1000 залога × 1.0 против долга 600 → ratio 1.666 >= 1.5."""
    result = engine.evaluate(
        make_account("1000", "100"), Decimal("1"), Decimal("600"), Decimal("100"), THRESHOLD
    )

    assert result.passed
    assert result.user_debt_value == Decimal("600")
    assert result.ratio == Decimal("1.666666666666666666")
    assert result.collateral_value == Decimal("1000")


def test_block_below_threshold(engine):
    """1000 против долга 700 → ratio 1.428 < 1.5 → BLOCK."""
    result = engine.evaluate(
        make_account("1000", "100"), Decimal("1"), Decimal("700"), Decimal("100"), THRESHOLD
    )

    assert not result.passed
    assert result.block_reason == "under_collateralized"
    assert result.ratio < THRESHOLD


def test_threshold_is_inclusive(engine):
    """ratio == threshold проходит (блокируется только ratio < threshold)."""
    result = engine.evaluate(
        make_account("900", "100"), Decimal("1"), Decimal("600"), Decimal("100"), THRESHOLD
    )

    assert result.passed
    assert result.ratio == THRESHOLD


def test_partial_share_of_global_debt(engine):
    """Долг пользователя = global × balance / supply."""
    result = engine.evaluate(
        make_account("300", "25"), Decimal("2"), Decimal("800"), Decimal("100"), THRESHOLD
    )

    # debt = 800 × 25 / 100 = 200; collateral = 300 × 2 = 600; ratio = 3
    assert result.user_debt_value == Decimal("200")
    assert result.ratio == Decimal("3")
    assert result.passed


def test_collateral_price_drop_blocks(engine):
    """Падение цены залога снижает ratio."""
    result = engine.evaluate(
        make_account("1000", "100"), Decimal("0.5"), Decimal("600"), Decimal("100"), THRESHOLD
    )

    assert not result.passed


# =============================================================================
# CHECK
# =============================================================================


def test_check_raises_with_result(engine):
    """check() поднимает Undercollateralized с результатом оценки."""
    with pytest.raises(Undercollateralized) as exc_info:
        engine.check(make_account("1000", "100"), Decimal("1"), Decimal("700"), Decimal("100"), THRESHOLD)

    err = exc_info.value
    assert err.user_id == "alice"
    assert err.result.threshold == THRESHOLD
    assert err.result.user_debt_value == Decimal("700")
    assert "Under collateralized" in str(err)


def test_check_returns_result_on_pass(engine):
    result = engine.check(make_account("1000", "100"), Decimal("1"), Decimal("600"), Decimal("100"), THRESHOLD)
    assert result.passed
