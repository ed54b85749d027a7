"""
Тесты для Share Math — Fixed-point Decimal примитивы

Проверяемые инварианты:
1. Усечение (ROUND_DOWN) до 18 знаков для mul/div
2. Деление на ноль → ShareMathDomainViolation (без fallback)
3. float на входе отвергается
4. Сложение не теряет точность для больших балансов
"""

from decimal import Decimal

import pytest

from src.core.math.share_math import (
    QUANTUM,
    SHARE_DECIMALS,
    ShareMathDomainViolation,
    add,
    div_down,
    is_within,
    mul_div_down,
    mul_down,
    sub,
    to_decimal,
    total,
    validate_non_negative,
    validate_positive,
)


# =============================================================================
# ТЕСТЫ: Конверсия
# =============================================================================


class TestToDecimal:
    """Тесты to_decimal: конверсия и квантование."""

    def test_int_and_str_accepted(self):
        """int и str конвертируются без потерь."""
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("12.5") == Decimal("12.5")

    def test_quantized_to_share_decimals(self):
        """Результат имеет ровно SHARE_DECIMALS знаков."""
        assert to_decimal("1").as_tuple().exponent == -SHARE_DECIMALS

    def test_truncates_extra_digits(self):
        """Лишние знаки отбрасываются к нулю, не округляются."""
        value = to_decimal("0.0000000000000000019")
        assert value == Decimal("0.000000000000000001")

    def test_float_rejected(self):
        """float не принимается (неточное представление)."""
        with pytest.raises(TypeError):
            to_decimal(1.5)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_nan_inf_rejected(self):
        """NaN/Inf отвергаются."""
        with pytest.raises(ShareMathDomainViolation):
            to_decimal("NaN")
        with pytest.raises(ShareMathDomainViolation):
            to_decimal("Infinity")

    def test_garbage_rejected(self):
        with pytest.raises(ShareMathDomainViolation):
            to_decimal("not-a-number")


# =============================================================================
# ТЕСТЫ: Арифметика
# =============================================================================


class TestArithmetic:
    """Тесты mul_down / div_down / mul_div_down."""

    def test_mul_down_exact(self):
        assert mul_down(Decimal("2"), Decimal("300")) == Decimal("600")

    def test_div_down_truncates(self):
        """1/3 усекается, не округляется вверх."""
        result = div_down(Decimal("2"), Decimal("3"))
        assert result == Decimal("0.666666666666666666")

    def test_div_down_zero_denominator_fails_loudly(self):
        """Деление на ноль — исключение, а не fallback."""
        with pytest.raises(ShareMathDomainViolation, match="Division by zero"):
            div_down(Decimal("1"), Decimal("0"))

    def test_mul_div_down_single_truncation(self):
        """a*b/c усекается один раз в конце."""
        # 100 * 100 / 600 = 16.666...
        result = mul_div_down(Decimal("100"), Decimal("100"), Decimal("600"))
        assert result == Decimal("16.666666666666666666")

    def test_mul_div_down_zero_denominator(self):
        with pytest.raises(ShareMathDomainViolation):
            mul_div_down(Decimal("1"), Decimal("1"), Decimal("0"))

    def test_truncation_toward_zero_for_negative(self):
        """ROUND_DOWN — к нулю и для отрицательных значений."""
        assert div_down(Decimal("-2"), Decimal("3")) == Decimal("-0.666666666666666666")


class TestWorkingPrecision:
    """Сложение в рабочей точности (контекст по умолчанию prec=28 недостаточен)."""

    def test_add_large_balance_keeps_fraction(self):
        big = Decimal("123456789012345")
        tiny = QUANTUM
        assert add(big, tiny) - big == tiny

    def test_sub_large_balance_keeps_fraction(self):
        big = Decimal("123456789012345")
        assert sub(add(big, QUANTUM), big) == QUANTUM

    def test_total(self):
        assert total([Decimal("1.5"), Decimal("2.5"), Decimal("0")]) == Decimal("4")

    def test_total_empty(self):
        assert total([]) == Decimal("0")

    def test_wide_quotient_truncated_not_rounded(self):
        """60-я значащая цифра тоже усекается: (3·10^41 + 2) / 3 → ...666, не ...667."""
        result = div_down(Decimal(3 * 10**41 + 2), Decimal(3))
        expected = Decimal("1" + "0" * 41 + "." + "6" * SHARE_DECIMALS)
        assert result == expected

    def test_wide_product_truncated_not_rounded(self):
        """(10^41 + 1.5) × (1 + 1.9·10^-18): 62 значащие цифры, хвост ...285 отбрасывается."""
        a = Decimal(str(10**41 + 1) + ".5")
        result = mul_down(a, Decimal("1.0000000000000000019"))
        # точно: 10^41 + 1.9·10^23 + 1.5 + 2.85·10^-18
        expected = Decimal(str(10**41 + 19 * 10**22 + 1) + ".500000000000000002")
        assert result == expected

    def test_result_beyond_working_precision_fails_loudly(self):
        """Результат шире 42 целых цифр — типизированный отказ, не decimal.InvalidOperation."""
        with pytest.raises(ShareMathDomainViolation, match="working precision"):
            mul_down(Decimal("1e30"), Decimal("1e30"))

    def test_to_decimal_beyond_working_precision(self):
        with pytest.raises(ShareMathDomainViolation):
            to_decimal("1" + "0" * 50)


# =============================================================================
# ТЕСТЫ: Валидация
# =============================================================================


class TestValidation:
    """Тесты validate_non_negative / validate_positive / is_within."""

    def test_non_negative(self):
        assert validate_non_negative(Decimal("0")) == Decimal("0")
        with pytest.raises(ValueError, match="non-negative"):
            validate_non_negative(Decimal("-1"), "amount")

    def test_positive(self):
        assert validate_positive(Decimal("0.1")) == Decimal("0.1")
        with pytest.raises(ValueError, match="positive"):
            validate_positive(Decimal("0"))

    def test_is_within(self):
        assert is_within(Decimal("1"), Decimal("1") + QUANTUM)
        assert not is_within(Decimal("1"), Decimal("1.01"))
