"""
Share Math — Fixed-point Decimal примитивы

Модуль обеспечивает детерминированную арифметику для учёта долга и залога:
- Фиксированная точность: 18 знаков после запятой (SHARE_DECIMALS)
- Округление к нулю (ROUND_DOWN) для каждого умножения и деления
- Деление на ноль никогда не маскируется fallback-значением

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Одно правило округления для mint и burn (нет систематической утечки стоимости)
2. Деление на ноль → ShareMathDomainViolation (громкий отказ)
3. float на входе запрещён (неточное представление)
4. Все операции детерминированы и воспроизводимы
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Final, Iterable, Union

# =============================================================================
# ПАРАМЕТРЫ ТОЧНОСТИ
# =============================================================================

# Количество знаков после запятой для всех балансов, цен и долей
SHARE_DECIMALS: Final[int] = 18

# Квант округления (10^-18)
QUANTUM: Final[Decimal] = Decimal(1).scaleb(-SHARE_DECIMALS)

# Рабочая точность промежуточных вычислений.
# 42 значащие цифры на целую часть + 18 на дробную. Рабочий контекст
# округляет тоже к нулю (ROUND_DOWN). Больший результат: ShareMathDomainViolation.
WORKING_PRECISION: Final[int] = 60

ZERO: Final[Decimal] = Decimal(0)

DecimalLike = Union[Decimal, int, str]


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ShareMathDomainViolation(ArithmeticError):
    """
    Нарушение domain для fixed-point операции.

    Возникает при делении на ноль, при невалидном числе (NaN/Inf) или
    при результате, не помещающемся в WORKING_PRECISION.
    Никогда не заменяется значением по умолчанию.
    """

    pass


# =============================================================================
# КОНВЕРСИЯ
# =============================================================================


def to_decimal(value: DecimalLike) -> Decimal:
    """
    Конверсия входного значения в квантованный Decimal.

    Args:
        value: Decimal, int или строка ("12.5")

    Returns:
        Decimal, усечённый до QUANTUM

    Raises:
        TypeError: Если передан float или bool
        ShareMathDomainViolation: Если значение NaN/Inf или не парсится
    """
    if isinstance(value, (float, bool)):
        raise TypeError(f"Expected Decimal, int or str, got {type(value).__name__}: {value!r}")

    try:
        result = Decimal(value)
    except (InvalidOperation, ValueError) as e:
        raise ShareMathDomainViolation(f"Cannot convert {value!r} to Decimal") from e

    if not result.is_finite():
        raise ShareMathDomainViolation(f"Non-finite decimal value: {value!r}")

    return quantize_down(result)


def quantize_down(value: Decimal) -> Decimal:
    """Усечение до QUANTUM (округление к нулю)."""
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        ctx.rounding = ROUND_DOWN
        return _truncate(value)


def _truncate(value: Decimal) -> Decimal:
    """
    Квантование к QUANTUM внутри рабочего контекста (prec=60, ROUND_DOWN).

    Raises:
        ShareMathDomainViolation: Если результат не помещается в WORKING_PRECISION
    """
    try:
        return value.quantize(QUANTUM, rounding=ROUND_DOWN)
    except InvalidOperation as e:
        raise ShareMathDomainViolation(
            f"Value {value} exceeds working precision of {WORKING_PRECISION} digits"
        ) from e


# =============================================================================
# АРИФМЕТИКА
# =============================================================================


def mul_down(a: Decimal, b: Decimal) -> Decimal:
    """
    Умножение с усечением результата.

    Examples:
        >>> mul_down(Decimal("2"), Decimal("300"))
        Decimal('600.000000000000000000')
    """
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        ctx.rounding = ROUND_DOWN
        return _truncate(a * b)


def div_down(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    Деление с усечением результата.

    В отличие от safe-деления с fallback, деление на ноль здесь является
    нарушением инварианта вызывающего кода и приводит к исключению.

    Args:
        numerator: Числитель
        denominator: Знаменатель (должен быть != 0)

    Returns:
        numerator / denominator, усечённый до QUANTUM

    Raises:
        ShareMathDomainViolation: Если denominator == 0
    """
    if denominator.is_zero():
        raise ShareMathDomainViolation(
            f"Division by zero: {numerator} / {denominator}"
        )

    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        ctx.rounding = ROUND_DOWN
        return _truncate(numerator / denominator)


def mul_div_down(a: Decimal, b: Decimal, denominator: Decimal) -> Decimal:
    """
    a * b / denominator с одним усечением в конце.

    Промежуточное произведение не округляется, что исключает двойную
    потерю точности в формулах пропорциональных долей.

    Raises:
        ShareMathDomainViolation: Если denominator == 0
    """
    if denominator.is_zero():
        raise ShareMathDomainViolation(
            f"Division by zero: {a} * {b} / {denominator}"
        )

    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        ctx.rounding = ROUND_DOWN
        return _truncate(a * b / denominator)


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_non_negative(value: Decimal, name: str = "value") -> Decimal:
    """
    Проверка value >= 0.

    Raises:
        ValueError: Если значение отрицательное
    """
    if value < ZERO:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: Decimal, name: str = "value") -> Decimal:
    """
    Проверка value > 0.

    Raises:
        ValueError: Если значение <= 0
    """
    if value <= ZERO:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def is_within(a: Decimal, b: Decimal, tolerance: Decimal = QUANTUM * 1000) -> bool:
    """Сравнение двух Decimal с абсолютной толерантностью (для rounding dust)."""
    return abs(sub(a, b)) <= tolerance


# =============================================================================
# СЛОЖЕНИЕ (рабочая точность)
# =============================================================================
# Контекст по умолчанию (prec=28) округлил бы балансы с 18 знаками после
# запятой уже начиная с 10^10, поэтому сложение тоже идёт в WORKING_PRECISION.


def add(a: Decimal, b: Decimal) -> Decimal:
    """a + b без потери точности (результат квантован)."""
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        ctx.rounding = ROUND_DOWN
        return _truncate(a + b)


def sub(a: Decimal, b: Decimal) -> Decimal:
    """a - b без потери точности (результат квантован)."""
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        ctx.rounding = ROUND_DOWN
        return _truncate(a - b)


def total(values: Iterable[Decimal]) -> Decimal:
    """Σ values в рабочей точности."""
    result = ZERO
    for value in values:
        result = add(result, value)
    return result
