"""
Core math modules

Fixed-point Decimal примитивы с единым правилом округления (ROUND_DOWN).
"""

from src.core.math.share_math import (
    # Constants
    QUANTUM,
    SHARE_DECIMALS,
    WORKING_PRECISION,
    ZERO,
    # Exceptions
    ShareMathDomainViolation,
    # Conversion
    quantize_down,
    to_decimal,
    # Arithmetic
    add,
    div_down,
    mul_div_down,
    mul_down,
    sub,
    total,
    # Validation
    is_within,
    validate_non_negative,
    validate_positive,
)

__all__ = [
    # Share Math: Constants
    "QUANTUM",
    "SHARE_DECIMALS",
    "WORKING_PRECISION",
    "ZERO",
    # Share Math: Exceptions
    "ShareMathDomainViolation",
    # Share Math: Conversion
    "quantize_down",
    "to_decimal",
    # Share Math: Arithmetic
    "add",
    "div_down",
    "mul_div_down",
    "mul_down",
    "sub",
    "total",
    # Share Math: Validation
    "is_within",
    "validate_non_negative",
    "validate_positive",
]
