"""
Curve AMM - Checked Integer Arithmetic.

============================================================
PURPOSE
============================================================
Bounded unsigned integer helpers used by every component.

Python integers never wrap, so each helper enforces the
width of the value it models and raises instead:
- ArithmeticOverflow: result above the width's maximum
- ArithmeticUnderflow: result below zero
- DivisionByZero: zero divisor

All division truncates toward zero (floor for unsigned).

============================================================
"""

from .errors import ArithmeticOverflow, ArithmeticUnderflow, DivisionByZero


# ============================================================
# WIDTHS
# ============================================================

U32_MAX = 2 ** 32 - 1
U64_MAX = 2 ** 64 - 1
U128_MAX = 2 ** 128 - 1
U256_MAX = 2 ** 256 - 1

PCT_SCALE = 1_000_000
"""Fee fractions are expressed in parts-per-million."""


def _check(value: int, limit: int, operation: str, left: int, right: int) -> int:
    if value < 0:
        raise ArithmeticUnderflow(operation, left, right)
    if value > limit:
        raise ArithmeticOverflow(operation, left, right)
    return value


# ============================================================
# ADDITION / SUBTRACTION
# ============================================================

def add_u32(a: int, b: int) -> int:
    return _check(a + b, U32_MAX, "add_u32", a, b)


def add_u64(a: int, b: int) -> int:
    return _check(a + b, U64_MAX, "add_u64", a, b)


def add_u128(a: int, b: int) -> int:
    return _check(a + b, U128_MAX, "add_u128", a, b)


def sub_u128(a: int, b: int) -> int:
    return _check(a - b, U128_MAX, "sub_u128", a, b)


# ============================================================
# MULTIPLICATION / DIVISION
# ============================================================

def mul_u256(a: int, b: int) -> int:
    """Multiply two 128-bit values into a 256-bit product."""
    return _check(a * b, U256_MAX, "mul_u256", a, b)


def div_u256(a: int, b: int) -> int:
    """Divide a 256-bit value by a 128-bit value, truncating."""
    if b == 0:
        raise DivisionByZero("div_u256", a, b)
    return _check(a // b, U256_MAX, "div_u256", a, b)


def to_u128(value: int) -> int:
    """Narrow a 256-bit intermediate back to 128 bits."""
    return _check(value, U128_MAX, "to_u128", value, 0)


def mul_ratio_u128(value: int, numerator: int, denominator: int) -> int:
    """
    Compute value * numerator / denominator.
    
    The product is carried at 256 bits so only the final
    quotient has to fit in 128 bits.
    """
    return to_u128(div_u256(mul_u256(value, numerator), denominator))


def mul_pct_u128(value: int, pct: int) -> int:
    """Apply a parts-per-million fraction, flooring the result."""
    return mul_ratio_u128(value, pct, PCT_SCALE)


def pow10(exponent: int) -> int:
    """10 ** exponent as a 128-bit value."""
    return _check(10 ** exponent, U128_MAX, "pow10", 10, exponent)
