"""
Alternative Modular Exponentiation

Division-based reductions kept next to the Montgomery unit:
- Classic: reduce every intermediate product with long division
- Barrett: reduce with a precomputed reciprocal mu = BASE^(2k) // N

Both accept even moduli, which Montgomery reduction cannot handle, and both
serve as independent cross-checks for montgomery.modular_exponentiate.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..errors import ArithmeticPreconditionError
from .bigint import (
    trim, is_zero, compare, add, subtract, multiply, square, mod, divide,
    shift_digits_left, shift_digits_right, low_digits, bit_length, test_bit,
)


def _check_modulus(modulus: Sequence[int]) -> List[int]:
    m = trim(modulus)
    if is_zero(m):
        raise ArithmeticPreconditionError("Modulus must be non-zero")
    return m


def classic_modular_exponentiate(
    base: Sequence[int],
    exponent: Sequence[int],
    modulus: Sequence[int]
) -> List[int]:
    """
    Compute base^exponent mod modulus by square-and-multiply with division.

    Raises:
        ArithmeticPreconditionError: If modulus is zero
    """
    m = _check_modulus(modulus)
    g = mod(base, m)
    acc = mod([1], m)
    for i in range(bit_length(exponent) - 1, -1, -1):
        acc = mod(square(acc), m)
        if test_bit(exponent, i):
            acc = mod(multiply(acc, g), m)
    return acc


@dataclass(frozen=True)
class BarrettContext:
    """Modulus and its Barrett reciprocal mu = BASE^(2k) // modulus."""
    modulus: Tuple[int, ...]
    mu: Tuple[int, ...]


def barrett_prepare(modulus: Sequence[int]) -> BarrettContext:
    """
    Precompute mu for Barrett reduction.

    Raises:
        ArithmeticPreconditionError: If modulus is zero
    """
    m = _check_modulus(modulus)
    mu, _ = divide(shift_digits_left([1], 2 * len(m)), m)
    return BarrettContext(modulus=tuple(m), mu=tuple(mu))


def barrett_reduce(x: Sequence[int], ctx: BarrettContext) -> List[int]:
    """
    Compute x mod m with Barrett reduction (HAC 14.42).

    Args:
        x: Value below BASE^(2k)
        ctx: Barrett context for m

    Returns:
        x mod m
    """
    m = ctx.modulus
    k = len(m)
    x = trim(x)
    if len(x) > 2 * k:
        raise ArithmeticPreconditionError("Barrett reduction requires x < BASE^(2k)")

    q1 = shift_digits_right(x, k - 1)
    q2 = multiply(q1, ctx.mu)
    q3 = shift_digits_right(q2, k + 1)

    r1 = low_digits(x, k + 1)
    r2 = low_digits(multiply(q3, m), k + 1)
    if compare(r1, r2) < 0:
        r1 = add(r1, shift_digits_left([1], k + 1))
    r = subtract(r1, r2)

    while compare(r, m) >= 0:
        r = subtract(r, m)
    return r


def barrett_modular_exponentiate(
    base: Sequence[int],
    exponent: Sequence[int],
    ctx: BarrettContext
) -> List[int]:
    """Compute base^exponent mod m using Barrett reduction."""
    m = ctx.modulus
    g = trim(base)
    if compare(g, m) >= 0:
        g = mod(g, m)
    acc = mod([1], m)
    for i in range(bit_length(exponent) - 1, -1, -1):
        acc = barrett_reduce(square(acc), ctx)
        if test_bit(exponent, i):
            acc = barrett_reduce(multiply(acc, g), ctx)
    return acc
