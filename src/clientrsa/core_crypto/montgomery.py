"""
Montgomery Modular Exponentiation

Computes base^exponent mod N without trial division in the inner loop.

For an odd modulus N of k internal digits we take R = BASE^k (so R > N and
gcd(R, N) = 1) and work with Montgomery forms x' = x*R mod N. The product
of two Montgomery forms is brought back into Montgomery form by REDC
(HAC 14.32), which only needs multiplications by N' = -N^-1 mod BASE and
digit shifts.

Protocol:
1. prepare(N)               -> MontgomeryContext (once per modulus)
2. to_montgomery(x, ctx)    -> x*R mod N
3. montgomery_multiply      -> a'*b'*R^-1 mod N
4. modular_exponentiate     -> left-to-right square-and-multiply
5. from_montgomery(x', ctx) -> x

A context is immutable and may be shared between threads.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..config import DIGIT_BITS, BASE, DIGIT_MASK
from ..errors import ArithmeticPreconditionError
from .bigint import (
    trim, is_zero, compare, subtract, multiply, square, mod,
    shift_digits_left, bit_length, test_bit,
)


logger = logging.getLogger(__name__)


def extended_gcd(a: int, b: int) -> Tuple[int, int, int]:
    """
    Extended Euclidean Algorithm on single digits.

    Finds integers x, y such that: a*x + b*y = gcd(a, b)

    Both arguments are at most BASE (a digit and the digit base), which
    keeps the recursion shallow. Multi-digit operands are not supported.

    Returns:
        Tuple (gcd, x, y)
    """
    if b == 0:
        return a, 1, 0

    g, x1, y1 = extended_gcd(b, a % b)
    return g, y1, x1 - (a // b) * y1


def digit_inverse(a: int, m: int = BASE) -> int:
    """
    Multiplicative inverse of a single digit modulo m.

    Raises:
        ArithmeticPreconditionError: If gcd(a, m) != 1
    """
    g, x, _ = extended_gcd(a % m, m)
    if g != 1:
        raise ArithmeticPreconditionError(f"{a} has no inverse modulo {m}")
    return x % m


@dataclass(frozen=True)
class MontgomeryContext:
    """
    Precomputed values for Montgomery arithmetic modulo N.

    Attributes:
        modulus: N as internal digits (odd, normalized)
        n_prime: -N^-1 mod BASE
        r_mod_n: R mod N, the Montgomery form of 1
        r2_mod_n: R^2 mod N, used to enter Montgomery form
    """
    modulus: Tuple[int, ...]
    n_prime: int
    r_mod_n: Tuple[int, ...]
    r2_mod_n: Tuple[int, ...]

    @property
    def digit_count(self) -> int:
        """k, with R = BASE^k."""
        return len(self.modulus)

    @property
    def bit_length(self) -> int:
        return bit_length(self.modulus)


def prepare(modulus: Sequence[int]) -> MontgomeryContext:
    """
    Build the Montgomery context for a modulus.

    Args:
        modulus: N as internal digits

    Returns:
        MontgomeryContext for N

    Raises:
        ArithmeticPreconditionError: If N is zero or even
    """
    n = trim(modulus)
    if is_zero(n):
        raise ArithmeticPreconditionError("Modulus must be non-zero")
    if n[0] % 2 == 0:
        raise ArithmeticPreconditionError("Modulus must be odd for Montgomery reduction")

    k = len(n)
    n_prime = (-digit_inverse(n[0])) % BASE
    r_mod_n = mod(shift_digits_left([1], k), n)
    r2_mod_n = mod(shift_digits_left([1], 2 * k), n)

    logger.debug(f"[MONTGOMERY] Prepared context for {bit_length(n)}-bit modulus (k={k})")
    return MontgomeryContext(
        modulus=tuple(n),
        n_prime=n_prime,
        r_mod_n=tuple(r_mod_n),
        r2_mod_n=tuple(r2_mod_n),
    )


def montgomery_reduce(t: Sequence[int], ctx: MontgomeryContext) -> List[int]:
    """
    REDC: compute T * R^-1 mod N.

    Args:
        t: T as internal digits, T < N*R
        ctx: Montgomery context for N

    Returns:
        T * R^-1 mod N, in [0, N)

    Raises:
        ArithmeticPreconditionError: If T has more than 2k digits
    """
    n = ctx.modulus
    k = len(n)
    t = trim(t)
    if len(t) > 2 * k:
        raise ArithmeticPreconditionError("Montgomery reduction requires T < N*R")

    a = t + [0] * (2 * k + 1 - len(t))
    for i in range(k):
        u = (a[i] * ctx.n_prime) & DIGIT_MASK
        # A <- A + u*N*BASE^i, written out to avoid temporary lists
        carry = 0
        for j in range(k):
            uv = a[i + j] + n[j] * u + carry
            a[i + j] = uv & DIGIT_MASK
            carry = uv >> DIGIT_BITS
        j = i + k
        while carry:
            uv = a[j] + carry
            a[j] = uv & DIGIT_MASK
            carry = uv >> DIGIT_BITS
            j += 1

    result = trim(a[k:])
    if compare(result, n) >= 0:
        result = subtract(result, n)
    return result


def montgomery_multiply(a: Sequence[int], b: Sequence[int], ctx: MontgomeryContext) -> List[int]:
    """Montgomery product a*b*R^-1 mod N of two values below N."""
    return montgomery_reduce(multiply(a, b), ctx)


def montgomery_square(a: Sequence[int], ctx: MontgomeryContext) -> List[int]:
    """Montgomery product a*a*R^-1 mod N."""
    return montgomery_reduce(square(a), ctx)


def to_montgomery(x: Sequence[int], ctx: MontgomeryContext) -> List[int]:
    """Convert x into Montgomery form x*R mod N."""
    x = trim(x)
    if compare(x, ctx.modulus) >= 0:
        x = mod(x, ctx.modulus)
    return montgomery_multiply(x, ctx.r2_mod_n, ctx)


def from_montgomery(x: Sequence[int], ctx: MontgomeryContext) -> List[int]:
    """Convert x out of Montgomery form (x*R^-1 mod N)."""
    return montgomery_reduce(x, ctx)


def modular_exponentiate(
    base: Sequence[int],
    exponent: Sequence[int],
    ctx: MontgomeryContext
) -> List[int]:
    """
    Compute base^exponent mod N with Montgomery multiplication.

    Scans the exponent from its most significant bit down: the accumulator
    is squared for every bit and multiplied by the base for every set bit.

    Args:
        base: Base as internal digits (any size)
        exponent: Exponent as internal digits
        ctx: Montgomery context for N

    Returns:
        base^exponent mod N, in [0, N)
    """
    g = to_montgomery(base, ctx)
    acc = list(ctx.r_mod_n)
    for i in range(bit_length(exponent) - 1, -1, -1):
        acc = montgomery_square(acc, ctx)
        if test_bit(exponent, i):
            acc = montgomery_multiply(acc, g, ctx)
    return from_montgomery(acc, ctx)
