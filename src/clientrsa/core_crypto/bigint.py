"""
Big-Integer Engine

Arbitrary-precision non-negative integers represented as lists of digits in
the internal base (BASE = 2^DIGIT_BITS), least significant digit first.

Operations:
- Normalization, comparison
- Addition, subtraction (no negative results)
- Schoolbook multiplication and dedicated squaring
- Digit shifts (multiply/divide by powers of BASE) and bit shifts
- Multi-precision long division

Every function returns a new, normalized list: no leading zero digits,
and zero is represented as [0]. Inputs are never modified.

The engine knows nothing about modular arithmetic; see montgomery.py and
modexp.py for that. Algorithms follow the Handbook of Applied Cryptography,
chapter 14 (14.7, 14.9, 14.12, 14.16, 14.20).
"""

from typing import List, Sequence, Tuple

from ..config import DIGIT_BITS, BASE, DIGIT_MASK
from ..errors import ArithmeticPreconditionError


Digits = List[int]


def trim(x: Sequence[int]) -> Digits:
    """Return a copy of x without leading zero digits ([0] for zero)."""
    result = list(x)
    while len(result) > 1 and result[-1] == 0:
        result.pop()
    if not result:
        result.append(0)
    return result


def is_zero(x: Sequence[int]) -> bool:
    """True if x represents zero."""
    return all(d == 0 for d in x)


def digit(x: Sequence[int], index: int) -> int:
    """Digit at index, reading positions outside x as zero."""
    if 0 <= index < len(x):
        return x[index]
    return 0


def compare(x: Sequence[int], y: Sequence[int]) -> int:
    """
    Three-way comparison of two large numbers.

    Returns:
        1 if x > y, 0 if x == y, -1 if x < y
    """
    for i in range(max(len(x), len(y)) - 1, -1, -1):
        a, b = digit(x, i), digit(y, i)
        if a != b:
            return 1 if a > b else -1
    return 0


def add(x: Sequence[int], y: Sequence[int]) -> Digits:
    """Return x + y."""
    result = []
    carry = 0
    for i in range(max(len(x), len(y))):
        s = digit(x, i) + digit(y, i) + carry
        result.append(s & DIGIT_MASK)
        carry = s >> DIGIT_BITS
    if carry:
        result.append(carry)
    return trim(result)


def subtract(x: Sequence[int], y: Sequence[int]) -> Digits:
    """
    Return x - y.

    Raises:
        ArithmeticPreconditionError: If y > x
    """
    if compare(y, x) > 0:
        raise ArithmeticPreconditionError("Cannot subtract a larger value")

    result = []
    borrow = 0
    for i in range(max(len(x), len(y))):
        d = digit(x, i) - digit(y, i) - borrow
        if d < 0:
            d += BASE
            borrow = 1
        else:
            borrow = 0
        result.append(d)
    return trim(result)


def multiply(x: Sequence[int], y: Sequence[int]) -> Digits:
    """Return x * y (schoolbook multiplication)."""
    x = trim(x)
    y = trim(y)
    if is_zero(x) or is_zero(y):
        return [0]

    n = len(x)
    w = [0] * (n + len(y))
    for i, yi in enumerate(y):
        if yi == 0:
            continue
        carry = 0
        for j, xj in enumerate(x):
            uv = w[i + j] + xj * yi + carry
            w[i + j] = uv & DIGIT_MASK
            carry = uv >> DIGIT_BITS
        w[i + n] = carry
    return trim(w)


def square(x: Sequence[int]) -> Digits:
    """
    Return x * x.

    Cross products x[i]*x[j] (i != j) are computed once and doubled, which
    saves close to half of the digit multiplications of multiply(x, x).
    """
    x = trim(x)
    t = len(x)
    w = [0] * (2 * t)
    for i in range(t):
        xi = x[i]
        uv = w[2 * i] + xi * xi
        w[2 * i] = uv & DIGIT_MASK
        carry = uv >> DIGIT_BITS
        for j in range(i + 1, t):
            uv = w[i + j] + 2 * x[j] * xi + carry
            w[i + j] = uv & DIGIT_MASK
            carry = uv >> DIGIT_BITS
        # The doubled cross products can push the carry past one digit
        k = i + t
        while carry:
            uv = w[k] + carry
            w[k] = uv & DIGIT_MASK
            carry = uv >> DIGIT_BITS
            k += 1
    return trim(w)


def shift_digits_left(x: Sequence[int], n: int) -> Digits:
    """Return x * BASE^n."""
    x = trim(x)
    if is_zero(x):
        return [0]
    return [0] * n + x


def shift_digits_right(x: Sequence[int], n: int) -> Digits:
    """Return x // BASE^n."""
    return trim(list(x)[n:])


def low_digits(x: Sequence[int], n: int) -> Digits:
    """Return x mod BASE^n."""
    return trim(list(x)[:n])


def shift_left(x: Sequence[int], bits: int) -> Digits:
    """
    Shift the bits of x to the left (multiply by 2^bits).

    Args:
        x: Large number
        bits: Number of bit positions (non-negative)

    Returns:
        x * 2^bits
    """
    if bits < 0:
        raise ArithmeticPreconditionError("Shift amount must be non-negative")
    whole, part = divmod(bits, DIGIT_BITS)
    x = trim(x)
    if part == 0:
        return shift_digits_left(x, whole)

    result = [0] * whole
    carry = 0
    for d in x:
        v = (d << part) | carry
        result.append(v & DIGIT_MASK)
        carry = v >> DIGIT_BITS
    if carry:
        result.append(carry)
    return trim(result)


def shift_right(x: Sequence[int], bits: int) -> Digits:
    """
    Shift the bits of x to the right (floor division by 2^bits).

    Args:
        x: Large number
        bits: Number of bit positions (non-negative)

    Returns:
        x // 2^bits
    """
    if bits < 0:
        raise ArithmeticPreconditionError("Shift amount must be non-negative")
    whole, part = divmod(bits, DIGIT_BITS)
    source = trim(x)[whole:]
    if not source:
        return [0]
    if part == 0:
        return trim(source)

    result = []
    for i, d in enumerate(source):
        high = digit(source, i + 1)
        result.append((d >> part) | ((high << (DIGIT_BITS - part)) & DIGIT_MASK))
    return trim(result)


def bit_length(x: Sequence[int]) -> int:
    """Number of bits needed to represent x (0 for zero)."""
    x = trim(x)
    if is_zero(x):
        return 0
    return (len(x) - 1) * DIGIT_BITS + x[-1].bit_length()


def test_bit(x: Sequence[int], position: int) -> bool:
    """True if the bit at position (0 = least significant) is set."""
    word, offset = divmod(position, DIGIT_BITS)
    return bool((digit(x, word) >> offset) & 1)


def _divide_by_digit(x: Digits, divisor: int) -> Tuple[Digits, Digits]:
    """Short division of x by a single non-zero digit."""
    quotient = [0] * len(x)
    remainder = 0
    for i in range(len(x) - 1, -1, -1):
        quotient[i], remainder = divmod((remainder << DIGIT_BITS) | x[i], divisor)
    return trim(quotient), [remainder]


def divide(x: Sequence[int], y: Sequence[int]) -> Tuple[Digits, Digits]:
    """
    Multi-precision division (HAC 14.20).

    Args:
        x: Dividend
        y: Divisor

    Returns:
        Tuple (quotient, remainder) with x = quotient * y + remainder
        and 0 <= remainder < y

    Raises:
        ArithmeticPreconditionError: On division by zero
    """
    x = trim(x)
    y = trim(y)
    if is_zero(y):
        raise ArithmeticPreconditionError("Division by zero")
    if compare(x, y) < 0:
        return [0], x
    if len(y) == 1:
        return _divide_by_digit(x, y[0])

    # Normalize: the top digit of y must be at least BASE / 2
    shift = DIGIT_BITS - y[-1].bit_length()
    x = shift_left(x, shift)
    y = shift_left(y, shift)

    n = len(x) - 1
    t = len(y) - 1
    quotient = [0] * (n - t + 1)

    y_shifted = shift_digits_left(y, n - t)
    while compare(x, y_shifted) >= 0:
        quotient[n - t] += 1
        x = subtract(x, y_shifted)

    y_top = [y[t - 1], y[t]]
    for i in range(n, t, -1):
        xi = digit(x, i)
        if xi == y[t]:
            q = DIGIT_MASK
        else:
            q = ((xi << DIGIT_BITS) | digit(x, i - 1)) // y[t]

        # Correct the estimate against the top three digits of x
        x_top = [digit(x, i - 2), digit(x, i - 1), xi]
        while compare(multiply([q], y_top), x_top) > 0:
            q -= 1

        y_shifted = shift_digits_left(y, i - t - 1)
        z = multiply([q], y_shifted)
        if compare(x, z) < 0:
            q -= 1
            z = subtract(z, y_shifted)
        x = subtract(x, z)
        quotient[i - t - 1] = q

    return trim(quotient), shift_right(x, shift)


def mod(x: Sequence[int], m: Sequence[int]) -> Digits:
    """Return x mod m."""
    return divide(x, m)[1]
