"""
Radix Conversion

Converts digit sequences between bases and between the engine's internal
representation and the outside world.

Digit order:
- Digit sequences (input and output of convert_base, engine operands) are
  least significant digit first.
- Byte strings and printed strings are most significant first.

The reversal between the two happens in exactly two places:
bytes_to_digits/digits_to_bytes for bytes, and from_string/to_string for
text. Nothing else in the package reverses digit order.

Base 64 strings use the Base64 alphabet and Base64 byte alignment:
to_string(x, 64) is the Base64 text of the minimal big-endian byte string
of x, so a server can decode blocks with any standard Base64 decoder.
"""

from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence

from ..config import (
    BASE, DIGIT_TO_STR, DIGIT_TO_BASE64, BASE64_PAD,
)
from ..errors import MalformedInputError
from .bigint import trim, is_zero, bit_length, shift_left, shift_right


# Reverse lookup tables: symbol -> digit value
STR_TO_DIGIT: Mapping[str, int] = MappingProxyType({
    **{c: i for i, c in enumerate(DIGIT_TO_STR)},
    **{c.upper(): i for i, c in enumerate(DIGIT_TO_STR)},
})
BASE64_TO_DIGIT: Mapping[str, int] = MappingProxyType(
    {c: i for i, c in enumerate(DIGIT_TO_BASE64)}
)

MAX_STRING_BASE = len(DIGIT_TO_STR)


def _power_of_two_bits(base: int) -> Optional[int]:
    """Exponent k if base == 2^k, else None."""
    if base & (base - 1) == 0:
        return base.bit_length() - 1
    return None


def _regroup_bits(digits: Sequence[int], from_bits: int, to_bits: int) -> List[int]:
    """Convert between two power-of-two bases by regrouping bits."""
    result = []
    mask = (1 << to_bits) - 1
    acc = 0
    acc_bits = 0
    for d in digits:
        acc |= d << acc_bits
        acc_bits += from_bits
        while acc_bits >= to_bits:
            result.append(acc & mask)
            acc >>= to_bits
            acc_bits -= to_bits
    if acc:
        result.append(acc)
    return result


def _convert_by_division(digits: Sequence[int], from_base: int, to_base: int) -> List[int]:
    """Convert by repeated long division of the whole number by to_base."""
    result = []
    number = list(reversed(digits))  # most significant first for long division
    while number:
        quotient = []
        remainder = 0
        for d in number:
            q, remainder = divmod(remainder * from_base + d, to_base)
            if q or quotient:
                quotient.append(q)
        result.append(remainder)
        number = quotient
    return result


def convert_base(digits: Sequence[int], from_base: int, to_base: int) -> List[int]:
    """
    Convert a digit sequence from one base to another.

    Example:
        >>> convert_base([4, 5, 2], 10, 16)   # 254 -> 0xFE
        [14, 15]

    Args:
        digits: Digits in from_base, least significant first
        from_base: Base of the input digits (>= 2)
        to_base: Base of the output digits (>= 2)

    Returns:
        Normalized digits in to_base, least significant first

    Raises:
        MalformedInputError: If a base is below 2 or a digit is out of range
    """
    if from_base < 2 or to_base < 2:
        raise MalformedInputError(f"Bases must be at least 2, got {from_base} and {to_base}")
    for d in digits:
        if not 0 <= d < from_base:
            raise MalformedInputError(f"Digit {d} out of range for base {from_base}")

    from_bits = _power_of_two_bits(from_base)
    to_bits = _power_of_two_bits(to_base)
    if from_bits is not None and to_bits is not None:
        return trim(_regroup_bits(digits, from_bits, to_bits))
    return trim(_convert_by_division(digits, from_base, to_base))


def bytes_to_digits(data: bytes) -> List[int]:
    """
    Interpret bytes as a big-endian integer in the internal base.

    Args:
        data: Byte string, most significant byte first

    Returns:
        Internal digits, least significant first
    """
    return convert_base(list(reversed(data)), 256, BASE)


def digits_to_bytes(digits: Sequence[int], length: Optional[int] = None) -> bytes:
    """
    Encode internal digits as a big-endian byte string.

    Args:
        digits: Internal digits, least significant first
        length: Exact output length (zero padded on the left); minimal
                length (at least one byte) when omitted

    Returns:
        Byte string, most significant byte first

    Raises:
        MalformedInputError: If the value does not fit in length bytes
    """
    octets = convert_base(digits, BASE, 256)
    if is_zero(octets):
        octets = []
    if length is None:
        length = max(1, len(octets))
    if len(octets) > length:
        raise MalformedInputError(f"Value needs {len(octets)} bytes, only {length} allowed")
    return bytes(reversed(octets + [0] * (length - len(octets))))


def _check_string_base(base: int) -> None:
    if base != 64 and not 2 <= base <= MAX_STRING_BASE:
        raise MalformedInputError(f"Unsupported string base {base} (use 2-{MAX_STRING_BASE} or 64)")


def from_string(text: str, base: int = 16) -> List[int]:
    """
    Create a large number from its string representation.

    Bases 2-36 use the digits 0-9 and letters a-z (case-insensitive),
    without prefixes such as 0x. Base 64 uses the Base64 alphabet; padding
    characters are optional.

    Example:
        >>> from_string("AQAB", 64) == from_string("10001", 16)
        True

    Args:
        text: String representation of the number
        base: Base of the string (2-36 or 64)

    Returns:
        Internal digits, least significant first

    Raises:
        MalformedInputError: On an empty string or a symbol invalid for base
    """
    _check_string_base(base)
    if base == 64:
        symbols = "".join(text.split()).rstrip(BASE64_PAD)
        table = BASE64_TO_DIGIT
    else:
        symbols = text.strip()
        table = STR_TO_DIGIT
    if not symbols:
        raise MalformedInputError("Cannot decode an empty number string")

    values = []
    for symbol in reversed(symbols):
        value = table.get(symbol)
        if value is None or value >= base:
            raise MalformedInputError(f"Invalid symbol {symbol!r} for base {base}")
        values.append(value)

    result = convert_base(values, base, BASE)
    # Base64 text carries 2 alignment bits per missing symbol of a quad
    if base == 64 and len(values) % 4:
        result = shift_right(result, (4 - len(values) % 4) * 2)
    return result


def to_string(digits: Sequence[int], base: int = 16, pad: int = 1) -> str:
    """
    Create the string representation of a large number.

    Args:
        digits: Internal digits, least significant first
        base: Base of the output (2-36 or 64)
        pad: Minimum length, filled with leading zeros (ignored for base 64)

    Returns:
        String representation, most significant symbol first
    """
    _check_string_base(base)
    if base == 64:
        return _to_base64_string(digits)

    values = convert_base(digits, BASE, base)
    text = "".join(DIGIT_TO_STR[v] for v in reversed(values))
    return text.rjust(pad, DIGIT_TO_STR[0])


def _to_base64_string(digits: Sequence[int]) -> str:
    if is_zero(digits):
        return DIGIT_TO_BASE64[0] * 2 + BASE64_PAD * 2

    remainder_bits = (bit_length(digits) + 23) % 24
    if remainder_bits < 8:
        padding = BASE64_PAD * 2
    elif remainder_bits < 16:
        padding = BASE64_PAD
    else:
        padding = ""

    values = convert_base(shift_left(digits, len(padding) * 2), BASE, 64)
    text = "".join(DIGIT_TO_BASE64[v] for v in reversed(values)) + padding
    while len(text) % 4:
        text = DIGIT_TO_BASE64[0] + text
    return text
