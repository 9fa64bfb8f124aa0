"""
Test helpers: conversions between internal digits and Python ints, and a
reference RSA decryption used only to verify ciphertext.
"""

import base64

from clientrsa.config import DIGIT_BITS, DIGIT_MASK, MIN_PADDING_LENGTH


def to_int(digits) -> int:
    """Value of an internal digit list."""
    return sum(d << (DIGIT_BITS * i) for i, d in enumerate(digits))


def from_int(value: int) -> list:
    """Internal digit list of a non-negative int."""
    digits = []
    while True:
        digits.append(value & DIGIT_MASK)
        value >>= DIGIT_BITS
        if not value:
            return digits


def block_to_bytes(block: str, keysize: int) -> bytes:
    """Decode a 64-symbol ciphertext block into keysize bytes."""
    return base64.b64decode(block).rjust(keysize, b"\x00")


def reference_decrypt(blocks, n: int, d: int, keysize: int) -> bytes:
    """Decrypt blocks with pow() and strip EME-PKCS1-v1_5 padding."""
    message = b""
    for block in blocks:
        c = int.from_bytes(block_to_bytes(block, keysize), 'big')
        em = pow(c, d, n).to_bytes(keysize, 'big')
        assert em[:2] == b"\x00\x02"
        separator = em.index(0, 2)
        assert separator - 2 >= MIN_PADDING_LENGTH
        message += em[separator + 1:]
    return message
