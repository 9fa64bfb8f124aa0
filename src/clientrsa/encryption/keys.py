"""
RSA Public Keys

Public key parameters as the encryptor consumes them: modulus and exponent
as internal digits plus the key length in bits.

Keys arrive either as strings in a positional encoding (64-symbol radix by
default, as a web page would embed them) or as PEM documents, which are
parsed with the cryptography package.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..config import DEFAULT_STRING_BASE
from ..errors import ArithmeticPreconditionError, MalformedInputError
from ..core_crypto.bigint import bit_length, is_zero
from ..core_crypto.radix import from_string, to_string, bytes_to_digits


logger = logging.getLogger(__name__)


def validate_bits(bits: int) -> int:
    """
    Check a key length in bits.

    Returns:
        The key size in bytes (bits // 8)

    Raises:
        MalformedInputError: If bits is not a positive multiple of 8
    """
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise MalformedInputError(f"Key length must be an integer, got {bits!r}")
    if bits <= 0 or bits % 8:
        raise MalformedInputError(f"Key length must be a positive multiple of 8, got {bits}")
    return bits // 8


@dataclass(frozen=True)
class PublicKey:
    """
    RSA public key parameters.

    Attributes:
        modulus: N as internal digits
        exponent: E as internal digits
        bits: Key length in bits (positive multiple of 8)
    """
    modulus: Tuple[int, ...]
    exponent: Tuple[int, ...]
    bits: int

    def __post_init__(self):
        validate_bits(self.bits)
        if is_zero(self.modulus):
            raise ArithmeticPreconditionError("Modulus must be non-zero")
        actual = bit_length(self.modulus)
        if actual != self.bits:
            logger.warning(f"[KEY] Modulus is {actual} bits long but key length is {self.bits} bits")

    @property
    def keysize(self) -> int:
        """Key size in bytes."""
        return self.bits // 8

    @classmethod
    def from_strings(
        cls,
        modulus: str,
        exponent: str,
        bits: int,
        base: int = DEFAULT_STRING_BASE
    ) -> 'PublicKey':
        """
        Parse a key from encoded strings.

        Args:
            modulus: N encoded in base
            exponent: E encoded in base
            bits: Key length in bits
            base: String base (64 by default)
        """
        validate_bits(bits)
        return cls(
            modulus=tuple(from_string(modulus, base)),
            exponent=tuple(from_string(exponent, base)),
            bits=bits,
        )

    @classmethod
    def from_cryptography(cls, public_key: rsa.RSAPublicKey) -> 'PublicKey':
        """Build from a cryptography RSA public key object."""
        numbers = public_key.public_numbers()
        n_bytes = numbers.n.to_bytes((numbers.n.bit_length() + 7) // 8, 'big')
        e_bytes = numbers.e.to_bytes((numbers.e.bit_length() + 7) // 8, 'big')
        bits = (public_key.key_size + 7) // 8 * 8
        return cls(
            modulus=tuple(bytes_to_digits(n_bytes)),
            exponent=tuple(bytes_to_digits(e_bytes)),
            bits=bits,
        )

    def to_strings(self, base: int = DEFAULT_STRING_BASE) -> Tuple[str, str]:
        """Encode as (modulus, exponent) strings."""
        return to_string(self.modulus, base), to_string(self.exponent, base)

    def __repr__(self) -> str:
        return f"PublicKey(bits={self.bits}, exponent={to_string(self.exponent, 16)})"


def load_public_key_pem(data: Union[bytes, str]) -> PublicKey:
    """
    Parse a PEM encoded RSA public key (SubjectPublicKeyInfo or PKCS#1).

    Raises:
        MalformedInputError: If the data is not a PEM RSA public key
    """
    if isinstance(data, str):
        data = data.encode()
    try:
        public_key = serialization.load_pem_public_key(data)
    except (ValueError, TypeError) as e:
        raise MalformedInputError(f"Invalid PEM public key: {e}") from e
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise MalformedInputError("PEM key is not an RSA public key")
    return PublicKey.from_cryptography(public_key)


def load_public_key_file(path: Union[str, Path]) -> PublicKey:
    """Read and parse a PEM public key file."""
    return load_public_key_pem(Path(path).read_bytes())
