"""
RSA Encryption

Encrypts text of any length into a list of RSA blocks:

    text -> UTF-8 -> chunks -> EME-PKCS1-v1_5 blocks
         -> internal digits -> block^E mod N -> encoded string

The reduction context (Montgomery by default) is built once per key and
shared by every block. Blocks are independent, so with workers > 1 they are
exponentiated on a thread pool; the output keeps the chunk order.

Decryption is done elsewhere: the receiver decrypts every block in order,
strips the padding, joins the chunks and decodes the result as UTF-8.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from ..config import (
    DEFAULT_STRING_BASE, DEFAULT_WORKERS, METHODS,
    METHOD_MONTGOMERY, METHOD_BARRETT, METHOD_CLASSIC,
)
from ..errors import ArithmeticPreconditionError, MalformedInputError
from ..core_crypto.bigint import compare
from ..core_crypto.radix import bytes_to_digits, to_string
from ..core_crypto import montgomery, modexp
from ..core_crypto.pkcs1 import RandomBytes, check_keysize, pkcs1v15_encoded_chunks
from .keys import PublicKey


logger = logging.getLogger(__name__)


class RSAEncryptor:
    """
    Reusable RSA encryptor for one public key.

    Example:
        >>> key = PublicKey.from_strings(modulus_b64, "AQAB", 1024)
        >>> blocks = RSAEncryptor(key).encrypt("Hello, server!")
    """

    def __init__(
        self,
        key: PublicKey,
        random_bytes: Optional[RandomBytes] = None,
        workers: int = DEFAULT_WORKERS,
        method: str = METHOD_MONTGOMERY
    ):
        """
        Prepare the reduction context for the key.

        Args:
            key: Public key parameters
            random_bytes: Padding randomness source (secrets.token_bytes
                          by default)
            workers: Number of threads used to exponentiate blocks
            method: "montgomery", "barrett" or "classic"

        Raises:
            KeyTooSmallError: If the key cannot hold a padded block
            ArithmeticPreconditionError: If the modulus is unusable
            MalformedInputError: On an unknown method or bad worker count
        """
        check_keysize(key.keysize)
        if method not in METHODS:
            raise MalformedInputError(f"Unknown method {method!r}, use one of {', '.join(METHODS)}")
        if workers < 1:
            raise MalformedInputError("Worker count must be at least 1")

        self._key = key
        self._random_bytes = random_bytes
        self._workers = workers
        self._method = method

        if method == METHOD_MONTGOMERY:
            self._context = montgomery.prepare(key.modulus)
        elif method == METHOD_BARRETT:
            self._context = modexp.barrett_prepare(key.modulus)
        else:
            self._context = None

    @property
    def key(self) -> PublicKey:
        return self._key

    @property
    def method(self) -> str:
        return self._method

    def encrypt_block(self, block: bytes) -> List[int]:
        """
        Exponentiate one padded block.

        Returns:
            block^E mod N as internal digits
        """
        m = bytes_to_digits(block)
        if self._method == METHOD_MONTGOMERY:
            return montgomery.modular_exponentiate(m, self._key.exponent, self._context)
        if self._method == METHOD_BARRETT:
            return modexp.barrett_modular_exponentiate(m, self._key.exponent, self._context)
        return modexp.classic_modular_exponentiate(m, self._key.exponent, self._key.modulus)

    def _check_blocks(self, blocks: Sequence[bytes]) -> None:
        for block in blocks:
            if compare(bytes_to_digits(block), self._key.modulus) >= 0:
                raise ArithmeticPreconditionError(
                    "Padded block is not smaller than the modulus; key length does not match the modulus"
                )

    def encrypt_bytes(self, data: bytes, output_base: int = DEFAULT_STRING_BASE) -> List[str]:
        """
        Encrypt raw bytes.

        Args:
            data: Bytes to encrypt
            output_base: Base of the returned strings

        Returns:
            One encoded ciphertext string per chunk, in order
        """
        blocks = pkcs1v15_encoded_chunks(data, self._key.keysize, self._random_bytes)
        self._check_blocks(blocks)
        logger.debug(
            f"[RSA] Encrypting {len(data)} bytes in {len(blocks)} block(s) "
            f"with {self._method} reduction"
        )

        if self._workers > 1 and len(blocks) > 1:
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                results = list(pool.map(self.encrypt_block, blocks))
        else:
            results = [self.encrypt_block(block) for block in blocks]

        return [to_string(c, output_base) for c in results]

    def encrypt(self, text: str, output_base: int = DEFAULT_STRING_BASE) -> List[str]:
        """Encrypt text (UTF-8 encoded before chunking)."""
        return self.encrypt_bytes(text.encode('utf-8'), output_base)


def encrypt(
    data: str,
    modulus: str,
    exponent: str,
    bits: int,
    *,
    random_bytes: Optional[RandomBytes] = None,
    workers: int = DEFAULT_WORKERS,
    input_base: int = DEFAULT_STRING_BASE,
    output_base: int = DEFAULT_STRING_BASE,
    method: str = METHOD_MONTGOMERY
) -> List[str]:
    """
    Encrypt text of any length into a list of RSA blocks.

    Args:
        data: Text to encrypt
        modulus: Modulus N encoded in input_base
        exponent: Public exponent E encoded in input_base
        bits: Key length in bits (positive multiple of 8)
        random_bytes: Padding randomness source
        workers: Number of threads used to exponentiate blocks
        input_base: Base of modulus and exponent strings
        output_base: Base of the returned strings
        method: Reduction method

    Returns:
        One encoded ciphertext string per chunk, in chunk order

    Raises:
        MalformedInputError: On a bad digit, base or bit length
        KeyTooSmallError: If bits / 8 < 12
        ArithmeticPreconditionError: If the modulus is unusable
        RandomSourceError: If the randomness source fails
    """
    key = PublicKey.from_strings(modulus, exponent, bits, input_base)
    encryptor = RSAEncryptor(key, random_bytes=random_bytes, workers=workers, method=method)
    return encryptor.encrypt(data, output_base)
