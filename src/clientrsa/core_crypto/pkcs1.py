"""
EME-PKCS1-v1_5 Encoding

Splits a message into chunks that fit one RSA block and encodes each chunk
as defined in RFC 8017, section 7.2.1:

    EM = 0x00 || 0x02 || PS || 0x00 || M

- M: message chunk, at most keysize - 11 bytes
- PS: keysize - len(M) - 3 pseudo-random bytes in [1, 254], at least 8

Chunks are cut at byte offsets, not character boundaries: a multi-byte
UTF-8 character may be split over two blocks. The chunks are valid UTF-8
again only once the decrypted blocks are joined in order.
"""

import secrets
from typing import Callable, List, Optional

from ..config import (
    PKCS1_OVERHEAD, MIN_KEYSIZE, PADDING_BYTE_MIN, PADDING_BYTE_MAX,
    RANDOM_SOURCE_ATTEMPTS,
)
from ..errors import KeyTooSmallError, MalformedInputError, RandomSourceError


RandomBytes = Callable[[int], bytes]

BLOCK_MARKER = b"\x00\x02"
DELIMITER = b"\x00"


def check_keysize(keysize: int) -> None:
    """
    Raises:
        KeyTooSmallError: If keysize leaves no room for a message byte
    """
    if keysize < MIN_KEYSIZE:
        raise KeyTooSmallError(
            f"Key size of {keysize} bytes is too small (minimum {MIN_KEYSIZE})"
        )


def max_chunk_size(keysize: int) -> int:
    """Largest message chunk that fits one block of keysize bytes."""
    check_keysize(keysize)
    return keysize - PKCS1_OVERHEAD


def split_chunks(data: bytes, chunk_size: int) -> List[bytes]:
    """
    Split data into contiguous chunks of at most chunk_size bytes.

    Returns:
        ceil(len(data) / chunk_size) chunks; empty data gives no chunks
    """
    if chunk_size < 1:
        raise MalformedInputError("Chunk size must be positive")
    return [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]


def nonzero_random_bytes(count: int, random_bytes: Optional[RandomBytes] = None) -> bytes:
    """
    Draw count random bytes in [1, 254].

    Bytes outside the range are discarded and replaced by new draws.

    Args:
        count: Number of bytes needed
        random_bytes: Source of uniform random bytes (secrets.token_bytes
                      by default)

    Returns:
        count bytes, none of them zero

    Raises:
        RandomSourceError: If the source returns the wrong number of bytes
                           or keeps producing unusable bytes
    """
    source = random_bytes or secrets.token_bytes
    result = bytearray()
    for _ in range(RANDOM_SOURCE_ATTEMPTS):
        if len(result) >= count:
            break
        needed = count - len(result)
        drawn = source(needed)
        if len(drawn) != needed:
            raise RandomSourceError(
                f"Random source returned {len(drawn)} bytes, {needed} requested"
            )
        result.extend(b for b in drawn if PADDING_BYTE_MIN <= b <= PADDING_BYTE_MAX)

    if len(result) < count:
        raise RandomSourceError("Random source did not produce enough non-zero bytes")
    return bytes(result[:count])


def pad_block(chunk: bytes, keysize: int, random_bytes: Optional[RandomBytes] = None) -> bytes:
    """
    Encode one chunk as an EME-PKCS1-v1_5 block.

    Args:
        chunk: Message bytes, at most keysize - 11
        keysize: Key size in bytes (128 for a 1024 bit key)
        random_bytes: Randomness source for PS

    Returns:
        Block of exactly keysize bytes

    Raises:
        KeyTooSmallError: If keysize < 12
        MalformedInputError: If the chunk is too long for the block
    """
    limit = max_chunk_size(keysize)
    if len(chunk) > limit:
        raise MalformedInputError(f"Chunk of {len(chunk)} bytes exceeds the {limit} byte limit")

    padding = nonzero_random_bytes(keysize - len(chunk) - 3, random_bytes)
    return BLOCK_MARKER + padding + DELIMITER + bytes(chunk)


def pkcs1v15_encoded_chunks(
    data: bytes,
    keysize: int,
    random_bytes: Optional[RandomBytes] = None
) -> List[bytes]:
    """
    Split data into chunks and encode every chunk as a padded block.

    Args:
        data: Message bytes (UTF-8 encoded text)
        keysize: Key size in bytes
        random_bytes: Randomness source for the padding

    Returns:
        List of keysize-byte blocks, in message order
    """
    chunks = split_chunks(data, max_chunk_size(keysize))
    return [pad_block(chunk, keysize, random_bytes) for chunk in chunks]
