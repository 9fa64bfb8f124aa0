"""
Configuration

Module-level constants for the arithmetic engine and the padding scheme,
plus runtime settings read from the environment for the command line tool.

Environment variables:
    CLIENTRSA_WORKERS    Number of worker threads used per call (default 1)
    CLIENTRSA_METHOD     Reduction method: montgomery, barrett or classic
    CLIENTRSA_LOG_LEVEL  Logging level name (default WARNING)
"""

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import MalformedInputError


# Internal digit base for the big-integer engine
DIGIT_BITS = 32
BASE = 1 << DIGIT_BITS
DIGIT_MASK = BASE - 1

# String alphabets (immutable, shared by every conversion)
DIGIT_TO_STR = "0123456789abcdefghijklmnopqrstuvwxyz"
DIGIT_TO_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
BASE64_PAD = "="
DEFAULT_STRING_BASE = 64

# EME-PKCS1-v1_5
MIN_PADDING_LENGTH = 8
PKCS1_OVERHEAD = 3 + MIN_PADDING_LENGTH  # 0x00 0x02 + padding + 0x00
MIN_KEYSIZE = PKCS1_OVERHEAD + 1
PADDING_BYTE_MIN = 1
PADDING_BYTE_MAX = 254

# Draws from the randomness source before giving up on non-zero bytes
RANDOM_SOURCE_ATTEMPTS = 64

# Reduction methods understood by the encryptor
METHOD_MONTGOMERY = "montgomery"
METHOD_BARRETT = "barrett"
METHOD_CLASSIC = "classic"
METHODS = (METHOD_MONTGOMERY, METHOD_BARRETT, METHOD_CLASSIC)

DEFAULT_WORKERS = 1
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the command line tool."""
    workers: int = DEFAULT_WORKERS
    method: str = METHOD_MONTGOMERY
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.
    
    Args:
        environ: Mapping to read from (defaults to os.environ)
        
    Returns:
        Settings instance
        
    Raises:
        MalformedInputError: If a variable holds an invalid value
    """
    env = os.environ if environ is None else environ
    
    raw_workers = env.get("CLIENTRSA_WORKERS", str(DEFAULT_WORKERS))
    try:
        workers = int(raw_workers)
    except ValueError:
        raise MalformedInputError(f"CLIENTRSA_WORKERS must be an integer, got {raw_workers!r}")
    if workers < 1:
        raise MalformedInputError("CLIENTRSA_WORKERS must be at least 1")
    
    method = env.get("CLIENTRSA_METHOD", METHOD_MONTGOMERY).strip().lower()
    if method not in METHODS:
        raise MalformedInputError(
            f"CLIENTRSA_METHOD must be one of {', '.join(METHODS)}, got {method!r}"
        )
    
    log_level = env.get("CLIENTRSA_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise MalformedInputError(f"Unknown CLIENTRSA_LOG_LEVEL {log_level!r}")
    
    return Settings(workers=workers, method=method, log_level=log_level)
