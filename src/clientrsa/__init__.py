"""
clientrsa - client-side RSA encryption on digit arithmetic

Encrypts text of any length into EME-PKCS1-v1_5 padded RSA blocks encoded
in a 64-symbol radix, ready to be posted to a server holding the private key.

Example:
    >>> import clientrsa
    >>> blocks = clientrsa.encrypt("secret", modulus_b64, "AQAB", 1024)
"""

from .errors import (
    EncryptionError,
    MalformedInputError,
    KeyTooSmallError,
    ArithmeticPreconditionError,
    RandomSourceError,
)
from .encryption.keys import PublicKey, load_public_key_pem, load_public_key_file
from .encryption.rsa_encrypt import RSAEncryptor, encrypt

__version__ = "1.0.0"

__all__ = [
    'encrypt',
    'RSAEncryptor',
    'PublicKey',
    'load_public_key_pem',
    'load_public_key_file',
    'EncryptionError',
    'MalformedInputError',
    'KeyTooSmallError',
    'ArithmeticPreconditionError',
    'RandomSourceError',
]
