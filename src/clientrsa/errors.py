"""
Encryption Errors

Every failure raised by clientrsa derives from EncryptionError. All of them
are raised before the first block is exponentiated, so a failed call never
leaves a partial list of ciphertext blocks behind.
"""


class EncryptionError(Exception):
    """Base class for all clientrsa errors."""
    pass


class MalformedInputError(EncryptionError, ValueError):
    """Raised when a digit, symbol, base or bit length is invalid."""
    pass


class KeyTooSmallError(EncryptionError, ValueError):
    """Raised when the key is too short to hold a PKCS#1 v1.5 block."""
    pass


class ArithmeticPreconditionError(EncryptionError, ValueError):
    """Raised when an operand violates an arithmetic precondition."""
    pass


class RandomSourceError(EncryptionError, RuntimeError):
    """Raised when the padding randomness source misbehaves."""
    pass
