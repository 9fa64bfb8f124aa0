# Encryption Module
"""
RSA encryption entry points:
- PublicKey parsing (64-symbol strings, PEM via cryptography)
- RSAEncryptor / encrypt(): message -> list of encoded ciphertext blocks
"""

# Lazy imports to avoid circular import issues when running modules directly
def __getattr__(name):
    """Lazy import of the public encryption API."""
    if name in ('PublicKey', 'load_public_key_pem', 'load_public_key_file', 'validate_bits'):
        from . import keys
        return getattr(keys, name)
    from . import rsa_encrypt
    return getattr(rsa_encrypt, name)

__all__ = [
    'PublicKey',
    'load_public_key_pem',
    'load_public_key_file',
    'validate_bits',
    'RSAEncryptor',
    'encrypt',
]
