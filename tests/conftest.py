"""Shared fixtures for the clientrsa tests."""

from types import SimpleNamespace

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from clientrsa.encryption.keys import PublicKey


# Two Mersenne primes give a 216-bit toy modulus with a known factorization
TOY_P = 2**89 - 1
TOY_Q = 2**127 - 1
TOY_E = 65537


@pytest.fixture(scope="session")
def toy_key():
    """216-bit key pair (27 byte blocks) with its private exponent."""
    n = TOY_P * TOY_Q
    phi = (TOY_P - 1) * (TOY_Q - 1)
    d = pow(TOY_E, -1, phi)
    return SimpleNamespace(n=n, e=TOY_E, d=d, bits=216, keysize=27)


@pytest.fixture(scope="session")
def rsa_private_key():
    """1024-bit private key generated by the cryptography package."""
    return rsa.generate_private_key(public_exponent=65537, key_size=1024)


@pytest.fixture(scope="session")
def rsa_public_key(rsa_private_key):
    return PublicKey.from_cryptography(rsa_private_key.public_key())


@pytest.fixture
def fixed_random():
    """Deterministic stand-in for secrets.token_bytes."""
    def random_bytes(count: int) -> bytes:
        return bytes((i * 37) % 254 + 1 for i in range(count))
    return random_bytes
