"""
Tests for RSA encryption and public key handling.

Ciphertext produced here is decrypted with the cryptography package (or
with pow() for toy keys) to prove that a standard PKCS#1 v1.5 receiver
recovers the message.
"""

import base64
import dataclasses
import logging

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding

import clientrsa
from clientrsa.config import METHODS
from clientrsa.errors import (
    ArithmeticPreconditionError, KeyTooSmallError, MalformedInputError, RandomSourceError,
)
from clientrsa.core_crypto.pkcs1 import pad_block
from clientrsa.encryption import validate_bits
from clientrsa.encryption.keys import PublicKey, load_public_key_pem, load_public_key_file
from clientrsa.encryption.rsa_encrypt import RSAEncryptor, encrypt

from .helpers import block_to_bytes, reference_decrypt


def _b64(value: int, length: int) -> str:
    return base64.b64encode(value.to_bytes(length, 'big')).decode()


# 128-bit odd modulus used for exact block checks
SMALL_N = 2**128 - 159


class TestEncryptWithCryptography:
    """Round trips through a 1024-bit key decrypted by the cryptography package."""

    def test_short_message(self, rsa_private_key, rsa_public_key):
        blocks = RSAEncryptor(rsa_public_key).encrypt("Hello, server!")

        assert len(blocks) == 1
        plaintext = rsa_private_key.decrypt(block_to_bytes(blocks[0], 128), padding.PKCS1v15())
        assert plaintext == b"Hello, server!"

    def test_multi_block_utf8(self, rsa_private_key, rsa_public_key):
        """Multi-byte characters split across blocks are restored after joining."""
        text = "Grüße aus Köln, 你好世界! " * 12
        data = text.encode('utf-8')
        blocks = RSAEncryptor(rsa_public_key).encrypt(text)

        assert len(blocks) == -(-len(data) // 117)
        joined = b"".join(
            rsa_private_key.decrypt(block_to_bytes(b, 128), padding.PKCS1v15()) for b in blocks
        )
        assert joined.decode('utf-8') == text

    def test_all_methods_decrypt(self, rsa_private_key, rsa_public_key):
        for method in METHODS:
            blocks = RSAEncryptor(rsa_public_key, method=method).encrypt("method check")
            plaintext = rsa_private_key.decrypt(block_to_bytes(blocks[0], 128), padding.PKCS1v15())
            assert plaintext == b"method check"

    def test_fresh_padding_per_call(self, rsa_public_key):
        """Default randomness makes repeated encryptions differ."""
        encryptor = RSAEncryptor(rsa_public_key)
        assert encryptor.encrypt("again") != encryptor.encrypt("again")

    def test_module_function_with_strings(self, rsa_private_key, rsa_public_key):
        modulus, exponent = rsa_public_key.to_strings()
        blocks = clientrsa.encrypt("via strings", modulus, exponent, 1024)

        plaintext = rsa_private_key.decrypt(block_to_bytes(blocks[0], 128), padding.PKCS1v15())
        assert plaintext == b"via strings"


class TestEncryptToyKey:
    """Encryption with a 216-bit key checked by a reference decryption."""

    def test_round_trip(self, toy_key, fixed_random):
        text = "A message longer than one block of sixteen bytes"
        blocks = encrypt(text, _b64(toy_key.n, 27), "AQAB", toy_key.bits, random_bytes=fixed_random)

        assert len(blocks) == 3
        assert reference_decrypt(blocks, toy_key.n, toy_key.d, toy_key.keysize) == text.encode()

    def test_deterministic_with_fixed_random(self, toy_key, fixed_random):
        args = ("same input", _b64(toy_key.n, 27), "AQAB", toy_key.bits)
        first = encrypt(*args, random_bytes=fixed_random)
        second = encrypt(*args, random_bytes=fixed_random)
        assert first == second

    def test_methods_agree(self, toy_key, fixed_random):
        text = "Montgomery, Barrett and classic"
        results = [
            encrypt(text, _b64(toy_key.n, 27), "AQAB", toy_key.bits,
                    random_bytes=fixed_random, method=method)
            for method in METHODS
        ]
        assert results[0] == results[1] == results[2]

    def test_workers_preserve_order(self, toy_key, fixed_random):
        """A thread pool returns the same blocks in the same order."""
        text = "".join(chr(ord('a') + i % 26) for i in range(200))
        args = (text, _b64(toy_key.n, 27), "AQAB", toy_key.bits)
        serial = encrypt(*args, random_bytes=fixed_random, workers=1)
        parallel = encrypt(*args, random_bytes=fixed_random, workers=4)

        assert len(serial) == 13
        assert parallel == serial
        assert reference_decrypt(parallel, toy_key.n, toy_key.d, toy_key.keysize) == text.encode()

    def test_empty_text(self, toy_key):
        assert encrypt("", _b64(toy_key.n, 27), "AQAB", toy_key.bits) == []


class TestBlockValues:
    """Exact ciphertext values for a 128-bit modulus."""

    def test_single_block_value(self, fixed_random):
        """'AB' with bits=128 is one block equal to pow(block, E, N)."""
        blocks = encrypt("AB", _b64(SMALL_N, 16), "AQAB", 128, random_bytes=fixed_random)

        expected = pow(int.from_bytes(pad_block(b"AB", 16, fixed_random), 'big'), 65537, SMALL_N)
        assert len(blocks) == 1
        assert int.from_bytes(base64.b64decode(blocks[0]), 'big') == expected

    def test_output_base_16(self, fixed_random):
        blocks = encrypt("AB", _b64(SMALL_N, 16), "AQAB", 128,
                         random_bytes=fixed_random, output_base=16)

        expected = pow(int.from_bytes(pad_block(b"AB", 16, fixed_random), 'big'), 65537, SMALL_N)
        assert blocks == [format(expected, 'x')]

    def test_input_base_16(self, fixed_random):
        from_hex = encrypt("AB", format(SMALL_N, 'x'), "10001", 128,
                           random_bytes=fixed_random, input_base=16)
        from_b64 = encrypt("AB", _b64(SMALL_N, 16), "AQAB", 128, random_bytes=fixed_random)
        assert from_hex == from_b64

    def test_classic_accepts_even_modulus(self, fixed_random):
        """Only Montgomery reduction needs an odd modulus."""
        even_n = SMALL_N + 1
        blocks = encrypt("AB", _b64(even_n, 16), "AQAB", 128,
                         random_bytes=fixed_random, method="classic")

        expected = pow(int.from_bytes(pad_block(b"AB", 16, fixed_random), 'big'), 65537, even_n)
        assert int.from_bytes(base64.b64decode(blocks[0]), 'big') == expected


class TestEncryptErrors:
    """Failure modes of encrypt and RSAEncryptor."""

    def test_key_too_small(self):
        with pytest.raises(KeyTooSmallError):
            encrypt("x", _b64(2**87 + 1, 11), "AQAB", 88)

    def test_bits_not_multiple_of_eight(self):
        with pytest.raises(MalformedInputError):
            encrypt("x", _b64(SMALL_N, 16), "AQAB", 130)

    def test_bad_modulus_symbol(self):
        with pytest.raises(MalformedInputError):
            encrypt("x", "not*base64", "AQAB", 128)

    def test_zero_modulus(self):
        with pytest.raises(ArithmeticPreconditionError):
            encrypt("x", "AA==", "AQAB", 128)

    def test_even_modulus_montgomery(self):
        with pytest.raises(ArithmeticPreconditionError):
            encrypt("x", _b64(SMALL_N + 1, 16), "AQAB", 128)

    def test_block_not_below_modulus(self, caplog):
        """A modulus much shorter than bits cannot hold the padded block."""
        short_n = 2**100 + 1
        with caplog.at_level(logging.WARNING, logger="clientrsa.encryption.keys"):
            with pytest.raises(ArithmeticPreconditionError):
                encrypt("AB", _b64(short_n, 13), "AQAB", 128)
        assert "Modulus is 101 bits" in caplog.text

    def test_random_source_failure(self, toy_key):
        with pytest.raises(RandomSourceError):
            encrypt("x", _b64(toy_key.n, 27), "AQAB", toy_key.bits, random_bytes=lambda n: b"")

    def test_invalid_worker_count(self, rsa_public_key):
        with pytest.raises(MalformedInputError):
            RSAEncryptor(rsa_public_key, workers=0)

    def test_unknown_method(self, rsa_public_key):
        with pytest.raises(MalformedInputError):
            RSAEncryptor(rsa_public_key, method="fast")

    def test_errors_share_base_class(self):
        with pytest.raises(clientrsa.EncryptionError):
            encrypt("x", "", "AQAB", 128)


class TestPublicKey:
    """Tests for PublicKey parsing and PEM loading."""

    def test_from_strings_round_trip(self):
        key = PublicKey.from_strings(_b64(SMALL_N, 16), "AQAB", 128)

        assert key.keysize == 16
        assert key.to_strings() == (_b64(SMALL_N, 16), "AQAB")
        assert key.to_strings(16) == (format(SMALL_N, 'x'), "10001")

    def test_from_cryptography(self, rsa_private_key, rsa_public_key):
        numbers = rsa_private_key.public_key().public_numbers()
        modulus, exponent = rsa_public_key.to_strings()

        assert rsa_public_key.bits == 1024
        assert exponent == "AQAB"
        assert int.from_bytes(base64.b64decode(modulus), 'big') == numbers.n

    def test_load_pem(self, rsa_private_key, rsa_public_key):
        pem = rsa_private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        assert load_public_key_pem(pem) == rsa_public_key
        assert load_public_key_pem(pem.decode()) == rsa_public_key

    def test_load_pkcs1_pem(self, rsa_private_key, rsa_public_key):
        pem = rsa_private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.PKCS1,
        )
        assert load_public_key_pem(pem) == rsa_public_key

    def test_load_file(self, tmp_path, rsa_private_key, rsa_public_key):
        path = tmp_path / "server.pem"
        path.write_bytes(rsa_private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ))
        assert load_public_key_file(path) == rsa_public_key

    def test_non_rsa_key_rejected(self):
        ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()
        pem = ec_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        with pytest.raises(MalformedInputError):
            load_public_key_pem(pem)

    def test_garbage_pem_rejected(self):
        with pytest.raises(MalformedInputError):
            load_public_key_pem(b"-----BEGIN PUBLIC KEY-----\nnope\n-----END PUBLIC KEY-----\n")

    def test_zero_modulus_rejected(self):
        """A zero modulus is an arithmetic precondition failure."""
        with pytest.raises(ArithmeticPreconditionError):
            PublicKey.from_strings("AA==", "AQAB", 128)

    @pytest.mark.parametrize("bits", [0, -8, 1023, True, "1024", 12.0])
    def test_invalid_bits(self, bits):
        with pytest.raises(MalformedInputError):
            validate_bits(bits)

    def test_validate_bits(self):
        assert validate_bits(1024) == 128
        assert validate_bits(96) == 12

    def test_key_is_immutable(self, rsa_public_key):
        with pytest.raises(dataclasses.FrozenInstanceError):
            rsa_public_key.bits = 2048

    def test_repr_hides_modulus(self, rsa_public_key):
        text = repr(rsa_public_key)
        assert "bits=1024" in text
        assert "10001" in text
        assert rsa_public_key.to_strings()[0] not in text
