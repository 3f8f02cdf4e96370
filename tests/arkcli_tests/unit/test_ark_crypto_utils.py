"""
Tests for ARK key derivation, addresses and signatures.

Tests cover:
- Passphrase key derivation against known ARK vectors
- Address encoding per network version byte
- WIF export
- Deterministic canonical signatures and verification
"""

from __future__ import annotations

import hashlib

import base58
import pytest
from ecdsa import SECP256k1, SigningKey

from arkcli.core.crypto_utils import (
    address_from_public_key,
    compress_public_key,
    decode_address,
    public_key_from_passphrase,
    sign_digest_hex,
    validate_address,
    verify_digest_hex,
    wif_from_passphrase,
)

PASSPHRASE = "this is a top secret passphrase"
PUBLIC_KEY = "034151a3ec46b5670a682b0a63394f863587d1bc97483b1b6c70eb58e7f0aed192"
MAINNET_ADDRESS = "AGeYmgbg2LgGxRW2vNNJvQ88PknEJsYizC"


class TestKeyDerivation:
    def test_public_key_from_passphrase(self):
        assert public_key_from_passphrase(PASSPHRASE) == PUBLIC_KEY

    def test_mainnet_address(self):
        assert address_from_public_key(PUBLIC_KEY, 0x17) == MAINNET_ADDRESS

    def test_devnet_address_uses_version_byte(self):
        address = address_from_public_key(PUBLIC_KEY, 0x1E)
        assert address.startswith("D")
        assert decode_address(address)[0] == 0x1E

    def test_address_rejects_uncompressed_key(self):
        with pytest.raises(ValueError):
            address_from_public_key("04" + "00" * 64, 0x17)

    def test_wif_export(self):
        wif = wif_from_passphrase(PASSPHRASE, 0xAA)
        payload = base58.b58decode_check(wif)
        assert payload[0] == 0xAA
        assert len(payload) == 34
        assert payload[-1] == 0x01
        assert payload[1:33] == hashlib.sha256(PASSPHRASE.encode()).digest()


class TestAddressValidation:
    def test_validate_matching_version(self):
        assert validate_address(MAINNET_ADDRESS, 0x17)

    def test_validate_wrong_version(self):
        assert not validate_address(MAINNET_ADDRESS, 0x1E)

    def test_validate_bad_checksum(self):
        corrupted = MAINNET_ADDRESS[:-1] + ("D" if MAINNET_ADDRESS[-1] != "D" else "E")
        assert not validate_address(corrupted, 0x17)

    def test_decode_address_length(self):
        assert len(decode_address(MAINNET_ADDRESS)) == 21


class TestSignatures:
    def test_signatures_are_deterministic(self):
        digest = hashlib.sha256(b"vote").digest()
        assert sign_digest_hex(PASSPHRASE, digest) == sign_digest_hex(PASSPHRASE, digest)

    def test_signature_verifies(self):
        digest = hashlib.sha256(b"vote").digest()
        signature = sign_digest_hex(PASSPHRASE, digest)
        assert verify_digest_hex(PUBLIC_KEY, digest, signature)

    def test_signature_is_der(self):
        signature = bytes.fromhex(sign_digest_hex(PASSPHRASE, hashlib.sha256(b"x").digest()))
        assert signature[0] == 0x30
        assert signature[1] == len(signature) - 2

    def test_verify_rejects_other_digest(self):
        signature = sign_digest_hex(PASSPHRASE, hashlib.sha256(b"vote").digest())
        assert not verify_digest_hex(PUBLIC_KEY, hashlib.sha256(b"other").digest(), signature)

    def test_verify_rejects_garbage_signature(self):
        assert not verify_digest_hex(PUBLIC_KEY, hashlib.sha256(b"vote").digest(), "00ff")


class TestCompressPublicKey:
    def test_uncompressed_key_is_compressed(self):
        signing_key = SigningKey.from_string(
            hashlib.sha256(PASSPHRASE.encode()).digest(), curve=SECP256k1
        )
        raw = signing_key.get_verifying_key().to_string("uncompressed")
        assert compress_public_key(raw) == PUBLIC_KEY

    def test_compressed_key_passes_through(self):
        assert compress_public_key(bytes.fromhex(PUBLIC_KEY)) == PUBLIC_KEY

    def test_unknown_encoding_rejected(self):
        with pytest.raises(ValueError):
            compress_public_key(b"\x04" + b"\x00" * 10)
