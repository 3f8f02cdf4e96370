"""Utility helpers for secp256k1 keys, ARK addresses and signatures."""

from __future__ import annotations

import hashlib

import base58
from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.der import UnexpectedDER
from ecdsa.keys import MalformedPointError
from ecdsa.util import sigdecode_der, sigencode_der_canonize

ADDRESS_PAYLOAD_SIZE = 21


def _ripemd160(data: bytes) -> bytes:
    return hashlib.new("ripemd160", data).digest()


def signing_key_from_passphrase(passphrase: str) -> SigningKey:
    """Derive the secp256k1 signing key as sha256(passphrase)."""
    seed = hashlib.sha256(passphrase.encode("utf-8")).digest()
    return SigningKey.from_string(seed, curve=SECP256k1)


def public_key_hex(signing_key: SigningKey) -> str:
    """Compressed (33 byte) public key as hex."""
    return signing_key.get_verifying_key().to_string("compressed").hex()


def public_key_from_passphrase(passphrase: str) -> str:
    return public_key_hex(signing_key_from_passphrase(passphrase))


def address_from_public_key(public_key: str, version: int) -> str:
    """
    Build a base58check address from a compressed public key.

    Args:
        public_key: Compressed public key hex (66 chars)
        version: Network address-version byte

    Returns:
        Base58check encoded address
    """
    raw = bytes.fromhex(public_key)
    if len(raw) != 33:
        raise ValueError("Public key must be 33 bytes (compressed).")
    payload = bytes([version]) + _ripemd160(raw)
    return base58.b58encode_check(payload).decode("ascii")


def decode_address(address: str) -> bytes:
    """Decode a base58check address into its 21 byte payload."""
    try:
        payload = base58.b58decode_check(address)
    except ValueError as exc:
        raise ValueError(f"Invalid address checksum: {address}") from exc
    if len(payload) != ADDRESS_PAYLOAD_SIZE:
        raise ValueError(f"Invalid address length: {address}")
    return payload


def validate_address(address: str, version: int) -> bool:
    try:
        payload = decode_address(address)
    except ValueError:
        return False
    return payload[0] == version


def wif_from_passphrase(passphrase: str, wif_byte: int) -> str:
    """Export the passphrase-derived private key in compressed WIF."""
    secret = signing_key_from_passphrase(passphrase).to_string()
    return base58.b58encode_check(bytes([wif_byte]) + secret + b"\x01").decode("ascii")


def sign_digest_hex(passphrase: str, digest: bytes) -> str:
    """
    Sign a 32 byte digest with the passphrase-derived key.

    Signatures are deterministic (RFC 6979) and low-S canonical DER, so the
    same passphrase and digest always yield the same signature.
    """
    signing_key = signing_key_from_passphrase(passphrase)
    signature = signing_key.sign_digest_deterministic(
        digest,
        hashfunc=hashlib.sha256,
        sigencode=sigencode_der_canonize,
    )
    return signature.hex()


def verify_digest_hex(public_key: str, digest: bytes, signature_hex: str) -> bool:
    try:
        verifying_key = VerifyingKey.from_string(bytes.fromhex(public_key), curve=SECP256k1)
        return verifying_key.verify_digest(
            bytes.fromhex(signature_hex),
            digest,
            sigdecode=sigdecode_der,
        )
    except (BadSignatureError, MalformedPointError, UnexpectedDER, ValueError):
        return False


def compress_public_key(raw: bytes) -> str:
    """Normalize a raw device public key (33 or 65 bytes) to compressed hex."""
    if len(raw) == 33:
        return raw.hex()
    try:
        verifying_key = VerifyingKey.from_string(raw, curve=SECP256k1)
    except MalformedPointError as exc:
        raise ValueError(f"Unrecognized public key encoding ({len(raw)} bytes)") from exc
    return verifying_key.to_string("compressed").hex()
