"""Tests for the vote transaction model, serialization and ids."""

from __future__ import annotations

import hashlib
import struct
from datetime import datetime, timedelta, timezone

import pytest

from arkcli.core.config import ARK_EPOCH, VOTE_FEE, resolve_network
from arkcli.core.delegates import Delegate
from arkcli.core.exceptions import ValidationError
from arkcli.core.identity import resolve_passphrase_identity
from arkcli.core.signer import PassphraseSigner
from arkcli.core.transaction import VoteTransaction, build_unvote, get_epoch_time

PASSPHRASE = "this is a top secret passphrase"
DELEGATE = Delegate(public_key="02" + "ab" * 32, username="u1")
TIMESTAMP = 40_000_000


@pytest.fixture
def identity():
    return resolve_passphrase_identity(PASSPHRASE, resolve_network("mainnet"))


def _signed_unvote(identity, delegate=DELEGATE, timestamp=TIMESTAMP):
    tx = build_unvote(identity, delegate, timestamp=timestamp)
    return PassphraseSigner(identity).sign(tx)


class TestEpochTime:
    def test_epoch_start_is_zero(self):
        assert get_epoch_time(ARK_EPOCH) == 0

    def test_seconds_since_epoch(self):
        assert get_epoch_time(ARK_EPOCH + timedelta(days=1, seconds=5)) == 86_405

    def test_defaults_to_now(self):
        assert get_epoch_time() > get_epoch_time(datetime(2020, 1, 1, tzinfo=timezone.utc))


class TestBuildUnvote:
    def test_single_minus_entry(self, identity):
        tx = build_unvote(identity, DELEGATE, timestamp=TIMESTAMP)
        assert tx.votes == [f"-{DELEGATE.public_key}"]
        assert tx.type == 3
        assert tx.amount == 0
        assert tx.fee == VOTE_FEE
        assert tx.recipient_id == identity.address
        assert tx.sender_public_key == identity.public_key

    def test_unsigned_after_build(self, identity):
        tx = build_unvote(identity, DELEGATE, timestamp=TIMESTAMP)
        assert tx.signature is None
        assert tx.id is None
        assert not tx.is_signed

    def test_missing_delegate_key_rejected(self, identity):
        with pytest.raises(ValidationError):
            build_unvote(identity, Delegate(public_key="", username="ghost"))

    def test_timestamp_defaults_to_epoch_time(self, identity):
        tx = build_unvote(identity, DELEGATE)
        assert abs(tx.timestamp - get_epoch_time()) <= 5


class TestSerialization:
    def test_byte_layout(self, identity):
        tx = build_unvote(identity, DELEGATE, timestamp=TIMESTAMP)
        raw = tx.get_bytes()
        assert raw[:5] == struct.pack("<Bi", 3, TIMESTAMP)
        assert raw[5:38] == bytes.fromhex(identity.public_key)
        assert raw[38] == 0x17  # recipient version byte
        assert raw[59:123] == bytes(64)
        assert raw[123:139] == struct.pack("<qq", 0, VOTE_FEE)
        assert raw[139:] == f"-{DELEGATE.public_key}".encode()

    def test_hash_excludes_signatures(self, identity):
        unsigned_hash = build_unvote(identity, DELEGATE, timestamp=TIMESTAMP).get_hash()
        signed = _signed_unvote(identity)
        assert signed.get_hash() == unsigned_hash

    def test_signed_bytes_append_signature(self, identity):
        signed = _signed_unvote(identity)
        assert signed.get_bytes().endswith(bytes.fromhex(signed.signature))

    def test_id_is_sha256_of_signed_bytes(self, identity):
        signed = _signed_unvote(identity)
        assert signed.id == hashlib.sha256(signed.get_bytes()).hexdigest()


class TestTransactionId:
    def test_deterministic_for_identical_inputs(self, identity):
        assert _signed_unvote(identity).id == _signed_unvote(identity).id

    def test_changes_with_delegate(self, identity):
        other = Delegate(public_key="03" + "cd" * 32, username="u2")
        assert _signed_unvote(identity).id != _signed_unvote(identity, delegate=other).id

    def test_changes_with_sender(self, identity):
        other = resolve_passphrase_identity("another passphrase", resolve_network("mainnet"))
        assert _signed_unvote(identity).id != _signed_unvote(other).id

    def test_changes_with_timestamp(self, identity):
        assert _signed_unvote(identity).id != _signed_unvote(identity, timestamp=TIMESTAMP + 1).id


class TestWireFormat:
    def test_signed_payload(self, identity):
        signed = _signed_unvote(identity)
        payload = signed.to_dict()
        assert payload["type"] == 3
        assert payload["recipientId"] == identity.address
        assert payload["senderPublicKey"] == identity.public_key
        assert payload["asset"] == {"votes": [f"-{DELEGATE.public_key}"]}
        assert payload["signature"] == signed.signature
        assert payload["id"] == signed.id
        assert "signSignature" not in payload

    def test_unsigned_payload_has_no_signature_keys(self, identity):
        payload = build_unvote(identity, DELEGATE, timestamp=TIMESTAMP).to_dict()
        assert "signature" not in payload
        assert "id" not in payload

    def test_strip_signatures(self, identity):
        signed = _signed_unvote(identity)
        signed.strip_signatures()
        assert isinstance(signed, VoteTransaction)
        assert not signed.is_signed
        assert signed.sign_signature is None
