"""
Vote transaction model and canonical serialization.

The byte layout matches what ARK nodes hash and verify:

    type (u8) | timestamp (i32) | sender public key (33)
    | recipient (21, base58check payload) | vendor field (64)
    | amount (i64) | fee (i64) | asset (utf-8 votes)
    | signature (DER, optional) | second signature (DER, optional)

All integers are little-endian. The transaction hash that gets signed
covers the bytes without signatures; the transaction id is the SHA-256 of
the full signed serialization.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from arkcli.core.config import ARK_EPOCH, TRANSACTION_TYPE_VOTE, VOTE_FEE
from arkcli.core.crypto_utils import decode_address
from arkcli.core.exceptions import ValidationError

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from arkcli.core.delegates import Delegate
    from arkcli.core.identity import SigningIdentity

VENDOR_FIELD_SIZE = 64
RECIPIENT_SIZE = 21


def get_epoch_time(now: Optional[datetime] = None) -> int:
    """Seconds elapsed since the ARK epoch."""
    current = now or datetime.now(timezone.utc)
    return int((current - ARK_EPOCH).total_seconds())


@dataclass
class VoteTransaction:
    """
    A delegate vote transaction.

    Attributes:
        sender_public_key: Compressed public key hex of the voter
        recipient_id: Voter's own address (votes are sent to self)
        votes: Ordered vote entries, "+<pubkey>" to vote, "-<pubkey>" to unvote
        timestamp: Seconds since the ARK epoch
        fee: Fee in arktoshi
        signature: DER signature hex, absent until signed
        sign_signature: Second-secret DER signature hex
        id: SHA-256 of the signed serialization, absent until signed
    """

    sender_public_key: str
    recipient_id: str
    votes: list[str]
    timestamp: int
    fee: int = VOTE_FEE
    amount: int = 0
    type: int = TRANSACTION_TYPE_VOTE
    signature: Optional[str] = None
    sign_signature: Optional[str] = None
    id: Optional[str] = field(default=None)

    @property
    def is_signed(self) -> bool:
        return bool(self.signature) and bool(self.id)

    def get_bytes(self, skip_signature: bool = False, skip_second_signature: bool = False) -> bytes:
        """Canonical serialization used for hashing and identification."""
        sender = bytes.fromhex(self.sender_public_key)
        recipient = decode_address(self.recipient_id) if self.recipient_id else bytes(RECIPIENT_SIZE)
        parts = [
            struct.pack("<Bi", self.type, self.timestamp),
            sender,
            recipient,
            bytes(VENDOR_FIELD_SIZE),
            struct.pack("<qq", self.amount, self.fee),
            "".join(self.votes).encode("utf-8"),
        ]
        if not skip_signature and self.signature:
            parts.append(bytes.fromhex(self.signature))
        if not skip_second_signature and self.sign_signature:
            parts.append(bytes.fromhex(self.sign_signature))
        return b"".join(parts)

    def get_hash(self, skip_signature: bool = True, skip_second_signature: bool = True) -> bytes:
        return hashlib.sha256(self.get_bytes(skip_signature, skip_second_signature)).digest()

    def compute_id(self) -> str:
        """Content digest of the full (signed) serialization."""
        return hashlib.sha256(self.get_bytes()).hexdigest()

    def strip_signatures(self) -> None:
        self.signature = None
        self.sign_signature = None
        self.id = None

    def to_dict(self) -> dict[str, Any]:
        """Wire format accepted by POST /peer/transactions."""
        payload: dict[str, Any] = {
            "type": self.type,
            "amount": self.amount,
            "fee": self.fee,
            "recipientId": self.recipient_id,
            "senderPublicKey": self.sender_public_key,
            "timestamp": self.timestamp,
            "asset": {"votes": list(self.votes)},
        }
        if self.signature:
            payload["signature"] = self.signature
        if self.sign_signature:
            payload["signSignature"] = self.sign_signature
        if self.id:
            payload["id"] = self.id
        return payload


def build_unvote(
    identity: "SigningIdentity",
    delegate: "Delegate",
    timestamp: Optional[int] = None,
) -> VoteTransaction:
    """
    Build the unsigned vote-removal transaction for ``delegate``.

    The transaction always carries exactly one "-" entry. Signature and id
    are left empty; the signer for the identity fills them in.
    """
    if not delegate.public_key:
        raise ValidationError("Delegate public key is required to build an unvote.")
    return VoteTransaction(
        sender_public_key=identity.public_key,
        recipient_id=identity.address,
        votes=[f"-{delegate.public_key}"],
        timestamp=get_epoch_time() if timestamp is None else timestamp,
    )
