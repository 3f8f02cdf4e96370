"""
Transaction signing.

Signing progresses through a small state machine:

    UNSIGNED -> AWAITING_CONFIRMATION (interactive only) -> SIGNING -> SIGNED
                                    \\                        \\
                                     +-> FAILED               +-> FAILED

Each identity variant has one Signer implementation:

- PassphraseSigner signs locally; signature and id are produced in the
  same call.
- DeviceSigner sends the unsigned serialization to a hardware device over
  the account's derivation path, then attaches the signature and
  recomputes the id.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Protocol, runtime_checkable

from ecdsa.keys import MalformedPointError

from arkcli.core.crypto_utils import sign_digest_hex
from arkcli.core.exceptions import ArkCliError, DeviceSigningError, SigningError, UserCancelled
from arkcli.core.hardware_wallet import HardwareDevice, bip44_path
from arkcli.core.identity import DeviceIdentity, PassphraseIdentity, SigningIdentity
from arkcli.core.transaction import VoteTransaction

logger = logging.getLogger(__name__)


class SignerState(Enum):
    UNSIGNED = "unsigned"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SIGNING = "signing"
    SIGNED = "signed"
    FAILED = "failed"


_TRANSITIONS: dict[SignerState, set[SignerState]] = {
    SignerState.UNSIGNED: {SignerState.AWAITING_CONFIRMATION, SignerState.SIGNING, SignerState.FAILED},
    SignerState.AWAITING_CONFIRMATION: {SignerState.SIGNING, SignerState.FAILED},
    SignerState.SIGNING: {SignerState.SIGNED, SignerState.FAILED},
    SignerState.SIGNED: set(),
    SignerState.FAILED: set(),
}


@runtime_checkable
class Signer(Protocol):
    """Signs a vote transaction in place and returns it."""

    def sign(self, tx: VoteTransaction) -> VoteTransaction:
        ...


def _check_sender(tx: VoteTransaction, public_key: str) -> None:
    if tx.sender_public_key != public_key:
        raise SigningError("Transaction sender does not match the signing identity.")


class PassphraseSigner:
    """Local signer backed by a passphrase (and optional second secret)."""

    def __init__(self, identity: PassphraseIdentity) -> None:
        self._identity = identity

    def sign(self, tx: VoteTransaction) -> VoteTransaction:
        _check_sender(tx, self._identity.public_key)
        try:
            tx.signature = sign_digest_hex(self._identity.passphrase, tx.get_hash())
            if self._identity.second_secret:
                tx.sign_signature = sign_digest_hex(
                    self._identity.second_secret,
                    tx.get_hash(skip_signature=False, skip_second_signature=True),
                )
            tx.id = tx.compute_id()
        except (ValueError, MalformedPointError) as exc:
            tx.strip_signatures()
            raise SigningError("Unable to sign with the supplied passphrase.") from exc
        return tx


class DeviceSigner:
    """Signer delegating to a hardware device account."""

    def __init__(self, identity: DeviceIdentity, device: HardwareDevice, coin_type: int) -> None:
        self._identity = identity
        self._device = device
        self._coin_type = coin_type

    @property
    def path(self) -> str:
        return bip44_path(self._coin_type, self._identity.account_index)

    def sign(self, tx: VoteTransaction) -> VoteTransaction:
        _check_sender(tx, self._identity.public_key)
        tx.strip_signatures()
        payload = tx.get_bytes(skip_signature=True, skip_second_signature=True)
        try:
            signature = self._device.sign(self.path, payload)
        except DeviceSigningError:
            raise
        except (OSError, TimeoutError, ArkCliError) as exc:
            raise DeviceSigningError(f"Device signing failed: {exc}", details={"path": self.path}) from exc
        if not signature:
            raise DeviceSigningError("Device returned an empty signature", details={"path": self.path})
        tx.signature = signature
        tx.id = tx.compute_id()
        return tx


def signer_for(
    identity: SigningIdentity,
    device: Optional[HardwareDevice] = None,
    coin_type: Optional[int] = None,
) -> Signer:
    """Return the signer implementation for an identity variant."""
    if isinstance(identity, PassphraseIdentity):
        return PassphraseSigner(identity)
    if device is None or coin_type is None:
        raise SigningError("A hardware device and coin type are required for device identities.")
    return DeviceSigner(identity, device, coin_type)


class SigningSession:
    """
    Drives one transaction through the signer state machine.

    Args:
        signer: Signer for the run's identity
        interactive: Require request_confirmation() to approve before sign()
    """

    def __init__(self, signer: Signer, interactive: bool = False) -> None:
        self._signer = signer
        self.interactive = interactive
        self.state = SignerState.UNSIGNED

    def _transition(self, new_state: SignerState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise SigningError(f"Illegal signer transition {self.state.value} -> {new_state.value}")
        logger.debug(
            "Signer state %s -> %s",
            self.state.value,
            new_state.value,
            extra={"event": "signer.transition"},
        )
        self.state = new_state

    def request_confirmation(self, confirm: Callable[[], bool]) -> None:
        """
        Ask the operator to approve signing.

        Raises:
            UserCancelled: If the operator declines; the session is FAILED
        """
        self._transition(SignerState.AWAITING_CONFIRMATION)
        approved = False
        try:
            approved = bool(confirm())
        finally:
            if not approved:
                self.state = SignerState.FAILED
        if not approved:
            raise UserCancelled("Transaction cancelled by user.")

    def sign(self, tx: VoteTransaction) -> VoteTransaction:
        if self.interactive and self.state is not SignerState.AWAITING_CONFIRMATION:
            raise SigningError("Operator confirmation is required before signing.")
        self._transition(SignerState.SIGNING)
        try:
            signed = self._signer.sign(tx)
        except ArkCliError:
            self.state = SignerState.FAILED
            raise
        if not signed.is_signed:
            self.state = SignerState.FAILED
            raise SigningError("Signer did not produce a signature and id.")
        self._transition(SignerState.SIGNED)
        return signed
