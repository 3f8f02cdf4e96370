"""
Signing identities.

A run signs with exactly one of:

- ``PassphraseIdentity``: keys derived in-process from the passphrase.
  Secrets are excluded from ``repr`` and never logged.
- ``DeviceIdentity``: an account living on a hardware device. Only the
  public key, address and derivation path are known to the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Sequence, Union

from arkcli.core.config import LEDGER_ACCOUNT_LIMIT, NetworkProfile
from arkcli.core.crypto_utils import address_from_public_key, public_key_from_passphrase
from arkcli.core.exceptions import DeviceUnavailable, ValidationError

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from arkcli.core.hardware_wallet import DeviceAccount, HardwareDevice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassphraseIdentity:
    address: str
    public_key: str
    passphrase: str = field(repr=False)
    second_secret: Optional[str] = field(default=None, repr=False)

    @property
    def kind(self) -> str:
        return "passphrase"


@dataclass(frozen=True)
class DeviceIdentity:
    account_index: int
    path: str
    public_key: str
    address: str

    @property
    def kind(self) -> str:
        return "device"


SigningIdentity = Union[PassphraseIdentity, DeviceIdentity]


def resolve_passphrase_identity(
    passphrase: object,
    profile: NetworkProfile,
    second_secret: object = None,
) -> PassphraseIdentity:
    """
    Derive address and public key from a passphrase.

    Pure: no I/O. The address uses the version byte of ``profile``, which
    must already be the resolved (possibly node-configured) profile.

    Raises:
        ValidationError: If the passphrase or second secret is not a string
    """
    if not isinstance(passphrase, str) or not passphrase:
        raise ValidationError("The passphrase must be a string.")
    if second_secret is not None and not isinstance(second_secret, str):
        raise ValidationError("The second passphrase must be a string.")

    public_key = public_key_from_passphrase(passphrase)
    address = address_from_public_key(public_key, profile.version)
    logger.debug(
        "Resolved passphrase identity",
        extra={"event": "identity.passphrase", "address": address, "network": profile.name},
    )
    return PassphraseIdentity(
        address=address,
        public_key=public_key,
        passphrase=passphrase,
        # An empty second secret means "none"
        second_secret=second_secret or None,
    )


def resolve_device_identity(
    device: "HardwareDevice",
    profile: NetworkProfile,
    select_account: Callable[[Sequence["DeviceAccount"]], int],
    limit: int = LEDGER_ACCOUNT_LIMIT,
) -> DeviceIdentity:
    """
    Pick a hardware device account to sign with.

    Args:
        device: Connected hardware device
        profile: Resolved network profile (coin type and version byte)
        select_account: Callback choosing an index from the listed accounts
        limit: Maximum number of accounts to enumerate

    Raises:
        DeviceUnavailable: If the device is absent or incompatible
        ValidationError: If the selected index is out of range
    """
    if not device.is_supported():
        raise DeviceUnavailable("Hardware device is not connected or not supported.")

    accounts = list(device.list_accounts(profile.slip44, profile.version, limit))
    if not accounts:
        raise DeviceUnavailable("No accounts could be derived from the hardware device.")

    index = select_account(accounts)
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(accounts):
        raise ValidationError(f"Invalid account selection: {index!r}")

    account = accounts[index]
    logger.debug(
        "Resolved device identity",
        extra={"event": "identity.device", "address": account.address, "account_index": index},
    )
    return DeviceIdentity(
        account_index=account.index,
        path=account.path,
        public_key=account.public_key,
        address=account.address,
    )
