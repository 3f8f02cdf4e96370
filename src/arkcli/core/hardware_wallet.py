from __future__ import annotations

"""
Hardware device integration for arkcli.

Provides:
- Protocol interface for hardware signing devices
- BIP-44 derivation path helpers
- MockHardwareDevice for testing with real, verifiable signatures
- get_hardware_device factory for provider selection

Supported devices (via separate modules):
- Ledger: hardware_wallet_ledger.py

Security Note:
    MockHardwareDevice is for TESTING ONLY. It derives private keys in
    memory, which defeats the purpose of a hardware device. Never use it
    against a live network.
"""

import hashlib
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from arkcli.core.config import DEVICE_TIMEOUT
from arkcli.core.crypto_utils import (
    address_from_public_key,
    public_key_from_passphrase,
    sign_digest_hex,
)
from arkcli.core.exceptions import DeviceSigningError, DeviceUnavailable
from arkcli.core.logging_config import LoggerSink, LogSink

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from arkcli.core.hardware_wallet_ledger import LedgerDevice  # noqa: F401

logger = logging.getLogger(__name__)

ALLOW_MOCK_HARDWARE_WALLET = os.getenv("ARKCLI_ALLOW_MOCK_HARDWARE_WALLET", "false").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}
DEFAULT_HARDWARE_WALLET_PROVIDER = os.getenv("ARKCLI_HARDWARE_WALLET_PROVIDER", "ledger")

_MOCK_SEED = "ARKCLI_MOCK_HARDWARE_DEVICE_SEED_V1"


def bip44_path(coin_type: int, account_index: int) -> str:
    """Standard derivation path ``44'/<coin_type>'/<account_index>'/0/0``."""
    if account_index < 0:
        raise ValueError("Account index must be non-negative")
    return f"44'/{coin_type}'/{account_index}'/0/0"


def parse_bip32_path(path: str) -> bytes:
    """Serialize a derivation path as <count><u32 BE>... for device APDUs."""
    elements = path[2:].split("/") if path.startswith("m/") else path.split("/")
    result = len(elements).to_bytes(1, "big")
    for elt in elements:
        hardened = elt.endswith("'")
        index = int(elt[:-1] if hardened else elt)
        if index < 0 or index >= 0x80000000:
            raise ValueError("Invalid index in BIP32 path")
        if hardened:
            index |= 0x80000000
        result += index.to_bytes(4, "big")
    return result


@dataclass(frozen=True)
class DeviceAccount:
    """An account derivable on the device."""

    index: int
    path: str
    public_key: str
    address: str


@runtime_checkable
class HardwareDevice(Protocol):
    """
    Protocol interface for hardware signing devices.

    Security Requirements:
    - Private keys MUST never leave the device
    - All signing operations MUST occur on the device
    """

    def is_supported(self) -> bool:
        """Return True when a compatible device and app are reachable."""
        ...

    def list_accounts(self, coin_type: int, version: int, limit: int) -> list[DeviceAccount]:
        """
        Enumerate the first ``limit`` accounts on ``44'/coin_type'/i'/0/0``.

        Args:
            coin_type: SLIP-44 coin type of the network
            version: Address-version byte used to render addresses
            limit: Number of accounts to derive
        """
        ...

    def sign(self, path: str, payload: bytes) -> str:
        """
        Sign the unsigned transaction serialization on the device.

        Returns:
            DER signature as hex

        Raises:
            DeviceSigningError: If the user rejects, the device disconnects,
                or the round-trip times out
        """
        ...


@dataclass
class MockHardwareDevice:
    """
    Mock hardware device for TESTING ONLY.

    Keys are derived deterministically per derivation path, so signatures
    verify against the listed public keys and tests are reproducible.

    Attributes:
        supported: Value returned by is_supported()
        reject: Simulate the user rejecting the transaction on device
        sink: Log sink for device events
        sign_calls: Paths passed to sign(), in call order
    """

    supported: bool = True
    reject: bool = False
    sink: LogSink = field(default_factory=lambda: LoggerSink(logger))
    sign_calls: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sink.warning(
            "MockHardwareDevice initialized - FOR TESTING ONLY",
            extra={"event": "hw_mock.init"},
        )

    def _secret_for(self, path: str) -> str:
        return f"{_MOCK_SEED}/{path}"

    def is_supported(self) -> bool:
        return self.supported

    def public_key_for(self, path: str) -> str:
        return public_key_from_passphrase(self._secret_for(path))

    def list_accounts(self, coin_type: int, version: int, limit: int) -> list[DeviceAccount]:
        if not self.supported:
            raise DeviceUnavailable("Mock device is disconnected")
        accounts = []
        for index in range(limit):
            path = bip44_path(coin_type, index)
            public_key = self.public_key_for(path)
            accounts.append(
                DeviceAccount(
                    index=index,
                    path=path,
                    public_key=public_key,
                    address=address_from_public_key(public_key, version),
                )
            )
        return accounts

    def sign(self, path: str, payload: bytes) -> str:
        self.sign_calls.append(path)
        if self.reject:
            self.sink.error("Mock device rejected transaction")
            raise DeviceSigningError("Transaction rejected on device", details={"path": path})
        digest = hashlib.sha256(payload).digest()
        signature = sign_digest_hex(self._secret_for(path), digest)
        self.sink.debug(
            "Mock hardware device signed transaction",
            extra={"event": "hw_mock.sign", "payload_size": len(payload)},
        )
        return signature


def get_hardware_device(
    provider: Optional[str] = None,
    sink: Optional[LogSink] = None,
    timeout: float = DEVICE_TIMEOUT,
    coin_type: int = 111,
) -> HardwareDevice:
    """
    Instantiate the configured hardware device provider.

    Raises:
        DeviceUnavailable: If the provider is unknown, disabled, or its
            optional dependency is not installed
    """
    name = (provider or DEFAULT_HARDWARE_WALLET_PROVIDER).strip().lower()
    sink = sink or LoggerSink(logger)
    if name == "mock":
        if not ALLOW_MOCK_HARDWARE_WALLET:
            raise DeviceUnavailable(
                "MockHardwareDevice is disabled. "
                "Set ARKCLI_ALLOW_MOCK_HARDWARE_WALLET=1 only in test environments."
            )
        return MockHardwareDevice(sink=sink)
    if name == "ledger":
        try:
            from arkcli.core.hardware_wallet_ledger import LedgerDevice
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise DeviceUnavailable("Ledger support requires ledgerblue. pip install ledgerblue") from exc
        return LedgerDevice(sink=sink, timeout=timeout, probe_coin_type=coin_type)
    raise DeviceUnavailable(f"Unknown hardware device provider: {provider}")
