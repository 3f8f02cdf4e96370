"""
Ledger hardware device integration for arkcli.

Talks to the ARK Ledger app over HID using raw APDUs. Private keys stay on
the device; only public keys and DER signatures come back.

Dependencies:
- ledgerblue (for HID/APDU)
"""

from __future__ import annotations

from dataclasses import dataclass, field

try:
    from ledgerblue.comm import getDongle
    from ledgerblue.commException import CommException
except ImportError as exc:  # pragma: no cover - optional dependency
    raise ImportError("ledgerblue is required for Ledger support. pip install ledgerblue") from exc

from arkcli.core.config import DEVICE_TIMEOUT
from arkcli.core.crypto_utils import address_from_public_key, compress_public_key
from arkcli.core.exceptions import DeviceSigningError, DeviceUnavailable
from arkcli.core.hardware_wallet import DeviceAccount, bip44_path, parse_bip32_path
from arkcli.core.logging_config import LogSink, NullSink

CLA = 0xE0
INS_GET_PUBLIC_KEY = 0x02
INS_SIGN = 0x04
P1_NON_CONFIRM = 0x00
P1_SINGLE = 0x80
P1_FIRST = 0x00
P1_MORE = 0x01
P1_LAST = 0x81
P2_ECDSA = 0x40
CHUNK_SIZE = 255

SW_USER_REJECTED = 0x6985


def _apdu(ins: int, p1: int, p2: int, data: bytes) -> bytes:
    return bytes([CLA, ins, p1, p2, len(data)]) + data


@dataclass
class LedgerDevice:
    sink: LogSink = field(default_factory=NullSink)
    timeout: float = DEVICE_TIMEOUT
    probe_coin_type: int = 111
    _dongle: object | None = None

    def connect(self) -> object:
        if self._dongle is None:
            try:
                self._dongle = getDongle(False)
            except (CommException, OSError) as exc:
                raise DeviceUnavailable(f"Ledger not found: {exc}") from exc
            self.sink.info("Ledger connected")
        return self._dongle

    def _exchange(self, apdu: bytes) -> bytes:
        dongle = self.connect()
        return bytes(dongle.exchange(apdu, timeout=int(self.timeout * 1000)))

    def is_supported(self) -> bool:
        """Probe for a connected Ledger with the ARK app open."""
        try:
            self.get_public_key(bip44_path(self.probe_coin_type, 0))
        except (DeviceUnavailable, CommException, OSError, ValueError, IndexError) as exc:
            self.sink.warning("Ledger unavailable: %s", exc)
            return False
        return True

    def get_public_key(self, path: str) -> str:
        response = self._exchange(
            _apdu(INS_GET_PUBLIC_KEY, P1_NON_CONFIRM, P2_ECDSA, parse_bip32_path(path))
        )
        length = response[0]
        return compress_public_key(response[1 : 1 + length])

    def list_accounts(self, coin_type: int, version: int, limit: int) -> list[DeviceAccount]:
        accounts = []
        for index in range(limit):
            path = bip44_path(coin_type, index)
            try:
                public_key = self.get_public_key(path)
            except (CommException, OSError, ValueError, IndexError) as exc:
                raise DeviceUnavailable(f"Unable to read account {index} from Ledger: {exc}") from exc
            accounts.append(
                DeviceAccount(
                    index=index,
                    path=path,
                    public_key=public_key,
                    address=address_from_public_key(public_key, version),
                )
            )
        self.sink.info("Retrieved %d accounts from Ledger", len(accounts))
        return accounts

    def sign(self, path: str, payload: bytes) -> str:
        data = parse_bip32_path(path) + payload
        chunks = [data[i : i + CHUNK_SIZE] for i in range(0, len(data), CHUNK_SIZE)]
        response = b""
        try:
            for position, chunk in enumerate(chunks):
                if len(chunks) == 1:
                    p1 = P1_SINGLE
                elif position == 0:
                    p1 = P1_FIRST
                elif position == len(chunks) - 1:
                    p1 = P1_LAST
                else:
                    p1 = P1_MORE
                response = self._exchange(_apdu(INS_SIGN, p1, P2_ECDSA, chunk))
        except CommException as exc:
            if getattr(exc, "sw", None) == SW_USER_REJECTED:
                self.sink.error("Transaction rejected on Ledger")
                raise DeviceSigningError("Transaction rejected on device", details={"path": path}) from exc
            self.sink.error("Ledger signing failed: %s", exc)
            raise DeviceSigningError(f"Ledger signing failed: {exc}", details={"path": path}) from exc
        except (OSError, DeviceUnavailable) as exc:
            raise DeviceSigningError(f"Ledger disconnected during signing: {exc}") from exc
        if not response:
            raise DeviceSigningError("Ledger returned an empty signature")
        return response.hex()
