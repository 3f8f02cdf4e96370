"""
arkcli Network Configuration

Static registry of supported network profiles plus environment-driven
runtime settings.

Environment:
- ARKCLI_NETWORK: default network name (mainnet)
- ARKCLI_NODE_TIMEOUT: node request timeout in seconds (10)
- ARKCLI_DEVICE_TIMEOUT: hardware device round-trip timeout in seconds (60)
- ARKCLI_LEDGER_ACCOUNTS: number of Ledger accounts to enumerate (10)
- ARKCLI_LOG_LEVEL: log level for verbose runs (INFO)
- ARKCLI_LOG_JSON: emit JSON log lines when verbose (false)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone

from arkcli.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_NETWORK = os.getenv("ARKCLI_NETWORK", "mainnet")
NODE_TIMEOUT = float(os.getenv("ARKCLI_NODE_TIMEOUT", "10"))
DEVICE_TIMEOUT = float(os.getenv("ARKCLI_DEVICE_TIMEOUT", "60"))
LEDGER_ACCOUNT_LIMIT = int(os.getenv("ARKCLI_LEDGER_ACCOUNTS", "10"))
LOG_LEVEL = os.getenv("ARKCLI_LOG_LEVEL", "INFO")
LOG_JSON = _env_flag("ARKCLI_LOG_JSON")

# Protocol constants
ARK_EPOCH = datetime(2017, 3, 21, 13, 0, 0, tzinfo=timezone.utc)
VOTE_FEE = 100_000_000  # 1 ARK in arktoshi
TRANSACTION_TYPE_VOTE = 3
CLIENT_VERSION = "1.0.1"


@dataclass(frozen=True)
class NetworkProfile:
    """Parameters identifying a target chain.

    Attributes:
        name: Symbolic network name (mainnet, devnet)
        version: Address-version byte used for base58check addresses
        wif: WIF prefix byte for exported private keys
        slip44: SLIP-44 coin type for hardware derivation paths
        nethash: Network hash sent with every peer request
        seed_peers: Bootstrap peers as host:port strings
        api_port: Default public API port
        token: Ticker used in output
        explorer: Block explorer base URL
    """

    name: str
    version: int
    wif: int
    slip44: int
    nethash: str
    seed_peers: tuple[str, ...] = field(default_factory=tuple)
    api_port: int = 4001
    token: str = "ARK"
    explorer: str = ""


NETWORKS: dict[str, NetworkProfile] = {
    "mainnet": NetworkProfile(
        name="mainnet",
        version=0x17,
        wif=0xAA,
        slip44=111,
        nethash="6e84d08bd299ed97c212c886c98a57e36545c8f5d645ca7eeae63a8bd62d8988",
        seed_peers=(
            "5.39.9.240:4001",
            "5.39.9.241:4001",
            "5.39.9.242:4001",
            "5.39.9.243:4001",
            "5.39.9.244:4001",
        ),
        api_port=4001,
        token="ARK",
        explorer="https://explorer.ark.io",
    ),
    "devnet": NetworkProfile(
        name="devnet",
        version=0x1E,
        wif=0xAA,
        slip44=1,
        nethash="578e820911f24e039733b45e4882b73e301f813a0d2c31330dafda84534ffa23",
        seed_peers=(
            "167.114.29.51:4002",
            "167.114.29.52:4002",
            "167.114.29.53:4002",
            "167.114.29.54:4002",
            "167.114.29.55:4002",
        ),
        api_port=4002,
        token="DARK",
        explorer="https://dexplorer.ark.io",
    ),
}


def resolve_network(name: str | None) -> NetworkProfile:
    """Look up a registered network profile.

    Args:
        name: Network name; None selects ARKCLI_NETWORK

    Returns:
        The registered NetworkProfile

    Raises:
        ConfigurationError: If the name is not registered
    """
    key = (name or DEFAULT_NETWORK).strip().lower()
    profile = NETWORKS.get(key)
    if profile is None:
        raise ConfigurationError(
            f"Unknown network: {name}",
            details={"known": sorted(NETWORKS)},
        )
    logger.debug("Resolved network profile", extra={"event": "config.network", "network": key})
    return profile


def network_names() -> list[str]:
    return sorted(NETWORKS)
