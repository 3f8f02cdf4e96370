"""Current-vote lookup for an address."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from arkcli.core.exceptions import NetworkError, NoActiveVote, ProtocolInconsistency

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from arkcli.core.network import NetworkContext

logger = logging.getLogger(__name__)

DELEGATES_ENDPOINT = "/api/accounts/delegates"


@dataclass(frozen=True)
class Delegate:
    public_key: str
    username: str
    address: Optional[str] = None


def fetch_current_vote(context: "NetworkContext", address: str) -> Delegate:
    """
    Return the delegate ``address`` currently votes for.

    Always queried fresh from the node.

    Raises:
        NoActiveVote: If the address is unknown or has not voted
        ProtocolInconsistency: If the node returns a malformed delegate
        NetworkError: If the node reports any other failure
    """
    data = context.get(DELEGATES_ENDPOINT, params={"address": address})

    if data.get("success") is False:
        error = str(data.get("error") or "")
        if "not found" in error.lower():
            raise NoActiveVote(f"Address {address} has no active vote.", details={"address": address})
        raise NetworkError(f"Delegate lookup failed: {error or 'unknown error'}")

    delegates = data.get("delegates") or []
    if not isinstance(delegates, list):
        raise ProtocolInconsistency("Node returned a malformed delegate list.")
    if not delegates:
        raise NoActiveVote(f"Address {address} has no active vote.", details={"address": address})

    entry = delegates[0]
    if not isinstance(entry, dict) or not entry.get("publicKey"):
        raise ProtocolInconsistency("Node returned a delegate without a public key.")

    delegate = Delegate(
        public_key=entry["publicKey"],
        username=entry.get("username") or entry["publicKey"],
        address=entry.get("address"),
    )
    logger.debug(
        "Current vote resolved",
        extra={"event": "delegates.current_vote", "address": address, "delegate": delegate.username},
    )
    return delegate
