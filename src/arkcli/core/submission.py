"""
Submission and confirmation of signed transactions.

The node of record's synchronous answer is authoritative:

- anything other than ``success: true`` is a rejection
- ``success: true`` without a transaction id is a protocol inconsistency
- only after acceptance is the transaction broadcast to peers, and
  broadcast failures are logged and ignored
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from arkcli.core.exceptions import (
    NetworkError,
    ProtocolInconsistency,
    SigningError,
    SubmissionRejected,
)

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from arkcli.core.network import NetworkContext
    from arkcli.core.transaction import VoteTransaction

logger = logging.getLogger(__name__)

DEFAULT_REJECTION = "Failed to post transaction to the network."


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submission.

    Attributes:
        accepted: Whether the node of record accepted the transaction
        transaction_id: First id assigned by the node (present when accepted)
        error: Node-provided rejection reason
        broadcast_peers: Peers that took the follow-up broadcast
    """

    accepted: bool
    transaction_id: Optional[str] = None
    error: Optional[str] = None
    broadcast_peers: int = 0


def submit(context: "NetworkContext", tx: "VoteTransaction") -> SubmissionResult:
    """
    Post a signed transaction and confirm acceptance.

    Raises:
        SigningError: If the transaction is not signed
        NetworkError: If the node cannot be reached
        SubmissionRejected: If the node rejects the transaction
        ProtocolInconsistency: If the node accepts without returning an id
    """
    if not tx.is_signed:
        raise SigningError("Refusing to submit an unsigned transaction.")

    data = context.post_transaction(tx)

    if data.get("success") is not True:
        error = data.get("error") or DEFAULT_REJECTION
        logger.warning(
            "Transaction rejected by node: %s",
            error,
            extra={"event": "submission.rejected", "txid": tx.id},
        )
        raise SubmissionRejected(str(error), details={"txid": tx.id})

    transaction_ids = data.get("transactionIds") or []
    first = transaction_ids[0] if isinstance(transaction_ids, list) and transaction_ids else None
    if not isinstance(first, str) or not first.strip():
        raise ProtocolInconsistency(
            "Did not receive a transactionId, check status in wallet.",
            details={"txid": tx.id},
        )

    transaction_id = first.strip()
    if transaction_id != tx.id:
        logger.warning(
            "Node assigned id %s differs from locally computed id %s",
            transaction_id,
            tx.id,
            extra={"event": "submission.id_mismatch"},
        )

    peers = 0
    try:
        peers = context.broadcast(tx)
    except NetworkError as exc:
        logger.warning(
            "Broadcast after acceptance failed: %s",
            exc,
            extra={"event": "submission.broadcast_failed", "txid": transaction_id},
        )

    logger.info(
        "Transaction accepted",
        extra={"event": "submission.accepted", "txid": transaction_id, "peers": peers},
    )
    return SubmissionResult(accepted=True, transaction_id=transaction_id, broadcast_peers=peers)
