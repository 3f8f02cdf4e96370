"""
Network context: the resolved network profile plus a connection to a node.

A context is created from a registered NetworkProfile and then connected
with ``target_node``:

- With an explicit node, the node's ``/api/loader/autoconfigure`` answer
  overwrites the static profile (the node is authoritative).
- Without one, a seed peer is chosen and asked for its peer list, which is
  kept for best-effort broadcasting.

Every later step (identity derivation, signing, submission) must read the
version byte from ``context.profile`` after ``target_node`` returns.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from arkcli.core.config import CLIENT_VERSION, NODE_TIMEOUT, NetworkProfile
from arkcli.core.exceptions import NetworkError, ProtocolInconsistency
from arkcli.core.logging_config import LogSink, NullSink
from arkcli.core.transaction import VoteTransaction

AUTOCONFIGURE_ENDPOINT = "/api/loader/autoconfigure"
PEERS_ENDPOINT = "/api/peers"
TRANSACTIONS_ENDPOINT = "/peer/transactions"
MAX_BROADCAST_PEERS = 10


def _normalize_server(node: str) -> str:
    """Accept ``host:port`` or a full URL and return a base URL."""
    candidate = node.strip()
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    parsed = urlparse(candidate)
    if not parsed.hostname:
        raise NetworkError(f"Invalid node address: {node}")
    return candidate.rstrip("/")


class NetworkContext:
    """Connection to a node of a resolved network."""

    def __init__(
        self,
        profile: NetworkProfile,
        sink: Optional[LogSink] = None,
        timeout: float = NODE_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.profile = profile
        self.sink: LogSink = sink or NullSink()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.server: Optional[str] = None
        self.peers: List[str] = []

    # ==================== HTTP ====================

    def _headers(self) -> Dict[str, str]:
        port = urlparse(self.server).port if self.server else None
        return {
            "nethash": self.profile.nethash,
            "version": CLIENT_VERSION,
            "port": str(port or self.profile.api_port),
            "Content-Type": "application/json",
        }

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        self.sink.debug("Node request: %s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.timeout,
                headers=self._headers(),
                **kwargs,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as exc:
            self.sink.error("Node request timed out: %s", url)
            raise NetworkError(f"Request to {url} timed out", details={"url": url}) from exc
        except requests.exceptions.RequestException as exc:
            self.sink.error("Node communication error: %s", exc)
            raise NetworkError(f"Node communication error: {exc}", details={"url": url}) from exc
        except ValueError as exc:
            raise NetworkError(f"Invalid JSON response from {url}", details={"url": url}) from exc
        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected response from {url}", details={"url": url})
        self.sink.debug("Node response: status=%d", response.status_code)
        return data

    def _require_server(self) -> str:
        if not self.server:
            raise NetworkError("Not connected to a node. Call target_node() first.")
        return self.server

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET an endpoint on the connected node."""
        return self._request("GET", f"{self._require_server()}{endpoint}", params=params)

    # ==================== Connection ====================

    def set_server(self, node: str) -> None:
        self.server = _normalize_server(node)
        self.sink.info("Using node %s", self.server)

    def target_node(self, node: Optional[str] = None) -> "NetworkContext":
        """
        Connect to the network.

        Args:
            node: Explicit node (host:port or URL). When given, the node's
                autoconfiguration overwrites the static network parameters.

        Returns:
            self, connected

        Raises:
            NetworkError: If no node could be reached
            ProtocolInconsistency: If autoconfiguration is malformed
        """
        if node:
            self.set_server(node)
            self.autoconfigure()
        else:
            self.discover_peers()
        return self

    def autoconfigure(self) -> NetworkProfile:
        """Overwrite the profile with the parameters reported by the node."""
        data = self.get(AUTOCONFIGURE_ENDPOINT)
        network = data.get("network")
        if not data.get("success", True) or not isinstance(network, dict):
            raise ProtocolInconsistency(
                "Node autoconfiguration response did not contain network parameters.",
                details={"server": self.server},
            )
        overrides: Dict[str, Any] = {}
        if "version" in network:
            try:
                overrides["version"] = int(network["version"])
            except (TypeError, ValueError) as exc:
                raise ProtocolInconsistency(
                    f"Node reported an invalid address version: {network['version']!r}"
                ) from exc
        for key in ("nethash", "token", "explorer"):
            if network.get(key):
                overrides[key] = str(network[key])
        self.profile = replace(self.profile, **overrides)
        self.sink.info(
            "Autoconfigured network from %s (version=%s)", self.server, self.profile.version
        )
        return self.profile

    def discover_peers(self) -> str:
        """Connect through a seed peer and record healthy peers."""
        seeds = list(self.profile.seed_peers)
        if not seeds:
            raise NetworkError(f"No seed peers configured for {self.profile.name}")
        random.shuffle(seeds)
        last_error: Optional[NetworkError] = None
        for seed in seeds:
            self.set_server(seed)
            try:
                data = self.get(PEERS_ENDPOINT)
            except NetworkError as exc:
                self.sink.warning("Seed peer %s unreachable: %s", seed, exc)
                last_error = exc
                continue
            self.peers = [
                f"{peer['ip']}:{peer['port']}"
                for peer in data.get("peers", [])
                if isinstance(peer, dict) and peer.get("status") == "OK" and peer.get("ip")
            ]
            self.sink.info("Connected to %s with %d healthy peers", self.server, len(self.peers))
            return self.server or seed
        self.server = None
        raise NetworkError(
            f"Unable to connect to any {self.profile.name} seed peer",
            details={"last_error": str(last_error) if last_error else None},
        )

    # ==================== Transactions ====================

    def post_transaction(self, tx: VoteTransaction) -> Dict[str, Any]:
        """POST a signed transaction to the connected node."""
        return self._request(
            "POST",
            f"{self._require_server()}{TRANSACTIONS_ENDPOINT}",
            json={"transactions": [tx.to_dict()]},
        )

    def broadcast(self, tx: VoteTransaction) -> int:
        """
        Send the transaction to known peers other than the server.

        Returns:
            Number of peers that accepted the request

        Raises:
            NetworkError: If every peer failed
        """
        targets = [p for p in self.peers if _normalize_server(p) != self.server][:MAX_BROADCAST_PEERS]
        delivered = 0
        for peer in targets:
            try:
                self._request(
                    "POST",
                    f"{_normalize_server(peer)}{TRANSACTIONS_ENDPOINT}",
                    json={"transactions": [tx.to_dict()]},
                )
                delivered += 1
            except NetworkError as exc:
                self.sink.debug("Broadcast to %s failed: %s", peer, exc)
        if targets and not delivered:
            raise NetworkError("Broadcast failed on every peer", details={"peers": len(targets)})
        return delivered
