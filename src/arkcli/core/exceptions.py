"""
Exception hierarchy for the arkcli transaction pipeline.

Every failure the pipeline can reach is a typed subclass of ArkCliError so
the CLI can render a single user-facing message and exit non-zero, while
tests can assert on the precise failure category.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ArkCliError(Exception):
    """Base exception for all arkcli errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error (never secret material)
        recoverable: Whether re-invoking the command may succeed
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Configuration & Input ====================


class ConfigurationError(ArkCliError):
    """Raised when a network name is not registered.

    Always raised before any node or device I/O takes place.
    """
    pass


class ValidationError(ArkCliError):
    """Raised for malformed operator input (passphrase, secret, account index)."""
    pass


# ==================== Device Errors ====================


class DeviceUnavailable(ArkCliError):
    """Raised when the hardware device is absent or incompatible."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details, recoverable=True)


DeviceUnsupported = DeviceUnavailable


class DeviceSigningError(ArkCliError):
    """Raised when the device rejects, times out, or disconnects during signing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details, recoverable=True)


# ==================== Signing ====================


class SigningError(ArkCliError):
    """Raised when a local signature cannot be produced or the signer is misused."""
    pass


# ==================== Chain State ====================


class NoActiveVote(ArkCliError):
    """Raised when the address has no current vote to remove."""
    pass


# ==================== Network Errors ====================


class NetworkError(ArkCliError):
    """Raised when the node is unreachable, times out, or answers garbage.

    The pipeline never retries automatically; the operator re-invokes.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details, recoverable=True)


class SubmissionRejected(ArkCliError):
    """Raised when the node explicitly refuses a transaction."""
    pass


class ProtocolInconsistency(ArkCliError):
    """Raised when a node response violates the accept/id contract.

    Indicates a node/client mismatch rather than an operator mistake.
    """
    pass


# ==================== Operator Decisions ====================


class UserCancelled(ArkCliError):
    """Terminal non-success outcome: the operator declined to proceed."""
    pass
