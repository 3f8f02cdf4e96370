"""
Unvote pipeline.

Runs the steps strictly in order, each one a blocking suspension point:

    1. resolve the network profile (no I/O, unknown names fail here)
    2. gather and validate secrets, or check the hardware device
    3. connect to a node (autoconfigure or peer discovery)
    4. resolve the signing identity with the connected profile
    5. look up the current vote
    6. build the unvote transaction
    7. optional operator confirmation
    8. sign
    9. submit and confirm

Secrets are owned by a single ``run`` call and dropped when it returns or
raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from arkcli.core.config import DEFAULT_NETWORK, DEVICE_TIMEOUT, LEDGER_ACCOUNT_LIMIT, NODE_TIMEOUT, resolve_network
from arkcli.core.delegates import Delegate, fetch_current_vote
from arkcli.core.exceptions import DeviceUnavailable, ValidationError
from arkcli.core.hardware_wallet import DeviceAccount, HardwareDevice, get_hardware_device
from arkcli.core.identity import (
    SigningIdentity,
    resolve_device_identity,
    resolve_passphrase_identity,
)
from arkcli.core.logging_config import LogSink, make_log_sink
from arkcli.core.network import NetworkContext
from arkcli.core.signer import SigningSession, signer_for
from arkcli.core.submission import submit
from arkcli.core.transaction import VoteTransaction, build_unvote

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    """Operator input used by the pipeline. Secret answers must not be echoed."""

    def ask_passphrase(self) -> str:
        ...

    def ask_second_secret(self) -> str:
        ...

    def select_account(self, accounts: Sequence[DeviceAccount]) -> int:
        ...

    def confirm(self, message: str) -> bool:
        ...


@dataclass
class UnvoteOptions:
    """Inputs for one unvote run.

    Attributes:
        network: Registered network name
        node: Explicit node to target and autoconfigure from
        passphrase: Passphrase; None prompts for it (ignored with use_device)
        second_secret: Second passphrase; None means none unless prompted
        prompt_second_secret: Ask the operator for the second passphrase
        use_device: Sign with a hardware device account
        device_provider: Hardware provider name (ledger, mock)
        interactive: Ask for confirmation before signing
        verbose: Route component logs to the logger instead of dropping them
    """

    network: str = DEFAULT_NETWORK
    node: Optional[str] = None
    passphrase: Optional[str] = None
    second_secret: Optional[str] = None
    prompt_second_secret: bool = False
    use_device: bool = False
    device_provider: Optional[str] = None
    interactive: bool = False
    verbose: bool = False
    account_limit: int = LEDGER_ACCOUNT_LIMIT
    node_timeout: float = NODE_TIMEOUT
    device_timeout: float = DEVICE_TIMEOUT


@dataclass(frozen=True)
class UnvoteResult:
    delegate: str
    transaction_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"delegate": self.delegate, "transactionId": self.transaction_id}


ContextFactory = Callable[..., NetworkContext]
DeviceFactory = Callable[..., HardwareDevice]


def confirmation_message(delegate: Delegate, network: str) -> str:
    return (
        f"Removing vote for {delegate.username} ({delegate.public_key}) on {network} now. "
        "Are you sure? Y(es)/N(o)"
    )


class UnvotePipeline:
    """
    Orchestrates one vote removal.

    Args:
        prompter: Operator prompt implementation
        context_factory: Builds the NetworkContext (injectable for tests)
        device_factory: Builds the hardware device (injectable for tests)
        on_error: Receives component error messages on quiet runs
    """

    def __init__(
        self,
        prompter: Prompter,
        context_factory: ContextFactory = NetworkContext,
        device_factory: DeviceFactory = get_hardware_device,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.prompter = prompter
        self.context_factory = context_factory
        self.device_factory = device_factory
        self.on_error = on_error

    def _sink(self, verbose: bool, name: str) -> LogSink:
        return make_log_sink(verbose, name, on_error=self.on_error)

    def _gather_secrets(self, options: UnvoteOptions) -> tuple[Optional[str], Optional[str]]:
        passphrase = options.passphrase
        if passphrase is None:
            passphrase = self.prompter.ask_passphrase()
        second_secret = options.second_secret
        if second_secret is None and options.prompt_second_secret:
            second_secret = self.prompter.ask_second_secret()
        if not isinstance(passphrase, str) or not passphrase:
            raise ValidationError("The passphrase must be a string.")
        if second_secret is not None and not isinstance(second_secret, str):
            raise ValidationError("The second passphrase must be a string.")
        return passphrase, second_secret

    def run(self, options: UnvoteOptions) -> UnvoteResult:
        """
        Execute the unvote.

        Secrets gathered or derived here are released when the call returns;
        secrets passed in ``options`` stay owned by the caller.

        Raises:
            ArkCliError: Any failure category from arkcli.core.exceptions;
                UserCancelled when the operator declines confirmation
        """
        profile = resolve_network(options.network)

        if options.use_device and (options.passphrase is not None or options.second_secret is not None):
            raise ValidationError("Use either a passphrase or a hardware device, not both.")

        passphrase: Optional[str] = None
        second_secret: Optional[str] = None
        device: Optional[HardwareDevice] = None
        identity: Optional[SigningIdentity] = None
        session: Optional[SigningSession] = None
        try:
            if options.use_device:
                device = self.device_factory(
                    options.device_provider,
                    sink=self._sink(options.verbose, "arkcli.device"),
                    timeout=options.device_timeout,
                    coin_type=profile.slip44,
                )
                if not device.is_supported():
                    raise DeviceUnavailable("Hardware device is not connected or not supported.")
            else:
                passphrase, second_secret = self._gather_secrets(options)

            context = self.context_factory(
                profile,
                sink=self._sink(options.verbose, "arkcli.network"),
                timeout=options.node_timeout,
            )
            context.target_node(options.node)

            if device is not None:
                identity = resolve_device_identity(
                    device,
                    context.profile,
                    self.prompter.select_account,
                    limit=options.account_limit,
                )
            else:
                identity = resolve_passphrase_identity(passphrase, context.profile, second_secret)

            delegate = fetch_current_vote(context, identity.address)
            tx: VoteTransaction = build_unvote(identity, delegate)

            session = SigningSession(
                signer_for(identity, device, context.profile.slip44),
                interactive=options.interactive,
            )
            if options.interactive:
                message = confirmation_message(delegate, context.profile.name)
                session.request_confirmation(lambda: self.prompter.confirm(message))

            signed = session.sign(tx)
            result = submit(context, signed)
            logger.info(
                "Unvote submitted",
                extra={"event": "pipeline.unvote", "delegate": delegate.username, "txid": result.transaction_id},
            )
            return UnvoteResult(delegate=delegate.username, transaction_id=str(result.transaction_id))
        finally:
            # Drop secret material with the invocation
            passphrase = second_secret = None
            identity = session = None
