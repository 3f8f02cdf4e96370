#!/usr/bin/env python3
"""
arkcli Wallet Commands

Provides CLI interface for wallet operations:
- Remove the current delegate vote (passphrase or Ledger signing)
- Create a new wallet from a BIP-39 mnemonic
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click
from mnemonic import Mnemonic

from arkcli.cli.output import error_console, show_error, show_output
from arkcli.cli.prompts import RichPrompter
from arkcli.core.config import DEFAULT_NETWORK, resolve_network
from arkcli.core.crypto_utils import address_from_public_key, public_key_from_passphrase, wif_from_passphrase
from arkcli.core.exceptions import ArkCliError, UserCancelled
from arkcli.core.hardware_wallet import get_hardware_device
from arkcli.core.network import NetworkContext
from arkcli.core.pipeline import UnvoteOptions, UnvotePipeline

logger = logging.getLogger(__name__)

MNEMONIC_STRENGTH = 128  # 12 words


def _handle_cli_error(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging/exit codes."""
    logger.error("CLI error: %s", exc, exc_info=True)
    show_error(str(exc))
    sys.exit(exit_code)


def _build_pipeline(ctx: click.Context) -> UnvotePipeline:
    obj = ctx.obj or {}
    return UnvotePipeline(
        prompter=obj.get("prompter") or RichPrompter(console=error_console),
        context_factory=obj.get("context_factory", NetworkContext),
        device_factory=obj.get("device_factory", get_hardware_device),
        on_error=show_error,
    )


@click.group()
def wallet():
    """Wallet commands: vote removal and wallet creation."""
    pass


@wallet.command("unvote")
@click.option("--node", help="Node to target (host:port or URL); discovers peers when omitted")
@click.option("--passphrase", help="Account passphrase (prompted with hidden input when omitted)")
@click.option("--second-passphrase", help="Second passphrase for accounts with a second signature")
@click.option(
    "--ask-second-passphrase",
    is_flag=True,
    help="Prompt for the second passphrase with hidden input",
)
@click.option("--ledger", is_flag=True, help="Sign with a Ledger hardware wallet account")
@click.option(
    "--device-provider",
    type=click.Choice(["ledger", "mock"]),
    default=None,
    help="Hardware device provider (mock is for test environments only)",
)
@click.option("--interactive", is_flag=True, help="Confirm before signing and submitting")
@click.pass_context
def unvote(
    ctx: click.Context,
    node: Optional[str],
    passphrase: Optional[str],
    second_passphrase: Optional[str],
    ask_second_passphrase: bool,
    ledger: bool,
    device_provider: Optional[str],
    interactive: bool,
):
    """Remove the vote currently cast by the account."""
    obj = ctx.obj or {}
    options = UnvoteOptions(
        network=obj.get("network", DEFAULT_NETWORK),
        node=node,
        passphrase=passphrase,
        second_secret=second_passphrase,
        prompt_second_secret=ask_second_passphrase,
        use_device=ledger or device_provider is not None,
        device_provider=device_provider,
        interactive=interactive,
        verbose=obj.get("verbose", False),
    )

    try:
        result = _build_pipeline(ctx).run(options)
    except UserCancelled as exc:
        error_console.print(f"[yellow]{exc}[/]")
        sys.exit(1)
    except ArkCliError as exc:
        _handle_cli_error(exc)
    else:
        show_output("Vote removed", result.to_dict(), obj.get("output_format", "json"))


@wallet.command("create")
@click.pass_context
def create(ctx: click.Context):
    """Generate a new wallet (12-word mnemonic, WIF and address)."""
    obj = ctx.obj or {}
    try:
        profile = resolve_network(obj.get("network", DEFAULT_NETWORK))
    except ArkCliError as exc:
        _handle_cli_error(exc)
        return

    seed = Mnemonic("english").generate(strength=MNEMONIC_STRENGTH)
    public_key = public_key_from_passphrase(seed)
    payload = {
        "seed": seed,
        "wif": wif_from_passphrase(seed, profile.wif),
        "address": address_from_public_key(public_key, profile.version),
    }
    logger.info("Wallet created", extra={"event": "wallet.create", "network": profile.name})
    show_output(f"New {profile.token} wallet", payload, obj.get("output_format", "json"))


__all__ = ["wallet"]
