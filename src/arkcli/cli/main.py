"""
Main CLI entry point for arkcli.

Usage:
    arkcli [--network NAME] [--format json|table] [--verbose] wallet unvote ...
    arkcli wallet create
"""

from __future__ import annotations

import logging
import sys

import click

from arkcli import __version__
from arkcli.cli.output import OUTPUT_FORMATS, console, show_error
from arkcli.cli.wallet_commands import wallet
from arkcli.core.config import DEFAULT_NETWORK, LOG_JSON, LOG_LEVEL, network_names
from arkcli.core.exceptions import ArkCliError
from arkcli.core.logging_config import setup_logging

# Configure module logger
logger = logging.getLogger(__name__)


def _cli_fail(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging."""
    logger.error("CLI error: %s", exc, exc_info=True)
    show_error(str(exc))
    sys.exit(exit_code)


@click.group()
@click.version_option(__version__, prog_name="arkcli")
@click.option(
    "--network",
    default=DEFAULT_NETWORK,
    show_default=True,
    help=f"Network profile ({', '.join(network_names())})",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="json",
    show_default=True,
    help="Result output format",
)
@click.option("--verbose", is_flag=True, help="Log network and device activity to stderr")
@click.pass_context
def cli(ctx: click.Context, network: str, output_format: str, verbose: bool):
    """
    arkcli - command line wallet for ARK networks.

    Removes delegate votes with a passphrase or a Ledger hardware wallet.
    """
    ctx.ensure_object(dict)
    setup_logging(level=LOG_LEVEL if verbose else "CRITICAL", json_format=LOG_JSON)
    ctx.obj["network"] = network
    ctx.obj["output_format"] = output_format
    ctx.obj["verbose"] = verbose
    logger.debug("CLI invoked", extra={"event": "cli.start", "network": network})


cli.add_command(wallet)


def main():
    """Main CLI entry point"""
    try:
        cli.main(obj={}, standalone_mode=False)
    except (KeyboardInterrupt, click.exceptions.Abort):
        console.print("\n[yellow]Operation cancelled by user[/]")
        sys.exit(130)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)
    except ArkCliError as exc:
        _cli_fail(exc)


if __name__ == "__main__":
    main()
