"""
Operator prompts backed by rich.

Prompts render on stderr so command results on stdout stay machine
readable. Secret input is hidden and never logged.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from arkcli.core.hardware_wallet import DeviceAccount

logger = logging.getLogger(__name__)


class RichPrompter:
    """Prompter implementation for interactive terminals."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)

    def ask_passphrase(self) -> str:
        logger.debug("Prompting for passphrase")
        return Prompt.ask("[bold]Passphrase[/]", password=True, console=self.console)

    def ask_second_secret(self) -> str:
        logger.debug("Prompting for second passphrase")
        return Prompt.ask("[bold]Second passphrase[/]", password=True, console=self.console)

    def select_account(self, accounts: Sequence[DeviceAccount]) -> int:
        table = Table(title="Ledger accounts", box=box.SIMPLE)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Address", style="green")
        table.add_column("Path", style="dim")
        for position, account in enumerate(accounts):
            table.add_row(str(position), account.address, account.path)
        self.console.print(table)
        choice = IntPrompt.ask(
            "[bold]Select account[/]",
            choices=[str(i) for i in range(len(accounts))],
            default=0,
            console=self.console,
        )
        logger.debug("Operator selected device account %d", choice)
        return choice

    def confirm(self, message: str) -> bool:
        return Confirm.ask(f"[bold yellow]{message}[/]", default=False, console=self.console)
