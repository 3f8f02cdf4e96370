"""
arkcli - Command-line wallet for ARK-style DPoS networks

Main Components:
- Core: network context, identity resolution, vote transactions, signing
  and submission to a node
- Hardware: Ledger device integration for on-device signing
- CLI: click commands with rich prompts and output

The unvote pipeline (arkcli.core.pipeline) is the entry point for removing
a delegate vote with either a passphrase or a Ledger account.
"""

__version__ = "0.1.0"
__author__ = "arkcli contributors"

__all__ = []
