"""
arkcli Core Module

Transaction lifecycle for delegate vote removal:
- Network profiles and node connectivity
- Signing identities (passphrase or hardware device)
- Vote transaction construction and serialization
- Signing state machine and node submission
"""

__all__ = []
