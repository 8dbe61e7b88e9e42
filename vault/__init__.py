"""
Vault Module
============
VaultSession: key pair, ledger and proofs behind one async interface.
"""

from .session import VaultSession

__all__ = ["VaultSession"]
